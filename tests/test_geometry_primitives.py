"""Tests for geometry_primitives module."""
import math

import numpy as np
import pytest

from geometry_primitives import (
    DEFAULT_SIZE_INCHES,
    Segment,
    SnowflakeParams,
    clamp_complexity,
    clamp_size_inches,
    clamp_thickness,
    close_loop,
    distance_to_segments,
    point_segment_distance,
    polygon_area,
    regular_polygon,
    segment_bounds,
    segments_to_array,
)


class TestParams:
    """Clamping of the input tuple."""

    def test_complexity_clamp(self):
        assert clamp_complexity(0) == 1
        assert clamp_complexity(-5) == 1
        assert clamp_complexity(999) == 10
        assert clamp_complexity(6) == 6

    def test_complexity_rounds_half_up(self):
        assert clamp_complexity(2.5) == 3
        assert clamp_complexity(2.49) == 2

    def test_complexity_non_numeric(self):
        assert clamp_complexity("abc") == 5
        assert clamp_complexity(None) == 5
        assert clamp_complexity(float("nan")) == 5

    def test_thickness_clamp(self):
        assert clamp_thickness(1) == 2.0
        assert clamp_thickness(50) == 20.0
        assert clamp_thickness(7.5) == 7.5
        assert clamp_thickness("x") == 10.0

    def test_size_clamp(self):
        assert clamp_size_inches(3) == 3.0
        assert clamp_size_inches(0) == pytest.approx(DEFAULT_SIZE_INCHES)
        assert clamp_size_inches(-2) == pytest.approx(DEFAULT_SIZE_INCHES)

    def test_clamped_is_idempotent(self):
        p = SnowflakeParams(seed="s", complexity=42, thickness=0.1, size_inches=-1)
        once = p.clamped()
        assert once.clamped() == once

    def test_clamped_does_not_mutate(self):
        p = SnowflakeParams(seed="s", complexity=42, thickness=0.1)
        p.clamped()
        assert p.complexity == 42
        assert p.thickness == 0.1

    def test_diameter_mm(self):
        assert SnowflakeParams(size_inches=1).diameter_mm == pytest.approx(25.4)


class TestSegments:
    def test_length_and_midpoint(self):
        seg = Segment((0.0, 0.0), (3.0, 4.0))
        assert seg.length == pytest.approx(5.0)
        assert seg.midpoint == (1.5, 2.0)

    def test_segment_is_immutable(self):
        seg = Segment((0.0, 0.0), (1.0, 0.0))
        with pytest.raises(AttributeError):
            seg.start = (1.0, 1.0)

    def test_bounds_empty(self):
        b = segment_bounds([])
        assert (b.min_x, b.min_y, b.max_x, b.max_y) == (-1.0, -1.0, 1.0, 1.0)

    def test_bounds(self, cross_segments):
        b = segment_bounds(cross_segments)
        assert b.width == pytest.approx(2.0)
        assert b.center == pytest.approx((0.0, 0.0))

    def test_to_array(self, cross_segments):
        arr = segments_to_array(cross_segments)
        assert arr.shape == (2, 4)
        assert segments_to_array([]).shape == (0, 4)


class TestDistances:
    def test_projection_inside(self):
        assert point_segment_distance(0.5, 2.0, 0.0, 0.0, 1.0, 0.0) == pytest.approx(2.0)

    def test_projection_clamped_to_endpoint(self):
        assert point_segment_distance(4.0, 4.0, 0.0, 0.0, 1.0, 0.0) == pytest.approx(5.0)

    def test_degenerate_segment(self):
        assert point_segment_distance(3.0, 4.0, 0.0, 0.0, 0.0, 0.0) == pytest.approx(5.0)

    def test_nearest_segment(self, cross_segments):
        arr = segments_to_array(cross_segments)
        dist, idx = distance_to_segments(np.array([0.5, 0.0]), np.array([0.1, 0.7]), arr)
        assert dist.tolist() == pytest.approx([0.1, 0.0])
        assert idx.tolist() == [0, 1]

    def test_tie_keeps_first(self, cross_segments):
        arr = segments_to_array(cross_segments)
        _, idx = distance_to_segments(np.array([0.3]), np.array([0.3]), arr)
        assert idx.tolist() == [0]


class TestLoops:
    def test_area_sign(self, square_loop):
        assert polygon_area(square_loop) == pytest.approx(16.0)
        assert polygon_area(list(reversed(square_loop))) == pytest.approx(-16.0)

    def test_area_degenerate(self):
        assert polygon_area([(0, 0), (1, 1)]) == 0.0

    def test_regular_polygon(self):
        pts = regular_polygon((1.0, 2.0), 3.0, 24)
        assert len(pts) == 24
        assert pts[0] == pytest.approx((4.0, 2.0))
        assert all(math.hypot(x - 1.0, y - 2.0) == pytest.approx(3.0) for x, y in pts)

    def test_close_loop(self, square_loop):
        closed = close_loop(square_loop, tolerance=0.1)
        assert closed[-1] == closed[0]
        assert len(closed) == 5
        assert close_loop(closed, tolerance=0.1) == closed
