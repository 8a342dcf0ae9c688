"""Tests for outline_refine module."""
import pytest

from geometry_primitives import polygon_area, regular_polygon
from outline_refine import chaikin, ensure_ccw, refine_loop, simplify_loop


class TestChaikin:
    def test_doubles_points_per_iteration(self, square_loop):
        assert len(chaikin(square_loop, 1)) == 8
        assert len(chaikin(square_loop, 3)) == 32

    def test_zero_iterations_is_identity(self, square_loop):
        assert chaikin(square_loop, 0) == square_loop

    def test_cut_positions(self, square_loop):
        out = chaikin(square_loop, 1, cut=0.25)
        assert out[0] == pytest.approx((1.0, 0.0))
        assert out[1] == pytest.approx((3.0, 0.0))

    def test_rounds_corners_inside(self, square_loop):
        smoothed = chaikin(square_loop, 2, cut=0.12)
        assert 0 < polygon_area(smoothed) < polygon_area(square_loop)


class TestSimplifyLoop:
    def test_removes_collinear_points(self):
        loop = [(0, 0), (1, 0), (2, 0), (3, 0), (3, 3), (2, 3), (1, 3), (0, 3)]
        out = simplify_loop(loop, min_edge=0.01, collinear_eps=0.01)
        # never drops below six points
        assert len(out) == 6

    def test_stops_at_six_points(self):
        loop = regular_polygon((0.0, 0.0), 1.0, 200)
        out = simplify_loop(loop, min_edge=0.5, collinear_eps=0.0)
        assert len(out) == 6

    def test_short_loop_untouched(self):
        loop = [(0, 0), (1, 0), (1, 1), (0, 1)]
        assert simplify_loop(loop, 10.0, 1.0) == [tuple(p) for p in loop]

    def test_keeps_sharp_corners(self):
        loop = regular_polygon((0.0, 0.0), 10.0, 12)
        out = simplify_loop(loop, min_edge=0.1, collinear_eps=0.012)
        assert len(out) == 12

    def test_removes_near_duplicate(self):
        loop = regular_polygon((0.0, 0.0), 10.0, 12)
        loop.insert(3, (loop[2][0] + 1e-6, loop[2][1]))
        out = simplify_loop(loop, min_edge=0.1, collinear_eps=0.012)
        assert len(out) == 12

    def test_matches_restart_scan(self):
        """Resuming after a removal gives the same loop as rescanning from the start."""
        loop = chaikin(regular_polygon((0.0, 0.0), 5.0, 9), 3, cut=0.12)

        def naive(points, min_edge, eps):
            from outline_refine import _is_removable
            pts = list(points)
            changed = True
            while changed and len(pts) > 6:
                changed = False
                for i in range(len(pts)):
                    if _is_removable(pts[i - 1], pts[i], pts[(i + 1) % len(pts)], min_edge, eps):
                        del pts[i]
                        changed = True
                        break
            return pts

        assert simplify_loop(loop, 0.3, 0.05) == naive(loop, 0.3, 0.05)


class TestOrientation:
    def test_clockwise_reversed(self, square_loop):
        cw = list(reversed(square_loop))
        assert polygon_area(ensure_ccw(cw)) > 0

    def test_ccw_unchanged(self, square_loop):
        assert ensure_ccw(square_loop) == square_loop

    def test_refine_returns_ccw(self, square_loop):
        cw = list(reversed(square_loop))
        out = refine_loop(cw, smoothing_iterations=2, min_edge=0.01)
        assert polygon_area(out) > 0
        assert len(out) >= 8
