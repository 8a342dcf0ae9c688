"""Tests for skeleton module."""
import math

import pytest

from seeded_rng import SeededRandom
from skeleton import SkeletonConfig, build_wedge


def _wedge(seed=1234, complexity=6, thickness=10.0, config=None):
    return build_wedge(SeededRandom(seed), complexity, thickness, config)


class TestBuildWedge:
    """Spine, rails, branches and tip."""

    def test_produces_segments(self, ada_wedge):
        assert len(ada_wedge) > 0

    def test_deterministic_for_same_seed(self):
        assert _wedge(77) == _wedge(77)

    def test_different_seeds_differ(self):
        assert _wedge(1) != _wedge(2)

    def test_no_segment_below_min_feature(self):
        for complexity in range(1, 11):
            for thickness in (2.0, 10.0, 20.0):
                for seg in _wedge(complexity * 31 + 7, complexity, thickness):
                    assert seg.length >= 0.06 - 1e-12

    def test_spine_starts_at_origin_along_x(self):
        wedge = _wedge(5, complexity=4)
        first = wedge[0]
        assert first.start == (0.0, 0.0)
        assert first.end[1] == 0.0
        assert first.end[0] > 0.0

    def test_spine_node_count(self):
        complexity = 3
        wedge = _wedge(5, complexity=complexity)
        spine = [s for s in wedge[: complexity + 7]]
        assert all(s.start[1] == 0.0 and s.end[1] == 0.0 for s in spine)
        # consecutive spine segments chain end to start
        for a, b in zip(spine, spine[1:]):
            assert a.end == b.start

    def test_spine_length_within_jitter(self):
        levels = 6
        wedge = _wedge(11, complexity=levels)
        spine = wedge[: levels + 7]
        total = sum(s.length for s in spine)
        main_length = 3.0 + levels * 0.42
        assert 0.9 * main_length <= total <= 1.1 * main_length

    def test_rails_are_parallel_to_spine(self):
        levels = 2
        thickness = 20.0
        wedge = _wedge(3, complexity=levels, thickness=thickness)
        n_spine = levels + 7
        rails = wedge[n_spine: n_spine + 2 * n_spine]
        offset = 0.07 + (thickness / 20.0) * 0.06
        ys = sorted({round(abs(s.start[1]), 12) for s in rails})
        assert ys == [pytest.approx(offset)]

    def test_rails_can_be_disabled(self):
        config = SkeletonConfig(reinforce_rails=False)
        with_rails = _wedge(3, complexity=2)
        without = _wedge(3, complexity=2, config=config)
        assert len(with_rails) - len(without) == 2 * (2 + 7)

    def test_branches_are_mirrored(self):
        wedge = _wedge(2024, complexity=8)
        off_axis = [s for s in wedge if abs(s.end[1]) > 1e-9 and abs(s.start[1]) < 1e-9 and s.start[0] > 0]
        for seg in off_axis:
            mirrored = (seg.end[0], -seg.end[1])
            assert any(
                math.isclose(o.end[0], mirrored[0], abs_tol=1e-9)
                and math.isclose(o.end[1], mirrored[1], abs_tol=1e-9)
                for o in off_axis
            )

    def test_wedge_is_symmetric_about_x_axis(self):
        wedge = _wedge(99, complexity=7)
        keys = {
            (round(s.start[0], 9), round(s.start[1], 9), round(s.end[0], 9), round(s.end[1], 9))
            for s in wedge
        }
        for s in wedge:
            mirrored = (
                round(s.start[0], 9), round(-s.start[1], 9) + 0.0,
                round(s.end[0], 9), round(-s.end[1], 9) + 0.0,
            )
            assert mirrored in keys

    def test_tip_segments_last(self):
        levels = 5
        wedge = _wedge(8, complexity=levels)
        tip_len = 0.32 + levels * 0.022
        tips = wedge[-3:]
        assert tips[0].start == tips[1].start == tips[2].start
        assert tips[0].length == pytest.approx(tip_len)
        assert tips[1].length == pytest.approx(tip_len)
        assert tips[2].length == pytest.approx(tip_len * 0.44)

    def test_more_complexity_gives_more_segments_on_average(self):
        low = sum(len(_wedge(s, complexity=1)) for s in range(20))
        high = sum(len(_wedge(s, complexity=10)) for s in range(20))
        assert high > low


class TestClamping:
    """Out-of-range inputs behave like the nearest bound."""

    def test_complexity_zero_matches_one(self):
        assert _wedge(5, complexity=0) == _wedge(5, complexity=1)

    def test_complexity_large_matches_ten(self):
        assert _wedge(5, complexity=999) == _wedge(5, complexity=10)

    def test_thickness_bounds(self):
        assert _wedge(5, thickness=0.5) == _wedge(5, thickness=2)
        assert _wedge(5, thickness=500) == _wedge(5, thickness=20)

    def test_fractional_complexity_rounds(self):
        assert _wedge(5, complexity=5.5) == _wedge(5, complexity=6)
        assert _wedge(5, complexity=5.4) == _wedge(5, complexity=5)
