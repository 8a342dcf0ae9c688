"""Tests for symmetry module."""
import math

import numpy as np
import pytest

from geometry_primitives import Segment, segments_to_array
from symmetry import mirror_wedge, replicate_wedge, rotate_segments


def _max_unmatched_distance(a, b) -> float:
    """Largest distance from a segment in *a* to its best match in *b* (either direction)."""
    arr_a = segments_to_array(a)
    arr_b = segments_to_array(b)
    flipped_b = arr_b[:, [2, 3, 0, 1]]
    worst = 0.0
    for row in arr_a:
        d_same = np.max(np.abs(arr_b - row), axis=1)
        d_flip = np.max(np.abs(flipped_b - row), axis=1)
        worst = max(worst, float(min(d_same.min(), d_flip.min())))
    return worst


class TestReplicateWedge:
    """Six-fold replication."""

    def test_six_copies(self):
        wedge = [Segment((0.0, 0.0), (1.0, 0.0)), Segment((0.5, 0.0), (0.8, 0.3))]
        assert len(replicate_wedge(wedge)) == 12

    def test_first_copy_is_identity(self):
        wedge = [Segment((0.0, 0.0), (1.0, 0.2))]
        full = replicate_wedge(wedge)
        assert full[0] == wedge[0]

    def test_rotation_by_sixty_degrees(self):
        wedge = [Segment((0.0, 0.0), (1.0, 0.0))]
        full = replicate_wedge(wedge)
        assert full[1].end[0] == pytest.approx(0.5)
        assert full[1].end[1] == pytest.approx(math.sqrt(3) / 2)

    def test_invariant_under_sixty_degree_rotation(self, ada_segments):
        rotated = rotate_segments(ada_segments, math.pi / 3)
        assert _max_unmatched_distance(rotated, ada_segments) < 1e-9

    def test_empty_wedge(self):
        assert replicate_wedge([]) == []


class TestMirrorWedge:
    """Reflection across the wedge axis."""

    def test_axis_segments_not_duplicated(self):
        wedge = [Segment((0.0, 0.0), (1.0, 0.0))]
        assert mirror_wedge(wedge) == wedge

    def test_off_axis_segment_reflected(self):
        wedge = [Segment((0.2, 0.0), (0.5, 0.4))]
        mirrored = mirror_wedge(wedge)
        assert len(mirrored) == 2
        assert mirrored[1] == Segment((0.2, -0.0), (0.5, -0.4))

    def test_mirrored_replication_still_six_fold(self):
        wedge = [Segment((0.0, 0.0), (1.0, 0.0)), Segment((0.5, 0.0), (0.9, 0.25))]
        full = replicate_wedge(wedge, mirror=True)
        assert len(full) == 6 * 3
        rotated = rotate_segments(full, math.pi / 3)
        assert _max_unmatched_distance(rotated, full) < 1e-9

    def test_reversed_reflection_not_duplicated(self):
        wedge = [Segment((0.2, 0.3), (0.5, 0.0)), Segment((0.5, 0.0), (0.2, -0.3))]
        assert mirror_wedge(wedge) == wedge

    def test_generated_wedge_gains_no_duplicates(self, ada_wedge):
        mirrored = mirror_wedge(ada_wedge)
        assert mirrored == ada_wedge

    def test_mirrored_generated_flake_has_no_overlaps(self, ada_wedge):
        full = replicate_wedge(ada_wedge, mirror=True)
        keys = set()
        for s in full:
            a = (round(s.start[0], 9) + 0.0, round(s.start[1], 9) + 0.0)
            b = (round(s.end[0], 9) + 0.0, round(s.end[1], 9) + 0.0)
            keys.add((a, b) if a <= b else (b, a))
        assert len(keys) == len(full)
        assert len(full) == 6 * len(ada_wedge)
