"""Six-fold replication of a wedge into the full snowflake."""
import logging
import math
from typing import List, Sequence, Tuple

from geometry_primitives import Segment, rotate_point

logger = logging.getLogger(__name__)

FOLDS = 6
AXIS_EPS = 1e-9


def rotate_segments(segments: Sequence[Segment], angle: float) -> List[Segment]:
    """Rotate every segment about the origin by *angle* radians."""
    return [
        Segment(rotate_point(s.start, angle), rotate_point(s.end, angle))
        for s in segments
    ]


def _endpoint_key(seg: Segment, tolerance: float) -> Tuple[Tuple[int, int], Tuple[int, int]]:
    """Order-independent key of a segment's endpoints snapped to *tolerance*."""
    a = (round(seg.start[0] / tolerance), round(seg.start[1] / tolerance))
    b = (round(seg.end[0] / tolerance), round(seg.end[1] / tolerance))
    return (a, b) if a <= b else (b, a)


def mirror_wedge(segments: Sequence[Segment], tolerance: float = AXIS_EPS) -> List[Segment]:
    """Add the reflection of each segment across the X axis.

    A reflection is skipped when a segment with the same endpoints (in
    either order, within *tolerance*) is already present, so axis
    segments and wedges that already carry both sides gain nothing.
    """
    mirrored = list(segments)
    seen = {_endpoint_key(s, tolerance) for s in segments}
    skipped = 0
    for s in segments:
        reflected = Segment((s.start[0], -s.start[1]), (s.end[0], -s.end[1]))
        key = _endpoint_key(reflected, tolerance)
        if key in seen:
            skipped += 1
            continue
        seen.add(key)
        mirrored.append(reflected)
    if skipped:
        logger.debug("Mirror skipped %d coincident reflections", skipped)
    return mirrored


def replicate_wedge(
    wedge: Sequence[Segment],
    mirror: bool = False,
) -> List[Segment]:
    """Full segment list: the wedge rotated by k * 60 degrees for k = 0..5."""
    base = mirror_wedge(wedge) if mirror else list(wedge)
    segments: List[Segment] = []
    for k in range(FOLDS):
        segments.extend(rotate_segments(base, k * math.pi / 3))
    logger.debug("Replicated %d wedge segments into %d", len(base), len(segments))
    return segments
