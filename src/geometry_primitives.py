"""
Core geometry types for the snowflake pipeline.

Segments live in an abstract local unit space until the mesh is
normalized to millimetres. Collections of segments are plain lists whose
order follows generation order, so the RNG stream stays reproducible.
"""
import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

Point2 = Tuple[float, float]

INCH_TO_MM = 25.4
DEFAULT_DIAMETER_MM = 110.0
DEFAULT_COMPLEXITY = 5
DEFAULT_THICKNESS = 10.0
DEFAULT_SIZE_INCHES = DEFAULT_DIAMETER_MM / INCH_TO_MM

COMPLEXITY_RANGE = (1, 10)
THICKNESS_RANGE = (2.0, 20.0)

EPS = 1e-12


@dataclass(frozen=True)
class Segment:
    """An immutable 2D line segment."""
    start: Point2
    end: Point2

    @property
    def length(self) -> float:
        return math.hypot(self.end[0] - self.start[0], self.end[1] - self.start[1])

    @property
    def midpoint(self) -> Point2:
        return (
            (self.start[0] + self.end[0]) * 0.5,
            (self.start[1] + self.end[1]) * 0.5,
        )


@dataclass(frozen=True)
class Bounds2D:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Point2:
        return ((self.min_x + self.max_x) * 0.5, (self.min_y + self.max_y) * 0.5)


def _to_float(value, default: float) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(result):
        return default
    return result


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def clamp_complexity(value) -> int:
    """Round to the nearest level and clamp into [1, 10]."""
    level = _round_half_up(_to_float(value, DEFAULT_COMPLEXITY))
    return int(clamp(level, *COMPLEXITY_RANGE))


def clamp_thickness(value) -> float:
    """Clamp into [2, 20]; non-numeric input falls back to 10."""
    return float(clamp(_to_float(value, DEFAULT_THICKNESS), *THICKNESS_RANGE))


def clamp_size_inches(value) -> float:
    size = _to_float(value, DEFAULT_SIZE_INCHES)
    if size <= 0.0:
        return DEFAULT_SIZE_INCHES
    return size


@dataclass(frozen=True)
class SnowflakeParams:
    """Input tuple for one pipeline run.

    Values may be out of range; call ``clamped()`` to get the validated
    copy. The caller's instance is never modified.
    """
    seed: str = "snowflake"
    complexity: int = DEFAULT_COMPLEXITY
    thickness: float = DEFAULT_THICKNESS
    size_inches: float = DEFAULT_SIZE_INCHES

    def clamped(self) -> "SnowflakeParams":
        return SnowflakeParams(
            seed="" if self.seed is None else str(self.seed),
            complexity=clamp_complexity(self.complexity),
            thickness=clamp_thickness(self.thickness),
            size_inches=clamp_size_inches(self.size_inches),
        )

    @property
    def diameter_mm(self) -> float:
        return clamp_size_inches(self.size_inches) * INCH_TO_MM


# ─── Segment helpers ─────────────────────────────────────────────────────────

def segments_to_array(segments: Sequence[Segment]) -> np.ndarray:
    """Pack segments into an (n, 4) array of ax, ay, bx, by."""
    if len(segments) == 0:
        return np.zeros((0, 4), dtype=float)
    return np.array(
        [(s.start[0], s.start[1], s.end[0], s.end[1]) for s in segments],
        dtype=float,
    )


def segment_bounds(segments: Sequence[Segment]) -> Bounds2D:
    """Axis-aligned bounds of all endpoints; (-1, -1, 1, 1) when empty."""
    if len(segments) == 0:
        return Bounds2D(-1.0, -1.0, 1.0, 1.0)
    arr = segments_to_array(segments)
    xs = np.concatenate([arr[:, 0], arr[:, 2]])
    ys = np.concatenate([arr[:, 1], arr[:, 3]])
    return Bounds2D(float(xs.min()), float(ys.min()), float(xs.max()), float(ys.max()))


def distance_to_segments(
    px: np.ndarray,
    py: np.ndarray,
    seg_array: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """Distance from each query point to its nearest segment.

    Returns (distances, nearest_index). Ties keep the lowest segment index.
    """
    px = np.asarray(px, dtype=float)
    py = np.asarray(py, dtype=float)
    best = np.full(px.shape, np.inf)
    best_idx = np.zeros(px.shape, dtype=int)
    for i, (ax, ay, bx, by) in enumerate(seg_array):
        d = point_segment_distance(px, py, ax, ay, bx, by)
        closer = d < best
        best = np.where(closer, d, best)
        best_idx = np.where(closer, i, best_idx)
    return best, best_idx


def point_segment_distance(px, py, ax: float, ay: float, bx: float, by: float):
    """Euclidean distance from point(s) to segment AB (vectorised over points)."""
    abx = bx - ax
    aby = by - ay
    ab2 = abx * abx + aby * aby
    if ab2 <= EPS:
        return np.hypot(px - ax, py - ay)
    t = np.clip(((px - ax) * abx + (py - ay) * aby) / ab2, 0.0, 1.0)
    return np.hypot(px - (ax + abx * t), py - (ay + aby * t))


# ─── Loop helpers ────────────────────────────────────────────────────────────

def polygon_area(points: Sequence[Point2]) -> float:
    """Signed shoelace area; counter-clockwise is positive."""
    if points is None or len(points) < 3:
        return 0.0
    pts = np.asarray(points, dtype=float)
    x = pts[:, 0]
    y = pts[:, 1]
    x_next = np.roll(x, -1)
    y_next = np.roll(y, -1)
    return float(np.sum(x * y_next - x_next * y) * 0.5)


def regular_polygon(
    center: Point2,
    radius: float,
    sides: int = 24,
) -> List[Point2]:
    """Counter-clockwise regular polygon starting on the +X axis."""
    cx, cy = center
    points = []
    for i in range(sides):
        a = (i / sides) * math.pi * 2
        points.append((cx + math.cos(a) * radius, cy + math.sin(a) * radius))
    return points


def close_loop(points: Sequence[Point2], tolerance: float) -> List[Point2]:
    """Append the first point when the loop is not already explicitly closed."""
    loop = [tuple(p) for p in points]
    if not loop:
        return loop
    first = loop[0]
    last = loop[-1]
    if math.hypot(first[0] - last[0], first[1] - last[1]) > tolerance:
        loop.append(first)
    return loop


def rotate_point(point: Point2, angle: float) -> Point2:
    x, y = point
    c = math.cos(angle)
    s = math.sin(angle)
    return (x * c - y * s, x * s + y * c)


def polar_point(start: Point2, angle: float, length: float) -> Point2:
    return (start[0] + math.cos(angle) * length, start[1] + math.sin(angle) * length)


def lerp_point(a: Point2, b: Point2, t: float) -> Point2:
    return (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t)
