"""
Outline extraction from a segment skeleton.

Samples a signed distance field around the skeleton, runs marching
squares over it, stitches the crossing segments into closed loops and
keeps the loop with the largest area. Crossing points are keyed by the
integer identity of the grid edge they lie on, so neighbouring cells
share endpoints exactly.

Whenever extraction cannot produce a usable loop a 24-gon around the
skeleton's bounding box is returned instead; callers always get a
closed outline.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

import numpy as np

from geometry_primitives import (
    DEFAULT_DIAMETER_MM,
    Point2,
    Segment,
    clamp,
    close_loop,
    polygon_area,
    regular_polygon,
    segment_bounds,
)
from outline_refine import refine_loop
from sdf_field import DistanceField, local_stroke_radius, rasterize_segments

logger = logging.getLogger(__name__)

MIN_LOOP_POINTS = 8

# Cell edges: 0 bottom, 1 right, 2 top, 3 left. Corners: v0 (x, y),
# v1 (x+1, y), v2 (x+1, y+1), v3 (x, y+1); mask bit k set when vk < 0.
_EDGE_PAIRS: Dict[int, List[Tuple[int, int]]] = {
    1: [(3, 0)],
    2: [(0, 1)],
    3: [(3, 1)],
    4: [(1, 2)],
    6: [(0, 2)],
    7: [(3, 2)],
    8: [(2, 3)],
    9: [(0, 2)],
    11: [(1, 2)],
    12: [(1, 3)],
    13: [(0, 1)],
    14: [(3, 0)],
}


@dataclass
class OutlineConfig:
    """Constants for SDF sampling, contour extraction and refinement."""

    grid_resolution: int = 200
    smoothing_iterations: int = 2
    chaikin_cut: float = 0.12
    simplify_edge_factor: float = 0.22
    collinear_eps: float = 0.012
    radius_mm: float = 2.5
    radius_mm_min: float = 0.8
    radius_mm_max: float = 12.0
    target_diameter_mm: float = DEFAULT_DIAMETER_MM
    pad_factor: float = 2.5
    fallback_sides: int = 24
    fallback_radius_factor: float = 1.05


@dataclass
class ContourPoint:
    key: int
    point: Point2


@dataclass
class OutlineResult:
    """Outline loop (counter-clockwise, implicit closure) plus diagnostics."""

    points: List[Point2]
    cell_size: float
    is_fallback: bool = False
    loop_count: int = 0
    contour_segment_count: int = 0
    diagnostics: Dict[str, float] = field(default_factory=dict)

    def closed_points(self) -> List[Point2]:
        """Loop with an explicit closing point unless it is already closed."""
        return close_loop(self.points, self.cell_size * 0.25)


def edge_key(ix: int, iy: int, vertical: bool, row_stride: int) -> int:
    """Integer identity of the grid edge starting at node (ix, iy)."""
    return (iy * row_stride + ix) * 2 + (1 if vertical else 0)


def case_edge_pairs(mask: int, center_value: float) -> List[Tuple[int, int]]:
    """Edge pairings for a cell case; saddles 5 and 10 use the cell-centre value."""
    if mask == 5:
        return [(3, 0), (1, 2)] if center_value < 0 else [(3, 2), (0, 1)]
    if mask == 10:
        return [(0, 1), (2, 3)] if center_value < 0 else [(3, 0), (1, 2)]
    return _EDGE_PAIRS.get(mask, [])


def _interp(a: float, b: float) -> float:
    denom = b - a
    if abs(denom) < 1e-12:
        return 0.5
    return clamp(-a / denom, 0.0, 1.0)


def _edge_point(
    edge: int,
    ix: int,
    iy: int,
    x: float,
    y: float,
    cell: float,
    corners: Tuple[float, float, float, float],
    row_stride: int,
) -> ContourPoint:
    v0, v1, v2, v3 = corners
    if edge == 0:
        t = _interp(v0, v1)
        return ContourPoint(edge_key(ix, iy, False, row_stride), (x + t * cell, y))
    if edge == 1:
        t = _interp(v1, v2)
        return ContourPoint(edge_key(ix + 1, iy, True, row_stride), (x + cell, y + t * cell))
    if edge == 2:
        t = _interp(v3, v2)
        return ContourPoint(edge_key(ix, iy + 1, False, row_stride), (x + t * cell, y + cell))
    t = _interp(v0, v3)
    return ContourPoint(edge_key(ix, iy, True, row_stride), (x, y + t * cell))


def marching_squares(sdf: DistanceField) -> List[Tuple[ContourPoint, ContourPoint]]:
    """Zero-crossing segments of the field, in row-major cell order."""
    values = sdf.values
    v0 = values[:-1, :-1]
    v1 = values[:-1, 1:]
    v2 = values[1:, 1:]
    v3 = values[1:, :-1]
    masks = (
        (v0 < 0).astype(np.int8)
        | ((v1 < 0).astype(np.int8) << 1)
        | ((v2 < 0).astype(np.int8) << 2)
        | ((v3 < 0).astype(np.int8) << 3)
    )
    active_y, active_x = np.nonzero((masks != 0) & (masks != 15))

    cell = sdf.cell_size
    row_stride = sdf.nx + 1
    contour: List[Tuple[ContourPoint, ContourPoint]] = []
    for iy, ix in zip(active_y.tolist(), active_x.tolist()):
        corners = (
            float(v0[iy, ix]),
            float(v1[iy, ix]),
            float(v2[iy, ix]),
            float(v3[iy, ix]),
        )
        center_value = 0.25 * sum(corners)
        x = sdf.min_x + ix * cell
        y = sdf.min_y + iy * cell
        for e0, e1 in case_edge_pairs(int(masks[iy, ix]), center_value):
            a = _edge_point(e0, ix, iy, x, y, cell, corners, row_stride)
            b = _edge_point(e1, ix, iy, x, y, cell, corners, row_stride)
            contour.append((a, b))
    return contour


def build_loops(contour: Sequence[Tuple[ContourPoint, ContourPoint]]) -> List[List[Point2]]:
    """Chain contour segments end to end into closed loops.

    Open chains (which only occur on a malformed field) are dropped.
    """
    incident: Dict[int, List[int]] = {}
    key_to_point: Dict[int, Point2] = {}
    for i, (a, b) in enumerate(contour):
        incident.setdefault(a.key, []).append(i)
        incident.setdefault(b.key, []).append(i)
        key_to_point.setdefault(a.key, a.point)
        key_to_point.setdefault(b.key, b.point)

    used = [False] * len(contour)
    loops: List[List[Point2]] = []

    for i, (a, b) in enumerate(contour):
        if used[i]:
            continue
        used[i] = True
        start_key = a.key
        loop_keys = [a.key, b.key]
        current_key = b.key
        current_seg = i

        for _ in range(len(contour) * 3):
            if current_key == start_key:
                break
            found = None
            for j in incident.get(current_key, []):
                if j == current_seg or used[j]:
                    continue
                found = j
                break
            if found is None:
                break
            used[found] = True
            sa, sb = contour[found]
            next_key = sb.key if sa.key == current_key else sa.key
            loop_keys.append(next_key)
            current_key = next_key
            current_seg = found

        if len(loop_keys) >= 4 and loop_keys[0] == loop_keys[-1]:
            loop_keys.pop()
            loops.append([key_to_point[k] for k in loop_keys])

    return loops


def largest_loop(loops: Sequence[List[Point2]]) -> List[Point2]:
    """Loop with the largest absolute area; the earliest wins ties."""
    best = loops[0]
    best_area = abs(polygon_area(best))
    for loop in loops[1:]:
        area = abs(polygon_area(loop))
        if area > best_area:
            best_area = area
            best = loop
    return best


def fallback_polygon(
    segments: Sequence[Segment],
    sides: int = 24,
    radius_factor: float = 1.05,
) -> List[Point2]:
    """Regular polygon enclosing the skeleton's bounding box."""
    bounds = segment_bounds(segments)
    radius = max(bounds.width, bounds.height, 1.0) * 0.5 * radius_factor
    return regular_polygon(bounds.center, radius, sides)


def resolve_radius_mm(config: OutlineConfig) -> float:
    return clamp(config.radius_mm, config.radius_mm_min, config.radius_mm_max)


def extract_outline(
    segments: Sequence[Segment],
    config: OutlineConfig = None,
) -> OutlineResult:
    """Run the SDF -> marching squares -> refine chain for a skeleton.

    Args:
        segments: Full six-fold skeleton in local units.
        config: Sampling and refinement constants.

    Returns:
        OutlineResult; ``is_fallback`` is set when the 24-gon was used.
    """
    if config is None:
        config = OutlineConfig()

    def _fallback(reason: str, cell_size: float, **diag) -> OutlineResult:
        logger.warning("Outline extraction fell back to circle: %s", reason)
        points = fallback_polygon(segments, config.fallback_sides, config.fallback_radius_factor)
        return OutlineResult(points=points, cell_size=cell_size, is_fallback=True, **diag)

    if len(segments) == 0:
        return _fallback("no segments", 0.0)

    radius = local_stroke_radius(segments, resolve_radius_mm(config), config.target_diameter_mm)
    smoothing = int(clamp(int(config.smoothing_iterations), 1, 3))
    distance_field = rasterize_segments(
        segments, radius, config.grid_resolution, config.pad_factor
    )
    cell_size = distance_field.cell_size

    contour = marching_squares(distance_field)
    if len(contour) < 3:
        return _fallback("too few contour segments", cell_size, contour_segment_count=len(contour))

    loops = build_loops(contour)
    if not loops:
        return _fallback("no closed loop", cell_size, contour_segment_count=len(contour))

    main_loop = largest_loop(loops)
    loop = refine_loop(
        main_loop,
        smoothing_iterations=smoothing,
        cut=config.chaikin_cut,
        min_edge=cell_size * config.simplify_edge_factor,
        collinear_eps=config.collinear_eps,
    )
    if len(loop) < MIN_LOOP_POINTS:
        return _fallback(
            "refined loop too small",
            cell_size,
            loop_count=len(loops),
            contour_segment_count=len(contour),
        )

    logger.debug(
        "Outline: %d contour segments, %d loops, %d -> %d points",
        len(contour), len(loops), len(main_loop), len(loop),
    )
    return OutlineResult(
        points=loop,
        cell_size=cell_size,
        loop_count=len(loops),
        contour_segment_count=len(contour),
        diagnostics={
            "raw_points": float(len(main_loop)),
            "area": polygon_area(loop),
            "stroke_radius": radius,
        },
    )
