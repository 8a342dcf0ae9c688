"""
Extrusion of the snowflake outline into a relief-textured solid.

The outline becomes a prism centred on z = 0: a constrained Delaunay
triangulation of the outline for each cap, plus a quad strip of side
walls. Cap and wall share vertices, so the solid stays closed after the
relief pass moves cap vertices along z.

Relief: each cap vertex takes the depth scale of its nearest skeleton
segment. Spine-like segments (long, close to a 60-degree axis) thicken
the solid, twig-like segments (short, off-axis) thin it. The per-segment
jitter is a pure hash of rounded radius, length and axis deviation, so
mirrored and rotated copies of a segment get identical relief.
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import numpy as np
import shapely
import trimesh
from shapely.geometry import MultiPolygon, Polygon
from shapely.validation import explain_validity

from contour_extraction import fallback_polygon
from geometry_primitives import (
    Point2,
    Segment,
    clamp_thickness,
    distance_to_segments,
    polygon_area,
    segments_to_array,
)

logger = logging.getLogger(__name__)

SECTOR = math.pi / 3


@dataclass
class ReliefConfig:
    """Extrusion depth and surface relief constants (local units)."""

    enabled: bool = True
    depth_min: float = 1.4
    depth_per_effective_thickness: float = 0.72
    cap_threshold: float = 0.32       # fraction of depth; |z| below this is wall
    min_half_depth: float = 0.18      # fraction of depth
    falloff: float = 2.1
    axis_weight: float = 0.75
    axis_exponent: float = 1.15
    length_weight: float = 0.35
    length_reference: float = 1.35
    spine_scale: float = 1.28
    twig_reduction: float = 0.62
    jitter_amplitude: float = 0.7
    scale_min: float = 0.58
    scale_max: float = 1.45


def extrusion_depth(thickness: float, config: ReliefConfig = None) -> float:
    """Prism depth in local units for a thickness in [2, 20]."""
    if config is None:
        config = ReliefConfig()
    effective = clamp_thickness(thickness) / 3.0
    return max(config.depth_min, effective * config.depth_per_effective_thickness)


# ─── Cap triangulation ───────────────────────────────────────────────────────

def _dedupe_loop(points: Sequence[Point2], tol: float = 1e-12) -> List[Point2]:
    loop: List[Point2] = []
    for p in points:
        p = (float(p[0]), float(p[1]))
        if loop and math.hypot(p[0] - loop[-1][0], p[1] - loop[-1][1]) <= tol:
            continue
        loop.append(p)
    while len(loop) > 1 and math.hypot(loop[0][0] - loop[-1][0], loop[0][1] - loop[-1][1]) <= tol:
        loop.pop()
    return loop


def _largest_polygon(geom) -> Polygon:
    if isinstance(geom, Polygon):
        return geom
    polys = [g for g in getattr(geom, "geoms", []) if isinstance(g, Polygon)]
    multi = [g for g in getattr(geom, "geoms", []) if isinstance(g, MultiPolygon)]
    for m in multi:
        polys.extend(m.geoms)
    if not polys:
        return Polygon()
    return max(polys, key=lambda g: g.area)


def prepare_outline(points: Sequence[Point2]) -> List[Point2]:
    """Counter-clockwise loop whose polygon is valid, repairing if needed."""
    loop = _dedupe_loop(points)
    if len(loop) < 3:
        return loop
    poly = Polygon(loop)
    if not poly.is_valid:
        logger.warning("Outline polygon invalid (%s); repairing", explain_validity(poly))
        repaired = _largest_polygon(shapely.make_valid(poly))
        if repaired.is_empty:
            return []
        loop = _dedupe_loop(list(repaired.exterior.coords))
    if polygon_area(loop) < 0:
        loop.reverse()
    return loop


def triangulate_outline(loop: Sequence[Point2]) -> np.ndarray:
    """Triangulate a simple polygon using only its own vertices.

    Returns (m, 3) indices into *loop*, wound counter-clockwise.
    """
    if len(loop) < 3:
        return np.zeros((0, 3), dtype=int)
    pts = np.asarray(loop, dtype=float)
    lookup: Dict[Tuple[float, float], int] = {}
    for i, (x, y) in enumerate(loop):
        lookup.setdefault((float(x), float(y)), i)

    faces = []
    triangles = shapely.constrained_delaunay_triangles(Polygon(loop))
    for tri in getattr(triangles, "geoms", []):
        if tri.is_empty or tri.area <= 1e-15:
            continue
        idx = []
        for x, y in list(tri.exterior.coords)[:3]:
            key = (float(x), float(y))
            if key not in lookup:
                lookup[key] = int(np.argmin(np.hypot(pts[:, 0] - x, pts[:, 1] - y)))
            idx.append(lookup[key])
        if len(set(idx)) < 3:
            continue
        a, b, c = (pts[i] for i in idx)
        cross = (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])
        if cross < 0:
            idx = [idx[0], idx[2], idx[1]]
        faces.append(idx)
    return np.asarray(faces, dtype=int).reshape(-1, 3)


def extrude_loop(
    loop: Sequence[Point2],
    cap_faces: np.ndarray,
    depth: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """Closed prism from a CCW loop and its cap triangulation.

    Vertices 0..n-1 form the top cap at +depth/2, n..2n-1 the bottom.
    """
    pts = np.asarray(loop, dtype=float)
    n = len(pts)
    half = depth * 0.5
    top = np.column_stack([pts, np.full(n, half)])
    bottom = np.column_stack([pts, np.full(n, -half)])

    k = np.arange(n)
    k_next = (k + 1) % n
    walls = np.vstack([
        np.column_stack([k + n, k_next + n, k_next]),
        np.column_stack([k + n, k_next, k]),
    ])
    faces = np.vstack([cap_faces, cap_faces[:, ::-1] + n, walls])
    return np.vstack([top, bottom]), faces


# ─── Relief ──────────────────────────────────────────────────────────────────

def hash01(value):
    """Deterministic pseudo-random value in [0, 1) from a real number."""
    s = np.sin(np.asarray(value, dtype=float) * 127.1 + 311.7) * 43758.5453123
    return s - np.floor(s)


def _round_half_up(values: np.ndarray) -> np.ndarray:
    return np.floor(values + 0.5)


def segment_depth_scales(
    segments: Sequence[Segment],
    config: ReliefConfig = None,
) -> np.ndarray:
    """Depth scale factor per segment from its spine/twig classification."""
    if config is None:
        config = ReliefConfig()
    arr = segments_to_array(segments)
    if len(arr) == 0:
        return np.zeros(0, dtype=float)

    dx = arr[:, 2] - arr[:, 0]
    dy = arr[:, 3] - arr[:, 1]
    length = np.maximum(1e-8, np.hypot(dx, dy))
    mx = (arr[:, 0] + arr[:, 2]) * 0.5
    my = (arr[:, 1] + arr[:, 3]) * 0.5
    theta = np.arctan2(my, mx)
    axis_angle = _round_half_up(theta / SECTOR) * SECTOR
    delta = np.abs((theta - axis_angle + math.pi) % (2 * math.pi) - math.pi)

    twigness = np.clip(
        np.clip(delta / SECTOR, 0.0, 1.0) ** config.axis_exponent * config.axis_weight
        + np.clip(1.0 - length / config.length_reference, 0.0, 1.0) * config.length_weight,
        0.0,
        1.0,
    )
    radius = np.hypot(mx, my)
    jitter = hash01(
        _round_half_up(radius * 37) * 0.73
        + _round_half_up(length * 41) * 1.13
        + _round_half_up(delta * 500) * 0.29
    )
    variation = (jitter - 0.5) * config.jitter_amplitude
    base = config.spine_scale - twigness * config.twig_reduction
    return np.clip(base + twigness * variation, config.scale_min, config.scale_max)


def apply_surface_relief(
    vertices: np.ndarray,
    segments: Sequence[Segment],
    depth: float,
    config: ReliefConfig = None,
) -> np.ndarray:
    """Return a copy of *vertices* with cap depths driven by nearby segments."""
    if config is None:
        config = ReliefConfig()
    out = np.array(vertices, dtype=float, copy=True)
    if len(segments) == 0 or len(out) == 0:
        return out

    z = out[:, 2]
    on_cap = np.abs(z) >= depth * config.cap_threshold
    if not np.any(on_cap):
        return out

    scales = segment_depth_scales(segments, config)
    dist, nearest = distance_to_segments(
        out[on_cap, 0], out[on_cap, 1], segments_to_array(segments)
    )
    weight = np.exp(-dist * config.falloff)
    base_half = depth * 0.5
    target = np.maximum(
        depth * config.min_half_depth,
        base_half * (1.0 + (scales[nearest] - 1.0) * weight),
    )
    out[on_cap, 2] = np.where(z[on_cap] >= 0, 1.0, -1.0) * target
    return out


# ─── Public entry point ──────────────────────────────────────────────────────

def build_outline_mesh(
    outline: Sequence[Point2],
    segments: Sequence[Segment],
    thickness: float,
    config: ReliefConfig = None,
) -> trimesh.Trimesh:
    """Extrude *outline* and apply segment-driven relief.

    Falls back to the 24-gon around the skeleton when the outline cannot
    be triangulated.
    """
    if config is None:
        config = ReliefConfig()
    depth = extrusion_depth(thickness, config)

    loop = prepare_outline(outline)
    cap = triangulate_outline(loop)
    if len(cap) == 0:
        logger.warning("Outline triangulation failed; using fallback polygon")
        loop = prepare_outline(fallback_polygon(segments))
        cap = triangulate_outline(loop)

    vertices, faces = extrude_loop(loop, cap, depth)
    if config.enabled:
        vertices = apply_surface_relief(vertices, segments, depth, config)

    mesh = trimesh.Trimesh(vertices=vertices, faces=faces, process=False)
    logger.debug(
        "Extruded outline: %d vertices, %d faces, depth=%.3f",
        len(mesh.vertices), len(mesh.faces), depth,
    )
    return mesh
