"""
Signed distance field sampling around a segment skeleton.

The field value at a node is the distance to the nearest segment minus
the stroke radius, so the zero level set is the outline of the skeleton
drawn with a round pen.
"""
import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from geometry_primitives import (
    Segment,
    clamp,
    clamp_thickness,
    point_segment_distance,
    segment_bounds,
    segments_to_array,
)

logger = logging.getLogger(__name__)

RESOLUTION_RANGE = (160, 240)
MIN_LOCAL_RADIUS = 0.02


@dataclass
class DistanceField:
    """Node-sampled field over [min_x, max_x] x [min_y, max_y].

    ``values`` has shape (ny + 1, nx + 1), indexed [iy, ix].
    """
    values: np.ndarray
    min_x: float
    min_y: float
    cell_size: float
    stroke_radius: float

    @property
    def nx(self) -> int:
        return self.values.shape[1] - 1

    @property
    def ny(self) -> int:
        return self.values.shape[0] - 1

    @property
    def max_x(self) -> float:
        return self.min_x + self.nx * self.cell_size

    @property
    def max_y(self) -> float:
        return self.min_y + self.ny * self.cell_size


def stroke_radius_mm(thickness: float) -> float:
    """Millimetre stroke radius for a thickness in [2, 20]."""
    effective = clamp_thickness(thickness) / 3.0
    return clamp(0.16 + effective * 0.03, 0.2, 0.9)


def local_stroke_radius(
    segments: Sequence[Segment],
    radius_mm: float,
    target_diameter_mm: float,
) -> float:
    """Convert a millimetre radius into local units using the skeleton's extent."""
    bounds = segment_bounds(segments)
    diameter_local = max(bounds.width, bounds.height, 1e-6)
    local_per_mm = diameter_local / max(target_diameter_mm, 1e-6)
    return max(MIN_LOCAL_RADIUS, radius_mm * local_per_mm)


def rasterize_segments(
    segments: Sequence[Segment],
    stroke_radius: float,
    resolution: int = 200,
    pad_factor: float = 2.5,
) -> DistanceField:
    """Sample the signed distance field on a padded uniform grid.

    Args:
        segments: Full skeleton. Must not be empty for a meaningful field.
        stroke_radius: Offset subtracted from the raw distance, local units.
        resolution: Cells along the longer axis, clamped to [160, 240].
        pad_factor: Bounding-box padding in multiples of the stroke radius.
    """
    cells = int(clamp(int(resolution), *RESOLUTION_RANGE))
    bounds = segment_bounds(segments)
    pad = stroke_radius * pad_factor

    min_x = bounds.min_x - pad
    min_y = bounds.min_y - pad
    span_x = bounds.max_x + pad - min_x
    span_y = bounds.max_y + pad - min_y
    cell_size = max(span_x, span_y, 1e-6) / cells
    nx = max(2, int(np.ceil(span_x / cell_size)))
    ny = max(2, int(np.ceil(span_y / cell_size)))

    xs = min_x + np.arange(nx + 1) * cell_size
    ys = min_y + np.arange(ny + 1) * cell_size
    grid_x, grid_y = np.meshgrid(xs, ys, indexing="xy")

    # Nodes are independent, so one vectorised pass per segment suffices.
    min_dist = np.full(grid_x.shape, np.inf)
    for ax, ay, bx, by in segments_to_array(segments):
        d = point_segment_distance(grid_x, grid_y, ax, ay, bx, by)
        np.minimum(min_dist, d, out=min_dist)

    logger.debug(
        "SDF grid %dx%d cell=%.5f radius=%.5f segments=%d",
        nx, ny, cell_size, stroke_radius, len(segments),
    )
    return DistanceField(
        values=min_dist - stroke_radius,
        min_x=float(min_x),
        min_y=float(min_y),
        cell_size=float(cell_size),
        stroke_radius=float(stroke_radius),
    )
