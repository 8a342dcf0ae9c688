"""
Alternate mesh mode: one rectangular prism per skeleton segment.

Prisms overlap where segments meet; they are concatenated into one mesh
without a boolean union. Depth and vertical offset per prism come from a
second generator derived from the run seed, so the main skeleton stream
is untouched.
"""
import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
import trimesh

from geometry_primitives import Segment, clamp_thickness
from seeded_rng import MASK32, SeededRandom

logger = logging.getLogger(__name__)

DEPTH_SEED_SALT = 0x9E3779B9


@dataclass
class StrokeConfig:
    half_width_base: float = 0.08
    half_width_per_thickness: float = 0.03
    depth_min: float = 1.2
    depth_per_thickness: float = 0.75
    segment_depth_min: float = 0.8
    depth_jitter_min: float = 0.7
    depth_jitter_span: float = 0.8
    offset_fraction: float = 0.45
    min_segment_length: float = 0.06


def _segment_prism(
    seg: Segment,
    half_width: float,
    depth: float,
    z_offset: float,
) -> trimesh.Trimesh:
    (ax, ay), (bx, by) = seg.start, seg.end
    length = seg.length
    nx = -(by - ay) / length * half_width
    ny = (bx - ax) / length * half_width
    outline = np.array([
        [ax + nx, ay + ny],
        [ax - nx, ay - ny],
        [bx - nx, by - ny],
        [bx + nx, by + ny],
    ])
    z0 = z_offset - depth * 0.5
    z1 = z_offset + depth * 0.5
    vertices = np.vstack([
        np.column_stack([outline, np.full(4, z0)]),
        np.column_stack([outline, np.full(4, z1)]),
    ])
    # outline is counter-clockwise seen from +z
    faces = np.array([
        [0, 2, 1], [0, 3, 2],          # bottom
        [4, 5, 6], [4, 6, 7],          # top
        [0, 1, 5], [0, 5, 4],
        [1, 2, 6], [1, 6, 5],
        [2, 3, 7], [2, 7, 6],
        [3, 0, 4], [3, 4, 7],
    ])
    return trimesh.Trimesh(vertices=vertices, faces=faces, process=False)


def build_stroke_mesh(
    segments: Sequence[Segment],
    seed: int,
    thickness: float,
    config: StrokeConfig = None,
) -> trimesh.Trimesh:
    """Concatenate one prism per segment; a single box when none qualify."""
    if config is None:
        config = StrokeConfig()

    t = clamp_thickness(thickness)
    rand = SeededRandom((int(seed) ^ DEPTH_SEED_SALT) & MASK32)
    half_width = config.half_width_base + t * config.half_width_per_thickness
    base_depth = max(config.depth_min, t * config.depth_per_thickness)

    parts = []
    for seg in segments:
        if seg.length < config.min_segment_length:
            continue
        depth = max(
            config.segment_depth_min,
            base_depth * (config.depth_jitter_min + rand() * config.depth_jitter_span),
        )
        z_offset = (rand() - 0.5) * base_depth * config.offset_fraction
        parts.append(_segment_prism(seg, half_width, depth, z_offset))

    if not parts:
        logger.warning("No segments long enough for stroke mesh; using box")
        return trimesh.creation.box(extents=[half_width * 2, half_width * 2, base_depth])

    mesh = trimesh.util.concatenate(parts)
    logger.debug("Stroke mesh: %d prisms, %d faces", len(parts), len(mesh.faces))
    return mesh
