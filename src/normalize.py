"""Physical-unit normalisation of a generated mesh."""
import logging
from dataclasses import dataclass

import numpy as np
import trimesh

from geometry_primitives import INCH_TO_MM, clamp_size_inches

logger = logging.getLogger(__name__)

MIN_EXTENT = 1e-6


@dataclass
class NormalizeConfig:
    mm_per_inch: float = INCH_TO_MM
    depth_ratio: float = 0.1  # total depth / planar diameter


def normalize_mesh(
    mesh: trimesh.Trimesh,
    size_inches: float,
    config: NormalizeConfig = None,
) -> trimesh.Trimesh:
    """Scale *mesh* to the requested physical size and recentre it.

    The planar (XY) scale makes max(x-extent, y-extent) equal the target
    diameter; the depth axis is scaled on its own so total depth equals
    ``diameter * depth_ratio``. Returns a new mesh in millimetres.
    """
    if config is None:
        config = NormalizeConfig()

    target_diameter = clamp_size_inches(size_inches) * config.mm_per_inch
    target_depth = target_diameter * config.depth_ratio

    vertices = np.array(mesh.vertices, dtype=float, copy=True)
    extents = vertices.max(axis=0) - vertices.min(axis=0)
    scale_xy = target_diameter / max(extents[0], extents[1], MIN_EXTENT)
    scale_z = target_depth / max(extents[2], MIN_EXTENT)

    vertices *= np.array([scale_xy, scale_xy, scale_z])
    center = (vertices.max(axis=0) + vertices.min(axis=0)) * 0.5
    vertices -= center

    logger.debug(
        "Normalized mesh: diameter=%.3f mm depth=%.3f mm (scale xy=%.4f z=%.4f)",
        target_diameter, target_depth, scale_xy, scale_z,
    )
    return trimesh.Trimesh(
        vertices=vertices,
        faces=np.array(mesh.faces, copy=True),
        process=False,
    )


def planar_diameter(mesh: trimesh.Trimesh) -> float:
    extents = mesh.bounds[1] - mesh.bounds[0]
    return float(max(extents[0], extents[1]))
