"""
Binary STL export for fabricated snowflakes.

Units: millimetres, as produced by the normaliser.
"""
import logging
import os
from typing import Dict

import numpy as np
import trimesh

logger = logging.getLogger(__name__)


def mesh_arrays(mesh: trimesh.Trimesh) -> Dict[str, np.ndarray]:
    """Neutral form of a mesh: vertices, triangle indices and vertex normals."""
    return {
        "vertices": np.array(mesh.vertices, dtype=np.float64),
        "faces": np.array(mesh.faces, dtype=np.int64),
        "normals": np.array(mesh.vertex_normals, dtype=np.float64),
    }


def export_stl(mesh: trimesh.Trimesh, filepath: str) -> str:
    """Write *mesh* as a binary STL file.

    Returns:
        Path to created STL file.
    """
    if len(mesh.faces) == 0:
        raise ValueError("Cannot export an empty mesh")
    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
    mesh.export(filepath, file_type="stl")
    logger.info("Exported STL: %s (%d triangles)", filepath, len(mesh.faces))
    return filepath
