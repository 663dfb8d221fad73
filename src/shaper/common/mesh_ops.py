"""
Mesh operation utilities.

Derived attributes recomputed after positions change: normals,
bounding sphere, statistics.
"""

import numpy as np
from typing import Dict, Any, Optional, Tuple
import logging

import trimesh

logger = logging.getLogger(__name__)


def recompute_normals(mesh: trimesh.Trimesh) -> Optional[np.ndarray]:
    """
    Recompute area-weighted vertex normals from the current positions.
    
    Assigning new vertices clears trimesh's cache, so reading
    vertex_normals here computes them fresh. Meshes without faces
    have no normals.
    """
    if len(mesh.faces) == 0:
        return None
    return mesh.vertex_normals


def bounding_sphere(vertices: np.ndarray) -> Tuple[np.ndarray, float]:
    """
    Sphere centered on the bbox center enclosing every vertex.
    
    Args:
        vertices: Nx3 array of vertices
        
    Returns:
        Tuple of (center, radius)
    """
    vertices = np.asarray(vertices, dtype=np.float64)
    center = (vertices.min(axis=0) + vertices.max(axis=0)) * 0.5
    radius = float(np.sqrt(((vertices - center) ** 2).sum(axis=1).max()))
    return center, radius


def compute_mesh_stats(mesh: trimesh.Trimesh) -> Dict[str, Any]:
    """
    Compute mesh statistics for run summaries.
    
    Args:
        mesh: Trimesh mesh object
        
    Returns:
        Dictionary of mesh statistics
    """
    vertices = np.asarray(mesh.vertices, dtype=np.float64)
    mins = vertices.min(axis=0)
    maxs = vertices.max(axis=0)
    extents = maxs - mins
    has_faces = len(mesh.faces) > 0
    
    return {
        "n_vertices": len(vertices),
        "n_faces": len(mesh.faces),
        "bounds": {
            "min": mins.tolist(),
            "max": maxs.tolist()
        },
        "extents": extents.tolist(),
        "max_extent": float(extents.max()),
        "volume": float(mesh.volume) if has_faces and mesh.is_watertight else None,
        "surface_area": float(mesh.area) if has_faces else 0.0,
        "is_watertight": bool(mesh.is_watertight) if has_faces else False
    }
