"""
Mesh normalization utilities.

CRITICAL: Normalization happens ONCE per loaded mesh, NEVER after deformation.

Reference frame:
- Translate so the bbox center sits at the origin
- Freeze the bbox of the centered mesh as the original bbox
- Height frames and target-dimension ratios are read from it
"""

import numpy as np
from typing import Dict, List, Optional
from dataclasses import dataclass
import logging

import trimesh

from .config import ShaperConfig, DEFAULT_CONFIG
from .mesh_ops import recompute_normals

logger = logging.getLogger(__name__)


class EmptyMeshError(ValueError):
    """Mesh has no vertex positions, so it has no bounding box."""


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned bounding box."""
    min: np.ndarray  # (3,)
    max: np.ndarray  # (3,)
    
    @property
    def size(self) -> np.ndarray:
        return self.max - self.min
    
    @property
    def center(self) -> np.ndarray:
        return (self.min + self.max) * 0.5
    
    def contains(self, points: np.ndarray, tol: float = 1e-9) -> bool:
        """True if every point lies inside the box (component-wise, within tol)."""
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        return bool(
            np.all(points >= self.min - tol) and np.all(points <= self.max + tol)
        )
    
    def to_dict(self) -> Dict[str, List[float]]:
        return {
            "min": self.min.tolist(),
            "max": self.max.tolist(),
            "size": self.size.tolist()
        }


@dataclass(frozen=True)
class HeightFrame:
    """
    Maps a Y coordinate to normalized height h = (y - min_y) / height.
    
    h is 0 at the bottom of the reference bbox and 1 at the top. It is
    not clamped: points outside the box extrapolate linearly.
    """
    min_y: float
    height: float
    
    @classmethod
    def from_bbox(cls, bbox: BoundingBox, epsilon: float = DEFAULT_CONFIG.height_epsilon) -> "HeightFrame":
        size_y = float(bbox.size[1])
        if size_y < epsilon:
            logger.warning(f"Flat mesh along Y (height={size_y:.3g}), using epsilon {epsilon:g}")
        return cls(min_y=float(bbox.min[1]), height=max(size_y, epsilon))


@dataclass(frozen=True)
class NormalizedMesh:
    """
    A centered mesh paired with its frozen original bounding box.
    
    The pair is replaced as a unit when a new mesh is loaded; the bbox
    is never recomputed from deformed geometry.
    """
    mesh: trimesh.Trimesh
    original_bbox: BoundingBox
    
    @property
    def n_vertices(self) -> int:
        return len(self.mesh.vertices)


def require_vertices(mesh: Optional[trimesh.Trimesh]) -> np.ndarray:
    vertices = getattr(mesh, 'vertices', None)
    if vertices is None:
        raise EmptyMeshError("Mesh has no position attribute")
    vertices = np.asarray(vertices)
    if vertices.ndim != 2 or vertices.shape[1] != 3 or len(vertices) == 0:
        raise EmptyMeshError(f"Mesh has no vertices (shape={vertices.shape})")
    return vertices


def get_mesh_bounds(vertices: np.ndarray) -> BoundingBox:
    """
    Get bounding box of vertices.
    
    Uses every vertex, referenced by a face or not.
    
    Raises:
        EmptyMeshError: if there are no vertices
    """
    vertices = np.asarray(vertices, dtype=np.float64)
    if vertices.ndim != 2 or len(vertices) == 0:
        raise EmptyMeshError("Cannot compute bounds of zero vertices")
    return BoundingBox(min=vertices.min(axis=0), max=vertices.max(axis=0))


def normalize_mesh(
    mesh: trimesh.Trimesh,
    config: ShaperConfig = DEFAULT_CONFIG
) -> NormalizedMesh:
    """
    Center mesh at the origin of its bounding box.
    
    Rules:
    1. Compute mesh bounding box
    2. Translate every vertex by -center
    3. Recompute bbox and vertex normals on the result
    4. Freeze that bbox as the original bbox
    
    Args:
        mesh: Input trimesh mesh (not modified)
        config: Shaper configuration
        
    Returns:
        NormalizedMesh holding the centered copy and its original bbox
        
    Raises:
        EmptyMeshError: if the mesh has no vertices
    """
    vertices = require_vertices(mesh)
    
    bbox_before = get_mesh_bounds(vertices)
    center = bbox_before.center
    
    normalized = mesh.copy()
    normalized.vertices = vertices - center
    
    original_bbox = get_mesh_bounds(normalized.vertices)
    recompute_normals(normalized)
    
    logger.info(
        f"Normalized mesh: {len(vertices)} verts, {len(normalized.faces)} tris, "
        f"size={np.round(original_bbox.size, 4).tolist()}"
    )
    logger.debug(f"Centering translation: {(-center).tolist()}")
    
    return NormalizedMesh(mesh=normalized, original_bbox=original_bbox)
