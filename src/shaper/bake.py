"""
Mesh baking.

Applies the modifiers and the effective scale to every vertex of a
normalized mesh, once, producing a new mesh for export.

The bake process:
1. Height frame from the normalized mesh's own (undeformed) bbox
2. Deform every vertex (taper → twist → bend)
3. Multiply by the effective scale (deform first, then scale)
4. Recompute normals, bbox and bounding sphere
"""

import numpy as np
from typing import Optional, Sequence
from dataclasses import dataclass
import logging

import trimesh

from .common.config import ShaperConfig, DEFAULT_CONFIG
from .common.normalize import (
    BoundingBox, HeightFrame, NormalizedMesh, EmptyMeshError,
    get_mesh_bounds, require_vertices,
)
from .common.mesh_ops import recompute_normals, bounding_sphere
from .modifiers import ModifierParams, deform_points
from .scale import ScaleSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BakedMesh:
    """
    Result of a bake. Owns its mesh; shares no buffers with the source.
    
    source_generation tags the session mesh this was computed from
    (None when baked outside a session).
    """
    mesh: trimesh.Trimesh
    bbox: BoundingBox
    sphere_center: np.ndarray
    sphere_radius: float
    params: ModifierParams
    effective_scale: np.ndarray
    source_generation: Optional[int] = None
    scale_spec: Optional[ScaleSpec] = None
    
    @property
    def vertex_normals(self) -> Optional[np.ndarray]:
        if len(self.mesh.faces) == 0:
            return None
        return self.mesh.vertex_normals


def bake_mesh(
    normalized: NormalizedMesh,
    params: ModifierParams,
    effective_scale: Sequence[float] = (1.0, 1.0, 1.0),
    config: ShaperConfig = DEFAULT_CONFIG,
    source_generation: Optional[int] = None
) -> BakedMesh:
    """
    Bake modifiers and scale into a new mesh.
    
    Args:
        normalized: Normalized mesh (not modified)
        params: Modifier parameters
        effective_scale: Per-axis scale from resolve_scale
        config: Shaper configuration (height epsilon)
        source_generation: Session tag carried onto the result
        
    Returns:
        BakedMesh with fresh positions, normals, bbox and sphere
        
    Raises:
        EmptyMeshError: if the mesh has no vertices
    """
    if normalized is None:
        raise EmptyMeshError("No mesh to bake")
    vertices = require_vertices(normalized.mesh)
    
    scale = np.asarray(effective_scale, dtype=np.float64).reshape(-1)
    if scale.shape != (3,):
        raise ValueError(f"effective_scale must have 3 components, got {scale.shape[0]}")
    
    # Frame from the undeformed mesh, never from a previous bake
    frame = HeightFrame.from_bbox(get_mesh_bounds(vertices), config.height_epsilon)
    logger.info(
        f"Baking {len(vertices)} vertices: twist={params.twist:.4f} bend={params.bend:.4f} "
        f"taper={params.taper:.4f} scale={scale.tolist()}"
    )
    logger.debug(f"Height frame: min_y={frame.min_y:.6f}, height={frame.height:.6f}")
    
    deformed = deform_points(vertices, frame, params) * scale
    
    baked = normalized.mesh.copy()
    baked.vertices = deformed
    recompute_normals(baked)
    
    bbox = get_mesh_bounds(baked.vertices)
    center, radius = bounding_sphere(baked.vertices)
    
    logger.info(f"Bake complete. Size: {np.round(bbox.size, 4).tolist()}, sphere r={radius:.4f}")
    
    return BakedMesh(
        mesh=baked,
        bbox=bbox,
        sphere_center=center,
        sphere_radius=radius,
        params=params,
        effective_scale=scale,
        source_generation=source_generation
    )
