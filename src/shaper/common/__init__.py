"""
Common modules shared by the preview and export paths.

Reference frame (NON-NEGOTIABLE):
- Load → normalize once → original bbox frozen
- Height frame and scale ratios always read the original bbox
"""

from .config import ShaperConfig, ScalePolicy, ExportMetadata, DEFAULT_CONFIG
from .normalize import (
    BoundingBox, HeightFrame, NormalizedMesh, EmptyMeshError,
    get_mesh_bounds, normalize_mesh,
)
from .mesh_ops import recompute_normals, bounding_sphere, compute_mesh_stats
from .io import (
    load_mesh, load_mesh_bytes, save_mesh, load_metadata, UnsupportedFormatError,
)

__all__ = [
    'ShaperConfig', 'ScalePolicy', 'ExportMetadata', 'DEFAULT_CONFIG',
    'BoundingBox', 'HeightFrame', 'NormalizedMesh', 'EmptyMeshError',
    'get_mesh_bounds', 'normalize_mesh',
    'recompute_normals', 'bounding_sphere', 'compute_mesh_stats',
    'load_mesh', 'load_mesh_bytes', 'save_mesh', 'load_metadata', 'UnsupportedFormatError',
]
