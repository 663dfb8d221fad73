"""
Mesh I/O utilities.

Ingestion and export boundary around trimesh. Files are decoded whole
before anything downstream sees them, and are loaded without vertex
merging so the core receives the topology exactly as stored.
"""

import io
import json
import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import trimesh

from .config import ShaperConfig, ExportMetadata, DEFAULT_CONFIG

logger = logging.getLogger(__name__)


class UnsupportedFormatError(ValueError):
    """File extension is not one the loader accepts."""


def _check_extension(extension: str, config: ShaperConfig) -> str:
    extension = extension.lower().lstrip('.')
    if extension not in config.supported_extensions:
        raise UnsupportedFormatError(
            f"Unsupported mesh format '.{extension}' "
            f"(expected one of {', '.join(config.supported_extensions)})"
        )
    return extension


def _as_single_mesh(loaded) -> trimesh.Trimesh:
    # Handle scene vs single mesh
    if isinstance(loaded, trimesh.Scene):
        meshes = list(loaded.geometry.values())
        if not meshes:
            return trimesh.Trimesh()
        if len(meshes) == 1:
            return meshes[0]
        return trimesh.util.concatenate(meshes)
    return loaded


def load_mesh_bytes(
    data: bytes,
    extension: str,
    config: ShaperConfig = DEFAULT_CONFIG
) -> trimesh.Trimesh:
    """
    Decode a complete in-memory mesh file.
    
    Args:
        data: Full file contents
        extension: File extension, with or without the dot
        config: Shaper configuration (supported extensions)
        
    Returns:
        Decoded trimesh mesh
        
    Raises:
        UnsupportedFormatError: if the extension is not supported
    """
    file_type = _check_extension(extension, config)
    loaded = trimesh.load(io.BytesIO(data), file_type=file_type, process=False)
    mesh = _as_single_mesh(loaded)
    logger.info(f"Decoded {len(data)} bytes of .{file_type}: "
                f"{len(mesh.vertices)} verts, {len(mesh.faces)} tris")
    return mesh


def load_mesh(
    path: Union[str, Path],
    config: ShaperConfig = DEFAULT_CONFIG
) -> trimesh.Trimesh:
    """
    Load a mesh file.
    
    Args:
        path: Path to mesh file
        config: Shaper configuration (supported extensions)
        
    Returns:
        Decoded trimesh mesh
        
    Raises:
        UnsupportedFormatError: if the extension is not supported
    """
    path = Path(path)
    file_type = _check_extension(path.suffix, config)
    loaded = trimesh.load(str(path), file_type=file_type, process=False)
    mesh = _as_single_mesh(loaded)
    logger.info(f"Loaded mesh: {path} ({len(mesh.vertices)} verts, {len(mesh.faces)} tris)")
    return mesh


def save_mesh(
    mesh: trimesh.Trimesh,
    path: Union[str, Path],
    metadata: Optional[ExportMetadata] = None
) -> Path:
    """
    Save mesh with a metadata sidecar.
    
    Args:
        mesh: Trimesh mesh object
        path: Output path; the suffix selects the format
        metadata: ExportMetadata (saved as .json sidecar when given)
        
    Returns:
        Path to the written mesh file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    
    mesh.export(str(path))
    logger.info(f"Saved mesh: {path} ({len(mesh.vertices)} verts, {len(mesh.faces)} tris)")
    
    if metadata is not None:
        meta_path = path.with_suffix('.json')
        metadata.save(meta_path)
        logger.info(f"Saved metadata: {meta_path}")
    
    return path


def load_metadata(path: Union[str, Path]) -> Optional[ExportMetadata]:
    """
    Load the metadata sidecar of an exported mesh.
    
    Returns:
        ExportMetadata, or None if no sidecar exists
    """
    meta_path = Path(path).with_suffix('.json')
    if not meta_path.exists():
        return None
    with open(meta_path) as f:
        return ExportMetadata.from_dict(json.load(f))
