"""
Shaping session.

Holds the currently loaded mesh and the live inputs (modifiers, scale)
and serves both paths: uniforms for preview, bakes for export.

Loading a new mesh swaps the normalized mesh and its original bbox in
one step and bumps the generation counter. Bakes carry the generation
they were computed from; exporting a bake from an older generation
raises StaleBakeError instead of writing geometry for a replaced mesh.
"""

import threading
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Union

import numpy as np
import trimesh

from .common.config import ShaperConfig, ExportMetadata, DEFAULT_CONFIG
from .common.normalize import NormalizedMesh, EmptyMeshError, normalize_mesh
from .common.io import load_mesh, load_mesh_bytes, save_mesh
from .modifiers import ModifierParams
from .scale import ScaleSpec
from .bake import BakedMesh, bake_mesh
from .preview import PreviewUniforms, build_uniforms

logger = logging.getLogger(__name__)


class StaleBakeError(RuntimeError):
    """Bake was computed against a mesh that has since been replaced."""


@dataclass(frozen=True)
class _LoadedMesh:
    generation: int
    normalized: NormalizedMesh
    source: str


class ShaperSession:
    """
    Current mesh plus live modifier and scale inputs.
    
    The per-vertex work runs outside the lock; the lock only guards
    swapping and reading the loaded-mesh state.
    """
    
    def __init__(self, config: Optional[ShaperConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.params = ModifierParams()
        self.scale_spec = ScaleSpec()
        self._lock = threading.Lock()
        self._loaded: Optional[_LoadedMesh] = None
        self._generation = 0
    
    # ---------------- loading ----------------
    
    def load(self, mesh: trimesh.Trimesh, source: str = "<memory>") -> NormalizedMesh:
        """
        Normalize a decoded mesh and make it current.
        
        Raises:
            EmptyMeshError: if the mesh has no vertices (current mesh kept)
        """
        normalized = normalize_mesh(mesh, self.config)
        with self._lock:
            self._generation += 1
            self._loaded = _LoadedMesh(
                generation=self._generation,
                normalized=normalized,
                source=source
            )
            generation = self._generation
        logger.info(f"Loaded {source} as generation {generation}")
        return normalized
    
    def load_file(self, path: Union[str, Path]) -> NormalizedMesh:
        """Read, decode and load a mesh file."""
        return self.load(load_mesh(path, self.config), source=str(path))
    
    def load_bytes(self, data: bytes, extension: str, source: str = "<bytes>") -> NormalizedMesh:
        """Decode and load a complete in-memory mesh file."""
        return self.load(load_mesh_bytes(data, extension, self.config), source=source)
    
    # ---------------- state ----------------
    
    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation
    
    @property
    def normalized(self) -> Optional[NormalizedMesh]:
        with self._lock:
            return self._loaded.normalized if self._loaded else None
    
    def _snapshot(self) -> _LoadedMesh:
        with self._lock:
            loaded = self._loaded
        if loaded is None:
            raise EmptyMeshError("No mesh loaded")
        return loaded
    
    def set_modifiers(self, twist: float = 0.0, bend: float = 0.0, taper: float = 0.0) -> None:
        self.params = ModifierParams(twist=twist, bend=bend, taper=taper)
    
    def set_scale(self, user_scale=(1.0, 1.0, 1.0), target_dims=None) -> None:
        self.scale_spec = ScaleSpec(
            user_scale=tuple(float(s) for s in user_scale),
            target_dims=None if target_dims is None else tuple(target_dims)
        )
    
    def effective_scale(self) -> np.ndarray:
        loaded = self._snapshot()
        return self.scale_spec.resolve(loaded.normalized.original_bbox.size, self.config)
    
    # ---------------- preview / export ----------------
    
    def uniforms(self) -> PreviewUniforms:
        """Uniforms for the current mesh and inputs."""
        loaded = self._snapshot()
        return build_uniforms(loaded.normalized, self.params, self.scale_spec, self.config)
    
    def bake(self) -> BakedMesh:
        """Bake the current mesh with the current inputs."""
        loaded = self._snapshot()
        params = self.params
        scale_spec = self.scale_spec
        scale = scale_spec.resolve(loaded.normalized.original_bbox.size, self.config)
        baked = bake_mesh(
            loaded.normalized,
            params,
            scale,
            config=self.config,
            source_generation=loaded.generation
        )
        return replace(baked, scale_spec=scale_spec)
    
    def is_current(self, baked: BakedMesh) -> bool:
        with self._lock:
            return self._loaded is not None and baked.source_generation == self._loaded.generation
    
    def build_metadata(self, baked: BakedMesh, export_format: Optional[str] = None) -> ExportMetadata:
        return self._metadata(baked, self._snapshot(), export_format)
    
    def _metadata(
        self,
        baked: BakedMesh,
        loaded: _LoadedMesh,
        export_format: Optional[str]
    ) -> ExportMetadata:
        spec = (baked.scale_spec or self.scale_spec).to_dict()
        return ExportMetadata(
            source=loaded.source,
            export_format=export_format or self.config.export_format,
            n_vertices=len(baked.mesh.vertices),
            n_triangles=len(baked.mesh.faces),
            twist=baked.params.twist,
            bend=baked.params.bend,
            taper=baked.params.taper,
            user_scale=spec["user_scale"],
            effective_scale=baked.effective_scale.tolist(),
            target_dims=spec["target_dims"],
            original_bbox=loaded.normalized.original_bbox.to_dict(),
            baked_bbox=baked.bbox.to_dict(),
            bounding_sphere={
                "center": baked.sphere_center.tolist(),
                "radius": baked.sphere_radius
            }
        )
    
    def export(self, baked: BakedMesh, path: Optional[Union[str, Path]] = None) -> Path:
        """
        Write a baked mesh and its metadata sidecar.
        
        Raises:
            StaleBakeError: if a different mesh was loaded since the bake
        """
        with self._lock:
            loaded = self._loaded
            if loaded is None or baked.source_generation != loaded.generation:
                current = loaded.generation if loaded else None
                raise StaleBakeError(
                    f"Bake from generation {baked.source_generation} "
                    f"does not match current mesh generation {current}"
                )
            if path is None:
                path = self.config.get_output_path(Path(loaded.source))
            path = Path(path)
            metadata = self._metadata(baked, loaded, path.suffix.lstrip('.') or None)
            return save_mesh(baked.mesh, path, metadata)
