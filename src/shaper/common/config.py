"""
Configuration and constants for mesh shaping.

Reference frame (NON-NEGOTIABLE):
- Normalize once on load → original bbox is frozen for that mesh
- Every height frame and scale ratio is measured against it
- Deform first, scale last
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Tuple, List
import json
from pathlib import Path


class ScalePolicy(Enum):
    """
    What to do when a target dimension is set on a flat axis.
    
    FALLBACK (default): ignore the target, use the user scale
        - A flat plate can still be resized in its other two axes
        - Logged as a warning
    
    ERROR: refuse to resolve
        - Raises DegenerateAxisError
    """
    FALLBACK = "fallback"
    ERROR = "error"


@dataclass
class ExportMetadata:
    """
    Metadata written next to every exported mesh.
    
    Records everything needed to reproduce the bake from the
    source file: modifiers, scale inputs, and the reference bbox.
    """
    source: str
    export_format: str
    n_vertices: int
    n_triangles: int
    twist: float
    bend: float
    taper: float
    user_scale: List[float]
    effective_scale: List[float]
    target_dims: Optional[List[Optional[float]]] = None
    original_bbox: Optional[Dict[str, List[float]]] = None
    baked_bbox: Optional[Dict[str, List[float]]] = None
    bounding_sphere: Optional[Dict[str, Any]] = None
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "export_format": self.export_format,
            "n_vertices": self.n_vertices,
            "n_triangles": self.n_triangles,
            "twist": self.twist,
            "bend": self.bend,
            "taper": self.taper,
            "user_scale": self.user_scale,
            "effective_scale": self.effective_scale,
            "target_dims": self.target_dims,
            "original_bbox": self.original_bbox,
            "baked_bbox": self.baked_bbox,
            "bounding_sphere": self.bounding_sphere
        }
    
    def save(self, path: Path) -> None:
        """Save metadata to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExportMetadata":
        return cls(**data)


@dataclass
class ShaperConfig:
    """
    Global configuration for mesh shaping.
    
    Epsilons guard the two divisions in the pipeline:
    - height_epsilon: floor for the height frame (y / height)
    - axis_epsilon: flat-axis threshold for target / original size
    """
    
    # Floor for HeightFrame.height on flat meshes
    height_epsilon: float = 1e-6
    
    # Original sizes below this are treated as degenerate
    axis_epsilon: float = 1e-9
    scale_policy: ScalePolicy = ScalePolicy.FALLBACK
    
    # Ingestion / export
    supported_extensions: Tuple[str, ...] = ("stl", "obj")
    export_format: str = "stl"
    
    output_dir: Path = field(default_factory=lambda: Path("outputs"))
    
    def get_output_path(self, source: Path) -> Path:
        """Default export path for a source mesh file."""
        return self.output_dir / f"{Path(source).stem}_shaped.{self.export_format}"
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "height_epsilon": self.height_epsilon,
            "axis_epsilon": self.axis_epsilon,
            "scale_policy": self.scale_policy.value,
            "supported_extensions": list(self.supported_extensions),
            "export_format": self.export_format,
            "output_dir": str(self.output_dir)
        }
    
    @classmethod
    def from_json(cls, path: Path) -> "ShaperConfig":
        """Load config from JSON file."""
        with open(path) as f:
            data = json.load(f)
        data["scale_policy"] = ScalePolicy(data.get("scale_policy", "fallback"))
        if "supported_extensions" in data:
            data["supported_extensions"] = tuple(
                ext.lower().lstrip('.') for ext in data["supported_extensions"]
            )
        data["output_dir"] = Path(data.get("output_dir", "outputs"))
        return cls(**data)
    
    def save(self, path: Path) -> None:
        """Save config to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


# Global default config
DEFAULT_CONFIG = ShaperConfig()
