"""
Live preview boundary.

The rendering device runs a fixed vertex stage that always declares the
same six uniforms and always applies the full deformation. Modifiers are
toggled by uniform values, never by editing shader text.

Uniforms are recomputed from upstream state whenever the mesh, the
modifiers, or the scale inputs change.
"""

import numpy as np
from typing import Dict, Any
from dataclasses import dataclass
import logging

from .common.config import ShaperConfig, DEFAULT_CONFIG
from .common.normalize import HeightFrame, NormalizedMesh
from .modifiers import ModifierParams, deform_points
from .scale import ScaleSpec

logger = logging.getLogger(__name__)

SHADER_VERSION = 1

# Uniform names as declared in the vertex stage
UNIFORM_NAMES = ("uTwist", "uBend", "uTaper", "uMinY", "uHeight", "uScale")

DEFORM_GLSL = """\
uniform float uTwist;
uniform float uBend;
uniform float uTaper;
uniform float uMinY;
uniform float uHeight;
uniform vec3 uScale;

vec3 shaperDeform(vec3 p) {
    float h = (p.y - uMinY) / uHeight;

    float t = 1.0 + uTaper * (h - 0.5) * 2.0;
    p.x *= t;
    p.z *= t;

    float a = uTwist * h;
    float c = cos(a);
    float s = sin(a);
    float tx = p.x * c - p.z * s;
    float tz = p.x * s + p.z * c;

    float ba = (h - 0.5) * uBend;
    float yc = (h - 0.5) * uHeight;
    float cb = cos(ba);
    float sb = sin(ba);
    float bz = tz * cb - yc * sb;
    float by = tz * sb + yc * cb;

    return vec3(tx, by + uMinY + uHeight * 0.5, bz) * uScale;
}
"""

VERTEX_SHADER = f"""\
// shaper deform stage v{SHADER_VERSION}
{DEFORM_GLSL}
uniform mat4 modelViewMatrix;
uniform mat4 projectionMatrix;
attribute vec3 position;

void main() {{
    gl_Position = projectionMatrix * modelViewMatrix * vec4(shaperDeform(position), 1.0);
}}
"""


@dataclass(frozen=True)
class PreviewUniforms:
    """The six values pushed to the vertex stage."""
    twist: float
    bend: float
    taper: float
    min_y: float
    height: float
    scale: np.ndarray  # (3,)
    
    @property
    def frame(self) -> HeightFrame:
        return HeightFrame(min_y=self.min_y, height=self.height)
    
    @property
    def params(self) -> ModifierParams:
        return ModifierParams(twist=self.twist, bend=self.bend, taper=self.taper)
    
    def to_dict(self) -> Dict[str, Any]:
        """Uniform name → value, ready for a material's uniform table."""
        return {
            "uTwist": float(self.twist),
            "uBend": float(self.bend),
            "uTaper": float(self.taper),
            "uMinY": float(self.min_y),
            "uHeight": float(self.height),
            "uScale": [float(s) for s in self.scale]
        }


def build_uniforms(
    normalized: NormalizedMesh,
    params: ModifierParams,
    scale_spec: ScaleSpec = ScaleSpec(),
    config: ShaperConfig = DEFAULT_CONFIG
) -> PreviewUniforms:
    """
    Compute preview uniforms for a normalized mesh.
    
    Height frame and scale both come from the frozen original bbox, so
    tweaking modifiers never feeds back into the scale.
    """
    bbox = normalized.original_bbox
    frame = HeightFrame.from_bbox(bbox, config.height_epsilon)
    scale = scale_spec.resolve(bbox.size, config)
    
    uniforms = PreviewUniforms(
        twist=params.twist,
        bend=params.bend,
        taper=params.taper,
        min_y=frame.min_y,
        height=frame.height,
        scale=scale
    )
    logger.debug(f"Preview uniforms: {uniforms.to_dict()}")
    return uniforms


def preview_positions(vertices: np.ndarray, uniforms: PreviewUniforms) -> np.ndarray:
    """
    Host-side evaluation of the vertex stage in float32.
    
    Same formula as the bake, at device precision.
    """
    deformed = deform_points(vertices, uniforms.frame, uniforms.params, dtype=np.float32)
    return deformed * np.asarray(uniforms.scale, dtype=np.float32)
