"""
Shape modifiers: taper, twist, bend.

This is the single definition of the deformation. The export bake and
the preview stage both call deform_points; the GLSL in shaper.preview
mirrors it line for line.

Stages (order matters, each reads the previous stage's output):
1. h = (y - min_y) / height             (not clamped)
2. taper: x, z *= 1 + taper * (h - 0.5) * 2
3. twist: rotate (x, z) by twist * h
4. bend:  rotate (z, y - center_y) by (h - 0.5) * bend in the Y-Z plane
"""

import math
import numpy as np
from typing import Sequence
from dataclasses import dataclass
import logging

from .common.normalize import HeightFrame

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModifierParams:
    """Modifier parameters. Angles in radians, taper unitless (~[-1, 1])."""
    twist: float = 0.0
    bend: float = 0.0
    taper: float = 0.0
    
    @classmethod
    def from_degrees(cls, twist: float = 0.0, bend: float = 0.0, taper: float = 0.0) -> "ModifierParams":
        return cls(twist=math.radians(twist), bend=math.radians(bend), taper=taper)
    
    @property
    def is_identity(self) -> bool:
        return self.twist == 0.0 and self.bend == 0.0 and self.taper == 0.0
    
    def to_dict(self):
        return {"twist": self.twist, "bend": self.bend, "taper": self.taper}


def normalized_height(y, frame: HeightFrame):
    """Map Y to normalized height; 0 at frame bottom, 1 at top."""
    return (y - frame.min_y) / frame.height


def taper_factor(h, taper: float):
    """XZ scale factor at height h; exactly 1 at mid-height."""
    return 1 + taper * (h - 0.5) * 2


def deform_points(
    points: np.ndarray,
    frame: HeightFrame,
    params: ModifierParams,
    dtype=np.float64
) -> np.ndarray:
    """
    Apply taper, twist and bend to an array of points.
    
    Every point is independent of every other, so the array can be
    split into chunks and evaluated in any order.
    
    Args:
        points: (N, 3) positions (not modified)
        frame: Height frame of the reference bbox
        params: Modifier parameters
        dtype: Float type for the whole evaluation; float32 matches a
            rendering device
        
    Returns:
        (N, 3) deformed positions in a new array of `dtype`
    """
    dtype = np.dtype(dtype).type
    p = np.array(points, dtype=dtype, copy=True).reshape(-1, 3)
    
    min_y = dtype(frame.min_y)
    height = dtype(frame.height)
    twist = dtype(params.twist)
    bend = dtype(params.bend)
    taper = dtype(params.taper)
    half = dtype(0.5)
    
    x = p[:, 0]
    y = p[:, 1]
    z = p[:, 2]
    
    # 1. height
    h = (y - min_y) / height
    
    # 2. taper
    t = dtype(1) + taper * (h - half) * dtype(2)
    x = x * t
    z = z * t
    
    # 3. twist
    angle = twist * h
    c = np.cos(angle)
    s = np.sin(angle)
    tx = x * c - z * s
    tz = x * s + z * c
    
    # 4. bend
    bend_angle = (h - half) * bend
    y_centered = (h - half) * height
    cb = np.cos(bend_angle)
    sb = np.sin(bend_angle)
    bz = tz * cb - y_centered * sb
    by = tz * sb + y_centered * cb
    
    p[:, 0] = tx
    p[:, 1] = by + min_y + height * half
    p[:, 2] = bz
    return p


def deform(
    position: Sequence[float],
    frame: HeightFrame,
    params: ModifierParams
) -> np.ndarray:
    """Deform a single 3D point. See deform_points."""
    return deform_points(np.asarray(position, dtype=np.float64).reshape(1, 3), frame, params)[0]
