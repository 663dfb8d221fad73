"""
Scale resolution.

Turns absolute target dimensions plus a user multiplier into the
per-axis scale applied after deformation:

    effective[axis] = target[axis] / original_size[axis] * user_scale[axis]

or just user_scale[axis] when no target is set for that axis.
"""

import numpy as np
from typing import Optional, Sequence, Tuple
from dataclasses import dataclass, field
import logging

from .common.config import ShaperConfig, ScalePolicy, DEFAULT_CONFIG

logger = logging.getLogger(__name__)

AXES = ('x', 'y', 'z')


class DegenerateAxisError(ValueError):
    """Target dimension requested on an axis with ~zero original size."""


def _vec3(values, name: str) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float64).reshape(-1)
    if arr.shape != (3,):
        raise ValueError(f"{name} must have 3 components, got {arr.shape[0]}")
    return arr


def _target_or_none(value: Optional[float]) -> Optional[float]:
    # 0 (the UI default) and negatives mean "no target"
    if value is None:
        return None
    value = float(value)
    return value if value > 0 else None


@dataclass(frozen=True)
class ScaleSpec:
    """User scale multiplier plus optional absolute target size per axis."""
    user_scale: Tuple[float, float, float] = (1.0, 1.0, 1.0)
    target_dims: Optional[Tuple[Optional[float], Optional[float], Optional[float]]] = None
    
    def resolve(
        self,
        original_size: Sequence[float],
        config: ShaperConfig = DEFAULT_CONFIG
    ) -> np.ndarray:
        return resolve_scale(original_size, self.target_dims, self.user_scale, config)
    
    def to_dict(self):
        return {
            "user_scale": [float(s) for s in self.user_scale],
            "target_dims": None if self.target_dims is None else [
                _target_or_none(t) for t in self.target_dims
            ]
        }


def resolve_scale(
    original_size: Sequence[float],
    target_dims: Optional[Sequence[Optional[float]]],
    user_scale: Sequence[float] = (1.0, 1.0, 1.0),
    config: ShaperConfig = DEFAULT_CONFIG
) -> np.ndarray:
    """
    Resolve the effective per-axis scale.
    
    Pure function; recompute whenever targets or user scale change.
    
    Args:
        original_size: Size of the original (pre-deformation) bbox
        target_dims: Absolute sizes per axis; None, or None / <= 0 per
            axis, means no target for that axis
        user_scale: Multiplicative user scale per axis
        config: Shaper configuration (axis epsilon, degenerate policy)
        
    Returns:
        (3,) effective scale vector
        
    Raises:
        DegenerateAxisError: if a target is set on a flat axis and the
            policy is ScalePolicy.ERROR
    """
    size = _vec3(original_size, "original_size")
    user = _vec3(user_scale, "user_scale")
    effective = user.copy()
    
    if target_dims is None:
        return effective
    
    targets = list(target_dims)
    if len(targets) != 3:
        raise ValueError(f"target_dims must have 3 components, got {len(targets)}")
    
    for axis, name in enumerate(AXES):
        target = _target_or_none(targets[axis])
        if target is None:
            continue
        
        if abs(size[axis]) < config.axis_epsilon:
            if config.scale_policy is ScalePolicy.ERROR:
                raise DegenerateAxisError(
                    f"Cannot scale {name} to {target:g}: original size is {size[axis]:.3g}"
                )
            logger.warning(
                f"Original {name} size is {size[axis]:.3g}, ignoring target {target:g} "
                f"and using user scale {user[axis]:g}"
            )
            continue
        
        effective[axis] = (target / size[axis]) * user[axis]
    
    logger.debug(f"Resolved scale: {effective.tolist()}")
    return effective
