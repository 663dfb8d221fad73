"""
Tests for scale resolution.

Tests cover:
- Target dimension ratios
- Per-axis absent targets
- Degenerate axis policies
"""

import pytest
import numpy as np

from shaper.common.config import ShaperConfig, ScalePolicy
from shaper.scale import ScaleSpec, DegenerateAxisError, resolve_scale


class TestResolveScale:
    """Test effective scale computation."""
    
    def test_target_ratio(self):
        """Target sizes divide by the original size per axis."""
        result = resolve_scale((10, 20, 30), (20, 20, 60), (1, 1, 1))
        np.testing.assert_allclose(result, [2.0, 1.0, 2.0])
    
    def test_no_target_uses_user_scale(self):
        result = resolve_scale((10, 20, 30), None, (1.5, 2.0, 0.5))
        np.testing.assert_allclose(result, [1.5, 2.0, 0.5])
    
    def test_target_times_user_scale(self):
        result = resolve_scale((10, 20, 30), (20, 20, 60), (2, 3, 0.5))
        np.testing.assert_allclose(result, [4.0, 3.0, 1.0])
    
    def test_absent_axes(self):
        """None and 0 both mean no target on that axis."""
        result = resolve_scale((10, 20, 30), (None, 40, 0), (2, 1, 3))
        np.testing.assert_allclose(result, [2.0, 2.0, 3.0])
    
    def test_negative_target_ignored(self):
        result = resolve_scale((10, 20, 30), (-5, 0, 0), (1, 1, 1))
        np.testing.assert_allclose(result, [1.0, 1.0, 1.0])
    
    def test_wrong_length(self):
        with pytest.raises(ValueError):
            resolve_scale((10, 20), None, (1, 1, 1))
        with pytest.raises(ValueError):
            resolve_scale((10, 20, 30), (1, 2), (1, 1, 1))
    
    def test_returns_new_array(self):
        """Result never aliases the user scale input."""
        user = np.array([1.0, 1.0, 1.0])
        result = resolve_scale((10, 20, 30), (20, 0, 0), user)
        result[0] = 99.0
        np.testing.assert_array_equal(user, [1.0, 1.0, 1.0])


# ============== Degenerate Axis Tests ==============

class TestDegenerateAxis:
    """Flat axes never divide by zero."""
    
    def test_fallback_uses_user_scale(self):
        result = resolve_scale((10, 0, 30), (0, 5, 60), (1, 1.5, 1))
        np.testing.assert_allclose(result, [1.0, 1.5, 2.0])
        assert np.all(np.isfinite(result))
    
    def test_error_policy_raises(self):
        config = ShaperConfig(scale_policy=ScalePolicy.ERROR)
        with pytest.raises(DegenerateAxisError, match="y"):
            resolve_scale((10, 0, 30), (0, 5, 0), (1, 1, 1), config)
    
    def test_error_policy_without_target_on_flat_axis(self):
        """A flat axis is only a problem when a target is set for it."""
        config = ShaperConfig(scale_policy=ScalePolicy.ERROR)
        result = resolve_scale((10, 0, 30), (20, 0, 0), (1, 1, 1), config)
        np.testing.assert_allclose(result, [2.0, 1.0, 1.0])
    
    def test_near_zero_below_epsilon(self):
        config = ShaperConfig(axis_epsilon=1e-6)
        result = resolve_scale((1e-9, 1, 1), (5, 0, 0), (1, 1, 1), config)
        np.testing.assert_allclose(result, [1.0, 1.0, 1.0])


# ============== ScaleSpec Tests ==============

class TestScaleSpec:
    
    def test_default_is_identity(self):
        np.testing.assert_allclose(ScaleSpec().resolve((3, 4, 5)), [1, 1, 1])
    
    def test_resolve_matches_function(self):
        spec = ScaleSpec(user_scale=(1, 2, 1), target_dims=(20, None, 15))
        np.testing.assert_allclose(
            spec.resolve((10, 20, 30)),
            resolve_scale((10, 20, 30), (20, None, 15), (1, 2, 1))
        )
    
    def test_to_dict_normalizes_absent_targets(self):
        spec = ScaleSpec(user_scale=(1, 1, 1), target_dims=(0, 12, None))
        assert spec.to_dict() == {"user_scale": [1.0, 1.0, 1.0], "target_dims": [None, 12.0, None]}
