"""
Tests for the live preview boundary.

Tests cover:
- Fixed shader stage declares all six uniforms
- Uniforms read the frozen original bbox
- Preview evaluation agrees with the export bake
"""

import numpy as np
import pytest

from shaper.bake import bake_mesh
from shaper.common.normalize import normalize_mesh
from shaper.modifiers import ModifierParams
from shaper.preview import (
    DEFORM_GLSL,
    SHADER_VERSION,
    UNIFORM_NAMES,
    VERTEX_SHADER,
    build_uniforms,
    preview_positions,
)
from shaper.scale import ScaleSpec


@pytest.fixture
def normalized_column(column_mesh):
    return normalize_mesh(column_mesh)


class TestShaderStage:
    """The vertex stage is fixed text with all uniforms declared."""
    
    @pytest.mark.parametrize("name", UNIFORM_NAMES)
    def test_uniform_declared(self, name):
        assert f" {name};" in DEFORM_GLSL
    
    def test_vertex_shader_embeds_deform(self):
        assert DEFORM_GLSL in VERTEX_SHADER
        assert f"v{SHADER_VERSION}" in VERTEX_SHADER
        assert "shaperDeform(position)" in VERTEX_SHADER


class TestBuildUniforms:
    
    def test_cube_uniforms(self, unit_cube):
        normalized = normalize_mesh(unit_cube)
        uniforms = build_uniforms(
            normalized,
            ModifierParams(twist=1.0, bend=0.5, taper=0.25),
            ScaleSpec(target_dims=(2, 0, 0))
        )
        
        assert uniforms.twist == 1.0
        assert uniforms.bend == 0.5
        assert uniforms.taper == 0.25
        assert uniforms.min_y == pytest.approx(-0.5)
        assert uniforms.height == pytest.approx(1.0)
        np.testing.assert_allclose(uniforms.scale, [2.0, 1.0, 1.0])
    
    def test_to_dict_names(self, unit_cube):
        uniforms = build_uniforms(normalize_mesh(unit_cube), ModifierParams())
        d = uniforms.to_dict()
        
        assert set(d) == set(UNIFORM_NAMES)
        assert d["uScale"] == [1.0, 1.0, 1.0]
    
    def test_modifier_edits_do_not_move_frame_or_scale(self, normalized_column):
        """Frame and scale come from the original bbox, not deformed geometry."""
        spec = ScaleSpec(target_dims=(4.0, 16.0, 0))
        a = build_uniforms(normalized_column, ModifierParams(), spec)
        b = build_uniforms(normalized_column, ModifierParams(twist=3.0, bend=1.5, taper=0.9), spec)
        
        assert a.min_y == b.min_y
        assert a.height == b.height
        np.testing.assert_array_equal(a.scale, b.scale)
        np.testing.assert_allclose(a.scale, [2.0, 2.0, 1.0])


class TestPreviewMatchesBake:
    """Preview and export evaluate the same formula."""
    
    @pytest.mark.parametrize("params", [
        ModifierParams(),
        ModifierParams(twist=1.2),
        ModifierParams(bend=-0.7),
        ModifierParams(twist=2.5, bend=0.7, taper=0.3),
    ])
    def test_positions_agree(self, normalized_column, params):
        spec = ScaleSpec(user_scale=(1.5, 1.0, 2.0))
        uniforms = build_uniforms(normalized_column, params, spec)
        baked = bake_mesh(normalized_column, params, uniforms.scale)
        
        preview = preview_positions(normalized_column.mesh.vertices, uniforms)
        
        assert preview.dtype == np.float32
        np.testing.assert_allclose(preview, baked.mesh.vertices, atol=1e-4)
