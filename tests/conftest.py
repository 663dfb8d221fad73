"""Shared fixtures for mesh shaper tests."""

import sys
from pathlib import Path

import numpy as np
import pytest
import trimesh

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def unit_cube():
    """8-vertex cube, corners at ±0.5."""
    return trimesh.creation.box(extents=(1.0, 1.0, 1.0))


@pytest.fixture
def offset_box():
    """Box of size (2, 4, 6) whose bbox center sits at (10, -3, 5)."""
    box = trimesh.creation.box(extents=(2.0, 4.0, 6.0))
    box.vertices = box.vertices + np.array([10.0, -3.0, 5.0])
    return box


@pytest.fixture
def column_mesh():
    """Tall subdivided column so twist/bend act on many heights."""
    column = trimesh.creation.cylinder(radius=1.0, height=8.0, sections=16)
    # Cylinder is built along Z; stand it up along Y
    column.apply_transform(trimesh.transformations.rotation_matrix(-np.pi / 2, [1, 0, 0]))
    return column.subdivide().subdivide()


@pytest.fixture
def random_points():
    rng = np.random.default_rng(7)
    return rng.uniform(-2.0, 2.0, size=(200, 3))
