"""
Mesh Shaper - continuous shape modifiers for triangle meshes.

Pipeline:
- Load mesh → normalize (center at origin, fix reference bbox)
- Live preview: fixed vertex stage fed with six uniforms
- Export: bake taper → twist → bend, then per-axis scale → save

Usage:
    mesh-shaper model.stl -o outputs/model_shaped.stl --twist 90 --degrees
"""

__version__ = "1.0.0"
