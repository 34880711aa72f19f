"""
OpenFlowmap
===========

Obstacle-driven flow fields for planar surfaces.

This package computes a square grid of direction vectors over a surface
(water runoff, wind, surface currents), influenced by nearby solids and
height-field terrain, and bakes it into a flowmap texture.

Components:
    - field: codec, coordinate mapping, obstacle resolution, grid, blur,
      builder and diagnostics
    - models: surface descriptor and obstacle types
    - scene: reference spatial index and JSON scene loader
    - export: PNG texture baking

Example:
    from openflowmap.field import FlowFieldBuilder
    from openflowmap.scene import SceneLoader

    scene = SceneLoader().load_from_file("scenes/harbor.json")
    builder = FlowFieldBuilder(scene.build_index(), resolution=128, radius=0.2)
    field = builder.build(scene.surface)
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
