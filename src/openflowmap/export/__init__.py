"""
Export Module
=============

Baking flow fields to textures and reading them back.
"""

from openflowmap.export.texture import (
    TextureExportError,
    load_flowmap_png,
    save_flowmap_png,
    to_image,
)

__all__ = [
    "TextureExportError",
    "load_flowmap_png",
    "save_flowmap_png",
    "to_image",
]
