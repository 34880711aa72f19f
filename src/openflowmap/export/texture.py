"""
Texture Export
==============

Conversion between flow fields and PNG flowmap textures.

This is the ONLY place in the codebase that writes images. Reading a
heightmap for terrain lives with the scene loader.

Layout:
    - RGBA, R/G = encoded direction, B = 0, A = 1
    - Texture space has its origin at the bottom-left, so grid row 0 is
      written as the LAST image row
    - OpenCV stores color as BGR(A); channels are swapped on the way in
      and out

Baked flowmaps are linear data, not colors. Consumers must import them
without sRGB conversion.
"""

import logging
from pathlib import Path
from typing import Iterable

import cv2
import numpy as np

from openflowmap.field.codec import decode_array
from openflowmap.field.grid import SUPPORTED_RESOLUTIONS, FlowField


logger = logging.getLogger(__name__)


_DTYPES = {8: np.uint8, 16: np.uint16}


class TextureExportError(Exception):
    """Raised when a flowmap texture cannot be written or read."""
    pass


def to_image(field: FlowField, bit_depth: int = 8) -> np.ndarray:
    """
    Render a field as an RGBA image.

    Args:
        field: Flow field to render
        bit_depth: 8 or 16 bits per channel

    Returns:
        Array of shape (R, R, 4), uint8 or uint16, bottom row = grid row 0

    Raises:
        TextureExportError: If bit_depth is unsupported
    """
    if bit_depth not in _DTYPES:
        raise TextureExportError(f"Unsupported bit depth {bit_depth}; expected 8 or 16")

    dtype = _DTYPES[bit_depth]
    max_value = np.iinfo(dtype).max

    rgba = field.export_raster().reshape(field.resolution, field.resolution, 4)
    scaled = np.rint(rgba * max_value).astype(dtype)
    return np.ascontiguousarray(np.flipud(scaled))


def save_flowmap_png(field: FlowField, path: str, bit_depth: int = 8) -> Path:
    """
    Write a field to a PNG file.

    Args:
        field: Flow field to bake
        path: Destination file (parent directories are created)
        bit_depth: 8 or 16 bits per channel

    Returns:
        Path that was written

    Raises:
        TextureExportError: If encoding or writing fails
    """
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    bgra = cv2.cvtColor(to_image(field, bit_depth), cv2.COLOR_RGBA2BGRA)

    if not cv2.imwrite(str(file_path), bgra):
        raise TextureExportError(f"Failed to write flowmap texture: {file_path}")

    logger.info(
        f"Flowmap texture baked: {file_path} "
        f"({field.resolution}x{field.resolution}, {bit_depth}-bit)"
    )
    return file_path


def load_flowmap_png(path: str, bias: Iterable[float] = (0.0, 0.0)) -> FlowField:
    """
    Read a baked flowmap back into a field.

    Args:
        path: PNG file written by save_flowmap_png (or compatible)
        bias: Bias to attach to the loaded field

    Returns:
        Flow field with directions decoded from R/G

    Raises:
        TextureExportError: If the file is missing, unreadable, or not a
            square image of a supported resolution
    """
    file_path = Path(path)
    if not file_path.exists():
        raise TextureExportError(f"Flowmap texture not found: {file_path}")

    image = cv2.imread(str(file_path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise TextureExportError(f"Failed to decode flowmap texture: {file_path}")

    if image.ndim != 3 or image.shape[2] < 3:
        raise TextureExportError(
            f"Flowmap texture must have color channels, got shape {image.shape}"
        )

    height, width = image.shape[:2]
    if height != width or height not in SUPPORTED_RESOLUTIONS:
        raise TextureExportError(
            f"Flowmap texture must be square with a side in {SUPPORTED_RESOLUTIONS}, "
            f"got {width}x{height}"
        )

    if image.shape[2] == 4:
        rgb = cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    else:
        rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)

    channels = rgb.astype(np.float64) / float(np.iinfo(image.dtype).max)
    directions = decode_array(np.flipud(channels))

    logger.info(f"Loaded flowmap texture: {file_path} ({width}x{height})")
    return FlowField.from_directions(directions, bias)
