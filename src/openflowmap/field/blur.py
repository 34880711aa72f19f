"""
Box Blur
========

Square-window smoothing of a flow field.

Each output cell is the unweighted mean of the (2r+1)^2 cells around it.
Neighbors outside the grid are clamped to the nearest edge cell (never
wrapped, never zero), and the divisor is always the full window count, so
border cells are pulled toward their own edge values.

The output is computed from a snapshot of the input into a fresh buffer.
"""

import logging

import numpy as np

from openflowmap.errors import PreconditionError
from openflowmap.field.grid import FlowField


logger = logging.getLogger(__name__)


def blur_directions(directions: np.ndarray, radius: int) -> np.ndarray:
    """
    Box-blur a raw (H, W, C) direction array with clamped borders.

    Args:
        directions: Input array (not modified)
        radius: Window radius r >= 0

    Returns:
        New array of the same shape

    Raises:
        PreconditionError: If radius is negative
    """
    if radius < 0:
        raise PreconditionError(f"Blur radius must be >= 0, got {radius}")

    source = np.array(directions, dtype=np.float64)
    if radius == 0:
        return source

    height, width = source.shape[:2]
    pad = ((radius, radius), (radius, radius)) + ((0, 0),) * (source.ndim - 2)
    padded = np.pad(source, pad, mode="edge")

    total = np.zeros_like(source)
    diameter = 2 * radius + 1
    for j in range(diameter):
        for i in range(diameter):
            total += padded[j:j + height, i:i + width]

    return total / (diameter * diameter)


def box_blur(field: FlowField, radius: int) -> FlowField:
    """
    Blur a flow field with a square box window.

    Args:
        field: Input field (not modified)
        radius: Window radius r >= 0; window diameter is 2r + 1

    Returns:
        The input itself when radius is 0, otherwise a new field with the
        same resolution and bias

    Raises:
        PreconditionError: If radius is negative
    """
    if radius < 0:
        raise PreconditionError(f"Blur radius must be >= 0, got {radius}")
    if radius == 0:
        return field

    blurred = blur_directions(field.directions, radius)

    logger.debug(f"Box blur applied: {field.resolution}x{field.resolution}, radius={radius}")
    return FlowField.from_directions(blurred, field.bias)
