"""
Vector Codec
============

Mapping between flow directions and fixed-range texture colors.

Encoding:
    channel = axis + 0.5, clamped to [0, 1]
    R, G = encoded x/y axes, B = 0, A = 1

Decoding:
    axis = channel - 0.5

Directions with components in [-0.5, 0.5] survive a round trip exactly;
anything outside saturates at the channel limits. The codec never
normalizes magnitude. Callers that want unit vectors normalize first.
"""

import numpy as np


CHANNEL_MIN = 0.0
CHANNEL_MAX = 1.0
CHANNEL_OFFSET = 0.5


def encode(direction) -> np.ndarray:
    """
    Encode one direction as an RGBA color.

    Args:
        direction: 2D direction (x, y)

    Returns:
        Color array of shape (4,) with channels in [0, 1]
    """
    return encode_array(np.asarray(direction, dtype=np.float64))


def decode(color) -> np.ndarray:
    """
    Decode one color back into a direction.

    Args:
        color: Color with at least R and G channels

    Returns:
        Direction array of shape (2,)
    """
    return decode_array(np.asarray(color, dtype=np.float64))


def encode_array(directions: np.ndarray) -> np.ndarray:
    """
    Encode an array of directions.

    Args:
        directions: Array of shape (..., 2)

    Returns:
        Array of shape (..., 4), RGBA with B=0 and A=1
    """
    directions = np.asarray(directions, dtype=np.float64)
    if directions.shape[-1] != 2:
        raise ValueError(f"Directions must have a trailing axis of 2, got {directions.shape}")

    colors = np.zeros(directions.shape[:-1] + (4,), dtype=np.float64)
    colors[..., :2] = np.clip(directions + CHANNEL_OFFSET, CHANNEL_MIN, CHANNEL_MAX)
    colors[..., 3] = 1.0
    return colors


def decode_array(colors: np.ndarray) -> np.ndarray:
    """
    Decode an array of colors.

    Args:
        colors: Array of shape (..., C) with C >= 2

    Returns:
        Array of shape (..., 2)
    """
    colors = np.asarray(colors, dtype=np.float64)
    if colors.shape[-1] < 2:
        raise ValueError(f"Colors need at least 2 channels, got {colors.shape}")
    return colors[..., :2] - CHANNEL_OFFSET
