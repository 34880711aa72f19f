"""
Coordinate Mapping
==================

Conversion from flow field grid indices to world-space sample points.

Grid layout:
    - Cell (x, y) maps to local (x * width / R - width / 2, 0,
      y * depth / R - depth / 2)
    - Grid X follows local X, grid Y follows local Z
    - The grid is anchored at the surface center, so changing the
      resolution resamples the field without shifting it

Local points are then rotated by the pose orientation and translated by
the pose position.
"""

import numpy as np

from openflowmap.errors import PreconditionError
from openflowmap.models.surface import SurfaceDescriptor


def rotate(quaternion, vectors: np.ndarray) -> np.ndarray:
    """
    Rotate one or many 3D vectors by a quaternion.

    Args:
        quaternion: (x, y, z, w), normalized before use
        vectors: Array of shape (..., 3)

    Returns:
        Rotated vectors, same shape as input

    Raises:
        PreconditionError: If the quaternion has zero length
    """
    q = np.asarray(quaternion, dtype=np.float64)
    norm = np.linalg.norm(q)
    if norm == 0 or not np.isfinite(norm):
        raise PreconditionError("Cannot rotate by a zero-length quaternion")
    q = q / norm

    axis = q[:3]
    w = q[3]
    v = np.asarray(vectors, dtype=np.float64)

    # v' = v + w*t + axis x t, with t = 2 * (axis x v)
    t = 2.0 * np.cross(axis, v)
    return v + w * t + np.cross(axis, t)


def _check_resolution(resolution: int) -> None:
    if resolution <= 0:
        raise PreconditionError(f"Resolution must be positive, got {resolution}")


def grid_to_world(
    x: float,
    y: float,
    resolution: int,
    surface: SurfaceDescriptor,
) -> np.ndarray:
    """
    Compute the world position of one grid cell.

    Args:
        x: Grid column
        y: Grid row
        resolution: Grid resolution R
        surface: Surface size and pose

    Returns:
        World position, shape (3,)
    """
    _check_resolution(resolution)
    size = surface.size
    local = np.array(
        [
            x * size.width / resolution - size.width / 2.0,
            0.0,
            y * size.depth / resolution - size.depth / 2.0,
        ],
        dtype=np.float64,
    )
    return rotate(surface.pose.orientation, local) + surface.pose.position_array


def grid_points(resolution: int, surface: SurfaceDescriptor) -> np.ndarray:
    """
    Compute world positions for every grid cell at once.

    Args:
        resolution: Grid resolution R
        surface: Surface size and pose

    Returns:
        Array of shape (R, R, 3), indexed [y, x]
    """
    _check_resolution(resolution)
    size = surface.size
    steps = np.arange(resolution, dtype=np.float64)
    local_x = steps * size.width / resolution - size.width / 2.0
    local_z = steps * size.depth / resolution - size.depth / 2.0

    zz, xx = np.meshgrid(local_z, local_x, indexing="ij")
    local = np.stack([xx, np.zeros_like(xx), zz], axis=-1)
    return rotate(surface.pose.orientation, local) + surface.pose.position_array
