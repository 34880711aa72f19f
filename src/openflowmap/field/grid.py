"""
Flow Field Grid
===============

The owned R x R buffer of flow directions.

Each cell holds a decoded direction (x, y). The buffer is stored as a
float64 array of shape (R, R, 2) indexed [y, x], so row-major order in
the exported raster is index = y * R + x.

Key Design Decisions:
    - Resolution is restricted to the supported texture sizes
    - rebuild() always reallocates, never resizes in place
    - A fresh buffer holds `bias` in every cell, which is what an
      obstacle-free build would produce
"""

import logging
from typing import Iterable, Tuple

import numpy as np

from openflowmap.errors import GridIndexError, PreconditionError
from openflowmap.field.codec import encode_array


logger = logging.getLogger(__name__)


SUPPORTED_RESOLUTIONS: Tuple[int, ...] = (32, 64, 128, 256, 512, 1024)


def validate_resolution(resolution: int) -> int:
    """
    Check a grid resolution against the supported set.

    Raises:
        PreconditionError: If the resolution is not supported
    """
    if isinstance(resolution, bool) or not isinstance(resolution, (int, np.integer)):
        raise PreconditionError(f"Resolution must be an integer, got {resolution!r}")
    resolution = int(resolution)
    if resolution not in SUPPORTED_RESOLUTIONS:
        raise PreconditionError(
            f"Unsupported resolution {resolution}; expected one of {SUPPORTED_RESOLUTIONS}"
        )
    return resolution


def _as_direction(value: Iterable[float], name: str) -> np.ndarray:
    arr = np.asarray(value, dtype=np.float64)
    if arr.shape != (2,):
        raise PreconditionError(f"{name} must have 2 components, got shape {arr.shape}")
    return arr


class FlowField:
    """
    Square grid of flow directions.

    Attributes:
        resolution: Grid side length R
        bias: Global bias direction the field was created with
    """

    def __init__(self, resolution: int, bias: Iterable[float] = (0.0, 0.0)) -> None:
        """
        Allocate a field filled with the bias direction.

        Args:
            resolution: Grid side length, one of SUPPORTED_RESOLUTIONS
            bias: Global bias direction (x, y)

        Raises:
            PreconditionError: If resolution or bias is invalid
        """
        self.resolution = 0
        self.bias = np.zeros(2, dtype=np.float64)
        self._data = np.zeros((0, 0, 2), dtype=np.float64)
        self.rebuild(resolution, bias)

    @classmethod
    def from_directions(
        cls,
        directions: np.ndarray,
        bias: Iterable[float] = (0.0, 0.0),
    ) -> "FlowField":
        """
        Create a field from an existing (R, R, 2) direction array.

        The array is copied.
        """
        directions = np.asarray(directions, dtype=np.float64)
        if directions.ndim != 3 or directions.shape[2] != 2 or directions.shape[0] != directions.shape[1]:
            raise PreconditionError(
                f"Directions must have shape (R, R, 2), got {directions.shape}"
            )
        field = cls(directions.shape[0], bias)
        field._data[...] = directions
        return field

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def rebuild(self, resolution: int, bias: Iterable[float]) -> None:
        """
        Reallocate the buffer, discarding all prior contents.

        Args:
            resolution: New grid side length
            bias: New global bias direction
        """
        resolution = validate_resolution(resolution)
        bias = _as_direction(bias, "Bias")

        self.resolution = resolution
        self.bias = bias
        self._data = np.empty((resolution, resolution, 2), dtype=np.float64)
        self._data[...] = bias

        logger.debug(f"FlowField allocated: {resolution}x{resolution}, bias={bias.tolist()}")

    def copy(self) -> "FlowField":
        """Return an independent copy of this field."""
        return FlowField.from_directions(self._data, self.bias)

    # -------------------------------------------------------------------------
    # Cell Access
    # -------------------------------------------------------------------------

    def _check_index(self, x: int, y: int) -> None:
        if not (0 <= x < self.resolution and 0 <= y < self.resolution):
            raise GridIndexError(
                f"Cell ({x}, {y}) out of range for {self.resolution}x{self.resolution} field"
            )

    def get(self, x: int, y: int) -> np.ndarray:
        """Return a copy of the direction at cell (x, y)."""
        self._check_index(x, y)
        return self._data[y, x].copy()

    def set(self, x: int, y: int, value: Iterable[float]) -> None:
        """Store a direction at cell (x, y)."""
        self._check_index(x, y)
        self._data[y, x] = _as_direction(value, "Direction")

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    @property
    def directions(self) -> np.ndarray:
        """Copy of the direction buffer, shape (R, R, 2) indexed [y, x]."""
        return self._data.copy()

    @property
    def dx(self) -> np.ndarray:
        """X component of every cell, shape (R, R)."""
        return self._data[..., 0].copy()

    @property
    def dy(self) -> np.ndarray:
        """Y component of every cell, shape (R, R)."""
        return self._data[..., 1].copy()

    @property
    def magnitude(self) -> np.ndarray:
        """Direction length at each cell."""
        return np.sqrt(self._data[..., 0] ** 2 + self._data[..., 1] ** 2)

    @property
    def angle(self) -> np.ndarray:
        """Direction angle at each cell (radians)."""
        return np.arctan2(self._data[..., 1], self._data[..., 0])

    def export_raster(self) -> np.ndarray:
        """
        Encode every cell as an RGBA color.

        Returns:
            Array of shape (R * R, 4), row-major (index = y * R + x)
        """
        return encode_array(self._data).reshape(self.resolution * self.resolution, 4)

    def __len__(self) -> int:
        return self.resolution * self.resolution

    def __repr__(self) -> str:
        return f"FlowField(resolution={self.resolution}, bias={self.bias.tolist()})"
