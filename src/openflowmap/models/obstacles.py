"""
Obstacle Models
===============

The obstacles a flow field reacts to, and the capabilities the resolver
needs from them.

Obstacles form a CLOSED union of exactly two variants:
    - SolidObstacle: any solid exposing a closest-surface-point query
    - TerrainObstacle: a height field exposing height and normal queries
      over a rectangular footprint

The resolver dispatches on these two types explicitly. Supporting a third
kind of obstacle means adding a variant here AND a branch in the resolver;
it is not an open extension point.

Reference shapes (SphereShape, BoxShape, HeightMapTerrain) implement the
capability protocols so that scenes can be described without a host engine.

Coordinates are WORLD SPACE with Y up.
"""

import logging
from dataclasses import dataclass
from typing import Protocol, Sequence, Union

import numpy as np

from openflowmap.errors import PreconditionError


logger = logging.getLogger(__name__)


# =============================================================================
# Capability Protocols
# =============================================================================

class SolidShape(Protocol):
    """Capability of a generic solid obstacle."""

    def closest_point(self, query: np.ndarray) -> np.ndarray:
        """
        Return the point on (or inside) the solid closest to `query`.

        Args:
            query: World position, shape (3,)

        Returns:
            World position, shape (3,). Equals `query` when it lies inside.
        """
        ...


class HeightField(Protocol):
    """
    Capability of a height-field terrain.

    The terrain is defined over a footprint box starting at `origin` and
    spanning `size` (x extent, max height, z extent).
    """

    @property
    def origin(self) -> np.ndarray:
        """World position of the footprint corner, shape (3,)."""
        ...

    @property
    def size(self) -> np.ndarray:
        """Footprint extent (x, height, z), shape (3,)."""
        ...

    def height_at(self, x: float, z: float) -> float:
        """World-space surface height at world (x, z)."""
        ...

    def normal_at(self, u: float, v: float) -> np.ndarray:
        """Interpolated unit normal at normalized footprint coords (u, v)."""
        ...


# =============================================================================
# Obstacle Variants
# =============================================================================

@dataclass(frozen=True, slots=True)
class SolidObstacle:
    """Generic solid obstacle (distance-based influence)."""

    shape: SolidShape


@dataclass(frozen=True, slots=True)
class TerrainObstacle:
    """Height-field terrain obstacle (shoreline/normal-based influence)."""

    terrain: HeightField


Obstacle = Union[SolidObstacle, TerrainObstacle]


# =============================================================================
# Reference Shapes
# =============================================================================

def _vec3(values: Sequence[float], name: str) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float64)
    if arr.shape != (3,):
        raise PreconditionError(f"{name} must have 3 components, got shape {arr.shape}")
    return arr


class SphereShape:
    """Solid sphere."""

    def __init__(self, center: Sequence[float], radius: float) -> None:
        if radius <= 0:
            raise PreconditionError(f"Sphere radius must be positive, got {radius}")
        self.center = _vec3(center, "Sphere center")
        self.radius = float(radius)

    def closest_point(self, query: np.ndarray) -> np.ndarray:
        offset = np.asarray(query, dtype=np.float64) - self.center
        dist = float(np.linalg.norm(offset))
        if dist <= self.radius:
            return np.array(query, dtype=np.float64)
        return self.center + offset * (self.radius / dist)


class BoxShape:
    """Solid axis-aligned box."""

    def __init__(self, center: Sequence[float], half_extents: Sequence[float]) -> None:
        self.center = _vec3(center, "Box center")
        self.half_extents = _vec3(half_extents, "Box half extents")
        if np.any(self.half_extents <= 0):
            raise PreconditionError(
                f"Box half extents must be positive, got {self.half_extents.tolist()}"
            )

    def closest_point(self, query: np.ndarray) -> np.ndarray:
        low = self.center - self.half_extents
        high = self.center + self.half_extents
        return np.clip(np.asarray(query, dtype=np.float64), low, high)


class HeightMapTerrain:
    """
    Terrain sampled from a regular grid of heights.

    `heights[row, col]` is the local height (0 .. size.y) at
    x = origin.x + col / (cols - 1) * size.x and
    z = origin.z + row / (rows - 1) * size.z.
    Heights and normals are bilinearly interpolated; queries outside the
    footprint clamp to its edge.

    Attributes:
        heights: Local heights, shape (rows, cols), rows and cols >= 2
    """

    def __init__(
        self,
        heights: np.ndarray,
        origin: Sequence[float],
        size: Sequence[float],
    ) -> None:
        """
        Initialize terrain from a height grid.

        Args:
            heights: 2D array of local heights
            origin: World position of the footprint corner
            size: Footprint extent (x, height, z)

        Raises:
            PreconditionError: If the footprint or height grid is degenerate
        """
        self.heights = np.asarray(heights, dtype=np.float64)
        self._origin = _vec3(origin, "Terrain origin")
        self._size = _vec3(size, "Terrain size")

        if self.heights.ndim != 2 or min(self.heights.shape) < 2:
            raise PreconditionError(
                f"Terrain heights must be a 2D grid of at least 2x2, got {self.heights.shape}"
            )
        if self._size[0] <= 0 or self._size[2] <= 0:
            raise PreconditionError(
                f"Terrain footprint must have positive x/z size, got {self._size.tolist()}"
            )

        rows, cols = self.heights.shape
        cell_x = self._size[0] / (cols - 1)
        cell_z = self._size[2] / (rows - 1)
        grad_z, grad_x = np.gradient(self.heights, cell_z, cell_x)

        normals = np.stack([-grad_x, np.ones_like(grad_x), -grad_z], axis=-1)
        self._normals = normals / np.linalg.norm(normals, axis=-1, keepdims=True)

        logger.debug(
            f"HeightMapTerrain initialized: grid={rows}x{cols}, "
            f"origin={self._origin.tolist()}, size={self._size.tolist()}"
        )

    @property
    def origin(self) -> np.ndarray:
        return self._origin

    @property
    def size(self) -> np.ndarray:
        return self._size

    def height_at(self, x: float, z: float) -> float:
        u = (x - self._origin[0]) / self._size[0]
        v = (z - self._origin[2]) / self._size[2]
        return float(self._bilinear(self.heights, u, v)) + float(self._origin[1])

    def normal_at(self, u: float, v: float) -> np.ndarray:
        normal = self._bilinear(self._normals, u, v)
        return normal / np.linalg.norm(normal)

    @staticmethod
    def _bilinear(grid: np.ndarray, u: float, v: float):
        """Sample grid[row, col, ...] at normalized (u, v), clamped."""
        rows, cols = grid.shape[:2]
        fx = min(max(u, 0.0), 1.0) * (cols - 1)
        fz = min(max(v, 0.0), 1.0) * (rows - 1)

        c0 = min(int(fx), cols - 2)
        r0 = min(int(fz), rows - 2)
        tx = fx - c0
        tz = fz - r0

        top = grid[r0, c0] * (1 - tx) + grid[r0, c0 + 1] * tx
        bottom = grid[r0 + 1, c0] * (1 - tx) + grid[r0 + 1, c0 + 1] * tx
        return top * (1 - tz) + bottom * tz
