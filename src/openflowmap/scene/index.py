"""
Obstacle Index
==============

Spatial query collaborator: which obstacles are near a sample point?

The field builder only depends on the ObstacleQuery protocol. ObstacleIndex
is a linear-scan implementation good enough for scenes with a few dozen
obstacles; hosts with a real physics engine plug in their own.

Results go into a HitBuffer with a fixed capacity that the caller owns and
reuses across samples. Hits beyond the capacity are counted but dropped,
which is a tuning concern, not an error.
"""

import logging
from typing import Iterator, List, Optional, Protocol, Sequence

import numpy as np

from openflowmap.errors import PreconditionError
from openflowmap.models.obstacles import Obstacle, SolidObstacle, TerrainObstacle


logger = logging.getLogger(__name__)


DEFAULT_CAPACITY = 5


class HitBuffer:
    """
    Fixed-capacity scratch buffer for obstacle query results.

    Attributes:
        capacity: Maximum number of stored hits
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise PreconditionError(f"Hit buffer capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._slots: List[Optional[Obstacle]] = [None] * capacity
        self._count = 0

    def clear(self) -> None:
        self._count = 0

    def add(self, obstacle: Obstacle) -> bool:
        """Store a hit. Returns False if the buffer is already full."""
        if self._count >= self.capacity:
            return False
        self._slots[self._count] = obstacle
        self._count += 1
        return True

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[Obstacle]:
        for i in range(self._count):
            yield self._slots[i]


class ObstacleQuery(Protocol):
    """Protocol for spatial query backends."""

    def query_nearby(self, point: np.ndarray, radius: float, buffer: HitBuffer) -> int:
        """
        Collect obstacles within `radius` of `point`.

        Args:
            point: World position, shape (3,)
            radius: Query radius
            buffer: Cleared and filled with up to `buffer.capacity` hits

        Returns:
            Total number of hits, which may exceed the buffer capacity
        """
        ...


class ObstacleIndex:
    """
    Linear-scan obstacle query over a fixed obstacle list.

    Hit tests:
        - Solid: closest point lies within `radius`
        - Terrain: query sphere overlaps the footprint box
          (origin .. origin + size)
    """

    def __init__(self, obstacles: Sequence[Obstacle] = ()) -> None:
        self.obstacles: List[Obstacle] = list(obstacles)
        for obstacle in self.obstacles:
            if not isinstance(obstacle, (SolidObstacle, TerrainObstacle)):
                raise TypeError(
                    f"Unsupported obstacle type {type(obstacle).__name__}"
                )

        logger.info(f"ObstacleIndex initialized: {len(self.obstacles)} obstacles")

    def query_nearby(self, point: np.ndarray, radius: float, buffer: HitBuffer) -> int:
        buffer.clear()
        hits = 0
        for obstacle in self.obstacles:
            if self._is_near(obstacle, point, radius):
                buffer.add(obstacle)
                hits += 1
        return hits

    @staticmethod
    def _is_near(obstacle: Obstacle, point: np.ndarray, radius: float) -> bool:
        if isinstance(obstacle, SolidObstacle):
            closest = np.asarray(obstacle.shape.closest_point(point), dtype=np.float64)
            return float(np.linalg.norm(point - closest)) <= radius

        terrain = obstacle.terrain
        low = terrain.origin
        high = terrain.origin + terrain.size
        nearest = np.clip(point, np.minimum(low, high), np.maximum(low, high))
        return float(np.linalg.norm(point - nearest)) <= radius
