"""
Obstacle Influence Resolver
===========================

Computes one flow value for a sample point from the obstacles near it.

Influence Models:
    Solid obstacle:
        dist     = |point - closest_point|
        strength = 1 - clamp01(dist / radius)
        contrib  = normalize(point.xz - closest.xz) * strength

    Terrain obstacle:
        dy       = min(terrain_height(x, z) - point.y, 0)
        strength = 1 - clamp01(|dy| / radius)
        contrib  = normalize(terrain_normal.xz) * strength

    Terrain influence uses ONLY the vertical distance to the shoreline,
    while solids use the full 3D distance to their closest point.

Aggregation:
    result = mean(contribs) + (0.5, 0.5) + bias
    result = (0.5, 0.5) + bias              (no obstacles)

The result is in texture-channel space (centered on 0.5). The field
builder decodes it before storing. Obstacle order does not matter.

Degenerate offsets (sample coincident with a closest point, flat terrain)
contribute a zero vector rather than NaN.
"""

import logging
from typing import Iterable

import numpy as np

from openflowmap.models.obstacles import Obstacle, SolidObstacle, TerrainObstacle


logger = logging.getLogger(__name__)


CENTER = np.array([0.5, 0.5], dtype=np.float64)

# Horizontal offsets shorter than this are treated as zero-length
NORMALIZE_EPSILON = 1e-12


def _clamp01(value: float) -> float:
    return min(max(value, 0.0), 1.0)


def _normalize_or_zero(vector: np.ndarray) -> np.ndarray:
    length = float(np.hypot(vector[0], vector[1]))
    if length <= NORMALIZE_EPSILON:
        return np.zeros(2, dtype=np.float64)
    return vector / length


def solid_contribution(
    point: np.ndarray,
    obstacle: SolidObstacle,
    radius: float,
) -> np.ndarray:
    """
    Contribution of a solid: push away from its closest point.

    Args:
        point: Sample position, shape (3,)
        obstacle: Solid obstacle
        radius: Influence radius (> 0)

    Returns:
        Direction of shape (2,), magnitude in [0, 1]
    """
    closest = np.asarray(obstacle.shape.closest_point(point), dtype=np.float64)
    dist = float(np.linalg.norm(point - closest))
    strength = 1.0 - _clamp01(dist / radius)

    away = np.array([point[0] - closest[0], point[2] - closest[2]], dtype=np.float64)
    return _normalize_or_zero(away) * strength


def terrain_contribution(
    point: np.ndarray,
    obstacle: TerrainObstacle,
    radius: float,
) -> np.ndarray:
    """
    Contribution of a terrain: follow its downhill-facing normal.

    Strength peaks at the shoreline and fades as the sample rises above
    the terrain. Samples below the terrain surface get full strength.

    Args:
        point: Sample position, shape (3,)
        obstacle: Terrain obstacle
        radius: Influence radius (> 0)

    Returns:
        Direction of shape (2,), magnitude in [0, 1]
    """
    terrain = obstacle.terrain
    terrain_y = terrain.height_at(point[0], point[2])

    dy = terrain_y - point[1]
    if dy > 0:
        dy = 0.0

    origin = terrain.origin
    size = terrain.size
    normal = terrain.normal_at(
        (point[0] - origin[0]) / size[0],
        (point[2] - origin[2]) / size[2],
    )
    horizontal = _normalize_or_zero(np.array([normal[0], normal[2]], dtype=np.float64))

    strength = 1.0 - _clamp01(abs(dy) / radius)
    return horizontal * strength


def contribution(point: np.ndarray, obstacle: Obstacle, radius: float) -> np.ndarray:
    """
    Dispatch to the influence model of the obstacle's variant.

    Raises:
        TypeError: If the obstacle is not one of the two known variants
    """
    if isinstance(obstacle, SolidObstacle):
        return solid_contribution(point, obstacle, radius)
    if isinstance(obstacle, TerrainObstacle):
        return terrain_contribution(point, obstacle, radius)
    raise TypeError(
        f"Unsupported obstacle type {type(obstacle).__name__}; "
        f"expected SolidObstacle or TerrainObstacle"
    )


def resolve(
    point,
    obstacles: Iterable[Obstacle],
    radius: float,
    bias,
) -> np.ndarray:
    """
    Resolve the flow value at a sample point.

    Args:
        point: Sample position, shape (3,)
        obstacles: Nearby obstacles (unordered)
        radius: Influence radius (> 0)
        bias: Global bias direction, shape (2,)

    Returns:
        Channel-space value of shape (2,): mean contribution + 0.5 + bias
    """
    point = np.asarray(point, dtype=np.float64)
    total = np.zeros(2, dtype=np.float64)
    count = 0

    for obstacle in obstacles:
        total += contribution(point, obstacle, radius)
        count += 1

    result = CENTER + np.asarray(bias, dtype=np.float64)
    if count > 0:
        result = result + total / count
    return result
