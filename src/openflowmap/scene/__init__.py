"""
Scene Module
============

Reference collaborators for running the engine without a host:
obstacle spatial queries and scene file loading.
"""

from openflowmap.scene.index import HitBuffer, ObstacleIndex, ObstacleQuery
from openflowmap.scene.loader import Scene, SceneLoader, read_heightmap

__all__ = [
    "HitBuffer",
    "ObstacleIndex",
    "ObstacleQuery",
    "Scene",
    "SceneLoader",
    "read_heightmap",
]
