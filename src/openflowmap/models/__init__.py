"""
Data Models
===========

Value types for the flow field engine.

This module re-exports all data models for convenient access.

Models:
    Surface:
        - SurfaceSize, Pose, SurfaceDescriptor: Host surface description
    
    Obstacles:
        - SolidShape, HeightField: Capability protocols
        - SolidObstacle, TerrainObstacle, Obstacle: Closed obstacle union
        - SphereShape, BoxShape, HeightMapTerrain: Reference shapes
"""

from openflowmap.models.surface import Pose, SurfaceDescriptor, SurfaceSize
from openflowmap.models.obstacles import (
    BoxShape,
    HeightField,
    HeightMapTerrain,
    Obstacle,
    SolidObstacle,
    SolidShape,
    SphereShape,
    TerrainObstacle,
)

__all__ = [
    # Surface
    "SurfaceSize",
    "Pose",
    "SurfaceDescriptor",
    # Obstacles
    "SolidShape",
    "HeightField",
    "SolidObstacle",
    "TerrainObstacle",
    "Obstacle",
    "SphereShape",
    "BoxShape",
    "HeightMapTerrain",
]
