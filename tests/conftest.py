"""
Test Configuration
==================

Pytest fixtures and test helpers for OpenFlowmap.
"""

import numpy as np
import pytest

from openflowmap.models.surface import Pose, SurfaceDescriptor, SurfaceSize


class OffsetShape:
    """Solid whose closest point is always at a fixed offset from the query."""

    def __init__(self, offset):
        self.offset = np.asarray(offset, dtype=np.float64)

    def closest_point(self, query):
        return np.asarray(query, dtype=np.float64) + self.offset


class StubTerrain:
    """Height field with constant height and normal; records normal queries."""

    def __init__(self, height=0.0, normal=(0.0, 1.0, 0.0), origin=(-1.0, 0.0, -1.0), size=(2.0, 1.0, 2.0)):
        self.height = height
        self.normal = np.asarray(normal, dtype=np.float64)
        self._origin = np.asarray(origin, dtype=np.float64)
        self._size = np.asarray(size, dtype=np.float64)
        self.normal_queries = []

    @property
    def origin(self):
        return self._origin

    @property
    def size(self):
        return self._size

    def height_at(self, x, z):
        return self.height

    def normal_at(self, u, v):
        self.normal_queries.append((u, v))
        return self.normal / np.linalg.norm(self.normal)


@pytest.fixture
def unit_surface():
    """Provide a 2x2 surface at the world origin."""
    return SurfaceDescriptor(size=SurfaceSize(width=2.0, depth=2.0))


@pytest.fixture
def rotated_surface():
    """Provide a 4x2 surface rotated 90 degrees about Y and lifted."""
    half = np.sqrt(0.5)
    return SurfaceDescriptor(
        size=SurfaceSize(width=4.0, depth=2.0),
        pose=Pose(position=(1.0, 2.0, 3.0), orientation=(0.0, half, 0.0, half)),
    )


@pytest.fixture
def sample_scene():
    """Provide a scene dictionary with every obstacle kind."""
    return {
        "scene_id": "test_harbor",
        "surface": {
            "size": {"width": 2.0, "depth": 2.0},
            "pose": {"position": [0, 0, 0], "orientation": [0, 0, 0, 1]},
        },
        "bias": [0.05, 0.0],
        "obstacles": [
            {"type": "sphere", "center": [0.5, 0.0, 0.5], "radius": 0.1},
            {"type": "box", "center": [-0.5, 0.0, -0.5], "half_extents": [0.1, 0.2, 0.1]},
            {
                "type": "terrain",
                "origin": [-1.0, -0.5, -1.0],
                "size": [2.0, 1.0, 2.0],
                "heights": [[0.0, 0.25, 0.5], [0.0, 0.25, 0.5], [0.0, 0.25, 0.5]],
            },
        ],
    }
