"""
Scene Loading Tests
===================
"""

import json

import cv2
import numpy as np
import pytest
from pydantic import ValidationError

from openflowmap.models.obstacles import SolidObstacle, TerrainObstacle
from openflowmap.scene.loader import SceneLoader


class TestLoadScene:
    """Tests for building scenes from dictionaries."""

    def test_all_obstacle_kinds(self, sample_scene):
        """Spheres and boxes become solids, terrain becomes a terrain obstacle."""
        scene = SceneLoader().load_scene(sample_scene)

        assert scene.scene_id == "test_harbor"
        assert scene.bias == (0.05, 0.0)
        kinds = [type(o) for o in scene.obstacles]
        assert kinds == [SolidObstacle, SolidObstacle, TerrainObstacle]
        assert scene.surface.size.width == 2.0

    def test_inline_terrain_heights(self, sample_scene):
        """Inline heights are offset by the terrain origin."""
        scene = SceneLoader().load_scene(sample_scene)
        terrain = scene.obstacles[2].terrain
        assert terrain.height_at(0.0, 0.0) == pytest.approx(-0.25)

    def test_build_index(self, sample_scene):
        """The scene indexes all its obstacles."""
        index = SceneLoader().load_scene(sample_scene).build_index()
        assert len(index.obstacles) == 3

    def test_unknown_obstacle_type(self, sample_scene):
        """Unknown obstacle types fail validation."""
        sample_scene["obstacles"].append({"type": "cylinder", "center": [0, 0, 0]})
        with pytest.raises(ValidationError):
            SceneLoader().load_scene(sample_scene)

    def test_terrain_needs_one_height_source(self, sample_scene):
        """Terrain with both height sources is rejected."""
        sample_scene["obstacles"][2]["heightmap_path"] = "island.png"
        with pytest.raises(ValidationError):
            SceneLoader().load_scene(sample_scene)

    def test_degenerate_surface(self, sample_scene):
        """Non-positive surface size fails validation."""
        sample_scene["surface"]["size"]["width"] = 0.0
        with pytest.raises(ValidationError):
            SceneLoader().load_scene(sample_scene)

    def test_degenerate_footprint(self, sample_scene):
        """A zero-width terrain footprint fails validation."""
        sample_scene["obstacles"][2]["size"] = [0.0, 1.0, 2.0]
        with pytest.raises(ValidationError):
            SceneLoader().load_scene(sample_scene)


class TestLoadFromFile:
    """Tests for reading scene files."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            SceneLoader().load_from_file(str(tmp_path / "missing.json"))

    def test_heightmap_image(self, tmp_path, sample_scene):
        """Heightmaps resolve relative to the scene file and scale to size.y."""
        image = np.zeros((4, 4), dtype=np.uint8)
        image[:, 2:] = 255
        cv2.imwrite(str(tmp_path / "island.png"), image)

        terrain_def = sample_scene["obstacles"][2]
        del terrain_def["heights"]
        terrain_def["heightmap_path"] = "island.png"
        terrain_def["origin"] = [0.0, 0.0, 0.0]
        terrain_def["size"] = [3.0, 2.0, 3.0]

        scene_path = tmp_path / "scene.json"
        scene_path.write_text(json.dumps(sample_scene))

        scene = SceneLoader().load_from_file(str(scene_path))
        terrain = scene.obstacles[2].terrain
        assert terrain.heights.shape == (4, 4)
        assert terrain.height_at(0.0, 1.5) == pytest.approx(0.0)
        assert terrain.height_at(3.0, 1.5) == pytest.approx(2.0)

    def test_missing_heightmap(self, tmp_path, sample_scene):
        terrain_def = sample_scene["obstacles"][2]
        del terrain_def["heights"]
        terrain_def["heightmap_path"] = "nowhere.png"
        scene_path = tmp_path / "scene.json"
        scene_path.write_text(json.dumps(sample_scene))

        with pytest.raises(FileNotFoundError):
            SceneLoader().load_from_file(str(scene_path))
