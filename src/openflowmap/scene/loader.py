"""
Scene Loading
=============

Loads scene definitions from JSON and turns them into runtime objects.

This module handles:
    - Parsing and validating scene files (SceneDefinition)
    - Building the SurfaceDescriptor
    - Building obstacles, including terrain heightmaps read via OpenCV

Example:
    from openflowmap.scene import SceneLoader

    loader = SceneLoader()
    scene = loader.load_from_file("./scenes/harbor.json")
    field = builder.build(scene.surface)
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import cv2
import numpy as np

from openflowmap.models.obstacles import (
    BoxShape,
    HeightMapTerrain,
    Obstacle,
    SolidObstacle,
    SphereShape,
    TerrainObstacle,
)
from openflowmap.models.scene import (
    BoxObstacleModel,
    SceneDefinition,
    SphereObstacleModel,
    SurfaceModel,
    TerrainObstacleModel,
)
from openflowmap.models.surface import Pose, SurfaceDescriptor, SurfaceSize
from openflowmap.scene.index import ObstacleIndex


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scene:
    """
    Runtime scene ready for a field build.

    Attributes:
        scene_id: Scene identifier
        surface: Surface descriptor
        obstacles: Runtime obstacles
        bias: Scene bias, None to use the configured bias
    """

    scene_id: str
    surface: SurfaceDescriptor
    obstacles: Tuple[Obstacle, ...]
    bias: Optional[Tuple[float, float]] = None

    def build_index(self) -> ObstacleIndex:
        """Create a spatial index over this scene's obstacles."""
        return ObstacleIndex(self.obstacles)


class SceneLoader:
    """Loader for scene definition files."""

    def load_from_file(self, path: str) -> Scene:
        """
        Load a scene from a JSON file.

        Args:
            path: Path to the scene JSON file

        Returns:
            Runtime scene

        Raises:
            FileNotFoundError: If the scene or a referenced heightmap is missing
            pydantic.ValidationError: If the scene content is invalid
        """
        file_path = Path(path)

        if not file_path.exists():
            raise FileNotFoundError(f"Scene file not found: {path}")

        logger.info(f"Loading scene from: {path}")

        with open(file_path, "r") as f:
            data = json.load(f)

        return self.load_scene(data, base_dir=file_path.parent)

    def load_scene(self, data: dict, base_dir: Optional[Path] = None) -> Scene:
        """
        Build a runtime scene from already-parsed JSON data.

        Args:
            data: Scene dictionary
            base_dir: Directory that relative heightmap paths resolve against
        """
        definition = SceneDefinition.model_validate(data)
        base_dir = base_dir or Path(".")

        obstacles = [self._build_obstacle(o, base_dir) for o in definition.obstacles]
        scene = Scene(
            scene_id=definition.scene_id,
            surface=self._build_surface(definition.surface),
            obstacles=tuple(obstacles),
            bias=definition.bias,
        )

        logger.info(
            f"Loaded scene: id={scene.scene_id}, obstacles={len(scene.obstacles)}"
        )
        return scene

    @staticmethod
    def _build_surface(model: SurfaceModel) -> SurfaceDescriptor:
        return SurfaceDescriptor(
            size=SurfaceSize(width=model.size.width, depth=model.size.depth),
            pose=Pose(
                position=tuple(model.pose.position),
                orientation=tuple(model.pose.orientation),
            ),
        )

    def _build_obstacle(self, model, base_dir: Path) -> Obstacle:
        if isinstance(model, SphereObstacleModel):
            return SolidObstacle(SphereShape(model.center, model.radius))
        if isinstance(model, BoxObstacleModel):
            return SolidObstacle(BoxShape(model.center, model.half_extents))
        if isinstance(model, TerrainObstacleModel):
            if model.heights is not None:
                heights = np.asarray(model.heights, dtype=np.float64)
            else:
                heights = read_heightmap(base_dir / model.heightmap_path, model.size[1])
            return TerrainObstacle(HeightMapTerrain(heights, model.origin, model.size))
        raise TypeError(f"Unsupported obstacle model {type(model).__name__}")


def read_heightmap(path: Path, max_height: float) -> np.ndarray:
    """
    Read a grayscale heightmap image as local heights.

    Pixel values are normalized by the dtype range and scaled to
    `max_height`. Image row 0 is the far (max Z) edge of the footprint.

    Raises:
        FileNotFoundError: If the image is missing or unreadable
    """
    if not Path(path).exists():
        raise FileNotFoundError(f"Heightmap not found: {path}")

    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise FileNotFoundError(f"Heightmap could not be decoded: {path}")

    if image.ndim == 3:
        image = cv2.cvtColor(image[..., :3], cv2.COLOR_BGR2GRAY)

    if np.issubdtype(image.dtype, np.integer):
        scale = float(np.iinfo(image.dtype).max)
    else:
        scale = 1.0

    heights = np.flipud(image.astype(np.float64) / scale) * max_height
    logger.debug(f"Read heightmap {path}: {heights.shape[0]}x{heights.shape[1]}")
    return np.ascontiguousarray(heights)
