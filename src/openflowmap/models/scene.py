"""
Scene Definition Models
=======================

Pydantic schema for scene files consumed by the command-line baker.

A scene is a surface plus the obstacles around it, EXPLICITLY DECLARED
in a JSON file:

    {
        "scene_id": "harbor",
        "surface": {
            "size": {"width": 10.0, "depth": 10.0},
            "pose": {"position": [0, 0, 0], "orientation": [0, 0, 0, 1]}
        },
        "bias": [0.1, 0.0],
        "obstacles": [
            {"type": "sphere", "center": [1, 0, 2], "radius": 0.5},
            {"type": "box", "center": [-2, 0, 0], "half_extents": [1, 1, 0.25]},
            {"type": "terrain", "origin": [-5, -1, -5], "size": [10, 2, 10],
             "heightmap_path": "island.png"}
        ]
    }

Terrain heights come either inline (`heights`, a 2D list of local
heights) or from a grayscale image (`heightmap_path`) scaled to size[1].
"""

from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field, field_validator, model_validator


Vec3 = Tuple[float, float, float]


class SurfaceSizeModel(BaseModel):
    """Local extent of the surface mesh."""

    width: float = Field(..., gt=0, description="Extent along local X")
    depth: float = Field(..., gt=0, description="Extent along local Z")


class PoseModel(BaseModel):
    """World placement of the surface."""

    position: Vec3 = Field(
        default=(0.0, 0.0, 0.0),
        description="World position of the surface center",
    )
    orientation: Tuple[float, float, float, float] = Field(
        default=(0.0, 0.0, 0.0, 1.0),
        description="Rotation quaternion (x, y, z, w)",
    )

    @field_validator("orientation")
    @classmethod
    def validate_orientation(cls, v):
        """Reject the zero quaternion."""
        if all(c == 0 for c in v):
            raise ValueError("Orientation quaternion must be non-zero")
        return v


class SurfaceModel(BaseModel):
    """Surface the flow field is computed over."""

    size: SurfaceSizeModel
    pose: PoseModel = Field(default_factory=PoseModel)


class SphereObstacleModel(BaseModel):
    """Solid sphere obstacle."""

    type: Literal["sphere"]
    center: Vec3
    radius: float = Field(..., gt=0)


class BoxObstacleModel(BaseModel):
    """Solid axis-aligned box obstacle."""

    type: Literal["box"]
    center: Vec3
    half_extents: Vec3

    @field_validator("half_extents")
    @classmethod
    def validate_half_extents(cls, v):
        """Ensure the box has volume."""
        if any(c <= 0 for c in v):
            raise ValueError("Box half extents must be positive")
        return v


class TerrainObstacleModel(BaseModel):
    """Height-field terrain obstacle."""

    type: Literal["terrain"]
    origin: Vec3 = Field(..., description="World position of the footprint corner")
    size: Vec3 = Field(..., description="Footprint extent (x, max height, z)")
    heights: Optional[List[List[float]]] = Field(
        default=None,
        description="Inline local heights, rows along Z",
    )
    heightmap_path: Optional[str] = Field(
        default=None,
        description="Grayscale image of heights, relative to the scene file",
    )

    @field_validator("size")
    @classmethod
    def validate_footprint(cls, v):
        """Ensure the footprint is not degenerate."""
        if v[0] <= 0 or v[2] <= 0:
            raise ValueError("Terrain footprint must have positive x/z size")
        return v

    @model_validator(mode="after")
    def validate_height_source(self):
        """Exactly one height source must be given."""
        if (self.heights is None) == (self.heightmap_path is None):
            raise ValueError("Terrain needs exactly one of 'heights' or 'heightmap_path'")
        if self.heights is not None:
            widths = {len(row) for row in self.heights}
            if len(self.heights) < 2 or len(widths) != 1 or widths.pop() < 2:
                raise ValueError("Terrain heights must be a rectangular grid of at least 2x2")
        return self


ObstacleModel = Annotated[
    Union[SphereObstacleModel, BoxObstacleModel, TerrainObstacleModel],
    Field(discriminator="type"),
]


class SceneDefinition(BaseModel):
    """
    Complete scene loaded from a JSON file.

    Attributes:
        scene_id: Identifier used for logging and output file names
        surface: Surface the field is computed over
        bias: Optional scene-specific bias (overrides configuration)
        obstacles: Obstacles influencing the field
    """

    scene_id: str = Field(..., min_length=1)
    surface: SurfaceModel
    bias: Optional[Tuple[float, float]] = Field(default=None)
    obstacles: List[ObstacleModel] = Field(default_factory=list)
