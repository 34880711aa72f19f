"""
Surface Models
==============

Value types describing the planar surface a flow field is computed over.

The host supplies the surface once per rebuild. The core never reads
transforms or mesh bounds from ambient state: everything it needs is
carried by a SurfaceDescriptor.

Conventions:
    - Local surface plane is XZ (Y is the surface normal)
    - Orientation is a quaternion in (x, y, z, w) order
    - Size is the local extent of the surface mesh (width along X,
      depth along Z)
"""

import math
from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

from openflowmap.errors import PreconditionError


IDENTITY_ROTATION: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0)


@dataclass(frozen=True, slots=True)
class SurfaceSize:
    """
    Local extent of the surface.

    Attributes:
        width: Extent along local X (world units)
        depth: Extent along local Z (world units)
    """

    width: float
    depth: float

    def __post_init__(self) -> None:
        """Validate invariants."""
        if not (math.isfinite(self.width) and self.width > 0):
            raise PreconditionError(f"Surface width must be positive, got {self.width}")
        if not (math.isfinite(self.depth) and self.depth > 0):
            raise PreconditionError(f"Surface depth must be positive, got {self.depth}")


@dataclass(frozen=True, slots=True)
class Pose:
    """
    World placement of the surface.

    Attributes:
        position: World position of the surface center (x, y, z)
        orientation: Rotation quaternion (x, y, z, w), normalized on use
    """

    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    orientation: Tuple[float, float, float, float] = IDENTITY_ROTATION

    def __post_init__(self) -> None:
        """Validate invariants."""
        if len(self.position) != 3:
            raise PreconditionError(f"Pose position needs 3 components, got {len(self.position)}")
        if len(self.orientation) != 4:
            raise PreconditionError(
                f"Pose orientation needs 4 components (x, y, z, w), got {len(self.orientation)}"
            )
        norm = math.sqrt(sum(c * c for c in self.orientation))
        if not (math.isfinite(norm) and norm > 0):
            raise PreconditionError("Pose orientation quaternion must be non-zero")

    @property
    def position_array(self) -> np.ndarray:
        """Position as a float64 array of shape (3,)."""
        return np.asarray(self.position, dtype=np.float64)

    @property
    def orientation_array(self) -> np.ndarray:
        """Orientation as a float64 array of shape (4,)."""
        return np.asarray(self.orientation, dtype=np.float64)


@dataclass(frozen=True, slots=True)
class SurfaceDescriptor:
    """
    Everything the field builder needs to know about the host surface.

    A size or pose change requires a full rebuild of the field.

    Attributes:
        size: Local surface extent
        pose: World placement
    """

    size: SurfaceSize
    pose: Pose = field(default_factory=Pose)
