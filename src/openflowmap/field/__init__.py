"""
Flow Field Module
=================

Computation and filtering of surface flow fields.

This module provides:
    - Vector codec (direction <-> texture color)
    - Grid-to-world coordinate mapping
    - Obstacle influence resolution
    - The FlowField grid and its box blur
    - Field builder and diagnostics
"""

from openflowmap.field.codec import decode, decode_array, encode, encode_array
from openflowmap.field.coordinates import grid_points, grid_to_world, rotate
from openflowmap.field.resolver import resolve
from openflowmap.field.grid import SUPPORTED_RESOLUTIONS, FlowField, validate_resolution
from openflowmap.field.blur import blur_directions, box_blur
from openflowmap.field.builder import FlowFieldBuilder
from openflowmap.field.metrics import (
    FieldSummary,
    compute_angular_variance,
    compute_direction_entropy,
    compute_flow_coherence,
    compute_mean_flow_direction,
    compute_mean_flow_magnitude,
    summarize_field,
)

__all__ = [
    # Codec
    "encode",
    "decode",
    "encode_array",
    "decode_array",
    # Coordinates
    "grid_to_world",
    "grid_points",
    "rotate",
    # Resolution
    "resolve",
    # Grid
    "SUPPORTED_RESOLUTIONS",
    "FlowField",
    "validate_resolution",
    "box_blur",
    "blur_directions",
    "FlowFieldBuilder",
    # Diagnostics
    "FieldSummary",
    "compute_angular_variance",
    "compute_direction_entropy",
    "compute_flow_coherence",
    "compute_mean_flow_direction",
    "compute_mean_flow_magnitude",
    "summarize_field",
]
