"""
Field Diagnostics
=================

Aggregate statistics of a computed flow field.

These summarize a whole field in a handful of numbers for logging and
for sanity checks after a rebuild. They do not feed back into the field.

Metrics:
    - Mean magnitude: average direction length
    - Mean direction: circular mean of cell angles
    - Angular variance: 1 - R, R = |mean(e^{i*theta})|
    - Coherence: 1 / (1 + angular_variance)
    - Direction entropy: normalized Shannon entropy of binned angles

Cells whose magnitude does not exceed `min_magnitude` carry no usable
direction and are left out of the angular metrics.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from openflowmap.field.grid import FlowField


logger = logging.getLogger(__name__)


DEFAULT_MIN_MAGNITUDE = 1e-3


def _active_angles(field: FlowField, min_magnitude: float) -> np.ndarray:
    return field.angle[field.magnitude > min_magnitude]


def compute_mean_flow_magnitude(field: FlowField) -> float:
    """Average direction length over all cells."""
    return float(np.mean(field.magnitude))


def compute_mean_flow_direction(
    field: FlowField,
    min_magnitude: float = DEFAULT_MIN_MAGNITUDE,
) -> Optional[float]:
    """
    Dominant direction of the field.

    Returns:
        Circular mean angle in radians [-pi, pi], or None if no cell
        has a usable direction
    """
    angles = _active_angles(field, min_magnitude)
    if angles.size == 0:
        return None
    return float(np.arctan2(np.mean(np.sin(angles)), np.mean(np.cos(angles))))


def compute_angular_variance(
    field: FlowField,
    min_magnitude: float = DEFAULT_MIN_MAGNITUDE,
) -> Tuple[float, int]:
    """
    Circular variance of cell directions.

    Returns:
        (variance, active_cell_count). Variance is in [0, 1], 0 when all
        cells point the same way. An empty selection reports 1.0.
    """
    angles = _active_angles(field, min_magnitude)
    if angles.size == 0:
        return 1.0, 0

    resultant = np.hypot(np.mean(np.cos(angles)), np.mean(np.sin(angles)))
    return float(1.0 - resultant), int(angles.size)


def compute_flow_coherence(
    field: FlowField,
    min_magnitude: float = DEFAULT_MIN_MAGNITUDE,
) -> Tuple[float, int]:
    """
    Directional alignment of the field, in [0.5, 1].

    Returns:
        (coherence, active_cell_count)
    """
    variance, active = compute_angular_variance(field, min_magnitude)
    return 1.0 / (1.0 + variance), active


def compute_direction_entropy(
    field: FlowField,
    num_bins: int = 8,
    min_magnitude: float = DEFAULT_MIN_MAGNITUDE,
) -> float:
    """
    Normalized entropy of the binned direction histogram.

    Returns:
        Value in [0, 1]; 1.0 when no cell has a usable direction
    """
    angles = _active_angles(field, min_magnitude)
    if angles.size == 0:
        return 1.0

    bins = ((angles + np.pi) / (2 * np.pi) * num_bins).astype(int)
    bins = np.clip(bins, 0, num_bins - 1)
    probabilities = np.bincount(bins, minlength=num_bins) / angles.size

    nonzero = probabilities[probabilities > 0]
    entropy = -np.sum(nonzero * np.log(nonzero))
    max_entropy = np.log(num_bins)
    return float(entropy / max_entropy) if max_entropy > 0 else 0.0


@dataclass(frozen=True, slots=True)
class FieldSummary:
    """
    Snapshot of field statistics.

    Attributes:
        resolution: Grid side length
        mean_magnitude: Average direction length
        mean_direction: Dominant angle in radians, None if undefined
        coherence: Directional alignment [0.5, 1]
        entropy: Normalized direction entropy [0, 1]
        active_cells: Cells with a usable direction
    """

    resolution: int
    mean_magnitude: float
    mean_direction: Optional[float]
    coherence: float
    entropy: float
    active_cells: int

    def to_dict(self) -> dict:
        """Export as dictionary for logging/serialization."""
        return {
            "resolution": self.resolution,
            "mean_magnitude": round(self.mean_magnitude, 4),
            "mean_direction": None if self.mean_direction is None else round(self.mean_direction, 4),
            "coherence": round(self.coherence, 4),
            "entropy": round(self.entropy, 4),
            "active_cells": self.active_cells,
        }


def summarize_field(
    field: FlowField,
    min_magnitude: float = DEFAULT_MIN_MAGNITUDE,
) -> FieldSummary:
    """Compute all diagnostics for a field."""
    coherence, active = compute_flow_coherence(field, min_magnitude)
    return FieldSummary(
        resolution=field.resolution,
        mean_magnitude=compute_mean_flow_magnitude(field),
        mean_direction=compute_mean_flow_direction(field, min_magnitude),
        coherence=coherence,
        entropy=compute_direction_entropy(field, min_magnitude=min_magnitude),
        active_cells=active,
    )
