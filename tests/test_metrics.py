"""
Field Diagnostics Tests
=======================
"""

import numpy as np
import pytest

from openflowmap.field.grid import FlowField
from openflowmap.field.metrics import (
    compute_angular_variance,
    compute_direction_entropy,
    compute_flow_coherence,
    compute_mean_flow_direction,
    compute_mean_flow_magnitude,
    summarize_field,
)


class TestUniformField:
    """A field where every cell points the same way."""

    @pytest.fixture
    def field(self):
        return FlowField(32, bias=(0.0, 0.3))

    def test_mean_magnitude(self, field):
        assert compute_mean_flow_magnitude(field) == pytest.approx(0.3)

    def test_mean_direction(self, field):
        assert compute_mean_flow_direction(field) == pytest.approx(np.pi / 2)

    def test_fully_coherent(self, field):
        coherence, active = compute_flow_coherence(field)
        assert coherence == pytest.approx(1.0)
        assert active == 32 * 32

    def test_zero_entropy(self, field):
        assert compute_direction_entropy(field) == pytest.approx(0.0)


class TestEmptyField:
    """A field with no usable direction anywhere."""

    def test_no_direction(self):
        field = FlowField(32)
        assert compute_mean_flow_direction(field) is None
        assert compute_angular_variance(field) == (1.0, 0)
        assert compute_direction_entropy(field) == 1.0


class TestOpposingField:
    """Half the cells point east, half west."""

    def test_cancelling_directions(self):
        directions = np.zeros((32, 32, 2))
        directions[:, :16, 0] = 0.4
        directions[:, 16:, 0] = -0.4
        field = FlowField.from_directions(directions)

        variance, active = compute_angular_variance(field)
        assert variance == pytest.approx(1.0)
        assert active == 32 * 32
        assert compute_flow_coherence(field)[0] == pytest.approx(0.5)


class TestSummary:
    """Tests for summarize_field."""

    def test_to_dict(self):
        summary = summarize_field(FlowField(32, bias=(0.2, 0.0)))
        data = summary.to_dict()
        assert data["resolution"] == 32
        assert data["mean_magnitude"] == pytest.approx(0.2)
        assert data["mean_direction"] == pytest.approx(0.0)
        assert data["active_cells"] == 1024
