"""
Field Builder Tests
===================
"""

import logging

import numpy as np
import pytest

from conftest import OffsetShape
from openflowmap.config import Settings
from openflowmap.errors import PreconditionError
from openflowmap.field.blur import box_blur
from openflowmap.field.builder import FlowFieldBuilder
from openflowmap.models.obstacles import SolidObstacle, SphereShape
from openflowmap.scene.index import ObstacleIndex


class TestValidation:
    """Tests for fail-fast option validation."""

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"resolution": 100},
            {"radius": 0.0},
            {"radius": -1.0},
            {"blur_size": -1},
            {"blur_size": 1.7},
            {"blur_size": True},
            {"bias": (0.0,)},
            {"query_capacity": 0},
        ],
    )
    def test_invalid_options_rejected(self, kwargs):
        """Bad options raise PreconditionError at construction."""
        with pytest.raises(PreconditionError):
            FlowFieldBuilder(ObstacleIndex(), **kwargs)


class TestBuild:
    """Tests for full field builds."""

    def test_no_obstacles_yields_bias(self, unit_surface):
        """An empty scene stores the bias in every cell."""
        builder = FlowFieldBuilder(ObstacleIndex(), resolution=32, bias=(0.1, -0.05))
        field = builder.build(unit_surface)
        np.testing.assert_allclose(field.dx, 0.1)
        np.testing.assert_allclose(field.dy, -0.05)

    @pytest.mark.parametrize("distance", [0.15, 0.1])
    def test_obstacle_north_of_every_sample(self, unit_surface, distance):
        """A constant obstacle to the north turns every cell due south.

        At distance 0.1 the direction sits on -0.5, the bottom edge of the
        encodable range, so the green channel clamps to 0.
        """
        radius = 0.2
        north = SolidObstacle(OffsetShape((0.0, 0.0, distance)))
        builder = FlowFieldBuilder(
            ObstacleIndex([north]),
            resolution=32,
            radius=radius,
            bias=(0.0, 0.0),
        )

        field = builder.build(unit_surface)

        strength = 1.0 - distance / radius
        np.testing.assert_allclose(field.dx, 0.0, atol=1e-12)
        np.testing.assert_allclose(field.dy, -strength)

        raster = field.export_raster()
        np.testing.assert_allclose(raster[:, 0], field.dx.reshape(-1) + 0.5, atol=1e-12)
        np.testing.assert_allclose(raster[:, 1], field.dy.reshape(-1) + 0.5, atol=1e-12)

    def test_sphere_pushes_flow_outward(self, unit_surface):
        """Cells on either side of a sphere point away from it."""
        sphere = SolidObstacle(SphereShape((0.0, 0.0, 0.0), 0.1))
        builder = FlowFieldBuilder(ObstacleIndex([sphere]), resolution=64, radius=0.2)

        field = builder.build(unit_surface)

        # Cell 32 is the surface center; 2/64 world units per cell
        east = field.get(36, 32)
        west = field.get(28, 32)
        assert east[0] > 0
        assert west[0] < 0
        np.testing.assert_allclose(field.get(0, 0), (0.0, 0.0))

    def test_blur_applied_after_resolution(self, unit_surface):
        """blur_size > 0 matches blurring an unblurred build."""
        index = ObstacleIndex([SolidObstacle(SphereShape((0.2, 0.0, -0.1), 0.15))])
        raw = FlowFieldBuilder(index, resolution=32, radius=0.3).build(unit_surface)
        blurred = FlowFieldBuilder(index, resolution=32, radius=0.3, blur_size=2).build(unit_surface)

        np.testing.assert_allclose(blurred.directions, box_blur(raw, 2).directions)

    def test_each_build_is_fresh(self, unit_surface):
        """Rebuilding returns a new field and tracks the latest one."""
        builder = FlowFieldBuilder(ObstacleIndex(), resolution=32)
        assert builder.field is None
        first = builder.build(unit_surface)
        second = builder.build(unit_surface)
        assert first is not second
        assert builder.field is second

    def test_capacity_saturation_warns(self, unit_surface, caplog):
        """Exceeding the query capacity is logged, not raised."""
        obstacles = [SolidObstacle(OffsetShape((0.0, 0.0, 0.05))) for _ in range(4)]
        builder = FlowFieldBuilder(ObstacleIndex(obstacles), resolution=32, query_capacity=3)

        with caplog.at_level(logging.WARNING, logger="openflowmap.field.builder"):
            field = builder.build(unit_surface)

        assert any("query capacity" in r.getMessage() for r in caplog.records)
        np.testing.assert_allclose(field.dy, -0.75)

    def test_summary_reports_saturated_samples(self, unit_surface, caplog):
        """The INFO build summary carries the saturated sample count."""
        obstacles = [SolidObstacle(OffsetShape((0.0, 0.0, 0.05))) for _ in range(4)]
        builder = FlowFieldBuilder(ObstacleIndex(obstacles), resolution=32, query_capacity=3)

        with caplog.at_level(logging.INFO, logger="openflowmap.field.builder"):
            builder.build(unit_surface)

        summaries = [
            r.getMessage() for r in caplog.records
            if r.levelno == logging.INFO and "Flow field built" in r.getMessage()
        ]
        assert len(summaries) == 1
        assert "saturated=1024" in summaries[0]

    def test_summary_reports_zero_saturation(self, unit_surface, caplog):
        """A build within capacity reports saturated=0."""
        builder = FlowFieldBuilder(ObstacleIndex(), resolution=32)

        with caplog.at_level(logging.INFO, logger="openflowmap.field.builder"):
            builder.build(unit_surface)

        assert any("saturated=0" in r.getMessage() for r in caplog.records)


class TestFromSettings:
    """Tests for settings-driven construction."""

    def test_uses_configured_values(self):
        """Builder picks up flowmap and query settings."""
        settings = Settings.model_validate(
            {
                "flowmap": {"resolution": 64, "radius": 0.5, "blur_size": 2, "bias": [0.1, 0.2]},
                "query": {"capacity": 7},
            }
        )
        builder = FlowFieldBuilder.from_settings(settings, ObstacleIndex())
        assert builder.resolution == 64
        assert builder.radius == 0.5
        assert builder.blur_size == 2
        np.testing.assert_array_equal(builder.bias, (0.1, 0.2))
