"""
OpenFlowmap Configuration
=========================

This module handles configuration loading for the flowmap baker.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    OPENFLOWMAP_CONFIG          -> path of the YAML file to load
    OPENFLOWMAP_RESOLUTION      -> flowmap.resolution
    OPENFLOWMAP_RADIUS          -> flowmap.radius
    OPENFLOWMAP_BLUR_SIZE       -> flowmap.blur_size
    OPENFLOWMAP_BIAS            -> flowmap.bias ("x,y")
    OPENFLOWMAP_QUERY_CAPACITY  -> query.capacity
    OPENFLOWMAP_OUTPUT_DIR      -> export.output_dir
    OPENFLOWMAP_LOG_LEVEL       -> logging.level

Example:
    from openflowmap.config import settings

    print(settings.flowmap.resolution)
    print(settings.flowmap.radius)
"""

import os
import logging
from pathlib import Path
from typing import Optional, Tuple

import yaml
from pydantic import BaseModel, Field, field_validator

from openflowmap.field.grid import SUPPORTED_RESOLUTIONS


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class FlowmapConfig(BaseModel):
    """Flow field computation options."""

    resolution: int = Field(
        default=128,
        description="Grid side length (32, 64, 128, 256, 512 or 1024)",
    )
    radius: float = Field(
        default=0.2,
        gt=0,
        description="Obstacle influence radius in world units",
    )
    blur_size: int = Field(
        default=1,
        ge=0,
        le=5,
        description="Box blur radius applied after resolution (0 = off)",
    )
    bias: Tuple[float, float] = Field(
        default=(0.0, 0.0),
        description="Global bias direction (prevailing current)",
    )

    @field_validator("resolution")
    @classmethod
    def validate_resolution(cls, v: int) -> int:
        """Ensure resolution is a supported texture size."""
        if v not in SUPPORTED_RESOLUTIONS:
            raise ValueError(f"resolution must be one of {SUPPORTED_RESOLUTIONS}")
        return v


class QueryConfig(BaseModel):
    """Spatial query options."""

    capacity: int = Field(
        default=5,
        ge=1,
        description="Maximum obstacles considered per sample point",
    )


class ExportConfig(BaseModel):
    """Texture export options."""

    output_dir: str = Field(
        default="./output",
        description="Directory for baked textures",
    )
    bit_depth: int = Field(
        default=8,
        description="Bits per channel: 8 or 16",
    )
    filename_suffix: str = Field(
        default="_Flowmap.png",
        description="Appended to the scene id to name baked textures",
    )

    @field_validator("bit_depth")
    @classmethod
    def validate_bit_depth(cls, v: int) -> int:
        """Only 8 and 16 bit PNGs are written."""
        if v not in (8, 16):
            raise ValueError("bit_depth must be 8 or 16")
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for OpenFlowmap.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    flowmap: FlowmapConfig = Field(default_factory=FlowmapConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

CONFIG_PATH_ENV = "OPENFLOWMAP_CONFIG"

# Environment variable -> (section, key, parser). Values stay strings for
# pydantic to coerce, so bad input surfaces as a ValidationError.
ENV_OVERRIDES = {
    "OPENFLOWMAP_RESOLUTION": ("flowmap", "resolution", str),
    "OPENFLOWMAP_RADIUS": ("flowmap", "radius", str),
    "OPENFLOWMAP_BLUR_SIZE": ("flowmap", "blur_size", str),
    "OPENFLOWMAP_BIAS": ("flowmap", "bias", lambda v: [p.strip() for p in v.split(",")]),
    "OPENFLOWMAP_QUERY_CAPACITY": ("query", "capacity", str),
    "OPENFLOWMAP_OUTPUT_DIR": ("export", "output_dir", str),
    "OPENFLOWMAP_LOG_LEVEL": ("logging", "level", str),
}

LOG_FORMATS = {
    "json": '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}',
    "text": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}


def find_config_file() -> Optional[Path]:
    """
    Locate a config file when none is given explicitly.

    OPENFLOWMAP_CONFIG wins when set; otherwise the working directory is
    checked before the project root.

    Raises:
        FileNotFoundError: If OPENFLOWMAP_CONFIG names a missing file
    """
    if env_path := os.environ.get(CONFIG_PATH_ENV):
        path = Path(env_path)
        if not path.exists():
            raise FileNotFoundError(f"{CONFIG_PATH_ENV} points to a missing file: {path}")
        return path

    project_root = Path(__file__).resolve().parents[2]
    for candidate in (Path("config.yaml"), Path("config.yml"), project_root / "config.yaml"):
        if candidate.exists():
            return candidate
    return None


def _read_yaml(path: Path) -> dict:
    with open(path, "r") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Config file {path} must contain a mapping of sections, "
            f"got {type(data).__name__}"
        )
    return data


def _env_overrides() -> dict:
    overrides: dict = {}
    for name, (section, key, parse) in ENV_OVERRIDES.items():
        if value := os.environ.get(name):
            overrides.setdefault(section, {})[key] = parse(value)
    return overrides


def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load settings from YAML and the environment.

    Priority (highest to lowest):
        1. OPENFLOWMAP_* environment variables
        2. YAML config file (config_path, else OPENFLOWMAP_CONFIG, else search)
        3. Field defaults

    Sections are merged key by key, so an environment override for one
    flowmap option leaves the other flowmap options from the file intact.

    Args:
        config_path: Explicit path to a YAML config file

    Returns:
        Settings: Validated configuration

    Raises:
        FileNotFoundError: If an explicitly requested file is missing
        ValueError: If the file is not a mapping of sections
        pydantic.ValidationError: If any value is out of range
    """
    path = Path(config_path) if config_path else find_config_file()
    if config_path and not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    config_data: dict = {}
    if path is not None:
        logger.info(f"Loading config from: {path}")
        config_data = _read_yaml(path)
    else:
        logger.warning("No config file found, using defaults and environment variables")

    for section, values in _env_overrides().items():
        config_data[section] = {**(config_data.get(section) or {}), **values}

    return Settings.model_validate(config_data)


def setup_logging(settings: Settings) -> None:
    """Configure root logging from the logging section."""
    logging.basicConfig(
        level=getattr(logging, settings.logging.level.upper(), logging.INFO),
        format=LOG_FORMATS.get(settings.logging.format, LOG_FORMATS["text"]),
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

settings = load_config()
setup_logging(settings)
