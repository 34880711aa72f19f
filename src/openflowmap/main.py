"""
OpenFlowmap Command Line
========================

Bakes flowmap textures from scene files.

Usage:
    openflowmap bake scenes/harbor.json
    openflowmap bake scenes/harbor.json --resolution 256 --blur 2
    openflowmap bake scenes/harbor.json --config config.yaml --output out/harbor.png

Exit codes:
    0 - texture written
    1 - scene, configuration or export failure
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from openflowmap.config import Settings, load_config, settings
from openflowmap.errors import PreconditionError
from openflowmap.export import TextureExportError, save_flowmap_png
from openflowmap.field import FlowFieldBuilder
from openflowmap.scene import SceneLoader


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="openflowmap",
        description="Compute obstacle-driven flowmap textures for planar surfaces",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    bake = subparsers.add_parser("bake", help="Build a flow field and write it as PNG")
    bake.add_argument("scene", help="Path to the scene JSON file")
    bake.add_argument("--config", help="Path to config.yaml")
    bake.add_argument("--output", help="Output PNG path (default: <output_dir>/<scene_id><suffix>)")
    bake.add_argument("--resolution", type=int, help="Override flowmap.resolution")
    bake.add_argument("--radius", type=float, help="Override flowmap.radius")
    bake.add_argument("--blur", type=int, help="Override flowmap.blur_size")
    return parser


def _apply_cli_overrides(base: Settings, args: argparse.Namespace) -> Settings:
    """Return settings with command-line overrides applied and re-validated."""
    data = base.model_dump()
    if args.resolution is not None:
        data["flowmap"]["resolution"] = args.resolution
    if args.radius is not None:
        data["flowmap"]["radius"] = args.radius
    if args.blur is not None:
        data["flowmap"]["blur_size"] = args.blur
    return Settings.model_validate(data)


def bake(args: argparse.Namespace) -> int:
    """Run the bake command."""
    try:
        base = load_config(args.config) if args.config else settings
        run_settings = _apply_cli_overrides(base, args)
    except (ValidationError, FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    try:
        scene = SceneLoader().load_from_file(args.scene)
    except (FileNotFoundError, ValidationError, PreconditionError) as e:
        logger.error(f"Failed to load scene {args.scene}: {e}")
        return 1

    if scene.bias is not None:
        data = run_settings.model_dump()
        data["flowmap"]["bias"] = scene.bias
        run_settings = Settings.model_validate(data)

    try:
        builder = FlowFieldBuilder.from_settings(run_settings, scene.build_index())
        field = builder.build(scene.surface)
    except PreconditionError as e:
        logger.error(f"Flow field build failed: {e}")
        return 1

    output = args.output or str(
        Path(run_settings.export.output_dir)
        / f"{scene.scene_id}{run_settings.export.filename_suffix}"
    )

    try:
        save_flowmap_png(field, output, bit_depth=run_settings.export.bit_depth)
    except TextureExportError as e:
        logger.error(str(e))
        return 1

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Command line entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "bake":
        return bake(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
