#!/usr/bin/env python3
"""
Convert Script.

Convert an SVG document to a PDC draw-command file.

Usage:
    svg2pdc icon.svg
    svg2pdc icon.svg -o build/ --precise
    svg2pdc icon.svg --convert --verbose --truncate-color
    python -m svg2pdc icon.svg --config my_converter.yaml

Policies default to ``svg2pdc/configs/converter.yaml``; flags override:
    --precise         precise (1/8 px) grid
    --truncate-color  truncate channels instead of picking the nearest level
    --convert         snap off-grid points (with a warning per point if
                      --verbose is also given) instead of failing
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from svg2pdc import __version__
from svg2pdc.color import ColorPolicy
from svg2pdc.configs.loader import ConfigError, ConverterConfig, load_config
from svg2pdc.converter.svg import convert_file
from svg2pdc.errors import ConversionError, UnsupportedOperationError
from svg2pdc.geometry import GridPolicy, Precision
from svg2pdc.utils import fs
from svg2pdc.utils.logging_config import pop_context, push_context, setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="svg2pdc",
        description="Convert an SVG document to a PDC draw-command image",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("input", type=Path, help="SVG document to convert")
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Output file or directory (default: input with .pdc extension)",
    )

    # Conversion policies
    parser.add_argument(
        "--precise",
        "-p",
        action="store_true",
        help="Use the precise (1/8 px) coordinate grid",
    )
    parser.add_argument(
        "--truncate-color",
        "-t",
        action="store_true",
        help="Truncate colors to palette levels instead of picking the nearest",
    )
    parser.add_argument(
        "--convert",
        "-c",
        action="store_true",
        help="Snap off-grid coordinates instead of failing",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Debug logging; warn about every snapped coordinate",
    )

    # Animation (not supported)
    parser.add_argument(
        "--sequence",
        "-s",
        action="store_true",
        help="Treat the input as an animation sequence (not supported)",
    )
    parser.add_argument(
        "--duration",
        "-d",
        type=float,
        help="Frame duration in seconds for sequences (not supported)",
    )

    # Ambient
    parser.add_argument("--config", type=Path, help="Configuration file path")
    parser.add_argument("--log-file", type=str, help="Also log to this file")
    parser.add_argument("--json-logs", action="store_true", help="JSON log lines")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def reject_unsupported(args: argparse.Namespace) -> None:
    """Fail fast on animation options.

    Raises
    ------
    UnsupportedOperationError
        If ``--sequence`` or ``--duration`` was given.
    """
    if args.sequence:
        raise UnsupportedOperationError("sequence")
    if args.duration is not None:
        raise UnsupportedOperationError("duration without sequence")


def resolve_policies(
    args: argparse.Namespace, config: ConverterConfig
) -> tuple[Precision, ColorPolicy, GridPolicy]:
    """Merge CLI flags over the configured conversion policies."""
    conv = config.conversion
    precision = Precision.PRECISE if args.precise else conv.precision
    color_policy = ColorPolicy.TRUNCATE if args.truncate_color else conv.color_policy
    if args.convert:
        grid_policy = (
            GridPolicy.CONVERT_WITH_WARNING if args.verbose else GridPolicy.CONVERT_SILENTLY
        )
    else:
        grid_policy = conv.grid_policy
    return precision, color_policy, grid_policy


def run(args: argparse.Namespace, config: ConverterConfig) -> Path:
    """Convert ``args.input`` and write the result.

    Returns
    -------
    Path
        Written output file.

    Raises
    ------
    ConversionError
        If conversion or encoding fails; nothing is written.
    OSError
        If the input cannot be read or the output cannot be written.
    """
    precision, color_policy, grid_policy = resolve_policies(args, config)
    out_path = fs.resolve_output_path(args.input, args.output, config.output.extension)

    push_context(file=args.input.name)
    try:
        logger.debug(
            "Converting with precision=%s color_policy=%s grid_policy=%s",
            precision.value,
            color_policy.value,
            grid_policy.value,
        )
        image = convert_file(
            args.input,
            color_policy,
            grid_policy,
            precision,
            floor_path_points=config.conversion.floor_path_points,
        )
        logger.debug("%s", image.describe())
        data = image.to_bytes()
        fs.write_bytes(out_path, data, atomic=config.output.atomic)
        logger.info(
            "Wrote %s (%d bytes, %d commands)", out_path, len(data), len(image.commands)
        )
    finally:
        pop_context(keys=["file"])
    return out_path


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        reject_unsupported(args)
        config = load_config(args.config)
    except (UnsupportedOperationError, ConfigError, FileNotFoundError) as e:
        setup_logging(json=args.json_logs)
        logger.error("%s", e)
        return 1

    log_kwargs = config.logging.setup_kwargs()
    if args.verbose:
        log_kwargs["log_level"] = "DEBUG"
    if args.log_file:
        log_kwargs["log_file"] = args.log_file
    if args.json_logs:
        log_kwargs["json"] = True
    setup_logging(**log_kwargs)

    try:
        run(args, config)
    except (ConversionError, OSError) as e:
        logger.error("Conversion of %s failed: %s", args.input, e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
