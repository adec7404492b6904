#!/usr/bin/env python3
"""Command line entry point: render a map frame to PNG or open the viewer."""

import argparse
import sys
from pathlib import Path

import structlog

from .config import settings
from .core.exceptions import HostUnavailableError, InvalidMapSizeError
from .core.map_object import FantasyMap
from .core.rasterizer import describe_modes
from .core.terrain import TERRAIN_NAMES
from .utils.logging import configure_logging

logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="py-mapcanvas", description="Procedural fantasy map renderer"
    )
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")
    parser.add_argument(
        "--log-format", default=settings.log_format, choices=["console", "json"], help="Log output format"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_map_arguments(sub):
        sub.add_argument("--width", default=settings.default_width, help="Map width")
        sub.add_argument("--height", default=settings.default_height, help="Map height")
        sub.add_argument("--seed", type=int, default=settings.seed, help="Seed for a reproducible map")
        sub.add_argument("--mode", choices=describe_modes(), default=settings.render_mode, help="Render mode")
        sub.add_argument(
            "--hide",
            action="append",
            default=[],
            choices=list(TERRAIN_NAMES.values()),
            help="Hide a terrain type (repeatable)",
        )

    render = subparsers.add_parser("render", help="Render one frame to a PNG file")
    add_map_arguments(render)
    render.add_argument("--zoom", type=float, default=1.0, help="Zoom level (0.5 - 4)")
    render.add_argument("--pan", type=float, nargs=2, default=(0.0, 0.0), metavar=("X", "Y"), help="Pan offset")
    render.add_argument("-o", "--output", type=Path, default=Path("map.png"), help="Output PNG path")

    view = subparsers.add_parser("view", help="Open the interactive viewer")
    add_map_arguments(view)

    return parser


def create_map(args) -> FantasyMap:
    fantasy_map = FantasyMap(args.width, args.height, seed=args.seed, render_mode=args.mode)
    for name in args.hide:
        if not fantasy_map.set_terrain_visible(name, False):
            logger.warning("Terrain type kept visible", terrain=name)
    return fantasy_map


def print_summary(fantasy_map: FantasyMap) -> None:
    print(f"Seed: {fantasy_map.seed}")
    print(f"Size: {fantasy_map.width}x{fantasy_map.height}")
    print(f"Mode: {fantasy_map.render_mode.value}")
    for settlement in fantasy_map.settlements.all:
        print(f"  {settlement.tier.value:<8} {settlement.name:<16} ({settlement.x:.1f}, {settlement.y:.1f})")


def run_render(args) -> int:
    fantasy_map = create_map(args)
    fantasy_map.zoom_at(0, 0, args.zoom)
    frame = fantasy_map.set_pan(*args.pan)
    frame.save(args.output)
    logger.info("Frame written", path=str(args.output))
    print_summary(fantasy_map)
    return 0


def run_view(args) -> int:
    from .ui.viewer import MapViewer, check_host

    check_host()
    fantasy_map = create_map(args)
    print_summary(fantasy_map)
    MapViewer(fantasy_map).show()
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, args.log_format)

    try:
        if args.command == "render":
            return run_render(args)
        return run_view(args)
    except InvalidMapSizeError as e:
        logger.error("Invalid map size", reason=e.reason)
        return 2
    except HostUnavailableError as e:
        logger.error("Host unavailable", error=str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
