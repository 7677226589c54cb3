"""Flat Earth — CLI entry point.

Shows a world map on an azimuthal equidistant disk with the night side
shaded for a movable sub-solar point.

Usage
-----
    python main.py                              # interactive window
    python main.py --map assets/map.jpg --step 2
    python main.py --lat 0 --lon 90 --snapshot output/frame.png

Hold SPACE (or the left mouse button) to drag the sun to the pointer.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path


def setup_logging(level: str = "INFO") -> None:
    """Configure structured logging."""
    fmt = "%(name)s [%(levelname)s] %(message)s"
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=fmt,
        stream=sys.stdout,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="flatearth",
        description="Flat Earth — day/night terminator on an azimuthal equidistant map",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python main.py\n"
            "  python main.py --map assets/map.jpg --step 2\n"
            "  python main.py --lat -23.44 --lon 0 --snapshot output/solstice.png\n"
        ),
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Optional YAML file overriding the built-in settings",
    )
    parser.add_argument(
        "--map",
        type=str,
        default=None,
        help="World map image (default: map.jpg, or map.path from config)",
    )
    parser.add_argument(
        "--lat",
        type=float,
        default=None,
        help="Initial sub-solar latitude in degrees (default: 47.7511)",
    )
    parser.add_argument(
        "--lon",
        type=float,
        default=None,
        help="Initial sub-solar longitude in degrees, positive west (default: 120.7401)",
    )
    parser.add_argument(
        "--step",
        type=int,
        default=None,
        help="Shading sample stride in pixels (default: 1)",
    )
    parser.add_argument(
        "--snapshot",
        type=str,
        default=None,
        help="Render a single frame to this image file and exit (no window)",
    )
    parser.add_argument(
        "--dpi",
        type=int,
        default=100,
        help="DPI for the snapshot (default: 100)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )

    return parser.parse_args(argv)


def _cli_overrides(args: argparse.Namespace) -> dict:
    """Map CLI flags onto configuration sections."""
    overrides: dict = {}
    if args.map is not None:
        overrides.setdefault("map", {})["path"] = args.map
    if args.lat is not None:
        overrides.setdefault("sun", {})["initial_lat_deg"] = args.lat
    if args.lon is not None:
        overrides.setdefault("sun", {})["initial_lon_deg"] = args.lon
    if args.step is not None:
        overrides.setdefault("illumination", {})["step_px"] = args.step
    return overrides


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.log_level)

    logger = logging.getLogger("flatearth")

    from core_engine.constants import load_config, log_platform_info
    from core_engine.coordinates import LatLon
    from core_engine.illumination import IlluminationEngine
    from data_ingestion.map_loader import MapLoadError, load_world_map
    from simulation.runner import FrameRunner

    try:
        config = load_config(args.config, overrides=_cli_overrides(args))
    except (FileNotFoundError, ValueError) as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    if args.log_level == "DEBUG":
        log_platform_info()

    # Load world map texture
    try:
        world_map = load_world_map(config.map.path, smooth=config.map.smooth)
    except (FileNotFoundError, MapLoadError) as e:
        logger.error("Can't load %s: %s", config.map.path, e)
        return 1

    engine = IlluminationEngine.from_config(config)
    runner = FrameRunner(engine)
    sun = LatLon(config.sun.initial_lat_deg, config.sun.initial_lon_deg)

    if args.snapshot:
        from visualization.plotter import render_snapshot

        frame = runner.step(sun)
        path = render_snapshot(
            world_map,
            frame.illumination,
            engine.canvas,
            config,
            output_path=Path(args.snapshot),
            dpi=args.dpi,
        )
        logger.info("Snapshot rendered: %s", path)
        return 0

    from visualization.viewer import InteractiveViewer

    viewer = InteractiveViewer(config, world_map, runner, sun)
    viewer.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
