"""Command-line entrypoint: horizon profile for one observer.

Usage:
    horizon <latitude> <longitude> [start end] [--dem PATH]

Examples:
    horizon 40.311259 -111.659330
    horizon 40.311259 -111.659330 47 111

Per-direction progress goes to stderr; the result list is printed to stdout
as JSON with keys direction, elevationAngleDegrees, distanceKm.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError

from domain.horizon.errors import HorizonError
from domain.horizon.services import (
    DEFAULT_END_DIRECTION,
    DEFAULT_START_DIRECTION,
    ObserverPolicy,
)
from domain.horizon.value_objects import HorizonResult
from domain.terrain.errors import TerrainError
from domain.terrain.repositories import ElevationRepository
from infrastructure.settings import HorizonSettings
from infrastructure.terrain.geotiff_adapter import GeoTiffElevationAdapter

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def positive_int(value: str) -> int:
    """argparse type for counts that must be at least 1."""
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Create and return the CLI parser."""
    parser = argparse.ArgumentParser(
        prog="horizon",
        description="Compute the terrain horizon around an observer from a GeoTIFF DEM.",
        epilog=(
            "Example: horizon 40.311259 -111.659330\n"
            "Example: horizon 40.311259 -111.659330 47 111"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("latitude", type=float, help="Observer latitude (WGS84)")
    parser.add_argument("longitude", type=float, help="Observer longitude (WGS84)")
    parser.add_argument(
        "directions",
        type=int,
        nargs="*",
        metavar="start end",
        help=(
            f"Inclusive compass direction range in degrees "
            f"(default {DEFAULT_START_DIRECTION} {DEFAULT_END_DIRECTION})"
        ),
    )
    parser.add_argument("--dem", type=Path, default=None, help="GeoTIFF DEM path")
    parser.add_argument(
        "--workers",
        type=positive_int,
        default=None,
        help="Threads to scan directions with (>= 1)",
    )
    parser.add_argument(
        "--wraparound",
        action="store_true",
        help="Let start > end wrap through 0 (e.g. 350 10)",
    )
    parser.add_argument(
        "--strict-observer",
        action="store_true",
        help="Fail instead of assuming 0 m when the observer is off the DEM",
    )
    parser.add_argument("--log-level", default=None, help="Logging level for stderr")
    return parser


def format_progress(result: HorizonResult) -> str:
    return (
        f"Direction: {result.direction}° - Elevation: "
        f"{result.elevation_angle_degrees:.2f}° - Distance: {result.distance_km:.2f} km"
    )


def _report_progress(result: HorizonResult) -> None:
    print(format_progress(result), file=sys.stderr, flush=True)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI application."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if len(args.directions) not in (0, 2):
        parser.print_usage(sys.stderr)
        print(
            "horizon: error: give both start and end directions, or neither",
            file=sys.stderr,
        )
        return EXIT_USAGE

    try:
        settings = HorizonSettings.from_env()
    except ValidationError as e:
        print(f"horizon: error: invalid HORIZON_* setting: {e}", file=sys.stderr)
        return EXIT_USAGE

    level = (args.log_level or settings.log_level).upper()
    if not isinstance(logging.getLevelName(level), int):
        parser.error(f"unknown log level: {args.log_level}")
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    start, end = args.directions or (DEFAULT_START_DIRECTION, DEFAULT_END_DIRECTION)
    dem_path = args.dem or settings.dem_path
    workers = args.workers if args.workers is not None else settings.max_workers
    policy = ObserverPolicy.STRICT if args.strict_observer else ObserverPolicy.DEFAULT_ZERO

    repository: ElevationRepository = GeoTiffElevationAdapter(
        max_bytes=settings.max_bytes
    )
    try:
        dataset = repository.load_dem(dem_path)
    except FileNotFoundError:
        print(f"Error: DEM not found: {Path(dem_path).name}", file=sys.stderr)
        return EXIT_FAILURE
    except (TerrainError, PermissionError) as e:
        print(f"Error: cannot load DEM: {e}", file=sys.stderr)
        return EXIT_FAILURE

    try:
        results = dataset.calculate_horizon(
            args.latitude,
            args.longitude,
            start,
            end,
            observer_policy=policy,
            wraparound=args.wraparound,
            max_workers=workers,
            on_result=_report_progress,
        )
    except HorizonError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    print(json.dumps([r.to_json_dict() for r in results], indent=2))
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
