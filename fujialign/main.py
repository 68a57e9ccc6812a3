"""
FUJIALIGN Command-Line Entry Point

Usage:
    fujialign geometry --lat 35.6325 --lon 139.8833 --elevation 3
    fujialign search --lat 35.6325 --lon 139.8833 --elevation 3 --date 2025-02-18
    fujialign search ... --date 2025-02-01 --days 28 --type pearl --json
    fujialign --config /path/to/fujialign.yaml --log-level DEBUG search ...

Entry Points:
    - CLI: `fujialign` command (via pyproject.toml)
    - Direct: `python -m fujialign.main`
"""

from __future__ import annotations

import argparse
import asyncio
from datetime import date, datetime, timedelta
import json
import sys
from typing import Optional, Sequence

from fujialign import __version__
from fujialign.config import FujiAlignConfig, load_config
from fujialign.exceptions import ConfigurationError, FujiAlignError
from fujialign.logging_config import get_logger, setup_logging
from fujialign.types import EventType, FujiEvent, GeoCoordinate, ObservationSite

__all__ = ["main", "create_parser"]

# Module logger
logger = get_logger(__name__)


# =============================================================================
# Argument Parser
# =============================================================================


def _parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD")


def _add_site_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--lat", type=float, required=True, help="Site latitude (degrees)")
    parser.add_argument("--lon", type=float, required=True, help="Site longitude (degrees)")
    parser.add_argument(
        "--elevation", type=float, default=0.0, help="Site ground elevation (meters)"
    )
    parser.add_argument("--site-id", default="site", help="Site identifier used in event ids")
    parser.add_argument("--name", default="", help="Site display name")


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="fujialign",
        description="Diamond and Pearl Fuji alignment calculator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=str,
        metavar="PATH",
        help="Path to configuration file (default: auto-discover)",
    )
    parser.add_argument(
        "-l",
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set logging level (overrides config file)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        metavar="PATH",
        help="Path to log file (default: stderr only)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    geometry = sub.add_parser("geometry", help="Bearing, distance and elevation to the summit")
    _add_site_arguments(geometry)
    geometry.add_argument("--json", action="store_true", help="Print JSON")

    search = sub.add_parser("search", help="Find alignment events")
    _add_site_arguments(search)
    search.add_argument(
        "--date", type=_parse_date, required=True, help="First civil date (YYYY-MM-DD)"
    )
    search.add_argument("--days", type=int, default=1, help="Number of consecutive days")
    search.add_argument(
        "--type",
        choices=["diamond", "pearl", "all"],
        default="all",
        help="Event type to search for",
    )
    search.add_argument("--workers", type=int, default=None, help="Worker threads")
    search.add_argument("--json", action="store_true", help="Print JSON")

    return parser


# =============================================================================
# Commands
# =============================================================================


def _build_site(args: argparse.Namespace, config: FujiAlignConfig) -> ObservationSite:
    from services.geodesy import compute_site_geometry

    return compute_site_geometry(
        args.site_id,
        GeoCoordinate(args.lat, args.lon, args.elevation),
        name=args.name,
        target=config.target.to_summit(),
    )


def run_geometry(args: argparse.Namespace, config: FujiAlignConfig) -> int:
    """Print the site's geometry toward the target summit."""
    site = _build_site(args, config)
    data = {
        "site_id": site.id,
        "target": config.target.name,
        "azimuth_to_target": site.azimuth_to_target,
        "elevation_to_target": site.elevation_to_target,
        "distance_to_target_m": site.distance_to_target_m,
    }
    if args.json:
        print(json.dumps(data, indent=2))
    else:
        print(f"Site {site.id} -> {config.target.name}")
        print(f"  Bearing:   {site.azimuth_to_target:.4f}°")
        print(f"  Elevation: {site.elevation_to_target:.4f}°")
        print(f"  Distance:  {site.distance_to_target_m / 1000:.3f} km")
    return 0


def _format_event(event: FujiEvent, config: FujiAlignConfig) -> str:
    local = event.instant.astimezone(config.calendar.tz)
    text = (
        f"{event.date.isoformat()}  {local:%H:%M:%S}  {event.type.value:<7} "
        f"{event.sub_type.value:<7}  az {event.azimuth:8.3f}°  el {event.elevation:7.3f}°  "
        f"{event.accuracy.value:<9}  score {event.quality_score:3d}"
    )
    if event.moon_illumination is not None:
        text += f"  moon {event.moon_illumination * 100:.0f}%"
    return text


def run_search(args: argparse.Namespace, config: FujiAlignConfig) -> int:
    """Search one or more days for alignment events and print them."""
    from services.alignment import (
        AlignmentSearchEngine,
        BatchCalculator,
        SeasonalWindowSelector,
    )
    from services.ephemeris import SkyfieldProvider

    if args.days < 1:
        raise ConfigurationError("--days must be at least 1")

    site = _build_site(args, config)
    provider = SkyfieldProvider(config.ephemeris.kernel, config.ephemeris.data_dir)
    provider.initialize()
    engine = AlignmentSearchEngine(
        provider,
        config=config.search,
        selector=SeasonalWindowSelector(config.windows, config.calendar),
        target=config.target.to_summit(),
    )
    event_type = None if args.type == "all" else EventType(args.type)
    days = [args.date + timedelta(days=i) for i in range(args.days)]

    batch = BatchCalculator(engine, max_workers=args.workers)
    events = asyncio.run(batch.calculate_range([site], days, event_type))

    if args.json:
        print(json.dumps([e.to_dict() for e in events], indent=2))
    elif not events:
        print("No alignment events found")
    else:
        for event in events:
            print(_format_event(event, config))
    return 0


# =============================================================================
# Main Entry Point
# =============================================================================


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the fujialign command.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(log_level=args.log_level or "WARNING")

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    setup_logging(
        log_level=args.log_level or config.log_level,
        log_file=args.log_file or config.log_file,
    )

    try:
        if args.command == "geometry":
            return run_geometry(args, config)
        return run_search(args, config)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130  # Standard exit code for SIGINT
    except FujiAlignError as e:
        logger.error(f"FUJIALIGN error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
