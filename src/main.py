"""Command-line entry point for route speed annotation."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from domain.errors import NetworkFailure, SchemaViolation
from infrastructure.http import make_http_session
from services.speed_pipeline import SpeedPipeline
from settings import load_settings
from shared.constants import LOG_FORMAT
from tiles.addressing import tiles_for_bounding_box

logger = logging.getLogger(__name__)


def setup_logging(level: str = 'INFO', log_file: str | Path | None = None) -> None:
    """Configure root logging to stdout and, optionally, a file."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(str(log_path), encoding='utf-8'))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def parse_location(value: str) -> tuple[float, float]:
    """Parse 'lat,lon' into a tuple."""
    try:
        lat_s, lon_s = value.split(',')
        lat, lon = float(lat_s), float(lon_s)
    except ValueError:
        msg = f'expected LAT,LON but got {value!r}'
        raise argparse.ArgumentTypeError(msg) from None
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
        msg = f'coordinates out of range: {value!r}'
        raise argparse.ArgumentTypeError(msg)
    return lat, lon


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Annotate routes with OSMLR reference speeds',
    )
    parser.add_argument('--config', help='Path to a TOML settings file')
    parser.add_argument('--log-level', help='Override the configured log level')
    parser.add_argument('--log-file', help='Also write logs to this file')

    sub = parser.add_subparsers(dest='command', required=True)

    tiles = sub.add_parser('tiles', help='List (or fetch) speed tiles for a bounding box')
    tiles.add_argument('left', type=float)
    tiles.add_argument('bottom', type=float)
    tiles.add_argument('right', type=float)
    tiles.add_argument('top', type=float)
    tiles.add_argument(
        '--fetch',
        action='store_true',
        help='Download and decode the tiles instead of only listing them',
    )

    route = sub.add_parser('route', help='Route between waypoints and print speeds')
    route.add_argument(
        'locations',
        nargs='+',
        type=parse_location,
        metavar='LAT,LON',
        help='Two or more waypoints',
    )
    return parser


async def _run_tiles(args: argparse.Namespace, settings) -> int:
    if not args.fetch:
        for address in tiles_for_bounding_box(args.left, args.bottom, args.right, args.top):
            print(f'{address.level}/{address.index}')
        return 0

    async with make_http_session(settings.http_timeout_s) as client:
        pipeline = SpeedPipeline(settings, client)
        tiles = await pipeline.fetch_region(args.left, args.bottom, args.right, args.top)
    for level in sorted(tiles):
        for index, subtiles in sorted(tiles[level].items()):
            segments = sum(len(s.reference_speeds) for s in subtiles)
            print(f'{level}/{index}\tsubtiles={len(subtiles)}\tspeeds={segments}')
    return 0


async def _run_route(args: argparse.Namespace, settings) -> int:
    if len(args.locations) < 2:
        logger.error('At least two waypoints are required')
        return 1
    async with make_http_session(settings.http_timeout_s) as client:
        pipeline = SpeedPipeline(settings, client)
        outcome = await pipeline.update_route(args.locations)
    if outcome.error:
        logger.error('Route error: %s', outcome.error)
        return 1
    payload = [segment.model_dump() for segment in outcome.segments]
    print(json.dumps(payload, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main application entry point."""
    args = build_parser().parse_args(argv)
    settings = load_settings(args.config)
    setup_logging(args.log_level or settings.log_level, args.log_file)

    runner = _run_tiles if args.command == 'tiles' else _run_route
    try:
        return asyncio.run(runner(args, settings))
    except (NetworkFailure, SchemaViolation) as e:
        logger.error('Speed tiles unavailable: %s', e)
        return 1


if __name__ == '__main__':
    sys.exit(main())
