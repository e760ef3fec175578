"""
Reference-speed matching of route edges against cached speed tiles.

Each edge's OSMLR segment id is unpacked into (level, tile, segment index),
the owning tile is fetched or read from cache, and the subtile whose range
contains the segment index yields the reference speed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from domain.models import AnnotatedSegment
from shared.constants import UNCOVERED_TILE_LEVEL
from tiles.addressing import SegmentReference, parse_segment_id

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from domain.models import RouteEdge, RouteShape
    from tiles.cache import SpeedTileCache
    from tiles.decoder import SubTile
    from tiles.fetcher import SpeedTileFetcher

logger = logging.getLogger(__name__)


def collect_segment_references(edges: Iterable[RouteEdge]) -> list[SegmentReference]:
    """Unique segment references of all edges, level-2 ids dropped."""
    seen: dict[int, None] = {}
    for edge in edges:
        for segment_id in edge.segment_ids:
            seen.setdefault(int(segment_id), None)

    references = []
    for segment_id in seen:
        ref = parse_segment_id(segment_id)
        if ref.level == UNCOVERED_TILE_LEVEL:
            continue
        references.append(ref)
    return references


def find_reference_speed(
    subtiles: Sequence[SubTile], segment_index: int
) -> float | None:
    """
    Linear scan for the subtile holding segment_index.

    Ranges are (start, start + subtile_segments], except the last subtile in
    sequence whose upper bound is total_segments. The first match wins.

    Returns:
        The reference speed, or None when no subtile matches.

    Raises:
        IndexError: the matching subtile has no speed at the computed slot.

    """
    last = len(subtiles) - 1
    for pos, sub in enumerate(subtiles):
        if pos == last:
            upper = sub.total_segments
        else:
            upper = sub.start_segment_index + sub.subtile_segments
        if sub.start_segment_index < segment_index <= upper:
            return sub.reference_speeds[segment_index % sub.subtile_segments]
    return None


def resolve_reference_speeds(
    references: Iterable[SegmentReference], cache: SpeedTileCache
) -> dict[int, float]:
    """Map segment id -> reference speed; unresolvable ids are left out."""
    speeds: dict[int, float] = {}
    for ref in references:
        try:
            subtiles = cache.subtiles_for(ref)
            speed = find_reference_speed(subtiles, ref.segment_index)
        except (KeyError, IndexError, ZeroDivisionError) as e:
            logger.debug('No reference speed for segment %d: %s', ref.segment_id, e)
            continue
        if speed is None:
            logger.debug(
                'Segment %d (index %d) outside every subtile of tile %d/%d',
                ref.segment_id,
                ref.segment_index,
                ref.level,
                ref.tile_index,
            )
            continue
        speeds[ref.segment_id] = speed
    return speeds


def build_annotated_segments(
    route: RouteShape, speeds: dict[int, float]
) -> list[AnnotatedSegment]:
    """One AnnotatedSegment per edge, speed taken from the edge's first id."""
    segments = []
    for edge in route.edges:
        coordinates = route.coordinates[edge.begin_shape_index : edge.end_shape_index + 1]
        speed = speeds.get(edge.segment_ids[0]) if edge.segment_ids else None
        segments.append(AnnotatedSegment(coordinates=coordinates, reference_speed=speed))
    return segments


class SegmentMatcher:
    """Drives tile fetching and speed lookup for one route at a time."""

    def __init__(self, fetcher: SpeedTileFetcher, cache: SpeedTileCache):
        self.fetcher = fetcher
        self.cache = cache

    async def annotate(self, route: RouteShape) -> list[AnnotatedSegment]:
        references = collect_segment_references(route.edges)
        if references:
            await self.fetcher.fetch_tiles(references)
        speeds = resolve_reference_speeds(references, self.cache)
        segments = build_annotated_segments(route, speeds)
        logger.info(
            'Route annotated: %d edges, %d segment ids, %d speeds resolved',
            len(route.edges),
            len(references),
            len(speeds),
        )
        return segments
