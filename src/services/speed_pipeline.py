"""
Top-level orchestration of route speed annotation.

SpeedPipeline owns the session's speed-tile cache and wires the fetcher,
matcher and routing client around one aiohttp session. Every route update
is numbered when issued; a run whose number is no longer the latest when it
finishes is discarded instead of overwriting newer output.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from domain.errors import RouteServiceError
from services.routing_client import ValhallaClient
from services.segment_matcher import SegmentMatcher
from shared.constants import MIN_ROUTE_LOCATIONS
from tiles.addressing import tiles_for_bounding_box
from tiles.cache import SpeedTileCache
from tiles.fetcher import SpeedTileFetcher

if TYPE_CHECKING:
    from collections.abc import Sequence

    import aiohttp

    from domain.models import AnnotatedSegment, LatLon, SpeedSettings
    from tiles.consolidator import TileMap

logger = logging.getLogger(__name__)


@dataclass
class RouteOutcome:
    """Result of one update_route run."""

    run_id: int
    applied: bool
    segments: list[AnnotatedSegment] = field(default_factory=list)
    error: str | None = None


class SpeedPipeline:
    """Session-scoped route speed annotation pipeline."""

    def __init__(
        self,
        settings: SpeedSettings,
        client: aiohttp.ClientSession,
        *,
        cache: SpeedTileCache | None = None,
        routing: ValhallaClient | None = None,
    ):
        self.settings = settings
        self.cache = cache if cache is not None else SpeedTileCache()
        self.fetcher = SpeedTileFetcher(
            client,
            self.cache,
            base_url=settings.tile_base_url,
            strict_decode=settings.strict_decode,
        )
        self.matcher = SegmentMatcher(self.fetcher, self.cache)
        self.routing = routing or ValhallaClient(
            client,
            settings.routing_host,
            api_key=settings.routing_api_key,
            costing=settings.routing_costing,
        )
        self.segments: list[AnnotatedSegment] = []
        self.route_error: str | None = None
        self._issued = 0

    @property
    def latest_run(self) -> int:
        return self._issued

    def _is_current(self, run_id: int) -> bool:
        return run_id == self._issued

    async def update_route(self, locations: Sequence[LatLon]) -> RouteOutcome:
        """
        Route between locations and annotate every edge with a reference speed.

        Routing failures are reported through RouteOutcome.error. Tile
        transport failures (NetworkFailure) propagate to the caller.
        Fewer than two locations is rejected before a run number is taken
        (run_id 0), so a run already in flight stays current.
        """
        if len(locations) < MIN_ROUTE_LOCATIONS:
            msg = 'At least two locations are required to compute a route.'
            logger.warning('Route request rejected: %s', msg)
            return RouteOutcome(run_id=0, applied=False, error=msg)

        self._issued += 1
        run_id = self._issued

        try:
            route = await self.routing.fetch_route(locations)
        except RouteServiceError as e:
            logger.warning('Route run %d failed: %s', run_id, e)
            if not self._is_current(run_id):
                return RouteOutcome(run_id=run_id, applied=False, error=str(e))
            self.segments = []
            self.route_error = str(e)
            return RouteOutcome(run_id=run_id, applied=True, error=str(e))

        segments = await self.matcher.annotate(route)

        if not self._is_current(run_id):
            logger.debug('Discarding stale route run %d (latest %d)', run_id, self._issued)
            return RouteOutcome(run_id=run_id, applied=False, segments=segments)

        self.segments = segments
        self.route_error = None
        return RouteOutcome(run_id=run_id, applied=True, segments=segments)

    async def fetch_region(
        self, left: float, bottom: float, right: float, top: float
    ) -> TileMap:
        """Fetch every speed tile intersecting the bounding box."""
        addresses = tiles_for_bounding_box(left, bottom, right, top)
        return await self.fetcher.fetch_tiles(addresses)
