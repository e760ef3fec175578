from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

import aiohttp

from domain.errors import NetworkFailure, SchemaViolation
from shared.constants import HTTP_OK, SPEED_TILE_BASE_URL
from tiles.addressing import TileAddress, tile_url
from tiles.consolidator import consolidate
from tiles.decoder import DecodedTile, decode_tile

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tiles.cache import SpeedTileCache
    from tiles.consolidator import TileMap
    from tiles.decoder import SubTile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TileUnavailable:
    """Sentinel for a tile that could not be obtained; filtered before decode."""

    url: str
    status: int | None
    reason: str = ''
    error: bool = True


def _field(item: object, name: str):
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def unique_addresses(addresses: Iterable[object]) -> list[TileAddress]:
    """Normalize to TileAddress and drop structural duplicates, keeping order.

    Accepts objects or mappings carrying ``level`` plus one of ``index``,
    ``tile_index`` or ``tile``.
    """
    seen: dict[TileAddress, None] = {}
    for item in addresses:
        level = _field(item, 'level')
        index = None
        for name in ('index', 'tile_index', 'tile'):
            index = _field(item, name)
            if index is not None:
                break
        if level is None or index is None:
            msg = f'Not a tile address: {item!r}'
            raise ValueError(msg)
        seen.setdefault(TileAddress(int(level), int(index)), None)
    return list(seen)


class SpeedTileFetcher:
    """Concurrent speed-tile fetcher backed by a SpeedTileCache.

    A non-200 response only drops its own tile. A request that cannot be made
    at all raises NetworkFailure and fails the whole batch.
    """

    def __init__(
        self,
        client: aiohttp.ClientSession,
        cache: SpeedTileCache,
        *,
        base_url: str = SPEED_TILE_BASE_URL,
        strict_decode: bool = False,
    ):
        self.client = client
        self.cache = cache
        self.base_url = base_url.rstrip('/')
        self.strict_decode = strict_decode

    async def _download(self, url: str) -> bytes | TileUnavailable:
        try:
            resp = await self.client.get(url)
        except (aiohttp.ClientError, TimeoutError) as e:
            raise NetworkFailure(url, str(e) or type(e).__name__) from e
        try:
            if resp.status != HTTP_OK:
                return TileUnavailable(url=url, status=resp.status)
            try:
                return await resp.read()
            except (aiohttp.ClientError, TimeoutError) as e:
                raise NetworkFailure(url, str(e) or type(e).__name__) from e
        finally:
            release = getattr(resp, 'release', None)
            if callable(release):
                release()

    async def _fetch_one(
        self, address: TileAddress
    ) -> list[SubTile] | DecodedTile | TileUnavailable:
        cached = self.cache.get(address.level, address.index)
        if cached is not None:
            return cached

        url = tile_url(self.base_url, address)
        body = await self._download(url)
        if isinstance(body, TileUnavailable):
            return body
        try:
            return decode_tile(body)
        except SchemaViolation as e:
            if self.strict_decode:
                raise
            return TileUnavailable(url=url, status=HTTP_OK, reason=str(e))

    async def fetch_tiles(self, addresses: Iterable[object]) -> TileMap:
        """
        Fetch speed tiles for the given addresses and merge them into the cache.

        A fetched tile that yields no subtiles under its requested address
        (empty payload, or a header naming another tile) is cached there as
        an empty entry, so later batches do not request it again.

        Returns:
            level -> tile index -> subtiles, covering fresh and cached tiles.
            Tiles that failed are absent.

        """
        unique = unique_addresses(addresses)
        results = await asyncio.gather(*(self._fetch_one(a) for a in unique))

        out: TileMap = {}
        fresh: list[SubTile] = []
        fetched: list[TileAddress] = []
        cached_count = 0
        failed_count = 0
        for address, result in zip(unique, results):
            if isinstance(result, TileUnavailable):
                failed_count += 1
                if result.reason:
                    logger.warning(
                        'Discarding undecodable speed tile from %s: %s',
                        result.url,
                        result.reason,
                    )
                else:
                    logger.warning(
                        'Unable to fetch a speed tile from %s. The status code given was %s.',
                        result.url,
                        result.status,
                    )
            elif isinstance(result, DecodedTile):
                fetched.append(address)
                fresh.extend(result.subtiles)
            else:
                cached_count += 1
                out.setdefault(address.level, {})[address.index] = list(result)

        consolidated = consolidate(fresh)
        for address in fetched:
            by_index = consolidated.setdefault(address.level, {})
            if address.index not in by_index:
                logger.debug('Speed tile %d/%d has no subtiles', address.level, address.index)
                by_index[address.index] = []
        self.cache.merge(consolidated)
        for level, by_index in consolidated.items():
            out.setdefault(level, {}).update(by_index)

        logger.info(
            'Speed tiles: %d requested, %d cached, %d fetched, %d unavailable',
            len(unique),
            cached_count,
            len(fetched),
            failed_count,
        )
        return out
