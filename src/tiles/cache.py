"""In-memory speed-tile cache.

This module provides SpeedTileCache, the session-lifetime store of decoded
subtiles keyed by tile level and index.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tiles.addressing import SegmentReference
    from tiles.consolidator import TileMap
    from tiles.decoder import SubTile

logger = logging.getLogger(__name__)


@dataclass
class CacheStats:
    """Statistics about the speed-tile cache."""

    total_tiles: int
    total_subtiles: int
    tiles_by_level: dict[int, int]
    hits: int
    misses: int


class SpeedTileCache:
    """Session-lifetime store of decoded subtiles.

    Features:
    - Nested level -> tile index -> subtile list, same shape as a fetch result
    - Merge overwrites a whole (level, index) entry; it never appends
    - No eviction, no size bound, no TTL

    Every method is synchronous, so on a single event loop no other task can
    interleave between a read and the following write.

    Usage:
        cache = SpeedTileCache()
        cache.merge(consolidate(subtiles))
        subtiles = cache.get(level=1, index=37741)
    """

    def __init__(self) -> None:
        self._tiles: TileMap = {}
        self._hits = 0
        self._misses = 0

    def get(self, level: int, index: int) -> list[SubTile] | None:
        """Return cached subtiles of a tile, or None if never fetched."""
        subtiles = self._tiles.get(level, {}).get(index)
        if subtiles is None:
            self._misses += 1
        else:
            self._hits += 1
        return subtiles

    def contains(self, level: int, index: int) -> bool:
        return index in self._tiles.get(level, {})

    def subtiles_for(self, reference: SegmentReference) -> list[SubTile]:
        """Subtiles of the tile a segment lives in.

        Raises:
            KeyError: the tile is not cached.
        """
        subtiles = self.get(reference.level, reference.tile_index)
        if subtiles is None:
            msg = f'tile {reference.level}/{reference.tile_index} not cached'
            raise KeyError(msg)
        return subtiles

    def merge(self, tiles: TileMap) -> None:
        """Store a consolidated result, replacing entries at the same address."""
        replaced = 0
        for level, by_index in tiles.items():
            target = self._tiles.setdefault(level, {})
            for index, subtiles in by_index.items():
                if index in target:
                    replaced += 1
                target[index] = list(subtiles)
        if replaced:
            logger.debug('Cache merge replaced %d existing tiles', replaced)

    def snapshot(self) -> TileMap:
        """Shallow copy of the nested mapping (subtile lists copied)."""
        return {
            level: {index: list(subs) for index, subs in by_index.items()}
            for level, by_index in self._tiles.items()
        }

    @property
    def stats(self) -> CacheStats:
        tiles_by_level = {level: len(by_index) for level, by_index in self._tiles.items()}
        return CacheStats(
            total_tiles=sum(tiles_by_level.values()),
            total_subtiles=sum(
                len(subs) for by_index in self._tiles.values() for subs in by_index.values()
            ),
            tiles_by_level=tiles_by_level,
            hits=self._hits,
            misses=self._misses,
        )

    def __len__(self) -> int:
        return sum(len(by_index) for by_index in self._tiles.values())
