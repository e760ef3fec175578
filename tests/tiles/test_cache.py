"""Tests for SpeedTileCache."""

from __future__ import annotations

import pytest

from tiles.addressing import parse_segment_id
from tiles.cache import CacheStats, SpeedTileCache
from tiles.consolidator import consolidate
from tiles.decoder import SubTile


def _sub(level, index, start, speeds=(1,)) -> SubTile:
    return SubTile(level, index, start, 50, 200, tuple(speeds))


@pytest.fixture
def cache():
    """Create SpeedTileCache instance."""
    return SpeedTileCache()


class TestSpeedTileCache:
    """Tests for SpeedTileCache class."""

    def test_starts_empty(self, cache):
        assert len(cache) == 0
        assert cache.snapshot() == {}

    def test_merge_and_get(self, cache):
        """Basic merge and get operations."""
        cache.merge(consolidate([_sub(1, 5, 0), _sub(1, 5, 50)]))
        result = cache.get(1, 5)
        assert [s.start_segment_index for s in result] == [0, 50]

    def test_get_nonexistent_returns_none(self, cache):
        assert cache.get(1, 999) is None

    def test_contains(self, cache):
        assert not cache.contains(1, 5)
        cache.merge(consolidate([_sub(1, 5, 0)]))
        assert cache.contains(1, 5)
        assert not cache.contains(0, 5)

    def test_merge_overwrites_whole_entry(self, cache):
        """A later merge replaces the subtiles at the same address."""
        cache.merge(consolidate([_sub(1, 5, 0), _sub(1, 5, 50)]))
        cache.merge(consolidate([_sub(1, 5, 100)]))
        result = cache.get(1, 5)
        assert [s.start_segment_index for s in result] == [100]

    def test_merge_keeps_other_entries(self, cache):
        """Overwrite is per (level, index), not per level."""
        cache.merge(consolidate([_sub(1, 5, 0)]))
        cache.merge(consolidate([_sub(1, 6, 0)]))
        assert cache.contains(1, 5)
        assert cache.contains(1, 6)
        assert len(cache) == 2

    def test_merge_copies_lists(self, cache):
        """Mutating the merged mapping afterwards does not touch the cache."""
        tiles = consolidate([_sub(1, 5, 0)])
        cache.merge(tiles)
        tiles[1][5].append(_sub(1, 5, 50))
        assert len(cache.get(1, 5)) == 1

    def test_subtiles_for(self, cache):
        cache.merge(consolidate([_sub(1, 37741, 0)]))
        ref = parse_segment_id(41406471017)
        assert len(cache.subtiles_for(ref)) == 1

    def test_subtiles_for_missing_raises(self, cache):
        with pytest.raises(KeyError):
            cache.subtiles_for(parse_segment_id(41406471017))

    def test_snapshot_is_independent(self, cache):
        cache.merge(consolidate([_sub(1, 5, 0)]))
        snap = cache.snapshot()
        snap[1][5].clear()
        assert len(cache.get(1, 5)) == 1

    def test_stats(self, cache):
        cache.merge(consolidate([_sub(1, 5, 0), _sub(1, 5, 50), _sub(0, 2, 0)]))
        cache.get(1, 5)
        cache.get(2, 1)
        stats = cache.stats
        assert isinstance(stats, CacheStats)
        assert stats.total_tiles == 2
        assert stats.total_subtiles == 3
        assert stats.tiles_by_level == {1: 1, 0: 1}
        assert stats.hits == 1
        assert stats.misses == 1
