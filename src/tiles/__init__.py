"""Speed-tile addressing, decoding and caching.

This module provides:
- tiles_for_bounding_box / parse_segment_id: OSMLR tile and segment addressing
- decode_tile: protobuf SpeedTile decoding with structural verification
- consolidate: grouping of subtiles by level and tile index
- SpeedTileCache: session-lifetime in-memory store
- SpeedTileFetcher: concurrent HTTP fetcher with cache short-circuit
"""

from tiles.addressing import (
    SegmentReference,
    TileAddress,
    parse_segment_id,
    tile_url,
    tiles_for_bounding_box,
    url_suffix_for,
)
from tiles.cache import CacheStats, SpeedTileCache
from tiles.consolidator import TileMap, consolidate
from tiles.decoder import DecodedTile, SubTile, decode_tile, encode_tile
from tiles.fetcher import SpeedTileFetcher, TileUnavailable

__all__ = [
    'CacheStats',
    'DecodedTile',
    'SegmentReference',
    'SpeedTileCache',
    'SpeedTileFetcher',
    'SubTile',
    'TileAddress',
    'TileMap',
    'TileUnavailable',
    'consolidate',
    'decode_tile',
    'encode_tile',
    'parse_segment_id',
    'tile_url',
    'tiles_for_bounding_box',
    'url_suffix_for',
]
