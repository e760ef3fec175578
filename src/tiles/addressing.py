"""OSMLR speed-tile addressing.

Converts bounding boxes to tile addresses across the three grid levels and
unpacks segment ids into (level, tile index, segment index) references.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from shared.constants import (
    SEGMENT_INDEX_MASK,
    SEGMENT_INDEX_SHIFT,
    SEGMENT_LEVEL_MASK,
    SEGMENT_TILE_INDEX_MASK,
    SEGMENT_TILE_INDEX_SHIFT,
    SPEED_TILE_EXTENSION,
    SPEED_TILE_SUBTILE_FILE,
    TILE_LEVEL_SIZES,
)


@dataclass(frozen=True)
class TileAddress:
    """One cell of a tile grid level."""

    level: int
    index: int


@dataclass(frozen=True)
class SegmentReference:
    """A segment id unpacked into its tile and local segment index."""

    segment_id: int
    level: int
    tile_index: int
    segment_index: int

    @property
    def address(self) -> TileAddress:
        return TileAddress(self.level, self.tile_index)


def tiles_for_bounding_box(
    left: float, bottom: float, right: float, top: float
) -> list[TileAddress]:
    """
    Return the tiles of every level intersecting the box.

    A box with left > right crosses the anti-meridian; its east and west
    halves are computed separately and concatenated as-is, so the result may
    contain duplicates.
    """
    if left > right:
        east = tiles_for_bounding_box(left, bottom, 180.0, top)
        west = tiles_for_bounding_box(-180.0, bottom, right, top)
        return east + west

    left += 180
    right += 180
    bottom += 90
    top += 90

    tiles: list[TileAddress] = []
    for level, size in TILE_LEVEL_SIZES.items():
        for x in range(math.floor(left / size), math.floor(right / size) + 1):
            for y in range(math.floor(bottom / size), math.floor(top / size) + 1):
                tiles.append(TileAddress(level, math.floor(y * (360.0 / size) + x)))
    return tiles


def parse_segment_id(segment_id: int) -> SegmentReference:
    """Unpack a 46-bit OSMLR id: 3 bits level, 22 bits tile, 21 bits segment."""
    segment_id = int(segment_id)
    return SegmentReference(
        segment_id=segment_id,
        level=segment_id & SEGMENT_LEVEL_MASK,
        tile_index=(segment_id >> SEGMENT_TILE_INDEX_SHIFT) & SEGMENT_TILE_INDEX_MASK,
        segment_index=(segment_id >> SEGMENT_INDEX_SHIFT) & SEGMENT_INDEX_MASK,
    )


def url_suffix_for(address: TileAddress) -> str:
    return f'{address.level}/{address.index}'


def tile_url(
    base_url: str,
    address: TileAddress,
    subtile_file: int = SPEED_TILE_SUBTILE_FILE,
) -> str:
    """Full object URL: {base}/{level}/{index}.spd.{subtile_file}.gz."""
    suffix = url_suffix_for(address)
    return f'{base_url.rstrip("/")}/{suffix}.{SPEED_TILE_EXTENSION}.{subtile_file}.gz'
