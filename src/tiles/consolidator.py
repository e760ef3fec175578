from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tiles.decoder import SubTile

# level -> tile index -> subtiles in arrival order
TileMap = dict[int, dict[int, list['SubTile']]]


def consolidate(subtiles: Iterable[SubTile]) -> TileMap:
    """Group subtile records by level, then tile index, keeping input order."""
    construct: TileMap = {}
    for sub in subtiles:
        construct.setdefault(sub.level, {}).setdefault(sub.tile_index, []).append(sub)
    return construct
