"""Tests for constants module."""

from shared.constants import (
    SEGMENT_INDEX_MASK,
    SEGMENT_INDEX_SHIFT,
    SEGMENT_LEVEL_MASK,
    SEGMENT_TILE_INDEX_MASK,
    SEGMENT_TILE_INDEX_SHIFT,
    TILE_LEVEL_SIZES,
    UNCOVERED_TILE_LEVEL,
)


class TestSegmentBitLayout:
    """The packed segment id fields must not overlap."""

    def test_masks(self):
        assert SEGMENT_LEVEL_MASK == 0x7
        assert SEGMENT_TILE_INDEX_MASK == 0x3FFFFF
        assert SEGMENT_INDEX_MASK == 0x1FFFFF

    def test_shifts(self):
        assert SEGMENT_TILE_INDEX_SHIFT == 3
        assert SEGMENT_INDEX_SHIFT == 25

    def test_fields_disjoint(self):
        level = SEGMENT_LEVEL_MASK
        tile = SEGMENT_TILE_INDEX_MASK << SEGMENT_TILE_INDEX_SHIFT
        index = SEGMENT_INDEX_MASK << SEGMENT_INDEX_SHIFT
        assert level & tile == 0
        assert tile & index == 0
        assert level & index == 0


class TestTileLevels:
    def test_finest_level_first(self):
        assert list(TILE_LEVEL_SIZES) == [2, 1, 0]

    def test_sizes_divide_the_globe(self):
        for size in TILE_LEVEL_SIZES.values():
            assert (360 / size).is_integer()
            assert (180 / size).is_integer()

    def test_uncovered_level_is_on_the_grid(self):
        assert UNCOVERED_TILE_LEVEL in TILE_LEVEL_SIZES
