"""Tests for SpeedTile decoding and verification."""

from __future__ import annotations

import gzip

import pytest

from domain.errors import SchemaViolation
from tiles.decoder import DecodedTile, SpeedTileMessage, SubTile, decode_tile, encode_tile


def _tile(level=1, index=37741, subtiles=None) -> DecodedTile:
    if subtiles is None:
        subtiles = (
            SubTile(level, index, 0, 50, 120, tuple(range(10, 60))),
            SubTile(level, index, 50, 50, 120, tuple(range(60, 110))),
        )
    return DecodedTile(level=level, index=index, subtiles=tuple(subtiles))


class TestDecodeTile:
    """Tests for decode_tile."""

    def test_decodes_plain_buffer(self):
        """Uncompressed protobuf decodes into plain records."""
        tile = _tile()
        decoded = decode_tile(encode_tile(tile))
        assert decoded == tile

    def test_decodes_gzip_buffer(self):
        """Payloads carrying the gzip magic are decompressed first."""
        tile = _tile()
        decoded = decode_tile(gzip.compress(encode_tile(tile)))
        assert decoded.level == 1
        assert decoded.index == 37741
        assert len(decoded.subtiles) == 2

    def test_subtiles_inherit_header(self):
        """Every subtile carries the tile's level and index."""
        decoded = decode_tile(encode_tile(_tile(level=0, index=2025)))
        assert {(s.level, s.tile_index) for s in decoded.subtiles} == {(0, 2025)}

    def test_output_is_plain(self):
        """No protobuf containers leak into the result."""
        decoded = decode_tile(encode_tile(_tile()))
        assert isinstance(decoded.subtiles, tuple)
        assert isinstance(decoded.subtiles[0].reference_speeds, tuple)
        assert all(isinstance(v, int) for v in decoded.subtiles[0].reference_speeds)

    def test_subtile_order_preserved(self):
        """Subtiles are returned in wire order, not sorted."""
        subtiles = (
            SubTile(1, 5, 50, 50, 100, (1,)),
            SubTile(1, 5, 0, 50, 100, (2,)),
        )
        decoded = decode_tile(encode_tile(_tile(1, 5, subtiles)))
        assert [s.start_segment_index for s in decoded.subtiles] == [50, 0]

    def test_accepts_bytearray(self):
        decoded = decode_tile(bytearray(encode_tile(_tile())))
        assert decoded.index == 37741


class TestSchemaViolations:
    """Structural verification failures."""

    def test_truncated_message(self):
        """A length-delimited field running past the buffer end is rejected."""
        with pytest.raises(SchemaViolation):
            decode_tile(b'\x1a\x05\x08')

    def test_corrupt_gzip(self):
        with pytest.raises(SchemaViolation, match='gzip'):
            decode_tile(b'\x1f\x8bgarbage')

    def test_unknown_level(self):
        message = SpeedTileMessage(level=5, index=1)
        with pytest.raises(SchemaViolation, match='level 5'):
            decode_tile(message.SerializeToString())

    def test_zero_subtile_segments(self):
        message = SpeedTileMessage(level=1, index=1)
        message.subtiles.add(startSegmentIndex=0, subtileSegments=0, totalSegments=10)
        with pytest.raises(SchemaViolation, match='subtileSegments is 0'):
            decode_tile(message.SerializeToString())

    def test_too_many_speeds(self):
        message = SpeedTileMessage(level=1, index=1)
        message.subtiles.add(
            startSegmentIndex=0,
            subtileSegments=2,
            totalSegments=10,
            referenceSpeeds=[1, 2, 3],
        )
        with pytest.raises(SchemaViolation, match='exceed'):
            decode_tile(message.SerializeToString())

    def test_start_beyond_total(self):
        message = SpeedTileMessage(level=1, index=1)
        message.subtiles.add(startSegmentIndex=20, subtileSegments=5, totalSegments=10)
        with pytest.raises(SchemaViolation, match='beyond'):
            decode_tile(message.SerializeToString())
