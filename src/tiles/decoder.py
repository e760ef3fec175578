"""Speed-tile protobuf decoding.

The SpeedTile schema is compiled into a descriptor pool at import time, so
decoding never needs the .proto file or a network round trip.
"""

from __future__ import annotations

import gzip
import logging
import zlib
from dataclasses import dataclass

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import DecodeError

from domain.errors import SchemaViolation
from shared.constants import GZIP_MAGIC, TILE_LEVEL_SIZES

logger = logging.getLogger(__name__)

_FIELD = descriptor_pb2.FieldDescriptorProto


@dataclass(frozen=True)
class SubTile:
    """Contiguous slice of a tile's segment range with one speed per slot."""

    level: int
    tile_index: int
    start_segment_index: int
    subtile_segments: int
    total_segments: int
    reference_speeds: tuple[int, ...]


@dataclass(frozen=True)
class DecodedTile:
    level: int
    index: int
    subtiles: tuple[SubTile, ...]


def _add_field(
    message: descriptor_pb2.DescriptorProto,
    name: str,
    number: int,
    field_type: int,
    *,
    repeated: bool = False,
    type_name: str | None = None,
) -> None:
    field = message.field.add()
    field.name = name
    field.number = number
    field.type = field_type
    field.label = _FIELD.LABEL_REPEATED if repeated else _FIELD.LABEL_OPTIONAL
    if type_name:
        field.type_name = type_name


def _build_speed_tile_class() -> type:
    fdp = descriptor_pb2.FileDescriptorProto()
    fdp.name = 'speedtile.proto'
    fdp.package = 'speedtile'
    fdp.syntax = 'proto3'

    subtile = fdp.message_type.add()
    subtile.name = 'SubTile'
    _add_field(subtile, 'startSegmentIndex', 1, _FIELD.TYPE_UINT32)
    _add_field(subtile, 'subtileSegments', 2, _FIELD.TYPE_UINT32)
    _add_field(subtile, 'totalSegments', 3, _FIELD.TYPE_UINT32)
    _add_field(subtile, 'referenceSpeeds', 4, _FIELD.TYPE_UINT32, repeated=True)

    tile = fdp.message_type.add()
    tile.name = 'SpeedTile'
    _add_field(tile, 'level', 1, _FIELD.TYPE_UINT32)
    _add_field(tile, 'index', 2, _FIELD.TYPE_UINT32)
    _add_field(
        tile,
        'subtiles',
        3,
        _FIELD.TYPE_MESSAGE,
        repeated=True,
        type_name='.speedtile.SubTile',
    )

    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(fdp.SerializeToString())
    return message_factory.GetMessageClass(
        pool.FindMessageTypeByName('speedtile.SpeedTile')
    )


SpeedTileMessage = _build_speed_tile_class()


def _maybe_gunzip(buffer: bytes) -> bytes:
    if not buffer.startswith(GZIP_MAGIC):
        return buffer
    try:
        return gzip.decompress(buffer)
    except (OSError, EOFError, zlib.error) as e:
        msg = f'Corrupt gzip stream: {e}'
        raise SchemaViolation(msg) from e


def _verify(message) -> str | None:
    """Return a description of the first structural problem, or None."""
    if message.level not in TILE_LEVEL_SIZES:
        return f'level {message.level} is not a tile level'
    for pos, sub in enumerate(message.subtiles):
        if sub.subtileSegments == 0:
            return f'subtile {pos}: subtileSegments is 0'
        if len(sub.referenceSpeeds) > sub.subtileSegments:
            return (
                f'subtile {pos}: {len(sub.referenceSpeeds)} speeds exceed '
                f'{sub.subtileSegments} segments'
            )
        if sub.startSegmentIndex > sub.totalSegments:
            return (
                f'subtile {pos}: start {sub.startSegmentIndex} beyond '
                f'total {sub.totalSegments}'
            )
    return None


def encode_tile(tile: DecodedTile) -> bytes:
    """Serialize a tile record back to the wire format (uncompressed)."""
    message = SpeedTileMessage(level=tile.level, index=tile.index)
    for sub in tile.subtiles:
        message.subtiles.add(
            startSegmentIndex=sub.start_segment_index,
            subtileSegments=sub.subtile_segments,
            totalSegments=sub.total_segments,
            referenceSpeeds=list(sub.reference_speeds),
        )
    return message.SerializeToString()


def decode_tile(buffer: bytes) -> DecodedTile:
    """
    Decode one speed-tile payload into a plain DecodedTile.

    gzip input is decompressed first. Any parse or verification failure
    raises SchemaViolation and nothing is returned.
    """
    raw = _maybe_gunzip(bytes(buffer))
    message = SpeedTileMessage()
    try:
        message.ParseFromString(raw)
    except DecodeError as e:
        msg = f'Unreadable speed tile: {e}'
        raise SchemaViolation(msg) from e

    problem = _verify(message)
    if problem:
        raise SchemaViolation(problem)

    subtiles = tuple(
        SubTile(
            level=message.level,
            tile_index=message.index,
            start_segment_index=sub.startSegmentIndex,
            subtile_segments=sub.subtileSegments,
            total_segments=sub.totalSegments,
            reference_speeds=tuple(sub.referenceSpeeds),
        )
        for sub in message.subtiles
    )
    logger.debug(
        'Decoded tile %d/%d with %d subtiles', message.level, message.index, len(subtiles)
    )
    return DecodedTile(level=message.level, index=message.index, subtiles=subtiles)
