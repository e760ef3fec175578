"""Encoded polyline codec (Google algorithm, configurable precision)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from shared.constants import POLYLINE_PRECISION

if TYPE_CHECKING:
    from collections.abc import Iterable


def decode_polyline(
    encoded: str, precision: int = POLYLINE_PRECISION
) -> list[tuple[float, float]]:
    """Decode an encoded polyline into (lat, lon) pairs."""
    if not encoded:
        return []

    inv = 1.0 / (10**precision)
    decoded: list[tuple[float, float]] = []
    previous = [0, 0]
    i = 0
    length = len(encoded)

    while i < length:
        ll = [0, 0]
        for j in (0, 1):
            shift = 0
            byte = 0x20
            while byte >= 0x20:
                if i >= length:
                    msg = f'Truncated polyline at offset {i}'
                    raise ValueError(msg)
                byte = ord(encoded[i]) - 63
                i += 1
                ll[j] |= (byte & 0x1F) << shift
                shift += 5
            ll[j] = previous[j] + (~(ll[j] >> 1) if ll[j] & 1 else (ll[j] >> 1))
            previous[j] = ll[j]
        decoded.append(
            (round(ll[0] * inv, precision), round(ll[1] * inv, precision))
        )

    return decoded


def _encode_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1
    chunks = []
    while value >= 0x20:
        chunks.append(chr((0x20 | (value & 0x1F)) + 63))
        value >>= 5
    chunks.append(chr(value + 63))
    return ''.join(chunks)


def encode_polyline(
    points: Iterable[tuple[float, float]], precision: int = POLYLINE_PRECISION
) -> str:
    """Encode (lat, lon) pairs; inverse of decode_polyline."""
    factor = 10**precision
    out = []
    prev_lat = prev_lon = 0
    for lat, lon in points:
        ilat = round(lat * factor)
        ilon = round(lon * factor)
        out.append(_encode_value(ilat - prev_lat))
        out.append(_encode_value(ilon - prev_lon))
        prev_lat, prev_lon = ilat, ilon
    return ''.join(out)
