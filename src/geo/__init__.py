"""Geo module - route geometry utilities."""

from .polyline import decode_polyline, encode_polyline

__all__ = [
    'decode_polyline',
    'encode_polyline',
]
