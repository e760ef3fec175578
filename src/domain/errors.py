"""Error types raised by the speed-tile pipeline."""

from __future__ import annotations


class SpeedTileError(Exception):
    """Base class for pipeline errors."""


class SchemaViolation(SpeedTileError):
    """A speed-tile buffer failed to decode or verify against the tile schema."""


class NetworkFailure(SpeedTileError):
    """A request could not be made at all (connection refused, DNS, reset)."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f'Request to {url} failed: {reason}')
        self.url = url
        self.reason = reason


class RouteServiceError(SpeedTileError):
    """The routing service rejected a request or returned an unusable body."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status
