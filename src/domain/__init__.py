"""Domain layer - models, errors and settings sections."""
from domain.errors import (
    NetworkFailure,
    RouteServiceError,
    SchemaViolation,
    SpeedTileError,
)
from domain.models import (
    AnnotatedSegment,
    RouteEdge,
    RouteShape,
    SpeedSettings,
)

__all__ = [
    'AnnotatedSegment',
    'NetworkFailure',
    'RouteEdge',
    'RouteServiceError',
    'RouteShape',
    'SchemaViolation',
    'SpeedSettings',
    'SpeedTileError',
]
