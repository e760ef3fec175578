from pydantic import BaseModel, Field, field_validator

from shared.constants import (
    LOG_LEVEL_DEFAULT,
    ROUTING_COSTING_DEFAULT,
    ROUTING_HOST_DEFAULT,
    SPEED_TILE_BASE_URL,
)

LatLon = tuple[float, float]


class SpeedSettings(BaseModel):
    """Runtime settings of the speed-annotation pipeline."""

    model_config = {
        'extra': 'ignore',
    }

    # Root of the speed-tile store, without trailing slash
    tile_base_url: str = SPEED_TILE_BASE_URL
    # Fail the whole fetch batch on the first undecodable tile
    strict_decode: bool = False

    routing_host: str = ROUTING_HOST_DEFAULT
    routing_api_key: str | None = None
    routing_costing: str = ROUTING_COSTING_DEFAULT

    # None disables the client-side timeout entirely
    http_timeout_s: float | None = None

    log_level: str = LOG_LEVEL_DEFAULT

    @field_validator('tile_base_url', 'routing_host')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        v = str(v).strip()
        if not v:
            msg = 'URL must not be empty'
            raise ValueError(msg)
        return v.rstrip('/')

    @field_validator('http_timeout_s')
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        if v is None:
            return None
        if v <= 0:
            msg = 'timeout must be positive or unset'
            raise ValueError(msg)
        return float(v)

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = str(v).strip().upper()
        if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            msg = f'Unknown log level: {v}'
            raise ValueError(msg)
        return level


class TrafficSegment(BaseModel):
    """OSMLR segment tag attached to a trace edge."""

    model_config = {'extra': 'ignore'}

    segment_id: int


class TraceEdge(BaseModel):
    """One edge of a trace_attributes response."""

    model_config = {'extra': 'ignore'}

    begin_shape_index: int = Field(ge=0)
    end_shape_index: int = Field(ge=0)
    traffic_segments: list[TrafficSegment] = Field(default_factory=list)


class TraceAttributesResponse(BaseModel):
    """Subset of the routing service's trace_attributes body that we rely on."""

    model_config = {'extra': 'ignore'}

    shape: str
    edges: list[TraceEdge] = Field(default_factory=list)


class RouteEdge(BaseModel):
    """A leg of the route geometry, optionally tagged with segment ids."""

    begin_shape_index: int
    end_shape_index: int
    segment_ids: list[int] = Field(default_factory=list)


class RouteShape(BaseModel):
    """Decoded route: coordinates plus the edges spanning them."""

    coordinates: list[LatLon]
    edges: list[RouteEdge] = Field(default_factory=list)


class AnnotatedSegment(BaseModel):
    """Coordinates of one edge with the reference speed resolved for it."""

    coordinates: list[LatLon]
    reference_speed: float | None = None
