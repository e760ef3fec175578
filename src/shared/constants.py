from __future__ import annotations

from http import HTTPStatus

# Base URL of the published speed-tile extracts
SPEED_TILE_BASE_URL = 'https://s3.amazonaws.com/speed-extracts/2017/0'

# Only the first subtile file of each tile is ever requested
SPEED_TILE_SUBTILE_FILE = 0

# Suffix pattern of a speed-tile object: {level}/{index}.spd.{subtile}.gz
SPEED_TILE_EXTENSION = 'spd'

# Tile grid sizes in degrees, finest level first
TILE_LEVEL_SIZES: dict[int, float] = {
    2: 0.25,
    1: 1.0,
    0: 4.0,
}

# Level with no stored speed data
UNCOVERED_TILE_LEVEL = 2

# Bit layout of a packed OSMLR segment id
SEGMENT_LEVEL_BITS = 3
SEGMENT_TILE_INDEX_BITS = 22
SEGMENT_INDEX_BITS = 21

SEGMENT_LEVEL_MASK = (1 << SEGMENT_LEVEL_BITS) - 1
SEGMENT_TILE_INDEX_MASK = (1 << SEGMENT_TILE_INDEX_BITS) - 1
SEGMENT_INDEX_MASK = (1 << SEGMENT_INDEX_BITS) - 1

SEGMENT_TILE_INDEX_SHIFT = SEGMENT_LEVEL_BITS
SEGMENT_INDEX_SHIFT = SEGMENT_LEVEL_BITS + SEGMENT_TILE_INDEX_BITS

# gzip stream magic
GZIP_MAGIC = b'\x1f\x8b'

HTTP_OK = HTTPStatus.OK

# Routing service (Valhalla JSON API)
ROUTING_HOST_DEFAULT = 'https://valhalla1.openstreetmap.de'
ROUTING_COSTING_DEFAULT = 'auto'
ROUTING_SHAPE_MATCH = 'map_snap'
ROUTING_TRACE_ATTRIBUTES = (
    'edge.begin_shape_index',
    'edge.end_shape_index',
    'edge.traffic_segments.segment_id',
    'shape',
)

# Encoded polyline precision used by the routing service
POLYLINE_PRECISION = 6

# Minimum number of waypoints for a route request
MIN_ROUTE_LOCATIONS = 2

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_LEVEL_DEFAULT = 'INFO'
