"""
Client for the Valhalla routing service.

Two sequential calls produce a RouteShape: /route computes the path between
waypoints, then /trace_attributes walks that path again and returns per-edge
shape indices and OSMLR traffic segment tags.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import aiohttp
from pydantic import ValidationError

from domain.errors import RouteServiceError
from domain.models import RouteEdge, RouteShape, TraceAttributesResponse
from geo.polyline import decode_polyline
from shared.constants import (
    HTTP_OK,
    MIN_ROUTE_LOCATIONS,
    ROUTING_COSTING_DEFAULT,
    ROUTING_SHAPE_MATCH,
    ROUTING_TRACE_ATTRIBUTES,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from domain.models import LatLon

logger = logging.getLogger(__name__)


class ValhallaClient:
    """Thin async wrapper over the Valhalla JSON API."""

    def __init__(
        self,
        client: aiohttp.ClientSession,
        host: str,
        *,
        api_key: str | None = None,
        costing: str = ROUTING_COSTING_DEFAULT,
    ):
        self.client = client
        self.host = host.rstrip('/')
        self.api_key = api_key
        self.costing = costing

    async def _post(self, action: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f'{self.host}/{action}'
        params = {'api_key': self.api_key} if self.api_key else None
        try:
            resp = await self.client.post(url, json=payload, params=params)
        except (aiohttp.ClientError, TimeoutError) as e:
            msg = f'Routing service unreachable ({action}): {str(e) or type(e).__name__}'
            raise RouteServiceError(msg) from e
        try:
            sc = resp.status
            try:
                body = await resp.json(content_type=None)
            except (aiohttp.ClientError, ValueError) as e:
                msg = f'Routing service returned an unreadable body ({action}, HTTP {sc})'
                raise RouteServiceError(msg, status=sc) from e
        finally:
            release = getattr(resp, 'release', None)
            if callable(release):
                release()

        if not isinstance(body, dict):
            msg = f'Routing service returned an unexpected body ({action}, HTTP {sc})'
            raise RouteServiceError(msg, status=sc)
        if sc != HTTP_OK or 'error' in body:
            detail = body.get('error') or body.get('status') or 'unknown error'
            msg = f'Routing service error ({action}, HTTP {sc}): {detail}'
            raise RouteServiceError(msg, status=sc)
        return body

    async def route(self, locations: Sequence[LatLon]) -> list[LatLon]:
        """Compute a route and return its full decoded shape."""
        if len(locations) < MIN_ROUTE_LOCATIONS:
            msg = 'At least two locations are required to compute a route.'
            raise RouteServiceError(msg)
        payload = {
            'locations': [{'lat': lat, 'lon': lon} for lat, lon in locations],
            'costing': self.costing,
        }
        body = await self._post('route', payload)
        legs = (body.get('trip') or {}).get('legs') or []
        if not legs:
            msg = 'Routing service found no route'
            raise RouteServiceError(msg)

        shape: list[LatLon] = []
        for leg in legs:
            try:
                points = decode_polyline(leg.get('shape', ''))
            except ValueError as e:
                msg = f'Routing service returned a malformed shape: {e}'
                raise RouteServiceError(msg) from e
            # consecutive legs share their junction point
            if shape and points and points[0] == shape[-1]:
                points = points[1:]
            shape.extend(points)
        return shape

    async def trace_attributes(self, coordinates: Sequence[LatLon]) -> RouteShape:
        """Match a shape back onto the graph and collect edge attributes."""
        payload = {
            'shape': [{'lat': lat, 'lon': lon} for lat, lon in coordinates],
            'costing': self.costing,
            'shape_match': ROUTING_SHAPE_MATCH,
            'filters': {
                'attributes': list(ROUTING_TRACE_ATTRIBUTES),
                'action': 'include',
            },
        }
        body = await self._post('trace_attributes', payload)
        try:
            trace = TraceAttributesResponse.model_validate(body)
            points = decode_polyline(trace.shape)
        except (ValidationError, ValueError) as e:
            msg = f'Routing service returned malformed trace attributes: {e}'
            raise RouteServiceError(msg) from e

        edges = [
            RouteEdge(
                begin_shape_index=edge.begin_shape_index,
                end_shape_index=edge.end_shape_index,
                segment_ids=[seg.segment_id for seg in edge.traffic_segments],
            )
            for edge in trace.edges
        ]
        return RouteShape(coordinates=points, edges=edges)

    async def fetch_route(self, locations: Sequence[LatLon]) -> RouteShape:
        shape = await self.route(locations)
        logger.debug('Route shape has %d points', len(shape))
        return await self.trace_attributes(shape)
