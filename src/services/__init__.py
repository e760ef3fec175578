"""Services package - routing, speed matching and pipeline orchestration."""

from services.routing_client import ValhallaClient
from services.segment_matcher import (
    SegmentMatcher,
    build_annotated_segments,
    collect_segment_references,
    find_reference_speed,
    resolve_reference_speeds,
)
from services.speed_pipeline import RouteOutcome, SpeedPipeline

__all__ = [
    'RouteOutcome',
    'SegmentMatcher',
    'SpeedPipeline',
    'ValhallaClient',
    'build_annotated_segments',
    'collect_segment_references',
    'find_reference_speed',
    'resolve_reference_speeds',
]
