"""Route sequencing."""

from .models import RouteSegment, RouteSummary, SequenceResult
from .sequencer import build_segments, resolve_start_index, sequence_route

__all__ = [
    "RouteSegment",
    "RouteSummary",
    "SequenceResult",
    "build_segments",
    "resolve_start_index",
    "sequence_route",
]
