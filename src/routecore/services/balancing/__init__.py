"""Route balancing and reassignment helpers."""

from .audit import RouteAudit, SequenceGap, analyze_sequence_gap, quick_route_audit
from .reassignment import ReassignmentSuggestion, evaluate_record, find_reassignments

__all__ = [
    "ReassignmentSuggestion",
    "RouteAudit",
    "SequenceGap",
    "analyze_sequence_gap",
    "evaluate_record",
    "find_reassignments",
    "quick_route_audit",
]
