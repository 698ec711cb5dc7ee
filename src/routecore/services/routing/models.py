"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from ...models.domain import GeoRecord


@dataclass(slots=True)
class RouteSegment:
    from_id: str
    to_id: str
    distance_km: float
    estimated_time_min: float


@dataclass(slots=True)
class RouteSummary:
    total_distance_km: float
    total_time_min: float
    stop_count: int
    segments: List[RouteSegment]
    constraint_violations: dict[str, float] = field(default_factory=dict)


@dataclass(slots=True)
class SequenceResult:
    ordered_records: List[GeoRecord]
    summary: RouteSummary
    skipped_count: int = 0
