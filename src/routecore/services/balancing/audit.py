"""Lightweight synchronous route audits."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ...models.domain import GeoRecord, has_fix
from ..geospatial import haversine_km, within_box

OUTLIER_DISTANCE_KM = 5.0
# another route's centre must be at least 30% closer
OUTLIER_IMPROVEMENT_RATIO = 0.7
GAP_SEARCH_BOX_DEG = 0.1
GAP_NEIGHBOUR_KM = 1.0


@dataclass(slots=True)
class RouteAudit:
    potential_savings_km: int
    isolated_count: int


@dataclass(slots=True)
class SequenceGap:
    kind: str
    detail: str
    neighbour_id: str


def _route_centroid(records: Sequence[GeoRecord]) -> Tuple[float, float]:
    lat = sum(r.latitude for r in records) / len(records)
    lon = sum(r.longitude for r in records) / len(records)
    return (lat, lon)


def quick_route_audit(records: Sequence[GeoRecord]) -> RouteAudit:
    """Estimate savings from customers sitting far from their route's centre."""

    routes: Dict[str, List[GeoRecord]] = {}
    for record in records:
        if has_fix(record) and record.route_name:
            routes.setdefault(record.route_name, []).append(record)

    centroids = {route: _route_centroid(members) for route, members in routes.items()}

    savings = 0.0
    isolated = 0
    for route, members in routes.items():
        own_lat, own_lon = centroids[route]
        for record in members:
            to_own = haversine_km(record.latitude, record.longitude, own_lat, own_lon)
            if to_own <= OUTLIER_DISTANCE_KM:
                continue

            best_other = min(
                (
                    haversine_km(record.latitude, record.longitude, lat, lon)
                    for other, (lat, lon) in centroids.items()
                    if other != route
                ),
                default=float("inf"),
            )
            if best_other < to_own * OUTLIER_IMPROVEMENT_RATIO:
                isolated += 1
                savings += to_own - best_other

    return RouteAudit(potential_savings_km=round(savings), isolated_count=isolated)


def analyze_sequence_gap(target: GeoRecord, records: Sequence[GeoRecord]) -> Optional[SequenceGap]:
    """Suggest a day move or route swap when a very close neighbour is visited elsewhere."""

    if not target.region_description or not has_fix(target):
        return None

    best: Optional[GeoRecord] = None
    best_distance = float("inf")
    for peer in records:
        if peer.id == target.id or peer.region_description != target.region_description or not has_fix(peer):
            continue
        if not within_box(target.latitude, target.longitude, peer.latitude, peer.longitude, GAP_SEARCH_BOX_DEG):
            continue
        distance = haversine_km(target.latitude, target.longitude, peer.latitude, peer.longitude)
        if distance < best_distance:
            best_distance = distance
            best = peer

    if best is None or best_distance >= GAP_NEIGHBOUR_KM:
        return None

    if best.route_name == target.route_name:
        if best.day != target.day:
            return SequenceGap(
                kind="MOVE_DAY",
                detail=f"Route visits nearby neighbor ({best.name}) on {best.day}. Move to that day.",
                neighbour_id=best.id,
            )
        return None

    return SequenceGap(
        kind="SWAP_ROUTE",
        detail=f"Route '{best.route_name}' visits nearby neighbor ({best.name}). Transfer customer.",
        neighbour_id=best.id,
    )
