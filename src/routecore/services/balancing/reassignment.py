"""Cross-route reassignment suggestions.

For every customer, find the nearest neighbour on its own route and the
nearest neighbour on any other route in the same region. When the other
route's neighbour is closer, suggest moving the customer.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ...config import settings
from ...models.domain import GeoRecord, has_fix
from ..geospatial import haversine_km, within_box
from ..progress import CancellationToken, ProgressCallback, ProgressTracker

SEARCH_BOX_DEG = 1.0
# Distance assigned to a customer with no same-route peer
ISOLATED_DISTANCE_KM = 9999.0
# Saving credited to a move that fixes isolation
ISOLATED_SAVING_KM = 100.0

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ReassignmentSuggestion:
    suggestion_id: str
    kind: str
    record: GeoRecord
    current_route: str
    target_route: str
    dist_to_current_km: float
    dist_to_target_km: float
    is_isolated: bool
    estimated_saving_km: float
    reason: str
    saving_label: str
    current_anchor: Tuple[float, float]
    target_anchor: Tuple[float, float]
    suggested_day: Optional[str] = None


def _eligible(record: GeoRecord) -> bool:
    return has_fix(record) and bool(record.route_name) and bool(record.region_description)


def _group_by_region(records: Sequence[GeoRecord]) -> Dict[str, List[GeoRecord]]:
    regions: Dict[str, List[GeoRecord]] = {}
    for record in records:
        regions.setdefault(record.region_description, []).append(record)
    return regions


def _nearest_peers(
    target: GeoRecord, peers: Sequence[GeoRecord]
) -> tuple[float, Optional[GeoRecord], float, Optional[GeoRecord]]:
    dist_current = float("inf")
    current_peer: Optional[GeoRecord] = None
    dist_other = float("inf")
    other_peer: Optional[GeoRecord] = None

    for peer in peers:
        if peer.id == target.id:
            continue
        if not within_box(target.latitude, target.longitude, peer.latitude, peer.longitude, SEARCH_BOX_DEG):
            continue

        distance = haversine_km(target.latitude, target.longitude, peer.latitude, peer.longitude)
        if peer.route_name == target.route_name:
            if distance < dist_current:
                dist_current = distance
                current_peer = peer
        elif distance < dist_other:
            dist_other = distance
            other_peer = peer
    return dist_current, current_peer, dist_other, other_peer


def evaluate_record(target: GeoRecord, peers: Sequence[GeoRecord]) -> Optional[ReassignmentSuggestion]:
    """Return a move suggestion for ``target`` or None if its own route is closest."""

    dist_current, current_peer, dist_other, other_peer = _nearest_peers(target, peers)
    if other_peer is None:
        return None

    isolated = current_peer is None
    current_score = ISOLATED_DISTANCE_KM if isolated else dist_current
    if dist_other >= current_score:
        return None

    target_route = other_peer.route_name
    saving = (ISOLATED_SAVING_KM if isolated else dist_current) - dist_other
    saving_label = "Fixes Isolation" if isolated else f"{current_score - dist_other:.3f} km"
    current_text = "Isolated" if isolated else f"{dist_current:.2f}km"

    if current_peer is not None:
        current_anchor = (current_peer.latitude, current_peer.longitude)
    else:
        current_anchor = (target.latitude, target.longitude)

    return ReassignmentSuggestion(
        suggestion_id=f"opt-{target.id}-{target_route}",
        kind="MOVE_ROUTE",
        record=target,
        current_route=target.route_name,
        target_route=target_route,
        dist_to_current_km=0.0 if isolated else round(dist_current, 3),
        dist_to_target_km=round(dist_other, 3),
        is_isolated=isolated,
        estimated_saving_km=saving,
        reason=(
            f"Closer neighbor found in {target_route} ({dist_other:.2f}km) "
            f"vs {target.route_name} ({current_text})."
        ),
        saving_label=f"Save {saving_label}",
        current_anchor=current_anchor,
        target_anchor=(other_peer.latitude, other_peer.longitude),
        suggested_day=other_peer.day,
    )


async def find_reassignments(
    records: Sequence[GeoRecord],
    on_progress: Optional[ProgressCallback] = None,
    *,
    cancel_token: Optional[CancellationToken] = None,
    tracker: Optional[ProgressTracker] = None,
    yield_every: Optional[int] = None,
) -> list[ReassignmentSuggestion]:
    """Scan every region for customers better served by another route.

    The scan yields to the event loop every ``yield_every`` customers,
    reporting progress and checking ``cancel_token`` at the same points
    and once before the scan starts.
    Raises ``OperationCancelled`` if the token is cancelled.
    """

    yield_every = yield_every or settings.reassignment_yield_every
    valid = [record for record in records if _eligible(record)]
    regions = _group_by_region(valid)
    if tracker is None:
        tracker = ProgressTracker(total=len(valid), callback=on_progress)
    else:
        tracker.total = len(valid)
        tracker.processed = 0
        tracker.percent = 0
        tracker.history.clear()
        tracker.callback = tracker.callback or on_progress

    if cancel_token is not None:
        cancel_token.raise_if_cancelled()

    suggestions: list[ReassignmentSuggestion] = []
    for region, members in regions.items():
        if len(members) < 2:
            continue

        for target in members:
            processed = tracker.advance()
            if processed % yield_every == 0:
                tracker.report()
                if cancel_token is not None:
                    cancel_token.raise_if_cancelled()
                await asyncio.sleep(0)

            suggestion = evaluate_record(target, members)
            if suggestion is not None:
                suggestions.append(suggestion)

    tracker.report(100)
    logger.info(f"Reassignment scan: {len(suggestions)} suggestions across {len(regions)} regions")

    return sorted(suggestions, key=lambda item: item.estimated_saving_km, reverse=True)
