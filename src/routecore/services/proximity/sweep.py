"""Sort-and-sweep proximity scanning.

Records are sorted by latitude and each one is compared only with the
records that follow it inside a latitude window. Once a candidate falls
outside the window every later candidate does too, so the inner loop can
stop early. This stands in for a spatial index while batches stay in the
low thousands.
"""

from __future__ import annotations

import logging
from typing import Iterator, Sequence

from ...config import settings
from ...models.domain import GeoRecord, has_fix
from ..geospatial import haversine_km
from .base import SAME_LOCATION_KM, ProximityIndex

# ~30 m of latitude
SAME_LOCATION_WINDOW_DEG = 0.0003
# Rough km -> degree conversion for the nearby window
NEARBY_DEG_PER_KM = 0.01

logger = logging.getLogger(__name__)


def _sorted_by_latitude(records: Sequence[GeoRecord]) -> list[GeoRecord]:
    valid = [record for record in records if has_fix(record)]
    # list.sort is stable, ties keep input order
    valid.sort(key=lambda record: record.latitude)
    return valid


def _sweep_pairs(
    ordered: Sequence[GeoRecord], window_deg: float
) -> Iterator[tuple[GeoRecord, GeoRecord, float]]:
    """Yield (a, b, km) for every pair inside the latitude/longitude window."""

    count = len(ordered)
    for i, first in enumerate(ordered):
        for j in range(i + 1, count):
            second = ordered[j]
            # sorted ascending: no later record can be inside the window either
            if second.latitude - first.latitude > window_deg:
                break
            if abs(first.longitude - second.longitude) > window_deg:
                continue
            yield first, second, haversine_km(first.latitude, first.longitude, second.latitude, second.longitude)


class SortSweepIndex(ProximityIndex):
    """Proximity queries backed by a latitude sort and a bounded forward scan."""

    def __init__(self, *, max_records: int | None = None, same_location_window_deg: float = SAME_LOCATION_WINDOW_DEG) -> None:
        self.max_records = max_records if max_records is not None else settings.max_nearby_records
        self.same_location_window_deg = same_location_window_deg

    def same_location(self, records: Sequence[GeoRecord], *, max_km: float = SAME_LOCATION_KM) -> set[str]:
        matched: set[str] = set()
        ordered = _sorted_by_latitude(records)
        if len(ordered) < 2:
            return matched

        for first, second, km in _sweep_pairs(ordered, self.same_location_window_deg):
            if km <= max_km:
                matched.add(first.key)
                matched.add(second.key)
        return matched

    def nearby_count(self, records: Sequence[GeoRecord], threshold_km: float) -> int:
        ordered = _sorted_by_latitude(records)
        if len(ordered) < 2:
            return 0
        if len(ordered) > self.max_records:
            logger.warning(
                f"Nearby scan skipped: {len(ordered)} records exceeds the cap of {self.max_records}"
            )
            return 0

        nearby: set[str] = set()
        for first, second, km in _sweep_pairs(ordered, threshold_km * NEARBY_DEG_PER_KM):
            # pairs at or under the same-location floor are reported elsewhere
            if SAME_LOCATION_KM < km < threshold_km:
                nearby.add(first.id)
                nearby.add(second.id)
        return len(nearby)
