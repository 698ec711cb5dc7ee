"""Proximity scanning helpers."""

from __future__ import annotations

from typing import Sequence

from ...config import settings
from ...models.domain import GeoRecord
from .base import SAME_LOCATION_KM, ProximityIndex
from .sweep import SortSweepIndex


def get_index(method: str = "sweep", **kwargs) -> ProximityIndex:
    match method:
        case "sweep":
            return SortSweepIndex(**kwargs)
        case _:
            raise ValueError(f"Unknown proximity index '{method}'.")


def scan_same_location(records: Sequence[GeoRecord], *, index: ProximityIndex | None = None) -> set[str]:
    """Return keys of records within 20 m of another record."""

    return (index or get_index()).same_location(records)


def count_nearby(
    records: Sequence[GeoRecord],
    threshold_km: float | None = None,
    *,
    index: ProximityIndex | None = None,
) -> int:
    """Count distinct records with a neighbour between 20 m and ``threshold_km``."""

    threshold = threshold_km if threshold_km is not None else settings.nearby_threshold_km
    return (index or get_index()).nearby_count(records, threshold)


__all__ = [
    "ProximityIndex",
    "SortSweepIndex",
    "SAME_LOCATION_KM",
    "get_index",
    "scan_same_location",
    "count_nearby",
]
