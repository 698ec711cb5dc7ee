"""Base classes for proximity index implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ...models.domain import GeoRecord

SAME_LOCATION_KM = 0.02


class ProximityIndex(ABC):
    """Contract for finding co-located and nearby records."""

    @abstractmethod
    def same_location(self, records: Sequence[GeoRecord], *, max_km: float = SAME_LOCATION_KM) -> set[str]:
        """Return keys of records that share a location with at least one other record."""
        raise NotImplementedError

    @abstractmethod
    def nearby_count(self, records: Sequence[GeoRecord], threshold_km: float) -> int:
        """Count records with a neighbour beyond the same-location floor but within ``threshold_km``."""
        raise NotImplementedError
