"""Domain models for geolocated customer records."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True, frozen=True)
class GeoRecord:
    """A customer stop with a location and its current route/region grouping.

    ``latitude``/``longitude`` may be ``None``, NaN or ``0.0`` when the record
    has no usable fix. ``route_name`` is the sequence group and
    ``region_description`` the broader cluster group.
    """

    id: str
    name: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    client_code: Optional[str] = None
    route_name: Optional[str] = None
    region_description: Optional[str] = None
    day: Optional[str] = None

    @property
    def key(self) -> str:
        """Identifier used when reporting matches to the dashboard."""
        return self.client_code or self.id


def is_valid_coordinate(value: object) -> bool:
    if value is None or isinstance(value, bool):
        return False
    if not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value != 0


def has_fix(record: GeoRecord) -> bool:
    """Return True if the record has finite, non-zero latitude and longitude."""

    return is_valid_coordinate(record.latitude) and is_valid_coordinate(record.longitude)
