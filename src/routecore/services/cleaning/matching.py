"""Pairwise duplicate tests: metre distance and name edit distance."""

from __future__ import annotations

import math

from ...models.domain import GeoRecord

EARTH_RADIUS_M = 6371e3
# returned when two names are too different to bother comparing
EDIT_DISTANCE_SENTINEL = 100
MAX_LENGTH_GAP = 3
EXACT_COORD_DEG = 0.00001
FUZZY_DISTANCE_M = 20.0
SHORT_NAME_LENGTH = 5
FUZZY_EDIT_LIMIT = 2


def _coordinate(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def coordinates(record: GeoRecord) -> tuple[float, float] | None:
    lat, lon = _coordinate(record.latitude), _coordinate(record.longitude)
    if lat is None or lon is None:
        return None
    return lat, lon


def distance_m(a: GeoRecord, b: GeoRecord) -> float:
    """Haversine distance in metres, ``inf`` when either record lacks coordinates."""

    first, second = coordinates(a), coordinates(b)
    if first is None or second is None:
        return math.inf

    lat1, lon1 = first
    lat2, lon2 = second
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def levenshtein(a: str, b: str) -> int:
    """Classic DP edit distance with an early exit for clearly different strings."""

    if not a or not b:
        return EDIT_DISTANCE_SENTINEL
    if abs(len(a) - len(b)) > MAX_LENGTH_GAP:
        return EDIT_DISTANCE_SENTINEL

    previous = list(range(len(a) + 1))
    for i, char_b in enumerate(b, start=1):
        current = [i] + [0] * len(a)
        for j, char_a in enumerate(a, start=1):
            if char_a == char_b:
                current[j] = previous[j - 1]
            else:
                current[j] = 1 + min(previous[j - 1], current[j - 1], previous[j])
        previous = current
    return previous[len(a)]


def _name(record: GeoRecord) -> str:
    return record.name if isinstance(record.name, str) else ""


def name_threshold(a: str, b: str) -> int:
    return 0 if max(len(a), len(b)) < SHORT_NAME_LENGTH else FUZZY_EDIT_LIMIT


def is_exact_match(a: GeoRecord, b: GeoRecord) -> bool:
    """Same trimmed, case-insensitive name at the same coordinates."""

    first, second = coordinates(a), coordinates(b)
    if first is None or second is None:
        return False
    if _name(a).strip().lower() != _name(b).strip().lower():
        return False
    return abs(first[0] - second[0]) < EXACT_COORD_DEG and abs(first[1] - second[1]) < EXACT_COORD_DEG


def is_fuzzy_match(a: GeoRecord, b: GeoRecord) -> bool:
    """Within 20 m and names a couple of edits apart."""

    if distance_m(a, b) >= FUZZY_DISTANCE_M:
        return False
    name_a, name_b = _name(a), _name(b)
    return levenshtein(name_a.lower(), name_b.lower()) <= name_threshold(name_a, name_b)


def is_duplicate(a: GeoRecord, b: GeoRecord) -> bool:
    return is_exact_match(a, b) or is_fuzzy_match(a, b)
