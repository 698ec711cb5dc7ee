"""Geospatial helper functions: great-circle distance and banded travel time."""

from __future__ import annotations

import math

from ..schemas.optimizer import OptimizerConfig

EARTH_RADIUS_KM = 6371.0


def _is_nan(value: float | None) -> bool:
    return value is None or value != value


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula.

    Returns ``math.inf`` when any coordinate is missing or NaN so that callers
    never mistake an unusable pair for a close one.
    """

    if _is_nan(lat1) or _is_nan(lon1) or _is_nan(lat2) or _is_nan(lon2):
        return math.inf

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


distance_km = haversine_km


def travel_time_min(distance: float, config: OptimizerConfig | None = None) -> float:
    """Estimate driving minutes for a leg of ``distance`` km.

    Speed depends on leg length (urban < 2 km, arterial < 10 km, highway
    otherwise). Legs shorter than ``short_leg_km`` get at least
    ``short_leg_traffic_floor`` as traffic multiplier.
    """

    config = config or OptimizerConfig()
    speed = config.speed_for(distance)
    minutes = (distance / speed) * 60

    traffic = config.traffic_factor
    if distance < config.short_leg_km:
        traffic = max(traffic, config.short_leg_traffic_floor)
    return minutes * traffic


def within_box(lat1: float, lon1: float, lat2: float, lon2: float, degrees: float) -> bool:
    """Cheap bounding-box test run before the exact distance."""

    return abs(lat1 - lat2) <= degrees and abs(lon1 - lon2) <= degrees
