"""Nearest-neighbour visit sequencing for a single route.

This module orders a route's stops greedily from a start node, choosing at
each step the unvisited stop with the lowest cost under the configured
objective, and then prices the resulting legs with the banded travel-time
model. It does not try to find an optimal tour.
"""

from __future__ import annotations

import logging
from typing import Sequence

from ...models.domain import GeoRecord, has_fix
from ...schemas.optimizer import CostObjective, OptimizerConfig, StartLocation
from ..geospatial import haversine_km, travel_time_min, within_box
from .models import RouteSegment, RouteSummary, SequenceResult

# Candidates further than this (degrees) from the current stop are skipped
SEARCH_BOX_DEG = 0.5
# Legs shorter than this are the same physical location
SAME_LOCATION_KM = 0.05
BREAK_AFTER_MIN = 240
BREAK_AFTER_STOPS = 10
# BALANCED cost: 70% distance, 30% time converted back to km at a nominal 30 km/h.
# The ratio is a heuristic carried over unchanged.
BALANCED_DISTANCE_WEIGHT = 0.7
BALANCED_TIME_WEIGHT = 0.3
BALANCED_KM_PER_HOUR = 30
DEPOT_MARKER = "DEPOT"

logger = logging.getLogger(__name__)


def _leg_cost(distance: float, config: OptimizerConfig) -> float:
    match config.cost_objective:
        case CostObjective.DISTANCE:
            return distance
        case CostObjective.TIME:
            return travel_time_min(distance, config)
        case _:
            hours = travel_time_min(distance, config) / 60
            return distance * BALANCED_DISTANCE_WEIGHT + hours * BALANCED_KM_PER_HOUR * BALANCED_TIME_WEIGHT


def _is_depot(record: GeoRecord) -> bool:
    if record.client_code and record.client_code.upper() == DEPOT_MARKER:
        return True
    return bool(record.name) and DEPOT_MARKER in record.name.upper()


def resolve_start_index(
    records: Sequence[GeoRecord],
    start_id: str | None,
    start_location: StartLocation | None,
) -> int:
    """Pick the start stop: explicit id, then a depot marker, then the first record."""

    if start_id:
        for index, record in enumerate(records):
            if record.id == start_id:
                return index
    if start_location == StartLocation.DEPOT:
        for index, record in enumerate(records):
            if _is_depot(record):
                return index
    # HOME has no driver coordinates to start from, so it uses the first stop
    return 0


def _nearest_neighbour_path(
    records: Sequence[GeoRecord], start_index: int, config: OptimizerConfig
) -> list[GeoRecord]:
    unvisited = list(records)
    current = unvisited.pop(start_index)
    path = [current]

    max_iterations = len(records) * 2
    iterations = 0
    while unvisited and iterations < max_iterations:
        iterations += 1
        nearest_index = -1
        min_cost = float("inf")

        for index, candidate in enumerate(unvisited):
            if not within_box(current.latitude, current.longitude, candidate.latitude, candidate.longitude, SEARCH_BOX_DEG):
                continue
            distance = haversine_km(current.latitude, current.longitude, candidate.latitude, candidate.longitude)
            cost = _leg_cost(distance, config)
            if cost < min_cost:
                min_cost = cost
                nearest_index = index

        if nearest_index == -1:
            # nothing inside the box; take the next remaining stop as-is
            nearest_index = 0

        current = unvisited.pop(nearest_index)
        path.append(current)

    if unvisited:
        logger.warning(
            f"Sequencing stopped after {iterations} iterations with {len(unvisited)} stops unvisited"
        )
    return path


def build_segments(path: Sequence[GeoRecord], config: OptimizerConfig) -> tuple[list[RouteSegment], float, float]:
    """Price consecutive legs. Returns (segments, driving km, travel minutes)."""

    segments: list[RouteSegment] = []
    total_distance = 0.0
    total_travel = 0.0
    for origin, destination in zip(path, path[1:]):
        raw = haversine_km(origin.latitude, origin.longitude, destination.latitude, destination.longitude)
        if raw < SAME_LOCATION_KM:
            driving, minutes = 0.0, 0.0
        else:
            driving = raw * config.driving_distance_factor
            minutes = travel_time_min(driving, config)

        segments.append(
            RouteSegment(
                from_id=origin.id,
                to_id=destination.id,
                distance_km=round(driving, 2),
                estimated_time_min=round(minutes, 1),
            )
        )
        total_distance += driving
        total_travel += minutes
    return segments, total_distance, total_travel


def _constraint_violations(total_distance: float, total_time: float, config: OptimizerConfig) -> dict[str, float]:
    violations: dict[str, float] = {}
    if config.max_working_hours is not None:
        limit_min = config.max_working_hours * 60
        if total_time > limit_min:
            violations["max_working_hours"] = round(total_time - limit_min, 1)
    if config.max_distance_per_route_km is not None and total_distance > config.max_distance_per_route_km:
        violations["max_distance_km"] = round(total_distance - config.max_distance_per_route_km, 2)
    return violations


def sequence_route(
    records: Sequence[GeoRecord],
    start_id: str | None = None,
    config: OptimizerConfig | None = None,
) -> SequenceResult:
    """Order ``records`` into a visiting sequence and summarise the route.

    Records without a usable fix are left out of the order and the totals;
    ``skipped_count`` tells the caller how many were dropped.
    """

    config = config or OptimizerConfig()
    valid = [record for record in records if record is not None and has_fix(record)]
    skipped = len(records) - len(valid)
    if skipped:
        logger.info(f"Excluded {skipped} records without coordinates from sequencing")

    if len(valid) < 2:
        summary = RouteSummary(total_distance_km=0.0, total_time_min=0, stop_count=len(valid), segments=[])
        return SequenceResult(ordered_records=valid, summary=summary, skipped_count=skipped)

    start_index = resolve_start_index(valid, start_id, config.start_location)
    path = _nearest_neighbour_path(valid, start_index, config)
    segments, total_distance, total_travel = build_segments(path, config)

    service_time = (len(path) - 1) * config.service_time_min
    base_time = total_travel + service_time
    needs_break = base_time > BREAK_AFTER_MIN or len(path) > BREAK_AFTER_STOPS
    total_time = base_time + (config.break_time_min if needs_break else 0)

    summary = RouteSummary(
        total_distance_km=round(sum(segment.distance_km for segment in segments), 2),
        total_time_min=round(total_time),
        stop_count=len(path),
        segments=segments,
        constraint_violations=_constraint_violations(total_distance, total_time, config),
    )
    logger.debug(
        f"Sequenced {summary.stop_count} stops: {summary.total_distance_km} km, {summary.total_time_min} min"
    )
    return SequenceResult(ordered_records=path, summary=summary, skipped_count=skipped)
