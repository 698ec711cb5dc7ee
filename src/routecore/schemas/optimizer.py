"""Optimizer configuration schema."""

from __future__ import annotations

import math
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config import settings


class CostObjective(str, Enum):
    BALANCED = "BALANCED"
    DISTANCE = "DISTANCE"
    TIME = "TIME"


class StartLocation(str, Enum):
    DEPOT = "DEPOT"
    HOME = "HOME"


class SpeedBand(BaseModel):
    """Driving speed used for segments shorter than ``max_km``."""

    model_config = ConfigDict(frozen=True)

    max_km: float = Field(..., gt=0)
    speed_kmh: float = Field(..., gt=0)


def _default_speed_bands() -> tuple[SpeedBand, ...]:
    limits = tuple(settings.speed_band_limits_km) + (math.inf,)
    return tuple(
        SpeedBand(max_km=limit, speed_kmh=speed)
        for limit, speed in zip(limits, settings.speed_band_speeds_kmh)
    )


class OptimizerConfig(BaseModel):
    """Options for a single sequencing run. Never mutated by the engine."""

    model_config = ConfigDict(frozen=True)

    avg_speed_kmh: float = Field(default_factory=lambda: settings.avg_speed_kmh, gt=0)
    service_time_min: float = Field(default_factory=lambda: settings.service_time_min, ge=0)
    traffic_factor: float = Field(default_factory=lambda: settings.traffic_factor, gt=0)
    driving_distance_factor: float = Field(default_factory=lambda: settings.driving_distance_factor, ge=1.0)
    break_time_min: float = Field(default_factory=lambda: settings.break_time_min, ge=0)
    max_working_hours: Optional[float] = Field(default=None, gt=0)
    max_distance_per_route_km: Optional[float] = Field(default=None, gt=0)
    start_location: Optional[StartLocation] = None
    cost_objective: CostObjective = CostObjective.BALANCED
    speed_bands: tuple[SpeedBand, ...] = Field(default_factory=_default_speed_bands)
    short_leg_km: float = Field(default_factory=lambda: settings.short_leg_km, ge=0)
    short_leg_traffic_floor: float = Field(default_factory=lambda: settings.short_leg_traffic_floor, gt=0)

    @field_validator("speed_bands")
    @classmethod
    def _bands_ascending(cls, value: tuple[SpeedBand, ...]) -> tuple[SpeedBand, ...]:
        limits = [band.max_km for band in value]
        if limits != sorted(limits):
            raise ValueError("speed_bands must be ordered by ascending max_km")
        return value

    def speed_for(self, distance_km: float) -> float:
        for band in self.speed_bands:
            if distance_km < band.max_km:
                return band.speed_kmh
        return self.avg_speed_kmh
