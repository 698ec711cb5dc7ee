"""Engine configuration and settings management."""

from typing import Annotated, Any

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime defaults loaded from environment variables or built-in values."""

    model_config = SettingsConfigDict(
        env_prefix="ROUTECORE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    engine_name: str = "routecore"

    # Travel model
    avg_speed_kmh: float = Field(default=35.0, gt=0.0)
    service_time_min: float = Field(default=20.0, ge=0.0)
    traffic_factor: float = Field(default=1.35, gt=0.0)
    driving_distance_factor: float = Field(
        default=1.4,
        ge=1.0,
        description="Multiplier applied to great-circle distance to approximate road distance.",
    )
    break_time_min: float = Field(default=0.0, ge=0.0)
    speed_band_limits_km: Annotated[tuple[float, ...], NoDecode] = Field(
        default=(2.0, 10.0),
        description="Upper bounds (exclusive) of the urban and arterial speed bands.",
    )
    speed_band_speeds_kmh: Annotated[tuple[float, ...], NoDecode] = Field(
        default=(20.0, 40.0, 75.0),
        description="Speeds for the urban, arterial and highway bands.",
    )
    short_leg_km: float = Field(default=5.0, ge=0.0)
    short_leg_traffic_floor: float = Field(default=1.3, gt=0.0)

    # Proximity scanning
    nearby_threshold_km: float = Field(default=0.3, gt=0.0)
    max_nearby_records: int = Field(default=5000, ge=2)

    # Reassignment advisor
    reassignment_yield_every: int = Field(default=50, ge=1)

    # Deduplication worker
    cleaning_progress_floor: int = Field(default=100, ge=1)
    cleaning_use_process: bool = Field(
        default=False,
        description="Run the cleaning scan in a separate process instead of a worker thread.",
    )

    @field_validator("speed_band_limits_km", "speed_band_speeds_kmh", mode="before")
    @classmethod
    def _parse_float_tuple_from_env(cls, value: Any) -> tuple[float, ...]:
        """Parse float tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(float(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(float(item) for item in parsed)
            except (json.JSONDecodeError, TypeError, ValueError):
                pass
            if "," in value:
                return tuple(float(item.strip()) for item in value.split(",") if item.strip())
            if value.strip():
                return (float(value.strip()),)
        return tuple()


settings = Settings()
