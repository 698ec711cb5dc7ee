import pytest
from pydantic import ValidationError

from routecore.config import Settings
from routecore.schemas.optimizer import CostObjective, OptimizerConfig, SpeedBand


def test_optimizer_defaults():
    config = OptimizerConfig()
    assert config.avg_speed_kmh == 35
    assert config.service_time_min == 20
    assert config.traffic_factor == 1.35
    assert config.driving_distance_factor == 1.4
    assert config.break_time_min == 0
    assert config.cost_objective is CostObjective.BALANCED
    assert [band.speed_kmh for band in config.speed_bands] == [20, 40, 75]
    assert [band.max_km for band in config.speed_bands][:2] == [2.0, 10.0]


def test_optimizer_rejects_invalid_values():
    with pytest.raises(ValidationError):
        OptimizerConfig(service_time_min=-1)
    with pytest.raises(ValidationError):
        OptimizerConfig(traffic_factor=0)
    with pytest.raises(ValidationError):
        OptimizerConfig(driving_distance_factor=0.5)
    with pytest.raises(ValidationError):
        OptimizerConfig(cost_objective="FASTEST")


def test_optimizer_rejects_unordered_bands():
    with pytest.raises(ValidationError):
        OptimizerConfig(
            speed_bands=(SpeedBand(max_km=10, speed_kmh=40), SpeedBand(max_km=2, speed_kmh=20))
        )


def test_optimizer_is_frozen():
    config = OptimizerConfig()
    with pytest.raises(ValidationError):
        config.service_time_min = 5


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("ROUTECORE_SERVICE_TIME_MIN", "15")
    monkeypatch.setenv("ROUTECORE_SPEED_BAND_SPEEDS_KMH", "25,45,80")
    monkeypatch.setenv("ROUTECORE_SPEED_BAND_LIMITS_KM", "[3, 12]")

    settings = Settings()

    assert settings.service_time_min == 15
    assert settings.speed_band_speeds_kmh == (25.0, 45.0, 80.0)
    assert settings.speed_band_limits_km == (3.0, 12.0)
