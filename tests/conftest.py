"""Shared test fixtures for Utility Forecast."""

from __future__ import annotations

from pathlib import Path

import pytest

from utility_forecast.accounting.engine import ForecastEngine
from utility_forecast.config.manager import ConfigManager
from utility_forecast.config.schema import AppConfig
from utility_forecast.readings.models import MonthlyPricing


@pytest.fixture
def config() -> AppConfig:
    """Provide a default test configuration."""
    return AppConfig()


@pytest.fixture
def config_manager(tmp_path: Path) -> ConfigManager:
    """Provide a config manager with test paths."""
    defaults = tmp_path / "config.defaults.yaml"
    defaults.write_text("metering:\n  meter_multiplier: 700\n")
    user = tmp_path / "config.yaml"
    mgr = ConfigManager(defaults_path=defaults, user_path=user)
    mgr.load()
    return mgr


@pytest.fixture
def engine(config: AppConfig) -> ForecastEngine:
    return ForecastEngine(config)


@pytest.fixture
def pricing() -> MonthlyPricing:
    """Round-number prices for February 2023."""
    return MonthlyPricing(
        year=2023,
        month=2,
        fixed_cost=500.0,
        energy_price_base=1.0,
        energy_price_intermediate=1.5,
        energy_price_peak=2.0,
        distribution_price=10.0,
        capacity_price=100.0,
        gas_price=2.0,
        water_price=3.0,
    )
