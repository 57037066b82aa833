"""Tests for period statistics and sustainability indicators."""

from __future__ import annotations

import math
from datetime import date

import pytest

from utility_forecast.config.schema import SustainabilityConfig
from utility_forecast.metering.resolver import DailyConsumption, MeterDeltaResolver
from utility_forecast.readings.models import DailyReading
from utility_forecast.readings.window import month_window
from utility_forecast.sustainability.stats import (
    month_stats,
    period_stats,
    sustainability_indicators,
)


def _days() -> list[DailyConsumption]:
    return [
        DailyConsumption(
            date=date(2024, 1, 1),
            energy_base_kwh=700.0,
            energy_peak_kwh=300.0,
            reactive_kvarh=0.0,
            water_municipal_m3=10.0,
            water_desalinated_m3=30.0,
            water_witness_m3=9.0,
            gas_liters=100.0,
            occupancy_guests=200,
            occupied_rooms=100,
            exchange_rate=17.0,
        ),
        DailyConsumption(
            date=date(2024, 1, 2),
            energy_base_kwh=1000.0,
            water_municipal_m3=10.0,
            gas_liters=100.0,
            occupancy_guests=200,
            occupied_rooms=300,
            exchange_rate=None,
        ),
    ]


class TestPeriodStats:
    def test_totals_and_averages(self) -> None:
        stats = period_stats(_days())
        assert stats.days_with_data == 2
        assert stats.total_guests == 400
        assert stats.total_occupied_rooms == 400
        assert stats.electricity_kwh == pytest.approx(2000.0)
        assert stats.water_hotel_m3 == pytest.approx(50.0)
        assert stats.water_witness_m3 == pytest.approx(9.0)
        assert stats.average_guests == pytest.approx(200.0)
        assert stats.average_occupied_rooms == pytest.approx(200.0)
        assert stats.average_electricity_kwh == pytest.approx(1000.0)
        assert stats.average_water_municipal_m3 == pytest.approx(10.0)
        assert stats.average_gas_liters == pytest.approx(100.0)
        assert stats.average_exchange_rate == pytest.approx(8.5)

    def test_empty_period(self) -> None:
        stats = period_stats([])
        assert stats.days_with_data == 0
        assert stats.average_guests == 0.0

    def test_unclosed_day_is_left_out(self) -> None:
        days = _days()
        days.append(
            DailyConsumption(
                date=date(2024, 1, 3), gas_liters=100.0, occupancy_guests=200,
                occupied_rooms=100, exchange_rate=17.0, closed=False,
            )
        )
        stats = period_stats(days)
        assert stats.days_with_data == 2
        assert stats.total_guests == 400
        assert stats.gas_liters == pytest.approx(200.0)
        assert stats.average_electricity_kwh == pytest.approx(1000.0)


class TestMonthStats:
    def _resolved(self):
        readings = [
            DailyReading(
                date=date(2024, 2, 1), electricity_base=0.0, occupancy_guests=150,
                occupied_rooms=80, gas_consumption=10.0,
                demand_base=0.3, demand_intermediate=0.2, demand_peak=0.1,
            ),
            DailyReading(
                date=date(2024, 2, 2), electricity_base=1.0, occupancy_guests=150,
                occupied_rooms=80, gas_consumption=10.0,
                demand_base=0.1, demand_intermediate=0.4, demand_peak=0.5,
            ),
        ]
        return MeterDeltaResolver().resolve(month_window(readings, 2024, 2))

    def test_open_month_counts_closed_days_only(self) -> None:
        stats = month_stats(self._resolved())
        assert stats.days_with_data == 1
        assert stats.total_guests == 150
        assert stats.electricity_kwh == pytest.approx(700.0)
        assert stats.average_electricity_kwh == pytest.approx(700.0)
        assert stats.gas_liters == pytest.approx(10.0)

    def test_demand_maxima_per_tier(self) -> None:
        stats = month_stats(self._resolved())
        assert stats.base_demand_max_kw == pytest.approx(210.0)
        assert stats.intermediate_demand_max_kw == pytest.approx(280.0)
        assert stats.peak_demand_max_kw == pytest.approx(350.0)

    def test_plain_period_has_no_demand_maxima(self) -> None:
        assert period_stats(_days()).peak_demand_max_kw == 0.0


class TestSustainabilityIndicators:
    def test_emissions_and_efficiency(self) -> None:
        indicators = sustainability_indicators(period_stats(_days()))
        expected_co2 = 50.0 * 0.298 + 200.0 * 2.3 + 2000.0 * 0.458
        assert indicators.co2_emissions_kg == pytest.approx(expected_co2)
        assert indicators.water_per_guest_m3 == pytest.approx(50.0 / 400)
        assert indicators.water_municipal_per_guest_m3 == pytest.approx(20.0 / 400)
        assert indicators.water_desalinated_per_guest_m3 == pytest.approx(30.0 / 400)
        assert indicators.energy_per_guest_kwh == pytest.approx(5.0)
        assert indicators.gas_per_guest_liters == pytest.approx(0.5)
        assert indicators.occupancy_rate_pct == pytest.approx(40.0)
        assert indicators.carbon_footprint_per_room_kg == pytest.approx(expected_co2 / 200)
        assert indicators.power_factor == 1.0

    def test_no_guests_gives_zero_efficiency(self) -> None:
        days = [DailyConsumption(date=date(2024, 1, 1), energy_base_kwh=100.0)]
        indicators = sustainability_indicators(period_stats(days))
        assert indicators.energy_per_guest_kwh == 0.0
        assert indicators.carbon_footprint_per_room_kg == 0.0

    def test_power_factor_unrounded(self) -> None:
        days = [DailyConsumption(date=date(2024, 1, 1), energy_base_kwh=100.0, reactive_kvarh=100.0)]
        indicators = sustainability_indicators(period_stats(days))
        assert indicators.power_factor == pytest.approx(math.sqrt(0.5))

    def test_custom_room_capacity(self) -> None:
        indicators = sustainability_indicators(
            period_stats(_days()), SustainabilityConfig(room_capacity=200),
        )
        assert indicators.occupancy_rate_pct == pytest.approx(100.0)
