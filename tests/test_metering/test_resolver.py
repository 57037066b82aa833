"""Tests for cumulative meter differencing and the month-boundary stitch."""

from __future__ import annotations

import math
from datetime import date

import pytest

from utility_forecast.config.schema import MeteringConfig
from utility_forecast.metering.resolver import MeterDeltaResolver
from utility_forecast.readings.models import DailyReading
from utility_forecast.readings.window import MonthWindow


def _reading(day: date, **values: float | None) -> DailyReading:
    return DailyReading(date=day, **values)


def _window(*readings: DailyReading, closing: DailyReading | None = None) -> MonthWindow:
    first = readings[0].date if readings else date(2024, 1, 1)
    return MonthWindow(
        year=first.year, month=first.month, readings=list(readings), closing_reading=closing,
    )


class TestCumulativeDelta:
    def test_increase_is_difference(self) -> None:
        resolver = MeterDeltaResolver()
        assert resolver.cumulative_delta(1000.0, 1010.5) == pytest.approx(10.5)

    def test_regression_clamped_to_zero(self) -> None:
        resolver = MeterDeltaResolver()
        assert resolver.cumulative_delta(1010.0, 1000.0) == 0.0

    def test_missing_side_is_zero(self) -> None:
        resolver = MeterDeltaResolver()
        assert resolver.cumulative_delta(None, 1000.0) == 0.0
        assert resolver.cumulative_delta(1000.0, None) == 0.0

    def test_non_finite_is_zero(self) -> None:
        resolver = MeterDeltaResolver()
        assert resolver.cumulative_delta(math.nan, 5.0) == 0.0
        assert resolver.cumulative_delta(5.0, math.inf) == 0.0


class TestResolvePair:
    def test_energy_delta_uses_multiplier(self) -> None:
        prev = _reading(date(2024, 1, 1), electricity_base=1000.0)
        curr = _reading(date(2024, 1, 2), electricity_base=1010.0)
        day = MeterDeltaResolver().resolve_pair(prev, curr)
        assert day.date == date(2024, 1, 1)
        assert day.energy_base_kwh == pytest.approx(7000.0)

    @pytest.mark.parametrize(
        "prev, curr, expected",
        [(50.0, 52.0, 1400.0), (52.0, 52.0, 0.0), (52.0, 10.0, 0.0)],
    )
    def test_every_tier_clamped(self, prev: float, curr: float, expected: float) -> None:
        day = MeterDeltaResolver().resolve_pair(
            _reading(date(2024, 1, 1), electricity_intermediate=prev, electricity_peak=prev),
            _reading(date(2024, 1, 2), electricity_intermediate=curr, electricity_peak=curr),
        )
        assert day.energy_intermediate_kwh == pytest.approx(expected)
        assert day.energy_peak_kwh == pytest.approx(expected)

    def test_water_not_multiplied(self) -> None:
        day = MeterDeltaResolver().resolve_pair(
            _reading(date(2024, 1, 1), water_municipal=100.0, water_desalinated=40.0),
            _reading(date(2024, 1, 2), water_municipal=112.5, water_desalinated=45.0),
        )
        assert day.water_municipal_m3 == pytest.approx(12.5)
        assert day.water_desalinated_m3 == pytest.approx(5.0)
        assert day.water_hotel_m3 == pytest.approx(17.5)

    def test_water_null_gives_zero_without_aborting(self) -> None:
        day = MeterDeltaResolver().resolve_pair(
            _reading(date(2024, 1, 1), water_municipal=None, electricity_base=1.0),
            _reading(date(2024, 1, 2), water_municipal=112.5, electricity_base=2.0),
        )
        assert day.water_municipal_m3 == 0.0
        assert day.energy_base_kwh == pytest.approx(700.0)

    def test_demand_taken_from_earlier_day(self) -> None:
        day = MeterDeltaResolver().resolve_pair(
            _reading(date(2024, 1, 1), demand_base=0.5, demand_peak=0.2),
            _reading(date(2024, 1, 2), demand_base=9.0, demand_peak=9.0),
        )
        assert day.demand_base_kw == pytest.approx(350.0)
        assert day.demand_peak_kw == pytest.approx(140.0)
        assert day.demand_max_kw == pytest.approx(350.0)

    def test_gas_is_earlier_days_logged_value(self) -> None:
        day = MeterDeltaResolver().resolve_pair(
            _reading(date(2024, 1, 1), gas_consumption=120.0),
            _reading(date(2024, 1, 2), gas_consumption=999.0),
        )
        assert day.gas_liters == 120.0

    def test_reactive_delta(self) -> None:
        day = MeterDeltaResolver().resolve_pair(
            _reading(date(2024, 1, 1), reactive_power=10.0),
            _reading(date(2024, 1, 2), reactive_power=12.0),
        )
        assert day.reactive_kvarh == pytest.approx(1400.0)

    def test_custom_multiplier(self) -> None:
        resolver = MeterDeltaResolver(MeteringConfig(meter_multiplier=100))
        day = resolver.resolve_pair(
            _reading(date(2024, 1, 1), electricity_base=1.0),
            _reading(date(2024, 1, 2), electricity_base=3.0),
        )
        assert day.energy_base_kwh == pytest.approx(200.0)


class TestResolveMonth:
    def test_empty_window(self) -> None:
        resolved = MeterDeltaResolver().resolve(MonthWindow(year=2024, month=1))
        assert resolved.days == []
        assert resolved.days_with_data == 0

    def test_unclosed_last_day_carries_gas_only(self) -> None:
        window = _window(
            _reading(date(2024, 1, 30), electricity_base=100.0, gas_consumption=10.0),
            _reading(date(2024, 1, 31), electricity_base=101.0, gas_consumption=20.0),
        )
        resolved = MeterDeltaResolver().resolve(window)

        assert [d.date for d in resolved.days] == [date(2024, 1, 30), date(2024, 1, 31)]
        last = resolved.days[-1]
        assert not last.closed
        assert last.energy_total_kwh == 0.0
        assert last.gas_liters == 20.0
        assert resolved.totals.energy_base_kwh == pytest.approx(700.0)
        assert resolved.totals.gas_liters == pytest.approx(30.0)

    def test_closing_reading_stitches_last_day(self) -> None:
        window = _window(
            _reading(date(2024, 1, 30), electricity_base=100.0, demand_base=1.0),
            _reading(date(2024, 1, 31), electricity_base=101.0, demand_base=2.0),
            closing=_reading(date(2024, 2, 1), electricity_base=103.0, demand_base=50.0),
        )
        resolved = MeterDeltaResolver().resolve(window)

        last = resolved.days[-1]
        assert last.closed
        assert last.date == date(2024, 1, 31)
        assert last.energy_base_kwh == pytest.approx(1400.0)
        assert resolved.totals.energy_base_kwh == pytest.approx(2100.0)
        # The closing reading's own demand belongs to February
        assert resolved.totals.demand_max_kw == pytest.approx(1400.0)

    def test_demand_max_excludes_unclosed_day(self) -> None:
        window = _window(
            _reading(date(2024, 1, 1), demand_base=1.0, demand_peak=1.0),
            _reading(date(2024, 1, 2), demand_base=3.0, demand_peak=2.0),
        )
        totals = MeterDeltaResolver().resolve(window).totals
        assert totals.demand_max_kw == pytest.approx(700.0)
        assert totals.peak_demand_max_kw == pytest.approx(1400.0)

    def test_regressions_counted(self) -> None:
        window = _window(
            _reading(date(2024, 1, 1), electricity_base=500.0),
            _reading(date(2024, 1, 2), electricity_base=10.0),
            _reading(date(2024, 1, 3), electricity_base=12.0),
        )
        resolved = MeterDeltaResolver().resolve(window)
        assert resolved.regressions == 1
        assert [d.regressions for d in resolved.days] == [1, 0, 0]
        assert resolved.totals.energy_base_kwh == pytest.approx(1400.0)

    def test_shared_resolver_keeps_counts_per_month(self) -> None:
        resolver = MeterDeltaResolver()
        regressed = _window(
            _reading(date(2024, 1, 1), electricity_base=500.0, water_municipal=9.0),
            _reading(date(2024, 1, 2), electricity_base=10.0, water_municipal=1.0),
        )
        clean = _window(
            _reading(date(2024, 2, 1), electricity_base=1.0),
            _reading(date(2024, 2, 2), electricity_base=2.0),
        )
        assert resolver.resolve(regressed).regressions == 2
        assert resolver.resolve(clean).regressions == 0
        assert resolver.resolve(regressed).regressions == 2

    def test_per_tier_demand_maxima_cover_every_reading(self) -> None:
        window = _window(
            _reading(date(2024, 1, 1), demand_base=0.5, demand_intermediate=0.2, demand_peak=0.1),
            _reading(date(2024, 1, 2), demand_base=0.4, demand_intermediate=0.3, demand_peak=None),
            _reading(date(2024, 1, 3), demand_base=0.1, demand_intermediate=0.1, demand_peak=0.6),
        )
        totals = MeterDeltaResolver().resolve(window).totals
        assert totals.base_demand_max_kw == pytest.approx(350.0)
        assert totals.intermediate_demand_max_kw == pytest.approx(210.0)
        # Jan 3 is unclosed but its logged peak still counts
        assert totals.peak_demand_max_kw == pytest.approx(420.0)

    def test_unsorted_readings_are_ordered(self) -> None:
        window = _window(
            _reading(date(2024, 1, 2), electricity_base=2.0),
            _reading(date(2024, 1, 1), electricity_base=1.0),
        )
        resolved = MeterDeltaResolver().resolve(window)
        assert resolved.days[0].date == date(2024, 1, 1)
        assert resolved.days[0].energy_base_kwh == pytest.approx(700.0)

    def test_occupancy_copied_from_reading(self) -> None:
        window = _window(
            _reading(date(2024, 1, 1), occupancy_guests=300, occupied_rooms=150, exchange_rate=17.1),
        )
        day = MeterDeltaResolver().resolve(window).days[0]
        assert day.occupancy_guests == 300
        assert day.occupied_rooms == 150
        assert day.exchange_rate == 17.1
