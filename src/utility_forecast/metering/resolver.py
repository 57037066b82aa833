"""Cumulative meter readings → per-day consumption deltas.

Each consecutive pair of readings ``(prev, curr)`` yields the consumption of
``prev.date``:

- electricity tiers and reactive energy: ``max(0, curr - prev) × multiplier``
- water sources: ``max(0, curr - prev)`` when both readings exist
- demand: ``prev`` demand × multiplier (instantaneous, not differenced)
- gas: ``prev.gas_consumption`` as logged

The last day of the month is closed against the first reading of the next
month. Without that reading it only carries its logged gas.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date

from utility_forecast.accounting.numeric import finite_or_zero
from utility_forecast.config.schema import MeteringConfig
from utility_forecast.readings.models import DailyReading
from utility_forecast.readings.window import MonthWindow

logger = logging.getLogger(__name__)

WATER_SOURCES = {
    "municipal": "water_municipal",
    "witness": "water_witness_meter",
    "desalinated": "water_desalinated",
}


def _delta(prev: float | None, curr: float | None) -> tuple[float, bool]:
    """Return (clamped delta, whether the register went backwards)."""
    if prev is None or curr is None:
        return 0.0, False
    if not (math.isfinite(prev) and math.isfinite(curr)):
        return 0.0, False
    if curr < prev:
        return 0.0, True
    return curr - prev, False


@dataclass
class DailyConsumption:
    """Resolved consumption attributed to one calendar day."""

    date: date
    energy_base_kwh: float = 0.0
    energy_intermediate_kwh: float = 0.0
    energy_peak_kwh: float = 0.0
    reactive_kvarh: float = 0.0
    water_municipal_m3: float = 0.0
    water_witness_m3: float = 0.0
    water_desalinated_m3: float = 0.0
    gas_liters: float = 0.0
    demand_base_kw: float = 0.0
    demand_intermediate_kw: float = 0.0
    demand_peak_kw: float = 0.0
    occupancy_guests: int | None = None
    occupied_rooms: int | None = None
    exchange_rate: float | None = None
    closed: bool = True  # False = no following reading, meter deltas unknown
    regressions: int = 0  # Registers that went backwards on this day

    @property
    def energy_total_kwh(self) -> float:
        return self.energy_base_kwh + self.energy_intermediate_kwh + self.energy_peak_kwh

    @property
    def water_hotel_m3(self) -> float:
        """Water actually supplied to the hotel (municipal + desalinated)."""
        return self.water_municipal_m3 + self.water_desalinated_m3

    @property
    def demand_max_kw(self) -> float:
        return max(self.demand_base_kw, self.demand_intermediate_kw, self.demand_peak_kw)


@dataclass
class MonthTotals:
    """Accumulated consumption of a month, before or after projection."""

    energy_base_kwh: float = 0.0
    energy_intermediate_kwh: float = 0.0
    energy_peak_kwh: float = 0.0
    reactive_kvarh: float = 0.0
    water_municipal_m3: float = 0.0
    water_witness_m3: float = 0.0
    water_desalinated_m3: float = 0.0
    gas_liters: float = 0.0
    demand_max_kw: float = 0.0       # Max of all tiers over resolved days
    # Per-tier maxima over every reading of the month
    base_demand_max_kw: float = 0.0
    intermediate_demand_max_kw: float = 0.0
    peak_demand_max_kw: float = 0.0

    @property
    def energy_total_kwh(self) -> float:
        return self.energy_base_kwh + self.energy_intermediate_kwh + self.energy_peak_kwh

    def add(self, day: DailyConsumption) -> None:
        self.energy_base_kwh += day.energy_base_kwh
        self.energy_intermediate_kwh += day.energy_intermediate_kwh
        self.energy_peak_kwh += day.energy_peak_kwh
        self.reactive_kvarh += day.reactive_kvarh
        self.water_municipal_m3 += day.water_municipal_m3
        self.water_witness_m3 += day.water_witness_m3
        self.water_desalinated_m3 += day.water_desalinated_m3
        self.gas_liters += day.gas_liters
        if day.closed:
            self.demand_max_kw = max(self.demand_max_kw, day.demand_max_kw)


@dataclass
class ResolvedMonth:
    """Output of the resolver for one month window."""

    window: MonthWindow
    days: list[DailyConsumption] = field(default_factory=list)
    totals: MonthTotals = field(default_factory=MonthTotals)
    regressions: int = 0  # Meter values that went backwards and were clamped

    @property
    def days_with_data(self) -> int:
        return len(self.days)


class MeterDeltaResolver:
    """Turns a month window of readings into daily consumption records."""

    def __init__(self, config: MeteringConfig | None = None) -> None:
        self._config = config or MeteringConfig()

    @property
    def multiplier(self) -> float:
        return self._config.meter_multiplier

    def cumulative_delta(self, prev: float | None, curr: float | None) -> float:
        """Difference of two cumulative readings, clamped at 0.

        A missing or non-finite reading on either side yields 0 for the day.
        """
        return _delta(prev, curr)[0]

    def resolve_pair(self, prev: DailyReading, curr: DailyReading) -> DailyConsumption:
        """Consumption of ``prev.date`` given the following reading ``curr``."""
        m = self.multiplier
        day = self._open_day(prev)

        def register(prev_value: float | None, curr_value: float | None) -> float:
            delta, regressed = _delta(prev_value, curr_value)
            if regressed:
                day.regressions += 1
            return delta

        day.energy_base_kwh = register(prev.electricity_base, curr.electricity_base) * m
        day.energy_intermediate_kwh = register(
            prev.electricity_intermediate, curr.electricity_intermediate,
        ) * m
        day.energy_peak_kwh = register(prev.electricity_peak, curr.electricity_peak) * m
        day.reactive_kvarh = register(prev.reactive_power, curr.reactive_power) * m

        for source, attr in WATER_SOURCES.items():
            setattr(day, f"water_{source}_m3", register(getattr(prev, attr), getattr(curr, attr)))

        day.demand_base_kw = finite_or_zero(prev.demand_base) * m
        day.demand_intermediate_kw = finite_or_zero(prev.demand_intermediate) * m
        day.demand_peak_kw = finite_or_zero(prev.demand_peak) * m
        return day

    def resolve_unclosed(self, last: DailyReading) -> DailyConsumption:
        """Last day of a month whose closing reading is not available yet."""
        day = self._open_day(last)
        day.closed = False
        return day

    def resolve(self, window: MonthWindow) -> ResolvedMonth:
        """Resolve every day of the window and accumulate the month totals."""
        readings = sorted(window.readings, key=lambda r: r.date)
        result = ResolvedMonth(window=window)
        if not readings:
            return result

        days = [self.resolve_pair(prev, curr) for prev, curr in zip(readings, readings[1:])]
        if window.closing_reading is not None:
            days.append(self.resolve_pair(readings[-1], window.closing_reading))
        else:
            days.append(self.resolve_unclosed(readings[-1]))

        for day in days:
            result.totals.add(day)
        m = self.multiplier
        result.totals.base_demand_max_kw = max(finite_or_zero(r.demand_base) * m for r in readings)
        result.totals.intermediate_demand_max_kw = max(
            finite_or_zero(r.demand_intermediate) * m for r in readings
        )
        result.totals.peak_demand_max_kw = max(finite_or_zero(r.demand_peak) * m for r in readings)
        result.days = days
        result.regressions = sum(day.regressions for day in days)

        if result.regressions:
            logger.warning(
                "Month %s: %d meter regressions clamped to zero",
                window.key, result.regressions,
            )
        logger.debug(
            "Resolved %s: %d days, %.1f kWh, closed=%s",
            window.key, len(days), result.totals.energy_total_kwh, window.has_closing_reading,
        )
        return result

    @staticmethod
    def _open_day(reading: DailyReading) -> DailyConsumption:
        return DailyConsumption(
            date=reading.date,
            gas_liters=finite_or_zero(reading.gas_consumption),
            occupancy_guests=reading.occupancy_guests,
            occupied_rooms=reading.occupied_rooms,
            exchange_rate=reading.exchange_rate,
        )
