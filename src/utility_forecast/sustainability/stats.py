"""Period statistics and sustainability indicators from resolved days."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace

from utility_forecast.accounting.numeric import safe_divide
from utility_forecast.config.schema import SustainabilityConfig
from utility_forecast.metering.resolver import DailyConsumption, ResolvedMonth

logger = logging.getLogger(__name__)


@dataclass
class PeriodStats:
    """Totals and per-day averages of a period."""

    days_with_data: int
    total_guests: int
    total_occupied_rooms: int
    electricity_kwh: float
    reactive_kvarh: float
    water_municipal_m3: float
    water_desalinated_m3: float
    water_witness_m3: float
    gas_liters: float
    average_exchange_rate: float
    # Highest logged demand per tier over every reading, 0 without readings
    base_demand_max_kw: float = 0.0
    intermediate_demand_max_kw: float = 0.0
    peak_demand_max_kw: float = 0.0

    @property
    def water_hotel_m3(self) -> float:
        return self.water_municipal_m3 + self.water_desalinated_m3

    @property
    def average_guests(self) -> float:
        return safe_divide(self.total_guests, self.days_with_data)

    @property
    def average_occupied_rooms(self) -> float:
        return safe_divide(self.total_occupied_rooms, self.days_with_data)

    @property
    def average_electricity_kwh(self) -> float:
        return safe_divide(self.electricity_kwh, self.days_with_data)

    @property
    def average_water_municipal_m3(self) -> float:
        return safe_divide(self.water_municipal_m3, self.days_with_data)

    @property
    def average_gas_liters(self) -> float:
        return safe_divide(self.gas_liters, self.days_with_data)


@dataclass
class SustainabilityIndicators:
    co2_emissions_kg: float
    water_per_guest_m3: float
    water_municipal_per_guest_m3: float
    water_desalinated_per_guest_m3: float
    energy_per_guest_kwh: float
    gas_per_guest_liters: float
    occupancy_rate_pct: float
    carbon_footprint_per_room_kg: float
    power_factor: float


def period_stats(days: list[DailyConsumption]) -> PeriodStats:
    """Accumulate the closed days of a period.

    A day still waiting for its following reading has no meter deltas and is
    left out, so it cannot drag the per-day averages down.
    """
    days = [d for d in days if d.closed]
    exchange_rates = [d.exchange_rate for d in days if d.exchange_rate is not None]
    return PeriodStats(
        days_with_data=len(days),
        total_guests=sum(d.occupancy_guests or 0 for d in days),
        total_occupied_rooms=sum(d.occupied_rooms or 0 for d in days),
        electricity_kwh=sum(d.energy_total_kwh for d in days),
        reactive_kvarh=sum(d.reactive_kvarh for d in days),
        water_municipal_m3=sum(d.water_municipal_m3 for d in days),
        water_desalinated_m3=sum(d.water_desalinated_m3 for d in days),
        water_witness_m3=sum(d.water_witness_m3 for d in days),
        gas_liters=sum(d.gas_liters for d in days),
        # Days without a logged rate count as zero, as in the monthly report
        average_exchange_rate=safe_divide(sum(exchange_rates), len(days)),
    )


def month_stats(resolved: ResolvedMonth) -> PeriodStats:
    """Period stats of a resolved month, with the per-tier demand maxima."""
    totals = resolved.totals
    return replace(
        period_stats(resolved.days),
        base_demand_max_kw=totals.base_demand_max_kw,
        intermediate_demand_max_kw=totals.intermediate_demand_max_kw,
        peak_demand_max_kw=totals.peak_demand_max_kw,
    )


def sustainability_indicators(
    stats: PeriodStats,
    config: SustainabilityConfig | None = None,
) -> SustainabilityIndicators:
    """CO2 emissions, per-guest efficiency and occupancy for a period."""
    config = config or SustainabilityConfig()

    co2 = (
        stats.water_hotel_m3 * config.water_co2_kg_per_m3
        + stats.gas_liters * config.gas_co2_kg_per_liter
        + stats.electricity_kwh * config.electricity_co2_kg_per_kwh
    )
    guests = stats.total_guests
    avg_rooms = stats.average_occupied_rooms

    if stats.electricity_kwh > 0:
        pf = math.cos(math.atan(stats.reactive_kvarh / stats.electricity_kwh))
    else:
        pf = 1.0

    return SustainabilityIndicators(
        co2_emissions_kg=co2,
        water_per_guest_m3=safe_divide(stats.water_hotel_m3, guests),
        water_municipal_per_guest_m3=safe_divide(stats.water_municipal_m3, guests),
        water_desalinated_per_guest_m3=safe_divide(stats.water_desalinated_m3, guests),
        energy_per_guest_kwh=safe_divide(stats.electricity_kwh, guests),
        gas_per_guest_liters=safe_divide(stats.gas_liters, guests),
        occupancy_rate_pct=avg_rooms / config.room_capacity * 100,
        carbon_footprint_per_room_kg=safe_divide(co2, avg_rooms),
        power_factor=pf,
    )
