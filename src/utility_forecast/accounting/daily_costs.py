"""Per-day cost ledger with prorated demand charges."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date

from utility_forecast.accounting.numeric import safe_divide, safe_multiply
from utility_forecast.metering.resolver import DailyConsumption
from utility_forecast.readings.models import MonthlyPricing
from utility_forecast.tariff.costs import TariffCostBreakdown

logger = logging.getLogger(__name__)


@dataclass
class DailyCost:
    """Cost of one resolved day.

    The monthly fixed charge and the power-factor adjustment are month-level
    concepts and never appear here, so the daily totals of a month do not add
    up to the monthly forecast.
    """

    date: date
    energy_base_kwh: float
    energy_intermediate_kwh: float
    energy_peak_kwh: float
    energy_base_cost: float
    energy_intermediate_cost: float
    energy_peak_cost: float
    daily_distribution_cost: float
    daily_capacity_cost: float
    water_municipal_m3: float
    water_cost: float
    gas_liters: float
    gas_cost: float

    @property
    def energy_total_kwh(self) -> float:
        return self.energy_base_kwh + self.energy_intermediate_kwh + self.energy_peak_kwh

    @property
    def electricity_cost(self) -> float:
        """Energy charges of the day, excluding the prorated demand shares."""
        return self.energy_base_cost + self.energy_intermediate_cost + self.energy_peak_cost

    @property
    def total_cost(self) -> float:
        return (
            self.electricity_cost
            + self.water_cost
            + self.gas_cost
            + self.daily_distribution_cost
            + self.daily_capacity_cost
        )

    @property
    def is_empty(self) -> bool:
        return all(
            math.isclose(v, 0.0, abs_tol=1e-9)
            for v in (self.energy_total_kwh, self.water_municipal_m3, self.gas_liters)
        )


def prorate(monthly_amount: float, days_in_month: int) -> float:
    """Even daily share of a month-level charge."""
    return safe_divide(monthly_amount, days_in_month)


def allocate_daily_costs(
    days: list[DailyConsumption],
    pricing: MonthlyPricing,
    breakdown: TariffCostBreakdown,
    days_in_month: int,
) -> list[DailyCost]:
    """Price every resolved day and attach the prorated demand charges."""
    daily_distribution = prorate(breakdown.distribution_cost, days_in_month)
    daily_capacity = prorate(breakdown.capacity_cost, days_in_month)

    ledger = [
        DailyCost(
            date=day.date,
            energy_base_kwh=day.energy_base_kwh,
            energy_intermediate_kwh=day.energy_intermediate_kwh,
            energy_peak_kwh=day.energy_peak_kwh,
            energy_base_cost=safe_multiply(day.energy_base_kwh, pricing.energy_price_base),
            energy_intermediate_cost=safe_multiply(
                day.energy_intermediate_kwh, pricing.energy_price_intermediate,
            ),
            energy_peak_cost=safe_multiply(day.energy_peak_kwh, pricing.energy_price_peak),
            daily_distribution_cost=daily_distribution,
            daily_capacity_cost=daily_capacity,
            water_municipal_m3=day.water_municipal_m3,
            water_cost=safe_multiply(day.water_municipal_m3, pricing.water_price),
            gas_liters=day.gas_liters,
            gas_cost=safe_multiply(day.gas_liters, pricing.gas_price),
        )
        for day in days
    ]
    logger.debug(
        "Allocated %d daily rows, prorated distribution=%.2f capacity=%.2f",
        len(ledger), daily_distribution, daily_capacity,
    )
    return ledger


def visible_daily_costs(rows: list[DailyCost], today: date | None = None) -> list[DailyCost]:
    """Rows worth showing: drop ``today`` (still being logged) and an empty last row."""
    visible = [r for r in rows if today is None or r.date != today]
    if visible and visible[-1].is_empty:
        visible = visible[:-1]
    return visible
