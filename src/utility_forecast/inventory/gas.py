"""LP gas tank inventory: stored volume, value and days of autonomy."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from utility_forecast.accounting.numeric import finite_or_zero, safe_divide, safe_multiply
from utility_forecast.config.schema import GasInventoryConfig
from utility_forecast.metering.resolver import DailyConsumption
from utility_forecast.readings.models import GasTankSnapshot

logger = logging.getLogger(__name__)

UNBOUNDED_AUTONOMY = math.inf


@dataclass
class GasInventoryAnalysis:
    """Valuation of the gas in storage for one month."""

    total_liters: float
    capacity_liters: float
    average_level_pct: float
    utilization_pct: float
    price_per_liter: float
    inventory_value: float
    max_possible_value: float
    average_daily_consumption: float
    total_monthly_consumption: float
    days_of_autonomy: float  # UNBOUNDED_AUTONOMY when nothing is being consumed
    tank_levels: list[float] = field(default_factory=list)

    @property
    def unutilized_value(self) -> float:
        """Value of the empty capacity at this month's price."""
        return self.max_possible_value - self.inventory_value

    @property
    def has_unbounded_autonomy(self) -> bool:
        return math.isinf(self.days_of_autonomy)


def tank_liters(level_pct: float, capacity_liters: float) -> float:
    return level_pct * capacity_liters / 100


def average_daily_gas(days: list[DailyConsumption]) -> tuple[float, float]:
    """Return (total, per-day average) of logged gas over the resolved days."""
    total = sum(finite_or_zero(d.gas_liters) for d in days)
    return total, safe_divide(total, len(days))


def analyze_inventory(
    snapshot: GasTankSnapshot,
    gas_price: float,
    days: list[DailyConsumption],
    config: GasInventoryConfig | None = None,
) -> GasInventoryAnalysis:
    """Aggregate the tank levels and estimate how long the stock lasts."""
    config = config or GasInventoryConfig()
    levels = list(snapshot.tank_levels)
    capacity = len(levels) * config.tank_capacity_liters

    total_liters = sum(tank_liters(level, config.tank_capacity_liters) for level in levels)
    total_consumption, average_daily = average_daily_gas(days)

    if average_daily > 0:
        autonomy = total_liters / average_daily
    else:
        autonomy = UNBOUNDED_AUTONOMY

    analysis = GasInventoryAnalysis(
        total_liters=total_liters,
        capacity_liters=capacity,
        average_level_pct=safe_divide(sum(levels), len(levels)),
        utilization_pct=safe_divide(total_liters, capacity) * 100,
        price_per_liter=finite_or_zero(gas_price),
        inventory_value=safe_multiply(total_liters, gas_price),
        max_possible_value=safe_multiply(capacity, gas_price),
        average_daily_consumption=average_daily,
        total_monthly_consumption=total_consumption,
        days_of_autonomy=autonomy,
        tank_levels=levels,
    )
    logger.debug(
        "Gas inventory %04d-%02d: %.0f L (%.1f%%), autonomy=%s days",
        snapshot.year, snapshot.month, total_liters, analysis.utilization_pct,
        "unbounded" if analysis.has_unbounded_autonomy else f"{autonomy:.1f}",
    )
    return analysis
