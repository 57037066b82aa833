"""Monthly electricity, water and gas cost calculation.

Demand charges follow the GDMTH schedule: the billable demand is the
smaller of the observed demand and the demand implied by the month's energy
at the schedule's load factor.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from utility_forecast.accounting.numeric import (
    finite_or_zero,
    round_half_up,
    safe_divide,
    safe_multiply,
)
from utility_forecast.config.schema import TariffPolicyConfig
from utility_forecast.metering.resolver import MonthTotals
from utility_forecast.readings.models import MonthlyPricing

logger = logging.getLogger(__name__)


@dataclass
class TariffCostBreakdown:
    """Cost subtotals of a month before the power-factor adjustment."""

    energy_base_cost: float
    energy_intermediate_cost: float
    energy_peak_cost: float
    load_demand_kw: float
    capacity_demand_kw: float
    distribution_demand_kw: float
    capacity_cost: float
    distribution_cost: float
    fixed_cost: float
    water_cost: float
    gas_cost: float

    @property
    def energy_subtotal(self) -> float:
        return self.energy_base_cost + self.energy_intermediate_cost + self.energy_peak_cost

    @property
    def electricity_subtotal(self) -> float:
        return self.energy_subtotal + self.capacity_cost + self.distribution_cost + self.fixed_cost


def load_factor_demand(
    total_energy_kwh: float, days_in_month: int, config: TariffPolicyConfig,
) -> float:
    """Demand implied by the month's energy at the schedule's load factor."""
    return safe_divide(
        total_energy_kwh, config.hours_per_day * days_in_month * config.load_factor,
    )


def capacity_demand(peak_demand_max_kw: float, load_demand_kw: float) -> float:
    """Billable capacity demand; with no peak-tier readings, the rounded load demand."""
    if peak_demand_max_kw == 0:
        return round_half_up(load_demand_kw)
    return min(peak_demand_max_kw, load_demand_kw)


def distribution_demand(demand_max_kw: float, load_demand_kw: float) -> float:
    return min(demand_max_kw, load_demand_kw)


def calculate_costs(
    totals: MonthTotals,
    pricing: MonthlyPricing,
    days_in_month: int,
    config: TariffPolicyConfig | None = None,
) -> TariffCostBreakdown:
    """Apply a month's unit prices to (possibly projected) totals."""
    config = config or TariffPolicyConfig()

    load_demand = load_factor_demand(totals.energy_total_kwh, days_in_month, config)
    capacity_kw = capacity_demand(totals.peak_demand_max_kw, load_demand)
    distribution_kw = distribution_demand(totals.demand_max_kw, load_demand)

    breakdown = TariffCostBreakdown(
        energy_base_cost=safe_multiply(totals.energy_base_kwh, pricing.energy_price_base),
        energy_intermediate_cost=safe_multiply(
            totals.energy_intermediate_kwh, pricing.energy_price_intermediate,
        ),
        energy_peak_cost=safe_multiply(totals.energy_peak_kwh, pricing.energy_price_peak),
        load_demand_kw=load_demand,
        capacity_demand_kw=capacity_kw,
        distribution_demand_kw=distribution_kw,
        capacity_cost=safe_multiply(capacity_kw, pricing.capacity_price),
        distribution_cost=safe_multiply(distribution_kw, pricing.distribution_price),
        fixed_cost=finite_or_zero(pricing.fixed_cost),
        water_cost=safe_multiply(totals.water_municipal_m3, pricing.water_price),
        gas_cost=safe_multiply(totals.gas_liters, pricing.gas_price),
    )

    logger.debug(
        "Tariff costs: energy=%.2f capacity=%.1fkW distribution=%.1fkW subtotal=%.2f",
        breakdown.energy_subtotal, capacity_kw, distribution_kw,
        breakdown.electricity_subtotal,
    )
    return breakdown
