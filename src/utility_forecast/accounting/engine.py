"""Monthly forecast orchestrator: resolver, projection, tariff and daily ledger."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from utility_forecast.accounting.daily_costs import DailyCost, allocate_daily_costs
from utility_forecast.accounting.projection import project_totals
from utility_forecast.config.schema import AppConfig
from utility_forecast.inventory.gas import GasInventoryAnalysis, analyze_inventory
from utility_forecast.logging.context import month_context
from utility_forecast.metering.resolver import MeterDeltaResolver, ResolvedMonth
from utility_forecast.readings.models import DailyReading, GasTankSnapshot, MonthlyPricing
from utility_forecast.readings.window import (
    MonthWindow,
    PricingTable,
    available_months,
    find_snapshot,
    month_window,
)
from utility_forecast.tariff.costs import TariffCostBreakdown, calculate_costs
from utility_forecast.tariff.power_factor import (
    PowerFactorAdjustment,
    adjust_for_power_factor,
    power_factor,
)

logger = logging.getLogger(__name__)


class ForecastStatus(str, Enum):
    """Outcome of a forecast request."""

    AVAILABLE = "available"
    MISSING_PRICING = "missing_pricing"      # No MonthlyPricing for the month
    INSUFFICIENT_DATA = "insufficient_data"  # No resolved days


@dataclass
class MonthlyForecast:
    """Cost forecast of one month, projected to a full month when incomplete."""

    year: int
    month: int
    days_in_month: int
    days_with_data: int
    is_projected: bool
    scale_factor: float
    energy_base_kwh: float
    energy_intermediate_kwh: float
    energy_peak_kwh: float
    reactive_kvarh: float
    water_municipal_m3: float
    water_witness_m3: float
    water_desalinated_m3: float
    gas_liters: float
    demand_max_kw: float
    costs: TariffCostBreakdown
    power_factor: float
    adjustment: PowerFactorAdjustment

    @property
    def energy_total_kwh(self) -> float:
        return self.energy_base_kwh + self.energy_intermediate_kwh + self.energy_peak_kwh

    @property
    def adjustment_is_bonus(self) -> bool:
        return self.adjustment.is_bonus

    @property
    def power_factor_adjustment(self) -> float:
        """Magnitude of the bonus or penalty; its sign comes from ``adjustment_is_bonus``."""
        return self.adjustment.amount

    @property
    def electricity_subtotal(self) -> float:
        return self.costs.electricity_subtotal

    @property
    def total_electricity_cost(self) -> float:
        return self.adjustment.apply(self.costs.electricity_subtotal)

    @property
    def total_monthly_cost(self) -> float:
        return self.total_electricity_cost + self.costs.water_cost + self.costs.gas_cost

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass
class ForecastResult:
    """A forecast, or the reason none could be produced."""

    year: int
    month: int
    status: ForecastStatus
    forecast: MonthlyForecast | None = None
    daily_costs: list[DailyCost] = field(default_factory=list)
    resolved: ResolvedMonth | None = None
    message: str = ""

    @property
    def available(self) -> bool:
        return self.status == ForecastStatus.AVAILABLE


class ForecastEngine:
    """Computes monthly forecasts and daily cost ledgers.

    Stateless between calls: every request is computed from the readings and
    prices it is given, so one engine can serve concurrent requests.
    """

    def __init__(self, config: AppConfig | None = None) -> None:
        self._config = config or AppConfig()

    @property
    def config(self) -> AppConfig:
        return self._config

    def forecast_month(
        self, window: MonthWindow, pricing: MonthlyPricing | None,
    ) -> ForecastResult:
        """Forecast one month window against its pricing record."""
        with month_context(window.year, window.month):
            return self._forecast(window, pricing)

    def forecast_for(
        self,
        history: Iterable[DailyReading],
        pricing_table: PricingTable,
        year: int,
        month: int,
    ) -> ForecastResult:
        """Slice ``history`` for (year, month) and forecast it."""
        window = month_window(history, year, month)
        return self.forecast_month(window, pricing_table.get(year, month))

    def forecast_all(
        self, history: Iterable[DailyReading], pricing_table: PricingTable,
    ) -> list[ForecastResult]:
        """Forecast every month present in the history, newest first."""
        history = list(history)
        return [
            self.forecast_for(history, pricing_table, year, month)
            for year, month in available_months(history)
        ]

    def analyze_gas(
        self,
        history: Iterable[DailyReading],
        pricing_table: PricingTable,
        snapshots: Iterable[GasTankSnapshot],
        year: int,
        month: int,
    ) -> GasInventoryAnalysis | None:
        """Gas inventory analysis for (year, month); None without snapshot or price."""
        snapshot = find_snapshot(snapshots, year, month)
        pricing = pricing_table.get(year, month)
        if snapshot is None or pricing is None:
            logger.info(
                "No gas inventory analysis for %04d-%02d (snapshot=%s pricing=%s)",
                year, month, snapshot is not None, pricing is not None,
            )
            return None

        window = month_window(history, year, month)
        resolved = MeterDeltaResolver(self._config.metering).resolve(window)
        return analyze_inventory(snapshot, pricing.gas_price, resolved.days, self._config.gas)

    def _forecast(self, window: MonthWindow, pricing: MonthlyPricing | None) -> ForecastResult:
        if pricing is None:
            logger.warning("No pricing for %s, forecast unavailable", window.key)
            return ForecastResult(
                year=window.year,
                month=window.month,
                status=ForecastStatus.MISSING_PRICING,
                message=f"No unit prices registered for {window.key}",
            )

        resolved = MeterDeltaResolver(self._config.metering).resolve(window)
        if resolved.days_with_data == 0:
            logger.warning("No readings for %s, forecast unavailable", window.key)
            return ForecastResult(
                year=window.year,
                month=window.month,
                status=ForecastStatus.INSUFFICIENT_DATA,
                resolved=resolved,
                message=f"No readings recorded for {window.key}",
            )

        days_in_month = window.days_in_month
        projection = project_totals(
            resolved.totals, days_in_month, resolved.days_with_data, self._config.projection,
        )
        totals = projection.totals

        costs = calculate_costs(totals, pricing, days_in_month, self._config.tariff)
        pf = power_factor(
            totals.reactive_kvarh,
            totals.energy_total_kwh,
            self._config.tariff.power_factor_decimals,
        )
        adjustment = adjust_for_power_factor(costs.electricity_subtotal, pf, self._config.tariff)

        forecast = MonthlyForecast(
            year=window.year,
            month=window.month,
            days_in_month=days_in_month,
            days_with_data=resolved.days_with_data,
            is_projected=projection.is_projected,
            scale_factor=projection.scale_factor,
            energy_base_kwh=totals.energy_base_kwh,
            energy_intermediate_kwh=totals.energy_intermediate_kwh,
            energy_peak_kwh=totals.energy_peak_kwh,
            reactive_kvarh=totals.reactive_kvarh,
            water_municipal_m3=totals.water_municipal_m3,
            water_witness_m3=totals.water_witness_m3,
            water_desalinated_m3=totals.water_desalinated_m3,
            gas_liters=totals.gas_liters,
            demand_max_kw=totals.demand_max_kw,
            costs=costs,
            power_factor=pf,
            adjustment=adjustment,
        )
        daily = allocate_daily_costs(resolved.days, pricing, costs, days_in_month)

        logger.info(
            "Forecast %s: %d/%d days%s, total=%.2f",
            window.key, resolved.days_with_data, days_in_month,
            " (projected)" if projection.is_projected else "",
            forecast.total_monthly_cost,
        )
        return ForecastResult(
            year=window.year,
            month=window.month,
            status=ForecastStatus.AVAILABLE,
            forecast=forecast,
            daily_costs=daily,
            resolved=resolved,
        )
