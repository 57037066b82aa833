"""Partial-month projection of accumulated totals."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from utility_forecast.config.schema import ProjectionConfig
from utility_forecast.metering.resolver import MonthTotals

logger = logging.getLogger(__name__)


@dataclass
class Projection:
    """Totals after projection and the factor that produced them."""

    totals: MonthTotals
    scale_factor: float
    is_projected: bool


def projection_scale(days_in_month: int, days_with_data: int, min_days: int = 3) -> float | None:
    """Scale factor for a partial month, or None when no projection applies.

    Projection applies for ``min_days <= days_with_data < days_in_month``.
    The divisor is ``days_with_data - 1`` because the newest reading has not
    been closed by a following one yet.
    """
    if days_with_data < min_days or days_with_data >= days_in_month:
        return None
    return days_in_month / (days_with_data - 1)


def project_totals(
    totals: MonthTotals,
    days_in_month: int,
    days_with_data: int,
    config: ProjectionConfig | None = None,
) -> Projection:
    """Scale accumulated consumption to a full-month estimate.

    Demand maxima are observed peaks and are never scaled.
    """
    config = config or ProjectionConfig()
    scale = projection_scale(days_in_month, days_with_data, config.min_days)
    if scale is None:
        return Projection(totals=replace(totals), scale_factor=1.0, is_projected=False)

    projected = replace(
        totals,
        energy_base_kwh=totals.energy_base_kwh * scale,
        energy_intermediate_kwh=totals.energy_intermediate_kwh * scale,
        energy_peak_kwh=totals.energy_peak_kwh * scale,
        reactive_kvarh=totals.reactive_kvarh * scale,
        water_municipal_m3=totals.water_municipal_m3 * scale,
        water_witness_m3=totals.water_witness_m3 * scale,
        water_desalinated_m3=totals.water_desalinated_m3 * scale,
        gas_liters=totals.gas_liters * scale,
    )
    logger.debug(
        "Projected %d/%d days with factor %.4f", days_with_data, days_in_month, scale,
    )
    return Projection(totals=projected, scale_factor=scale, is_projected=True)
