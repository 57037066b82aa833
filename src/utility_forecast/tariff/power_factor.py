"""Power-factor bonus/penalty adjustment of the electricity subtotal.

Below the threshold (0.95) the utility charges a surcharge; at or above it
the customer earns a discount. The two outcomes are separate types so the
sign of the adjustment is never inferred from the rate.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Union

from utility_forecast.accounting.numeric import safe_multiply
from utility_forecast.config.schema import TariffPolicyConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PowerFactorPenalty:
    """Surcharge added to the electricity subtotal."""

    power_factor: float
    rate: float
    amount: float

    is_bonus = False

    def apply(self, subtotal: float) -> float:
        return subtotal + self.amount


@dataclass(frozen=True)
class PowerFactorBonus:
    """Discount subtracted from the electricity subtotal."""

    power_factor: float
    rate: float
    amount: float

    is_bonus = True

    def apply(self, subtotal: float) -> float:
        return subtotal - self.amount


PowerFactorAdjustment = Union[PowerFactorPenalty, PowerFactorBonus]


def power_factor(
    reactive_kvarh: float, active_kwh: float, decimals: int = 4,
) -> float:
    """cos(atan(reactive / active)), rounded; 1.0 when there is no active energy."""
    if active_kwh == 0 or not (math.isfinite(active_kwh) and math.isfinite(reactive_kvarh)):
        return 1.0
    return round(math.cos(math.atan(reactive_kvarh / active_kwh)), decimals)


def penalty_rate(pf: float, config: TariffPolicyConfig) -> float:
    # pf can round to 0 when reactive energy dwarfs active energy
    pf = max(pf, 10 ** -config.power_factor_decimals)
    return config.penalty_coefficient * ((config.power_factor_threshold / pf) - 1)


def bonus_rate(pf: float, config: TariffPolicyConfig) -> float:
    return config.bonus_coefficient * (1 - (config.bonus_reference / pf))


def adjust_for_power_factor(
    subtotal: float,
    pf: float,
    config: TariffPolicyConfig | None = None,
) -> PowerFactorAdjustment:
    """Classify ``pf`` and size the adjustment against the electricity subtotal."""
    config = config or TariffPolicyConfig()
    if pf < config.power_factor_threshold:
        rate = penalty_rate(pf, config)
        adjustment: PowerFactorAdjustment = PowerFactorPenalty(
            power_factor=pf, rate=rate, amount=safe_multiply(subtotal, rate),
        )
    else:
        rate = bonus_rate(pf, config)
        adjustment = PowerFactorBonus(
            power_factor=pf, rate=rate, amount=safe_multiply(subtotal, rate),
        )

    logger.debug(
        "Power factor %.4f → %s rate=%.4f",
        pf, "bonus" if adjustment.is_bonus else "penalty", rate,
    )
    return adjustment
