"""Input records supplied by the data-retrieval collaborator."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date

TANK_COUNT = 14


@dataclass
class DailyReading:
    """One day of meter readings for a property.

    Electricity, water and reactive-power fields are cumulative meter values;
    demand fields are the instantaneous peak of the day. Gas is the day's own
    consumption, already resolved by the capture process.
    """

    date: date
    electricity_base: float | None = None
    electricity_intermediate: float | None = None
    electricity_peak: float | None = None
    water_municipal: float | None = None
    water_witness_meter: float | None = None
    water_desalinated: float | None = None
    reactive_power: float | None = None
    demand_base: float | None = None
    demand_intermediate: float | None = None
    demand_peak: float | None = None
    gas_consumption: float = 0.0
    occupancy_guests: int | None = None
    occupied_rooms: int | None = None
    exchange_rate: float | None = None

    @property
    def month_key(self) -> tuple[int, int]:
        return (self.date.year, self.date.month)


@dataclass
class MonthlyPricing:
    """Unit prices for one (year, month)."""

    year: int
    month: int
    fixed_cost: float = 0.0
    energy_price_base: float = 0.0
    energy_price_intermediate: float = 0.0
    energy_price_peak: float = 0.0
    distribution_price: float = 0.0
    capacity_price: float = 0.0
    gas_price: float = 0.0
    water_price: float = 0.0

    @property
    def month_key(self) -> tuple[int, int]:
        return (self.year, self.month)


def _clamp_percentage(value: float) -> float:
    if not math.isfinite(value):
        return 0.0
    return max(0.0, min(100.0, value))


@dataclass
class GasTankSnapshot:
    """Fill level (0-100 %) of every LP gas tank, taken once per month."""

    year: int
    month: int
    tank_levels: list[float] = field(default_factory=lambda: [0.0] * TANK_COUNT)

    def __post_init__(self) -> None:
        if len(self.tank_levels) != TANK_COUNT:
            raise ValueError(
                f"Expected {TANK_COUNT} tank levels, got {len(self.tank_levels)}"
            )
        self.tank_levels = [_clamp_percentage(float(v)) for v in self.tank_levels]

    @property
    def month_key(self) -> tuple[int, int]:
        return (self.year, self.month)
