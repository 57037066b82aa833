"""Month slicing of a reading history and (year, month) lookups."""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass, field
from typing import Iterable

from utility_forecast.readings.models import DailyReading, GasTankSnapshot, MonthlyPricing

logger = logging.getLogger(__name__)


def next_month(year: int, month: int) -> tuple[int, int]:
    """Return the (year, month) following the given one."""
    if month == 12:
        return year + 1, 1
    return year, month + 1


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


@dataclass
class MonthWindow:
    """Readings of one calendar month plus the reading that closes it.

    The closing reading is the first-of-month reading of the following month.
    Without it the last day's cumulative deltas cannot be computed; that is a
    valid state, not an error.
    """

    year: int
    month: int
    readings: list[DailyReading] = field(default_factory=list)
    closing_reading: DailyReading | None = None

    @property
    def has_closing_reading(self) -> bool:
        return self.closing_reading is not None

    @property
    def days_in_month(self) -> int:
        return days_in_month(self.year, self.month)

    @property
    def days_with_data(self) -> int:
        return len(self.readings)

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def month_window(history: Iterable[DailyReading], year: int, month: int) -> MonthWindow:
    """Slice a full reading history into the window for (year, month)."""
    ordered = sorted(history, key=lambda r: r.date)
    readings = [r for r in ordered if r.month_key == (year, month)]

    closing_year, closing_month = next_month(year, month)
    closing = next(
        (
            r for r in ordered
            if r.month_key == (closing_year, closing_month) and r.date.day == 1
        ),
        None,
    )

    logger.debug(
        "Month window %04d-%02d: %d readings, closing=%s",
        year, month, len(readings), closing is not None,
    )
    return MonthWindow(year=year, month=month, readings=readings, closing_reading=closing)


def available_months(history: Iterable[DailyReading]) -> list[tuple[int, int]]:
    """Distinct (year, month) keys present in the history, newest first."""
    return sorted({r.month_key for r in history}, reverse=True)


class PricingTable:
    """MonthlyPricing records keyed by (year, month)."""

    def __init__(self, records: Iterable[MonthlyPricing] = ()) -> None:
        self._by_month: dict[tuple[int, int], MonthlyPricing] = {}
        for record in records:
            self.add(record)

    def add(self, record: MonthlyPricing) -> None:
        if record.month_key in self._by_month:
            raise ValueError(
                f"Duplicate pricing for {record.year:04d}-{record.month:02d}"
            )
        self._by_month[record.month_key] = record

    def get(self, year: int, month: int) -> MonthlyPricing | None:
        return self._by_month.get((year, month))

    def __contains__(self, key: object) -> bool:
        return key in self._by_month

    def __len__(self) -> int:
        return len(self._by_month)


def find_snapshot(
    snapshots: Iterable[GasTankSnapshot], year: int, month: int,
) -> GasTankSnapshot | None:
    """Return the tank snapshot for (year, month), if one was captured."""
    return next((s for s in snapshots if s.month_key == (year, month)), None)
