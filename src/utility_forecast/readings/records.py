"""Build the data model from plain mappings returned by the capture system.

The capture API names its columns in Spanish (``fecha``, ``electricidad_base``,
``consumo_gas``, ``tanque01`` ...). Both those names and the attribute names of
the dataclasses in :mod:`utility_forecast.readings.models` are accepted.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime
from typing import Any, Iterable, Mapping

from utility_forecast.readings.models import (
    TANK_COUNT,
    DailyReading,
    GasTankSnapshot,
    MonthlyPricing,
)

logger = logging.getLogger(__name__)

# attribute name -> capture-system column name
READING_COLUMNS: dict[str, str] = {
    "electricity_base": "electricidad_base",
    "electricity_intermediate": "electricidad_intermedio",
    "electricity_peak": "electricidad_punta",
    "water_municipal": "agua_municipal",
    "water_witness_meter": "medidor_testigo",
    "water_desalinated": "medidor_desaladora",
    "reactive_power": "potencia_reactiva",
    "demand_base": "demanda_base",
    "demand_intermediate": "demanda_intermedio",
    "demand_peak": "demanda_punta",
    "exchange_rate": "tipo_cambio",
}

OCCUPANCY_COLUMNS: dict[str, str] = {
    "occupancy_guests": "pax",
    "occupied_rooms": "habitaciones_ocupadas",
}

PRICING_COLUMNS: dict[str, str] = {
    "fixed_cost": "costo_fijo",
    "energy_price_base": "costo_energia_base",
    "energy_price_intermediate": "costo_energia_intermedia",
    "energy_price_peak": "costo_energia_punta",
    "distribution_price": "costo_distribucion",
    "capacity_price": "costo_capacidad",
    "gas_price": "precio_gas",
    "water_price": "precio_agua",
}


def _lookup(record: Mapping[str, Any], name: str, alias: str) -> Any:
    if name in record:
        return record[name]
    return record.get(alias)


def parse_float(value: Any) -> float | None:
    """Coerce a numeric or numeric-string value; blanks and junk become None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_int(value: Any) -> int | None:
    number = parse_float(value)
    return int(number) if number is not None else None


def parse_date(value: Any) -> date:
    """Parse ``2024-01-05`` or ``2024-01-05T00:00:00`` style values.

    Only the calendar part is kept; the capture system stores midnight
    timestamps and the time component carries no meaning.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip().split("T")[0][:10])
    raise ValueError(f"Unsupported date value: {value!r}")


def reading_from_record(record: Mapping[str, Any]) -> DailyReading:
    """Build a DailyReading from one capture-system row."""
    reading = DailyReading(date=parse_date(_lookup(record, "date", "fecha")))
    for name, alias in READING_COLUMNS.items():
        setattr(reading, name, parse_float(_lookup(record, name, alias)))
    for name, alias in OCCUPANCY_COLUMNS.items():
        setattr(reading, name, parse_int(_lookup(record, name, alias)))
    reading.gas_consumption = parse_float(
        _lookup(record, "gas_consumption", "consumo_gas")
    ) or 0.0
    return reading


def readings_from_records(records: Iterable[Mapping[str, Any]]) -> list[DailyReading]:
    """Parse many rows, sorted by date. Rows without a usable date are skipped."""
    readings: list[DailyReading] = []
    for record in records:
        try:
            readings.append(reading_from_record(record))
        except (ValueError, TypeError) as e:
            logger.warning("Skipping reading with unusable date: %s", e)
    readings.sort(key=lambda r: r.date)
    return readings


def pricing_from_record(record: Mapping[str, Any]) -> MonthlyPricing:
    """Build MonthlyPricing from one row of the monthly price table."""
    year = parse_int(_lookup(record, "year", "anio"))
    month = parse_int(_lookup(record, "month", "mes"))
    if year is None or month is None or not 1 <= month <= 12:
        raise ValueError(f"Pricing record has no valid year/month: {dict(record)!r}")

    prices = {
        name: parse_float(_lookup(record, name, alias)) or 0.0
        for name, alias in PRICING_COLUMNS.items()
    }
    return MonthlyPricing(year=year, month=month, **prices)


def snapshot_from_record(record: Mapping[str, Any]) -> GasTankSnapshot:
    """Build a GasTankSnapshot from ``tanque01``..``tanque14`` or a ``tanques`` list."""
    year = parse_int(_lookup(record, "year", "anio"))
    month = parse_int(_lookup(record, "month", "mes"))
    if year is None or month is None:
        raise ValueError(f"Tank snapshot has no valid year/month: {dict(record)!r}")

    levels = _lookup(record, "tank_levels", "tanques")
    if levels is None:
        levels = [record.get(f"tanque{i:02d}") for i in range(1, TANK_COUNT + 1)]
    return GasTankSnapshot(
        year=year,
        month=month,
        tank_levels=[parse_float(v) or 0.0 for v in levels],
    )
