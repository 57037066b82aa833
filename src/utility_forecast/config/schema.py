"""Pydantic configuration models for tariff policy and engine settings."""

from __future__ import annotations

from pydantic import BaseModel, Field


class MeteringConfig(BaseModel):
    meter_multiplier: float = Field(700.0, gt=0)  # Instrument-transformer ratio


class ProjectionConfig(BaseModel):
    min_days: int = Field(3, ge=2)  # Fewer readings than this = no projection


class TariffPolicyConfig(BaseModel):
    """Demand and power-factor rules from the GDMTH tariff schedule."""

    load_factor: float = Field(0.57, gt=0.0, le=1.0)
    hours_per_day: int = 24
    power_factor_threshold: float = Field(0.95, gt=0.0, le=1.0)
    bonus_reference: float = Field(0.90, gt=0.0, le=1.0)
    penalty_coefficient: float = 0.6  # 3/5
    bonus_coefficient: float = 0.25
    power_factor_decimals: int = Field(4, ge=1, le=10)


class GasInventoryConfig(BaseModel):
    tank_capacity_liters: float = Field(5000.0, gt=0)  # Nominal capacity of each tank


class SustainabilityConfig(BaseModel):
    water_co2_kg_per_m3: float = 0.298
    gas_co2_kg_per_liter: float = 2.3
    electricity_co2_kg_per_kwh: float = 0.458
    room_capacity: int = Field(500, ge=1)


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "json"
    file: str = ""


class AppConfig(BaseModel):
    """Root configuration model containing all engine settings."""

    metering: MeteringConfig = MeteringConfig()
    projection: ProjectionConfig = ProjectionConfig()
    tariff: TariffPolicyConfig = TariffPolicyConfig()
    gas: GasInventoryConfig = GasInventoryConfig()
    sustainability: SustainabilityConfig = SustainabilityConfig()
    logging: LoggingConfig = LoggingConfig()
