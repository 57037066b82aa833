"""Configuration management for Utility Forecast."""

from utility_forecast.config.schema import AppConfig
from utility_forecast.config.manager import ConfigManager

__all__ = ["AppConfig", "ConfigManager"]
