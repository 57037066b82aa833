"""Layered YAML configuration: shipped defaults plus site overrides."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from utility_forecast.config.schema import AppConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """Reads ``config.defaults.yaml`` and the site's ``config.yaml`` into an AppConfig.

    Overrides are merged key by key, so a site file only needs the constants
    that differ from the published tariff schedule.
    """

    def __init__(
        self,
        defaults_path: Path | None = None,
        user_path: Path | None = None,
    ) -> None:
        self._defaults_path = defaults_path or Path("config.defaults.yaml")
        self._user_path = user_path or Path("config.yaml")
        self._config: AppConfig | None = None
        self._raw: dict[str, Any] = {}

    @property
    def config(self) -> AppConfig:
        if self._config is None:
            raise RuntimeError("Config not loaded. Call load() first.")
        return self._config

    def load(self) -> AppConfig:
        merged = self._deep_merge(
            self._load_yaml(self._defaults_path), self._load_yaml(self._user_path),
        )
        config = AppConfig.model_validate(merged)
        self._raw = merged
        self._config = config
        logger.info(
            "Configuration loaded: multiplier=%s load_factor=%s pf_threshold=%s",
            config.metering.meter_multiplier,
            config.tariff.load_factor,
            config.tariff.power_factor_threshold,
        )
        return config

    def get_raw(self) -> dict[str, Any]:
        return dict(self._raw)

    def to_json(self) -> str:
        return self.config.model_dump_json(indent=2)

    def save_user_config(self, updates: dict[str, Any]) -> AppConfig:
        """Merge ``updates`` into the site file and reload.

        Used when the utility publishes a new tariff schedule and a constant
        such as the load factor changes. The result is validated before it is
        written, so a rejected update leaves the file untouched.
        """
        current = self._load_yaml(self._user_path)
        merged = self._deep_merge(current, updates)
        AppConfig.model_validate(self._deep_merge(self._load_yaml(self._defaults_path), merged))

        with open(self._user_path, "w") as f:
            yaml.safe_dump(merged, f, default_flow_style=False, sort_keys=False)
        logger.info("Site configuration updated: %s", ", ".join(sorted(updates)))
        return self.load()

    @staticmethod
    def _load_yaml(path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}
        with open(path) as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}

    @staticmethod
    def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Recursively merge override into base, returning a new dict."""
        result = dict(base)
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = ConfigManager._deep_merge(result[key], value)
            else:
                result[key] = value
        return result
