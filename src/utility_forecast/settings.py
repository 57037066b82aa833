"""Application settings loader."""

from __future__ import annotations

from pathlib import Path

from utility_forecast.config.manager import ConfigManager
from utility_forecast.config.schema import AppConfig
from utility_forecast.logging.structured import setup_logging

_config_manager: ConfigManager | None = None


def load_settings(
    defaults_path: Path | None = None,
    user_path: Path | None = None,
    configure_logging: bool = False,
) -> AppConfig:
    """Load and return the engine configuration.

    With ``configure_logging`` the root logger is set up from the loaded
    ``logging`` section.
    """
    global _config_manager
    _config_manager = ConfigManager(
        defaults_path=defaults_path,
        user_path=user_path,
    )
    config = _config_manager.load()
    if configure_logging:
        setup_logging(
            level=config.logging.level,
            fmt=config.logging.format,
            log_file=config.logging.file,
        )
    return config


def get_config_manager() -> ConfigManager:
    """Get the active config manager instance."""
    if _config_manager is None:
        raise RuntimeError("Settings not loaded. Call load_settings() first.")
    return _config_manager
