"""Utility Forecast: meter reading resolution and monthly utility cost forecasting."""

try:
    from importlib.metadata import version as _pkg_version
    __version__ = _pkg_version("utility-forecast")
except Exception:
    __version__ = "dev"
