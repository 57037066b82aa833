"""Per-request log context for forecast runs."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import structlog


def bind_context(**kwargs: object) -> None:
    """Attach key-value pairs to every log line of the current thread or task."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


@contextmanager
def month_context(year: int, month: int, **extra: object) -> Iterator[str]:
    """Tag log lines emitted inside the block with ``forecast_month=YYYY-MM``.

    Keys bound here are removed on exit, leaving any outer context intact.
    """
    key = f"{year:04d}-{month:02d}"
    bind_context(forecast_month=key, **extra)
    try:
        yield key
    finally:
        unbind_context("forecast_month", *extra)
