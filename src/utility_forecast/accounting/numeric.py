"""Arithmetic that never lets NaN/Infinity leak into cost totals."""

from __future__ import annotations

import math


def finite_or_zero(value: float | None) -> float:
    if value is None or not math.isfinite(value):
        return 0.0
    return float(value)


def safe_multiply(a: float, b: float) -> float:
    """Multiply, returning 0 for any non-finite operand or result."""
    if not (math.isfinite(a) and math.isfinite(b)):
        return 0.0
    result = a * b
    return result if math.isfinite(result) else 0.0


def safe_divide(numerator: float, denominator: float) -> float:
    """Divide, returning 0 for a zero denominator or any non-finite value."""
    if not (math.isfinite(numerator) and math.isfinite(denominator)) or denominator == 0:
        return 0.0
    result = numerator / denominator
    return result if math.isfinite(result) else 0.0


def round_half_up(value: float) -> float:
    """Round to the nearest integer with halves going up (0.5 -> 1, 2.5 -> 3)."""
    return float(math.floor(value + 0.5))
