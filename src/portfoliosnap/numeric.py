"""Numeric helpers shared by the parser, providers, and builder."""

from __future__ import annotations

import math
from typing import Any


def is_number(value: Any) -> bool:
    """True for int/float values (bools excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_finite_number(value: Any) -> bool:
    """True for int/float values that are neither NaN nor infinite."""
    return is_number(value) and math.isfinite(value)


def finite_or_none(value: Any) -> float | None:
    """Return ``value`` as a float if it is a finite real number, else None."""
    if is_finite_number(value):
        return float(value)
    return None


def number_to_str(value: int | float) -> str:
    """Render a number the way a spreadsheet export prints it.

    Integral floats drop their fractional part (``532174.0`` -> ``"532174"``).
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def round_half_up(value: float, decimals: int = 2) -> float:
    """Round half-up on the scaled value: ``floor(x * 10**d + 0.5) / 10**d``."""
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor


def round_optional(value: float | None, decimals: int = 2) -> float | None:
    if value is None:
        return None
    return round_half_up(value, decimals)
