"""Display rounding and number formatting helpers.

Rounding is half-up (0.5 always rounds towards positive infinity), not
Python's banker's rounding, so displayed percentages and minute totals
match what the usage dashboards show.
"""
from __future__ import annotations

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round value half-up to the given number of decimal digits.

    Args:
        value: Number to round.
        digits: Decimal places to keep (>= 0).

    Returns:
        The rounded value as a float.
    """
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def format_currency(amount: float) -> str:
    """Format a USD amount with thousands separators and two decimals.

    Example: 1234.5 -> "$1,234.50", -3 -> "-$3.00".
    """
    rounded = round_half_up(amount, 2)
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,.2f}"


def format_number(value: float) -> str:
    """Format a number with thousands separators and at most three decimals."""
    rounded = round_half_up(value, 3)
    text = f"{rounded:,.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


__all__ = ["format_currency", "format_number", "round_half_up"]
