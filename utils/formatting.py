# utils/formatting.py
"""
Display formatting helpers for currency, percentages and multiples.
Missing values (None/NaN) render as an empty string.
"""

import math
from typing import Any, Optional


def _as_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def format_currency(value: Any, decimals: int = 0) -> str:
    """1234567.8 -> "$1,234,568"; negatives as "-$1,234" """
    number = _as_number(value)
    if number is None:
        return ""
    sign = "-" if number < 0 else ""
    return f"{sign}${abs(number):,.{decimals}f}"


def format_percent(value: Any, decimals: int = 1) -> str:
    """Value already in percentage points: 66.666 -> "66.7%" """
    number = _as_number(value)
    if number is None:
        return ""
    return f"{number:,.{decimals}f}%"


def format_ratio(value: Any, decimals: int = 1) -> str:
    """Fraction as a percentage: 0.6667 -> "66.7%" """
    number = _as_number(value)
    if number is None:
        return ""
    return f"{number:.{decimals}%}"


def format_multiple(value: Any, decimals: int = 2) -> str:
    """1.2345 -> "1.23x" """
    number = _as_number(value)
    if number is None:
        return ""
    return f"{number:,.{decimals}f}x"


def format_velocity(value: Any, decimals: int = 2) -> str:
    """Recovery velocity: 4.5 -> "4.50%/mo" """
    number = _as_number(value)
    if number is None:
        return ""
    return f"{number:,.{decimals}f}%/mo"


def format_count(value: Any) -> str:
    number = _as_number(value)
    if number is None:
        return ""
    return f"{number:,.0f}"
