"""
Display formatting for prices, percentages, multiples and dates.

Missing values render as an em dash so tables stay aligned.
"""
import math
from datetime import date, datetime

MISSING = "—"

_MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def format_price(value: float | None) -> str:
    """Format a price as US dollars, e.g. ``$1,234.56``."""
    if _is_missing(value):
        return MISSING
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def format_percentage(value: float | None, decimals: int = 1) -> str:
    """Format a decimal rate as a percentage, e.g. ``0.1234 -> 12.3%``."""
    if _is_missing(value):
        return MISSING
    return f"{value * 100:.{decimals}f}%"


def format_multiple(value: float | None) -> str:
    """Format a valuation multiple, e.g. ``15.5x``."""
    if _is_missing(value):
        return MISSING
    return f"{value:.1f}x"


def format_date(value: date | datetime | str | None) -> str:
    """Format a date as ``Jan 5, 2026``.

    ISO strings are read from their date part only so that stored dates are
    never shifted by timezone conversion.
    """
    if value is None or value == "":
        return MISSING
    if isinstance(value, str):
        value = date.fromisoformat(value.split("T")[0])
    return f"{_MONTHS[value.month - 1]} {value.day}, {value.year}"
