"""Fiscal calendar resolver.

Converts between calendar dates and a company's fiscal-year numbering. A
fiscal year is named by the calendar year in which it ends, and ends on the
company's fiscal-year-end month/day. Only the month and day of the
fiscal-year-end date are used; its year is an anchor and is ignored.

A February 29 fiscal-year end resolves to February 28 in non-leap years.
Every function takes the reference date explicitly; nothing here reads the
clock.
"""

from __future__ import annotations

from datetime import date, timedelta

ONE_DAY = timedelta(days=1)


def _safe_date(year: int, month: int, day: int) -> date:
    """Build a date, falling back to Feb 28 for Feb 29 in non-leap years."""
    try:
        return date(year, month, day)
    except ValueError:
        if month == 2 and day == 29:
            return date(year, 2, 28)
        raise


def add_years(d: date, years: int) -> date:
    """Shift ``d`` by whole calendar years (Feb 29 falls back to Feb 28)."""
    return _safe_date(d.year + years, d.month, d.day)


def fiscal_year_end_in(year: int, fiscal_year_end: date) -> date:
    """The fiscal-year-end month/day instantiated in calendar ``year``."""
    return _safe_date(year, fiscal_year_end.month, fiscal_year_end.day)


def fiscal_year_for_date(d: date, fiscal_year_end: date) -> int:
    """Return the absolute fiscal year that ``d`` falls into.

    Dates up to and including the fiscal-year end in ``d``'s calendar year
    belong to that year; later dates belong to the following one.
    """
    if d > fiscal_year_end_in(d.year, fiscal_year_end):
        return d.year + 1
    return d.year


def fiscal_year_bounds(fiscal_year: int, fiscal_year_end: date) -> tuple[date, date]:
    """Return ``(start, end)`` of a fiscal year, both inclusive.

    ``start`` is the day after the prior fiscal-year end.
    """
    end = fiscal_year_end_in(fiscal_year, fiscal_year_end)
    start = fiscal_year_end_in(fiscal_year - 1, fiscal_year_end) + ONE_DAY
    return start, end


def year_fraction_for_date(d: date, fiscal_year_end: date) -> float:
    """Fraction of the fiscal year containing ``d`` that remains.

    The year is measured from its first day to the day after its end, so a
    365-day year is 365 days long. Returns 1.0 on the first day of the fiscal
    year and approaches 0.0 on its last day. Clamped to ``[0, 1]``.
    """
    fiscal_year = fiscal_year_for_date(d, fiscal_year_end)
    start, end = fiscal_year_bounds(fiscal_year, fiscal_year_end)
    year_days = (end + ONE_DAY - start).days
    elapsed_days = (d - start).days

    remaining = 1.0 - elapsed_days / year_days
    return max(0.0, min(1.0, remaining))


def generate_fiscal_years(start_year: int, count: int) -> list[int]:
    """Consecutive fiscal years starting at ``start_year``."""
    return [start_year + offset for offset in range(count)]


def fiscal_years_from(today: date, fiscal_year_end: date, count: int = 8) -> list[int]:
    """Fiscal years starting with the one containing ``today``."""
    return generate_fiscal_years(fiscal_year_for_date(today, fiscal_year_end), count)


def fiscal_year_label(fiscal_year: int) -> str:
    return f"FY {fiscal_year}"


__all__ = [
    "add_years",
    "fiscal_year_bounds",
    "fiscal_year_end_in",
    "fiscal_year_for_date",
    "fiscal_year_label",
    "fiscal_years_from",
    "generate_fiscal_years",
    "year_fraction_for_date",
]
