"""
Unit tests for display formatting and clock helpers.
"""
from datetime import date, datetime, timezone

import pytest

from forward_returns.utils.clock import parse_day, today_in, utc_now
from forward_returns.utils.formatting import (
    MISSING,
    format_date,
    format_multiple,
    format_percentage,
    format_price,
)


class TestFormatting:
    """Prices, percentages, multiples and dates."""

    @pytest.mark.parametrize(
        "value,expected",
        [(1234.5, "$1,234.50"), (0.0, "$0.00"), (-12.5, "-$12.50"), (1_000_000, "$1,000,000.00")],
    )
    def test_format_price(self, value, expected):
        assert format_price(value) == expected

    def test_format_percentage(self):
        assert format_percentage(0.1234) == "12.3%"
        assert format_percentage(-0.05) == "-5.0%"
        assert format_percentage(0.037137, decimals=2) == "3.71%"

    def test_format_multiple(self):
        assert format_multiple(15.5) == "15.5x"
        assert format_multiple(28) == "28.0x"

    def test_format_date(self):
        assert format_date(date(2026, 1, 5)) == "Jan 5, 2026"
        assert format_date(datetime(2026, 12, 31, 23, 59)) == "Dec 31, 2026"

    def test_format_iso_string_ignores_time(self):
        assert format_date("2026-06-30T23:30:00-05:00") == "Jun 30, 2026"
        assert format_date("2026-06-30") == "Jun 30, 2026"

    @pytest.mark.parametrize("formatter", [format_price, format_percentage, format_multiple])
    def test_missing_values(self, formatter):
        assert formatter(None) == MISSING
        assert formatter(float("nan")) == MISSING

    def test_missing_date(self):
        assert format_date(None) == MISSING
        assert format_date("") == MISSING


class TestClock:
    """Reading 'today' for the CLI."""

    def test_utc_now_is_aware(self):
        assert utc_now().tzinfo == timezone.utc

    def test_today_in_is_a_date(self):
        assert isinstance(today_in("UTC"), date)

    def test_parse_day(self):
        assert parse_day("2026-01-01") == date(2026, 1, 1)

    def test_parse_day_defaults_to_today(self):
        assert parse_day(None, "UTC") == today_in("UTC")

    def test_parse_day_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_day("01/02/2026")
