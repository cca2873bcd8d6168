"""
Clock readings for callers of the engine.

The engine never reads the clock itself; the CLI resolves "today" here,
as the calendar date in the configured timezone (UTC by default).
"""
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def today_in(tz_name: str = "UTC") -> date:
    """Current calendar date in ``tz_name``."""
    return utc_now().astimezone(ZoneInfo(tz_name)).date()


def parse_day(value: str | None, tz_name: str = "UTC") -> date:
    """Parse ``YYYY-MM-DD``; ``None`` means today in ``tz_name``."""
    if value is None:
        return today_in(tz_name)
    return date.fromisoformat(value)
