"""Configuration package for Forward Returns.

This package provides configuration management with Pydantic BaseSettings
for type validation and automatic environment variable override support.

Environment Variables:
    Use FWD_ prefix for overrides. For nested configs use double underscore.
    Examples:
        FWD_PATHS__DATABASE_PATH=/custom/returns.db
        FWD_SOLVER__MAX_ITERATIONS=200
        FWD_CALENDAR__TIMEZONE=America/New_York
"""

from .schema import (
    AppConfig,
    CalendarConfig,
    LoggingConfig,
    PathsConfig,
    SolverConfig,
)

__all__ = [
    "AppConfig",
    "PathsConfig",
    "SolverConfig",
    "CalendarConfig",
    "LoggingConfig",
]
