"""Configuration schema using Pydantic BaseSettings with environment variable support.

This module defines the configuration schema for the Forward Returns tool.
Environment variables can be used to override config values using the FWD_ prefix.
For example: FWD_SOLVER__TOLERANCE=1e-8 or FWD_PATHS__DATABASE_PATH="/custom/returns.db"
"""

from pathlib import Path
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PathsConfig(BaseSettings):
    """File system paths configuration."""

    model_config = SettingsConfigDict(env_prefix="FWD_PATHS__", env_nested_delimiter="__")

    data_dir: Path = Field(default="./data", description="Base data directory")
    logs_dir: Path = Field(default="./logs", description="Directory for log files")
    database_path: Path = Field(default="./data/forward_returns.db", description="SQLite database file")

    @field_validator("data_dir", "logs_dir", "database_path", mode="before")
    @classmethod
    def validate_paths(cls, v):
        """Convert string paths to Path objects and resolve them."""
        if isinstance(v, str):
            return Path(v).expanduser().resolve()
        return v


class SolverConfig(BaseSettings):
    """Newton-Raphson IRR solver settings."""

    model_config = SettingsConfigDict(env_prefix="FWD_SOLVER__", env_nested_delimiter="__")

    initial_guess: float = Field(default=0.10, description="Starting rate for the iteration")
    tolerance: float = Field(default=1e-6, gt=0.0, description="Convergence threshold on |NPV|")
    max_iterations: int = Field(default=100, gt=0, le=10_000, description="Iteration budget")
    min_rate: float = Field(default=-0.99, gt=-1.0, description="Lower bound of the sane rate band")
    max_rate: float = Field(default=10.0, gt=0.0, description="Upper bound of the sane rate band")

    @model_validator(mode="after")
    def validate_rate_band(self):
        """Ensure the rate band is ordered and contains the initial guess."""
        if self.min_rate >= self.max_rate:
            raise ValueError(f"min_rate ({self.min_rate}) must be less than max_rate ({self.max_rate})")
        if not self.min_rate < self.initial_guess < self.max_rate:
            raise ValueError(
                f"initial_guess ({self.initial_guess}) must lie between {self.min_rate} and {self.max_rate}"
            )
        return self


class CalendarConfig(BaseSettings):
    """Clock and calendar configuration."""

    model_config = SettingsConfigDict(env_prefix="FWD_CALENDAR__", env_nested_delimiter="__")

    timezone: str = Field(default="UTC", description="Timezone used to determine 'today'")
    days_per_year: float = Field(default=365.25, gt=0.0, description="Day count used to time cash flows")
    display_years: int = Field(default=8, gt=0, le=20, description="Fiscal years shown in year listings")

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v):
        """Reject timezone names unknown to the IANA database."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v


class LoggingConfig(BaseSettings):
    """Logging system configuration."""

    model_config = SettingsConfigDict(env_prefix="FWD_LOGGING__", env_nested_delimiter="__")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", description="Logging level")
    console: bool = Field(default=True, description="Enable console logging")
    file: bool = Field(default=True, description="Enable file logging")
    retention_days: int = Field(default=30, gt=0, description="Log file retention in days")


class AppConfig(BaseSettings):
    """Main application configuration combining all sections."""

    model_config = SettingsConfigDict(
        env_prefix="FWD_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    paths: PathsConfig = Field(default_factory=PathsConfig)
    solver: SolverConfig = Field(default_factory=SolverConfig)
    calendar: CalendarConfig = Field(default_factory=CalendarConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        directories = [
            self.paths.data_dir,
            self.paths.logs_dir,
            self.paths.database_path.parent,
        ]

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)
