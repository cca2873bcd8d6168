"""Test configuration schema validation and environment variables."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from forward_returns.config import AppConfig, CalendarConfig, LoggingConfig, PathsConfig, SolverConfig
from forward_returns.config.loader import ConfigLoader


def test_default_configuration():
    """Test that default configuration loads correctly."""
    config = AppConfig()

    assert config.paths.data_dir == Path("./data").resolve()
    assert config.paths.logs_dir == Path("./logs").resolve()
    assert config.solver.min_rate == -0.99
    assert config.solver.max_rate == 10.0
    assert config.calendar.display_years == 8
    assert config.logging.retention_days == 30


def test_yaml_configuration_loading(tmp_path):
    """Test loading configuration from YAML file."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        """
solver:
  initial_guess: 0.05
  max_iterations: 200

calendar:
  timezone: Europe/London
  days_per_year: 365.0

logging:
  level: DEBUG
  retention_days: 15
""",
        encoding="utf-8",
    )

    config = ConfigLoader(str(config_file)).load_config(validate=False)

    assert config.solver.initial_guess == 0.05
    assert config.solver.max_iterations == 200
    assert config.calendar.timezone == "Europe/London"
    assert config.calendar.days_per_year == 365.0
    assert config.logging.level == "DEBUG"
    assert config.logging.retention_days == 15


def test_missing_yaml_file_uses_defaults(tmp_path):
    config = ConfigLoader(str(tmp_path / "missing.yaml")).load_config(validate=False)
    assert config.solver.max_iterations == 100


def test_environment_variable_overrides(monkeypatch):
    """Section settings read FWD_<SECTION>__<KEY> variables."""
    monkeypatch.setenv("FWD_SOLVER__TOLERANCE", "1e-9")
    monkeypatch.setenv("FWD_CALENDAR__TIMEZONE", "Asia/Tokyo")

    assert SolverConfig().tolerance == 1e-9
    assert CalendarConfig().timezone == "Asia/Tokyo"


class TestSolverValidation:
    """Rate band and iteration limits."""

    def test_tolerance_must_be_positive(self):
        with pytest.raises(ValidationError):
            SolverConfig(tolerance=0.0)

    def test_iteration_bounds(self):
        with pytest.raises(ValidationError):
            SolverConfig(max_iterations=0)
        with pytest.raises(ValidationError):
            SolverConfig(max_iterations=20_000)

    def test_min_rate_above_minus_one(self):
        with pytest.raises(ValidationError):
            SolverConfig(min_rate=-1.0)

    def test_band_must_be_ordered(self):
        with pytest.raises(ValidationError, match="must be less than"):
            SolverConfig(min_rate=0.5, max_rate=0.4, initial_guess=0.45)

    def test_guess_inside_band(self):
        with pytest.raises(ValidationError, match="initial_guess"):
            SolverConfig(initial_guess=12.0)


class TestCalendarValidation:
    """Timezone and display settings."""

    def test_unknown_timezone(self):
        with pytest.raises(ValidationError, match="Unknown timezone"):
            CalendarConfig(timezone="Not/AZone")

    def test_display_years_bounds(self):
        with pytest.raises(ValidationError):
            CalendarConfig(display_years=0)
        with pytest.raises(ValidationError):
            CalendarConfig(display_years=21)


def test_logging_level_validation():
    with pytest.raises(ValidationError):
        LoggingConfig(level="VERBOSE")


def test_path_strings_are_resolved():
    paths = PathsConfig(database_path="~/returns.db")
    assert paths.database_path.is_absolute()
    assert paths.database_path.name == "returns.db"


def test_directory_creation(tmp_path):
    """ensure_directories creates data, logs and database parent directories."""
    config = AppConfig(
        paths=PathsConfig(
            data_dir=str(tmp_path / "data"),
            logs_dir=str(tmp_path / "logs"),
            database_path=str(tmp_path / "store" / "returns.db"),
        )
    )
    config.ensure_directories()

    assert (tmp_path / "data").is_dir()
    assert (tmp_path / "logs").is_dir()
    assert (tmp_path / "store").is_dir()
