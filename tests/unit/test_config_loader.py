"""Tests for configuration loader with priority resolution."""

from pathlib import Path

import pytest

from forward_returns.config.loader import (
    ConfigLoader,
    ConfigurationError,
    load_config,
    load_config_for_testing,
    merge_sections,
)


class TestConfigLoader:
    """Test configuration loader functionality."""

    def test_load_default_config(self):
        """Test loading with defaults only."""
        config = load_config_for_testing()

        assert config.paths.database_path == Path("./data/forward_returns.db").resolve()
        assert config.solver.initial_guess == 0.10
        assert config.solver.tolerance == 1e-6
        assert config.solver.max_iterations == 100
        assert config.calendar.timezone == "UTC"
        assert config.calendar.days_per_year == 365.25
        assert config.logging.level == "INFO"

    def test_yaml_override(self):
        """Test YAML file overrides defaults."""
        yaml_content = """
        paths:
          database_path: "./custom/returns.db"
        solver:
          max_iterations: 250
        calendar:
          timezone: America/New_York
        """

        config = load_config_for_testing(yaml_content=yaml_content)

        assert config.paths.database_path == Path("./custom/returns.db").resolve()
        assert config.solver.max_iterations == 250
        assert config.calendar.timezone == "America/New_York"
        # Non-overridden values should remain defaults
        assert config.solver.tolerance == 1e-6

    def test_env_var_override(self):
        """Test environment variables override YAML."""
        yaml_content = """
        solver:
          max_iterations: 250
          tolerance: 0.001
        """

        env_vars = {
            "FWD_SOLVER__MAX_ITERATIONS": "500",
            "FWD_CALENDAR__DISPLAY_YEARS": "10",
        }

        config = load_config_for_testing(yaml_content=yaml_content, env_vars=env_vars)

        assert config.solver.max_iterations == 500
        assert config.solver.tolerance == 0.001
        assert config.calendar.display_years == 10

    def test_cli_override(self):
        """Test CLI arguments override both YAML and env vars."""
        yaml_content = """
        solver:
          max_iterations: 250
        """

        env_vars = {"FWD_SOLVER__MAX_ITERATIONS": "500"}
        cli_overrides = {"solver": {"max_iterations": 42}, "logging": {"level": "DEBUG"}}

        config = load_config_for_testing(yaml_content=yaml_content, env_vars=env_vars, cli_overrides=cli_overrides)

        assert config.solver.max_iterations == 42
        assert config.logging.level == "DEBUG"

    def test_env_var_parsing(self):
        """Test parsing of different environment variable types."""
        env_vars = {
            "FWD_LOGGING__FILE": "false",
            "FWD_LOGGING__RETENTION_DAYS": "7",
            "FWD_SOLVER__MIN_RATE": "-0.5",
        }

        config = load_config_for_testing(env_vars=env_vars)

        assert config.logging.file is False
        assert config.logging.retention_days == 7
        assert config.solver.min_rate == -0.5

    def test_env_values_are_nested_by_section(self, monkeypatch):
        monkeypatch.setenv("FWD_SOLVER__TOLERANCE", "1e-8")
        monkeypatch.setenv("FWD_CALENDAR__TIMEZONE", "Asia/Tokyo")
        monkeypatch.setenv("FWD_NOT_A_SECTION__VALUE", "ignored")

        values = ConfigLoader.env_values()

        assert values["solver"]["tolerance"] == "1e-8"
        assert values["calendar"]["timezone"] == "Asia/Tokyo"
        assert set(values) <= {"paths", "solver", "calendar", "logging"}

    def test_comma_values_stay_strings(self):
        """Env values are coerced by field type, not guessed from their text."""
        with pytest.raises(ConfigurationError, match="calendar -> timezone"):
            load_config_for_testing(env_vars={"FWD_CALENDAR__TIMEZONE": "UTC,Europe/London"})

    def test_merge_sections_is_per_key(self):
        base = {"solver": {"max_iterations": 250, "tolerance": 0.001}, "logging": {"level": "INFO"}}
        merged = merge_sections(base, {"solver": {"max_iterations": 500}})

        assert merged == {"solver": {"max_iterations": 500, "tolerance": 0.001}, "logging": {"level": "INFO"}}
        assert base["solver"]["max_iterations"] == 250

    def test_unknown_yaml_section_rejected(self):
        with pytest.raises(ConfigurationError, match="Known sections: paths, solver, calendar, logging"):
            load_config_for_testing(yaml_content="reporting:\n  enabled: true\n")

    def test_invalid_yaml_error(self):
        """Test handling of invalid YAML file."""
        yaml_content = """
        invalid: yaml: content:
        - missing
          proper: structure
        """

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config_for_testing(yaml_content=yaml_content)

    def test_non_mapping_yaml_error(self):
        with pytest.raises(ConfigurationError, match="top level must be a mapping"):
            load_config_for_testing(yaml_content="- just\n- a list\n")

    def test_validation_error(self):
        """Test helpful validation error messages."""
        yaml_content = """
        solver:
          tolerance: -1.0
        calendar:
          timezone: Mars/Olympus_Mons
        """

        with pytest.raises(ConfigurationError) as exc_info:
            load_config_for_testing(yaml_content=yaml_content)

        error_msg = str(exc_info.value)
        assert "Configuration validation failed" in error_msg
        assert "solver -> tolerance" in error_msg
        assert "calendar -> timezone" in error_msg

    def test_missing_yaml_file(self, tmp_path):
        """Missing YAML is fine: defaults + env vars are used."""
        config = load_config(config_path=str(tmp_path / "nonexistent.yaml"), validate=False)
        assert config.solver.max_iterations == 100

    def test_validate_creates_directories(self, tmp_path):
        config = load_config(
            config_path=str(tmp_path / "nonexistent.yaml"),
            cli_overrides={
                "paths": {
                    "data_dir": str(tmp_path / "data"),
                    "logs_dir": str(tmp_path / "logs"),
                    "database_path": str(tmp_path / "db" / "returns.db"),
                }
            },
        )
        assert config.paths.data_dir.is_dir()
        assert config.paths.logs_dir.is_dir()
        assert (tmp_path / "db").is_dir()

    def test_config_sources_info(self, monkeypatch):
        """Test configuration sources information."""
        monkeypatch.setenv("FWD_SOLVER__TOLERANCE", "1e-7")
        loader = ConfigLoader("config.yaml")
        info = loader.sources_info()

        assert "path" in info["yaml_file"]
        assert "FWD_SOLVER__TOLERANCE" in info["environment_variables"]["variables"]
        assert info["cli_overrides"]["count"] == 0


def test_repository_config_yaml_loads():
    """The sample config.yaml at the project root is valid."""
    config_path = Path(__file__).parent.parent.parent / "config.yaml"

    if config_path.exists():
        config = load_config(str(config_path), validate=False)
        assert config.solver.max_iterations == 100
        assert config.calendar.display_years == 8
