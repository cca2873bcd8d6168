"""Configuration loading for Forward Returns.

Sources, highest priority first:

1. CLI overrides (a nested dict, e.g. ``{"solver": {"max_iterations": 50}}``)
2. Environment variables, read by pydantic-settings (``FWD_SOLVER__TOLERANCE=1e-8``)
3. The YAML file (``config.yaml`` unless another path is given)
4. Defaults declared in :mod:`forward_returns.config.schema`

Values are merged section by section, so a YAML file can set
``solver.max_iterations`` while the environment sets ``solver.tolerance``.
Type coercion of environment strings is left to the pydantic models.
"""

import os
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import EnvSettingsSource

from .schema import AppConfig

ENV_PREFIX = "FWD_"
DEFAULT_CONFIG_FILE = "config.yaml"
SECTIONS = tuple(AppConfig.model_fields)


class ConfigurationError(Exception):
    """Raised when configuration loading fails."""


def merge_sections(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` updated with ``override``, recursing into nested dicts."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            merged[key] = merge_sections(current, value)
        else:
            merged[key] = value
    return merged


class ConfigLoader:
    """Resolves an :class:`AppConfig` from YAML, environment and CLI overrides."""

    def __init__(self, config_path: str | None = None):
        self.config_path = Path(config_path or DEFAULT_CONFIG_FILE)
        self._cli_overrides: dict[str, Any] = {}

    def load_config(
        self,
        cli_overrides: dict[str, Any] | None = None,
        validate: bool = True,
    ) -> AppConfig:
        """Build the configuration.

        Args:
            cli_overrides: Nested dict of values that win over every other source.
            validate: Create the configured data and log directories.

        Raises:
            ConfigurationError: On unreadable YAML or values that fail validation.
        """
        self._cli_overrides = cli_overrides or {}

        values = merge_sections(self.read_yaml(), self.env_values())
        values = merge_sections(values, self._cli_overrides)

        try:
            config = AppConfig.model_validate(values)
        except ValidationError as e:
            raise ConfigurationError(self._describe_errors(e)) from e

        if validate:
            try:
                config.ensure_directories()
            except OSError as e:
                raise ConfigurationError(f"Cannot create configured directories: {e}") from e
        return config

    def read_yaml(self) -> dict[str, Any]:
        """Mapping from the YAML file, or ``{}`` when the file does not exist."""
        if not self.config_path.exists():
            return {}

        try:
            data = yaml.safe_load(self.config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to read {self.config_path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid YAML in {self.config_path}: top level must be a mapping")
        return data

    @staticmethod
    def env_values() -> dict[str, Any]:
        """``FWD_*`` variables as nested section dicts, still as strings."""
        return EnvSettingsSource(AppConfig)()

    def sources_info(self) -> dict[str, Any]:
        """Where configuration values come from, for ``forward-returns config --sources``."""
        env_names = sorted(name for name in os.environ if name.upper().startswith(ENV_PREFIX))
        return {
            "yaml_file": {
                "path": str(self.config_path.absolute()),
                "exists": self.config_path.exists(),
            },
            "environment_variables": {
                "count": len(env_names),
                "variables": env_names,
                "sections": sorted(self.env_values()),
            },
            "cli_overrides": {
                "count": len(self._cli_overrides),
                "sections": list(self._cli_overrides),
            },
        }

    def _describe_errors(self, error: ValidationError) -> str:
        lines = ["Configuration validation failed:"]
        for item in error.errors():
            loc = " -> ".join(str(part) for part in item["loc"])
            lines.append(f"  {loc}: {item['msg']}")
        lines.append("")
        lines.append(f"Known sections: {', '.join(SECTIONS)}. Values are read from")
        lines.append(f"  {self.config_path}, {ENV_PREFIX}<SECTION>__<KEY> environment variables and CLI options.")
        return "\n".join(lines)


def load_config(
    config_path: str | None = None,
    cli_overrides: dict[str, Any] | None = None,
    validate: bool = True,
) -> AppConfig:
    """Shortcut for ``ConfigLoader(config_path).load_config(...)``."""
    return ConfigLoader(config_path).load_config(cli_overrides, validate)


@contextmanager
def _patched_environ(env_vars: Mapping[str, str]) -> Iterator[None]:
    saved = {key: os.environ.get(key) for key in env_vars}
    os.environ.update(env_vars)
    try:
        yield
    finally:
        for key, value in saved.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value


def load_config_for_testing(
    yaml_content: str | None = None,
    env_vars: dict[str, str] | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """Load configuration from inline YAML and temporary environment variables.

    Directories are never created.
    """
    import tempfile

    with tempfile.TemporaryDirectory() as tmp_dir:
        config_path = Path(tmp_dir) / DEFAULT_CONFIG_FILE
        if yaml_content:
            config_path.write_text(yaml_content, encoding="utf-8")
        with _patched_environ(env_vars or {}):
            return ConfigLoader(str(config_path)).load_config(cli_overrides, validate=False)
