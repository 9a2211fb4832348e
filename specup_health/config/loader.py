"""
Configuration loader for YAML files.

Finds and parses the optional .healthcheck.yaml file of a repository
and normalizes run options passed in from code.
"""

from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml
from pydantic import ValidationError

from .models import HealthCheckConfig, RunOptions

CONFIG_FILENAMES = (".healthcheck.yaml", ".healthcheck.yml")


class ConfigError(Exception):
    """Configuration loading or validation error."""
    pass


class ConfigLoader:
    """
    Loads health check configuration from YAML.

    Accepts either an explicit config file or a repository directory,
    in which case the standard file names are searched.
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """
        Initialize the config loader.

        Args:
            config_path: Path to a config file or a repository directory
        """
        self.config_path = Path(config_path) if config_path else None
        self._config: Optional[HealthCheckConfig] = None
        self.source: Optional[Path] = None

    def load(self) -> "ConfigLoader":
        """
        Load the configuration.

        A directory without a config file yields the defaults.

        Returns:
            Self for method chaining
        """
        if self.config_path is None:
            self._config = HealthCheckConfig()
            return self

        if self.config_path.is_file():
            self.source = self.config_path
        elif self.config_path.is_dir():
            for filename in CONFIG_FILENAMES:
                candidate = self.config_path / filename
                if candidate.is_file():
                    self.source = candidate
                    break
        else:
            raise ConfigError(f"Configuration path does not exist: {self.config_path}")

        data = self._read_yaml(self.source) if self.source else {}
        self._config = parse_config(data)
        return self

    def _read_yaml(self, file_path: Path) -> Mapping[str, Any]:
        """Read and parse a YAML file."""
        try:
            with open(file_path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {file_path}: {e}")
        except IOError as e:
            raise ConfigError(f"Cannot read {file_path}: {e}")

        if not isinstance(data, Mapping):
            raise ConfigError(f"Configuration in {file_path} must be a mapping")
        return data

    @property
    def config(self) -> HealthCheckConfig:
        """Get the loaded configuration (defaults if load() was not called)."""
        if self._config is None:
            self._config = HealthCheckConfig()
        return self._config


def parse_config(data: Mapping[str, Any]) -> HealthCheckConfig:
    """Parse a config mapping."""
    try:
        return HealthCheckConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid health check configuration: {e}")


def coerce_run_options(options: Union[RunOptions, Mapping[str, Any], None]) -> RunOptions:
    """
    Normalize run options.

    Args:
        options: RunOptions, a mapping merged over the defaults, or None

    Raises:
        ConfigError: If the options are invalid
    """
    if options is None:
        return RunOptions()
    if isinstance(options, RunOptions):
        return options
    if not isinstance(options, Mapping):
        raise ConfigError(f"Run options must be a mapping, got {type(options).__name__}")
    try:
        return RunOptions(**options)
    except ValidationError as e:
        raise ConfigError(f"Invalid run options: {e}")
