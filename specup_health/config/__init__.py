"""Configuration handling for the health checker."""

from .models import HealthCheckConfig, OutputFormat, RunOptions
from .loader import ConfigError, ConfigLoader, coerce_run_options, parse_config

__all__ = [
    "HealthCheckConfig",
    "OutputFormat",
    "RunOptions",
    "ConfigError",
    "ConfigLoader",
    "coerce_run_options",
    "parse_config",
]
