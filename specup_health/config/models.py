"""
Pydantic models for health check configuration.

RunOptions controls a single orchestration run; HealthCheckConfig is
the shape of a .healthcheck.yaml file.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class OutputFormat(str, Enum):
    """Report output formats."""
    TEXT = "text"
    JSON = "json"


def _clean_ids(values: Optional[List[str]], label: str) -> Optional[List[str]]:
    if values is None:
        return None
    cleaned = []
    for value in values:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{label} entries must be non-empty strings")
        cleaned.append(value.strip())
    return cleaned


class RunOptions(BaseModel):
    """Options for one orchestration run."""

    checks: Optional[List[str]] = Field(None, description="Check ids to run")
    categories: Optional[List[str]] = Field(None, description="Categories to run")
    continue_on_error: bool = Field(default=True, description="Keep going after a failed check")
    timeout: int = Field(default=30000, gt=0, description="Per-check timeout in milliseconds")
    parallel: bool = Field(default=False, description="Run checks concurrently")
    check_options: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict, description="Options passed to individual checks, keyed by check id"
    )
    respect_dependencies: bool = Field(
        default=False, description="Order checks by their declared dependencies"
    )

    @field_validator("checks")
    @classmethod
    def validate_checks(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_ids(v, "checks")

    @field_validator("categories")
    @classmethod
    def validate_categories(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_ids(v, "categories")


class HealthCheckConfig(RunOptions):
    """Contents of a health check config file."""

    disabled: List[str] = Field(default_factory=list, description="Check ids to disable")
    format: OutputFormat = Field(default=OutputFormat.TEXT, description="Report format")

    def run_options(self, **overrides: Any) -> RunOptions:
        """
        Build RunOptions from this config, with non-None overrides applied.

        Raises:
            ConfigError: If an override is invalid
        """
        from .loader import coerce_run_options

        data = self.model_dump(include=set(RunOptions.model_fields))
        data.update({k: v for k, v in overrides.items() if v is not None})
        return coerce_run_options(data)
