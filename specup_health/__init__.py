"""
Spec-Up-T Health Check

Checks a spec-up-t specification repository for common configuration
and content problems.
"""

from typing import Any

from .engine import (
    CheckMetadata,
    CheckResult,
    CheckStatus,
    HealthCheckOrchestrator,
    HealthCheckRegistry,
    HealthCheckReport,
    HealthCheckSummary,
    calculate_summary,
    create_error_result,
    create_result,
    default_registry,
    is_valid_result,
    register_health_check,
    run_health_checks,
)
from .formatters import format_results_as_json, format_results_as_text
from .providers import FileEntry, LocalProvider, Provider, ProviderError, create_provider

__version__ = "1.0.0"


async def health_check(target: str, **options: Any) -> HealthCheckReport:
    """
    Run the health checks against a repository path.

    Args:
        target: Local repository path
        **options: Run options (checks, categories, timeout, parallel, ...)

    Returns:
        HealthCheckReport

    Raises:
        ProviderError: If no provider can be created for target
        ConfigError: If the options are invalid
    """
    provider = create_provider(target)
    return await run_health_checks(provider, options)


__all__ = [
    "CheckMetadata",
    "CheckResult",
    "CheckStatus",
    "HealthCheckOrchestrator",
    "HealthCheckRegistry",
    "HealthCheckReport",
    "HealthCheckSummary",
    "calculate_summary",
    "create_error_result",
    "create_result",
    "default_registry",
    "is_valid_result",
    "register_health_check",
    "run_health_checks",
    "format_results_as_json",
    "format_results_as_text",
    "FileEntry",
    "LocalProvider",
    "Provider",
    "ProviderError",
    "create_provider",
    "health_check",
    "__version__",
]
