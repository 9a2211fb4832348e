"""
Health Check Engine

Result model, check registry and orchestrator.
"""

from .models import (
    HEALTH_CHECK_STATUSES,
    CheckResult,
    CheckStatus,
    HealthCheckReport,
    HealthCheckSummary,
    ResultValidationError,
    calculate_summary,
    create_error_result,
    create_result,
    is_valid_result,
)
from .registry import (
    CheckDisabledError,
    CheckExecutionError,
    CheckMetadata,
    CheckNotRegisteredError,
    DependencyCycleError,
    DuplicateCheckError,
    HealthCheckRegistry,
    InvalidCheckMetadataError,
    InvalidCheckResultError,
    RegistryError,
    auto_discover_health_checks,
    default_registry,
    get_health_check,
    register_health_check,
)
from .orchestrator import (
    CheckTimeoutError,
    HealthCheckOrchestrator,
    default_orchestrator,
    run_health_checks,
)

__all__ = [
    "HEALTH_CHECK_STATUSES",
    "CheckResult",
    "CheckStatus",
    "HealthCheckReport",
    "HealthCheckSummary",
    "ResultValidationError",
    "calculate_summary",
    "create_error_result",
    "create_result",
    "is_valid_result",
    "CheckDisabledError",
    "CheckExecutionError",
    "CheckMetadata",
    "CheckNotRegisteredError",
    "DependencyCycleError",
    "DuplicateCheckError",
    "HealthCheckRegistry",
    "InvalidCheckMetadataError",
    "InvalidCheckResultError",
    "RegistryError",
    "auto_discover_health_checks",
    "default_registry",
    "get_health_check",
    "register_health_check",
    "CheckTimeoutError",
    "HealthCheckOrchestrator",
    "default_orchestrator",
    "run_health_checks",
]
