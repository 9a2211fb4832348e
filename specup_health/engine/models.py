"""
Health Check Models

Shared result, summary and report types for repository health checks,
plus the helpers every check uses to build its result.
"""

import math
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union


class ResultValidationError(ValueError):
    """A check result or result collection violates the result contract."""
    pass


class CheckStatus(str, Enum):
    """Status values for check results."""
    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"
    SKIP = "skip"


HEALTH_CHECK_STATUSES = tuple(s.value for s in CheckStatus)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_timestamp(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


@dataclass(frozen=True)
class CheckResult:
    """
    Result of a single health check.

    status accepts a CheckStatus or its string value. details is stored
    as a read-only view; nested values are not copied.
    """
    check: str
    status: CheckStatus
    message: str
    timestamp: str
    details: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        try:
            status = CheckStatus(self.status)
        except ValueError:
            raise ResultValidationError(
                f"Status must be one of: {', '.join(HEALTH_CHECK_STATUSES)}"
            )
        if not isinstance(self.details, Mapping):
            raise ResultValidationError("Details must be a mapping")
        object.__setattr__(self, "status", status)
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    @property
    def passed(self) -> bool:
        return self.status == CheckStatus.PASS

    @property
    def failed(self) -> bool:
        return self.status == CheckStatus.FAIL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "check": self.check,
            "status": self.status.value,
            "message": self.message,
            "timestamp": self.timestamp,
            "details": dict(self.details),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CheckResult":
        """
        Build a result from a mapping that already passed is_valid_result().

        Raises:
            ResultValidationError: If the mapping is not a valid result
        """
        if not is_valid_result(data):
            raise ResultValidationError("Mapping is not a valid check result")
        return cls(
            check=data["check"],
            status=CheckStatus(data["status"]),
            message=data["message"],
            timestamp=data["timestamp"],
            details=dict(data.get("details") or {}),
        )

    def __str__(self) -> str:
        return f"[{self.status.value.upper()}] {self.check}: {self.message}"


@dataclass(frozen=True)
class HealthCheckSummary:
    """Aggregate statistics over a set of check results."""
    total: int = 0
    passed: int = 0
    failed: int = 0
    warnings: int = 0
    skipped: int = 0
    score: int = 0
    has_errors: bool = False
    has_warnings: bool = False
    execution_time_ms: Optional[int] = None
    execution_date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "warnings": self.warnings,
            "skipped": self.skipped,
            "score": self.score,
            "has_errors": self.has_errors,
            "has_warnings": self.has_warnings,
        }
        if self.execution_time_ms is not None:
            data["execution_time_ms"] = self.execution_time_ms
        if self.execution_date is not None:
            data["execution_date"] = self.execution_date
        return data


@dataclass(frozen=True)
class HealthCheckReport:
    """Complete output of one orchestration run."""
    results: List[CheckResult]
    summary: HealthCheckSummary
    timestamp: str
    provider: Dict[str, str]
    error: Optional[Dict[str, str]] = None

    @property
    def passed(self) -> bool:
        """True when nothing failed and the run itself completed."""
        return not self.summary.has_errors and self.error is None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "results": [r.to_dict() for r in self.results],
            "summary": self.summary.to_dict(),
            "timestamp": self.timestamp,
            "provider": dict(self.provider),
        }
        if self.error is not None:
            data["error"] = dict(self.error)
        return data


# ============================================================
# Result helpers
# ============================================================

def create_result(
    check: str,
    status: Union[CheckStatus, str],
    message: str,
    details: Optional[Mapping[str, Any]] = None,
) -> CheckResult:
    """
    Create a standardized check result stamped with the current time.

    Args:
        check: Identifier or display name of the check
        status: One of pass, fail, warn, skip
        message: Human-readable summary
        details: Optional structured payload

    Returns:
        CheckResult

    Raises:
        ResultValidationError: If any argument violates the result contract
    """
    if not isinstance(check, str) or not check.strip():
        raise ResultValidationError("Check name must be a non-empty string")

    if not isinstance(message, str) or not message.strip():
        raise ResultValidationError("Message must be a non-empty string")

    if status not in HEALTH_CHECK_STATUSES:
        raise ResultValidationError(
            f"Status must be one of: {', '.join(HEALTH_CHECK_STATUSES)}"
        )

    if details is not None and not isinstance(details, Mapping):
        raise ResultValidationError("Details must be a mapping or None")

    return CheckResult(
        check=check.strip(),
        status=CheckStatus(status),
        message=message.strip(),
        timestamp=_now_iso(),
        details=dict(details or {}),
    )


def create_error_result(
    check: str,
    error: Union[BaseException, str],
    extra_details: Optional[Mapping[str, Any]] = None,
) -> CheckResult:
    """
    Convert an exception into a failing result.

    The error message and, for exceptions with a traceback, the formatted
    stack are stored in details alongside any extra details.
    """
    error_message = str(error) if str(error) else type(error).__name__
    details: Dict[str, Any] = {"error": error_message}

    if isinstance(error, BaseException) and error.__traceback__ is not None:
        details["stack"] = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )

    details.update(extra_details or {})

    return create_result(
        check,
        CheckStatus.FAIL,
        f"Error during health check: {error_message}",
        details,
    )


def calculate_summary(results: Sequence[CheckResult]) -> HealthCheckSummary:
    """
    Count results by status and compute the health score.

    Args:
        results: Check results to summarize

    Returns:
        HealthCheckSummary (score is 0 for an empty sequence)

    Raises:
        ResultValidationError: If results is not a sequence
    """
    if isinstance(results, (str, bytes)) or not isinstance(results, Sequence):
        raise ResultValidationError("Results must be a sequence")

    statuses = [CheckStatus(_status_of(r)) for r in results]
    total = len(statuses)
    passed = statuses.count(CheckStatus.PASS)
    failed = statuses.count(CheckStatus.FAIL)
    warnings = statuses.count(CheckStatus.WARN)
    skipped = statuses.count(CheckStatus.SKIP)

    return HealthCheckSummary(
        total=total,
        passed=passed,
        failed=failed,
        warnings=warnings,
        skipped=skipped,
        score=_score(passed, total),
        has_errors=failed > 0,
        has_warnings=warnings > 0,
    )


def _score(passed: int, total: int) -> int:
    # Percentage of passing checks, halves rounded up
    if not total:
        return 0
    return math.floor(passed * 100 / total + 0.5)


def _status_of(result: Any) -> str:
    if isinstance(result, CheckResult):
        return result.status.value
    if isinstance(result, Mapping) and result.get("status") in HEALTH_CHECK_STATUSES:
        return result["status"]
    raise ResultValidationError(f"Not a check result: {result!r}")


def is_valid_result(result: Any) -> bool:
    """
    Check that a value has the shape of a check result.

    Accepts CheckResult instances and plain mappings; used on values
    returned by plug-in checks, which are not trusted.
    """
    if isinstance(result, CheckResult):
        data = result.to_dict()
    elif isinstance(result, Mapping):
        data = result
    else:
        return False

    for key in ("check", "status", "message", "timestamp"):
        if not isinstance(data.get(key), str):
            return False

    if data["status"] not in HEALTH_CHECK_STATUSES:
        return False

    if _parse_timestamp(data["timestamp"]) is None:
        return False

    if "details" in data and not isinstance(data["details"], Mapping):
        return False

    return True
