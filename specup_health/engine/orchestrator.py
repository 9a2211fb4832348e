"""
Health Check Orchestrator

Runs a selection of registered checks against a provider and folds
their results into a report.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from ..config.loader import coerce_run_options
from ..config.models import RunOptions
from .models import (
    CheckResult,
    CheckStatus,
    HealthCheckReport,
    HealthCheckSummary,
    calculate_summary,
    create_result,
)
from .registry import CheckMetadata, HealthCheckRegistry, default_registry

logger = logging.getLogger(__name__)


class CheckTimeoutError(Exception):
    """A check did not finish within its timeout."""

    def __init__(self, check_id: str, timeout_ms: int):
        self.check_id = check_id
        self.timeout_ms = timeout_ms
        super().__init__(f"Health check '{check_id}' timed out after {timeout_ms}ms")


@dataclass
class ExecutionContext:
    """Mutable state of one orchestration run."""
    provider: Any
    options: RunOptions
    results: List[CheckResult] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)
    start_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    started: float = field(default_factory=time.monotonic)

    def record(self, check_id: str, result: CheckResult) -> None:
        self.results.append(result)
        if result.status == CheckStatus.FAIL:
            self.failures.append(check_id)

    @property
    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.started) * 1000)


def _discard_outcome(task: "asyncio.Future") -> None:
    # Abandoned tasks still finish; retrieve their outcome so asyncio does not log it.
    if not task.cancelled():
        task.exception()


class HealthCheckOrchestrator:
    """
    Orchestrates health check runs.

    Checks run one at a time in registry execution order, or all at once
    in parallel mode. Every check runs under a timeout, and exceptions,
    malformed results and timeouts are recorded as failing results.
    run_health_checks() always returns a report.

    Timeouts cancel the check's task, but a check that suppresses
    cancellation keeps running in the background with its result discarded.
    """

    def __init__(self, registry: Optional[HealthCheckRegistry] = None):
        """
        Initialize the orchestrator.

        Args:
            registry: Registry to draw checks from (default registry if None)
        """
        self.registry = registry if registry is not None else default_registry

    async def run_health_checks(
        self,
        provider: Any,
        options: Union[RunOptions, Mapping[str, Any], None] = None,
    ) -> HealthCheckReport:
        """
        Run the selected checks and build a report.

        Args:
            provider: Repository provider shared by all checks
            options: RunOptions or a mapping merged over the defaults

        Returns:
            HealthCheckReport; carries an error entry if the run itself broke

        Raises:
            ConfigError: If options are invalid
        """
        run_options = coerce_run_options(options)

        if not self.registry.auto_discovered:
            self.registry.auto_discover()

        context = ExecutionContext(provider=provider, options=run_options)

        try:
            check_ids = self._select_checks(run_options)
            if not check_ids:
                return self._empty_report(context)

            ordered = self.registry.get_execution_order(
                check_ids, respect_dependencies=run_options.respect_dependencies
            )

            if run_options.parallel:
                await self._run_parallel(context, ordered)
            else:
                await self._run_sequential(context, ordered)

            return self._generate_report(context)

        except Exception as e:
            logger.exception("Health check orchestration failed")
            return self._error_report(context, e)

    def _select_checks(self, options: RunOptions) -> List[str]:
        """Resolve the check ids to run from explicit ids, categories, or all."""
        if options.checks is not None:
            missing = [i for i in options.checks if not self.registry.has(i)]
            if missing:
                logger.warning("Requested health checks not found: %s", ", ".join(missing))
            return list(dict.fromkeys(i for i in options.checks if self.registry.has(i)))

        if options.categories is not None:
            selected: List[str] = []
            for category in options.categories:
                selected.extend(check.id for check in self.registry.get_by_category(category))
            return list(dict.fromkeys(selected))

        return [check.id for check in self.registry.get_execution_order()]

    async def _run_sequential(self, context: ExecutionContext, checks: List[CheckMetadata]) -> None:
        for metadata in checks:
            if not context.options.continue_on_error and context.failures:
                logger.debug("Stopping after failed checks: %s", ", ".join(context.failures))
                break

            result = await self._execute_with_timeout(context, metadata.id)
            context.record(metadata.id, result)

    async def _run_parallel(self, context: ExecutionContext, checks: List[CheckMetadata]) -> None:
        # gather() keeps input order, so results follow launch order
        outcomes = await asyncio.gather(
            *(self._execute_with_timeout(context, metadata.id) for metadata in checks),
            return_exceptions=True,
        )

        for metadata, outcome in zip(checks, outcomes):
            if isinstance(outcome, BaseException):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                outcome = self._check_error_result(metadata.id, outcome)
            context.record(metadata.id, outcome)

    async def _execute_with_timeout(self, context: ExecutionContext, check_id: str) -> CheckResult:
        """Run one check through the registry, turning any failure into a result."""
        timeout_ms = context.options.timeout
        task = asyncio.ensure_future(
            self.registry.execute(
                check_id,
                context.provider,
                context.options.check_options.get(check_id),
            )
        )
        logger.debug("Running health check %s", check_id)

        try:
            done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if not done:
            task.cancel()
            task.add_done_callback(_discard_outcome)
            error = CheckTimeoutError(check_id, timeout_ms)
            logger.warning(str(error))
            return self._check_error_result(check_id, error, timed_out=True)

        try:
            result = task.result()
        except Exception as e:
            logger.debug("Health check %s raised: %s", check_id, e)
            return self._check_error_result(check_id, e)

        logger.debug("Health check %s finished: %s", check_id, result.status.value)
        return result

    def _check_error_result(
        self,
        check_id: str,
        error: BaseException,
        timed_out: bool = False,
    ) -> CheckResult:
        details: Dict[str, Any] = {"error": str(error), "execution_error": True}
        if timed_out:
            details["timed_out"] = True
        return create_result(
            check_id,
            CheckStatus.FAIL,
            f"Health check execution failed: {error}",
            details,
        )

    # ============================================================
    # Reports
    # ============================================================

    def _provider_info(self, provider: Any) -> Dict[str, str]:
        info = {"type": str(getattr(provider, "type", "unknown"))}
        repo_path = getattr(provider, "repo_path", None)
        if repo_path:
            info["repo_path"] = str(repo_path)
        return info

    def _generate_report(self, context: ExecutionContext) -> HealthCheckReport:
        summary = calculate_summary(context.results)
        return HealthCheckReport(
            results=list(context.results),
            summary=HealthCheckSummary(
                **{
                    **vars(summary),
                    "execution_time_ms": context.elapsed_ms,
                    "execution_date": context.start_time.isoformat(),
                }
            ),
            timestamp=datetime.now(timezone.utc).isoformat(),
            provider=self._provider_info(context.provider),
        )

    def _empty_report(self, context: ExecutionContext) -> HealthCheckReport:
        return HealthCheckReport(
            results=[],
            summary=HealthCheckSummary(
                execution_time_ms=0,
                execution_date=context.start_time.isoformat(),
            ),
            timestamp=datetime.now(timezone.utc).isoformat(),
            provider=self._provider_info(context.provider),
        )

    def _error_report(self, context: ExecutionContext, error: Exception) -> HealthCheckReport:
        summary = calculate_summary(context.results)
        return HealthCheckReport(
            results=list(context.results),
            summary=HealthCheckSummary(
                **{
                    **vars(summary),
                    "execution_time_ms": context.elapsed_ms,
                    "execution_date": context.start_time.isoformat(),
                }
            ),
            timestamp=datetime.now(timezone.utc).isoformat(),
            provider=self._provider_info(context.provider),
            error={"message": str(error), "type": "orchestration"},
        )

    def get_available_checks(self) -> List[Dict[str, Any]]:
        """List registered checks with their metadata."""
        checks = []
        for check_id in self.registry.get_all_ids():
            metadata = self.registry.get(check_id)
            checks.append({
                "id": metadata.id,
                "name": metadata.name,
                "description": metadata.description,
                "category": metadata.category,
                "enabled": metadata.enabled,
                "priority": metadata.priority,
                "dependencies": list(metadata.dependencies),
            })
        return checks


default_orchestrator = HealthCheckOrchestrator()


async def run_health_checks(
    provider: Any,
    options: Union[RunOptions, Mapping[str, Any], None] = None,
) -> HealthCheckReport:
    """Run health checks with the default orchestrator."""
    return await default_orchestrator.run_health_checks(provider, options)
