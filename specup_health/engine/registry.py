"""
Health Check Registry

Catalog of check plug-ins with category indexing, deterministic
execution ordering and a single guarded entry point for running a check.
"""

import heapq
import importlib
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Union

from .models import CheckResult, is_valid_result

logger = logging.getLogger(__name__)

CheckFunction = Callable[..., Awaitable[Union[CheckResult, Mapping[str, Any]]]]

DEFAULT_CATEGORY = "general"
DEFAULT_PRIORITY = 100

# Module path, category, priority, declared dependencies
BUILTIN_CHECK_MODULES = (
    ("specup_health.checks.package_json", "configuration", 10, ()),
    ("specup_health.checks.gitignore", "configuration", 12, ()),
    ("specup_health.checks.specs_json", "configuration", 15, ()),
    ("specup_health.checks.spec_files", "content", 20, ()),
    ("specup_health.checks.spec_directory", "content", 25, ("specs-json",)),
    ("specup_health.checks.external_specs_urls", "external-references", 30, ("specs-json",)),
)


# ============================================================
# Errors
# ============================================================

class RegistryError(Exception):
    """Base class for registry errors."""
    pass


class InvalidCheckMetadataError(RegistryError, ValueError):
    """Check metadata is missing fields or has wrong types."""
    pass


class DuplicateCheckError(RegistryError):
    """A check with the same id is already registered."""
    pass


class CheckNotRegisteredError(RegistryError, KeyError):
    """No check is registered under the requested id."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class CheckDisabledError(RegistryError):
    """The requested check is registered but disabled."""
    pass


class InvalidCheckResultError(RegistryError):
    """A check returned something that is not a valid result."""
    pass


class CheckExecutionError(RegistryError):
    """A check raised while running."""

    def __init__(self, check_id: str, original: BaseException):
        self.check_id = check_id
        self.original = original
        super().__init__(f"Failed to execute health check '{check_id}': {original}")


class DependencyCycleError(RegistryError):
    """Declared check dependencies form a cycle."""
    pass


# ============================================================
# Metadata
# ============================================================

@dataclass
class CheckMetadata:
    """Registry entry describing one check plug-in."""
    id: str
    name: str
    description: str
    check_function: CheckFunction
    category: str = DEFAULT_CATEGORY
    priority: int = DEFAULT_PRIORITY
    dependencies: List[str] = field(default_factory=list)
    enabled: bool = True

    def sort_key(self):
        return (self.priority, self.id)


_REQUIRED_FIELDS = ("id", "name", "description", "check_function")


def _validate_metadata(metadata: Mapping[str, Any]) -> None:
    if not isinstance(metadata, Mapping):
        raise InvalidCheckMetadataError("Health check metadata must be a mapping")

    for name in _REQUIRED_FIELDS:
        if not metadata.get(name):
            raise InvalidCheckMetadataError(
                f"Health check metadata missing required field: {name}"
            )

    if not isinstance(metadata["id"], str) or not metadata["id"].strip():
        raise InvalidCheckMetadataError("Health check ID must be a non-empty string")

    if not callable(metadata["check_function"]):
        raise InvalidCheckMetadataError("Health check function must be callable")

    priority = metadata.get("priority")
    if priority is not None and (
        isinstance(priority, bool) or not isinstance(priority, (int, float)) or priority < 0
    ):
        raise InvalidCheckMetadataError("Health check priority must be a non-negative number")

    dependencies = metadata.get("dependencies")
    if dependencies is not None and not isinstance(dependencies, (list, tuple)):
        raise InvalidCheckMetadataError("Health check dependencies must be a list")


# ============================================================
# Registry
# ============================================================

class HealthCheckRegistry:
    """
    Registry of health check plug-ins.

    Checks are registered once at startup, either explicitly through
    register() or in bulk through auto_discover(). Construct a fresh
    registry for isolated use; the module-level default_registry exists
    for convenience call sites.
    """

    def __init__(self):
        self._checks: Dict[str, CheckMetadata] = {}
        self._categories: List[str] = [DEFAULT_CATEGORY]
        self.auto_discovered = False

    def register(self, metadata: Union[CheckMetadata, Mapping[str, Any]]) -> CheckMetadata:
        """
        Register a check.

        Args:
            metadata: CheckMetadata or a mapping with the same keys

        Returns:
            The stored CheckMetadata with defaults applied

        Raises:
            InvalidCheckMetadataError: If required fields are missing or mistyped
            DuplicateCheckError: If the id is already registered
        """
        if isinstance(metadata, CheckMetadata):
            metadata = vars(metadata).copy()
        _validate_metadata(metadata)

        check_id = metadata["id"]
        if check_id in self._checks:
            raise DuplicateCheckError(f"Health check with ID '{check_id}' is already registered")

        entry = CheckMetadata(
            id=check_id,
            name=metadata["name"],
            description=metadata["description"],
            check_function=metadata["check_function"],
            category=metadata.get("category") or DEFAULT_CATEGORY,
            priority=metadata["priority"] if metadata.get("priority") is not None else DEFAULT_PRIORITY,
            dependencies=list(metadata.get("dependencies") or []),
            enabled=metadata.get("enabled", True),
        )

        self._checks[check_id] = entry
        if entry.category not in self._categories:
            self._categories.append(entry.category)
        return entry

    def unregister(self, check_id: str) -> bool:
        return self._checks.pop(check_id, None) is not None

    def get(self, check_id: str) -> Optional[CheckMetadata]:
        return self._checks.get(check_id)

    def has(self, check_id: str) -> bool:
        return check_id in self._checks

    def get_all_ids(self) -> List[str]:
        return list(self._checks)

    def get_by_category(self, category: str) -> List[CheckMetadata]:
        return [c for c in self._checks.values() if c.category == category]

    def get_categories(self) -> List[str]:
        return list(self._categories)

    def set_enabled(self, check_id: str, enabled: bool) -> bool:
        """Enable or disable a check. Returns False if the id is unknown."""
        metadata = self.get(check_id)
        if metadata is None:
            return False
        metadata.enabled = bool(enabled)
        return True

    def get_execution_order(
        self,
        requested_ids: Optional[Iterable[str]] = None,
        respect_dependencies: bool = False,
    ) -> List[CheckMetadata]:
        """
        Order enabled checks for execution.

        Unknown requested ids are dropped silently; callers that need
        strictness should audit with has() first.

        Args:
            requested_ids: Restrict ordering to these ids (all checks if None)
            respect_dependencies: Topologically sort on declared dependencies,
                breaking ties by (priority, id)

        Returns:
            Enabled checks sorted by (priority, id), or in dependency order

        Raises:
            DependencyCycleError: If respect_dependencies is set and the
                selected checks depend on each other in a cycle
        """
        if requested_ids is None:
            candidates = list(self._checks.values())
        else:
            seen = set()
            candidates = []
            for check_id in requested_ids:
                metadata = self.get(check_id)
                if metadata is not None and check_id not in seen:
                    seen.add(check_id)
                    candidates.append(metadata)

        enabled = sorted((c for c in candidates if c.enabled), key=CheckMetadata.sort_key)

        if not respect_dependencies:
            return enabled
        return self._topological_order(enabled)

    def _topological_order(self, checks: List[CheckMetadata]) -> List[CheckMetadata]:
        by_id = {c.id: c for c in checks}
        pending = {
            c.id: {dep for dep in c.dependencies if dep in by_id and dep != c.id}
            for c in checks
        }
        dependents: Dict[str, List[str]] = {c.id: [] for c in checks}
        for check_id, deps in pending.items():
            for dep in deps:
                dependents[dep].append(check_id)

        ready = [by_id[i].sort_key() for i, deps in pending.items() if not deps]
        heapq.heapify(ready)
        ordered = []

        while ready:
            _, check_id = heapq.heappop(ready)
            ordered.append(by_id[check_id])
            for dependent in dependents[check_id]:
                pending[dependent].discard(check_id)
                if not pending[dependent]:
                    heapq.heappush(ready, by_id[dependent].sort_key())

        if len(ordered) != len(checks):
            stuck = sorted(i for i, deps in pending.items() if deps)
            raise DependencyCycleError(
                f"Dependency cycle between health checks: {', '.join(stuck)}"
            )
        return ordered

    async def execute(
        self,
        check_id: str,
        provider: Any,
        options: Optional[Mapping[str, Any]] = None,
    ) -> CheckResult:
        """
        Run a single registered check.

        Every plug-in invocation goes through here, so callers get either
        a valid CheckResult or one of the registry errors.

        Args:
            check_id: Id of the check to run
            provider: Repository provider handed to the check
            options: Per-check options, passed as second argument when given

        Returns:
            The validated CheckResult

        Raises:
            CheckNotRegisteredError: Unknown id
            CheckDisabledError: Check is disabled
            InvalidCheckResultError: Check returned a malformed result
            CheckExecutionError: Check raised
        """
        metadata = self.get(check_id)
        if metadata is None:
            raise CheckNotRegisteredError(f"Health check '{check_id}' is not registered")

        if not metadata.enabled:
            raise CheckDisabledError(f"Health check '{check_id}' is disabled")

        try:
            if options is None:
                outcome = metadata.check_function(provider)
            else:
                outcome = metadata.check_function(provider, options)
            if inspect.isawaitable(outcome):
                outcome = await outcome
        except Exception as e:
            raise CheckExecutionError(check_id, e) from e

        if not is_valid_result(outcome):
            raise InvalidCheckResultError(
                f"Health check '{check_id}' returned invalid result structure"
            )

        if isinstance(outcome, CheckResult):
            return outcome
        return CheckResult.from_dict(outcome)

    def auto_discover(self) -> None:
        """
        Register the built-in checks.

        Runs once per registry until clear(). A module that fails to
        import or register is logged and skipped.
        """
        if self.auto_discovered:
            return

        for module_path, category, priority, dependencies in BUILTIN_CHECK_MODULES:
            try:
                module = importlib.import_module(module_path)
                if self.has(module.CHECK_ID):
                    continue
                self.register({
                    "id": module.CHECK_ID,
                    "name": module.CHECK_NAME,
                    "description": module.CHECK_DESCRIPTION,
                    "check_function": module.run,
                    "category": category,
                    "priority": priority,
                    "dependencies": list(dependencies),
                })
            except Exception as e:
                logger.warning("Failed to load health check %s: %s", module_path, e)

        self.auto_discovered = True

    def get_summary(self) -> Dict[str, Any]:
        checks = list(self._checks.values())
        return {
            "total_checks": len(checks),
            "enabled_checks": len([c for c in checks if c.enabled]),
            "disabled_checks": len([c for c in checks if not c.enabled]),
            "categories": self.get_categories(),
            "checks_by_category": {
                category: len(self.get_by_category(category))
                for category in self.get_categories()
            },
        }

    def clear(self) -> None:
        """Remove every check and reset categories and discovery state."""
        self._checks.clear()
        self._categories = [DEFAULT_CATEGORY]
        self.auto_discovered = False

    def __len__(self) -> int:
        return len(self._checks)

    def __contains__(self, check_id: str) -> bool:
        return self.has(check_id)


default_registry = HealthCheckRegistry()


def register_health_check(metadata: Union[CheckMetadata, Mapping[str, Any]]) -> CheckMetadata:
    """Register a check with the default registry."""
    return default_registry.register(metadata)


def get_health_check(check_id: str) -> Optional[CheckMetadata]:
    """Look up a check in the default registry."""
    return default_registry.get(check_id)


def auto_discover_health_checks() -> None:
    """Register the built-in checks with the default registry."""
    default_registry.auto_discover()
