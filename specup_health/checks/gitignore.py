"""
.gitignore Validation

Checks that .gitignore exists and lists the entries from the
spec-up-t boilerplate.
"""

import logging
from typing import Any, List, Mapping, Optional, Tuple

from ..engine.models import CheckResult, CheckStatus, create_error_result, create_result
from . import urls

logger = logging.getLogger(__name__)

CHECK_ID = "gitignore"
CHECK_NAME = ".gitignore"
CHECK_DESCRIPTION = "Validates the existence and content of .gitignore file"

BOILERPLATE_GITIGNORE_URL = (
    "https://raw.githubusercontent.com/trustoverip/spec-up-t/master/"
    "src/install-from-boilerplate/boilerplate/gitignore"
)

FALLBACK_REQUIRED_ENTRIES = (
    "node_modules",
    "*.log",
    "dist",
    "*.bak",
    "*.tmp",
    ".DS_Store",
    ".env",
    "coverage",
    "build",
    ".history",
    "/.cache/",
)

_cache = urls.ReferenceCache()


def clear_entries_cache() -> None:
    _cache.clear()


def parse_gitignore(content: str) -> List[str]:
    """Non-empty, non-comment lines of a .gitignore."""
    lines = (line.strip() for line in content.splitlines())
    return [line for line in lines if line and not line.startswith("#")]


def normalize_line(line: str) -> str:
    return line.strip().strip("/")


def is_entry_present(required: str, normalized_lines: List[str]) -> bool:
    """Match a required entry exactly or by its last path segment."""
    wanted = normalize_line(required)
    wanted_base = wanted.split("/")[-1]
    for line in normalized_lines:
        if line == wanted or line.split("/")[-1] == wanted_base:
            return True
    return False


async def fetch_required_entries() -> Tuple[List[str], bool]:
    """
    Required entries from the boilerplate .gitignore.

    Returns:
        Tuple of (entries, used_fallback)
    """
    cached = _cache.get("entries")
    if cached:
        return cached, False

    try:
        entries = parse_gitignore(await urls.get_prober().fetch_text(BOILERPLATE_GITIGNORE_URL))
        if not entries:
            raise ValueError("No entries found in boilerplate .gitignore")
    except Exception as e:
        logger.debug("Using fallback .gitignore entries: %s", e)
        stale = _cache.get("entries", allow_stale=True)
        if stale:
            return stale, False
        return list(FALLBACK_REQUIRED_ENTRIES), True

    _cache.set("entries", entries)
    return entries, False


async def run(provider, options: Optional[Mapping[str, Any]] = None) -> CheckResult:
    """Validate .gitignore against the boilerplate entries."""
    try:
        required_entries, used_fallback = await fetch_required_entries()

        if not await provider.file_exists(".gitignore"):
            return create_result(
                CHECK_NAME,
                CheckStatus.FAIL,
                ".gitignore file not found - repository should have a .gitignore file",
                {
                    "file_exists": False,
                    "recommendation": "Create a .gitignore file with common exclusion patterns",
                    "boilerplate_url": BOILERPLATE_GITIGNORE_URL,
                },
            )

        content = await provider.read_file(".gitignore")
        if not content.strip():
            return create_result(
                CHECK_NAME,
                CheckStatus.FAIL,
                ".gitignore file is empty - should contain exclusion patterns",
                {
                    "file_exists": True,
                    "is_empty": True,
                    "recommendation": "Add common exclusion patterns to .gitignore",
                    "boilerplate_url": BOILERPLATE_GITIGNORE_URL,
                },
            )

        lines = parse_gitignore(content)
        if not lines:
            return create_result(
                CHECK_NAME,
                CheckStatus.FAIL,
                ".gitignore file contains no valid entries (only comments or empty lines)",
                {
                    "file_exists": True,
                    "has_only_comments": True,
                    "recommendation": "Add valid exclusion patterns to .gitignore",
                    "boilerplate_url": BOILERPLATE_GITIGNORE_URL,
                },
            )

        normalized = [normalize_line(line) for line in lines]
        missing = [entry for entry in required_entries if not is_entry_present(entry, normalized)]

        details = {
            "file_exists": True,
            "total_entries": len(lines),
            "required_entries_count": len(required_entries),
            "present_entries_count": len(required_entries) - len(missing),
            "sample": lines[:10],
            "boilerplate_url": BOILERPLATE_GITIGNORE_URL,
            "used_fallback": used_fallback,
        }

        if not missing:
            return create_result(
                CHECK_NAME,
                CheckStatus.PASS,
                ".gitignore file is valid and contains all required entries",
                details,
            )

        details["missing_entries"] = missing
        noun = "entry" if len(missing) == 1 else "entries"
        return create_result(
            CHECK_NAME,
            CheckStatus.WARN,
            f"{len(missing)} required {noun} missing from .gitignore: {', '.join(missing)}",
            details,
        )

    except Exception as e:
        return create_error_result(CHECK_NAME, e, {"context": "checking .gitignore file", "provider": provider.type})
