"""
package.json Validation

Checks that package.json exists, parses, carries the required fields,
and depends on spec-up-t with the scripts the starter pack expects.
"""

import asyncio
import json
import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..engine.models import CheckResult, CheckStatus, create_error_result, create_result
from . import urls

logger = logging.getLogger(__name__)

CHECK_ID = "package-json"
CHECK_NAME = "package.json validation"
CHECK_DESCRIPTION = "Validates the existence and structure of package.json file"

REQUIRED_FIELDS = ("name", "version")
RECOMMENDED_FIELDS = ("description", "author", "license")
SAMPLE_FIELDS = ("name", "version", "description", "author", "license")

STARTER_PACK_PACKAGE_URL = (
    "https://raw.githubusercontent.com/trustoverip/spec-up-t-starter-pack/main/package.spec-up-t.json"
)
CONFIG_SCRIPTS_URL = (
    "https://raw.githubusercontent.com/trustoverip/spec-up-t/master/"
    "src/install-from-boilerplate/config-scripts-keys.js"
)

_SCRIPTS_BLOCK = re.compile(r"const configScriptsKeys = (\{[\s\S]*?\});")
_SCRIPT_PAIR = re.compile(r'^\s*"([^"]+)":\s*"((?:[^"\\]|\\.)*)"', re.MULTILINE)

_cache = urls.ReferenceCache()


def clear_reference_cache() -> None:
    _cache.clear()


# ============================================================
# Reference data
# ============================================================

async def fetch_starter_pack_version() -> Optional[str]:
    """Recommended spec-up-t version from the starter pack, or None."""
    cached = _cache.get("version")
    if cached:
        return cached

    try:
        data = json.loads(await urls.get_prober().fetch_text(STARTER_PACK_PACKAGE_URL))
    except Exception as e:
        logger.debug("Could not fetch starter pack package.json: %s", e)
        return _cache.get("version", allow_stale=True)

    version = (data.get("dependencies") or {}).get("spec-up-t") if isinstance(data, dict) else None
    if version:
        _cache.set("version", version)
    return version


async def fetch_config_scripts_keys() -> Optional[Dict[str, str]]:
    """Expected npm scripts from the spec-up-t boilerplate, or None."""
    cached = _cache.get("scripts")
    if cached:
        return cached

    try:
        content = await urls.get_prober().fetch_text(CONFIG_SCRIPTS_URL)
    except Exception as e:
        logger.debug("Could not fetch config scripts keys: %s", e)
        return _cache.get("scripts", allow_stale=True)

    scripts = parse_config_scripts(content)
    if scripts:
        _cache.set("scripts", scripts)
    return scripts


def parse_config_scripts(content: str) -> Optional[Dict[str, str]]:
    """Extract the configScriptsKeys object literal from JavaScript source."""
    match = _SCRIPTS_BLOCK.search(content)
    if not match:
        return None

    scripts = {}
    for name, value in _SCRIPT_PAIR.findall(match.group(1)):
        scripts[name] = value.replace('\\"', '"').replace("\\\\", "\\")
    return scripts or None


# ============================================================
# Validations
# ============================================================

def _missing(data: Mapping[str, Any], fields) -> List[str]:
    return [
        f for f in fields
        if not data.get(f) or (isinstance(data[f], str) and not data[f].strip())
    ]


def _sample(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {f: data[f] for f in SAMPLE_FIELDS if data.get(f)}


def validate_dependency(
    package_data: Mapping[str, Any],
    reference_version: Optional[str],
) -> Tuple[CheckStatus, str, Dict[str, Any]]:
    """Validate the spec-up-t dependency against the starter pack version."""
    all_deps = {
        **(package_data.get("dependencies") or {}),
        **(package_data.get("devDependencies") or {}),
    }
    current = all_deps.get("spec-up-t")

    if not current:
        return (
            CheckStatus.FAIL,
            "spec-up-t dependency not found in dependencies or devDependencies",
            {"expected_in_dependencies": True, "found_in_dependencies": False},
        )

    if not reference_version:
        return (
            CheckStatus.WARN,
            "spec-up-t dependency found, but could not verify version against starter pack (network issue)",
            {"current_version": current, "reference_version_unavailable": True},
        )

    if current != reference_version:
        return (
            CheckStatus.WARN,
            "spec-up-t version differs from starter pack recommendation",
            {
                "current_version": current,
                "recommended_version": reference_version,
                "starter_pack_url": STARTER_PACK_PACKAGE_URL,
            },
        )

    return (
        CheckStatus.PASS,
        "spec-up-t dependency is correctly configured",
        {"current_version": current, "matches_starter_pack": True},
    )


def validate_scripts(
    package_data: Mapping[str, Any],
    expected: Optional[Mapping[str, str]],
) -> Tuple[CheckStatus, str, Dict[str, Any]]:
    """Compare npm scripts with the boilerplate reference."""
    scripts = package_data.get("scripts") or {}

    if not expected:
        return (
            CheckStatus.WARN,
            "Could not verify npm scripts against spec-up-t reference (network issue)",
            {"reference_scripts_unavailable": True, "script_count": len(scripts)},
        )

    missing = [name for name in expected if not scripts.get(name)]
    different = [
        {"name": name, "current": scripts[name], "expected": command}
        for name, command in expected.items()
        if scripts.get(name) and scripts[name] != command
    ]

    if missing:
        details = {
            "missing_scripts": missing,
            "total_required": len(expected),
            "config_scripts_url": CONFIG_SCRIPTS_URL,
        }
        if different:
            details["different_scripts"] = different
        return CheckStatus.FAIL, f"Missing required npm scripts: {', '.join(missing)}", details

    if different:
        return (
            CheckStatus.WARN,
            "Some npm scripts differ from spec-up-t reference: "
            + ", ".join(d["name"] for d in different),
            {"different_scripts": different, "config_scripts_url": CONFIG_SCRIPTS_URL},
        )

    return (
        CheckStatus.PASS,
        "All required npm scripts are present and correct",
        {"script_count": len(scripts), "required_script_count": len(expected), "all_scripts_match": True},
    )


# ============================================================
# Check
# ============================================================

async def run(provider, options: Optional[Mapping[str, Any]] = None) -> CheckResult:
    """
    Validate package.json.

    Options:
        check_references: Fetch starter pack references (default True)
    """
    options = options or {}
    try:
        if not await provider.file_exists("package.json"):
            return create_result(CHECK_NAME, CheckStatus.FAIL, "package.json not found in repository root")

        content = await provider.read_file("package.json")
        try:
            package_data = json.loads(content)
        except json.JSONDecodeError as e:
            return create_result(
                CHECK_NAME,
                CheckStatus.FAIL,
                "package.json contains invalid JSON",
                {"parse_error": str(e), "file_content": content[:500] + ("..." if len(content) > 500 else "")},
            )

        if not isinstance(package_data, dict):
            return create_result(CHECK_NAME, CheckStatus.FAIL, "package.json must contain a JSON object")

        missing_required = _missing(package_data, REQUIRED_FIELDS)
        if missing_required:
            return create_result(
                CHECK_NAME,
                CheckStatus.FAIL,
                f"Missing required fields: {', '.join(missing_required)}",
                {
                    "missing_required": missing_required,
                    "present_fields": list(package_data),
                    "package_sample": _sample(package_data),
                },
            )

        if options.get("check_references", True):
            reference_version, expected_scripts = await asyncio.gather(
                fetch_starter_pack_version(), fetch_config_scripts_keys()
            )
        else:
            reference_version, expected_scripts = None, None

        dep_status, dep_message, dep_details = validate_dependency(package_data, reference_version)
        script_status, script_message, script_details = validate_scripts(package_data, expected_scripts)
        missing_recommended = _missing(package_data, RECOMMENDED_FIELDS)

        validations = [
            (
                CheckStatus.WARN if missing_recommended else CheckStatus.PASS,
                f"Missing recommended fields: {', '.join(missing_recommended)}",
            ),
            (dep_status, dep_message),
            (script_status, script_message),
        ]

        details = {
            "package_sample": _sample(package_data),
            "has_all_required": True,
            "missing_recommended": missing_recommended,
            "field_count": len(package_data),
            "dependency": dep_details,
            "scripts": script_details,
        }

        for status in (CheckStatus.FAIL, CheckStatus.WARN):
            messages = [m for s, m in validations if s == status]
            if messages:
                return create_result(CHECK_NAME, status, "; ".join(messages), details)

        return create_result(
            CHECK_NAME,
            CheckStatus.PASS,
            "package.json is valid and well-formed with correct spec-up-t configuration",
            details,
        )

    except Exception as e:
        return create_error_result(CHECK_NAME, e, {"context": "checking package.json file", "provider": provider.type})
