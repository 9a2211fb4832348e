"""
External Specs URL Validation

Checks the gh_page and url of every external spec referenced from
specs.json.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import urlparse

from ..engine.models import CheckResult, CheckStatus, create_error_result, create_result
from . import urls
from .specs_json import SpecsJsonError, load_first_spec

CHECK_ID = "external-specs-urls"
CHECK_NAME = "External Specs URL Validation"
CHECK_DESCRIPTION = "Validates external specification URLs exist, have correct structure, and are accessible"

GITHUB_HOSTS = ("github.com", "www.github.com")


@dataclass
class ExternalSpecFindings:
    """Validation outcome for one external spec."""
    spec_index: int
    spec_id: str
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    success: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "spec_index": self.spec_index,
            "spec_id": self.spec_id,
            "errors": self.errors,
            "warnings": self.warnings,
            "success": self.success,
        }


def validate_url_structure(value: Any) -> Tuple[bool, Optional[str]]:
    """Returns (is_valid, message)."""
    if not isinstance(value, str):
        return False, "URL is missing or not a string"
    if not value.strip():
        return False, "URL is empty"
    try:
        parsed = urlparse(value)
    except ValueError as e:
        return False, f"Invalid URL format: {e}"
    if parsed.scheme not in ("http", "https"):
        return False, f"URL must use http or https protocol, found: {parsed.scheme or 'none'}:"
    if not parsed.hostname:
        return False, "URL must have a hostname"
    return True, None


def validate_gh_page_structure(value: Any) -> Tuple[bool, Optional[str]]:
    """A valid URL; a message (not an error) if it is not on *.github.io."""
    valid, message = validate_url_structure(value)
    if not valid:
        return valid, message
    if urlparse(value).hostname.lower().endswith(".github.io"):
        return True, None
    return True, f"Valid URL ({value}) but not a standard GitHub Pages domain (.github.io)"


def validate_repo_structure(value: Any) -> Tuple[bool, Optional[str]]:
    valid, message = validate_url_structure(value)
    if not valid:
        return valid, message
    parsed = urlparse(value)
    if parsed.hostname.lower() not in GITHUB_HOSTS:
        return False, "URL is not a GitHub repository URL (should be github.com)"
    if len([part for part in parsed.path.split("/") if part]) < 2:
        return False, "GitHub URL should have format: https://github.com/{owner}/{repo}"
    return True, None


async def _probe(value: str, name: str, findings: ExternalSpecFindings) -> None:
    accessibility = await urls.get_prober().probe(value, name)
    if accessibility.is_accessible:
        findings.success.append(f"{name} is accessible (HTTP {accessibility.status_code})")
    else:
        findings.errors.append(accessibility.message or f"{name} is not accessible")


async def validate_external_spec(
    spec: Mapping[str, Any],
    index: int,
    check_accessibility: bool = True,
) -> ExternalSpecFindings:
    findings = ExternalSpecFindings(spec_index=index, spec_id=spec.get("external_spec") or f"[spec {index}]")

    if "gh_page" not in spec:
        findings.errors.append('Field "gh_page" is missing')
    elif not spec["gh_page"]:
        findings.errors.append('Field "gh_page" is empty')
    else:
        findings.success.append('Field "gh_page" exists')
        valid, message = validate_gh_page_structure(spec["gh_page"])
        if not valid:
            findings.errors.append(f"gh_page structure invalid: {message}")
        else:
            findings.success.append('Field "gh_page" has valid URL structure')
            if message:
                findings.warnings.append(message)
            if check_accessibility:
                await _probe(spec["gh_page"], "gh_page", findings)

    if "url" not in spec:
        findings.errors.append('Field "url" is missing')
    elif not spec["url"]:
        findings.errors.append('Field "url" is empty')
    else:
        findings.success.append('Field "url" exists')
        valid, message = validate_repo_structure(spec["url"])
        if not valid:
            findings.errors.append(f"url structure invalid: {message}")
        else:
            findings.success.append('Field "url" has valid GitHub repository structure')
            if check_accessibility:
                await _probe(spec["url"], "url", findings)

    return findings


async def run(provider, options: Optional[Mapping[str, Any]] = None) -> CheckResult:
    """
    Validate external spec references.

    Options:
        check_accessibility: Probe gh_page and url (default True)
    """
    check_accessibility = bool((options or {}).get("check_accessibility", True))
    try:
        try:
            spec = await load_first_spec(provider)
        except SpecsJsonError as e:
            if e.reason == "missing":
                return create_result(
                    CHECK_ID,
                    CheckStatus.FAIL,
                    "specs.json not found - cannot validate external specs",
                    {
                        "suggestions": [
                            "Create a specs.json file in the repository root",
                            "Run the specs-json health check first",
                        ]
                    },
                )
            if e.reason == "invalid_json":
                return create_result(CHECK_ID, CheckStatus.FAIL, "specs.json contains invalid JSON", {"parse_error": str(e)})
            return create_result(CHECK_ID, CheckStatus.FAIL, "No specs found in specs.json", {"details": str(e)})

        external_specs = spec.get("external_specs")
        if external_specs is None:
            return create_result(
                CHECK_ID,
                CheckStatus.PASS,
                "No external_specs defined (this is acceptable)",
                {"info": "This specification does not reference external specifications"},
            )

        if not isinstance(external_specs, list):
            return create_result(
                CHECK_ID,
                CheckStatus.FAIL,
                "external_specs must be an array",
                {"actual_type": type(external_specs).__name__},
            )

        if not external_specs:
            return create_result(
                CHECK_ID,
                CheckStatus.PASS,
                "external_specs array is empty (this is acceptable)",
                {"info": "No external specifications are configured"},
            )

        all_findings = []
        errors, warnings, success = [], [], []
        for index, ext_spec in enumerate(external_specs):
            findings = await validate_external_spec(
                ext_spec if isinstance(ext_spec, dict) else {}, index, check_accessibility
            )
            all_findings.append(findings)
            errors.extend(f"{findings.spec_id}: {m}" for m in findings.errors)
            warnings.extend(f"{findings.spec_id}: {m}" for m in findings.warnings)
            success.extend(f"{findings.spec_id}: {m}" for m in findings.success)

        if errors:
            status, message = CheckStatus.FAIL, f"Found {len(errors)} error(s) in external specs"
        elif warnings:
            status, message = CheckStatus.WARN, f"External specs validated with {len(warnings)} warning(s)"
        else:
            status = CheckStatus.PASS
            message = f"All {len(external_specs)} external spec(s) validated successfully"

        return create_result(
            CHECK_ID,
            status,
            message,
            {
                "total_specs": len(external_specs),
                "errors": errors,
                "warnings": warnings,
                "success": success,
                "detailed_results": [f.to_dict() for f in all_findings],
                "accessibility_checked": check_accessibility,
            },
        )

    except Exception as e:
        return create_error_result(CHECK_ID, e)
