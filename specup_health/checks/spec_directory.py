"""
Spec Directory and Files

Checks the directories named in specs.json and the markdown files
spec-up-t expects inside them.
"""

from typing import Any, Dict, List, Mapping, Optional

from ..engine.models import CheckResult, CheckStatus, create_error_result, create_result
from .specs_json import SpecsJsonError, load_first_spec

CHECK_ID = "spec-directory-and-files"
CHECK_NAME = "Spec Directory and Files"
CHECK_DESCRIPTION = "Validates spec directories and required markdown files"

REQUIRED_SPEC_FILES = ("terms-and-definitions-intro.md",)
RECOMMENDED_SPEC_FILES = ("spec-head.md", "spec-body.md")

_FAILURE_MESSAGES = {
    "missing": "specs.json not found - cannot validate spec directories",
    "invalid_json": "specs.json contains invalid JSON",
    "no_specs": "specs.json has invalid structure",
}


def join_path(*segments: Optional[str]) -> str:
    """Join path segments, dropping empty ones and redundant slashes."""
    parts = []
    for segment in segments:
        if not segment:
            continue
        if segment.startswith("./"):
            segment = segment[2:]
        parts.append(segment.rstrip("/"))
    joined = "/".join(p for p in parts if p)
    while "//" in joined:
        joined = joined.replace("//", "/")
    return joined


def resolve_terms_directory(spec_directory: Optional[str], terms_directory: Optional[str]) -> Optional[str]:
    """The terms directory is relative to spec_directory unless it starts with ./ or /."""
    if spec_directory and terms_directory and not terms_directory.startswith(("./", "/")):
        return join_path(spec_directory, terms_directory)
    return terms_directory


class _Findings:
    def __init__(self):
        self.errors: List[str] = []
        self.warnings: List[str] = []
        self.success: List[str] = []


async def _check_directory(provider, label: str, path: Optional[str], shown: Optional[str], findings: _Findings) -> None:
    if not shown:
        findings.errors.append(f"{label} is not defined in specs.json")
        return
    try:
        if await provider.directory_exists(path):
            findings.success.append(f"{label} exists: {shown}")
        else:
            findings.errors.append(f"{label} does not exist: {shown}")
    except Exception as e:
        findings.errors.append(f"Error checking {label}: {e}")


async def _check_required_files(provider, spec_directory: str, findings: _Findings) -> None:
    for filename in REQUIRED_SPEC_FILES:
        file_path = join_path(spec_directory, filename)
        try:
            if await provider.file_exists(file_path):
                findings.success.append(f"Required file exists: {file_path}")
            else:
                findings.errors.append(f"Required file missing: {file_path}")
        except Exception as e:
            findings.errors.append(f"Error checking required file {file_path}: {e}")


async def _check_recommended_files(provider, spec_directory: str, findings: _Findings) -> None:
    found, missing = [], []
    for filename in RECOMMENDED_SPEC_FILES:
        try:
            exists = await provider.file_exists(join_path(spec_directory, filename))
        except Exception:
            exists = False
        (found if exists else missing).append(filename)

    if found:
        findings.success.append(
            f"Found {len(found)} of {len(RECOMMENDED_SPEC_FILES)} recommended files: {', '.join(found)}"
        )
    if missing:
        findings.warnings.append(
            f"Missing {len(missing)} recommended markdown file(s) in {spec_directory}: {', '.join(missing)}"
        )


async def _check_terms_files(provider, path: str, shown: str, findings: _Findings) -> None:
    try:
        if not await provider.directory_exists(path):
            return
        entries = await provider.list_files(path)
    except Exception as e:
        findings.warnings.append(f"Unable to list files in spec_terms_directory: {e}")
        return

    markdown = [e for e in entries if e.is_file and e.name.endswith((".md", ".markdown"))]
    if markdown:
        findings.success.append(f"spec_terms_directory contains {len(markdown)} markdown file(s)")
    else:
        findings.warnings.append(f"spec_terms_directory exists but contains no markdown files: {shown}")


async def run(provider, options: Optional[Mapping[str, Any]] = None) -> CheckResult:
    """Validate spec_directory, spec_terms_directory and their files."""
    try:
        try:
            spec = await load_first_spec(provider)
        except SpecsJsonError as e:
            return create_result(CHECK_NAME, CheckStatus.FAIL, _FAILURE_MESSAGES[e.reason], {"errors": [str(e)]})

        spec_directory = spec.get("spec_directory")
        terms_directory = spec.get("spec_terms_directory")
        full_terms_directory = resolve_terms_directory(spec_directory, terms_directory)

        findings = _Findings()
        await _check_directory(provider, "spec_directory", spec_directory, spec_directory, findings)
        await _check_directory(provider, "spec_terms_directory", full_terms_directory, terms_directory, findings)
        if spec_directory:
            await _check_required_files(provider, spec_directory, findings)
            await _check_recommended_files(provider, spec_directory, findings)
        if full_terms_directory:
            await _check_terms_files(provider, full_terms_directory, terms_directory, findings)

        if findings.errors:
            status = CheckStatus.FAIL
            message = f"Found {len(findings.errors)} critical issue(s) with spec directories or files"
        elif findings.warnings:
            status = CheckStatus.WARN
            message = f"Spec directories are valid but {len(findings.warnings)} recommended file(s) are missing"
        else:
            status = CheckStatus.PASS
            message = "All spec directories and required files are present"

        details: Dict[str, Any] = {
            "errors": findings.errors,
            "warnings": findings.warnings,
            "success": findings.success,
            "spec_directory": spec_directory,
            "spec_terms_directory": terms_directory,
            "full_spec_terms_directory": full_terms_directory,
        }
        return create_result(CHECK_NAME, status, message, details)

    except Exception as e:
        return create_error_result(CHECK_NAME, e)
