"""
specs.json Validation

Validates the structure and fields of specs.json, the accessibility of
the URLs it references and the markdown files it lists.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ..engine.models import CheckResult, CheckStatus, create_error_result, create_result
from . import urls

CHECK_ID = "specs-json"
CHECK_NAME = "specs.json validation"
CHECK_DESCRIPTION = (
    "Validates the existence and structure of specs.json file, "
    "including URL accessibility and file existence"
)

REQUIRED_FIELDS = (
    "title",
    "description",
    "author",
    "spec_directory",
    "spec_terms_directory",
    "output_path",
    "markdown_paths",
    "logo",
    "logo_link",
    "source",
)
WARNING_FIELDS = ("favicon",)
OPTIONAL_FIELDS = ("anchor_symbol", "katex")
SOURCE_FIELDS = ("host", "account", "repo", "branch")
EXTERNAL_SPEC_FIELDS = ("external_spec", "gh_page", "url", "terms_dir")

# (field, required)
URL_FIELDS = (("logo", True), ("logo_link", True), ("favicon", False))


class SpecsJsonError(Exception):
    """specs.json is missing, unparsable, or has no spec entry."""

    def __init__(self, reason: str, message: str):
        self.reason = reason
        super().__init__(message)


async def load_first_spec(provider) -> Dict[str, Any]:
    """
    Read specs.json and return its first spec object.

    Used by checks that only need the spec's settings and leave full
    validation to this module's check.

    Raises:
        SpecsJsonError: reason is "missing", "invalid_json" or "no_specs"
    """
    if not await provider.file_exists("specs.json"):
        raise SpecsJsonError("missing", "specs.json file not found")

    try:
        data = json.loads(await provider.read_file("specs.json"))
    except json.JSONDecodeError as e:
        raise SpecsJsonError("invalid_json", f"Failed to parse specs.json: {e}")

    specs = data.get("specs") if isinstance(data, dict) else None
    if not isinstance(specs, list) or not specs or not isinstance(specs[0], dict):
        raise SpecsJsonError("no_specs", 'specs.json must contain a "specs" array with at least one entry')
    return specs[0]


@dataclass
class ValidationMessages:
    """Messages collected while validating one spec."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    info: List[str] = field(default_factory=list)
    success: List[str] = field(default_factory=list)


def _type_name(value: Any) -> str:
    if isinstance(value, list):
        return "array"
    if value is None:
        return "null"
    return type(value).__name__


def validate_structure(data: Any) -> Optional[CheckResult]:
    """Return a failing result if the root layout is wrong, else None."""
    if not isinstance(data, dict):
        return create_result(
            CHECK_NAME,
            CheckStatus.FAIL,
            "specs.json must contain a JSON object at root level",
            {"structure_error": {"actual_type": _type_name(data)}},
        )

    keys = list(data)
    if len(keys) != 1:
        message = f"Root object should contain exactly one field, found {len(keys)}: [{', '.join(keys)}]"
        return create_result(CHECK_NAME, CheckStatus.FAIL, message, {"structure_error": {"found_keys": keys}})

    if keys[0] != "specs":
        return create_result(
            CHECK_NAME,
            CheckStatus.FAIL,
            f"Root object should contain field 'specs', found '{keys[0]}'",
            {"structure_error": {"found_key": keys[0]}},
        )

    specs = data["specs"]
    if not isinstance(specs, list):
        return create_result(
            CHECK_NAME,
            CheckStatus.FAIL,
            'Field "specs" should be an array',
            {"structure_error": {"actual_type": _type_name(specs)}},
        )

    if len(specs) != 1:
        return create_result(
            CHECK_NAME,
            CheckStatus.FAIL,
            f'Field "specs" should contain exactly one object, found {len(specs)}',
            {"structure_error": {"array_length": len(specs)}},
        )

    if not isinstance(specs[0], dict):
        return create_result(
            CHECK_NAME,
            CheckStatus.FAIL,
            'The item in "specs" array should be an object',
            {"structure_error": {"actual_type": _type_name(specs[0])}},
        )

    return None


def validate_fields(spec: Mapping[str, Any], messages: ValidationMessages) -> None:
    """Required, recommended and optional field presence."""
    for name in REQUIRED_FIELDS:
        if name not in spec:
            messages.errors.append(f'Required field "{name}" is missing')
        elif spec[name] is None or spec[name] == "":
            messages.errors.append(f'Required field "{name}" is empty or null')
        elif isinstance(spec[name], list) and not spec[name]:
            messages.errors.append(f'Required field "{name}" is an empty array')
        else:
            messages.success.append(f'Required field "{name}" is present and valid')

    for name in WARNING_FIELDS:
        if name not in spec:
            messages.warnings.append(f'Recommended field "{name}" is missing')
        elif spec[name] is None or spec[name] == "":
            messages.warnings.append(f'Recommended field "{name}" is empty or null')
        else:
            messages.success.append(f'Recommended field "{name}" is present and valid')

    for name in OPTIONAL_FIELDS:
        if name not in spec:
            messages.info.append(f'Optional field "{name}" is not set (this is acceptable)')
        else:
            messages.success.append(f'Optional field "{name}" is present')


def validate_field_types(spec: Mapping[str, Any], messages: ValidationMessages) -> None:
    markdown_paths = spec.get("markdown_paths")
    if isinstance(markdown_paths, list) and markdown_paths:
        if all(isinstance(item, str) for item in markdown_paths):
            messages.success.append('Field "markdown_paths" contains valid string array')
        else:
            messages.errors.append('Field "markdown_paths" should contain only strings')

    source = spec.get("source")
    if isinstance(source, dict) and source:
        missing = [name for name in SOURCE_FIELDS if not source.get(name)]
        for name in missing:
            messages.errors.append(f'Source field "{name}" is missing or empty')
        if not missing:
            messages.success.append("Source object structure is valid")

    external_specs = spec.get("external_specs")
    if external_specs:
        if isinstance(external_specs, list):
            for index, ext_spec in enumerate(external_specs):
                ext_spec = ext_spec if isinstance(ext_spec, dict) else {}
                for name in EXTERNAL_SPEC_FIELDS:
                    if not ext_spec.get(name):
                        messages.errors.append(f'External spec {index} missing "{name}"')
            messages.success.append(f"External specs array contains {len(external_specs)} entries")
        else:
            messages.errors.append('Field "external_specs" should be an array')

    if "katex" in spec and not isinstance(spec["katex"], bool):
        messages.errors.append('Field "katex" should be a boolean value')


async def validate_urls(spec: Mapping[str, Any], messages: ValidationMessages) -> None:
    prober = urls.get_prober()
    for name, required in URL_FIELDS:
        if not spec.get(name):
            continue
        target = messages.errors if required else messages.warnings
        try:
            accessibility = await prober.probe(spec[name], name)
        except Exception as e:
            target.append(f"Failed to check {name} URL accessibility: {e}")
            continue

        if accessibility.is_accessible:
            messages.success.append(f"{name} URL is accessible (HTTP {accessibility.status_code})")
        else:
            target.append(f"{name} URL is not accessible: {accessibility.message}")


async def validate_markdown_files(provider, spec: Mapping[str, Any], messages: ValidationMessages) -> None:
    markdown_paths = spec.get("markdown_paths")
    if not isinstance(markdown_paths, list):
        return

    spec_directory = spec.get("spec_directory")
    if not spec_directory or not isinstance(spec_directory, str):
        messages.errors.append("Cannot validate markdown files: spec_directory is not defined")
        return

    for markdown_file in markdown_paths:
        if not isinstance(markdown_file, str):
            messages.errors.append(f'Invalid markdown_paths entry: "{markdown_file}" is not a string')
            continue

        file_path = f"{spec_directory.rstrip('/')}/{markdown_file}"
        try:
            if await provider.file_exists(file_path):
                messages.success.append(f'Markdown file "{markdown_file}" exists in spec_directory')
            else:
                messages.errors.append(
                    f'Markdown file "{markdown_file}" not found in spec_directory "{spec_directory}"'
                )
        except Exception as e:
            messages.errors.append(f'Failed to check existence of markdown file "{markdown_file}": {e}')


async def run(provider, options: Optional[Mapping[str, Any]] = None) -> CheckResult:
    """
    Validate specs.json.

    Options:
        check_accessibility: Probe logo, logo_link and favicon URLs (default True)
    """
    options = options or {}
    try:
        if not await provider.file_exists("specs.json"):
            return create_result(
                CHECK_NAME,
                CheckStatus.FAIL,
                "specs.json not found in repository root",
                {
                    "suggestions": [
                        "Create a specs.json file in your repository root",
                        "Use the Spec-Up-T boilerplate as a template",
                        'Ensure the file is named exactly "specs.json"',
                    ]
                },
            )

        content = await provider.read_file("specs.json")
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            return create_result(
                CHECK_NAME,
                CheckStatus.FAIL,
                "specs.json contains invalid JSON",
                {"parse_error": str(e), "file_content": content[:500] + ("..." if len(content) > 500 else "")},
            )

        structure_failure = validate_structure(data)
        if structure_failure is not None:
            return structure_failure

        spec = data["specs"][0]
        messages = ValidationMessages()
        validate_fields(spec, messages)
        validate_field_types(spec, messages)
        if options.get("check_accessibility", True):
            await validate_urls(spec, messages)
        await validate_markdown_files(provider, spec, messages)

        if messages.errors:
            status = CheckStatus.FAIL
            message = f"specs.json has {len(messages.errors)} error(s)"
        elif messages.warnings:
            status = CheckStatus.WARN
            message = f"specs.json is valid but has {len(messages.warnings)} warning(s)"
        else:
            status = CheckStatus.PASS
            message = "specs.json is valid"

        details: Dict[str, Any] = {
            "errors": messages.errors,
            "warnings": messages.warnings,
            "info": messages.info,
            "success": messages.success,
            "total_issues": len(messages.errors) + len(messages.warnings),
        }
        return create_result(CHECK_NAME, status, message, details)

    except Exception as e:
        return create_error_result(CHECK_NAME, e)
