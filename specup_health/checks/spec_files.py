"""
Specification File Discovery

Finds specification documents in the usual directories or in the
repository root.
"""

from typing import Any, Dict, List, Mapping, Optional

from ..engine.models import CheckResult, CheckStatus, create_error_result, create_result
from ..providers import FileEntry, ProviderError

CHECK_ID = "spec-files"
CHECK_NAME = "Specification Files Discovery"
CHECK_DESCRIPTION = "Discovers and validates specification files in the repository"

SPEC_DIRECTORIES = ("spec/", "specs/", "docs/", "documentation/", "doc/")
SPEC_EXTENSIONS = (".md", ".markdown", ".rst", ".txt")
PRIMARY_SPEC_NAMES = ("spec.md", "specification.md", "readme.md", "index.md", "main.md")


def filter_spec_files(entries: List[FileEntry]) -> List[FileEntry]:
    return [e for e in entries if e.is_file and e.name.lower().endswith(SPEC_EXTENSIONS)]


def primary_specs(entries: List[FileEntry]) -> List[FileEntry]:
    return [e for e in entries if e.name.lower() in PRIMARY_SPEC_NAMES]


async def discover(provider) -> Dict[str, Any]:
    """
    Locate specification files.

    The first directory in SPEC_DIRECTORIES holding spec files wins;
    otherwise root-level files are used. Unreadable directories are skipped.
    """
    spec_files: List[FileEntry] = []
    spec_directory: Optional[str] = None
    searched: List[str] = []

    for directory in SPEC_DIRECTORIES:
        searched.append(directory)
        try:
            if not await provider.directory_exists(directory):
                continue
            relevant = filter_spec_files(await provider.list_files(directory))
        except ProviderError:
            continue
        if relevant:
            spec_directory = directory
            spec_files = relevant
            break

    try:
        root_files = filter_spec_files(await provider.list_files(""))
    except ProviderError:
        root_files = []

    if spec_directory is None:
        spec_files = root_files

    return {
        "spec_files": spec_files,
        "spec_directory": spec_directory,
        "primary_specs": primary_specs(spec_files),
        "root_spec_files": root_files,
        "searched_paths": searched,
        "total_files": len(spec_files),
    }


async def run(provider, options: Optional[Mapping[str, Any]] = None) -> CheckResult:
    """Report where specification files live."""
    try:
        found = await discover(provider)
        total = found["total_files"]

        if total == 0:
            return create_result(
                CHECK_ID,
                CheckStatus.FAIL,
                "No specification files found in repository",
                {
                    "searched_paths": found["searched_paths"],
                    "searched_extensions": list(SPEC_EXTENSIONS),
                    "suggestions": [
                        "Create a spec/ or docs/ directory",
                        "Add a README.md file with specification content",
                        "Ensure specification files use supported extensions (.md, .markdown, .rst, .txt)",
                    ],
                },
            )

        message = f"Found {total} specification file{'' if total == 1 else 's'}"
        details: Dict[str, Any] = {
            "spec_files": [f.name for f in found["spec_files"]],
            "spec_directory": found["spec_directory"],
            "primary_specs": [f.name for f in found["primary_specs"]],
            "root_spec_files": [f.name for f in found["root_spec_files"]],
            "total_files": total,
            "has_organized_specs": found["spec_directory"] is not None,
            "has_primary_specs": bool(found["primary_specs"]),
            "searched_paths": found["searched_paths"],
        }

        if found["spec_directory"]:
            message += f" in organized {found['spec_directory']} directory"
        else:
            message += " in repository root"
            if total > 5:
                details["organization_suggestion"] = (
                    "Consider moving specification files to a dedicated directory like spec/ or docs/"
                )

        if not found["primary_specs"] and total > 1:
            details["primary_spec_suggestion"] = (
                "Consider adding a main specification file (spec.md, README.md, or index.md)"
            )

        return create_result(CHECK_ID, CheckStatus.PASS, message, details)

    except Exception as e:
        return create_error_result(
            CHECK_ID, e, {"context": "discovering specification files", "provider": provider.type}
        )
