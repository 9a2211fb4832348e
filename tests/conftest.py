"""Shared fixtures for the health check test suite."""
import json
from typing import Dict, List, Optional

import pytest

from specup_health.checks import gitignore, package_json, urls
from specup_health.engine import HealthCheckRegistry, create_result
from specup_health.providers import FileEntry, Provider, ProviderError


class StubProvider(Provider):
    """In-memory provider; records every call."""

    type = "stub"

    def __init__(self, files: Optional[Dict[str, str]] = None, directories=(), repo_path: str = "/stub/repo"):
        self.files = dict(files or {})
        self.directories = set(directories)
        for path in self.files:
            parts = path.split("/")[:-1]
            for i in range(1, len(parts) + 1):
                self.directories.add("/".join(parts[:i]))
        self.repo_path = repo_path
        self.calls: List[tuple] = []

    @staticmethod
    def _norm(path: str) -> str:
        path = path.strip("/")
        while path.startswith("./"):
            path = path[2:]
        return "" if path == "." else path.strip("/")

    async def read_file(self, path):
        self.calls.append(("read_file", path))
        if self._norm(path) not in self.files:
            raise ProviderError(f"File not found: {path}")
        return self.files[self._norm(path)]

    async def file_exists(self, path):
        self.calls.append(("file_exists", path))
        return self._norm(path) in self.files

    async def directory_exists(self, path):
        self.calls.append(("directory_exists", path))
        return self._norm(path) == "" or self._norm(path) in self.directories

    async def list_files(self, path=""):
        self.calls.append(("list_files", path))
        base = self._norm(path)
        if base and base not in self.directories:
            raise ProviderError(f"Error listing directory {path}: not found")
        prefix = f"{base}/" if base else ""
        names = {}
        for candidate in list(self.files) + list(self.directories):
            if not candidate.startswith(prefix) or candidate == base:
                continue
            rest = candidate[len(prefix):]
            name = rest.split("/")[0]
            is_dir = "/" in rest or candidate in self.directories
            names[name] = names.get(name, False) or is_dir
        return [
            FileEntry(name=name, path=prefix + name, is_directory=is_dir, is_file=not is_dir)
            for name, is_dir in sorted(names.items())
        ]


class FakeProber:
    """URL prober with canned answers; unknown URLs answer 200."""

    def __init__(self, statuses=None, texts=None):
        self.statuses = dict(statuses or {})
        self.texts = dict(texts or {})
        self.probed: List[str] = []
        self.fetched: List[str] = []

    async def probe(self, url, field_name):
        self.probed.append(url)
        status = self.statuses.get(url, 200)
        if status == 200:
            return urls.UrlAccessibility(True, status_code=200)
        return urls.UrlAccessibility(False, status_code=status, message=f"{field_name} returned HTTP {status}")

    async def fetch_text(self, url):
        self.fetched.append(url)
        if url not in self.texts:
            raise OSError(f"network disabled in tests: {url}")
        return self.texts[url]


@pytest.fixture(autouse=True)
def fake_prober(monkeypatch):
    """Keep every test off the network."""
    prober = FakeProber()
    monkeypatch.setattr(urls, "default_prober", prober)
    package_json.clear_reference_cache()
    gitignore.clear_entries_cache()
    yield prober
    package_json.clear_reference_cache()
    gitignore.clear_entries_cache()


@pytest.fixture
def registry():
    return HealthCheckRegistry()


@pytest.fixture
def make_check():
    """Factory for simple check coroutines returning a fixed status."""

    def _make(check_id: str, status: str = "pass", message: str = "ok"):
        async def check(provider, options=None):
            return create_result(check_id, status, message)
        return check

    return _make


def specs_json(**overrides) -> str:
    spec = {
        "title": "Test Spec",
        "description": "A test specification",
        "author": "Test Author",
        "spec_directory": "./spec",
        "spec_terms_directory": "terms-definitions",
        "output_path": "./docs",
        "markdown_paths": ["spec-head.md", "spec-body.md"],
        "logo": "https://example.org/logo.svg",
        "logo_link": "https://example.org",
        "favicon": "https://example.org/favicon.ico",
        "source": {"host": "github", "account": "acme", "repo": "spec", "branch": "main"},
    }
    spec.update(overrides)
    return json.dumps({"specs": [spec]})


@pytest.fixture
def healthy_repo():
    return StubProvider({
        "package.json": json.dumps({
            "name": "my-spec",
            "version": "1.0.0",
            "description": "Spec",
            "author": "Acme",
            "license": "MIT",
            "dependencies": {"spec-up-t": "^1.2.0"},
            "scripts": {"render": "node -e render"},
        }),
        ".gitignore": "\n".join(gitignore.FALLBACK_REQUIRED_ENTRIES),
        "specs.json": specs_json(),
        "spec/terms-and-definitions-intro.md": "# Terms",
        "spec/spec-head.md": "# Head",
        "spec/spec-body.md": "# Body",
        "spec/terms-definitions/term-a.md": "[[def: a]]",
        "README.md": "# Readme",
    })
