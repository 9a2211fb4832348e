"""Tests for the command-line interface."""
import json

import pytest
from click.testing import CliRunner
from rich.console import Console

from specup_health import cli as cli_module
from specup_health.cli import cli


@pytest.fixture
def runner(monkeypatch):
    # Wide console so table cells are not wrapped mid-word
    monkeypatch.setattr(cli_module, "console", Console(width=200))
    return CliRunner()


@pytest.fixture
def spec_repo(tmp_path):
    (tmp_path / "README.md").write_text("# My spec", encoding="utf-8")
    (tmp_path / "spec").mkdir()
    (tmp_path / "spec" / "spec-body.md").write_text("# Body", encoding="utf-8")
    return tmp_path


def test_check_json_to_stdout(runner, spec_repo):
    result = runner.invoke(cli, ["check", str(spec_repo), "--checks", "spec-files", "--format", "json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert [r["check"] for r in data["results"]] == ["spec-files"]
    assert data["provider"] == {"type": "local", "repo_path": str(spec_repo)}


def test_check_failure_exit_code(runner, spec_repo):
    result = runner.invoke(cli, ["check", str(spec_repo), "--checks", "specs-json,spec-files"])
    assert result.exit_code == 1
    assert "specs.json not found in repository root" in result.output
    assert "Overall Status" in result.output


def test_check_warning_exit_code(runner, spec_repo):
    (spec_repo / ".gitignore").write_text("node_modules\n", encoding="utf-8")
    result = runner.invoke(cli, ["check", str(spec_repo), "--checks", "gitignore"])
    assert result.exit_code == 2


def test_check_writes_output_file(runner, spec_repo, tmp_path):
    out = tmp_path / "reports" / "report.txt"
    result = runner.invoke(cli, ["check", str(spec_repo), "--checks", "spec-files", "-o", str(out)])
    assert result.exit_code == 0
    assert "Report saved" in result.output
    assert "Overall Status: PASSED" in out.read_text(encoding="utf-8")


def test_config_file_in_repository(runner, spec_repo):
    (spec_repo / ".healthcheck.yaml").write_text(
        "format: json\ndisabled: [package-json, gitignore, specs-json, spec-directory-and-files, external-specs-urls]\n",
        encoding="utf-8",
    )
    result = runner.invoke(cli, ["check", str(spec_repo)])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert [r["check"] for r in data["results"]] == ["spec-files"]


def test_category_filter(runner, spec_repo):
    result = runner.invoke(cli, ["check", str(spec_repo), "--category", "content", "--format", "json"])
    data = json.loads(result.stdout)
    assert [r["check"] for r in data["results"]] == ["spec-files", "Spec Directory and Files"]


def test_invalid_config_exits_with_error(runner, spec_repo):
    config = spec_repo / "bad.yaml"
    config.write_text("timeout: -5\n", encoding="utf-8")
    result = runner.invoke(cli, ["check", str(spec_repo), "--config", str(config)])
    assert result.exit_code == 1
    assert "Invalid health check configuration" in result.output


def test_remote_target_rejected(runner):
    result = runner.invoke(cli, ["check", "https://github.com/acme/spec"])
    assert result.exit_code == 1
    assert "Remote providers not yet implemented" in result.output


def test_list_checks(runner):
    result = runner.invoke(cli, ["list-checks"])
    assert result.exit_code == 0
    for check_id in ("package-json", "gitignore", "specs-json", "external-specs-urls"):
        assert check_id in result.output


def test_example(runner):
    result = runner.invoke(cli, ["example"])
    assert result.exit_code == 0
    assert "spec-up-t-healthcheck check" in result.output


def test_blank_category_exits_with_error(runner, spec_repo):
    result = runner.invoke(cli, ["check", str(spec_repo), "--category", " "])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Invalid run options" in result.output
