"""
Report Formatters

Plain text and JSON renderings of a health check report, plus a rich
table view for the terminal.
"""

import json
from datetime import datetime
from typing import List

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .engine.models import CheckStatus, HealthCheckReport

STATUS_ICONS = {
    CheckStatus.PASS: "✓",
    CheckStatus.FAIL: "✗",
    CheckStatus.WARN: "⚠",
    CheckStatus.SKIP: "○",
}

STATUS_STYLES = {
    CheckStatus.PASS: "[green]PASS[/green]",
    CheckStatus.FAIL: "[red]FAIL[/red]",
    CheckStatus.WARN: "[yellow]WARN[/yellow]",
    CheckStatus.SKIP: "[dim]SKIP[/dim]",
}


def overall_status(report: HealthCheckReport) -> str:
    if report.summary.has_errors or report.error:
        return "FAILED"
    if report.summary.has_warnings:
        return "PASSED WITH WARNINGS"
    return "PASSED"


def _format_generated(timestamp: str) -> str:
    try:
        return datetime.fromisoformat(timestamp.replace("Z", "+00:00")).strftime("%Y-%m-%d %H:%M:%S %Z").strip()
    except ValueError:
        return timestamp


def format_results_as_text(report: HealthCheckReport) -> str:
    """
    Format a report as human-readable text.

    Args:
        report: Report returned by the orchestrator

    Returns:
        Multi-line text with summary, overall status and one entry per result
    """
    summary = report.summary
    output: List[str] = [
        "Spec-Up-T Health Check Report",
        f"Generated: {_format_generated(report.timestamp)}",
        "",
    ]

    if report.provider.get("repo_path"):
        output.append(f"Repository: {report.provider['repo_path']}")
        output.append("")

    output.append("Summary")
    output.append(f"Total checks: {summary.total}")
    output.append(f"{STATUS_ICONS[CheckStatus.PASS]} Passed: {summary.passed}")
    output.append(f"{STATUS_ICONS[CheckStatus.FAIL]} Failed: {summary.failed}")
    if summary.warnings:
        output.append(f"{STATUS_ICONS[CheckStatus.WARN]} Warnings: {summary.warnings}")
    if summary.skipped:
        output.append(f"{STATUS_ICONS[CheckStatus.SKIP]} Skipped: {summary.skipped}")
    output.append(f"Score: {summary.score}%")
    if summary.execution_time_ms is not None:
        output.append(f"Execution time: {summary.execution_time_ms}ms")
    output.append("")

    output.append(f"Overall Status: {overall_status(report)}")
    if report.error:
        output.append(f"Error: {report.error.get('message')}")
    output.append("")

    if report.results:
        output.append("Detailed Results")
        output.append("")

    for index, result in enumerate(report.results, start=1):
        output.append(f"{index}. {STATUS_ICONS[result.status]} {result.check}")
        output.append(f"   {result.message}")

        details = result.details
        if details.get("missing_required"):
            output.append(f"   Missing fields: {', '.join(details['missing_required'])}")
        if details.get("total_files"):
            output.append(f"   Files found: {details['total_files']}")
        sample = details.get("package_sample")
        if sample and sample.get("name"):
            output.append(f"   Package: {sample['name']}@{sample.get('version', '?')}")
        output.append("")

    return "\n".join(output)


def format_results_as_json(report: HealthCheckReport, indent: int = 2) -> str:
    """Serialize a report to JSON; indent=0 gives compact output."""
    return json.dumps(report.to_dict(), indent=indent or None, ensure_ascii=False)


def render_report(console: Console, report: HealthCheckReport, verbose: bool = False) -> None:
    """Print a report as a rich table followed by a summary panel."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Check")
    table.add_column("Status")
    table.add_column("Details")

    for result in report.results:
        details = result.message
        if verbose:
            extra = (result.details.get("errors") or []) + (result.details.get("warnings") or [])
            if extra:
                details += "\n" + "\n".join(f"- {line}" for line in extra[:5])
        table.add_row(escape(result.check), STATUS_STYLES[result.status], escape(details))

    if report.results:
        console.print(table)

    summary = report.summary
    status = overall_status(report)
    color = "red" if status == "FAILED" else "yellow" if summary.has_warnings else "green"
    lines = [
        f"[bold]Overall Status:[/bold] [{color}]{status}[/{color}]",
        f"Checks: {summary.total}  Passed: {summary.passed}  Failed: {summary.failed}  "
        f"Warnings: {summary.warnings}  Skipped: {summary.skipped}",
        f"Score: {summary.score}%",
    ]
    if report.provider.get("repo_path"):
        lines.append(f"Repository: [cyan]{escape(report.provider['repo_path'])}[/cyan]")
    if report.error:
        lines.append(f"[red]Error: {escape(str(report.error.get('message')))}[/red]")

    console.print()
    console.print(Panel.fit("\n".join(lines), title="Spec-Up-T Health Check", border_style=color))
