"""
Command-line interface for the Spec-Up-T health checker.

Runs the health checks against a repository and prints or saves the
report.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .config import ConfigError, ConfigLoader, OutputFormat
from .engine import HealthCheckOrchestrator, HealthCheckRegistry, HealthCheckReport
from .formatters import format_results_as_json, format_results_as_text, render_report
from .providers import ProviderError, create_provider

console = Console()
logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERRORS = 1
EXIT_WARNINGS = 2


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _exit_code(report: HealthCheckReport) -> int:
    if report.summary.has_errors or report.error:
        return EXIT_ERRORS
    if report.summary.has_warnings:
        return EXIT_WARNINGS
    return EXIT_OK


def _split_ids(value: Optional[str]) -> Optional[list]:
    if value is None:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


# ============================================================
# Main CLI Group
# ============================================================

@click.group()
@click.version_option(version=__version__, prog_name="spec-up-t-healthcheck")
@click.pass_context
def cli(ctx):
    """
    Spec-Up-T Health Check

    Validate the configuration and content of spec-up-t
    specification repositories.
    """
    ctx.ensure_object(dict)


# ============================================================
# CHECK Command
# ============================================================

@cli.command()
@click.argument("target")
@click.option("--checks", "-c", type=str, default=None, help="Comma-separated check ids (e.g. package-json,spec-files)")
@click.option("--category", multiple=True, help="Run only checks in this category (repeatable)")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice([f.value for f in OutputFormat]),
    default=None,
    help="Output format (default: text)",
)
@click.option("--output", "-o", type=click.Path(), default=None, help="Write the report to a file")
@click.option("--parallel", is_flag=True, help="Run checks concurrently")
@click.option("--timeout", type=click.IntRange(min=1), default=None, help="Per-check timeout in milliseconds")
@click.option("--fail-fast", is_flag=True, help="Stop after the first failing check")
@click.option("--config", "config_path", type=click.Path(exists=True), default=None, help="Configuration file")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging and result details")
def check(
    target: str,
    checks: Optional[str],
    category: Tuple[str, ...],
    output_format: Optional[str],
    output: Optional[str],
    parallel: bool,
    timeout: Optional[int],
    fail_fast: bool,
    config_path: Optional[str],
    verbose: bool,
):
    """
    Run health checks on a repository.

    Exits with 0 when all checks pass, 1 when a check fails or the
    command errors, and 2 when checks pass with warnings.
    """
    _configure_logging(verbose)

    try:
        provider = create_provider(target)

        if config_path is None and Path(target).is_dir():
            config_path = target
        config = ConfigLoader(config_path).load().config

        registry = HealthCheckRegistry()
        registry.auto_discover()
        for check_id in config.disabled:
            if not registry.set_enabled(check_id, False):
                logger.warning("Cannot disable unknown health check: %s", check_id)

        run_options = config.run_options(
            checks=_split_ids(checks),
            categories=list(category) or None,
            parallel=True if parallel else None,
            timeout=timeout,
            continue_on_error=False if fail_fast else None,
        )
    except (ProviderError, ConfigError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(EXIT_ERRORS)

    orchestrator = HealthCheckOrchestrator(registry)
    report = asyncio.run(orchestrator.run_health_checks(provider, run_options))

    fmt = OutputFormat(output_format) if output_format else config.format
    if fmt == OutputFormat.JSON:
        rendered = format_results_as_json(report)
    else:
        rendered = format_results_as_text(report)

    if output:
        output_path = Path(output)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(rendered, encoding="utf-8")
        except OSError as e:
            console.print(f"[red]Error writing report to {escape(output)}: {escape(str(e))}[/red]")
            sys.exit(EXIT_ERRORS)
        console.print(f"[green]Report saved to {escape(str(output_path))}[/green]")
    elif fmt == OutputFormat.JSON:
        click.echo(rendered)
    else:
        render_report(console, report, verbose)

    sys.exit(_exit_code(report))


# ============================================================
# LIST-CHECKS Command
# ============================================================

@cli.command("list-checks")
def list_checks():
    """List the available health checks."""
    registry = HealthCheckRegistry()
    registry.auto_discover()

    table = Table(title="Available Health Checks")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Category", style="magenta")
    table.add_column("Priority", justify="right")
    table.add_column("Enabled")
    table.add_column("Depends On", style="dim")

    for info in HealthCheckOrchestrator(registry).get_available_checks():
        table.add_row(
            info["id"],
            info["name"],
            info["category"],
            str(info["priority"]),
            "[green]yes[/green]" if info["enabled"] else "[red]no[/red]",
            ", ".join(info["dependencies"]) or "-",
        )

    console.print(table)


# ============================================================
# EXAMPLE Command
# ============================================================

@cli.command()
def example():
    """Show usage examples."""
    console.print(Panel.fit(
        "[bold]Spec-Up-T Health Check Examples[/bold]",
        border_style="blue",
    ))

    console.print("\n[bold]Basic usage:[/bold]")
    console.print("  spec-up-t-healthcheck check ./my-spec-repo")

    console.print("\n[bold]Run specific checks:[/bold]")
    console.print("  spec-up-t-healthcheck check ./my-spec-repo --checks package-json,specs-json")
    console.print("  spec-up-t-healthcheck check ./my-spec-repo --category configuration")

    console.print("\n[bold]JSON report to a file:[/bold]")
    console.print("  spec-up-t-healthcheck check ./my-spec-repo --format json --output report.json")

    console.print("\n[bold]Faster runs:[/bold]")
    console.print("  spec-up-t-healthcheck check ./my-spec-repo --parallel --timeout 15000")

    console.print("\n[bold]Configuration file (.healthcheck.yaml):[/bold]")
    console.print("  [dim]disabled: \\[external-specs-urls][/dim]")
    console.print("  [dim]timeout: 20000[/dim]")
    console.print("  [dim]check_options:[/dim]")
    console.print("  [dim]  specs-json: {check_accessibility: false}[/dim]")

    console.print("\n[bold]Exit codes:[/bold]")
    console.print("  0 all checks passed, 1 failures or errors, 2 warnings only")


# ============================================================
# Entry Point
# ============================================================

def main():
    cli(obj={})


if __name__ == "__main__":
    main()
