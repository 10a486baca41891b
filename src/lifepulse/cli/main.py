"""
Command Line Interface for lifepulse.

A thin developer wrapper around the pipeline: it reads a JSON manifest of
already-parsed upload records, runs one analysis and prints the result.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from lifepulse import __version__
from lifepulse.config import AppConfig, ConfigError, load_config
from lifepulse.core.models import AnalysisResult
from lifepulse.errors import LifepulseError
from lifepulse.pipeline import PipelineOrchestrator
from lifepulse.utils.logging import configure_logging

logger = logging.getLogger(__name__)

console = Console()


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


def print_header(text: str) -> None:
    """Print a styled header."""
    console.print()
    console.print(Panel(text, style="bold blue", expand=False))
    console.print()


def print_success(text: str) -> None:
    console.print(f"[bold green]✓[/bold green] {text}")


def print_warning(text: str) -> None:
    console.print(f"[bold yellow]⚠[/bold yellow] {text}")


def print_error(text: str) -> None:
    console.print(f"[bold red]✗[/bold red] {text}")


def load_manifest(path: Path) -> list[dict[str, Any]]:
    """Read upload records from a JSON file.

    The file holds either a list of records or an object with a
    ``records`` list.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"{path} is not valid JSON: {e.msg}") from e

    if isinstance(data, dict):
        data = data.get("records")
    if not isinstance(data, list):
        raise click.BadParameter(f"{path} must contain a list of records")
    return data


def print_analysis_summary(result: AnalysisResult) -> None:
    """Print the main figures of an analysis result."""
    summary = result.data_summary
    time_patterns = result.behavior_patterns.time_patterns
    content = result.behavior_patterns.content_patterns
    emotional = result.emotional_psychology

    table = Table(title="Analysis Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Files", str(summary.total_files))
    table.add_row("Valid points", str(summary.valid_points))
    table.add_row("Skipped records", str(summary.skipped_records))
    table.add_row("Data types", ", ".join(f"{k}={v}" for k, v in sorted(summary.data_types.items())) or "-")
    table.add_row("Most active hours", ", ".join(str(h) for h in time_patterns.most_active_hours) or "-")
    sleep = time_patterns.sleep_estimate
    table.add_row("Sleep estimate", f"{sleep.start}:00-{sleep.end}:00 ({sleep.duration_hours}h, {sleep.quality.value})")
    table.add_row("Average emotion", f"{content.average_emotional_score:+.3f}")
    table.add_row("Emotional stability", f"{emotional.emotional_stability:.3f}")
    table.add_row("Stress periods", str(len(emotional.stress_periods)))
    table.add_row("Recovery time", f"{emotional.recovery_time_hours:.1f}h")
    table.add_row("Processing time", f"{result.processing_time_ms:.1f}ms")
    console.print(table)

    recs = result.recommendations
    tips = [
        *recs.immediate.optimal_work_hours,
        *recs.immediate.wellness_tips,
        *recs.immediate.content_suggestions,
        *recs.immediate.social_activities,
        *recs.longterm.personal_growth,
        *recs.longterm.relationship_improvement,
    ]
    if tips:
        console.print("\n[bold]Recommendations:[/bold]")
        for tip in tips:
            console.print(f"  • {tip}")


# =============================================================================
# MAIN CLI GROUP
# =============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="lifepulse")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug mode")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Custom config file")
@click.pass_context
def lifepulse(ctx: click.Context, verbose: bool, debug: bool, config_path: Path | None) -> None:
    """
    lifepulse - analyze personal activity records.

    Reads already-parsed upload records and reports activity patterns,
    emotional trends and recommendations.
    """
    try:
        app_config = load_config(config_path)
    except ConfigError as e:
        print_error(str(e))
        sys.exit(1)

    # Flags win over the configured level
    if debug:
        override = "DEBUG"
    elif verbose:
        override = "INFO"
    else:
        override = None
    configure_logging(app_config, level_override=override)

    ctx.ensure_object(dict)
    ctx.obj["config"] = app_config


# =============================================================================
# ANALYZE COMMAND
# =============================================================================


@lifepulse.command()
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--kind", default=None, help="Analysis kind (defaults to the configured one)")
@click.option("--json", "output_json", is_flag=True, help="Output the full result as JSON")
@click.option("--report", "show_report", is_flag=True, help="Print the performance report")
@click.pass_context
def analyze(ctx: click.Context, manifest: Path, kind: str | None, output_json: bool, show_report: bool) -> None:
    """
    Analyze the upload records listed in MANIFEST (a JSON file).

    Example:
        lifepulse analyze uploads.json --json
    """
    app_config: AppConfig = ctx.obj["config"]
    records = load_manifest(manifest)

    orchestrator = PipelineOrchestrator(config=app_config)
    try:
        result = orchestrator.run_analysis(records, analysis_kind=kind)
    except LifepulseError as e:
        print_error(f"Analysis failed: {e}")
        sys.exit(1)

    if output_json:
        click.echo(result.model_dump_json(indent=2))
        return

    print_header(f"Analyzed {manifest.name}")
    print_analysis_summary(result)
    if result.data_summary.skipped_records:
        print_warning(f"{result.data_summary.skipped_records} records were skipped")
    print_success("Analysis complete")

    if show_report and orchestrator.last_metrics is not None:
        console.print(f"\nPerceived performance: {orchestrator.last_metrics.perceived_performance.value}")
        for step in orchestrator.last_metrics.per_step:
            console.print(f"  {step.name}: {step.duration_ms:.2f}ms")


# =============================================================================
# CONFIG COMMAND
# =============================================================================


@lifepulse.command("config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Display the effective configuration."""
    app_config: AppConfig = ctx.obj["config"]
    print_header("Current Configuration")

    table = Table(title="Settings")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")

    for section in ("pipeline", "cache", "logging"):
        for key, value in getattr(app_config, section).model_dump().items():
            table.add_row(f"{section}.{key}", str(value))
    table.add_row("debug", str(app_config.debug))
    console.print(table)


@lifepulse.command()
def version() -> None:
    """Show version information."""
    console.print(f"lifepulse [bold]{__version__}[/bold]")
    console.print(f"Python: {sys.version.split()[0]}")


def main() -> None:
    """Entry point for the console script."""
    lifepulse()


if __name__ == "__main__":
    main()
