"""Command-line interface for critpath."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Annotated

import typer

from . import context
from .config import OutputConfig, UnifiedConfig, discover_config
from .exceptions import CritpathError
from .export import format_datetime, write_schedule_csv, write_schedule_yaml
from .loader import collect_graph_issues, load_project
from .logger import setup_logger
from .models import Project
from .scheduler import CriticalPathScheduler, SchedulingResult, critical_chains

app = typer.Typer(
    name="critpath",
    help="Critical path method scheduling for task dependency graphs",
    add_completion=False,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show changes, 2=show all checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: critpath_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for critpath commands."""
    setup_logger(verbose)
    context.set_config_path(config)


def _parse_date_option(date_str: str | None, option_name: str) -> date | None:
    """Parse a date string from a CLI option.

    Args:
        date_str: Date string in YYYY-MM-DD format or None
        option_name: Name of the option for error messages

    Returns:
        Parsed date object or None if date_str is None
    """
    if date_str is None:
        return None

    try:
        return date.fromisoformat(date_str)
    except ValueError:
        typer.echo(
            f"Error: Invalid {option_name} '{date_str}'. Use YYYY-MM-DD format.",
            err=True,
        )
        raise typer.Exit(1) from None


def _load(file: Path, start: str | None) -> tuple[Project, UnifiedConfig]:
    """Load the project and config, turning failures into a CLI error."""
    parsed_start = _parse_date_option(start, "start date")
    try:
        unified = discover_config(file) or UnifiedConfig()
        project = load_project(file, start=parsed_start)
    except (CritpathError, FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e
    return project, unified


def _run_schedule(project: Project, unified: UnifiedConfig) -> SchedulingResult:
    try:
        return CriticalPathScheduler(project.tasks, project.start, unified.scheduler).schedule()
    except CritpathError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e


def _display_schedule_results(
    project: Project, result: SchedulingResult, output: OutputConfig
) -> None:
    """Display schedule results to stdout."""
    title = f"Schedule: {project.name}" if project.name else "Schedule"
    typer.echo(title)
    typer.echo("=" * 80)
    typer.echo(f"Start:  {format_datetime(result.project_start, output.datetime_format)}")
    typer.echo(f"Finish: {format_datetime(result.project_finish, output.datetime_format)}")
    typer.echo(f"Duration: {result.duration_days:g} days")
    typer.echo("")

    for task in result.tasks:
        marker = "  [critical]" if task.is_critical else ""
        typer.echo(f"{task.display_name} ({task.id}){marker}")
        typer.echo(f"  Start:  {format_datetime(task.start_date, output.datetime_format)}")
        typer.echo(f"  End:    {format_datetime(task.end_date, output.datetime_format)}")
        slack = task.slack if task.slack is not None else 0.0
        typer.echo(f"  Slack:  {slack:.{output.slack_precision}f} days")
        typer.echo("")


def _display_warnings(result: SchedulingResult) -> None:
    if result.warnings:
        typer.echo("\nWarnings:", err=True)
        for warning in result.warnings:
            typer.echo(f"  - {warning}", err=True)


@app.command()
def schedule(
    file: Annotated[Path, typer.Argument(help="Path to the project YAML file")] = Path(
        "project.yaml"
    ),
    *,
    start: Annotated[
        str | None,
        typer.Option(
            "--start",
            "-s",
            help="Project start date (YYYY-MM-DD). Overrides project.start in the file",
        ),
    ] = None,
    output_yaml: Annotated[
        Path | None,
        typer.Option("--output-yaml", help="Write the computed schedule to a YAML file"),
    ] = None,
    output_csv: Annotated[
        Path | None,
        typer.Option("--output-csv", help="Write the computed schedule to a CSV file"),
    ] = None,
) -> None:
    """Compute earliest/latest dates, slack and the critical path."""
    project, unified = _load(file, start)
    result = _run_schedule(project, unified)

    if output_yaml:
        write_schedule_yaml(output_yaml, result, unified.output)
        typer.echo(f"Schedule written to {output_yaml}")
    if output_csv:
        write_schedule_csv(output_csv, result.tasks, unified.output)
        typer.echo(f"Schedule exported to {output_csv}")
    if not output_yaml and not output_csv:
        _display_schedule_results(project, result, unified.output)

    _display_warnings(result)


@app.command()
def critical(
    file: Annotated[Path, typer.Argument(help="Path to the project YAML file")] = Path(
        "project.yaml"
    ),
    *,
    start: Annotated[
        str | None,
        typer.Option("--start", "-s", help="Project start date (YYYY-MM-DD)"),
    ] = None,
) -> None:
    """Print the critical chains of the project."""
    project, unified = _load(file, start)
    result = _run_schedule(project, unified)

    chains = critical_chains(result.tasks)
    if not chains:
        typer.echo("No critical path found")
    for chain in chains:
        typer.echo(" -> ".join(chain))

    _display_warnings(result)


@app.command()
def check(
    file: Annotated[Path, typer.Argument(help="Path to the project YAML file")] = Path(
        "project.yaml"
    ),
) -> None:
    """Check the dependency graph for unknown references and cycles."""
    # Start is irrelevant for graph checks
    project, _ = _load(file, date.today().isoformat())  # noqa: DTZ011

    issues = collect_graph_issues(project)
    if issues:
        for issue in issues:
            typer.echo(f"  - {issue}", err=True)
        typer.echo(f"Found {len(issues)} issue(s)", err=True)
        raise typer.Exit(1)

    typer.echo(f"OK: {len(project.tasks)} tasks, no unknown references or cycles")


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()
