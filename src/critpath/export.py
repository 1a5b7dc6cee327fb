"""Export computed schedules to YAML and CSV.

Only the computed schedule is written here; project files keep the input
(durations, predecessors) and are never annotated with derived dates.
"""

from __future__ import annotations

import csv
from collections.abc import Sequence
from datetime import datetime, time
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from .config import OutputConfig

if TYPE_CHECKING:
    from .models import Task
    from .scheduler import SchedulingResult

SCHEDULE_FILE_VERSION = 1

CSV_COLUMNS = ["task_id", "task_name", "duration", "start", "end", "slack", "critical"]


def format_datetime(value: datetime | None, datetime_format: str = "date") -> str:
    """Format a computed instant.

    With the "date" format, instants at midnight are written as YYYY-MM-DD;
    anything with a time of day keeps its full ISO form so no precision is lost.
    """
    if value is None:
        return ""
    if datetime_format == "date" and value.time() == time.min and value.tzinfo is None:
        return value.date().isoformat()
    return value.isoformat()


def _task_row(task: Task, output: OutputConfig) -> dict[str, Any]:
    return {
        "name": task.display_name,
        "duration": task.duration,
        "predecessors": list(task.predecessors),
        "start": format_datetime(task.start_date, output.datetime_format),
        "end": format_datetime(task.end_date, output.datetime_format),
        "slack": round(task.slack, output.slack_precision) if task.slack is not None else None,
        "critical": task.is_critical,
    }


def schedule_to_dict(
    result: SchedulingResult, output: OutputConfig | None = None
) -> dict[str, Any]:
    """Build the YAML structure for a scheduling result."""
    output = output or OutputConfig()
    return {
        "version": SCHEDULE_FILE_VERSION,
        "project": {
            "start": format_datetime(result.project_start, output.datetime_format),
            "finish": format_datetime(result.project_finish, output.datetime_format),
            "duration_days": round(result.duration_days, output.slack_precision),
            "converged": result.converged,
        },
        "tasks": {task.id: _task_row(task, output) for task in result.tasks},
        "warnings": list(result.warnings),
    }


def write_schedule_yaml(
    path: Path, result: SchedulingResult, output: OutputConfig | None = None
) -> None:
    """Write a scheduling result to a YAML file."""
    data = schedule_to_dict(result, output)
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)


def write_schedule_csv(
    path: Path, tasks: Sequence[Task], output: OutputConfig | None = None
) -> None:
    """Write scheduled tasks to CSV, one row per task in input order."""
    output = output or OutputConfig()
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_COLUMNS)
        for task in tasks:
            row = _task_row(task, output)
            writer.writerow(
                [
                    task.id,
                    row["name"],
                    row["duration"],
                    row["start"],
                    row["end"],
                    "" if row["slack"] is None else row["slack"],
                    "yes" if row["critical"] else "no",
                ]
            )
