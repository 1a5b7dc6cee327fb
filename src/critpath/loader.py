"""Project loading and graph validation."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

from .exceptions import CircularDependencyError, MissingReferenceError
from .models import Project, as_datetime
from .parser import ProjectParser
from .scheduler import find_cycle, find_missing_references


def load_project(
    path: Path | str,
    *,
    start: date | datetime | None = None,
) -> Project:
    """Load a project file.

    Args:
        path: Path to the project YAML file
        start: Reference start; overrides the file's 'project.start' when given

    Returns:
        Parsed Project
    """
    project = ProjectParser().parse_file(path, default_start=start)
    if start is not None:
        project.start = as_datetime(start)
    return project


def validate_project(project: Project) -> None:
    """Strictly validate the dependency graph of a project.

    Scheduling itself tolerates both problems; this is for callers that need
    a guaranteed well-formed graph.

    Raises:
        MissingReferenceError: If a task depends on an unknown task
        CircularDependencyError: If the dependency graph has a cycle
    """
    missing = find_missing_references(project.tasks)
    if missing:
        task_id, unknown = next(iter(missing.items()))
        raise MissingReferenceError(f"Task {task_id} depends on unknown task: {unknown[0]}")

    cycle = find_cycle(project.tasks)
    if cycle:
        raise CircularDependencyError(f"Circular dependency detected: {' -> '.join(cycle)}")


def collect_graph_issues(project: Project) -> list[str]:
    """Describe every unknown reference and the first cycle found, if any."""
    issues = [
        f"Task {task_id} depends on unknown task(s): {', '.join(unknown)}"
        for task_id, unknown in find_missing_references(project.tasks).items()
    ]
    cycle = find_cycle(project.tasks)
    if cycle:
        issues.append(f"Circular dependency detected: {' -> '.join(cycle)}")
    return issues
