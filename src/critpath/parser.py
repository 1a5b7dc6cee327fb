"""YAML parser for critpath project files."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ParseError, ValidationError
from .models import Project, Task, as_datetime
from .schemas import ProjectSchema, TaskSchema


class ProjectParser:
    """Parser for project YAML (or JSON) files.

    This parser only handles file parsing and task creation. For loading with
    config discovery and validation, use load_project() from critpath.loader.
    """

    def parse_file(
        self, file_path: Path | str, default_start: date | datetime | None = None
    ) -> Project:
        """Parse a YAML file into a Project."""
        path = Path(file_path)
        if not path.exists():
            raise ParseError(f"File not found: {file_path}")

        try:
            with path.open(encoding="utf-8") as f:
                data: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ParseError(f"Failed to parse YAML: {e}") from e

        if not isinstance(data, dict):
            raise ParseError("Project file must contain a dictionary at the root level")

        return self.parse_data(data, default_start)  # type: ignore[arg-type]

    def parse_data(
        self, data: dict[str, Any], default_start: date | datetime | None = None
    ) -> Project:
        """Parse already-loaded data into a Project.

        Args:
            data: Mapping with optional 'project' header and a 'tasks' list
            default_start: Start used when the header has none

        Raises:
            ValidationError: If the structure is invalid or the start is missing
        """
        try:
            schema = ProjectSchema(**data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid project structure: {e}") from e

        start = schema.project.start
        if start is None:
            if default_start is None:
                raise ValidationError(
                    "Project start is missing: set 'project.start' or pass a start date"
                )
            start = as_datetime(default_start)

        tasks = [self._to_task(task_data) for task_data in schema.tasks]
        _check_unique_ids(tasks)

        return Project(start=start, tasks=tasks, name=schema.project.name)

    def _to_task(self, task_data: TaskSchema) -> Task:
        meta = dict(task_data.meta)
        if task_data.model_extra:
            meta.update(task_data.model_extra)

        return Task(
            id=task_data.id,
            duration=task_data.duration,
            predecessors=list(dict.fromkeys(task_data.predecessors)),
            name=task_data.name,
            forced_start=task_data.forced_start,
            status=task_data.status,
            progress=task_data.progress,
            assigned_to=task_data.assigned_to,
            meta=meta,
        )


def _check_unique_ids(tasks: list[Task]) -> None:
    """Reject task lists that reuse an id."""
    seen: set[str] = set()
    for task in tasks:
        if task.id in seen:
            raise ValidationError(f"Duplicate task id: {task.id}")
        seen.add(task.id)
