"""Pytest configuration and fixtures for critpath tests."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta

import pytest

from critpath import context
from critpath.logger import reset_logger
from critpath.models import Task

PROJECT_START = datetime(2025, 1, 6)


@pytest.fixture(autouse=True)
def clean_global_state() -> None:
    """Reset logger and CLI context before each test for isolation."""
    reset_logger()
    context.set_config_path(None)


def day(offset: float) -> datetime:
    """Instant ``offset`` days after PROJECT_START."""
    return PROJECT_START + timedelta(days=offset)


def task(task_id: str, duration: float, *predecessors: str, **kwargs: object) -> Task:
    """Create a Task with positional predecessors.

    Example:
        task("d", 1, "b", "c")
    """
    return Task(id=task_id, duration=duration, predecessors=list(predecessors), **kwargs)  # type: ignore[arg-type]


def by_id(tasks: Sequence[Task]) -> dict[str, Task]:
    """Index scheduled tasks by id."""
    return {t.id: t for t in tasks}


def assert_valid_schedule(tasks: Sequence[Task], project_start: datetime = PROJECT_START) -> None:
    """Assert the structural CPM properties that hold for any acyclic schedule."""
    scheduled = by_id(tasks)
    for t in tasks:
        assert t.start_date is not None and t.end_date is not None, f"{t.id} not scheduled"
        assert t.end_date - t.start_date == timedelta(days=t.duration), (
            f"{t.id} spans {t.end_date - t.start_date}, duration is {t.duration}d"
        )
        assert t.start_date >= project_start
        assert t.slack is not None and t.slack >= 0

        known_preds = [p for p in t.predecessors if p in scheduled]
        if not known_preds and t.forced_start is None:
            assert t.start_date == project_start
        for pred_id in known_preds:
            pred_end = scheduled[pred_id].end_date
            assert pred_end is not None
            assert t.start_date >= pred_end, (
                f"{t.id} starts {t.start_date} before predecessor {pred_id} ends {pred_end}"
            )
