"""Data models for critpath."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any

# Duration conversion constants
HOURS_PER_DAY = 24
DAYS_PER_WEEK = 7
DAYS_PER_MONTH = 30

ONE_DAY = timedelta(days=1)


def _default_str_list() -> list[str]:
    return []


def _default_dict() -> dict[str, Any]:
    return {}


def parse_duration(value: str | float) -> float:
    """Parse a duration into calendar days.

    Supported formats:
    - 5 or 2.5 - number of days
    - "5d" - 5 calendar days
    - "2w" - 14 calendar days
    - "1.5m" - 45 calendar days
    - "12h" - half a day

    Raises:
        ValueError: If the value cannot be parsed or is negative
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        days = float(value)
    else:
        text = value.strip().lower()
        match = re.match(r"^([\d.]+)\s*([hdwm]?)$", text)
        if not match:
            raise ValueError(f"Invalid duration: {value!r}")
        number, unit = match.groups()
        try:
            num = float(number)
        except ValueError as e:
            raise ValueError(f"Invalid duration: {value!r}") from e

        if unit == "h":
            days = num / HOURS_PER_DAY
        elif unit == "w":
            days = num * DAYS_PER_WEEK
        elif unit == "m":
            days = num * DAYS_PER_MONTH
        else:
            days = num

    if not math.isfinite(days):
        raise ValueError(f"Duration must be a finite number: {value!r}")
    if days < 0:
        raise ValueError(f"Duration must not be negative: {value!r}")
    return days


def as_datetime(value: date | datetime) -> datetime:
    """Normalize an instant to a naive datetime.

    A date means midnight of that day. Timezone-aware datetimes are converted
    to UTC and made naive, so all instants in one schedule stay comparable.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    return datetime.combine(value, datetime.min.time())


def days_to_timedelta(days: float) -> timedelta:
    """Convert a day count into an exact timedelta."""
    return timedelta(days=days)


@dataclass
class Task:
    """A unit of schedulable work.

    ``start_date``, ``end_date``, ``slack`` and ``is_critical`` are derived by the
    scheduler and overwritten on every run.
    """

    id: str
    duration: float = 0.0  # Calendar days; zero is a milestone
    predecessors: list[str] = field(default_factory=_default_str_list)  # Finish-to-start
    name: str = ""
    forced_start: datetime | None = None  # Start no earlier than
    status: str | None = None
    progress: float = 0.0  # 0-100
    assigned_to: str | None = None
    meta: dict[str, Any] = field(default_factory=_default_dict)

    # Computed fields
    start_date: datetime | None = None
    end_date: datetime | None = None
    slack: float | None = None  # Days
    is_critical: bool = False

    @property
    def display_name(self) -> str:
        """Name for reports, falling back to the id."""
        return self.name or self.id

    def reset_schedule(self) -> None:
        """Clear all computed fields."""
        self.start_date = None
        self.end_date = None
        self.slack = None
        self.is_critical = False


@dataclass
class Project:
    """A project: a reference start instant and its tasks."""

    start: datetime
    tasks: list[Task] = field(default_factory=list[Task])
    name: str = ""

    def get_task_by_id(self, task_id: str) -> Task | None:
        """Get a task by its ID."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def get_all_ids(self) -> set[str]:
        """Get all task IDs in the project."""
        return {task.id for task in self.tasks}
