"""Pydantic schemas for project file validation."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import as_datetime, parse_duration


def _coerce_datetime(v: Any) -> datetime | None:
    """Accept dates, datetimes and ISO strings; dates mean midnight."""
    if v is None or v == "":
        return None
    if isinstance(v, (date, datetime)):
        return as_datetime(v)
    if isinstance(v, str):
        return as_datetime(datetime.fromisoformat(v.strip()))
    raise ValueError(f"Expected a date or datetime, got {v!r}")


class TaskSchema(BaseModel):
    """Schema for a single task entry.

    Keys that are not part of the schema are kept and end up in the task's meta.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""
    duration: float = 0.0
    predecessors: list[str] = Field(default_factory=list)
    forced_start: datetime | None = None
    status: str | None = None
    progress: float = 0.0
    assigned_to: str | None = None
    meta: dict[str, Any] = Field(default_factory=dict)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id_to_string(cls, v: Any) -> str:
        """Allow numeric ids in YAML."""
        if v is None or v == "":
            raise ValueError("Task id must not be empty")
        return str(v)

    @field_validator("duration", mode="before")
    @classmethod
    def parse_duration_value(cls, v: Any) -> float:
        """Parse numbers or strings like '3d', '2w'."""
        if v is None:
            return 0.0
        return parse_duration(v)

    @field_validator("predecessors", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str]:
        """Ensure value is a list of ids."""
        if v is None:
            return []
        if isinstance(v, list):
            return [str(item) for item in v]  # type: ignore[misc]
        return [str(v)]

    @field_validator("forced_start", mode="before")
    @classmethod
    def parse_forced_start(cls, v: Any) -> datetime | None:
        """Convert dates and ISO strings to datetimes."""
        return _coerce_datetime(v)


class ProjectMetadataSchema(BaseModel):
    """Schema for the project header."""

    name: str = ""
    start: datetime | None = None

    @field_validator("start", mode="before")
    @classmethod
    def parse_start(cls, v: Any) -> datetime | None:
        """Convert dates and ISO strings to datetimes."""
        return _coerce_datetime(v)


class ProjectSchema(BaseModel):
    """Schema for the entire project file."""

    project: ProjectMetadataSchema = Field(default_factory=ProjectMetadataSchema)
    tasks: list[TaskSchema] = Field(default_factory=list)

    @field_validator("tasks", mode="before")
    @classmethod
    def ensure_task_list(cls, v: Any) -> Any:
        """Treat a missing tasks section as empty."""
        if v is None:
            return []
        return v
