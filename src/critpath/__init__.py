"""critpath - critical path method scheduling for task dependency graphs."""

from .exceptions import (
    CircularDependencyError,
    CritpathError,
    MissingReferenceError,
    ParseError,
    ValidationError,
)
from .models import Project, Task, parse_duration
from .scheduler import (
    CriticalPathScheduler,
    IssuePolicy,
    SchedulingConfig,
    SchedulingResult,
    calculate_schedule,
)

__version__ = "0.1.0"

__all__ = [
    "Task",
    "Project",
    "parse_duration",
    "calculate_schedule",
    "CriticalPathScheduler",
    "SchedulingConfig",
    "SchedulingResult",
    "IssuePolicy",
    "CritpathError",
    "ValidationError",
    "CircularDependencyError",
    "MissingReferenceError",
    "ParseError",
]
