"""Core dataclasses for the scheduling system."""

from dataclasses import dataclass, field
from datetime import datetime

from critpath.models import ONE_DAY, Task


def _default_str_list() -> list[str]:
    return []


@dataclass
class ForwardPassResult:
    """Earliest dates computed by the forward pass."""

    early_start: dict[str, datetime]
    early_finish: dict[str, datetime]
    iterations: int
    converged: bool


@dataclass
class BackwardPassResult:
    """Latest dates computed by the backward pass.

    These are working values only; they are never written onto Task records.
    """

    late_start: dict[str, datetime]
    late_finish: dict[str, datetime]
    iterations: int
    converged: bool


@dataclass
class SlackInfo:
    """Slack classification for a single task."""

    slack_days: float
    is_critical: bool


@dataclass
class SchedulingResult:
    """Complete result of a scheduling run."""

    tasks: list[Task]  # Input order, computed fields populated
    project_start: datetime
    project_finish: datetime  # Makespan: latest early finish
    forward_iterations: int = 0
    backward_iterations: int = 0
    converged: bool = True
    warnings: list[str] = field(default_factory=_default_str_list)

    @property
    def critical_tasks(self) -> list[Task]:
        """Tasks on the critical path, in input order."""
        return [task for task in self.tasks if task.is_critical]

    @property
    def duration_days(self) -> float:
        """Total project duration in days."""
        return (self.project_finish - self.project_start) / ONE_DAY
