"""Configuration classes for the scheduling system."""

from enum import Enum

from pydantic import BaseModel, Field

# Critical-slack threshold in days. Durations become timedelta values with
# microsecond resolution, so accumulated drift stays far below this.
DEFAULT_CRITICAL_EPSILON_DAYS = 1e-6


class IssuePolicy(str, Enum):
    """How a graph issue found before scheduling is handled."""

    IGNORE = "ignore"  # Do not look for it
    WARN = "warn"  # Log and record a warning, then schedule best-effort
    ERROR = "error"  # Raise before scheduling


class SchedulingConfig(BaseModel):
    """Configuration for the critical path scheduler."""

    # Slack below this many days marks a task critical
    critical_epsilon_days: float = Field(default=DEFAULT_CRITICAL_EPSILON_DAYS, gt=0.0)

    # Relaxation ceiling per pass = iteration_factor * task count
    iteration_factor: int = Field(default=2, ge=1)

    # Predecessor ids that are not in the graph
    on_missing_reference: IssuePolicy = IssuePolicy.IGNORE

    # Dependency cycles
    on_cycle: IssuePolicy = IssuePolicy.WARN

    def max_iterations(self, task_count: int) -> int:
        """Iteration ceiling for a graph of the given size."""
        return max(1, self.iteration_factor * task_count)
