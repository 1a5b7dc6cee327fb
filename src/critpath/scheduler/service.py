"""High-level critical path scheduling service."""

import copy
import math
from collections.abc import Sequence
from datetime import date, datetime

from critpath.exceptions import (
    CircularDependencyError,
    MissingReferenceError,
    ValidationError,
)
from critpath.logger import get_logger
from critpath.models import Task, as_datetime

from .backward_pass import BackwardPass
from .classifier import classify
from .config import IssuePolicy, SchedulingConfig
from .core import SchedulingResult
from .forward_pass import ForwardPass
from .graph import build_successor_index, find_cycle, find_missing_references

logger = get_logger()


class CriticalPathScheduler:
    """Computes a CPM schedule for a list of tasks.

    This coordinates:
    - Graph preparation (successor index, optional cycle/reference checks)
    - ForwardPass (earliest start/finish)
    - BackwardPass (latest start/finish from the makespan)
    - classify (slack and critical flag)

    The input tasks are never mutated; the result holds deep copies with the
    computed fields populated, in input order.
    """

    def __init__(
        self,
        tasks: Sequence[Task],
        project_start: date | datetime,
        config: SchedulingConfig | None = None,
    ):
        """Initialize the scheduler.

        Args:
            tasks: Tasks to schedule
            project_start: Reference start instant; a date means midnight
            config: Optional scheduling configuration
        """
        self.tasks = tasks
        self.project_start = as_datetime(project_start)
        self.config = config or SchedulingConfig()

    def schedule(self) -> SchedulingResult:
        """Run all passes and return the scheduled tasks.

        Returns:
            SchedulingResult with scheduled task copies and run metadata

        Raises:
            MissingReferenceError: If on_missing_reference is "error" and a
                predecessor id is unknown
            CircularDependencyError: If on_cycle is "error" and the graph has a cycle
            ValidationError: If a duration is negative or not finite, or the
                computed dates leave the datetime range
        """
        if not self.tasks:
            return SchedulingResult(
                tasks=[],
                project_start=self.project_start,
                project_finish=self.project_start,
            )

        tasks = copy.deepcopy(list(self.tasks))
        for task in tasks:
            task.reset_schedule()
            if task.forced_start is not None:
                task.forced_start = as_datetime(task.forced_start)
            if not math.isfinite(task.duration) or task.duration < 0:
                raise ValidationError(
                    f"Task {task.id} has an invalid duration: {task.duration!r}"
                )

        warnings = self._check_graph(tasks)
        max_iterations = self.config.max_iterations(len(tasks))

        try:
            return self._run_passes(tasks, warnings, max_iterations)
        except OverflowError as e:
            raise ValidationError(
                f"Schedule does not fit in the supported date range: {e}"
            ) from e

    def _run_passes(
        self, tasks: list[Task], warnings: list[str], max_iterations: int
    ) -> SchedulingResult:
        forward = ForwardPass(tasks, self.project_start, max_iterations).run()
        if not forward.converged:
            warnings.append(
                f"Forward pass did not converge within {max_iterations} iterations; "
                "dates are best-effort"
            )

        project_finish = max(forward.early_finish.values(), default=self.project_start)
        logger.changes(
            "Forward pass: %d tasks, finish %s after %d scans",
            len(tasks),
            project_finish.isoformat(),
            forward.iterations,
        )

        successors = build_successor_index(tasks)
        backward = BackwardPass(tasks, successors, project_finish, max_iterations).run()
        if not backward.converged:
            warnings.append(
                f"Backward pass did not converge within {max_iterations} iterations; "
                "slack is best-effort"
            )
        logger.debug("Backward pass finished after %d scans", backward.iterations)

        slack = classify(
            forward.early_start, backward.late_start, self.config.critical_epsilon_days
        )

        for task in tasks:
            task.start_date = forward.early_start[task.id]
            task.end_date = forward.early_finish[task.id]
            info = slack[task.id]
            task.slack = info.slack_days
            task.is_critical = info.is_critical
            logger.checks(
                "%s: %s -> %s, slack %.3fd%s",
                task.id,
                task.start_date.isoformat(),
                task.end_date.isoformat(),
                task.slack,
                " (critical)" if task.is_critical else "",
            )

        for warning in warnings:
            logger.warning(warning)

        return SchedulingResult(
            tasks=tasks,
            project_start=self.project_start,
            project_finish=project_finish,
            forward_iterations=forward.iterations,
            backward_iterations=backward.iterations,
            converged=forward.converged and backward.converged,
            warnings=warnings,
        )

    def _check_graph(self, tasks: list[Task]) -> list[str]:
        """Apply the configured policies for unknown references and cycles."""
        warnings: list[str] = []

        if self.config.on_missing_reference != IssuePolicy.IGNORE:
            for task_id, unknown in find_missing_references(tasks).items():
                msg = f"Task {task_id} depends on unknown task(s): {', '.join(unknown)}"
                if self.config.on_missing_reference == IssuePolicy.ERROR:
                    raise MissingReferenceError(msg)
                warnings.append(msg)

        if self.config.on_cycle != IssuePolicy.IGNORE:
            cycle = find_cycle(tasks)
            if cycle:
                msg = f"Circular dependency detected: {' -> '.join(cycle)}"
                if self.config.on_cycle == IssuePolicy.ERROR:
                    raise CircularDependencyError(msg)
                warnings.append(msg)

        return warnings


def calculate_schedule(
    project_start: date | datetime,
    tasks: Sequence[Task],
    config: SchedulingConfig | None = None,
) -> list[Task]:
    """Compute the CPM schedule for ``tasks`` starting at ``project_start``.

    Returns new Task objects in input order with ``start_date``, ``end_date``,
    ``slack`` and ``is_critical`` set. The input tasks are left untouched.
    Malformed graphs (unknown predecessors, cycles) never raise under the
    default configuration; they yield a best-effort schedule.
    """
    return CriticalPathScheduler(tasks, project_start, config).schedule().tasks
