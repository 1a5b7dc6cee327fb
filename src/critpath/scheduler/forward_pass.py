"""Forward pass: earliest start and finish by fixed-point relaxation."""

from collections.abc import Sequence
from datetime import datetime

from critpath.logger import get_logger
from critpath.models import Task, days_to_timedelta

from .core import ForwardPassResult

logger = get_logger()


class ForwardPass:
    """Computes earliest start (ES) and earliest finish (EF) for every task.

    Tasks are scanned repeatedly in input order instead of being sorted
    topologically, so the input does not need to be ordered. Each scan sets

        ES = max(EF of predecessors), or the project start if there are none
        ES = max(ES, forced_start) when a start-no-earlier-than date is set
        EF = ES + duration

    A predecessor that is unknown or not computed yet contributes the project
    start. Scanning stops once a scan leaves every ES unchanged, or when the
    iteration ceiling is reached (only possible for cyclic input), in which
    case the last scan's values are returned.
    """

    def __init__(self, tasks: Sequence[Task], project_start: datetime, max_iterations: int):
        """Initialize the forward pass.

        Args:
            tasks: Tasks to schedule, in the order they should be scanned
            project_start: Reference start instant of the project
            max_iterations: Ceiling on the number of full scans
        """
        self.tasks = tasks
        self.project_start = project_start
        self.max_iterations = max_iterations

    def run(self) -> ForwardPassResult:
        """Relax earliest dates until no start changes."""
        early_start: dict[str, datetime] = {}
        early_finish: dict[str, datetime] = {}

        changed = True
        iterations = 0
        while changed and iterations < self.max_iterations:
            changed = False
            iterations += 1

            for task in self.tasks:
                start = self._earliest_start(task, early_finish)
                if early_start.get(task.id) != start:
                    early_start[task.id] = start
                    early_finish[task.id] = start + days_to_timedelta(task.duration)
                    changed = True

            logger.debug("Forward pass scan %d: changed=%s", iterations, changed)

        return ForwardPassResult(
            early_start=early_start,
            early_finish=early_finish,
            iterations=iterations,
            converged=not changed,
        )

    def _earliest_start(self, task: Task, early_finish: dict[str, datetime]) -> datetime:
        start = self.project_start
        for pred_id in task.predecessors:
            pred_finish = early_finish.get(pred_id, self.project_start)
            start = max(start, pred_finish)

        if task.forced_start is not None and task.forced_start > start:
            start = task.forced_start
        return start
