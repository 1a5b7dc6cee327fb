"""Backward pass: latest start and finish by fixed-point relaxation."""

from collections.abc import Sequence
from datetime import datetime

from critpath.logger import get_logger
from critpath.models import Task, days_to_timedelta

from .core import BackwardPassResult

logger = get_logger()


class BackwardPass:
    """Computes latest start (LS) and latest finish (LF) for every task.

    Mirrors the forward pass, walking successor edges instead of predecessor
    edges. Every task starts at the project finish (the makespan) and is
    relaxed downwards:

        LF = min(LS of successors), or the project finish if there are none
        LS = LF - duration

    The late dates are kept in the result's own mappings and never attached
    to the Task records.
    """

    def __init__(
        self,
        tasks: Sequence[Task],
        successors: dict[str, list[str]],
        project_finish: datetime,
        max_iterations: int,
    ):
        """Initialize the backward pass.

        Args:
            tasks: Tasks to schedule, in the order they should be scanned
            successors: Successor index from build_successor_index()
            project_finish: Makespan, the latest early finish of all tasks
            max_iterations: Ceiling on the number of full scans
        """
        self.tasks = tasks
        self.successors = successors
        self.project_finish = project_finish
        self.max_iterations = max_iterations

    def run(self) -> BackwardPassResult:
        """Relax latest dates until no finish changes."""
        late_finish: dict[str, datetime] = {}
        late_start: dict[str, datetime] = {}
        for task in self.tasks:
            late_finish[task.id] = self.project_finish
            late_start[task.id] = self.project_finish - days_to_timedelta(task.duration)

        changed = True
        iterations = 0
        while changed and iterations < self.max_iterations:
            changed = False
            iterations += 1

            for task in self.tasks:
                finish = self._latest_finish(task, late_start)
                if late_finish[task.id] != finish:
                    late_finish[task.id] = finish
                    late_start[task.id] = finish - days_to_timedelta(task.duration)
                    changed = True

            logger.debug("Backward pass scan %d: changed=%s", iterations, changed)

        return BackwardPassResult(
            late_start=late_start,
            late_finish=late_finish,
            iterations=iterations,
            converged=not changed,
        )

    def _latest_finish(self, task: Task, late_start: dict[str, datetime]) -> datetime:
        succ_ids = self.successors.get(task.id, [])
        if not succ_ids:
            return self.project_finish
        return min(late_start.get(succ_id, self.project_finish) for succ_id in succ_ids)
