"""Dependency graph preparation and diagnostics."""

from collections.abc import Sequence

from critpath.models import Task


def build_successor_index(tasks: Sequence[Task]) -> dict[str, list[str]]:
    """Build the reverse-edge index used by the backward pass.

    Maps every task id to the ids of tasks that list it as a predecessor, in
    input order. Predecessor ids that are not in the graph are skipped.
    """
    successors: dict[str, list[str]] = {task.id: [] for task in tasks}
    for task in tasks:
        for pred_id in task.predecessors:
            pred_successors = successors.get(pred_id)
            if pred_successors is not None and task.id not in pred_successors:
                pred_successors.append(task.id)
    return successors


def find_missing_references(tasks: Sequence[Task]) -> dict[str, list[str]]:
    """Find predecessor ids that do not name a task in the graph.

    Returns:
        Mapping of task id to its unknown predecessor ids (only tasks with any)
    """
    all_ids = {task.id for task in tasks}
    missing: dict[str, list[str]] = {}
    for task in tasks:
        unknown = [pred_id for pred_id in task.predecessors if pred_id not in all_ids]
        if unknown:
            missing[task.id] = unknown
    return missing


def find_cycle(tasks: Sequence[Task]) -> list[str] | None:
    """Find one dependency cycle.

    Returns:
        The cycle as a path that starts and ends on the same id
        (e.g. ``["a", "b", "a"]``), or None if the graph is acyclic
    """
    task_map = {task.id: task for task in tasks}
    visited: set[str] = set()

    for task in tasks:
        if task.id in visited:
            continue
        cycle = _walk_predecessors(task_map, task.id, visited)
        if cycle:
            return cycle
    return None


def _walk_predecessors(
    task_map: dict[str, Task],
    root_id: str,
    visited: set[str],
) -> list[str] | None:
    """Depth-first walk along predecessor edges, returning the first cycle found.

    Iterative so that long chains do not hit the recursion limit.
    """
    path: list[str] = [root_id]
    on_path: set[str] = {root_id}
    pending = [iter(task_map[root_id].predecessors)]
    visited.add(root_id)

    while pending:
        pred_id = next(pending[-1], None)
        if pred_id is None:
            pending.pop()
            on_path.discard(path.pop())
            continue
        if pred_id not in task_map:
            continue
        if pred_id in on_path:
            return path[path.index(pred_id) :] + [pred_id]
        if pred_id in visited:
            continue

        visited.add(pred_id)
        path.append(pred_id)
        on_path.add(pred_id)
        pending.append(iter(task_map[pred_id].predecessors))

    return None


def critical_chains(tasks: Sequence[Task]) -> list[list[str]]:
    """Extract one critical chain per critical sink of a scheduled task list.

    A critical sink is a critical task that drives no critical successor. Its
    chain is traced backwards through driving predecessors, where a driving
    predecessor is critical and ends exactly when its successor starts. Where
    several predecessors drive the same task, the first listed one is followed,
    so the result never holds more chains than there are tasks.

    Returns:
        Each chain as a list of task ids from source to sink, in sink input order
    """
    task_map = {task.id: task for task in tasks}
    successors = build_successor_index(tasks)

    def drives(pred: Task, succ: Task) -> bool:
        return (
            pred.is_critical
            and succ.is_critical
            and pred.end_date is not None
            and pred.end_date == succ.start_date
        )

    chains: list[list[str]] = []
    for sink in tasks:
        if not sink.is_critical:
            continue
        if any(drives(sink, task_map[succ_id]) for succ_id in successors[sink.id]):
            continue

        chain = [sink.id]
        current = sink
        while True:
            pred = next(
                (
                    task_map[pred_id]
                    for pred_id in current.predecessors
                    if pred_id in task_map
                    and pred_id not in chain
                    and drives(task_map[pred_id], current)
                ),
                None,
            )
            if pred is None:
                break
            chain.append(pred.id)
            current = pred

        chain.reverse()
        chains.append(chain)
    return chains
