"""Slack computation and critical path classification."""

from datetime import datetime

from critpath.models import ONE_DAY

from .config import DEFAULT_CRITICAL_EPSILON_DAYS
from .core import SlackInfo


def classify(
    early_start: dict[str, datetime],
    late_start: dict[str, datetime],
    epsilon_days: float = DEFAULT_CRITICAL_EPSILON_DAYS,
) -> dict[str, SlackInfo]:
    """Compute slack and the critical flag for every task.

    Slack is LS - ES in (fractional) days. A task is critical when its slack is
    below ``epsilon_days``; negative slack, which only non-converged input can
    produce, is therefore critical as well.

    Args:
        early_start: Earliest start per task id from the forward pass
        late_start: Latest start per task id from the backward pass
        epsilon_days: Threshold below which slack counts as zero

    Returns:
        SlackInfo per task id present in both mappings
    """
    result: dict[str, SlackInfo] = {}
    for task_id, es in early_start.items():
        ls = late_start.get(task_id)
        if ls is None:
            continue
        slack_days = (ls - es) / ONE_DAY
        result[task_id] = SlackInfo(slack_days=slack_days, is_critical=slack_days < epsilon_days)
    return result
