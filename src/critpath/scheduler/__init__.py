"""Scheduler package - critical path method scheduling.

The pipeline runs once per call, strictly forward:
- Graph preparation: successor index, optional cycle and reference checks
- ForwardPass: earliest start/finish by fixed-point relaxation
- BackwardPass: latest start/finish from the makespan
- classify: slack and critical path membership

Main entry points:
- calculate_schedule: pure function returning scheduled task copies
- CriticalPathScheduler: same computation with run metadata and warnings
"""

from .backward_pass import BackwardPass
from .classifier import classify
from .config import DEFAULT_CRITICAL_EPSILON_DAYS, IssuePolicy, SchedulingConfig
from .core import BackwardPassResult, ForwardPassResult, SchedulingResult, SlackInfo
from .forward_pass import ForwardPass
from .graph import build_successor_index, critical_chains, find_cycle, find_missing_references
from .service import CriticalPathScheduler, calculate_schedule

__all__ = [
    # Core dataclasses
    "SchedulingResult",
    "ForwardPassResult",
    "BackwardPassResult",
    "SlackInfo",
    # Configuration
    "SchedulingConfig",
    "IssuePolicy",
    "DEFAULT_CRITICAL_EPSILON_DAYS",
    # Graph preparation
    "build_successor_index",
    "find_missing_references",
    "find_cycle",
    "critical_chains",
    # Passes
    "ForwardPass",
    "BackwardPass",
    "classify",
    # High-level service
    "CriticalPathScheduler",
    "calculate_schedule",
]
