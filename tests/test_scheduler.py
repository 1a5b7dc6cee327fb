"""Tests for the critical path scheduler end to end."""

import copy
from datetime import date, datetime, timedelta, timezone

import pytest

from critpath.exceptions import (
    CircularDependencyError,
    MissingReferenceError,
    ValidationError,
)
from critpath.models import Task
from critpath.scheduler import (
    CriticalPathScheduler,
    IssuePolicy,
    SchedulingConfig,
    calculate_schedule,
)
from tests.conftest import PROJECT_START, assert_valid_schedule, by_id, day, task


@pytest.fixture
def diamond() -> list[Task]:
    """A(1d) -> B(2d), C(5d) -> D(1d)."""
    return [
        task("a", 1),
        task("b", 2, "a"),
        task("c", 5, "a"),
        task("d", 1, "b", "c"),
    ]


class TestScenarios:
    """Reference scheduling scenarios."""

    def test_linear_chain(self) -> None:
        """A(2d) -> B(3d) -> C(1d): back to back, all critical."""
        tasks = [task("a", 2), task("b", 3, "a"), task("c", 1, "b")]

        result = by_id(calculate_schedule(PROJECT_START, tasks))

        assert (result["a"].start_date, result["a"].end_date) == (day(0), day(2))
        assert (result["b"].start_date, result["b"].end_date) == (day(2), day(5))
        assert (result["c"].start_date, result["c"].end_date) == (day(5), day(6))
        for t in result.values():
            assert t.is_critical
            assert t.slack == 0.0

    def test_diamond(self, diamond: list[Task]) -> None:
        """The longer branch through C is critical; B has 3 days of slack."""
        result = by_id(calculate_schedule(PROJECT_START, diamond))

        assert result["b"].start_date == day(1)
        assert result["b"].end_date == day(3)
        assert result["b"].slack == pytest.approx(3.0)
        assert not result["b"].is_critical

        assert result["c"].start_date == day(1)
        assert result["c"].end_date == day(6)
        assert result["c"].slack == 0.0

        assert result["d"].start_date == day(6)
        assert result["d"].end_date == day(7)

        critical = [t.id for t in result.values() if t.is_critical]
        assert critical == ["a", "c", "d"]

    def test_disconnected_tasks_equal_duration(self) -> None:
        """Independent tasks of maximal duration all start at project start and are critical."""
        tasks = [task("x", 3), task("y", 3)]

        result = by_id(calculate_schedule(PROJECT_START, tasks))

        for t in result.values():
            assert t.start_date == PROJECT_START
            assert t.is_critical

    def test_disconnected_shorter_task_has_slack(self) -> None:
        """A shorter independent task floats until the makespan."""
        tasks = [task("x", 3), task("y", 1)]

        result = by_id(calculate_schedule(PROJECT_START, tasks))

        assert result["x"].is_critical
        assert result["y"].slack == pytest.approx(2.0)
        assert not result["y"].is_critical

    def test_zero_duration_milestone(self) -> None:
        """A milestone starts and ends when its predecessor ends."""
        tasks = [task("a", 2), task("done", 0, "a")]

        result = by_id(calculate_schedule(PROJECT_START, tasks))

        milestone = result["done"]
        assert milestone.start_date == milestone.end_date == result["a"].end_date
        assert milestone.slack == 0.0
        assert milestone.is_critical

    def test_milestone_off_critical_path_has_slack(self) -> None:
        """Milestone slack is computed like any other task."""
        tasks = [task("a", 1), task("m", 0, "a"), task("long", 4)]

        result = by_id(calculate_schedule(PROJECT_START, tasks))

        assert result["m"].start_date == day(1)
        assert result["m"].slack == pytest.approx(3.0)
        assert not result["m"].is_critical

    def test_dangling_predecessor_is_ignored(self) -> None:
        """A predecessor id that is not in the graph has no effect."""
        tasks = [task("a", 2, "ghost"), task("b", 1, "a", "ghost")]

        result = by_id(calculate_schedule(PROJECT_START, tasks))

        assert result["a"].start_date == PROJECT_START
        assert result["b"].start_date == day(2)
        assert result["a"].is_critical and result["b"].is_critical

    def test_cycle_terminates_without_raising(self) -> None:
        """A <-> B stops at the iteration ceiling and returns a best-effort schedule."""
        tasks = [task("a", 1, "b"), task("b", 1, "a")]

        result = CriticalPathScheduler(tasks, PROJECT_START).schedule()

        assert [t.id for t in result.tasks] == ["a", "b"]
        assert all(t.start_date is not None for t in result.tasks)
        assert all(t.slack is not None for t in result.tasks)
        assert not result.converged
        assert result.forward_iterations == 4  # 2 x task count

    def test_self_dependency_terminates(self) -> None:
        """A task depending on itself is a cycle of length one."""
        result = CriticalPathScheduler([task("a", 1, "a")], PROJECT_START).schedule()

        assert len(result.tasks) == 1
        assert any("a -> a" in w for w in result.warnings)


class TestProperties:
    """Properties that hold for every acyclic input."""

    def test_empty_input(self) -> None:
        """No tasks gives an empty result."""
        assert calculate_schedule(PROJECT_START, []) == []

        result = CriticalPathScheduler([], PROJECT_START).schedule()
        assert result.tasks == []
        assert result.project_finish == PROJECT_START
        assert result.warnings == []

    def test_valid_schedule_on_larger_graph(self) -> None:
        """Ordering and duration invariants hold on a wider graph."""
        tasks = [
            task("spec", 2),
            task("design", 3.5, "spec"),
            task("order_parts", 10, "spec"),
            task("frame", 4, "design"),
            task("wiring", 2, "design", "order_parts"),
            task("paint", 1.25, "frame"),
            task("assembly", 3, "frame", "wiring"),
            task("qa", 0.5, "assembly", "paint"),
            task("ship", 0, "qa"),
            task("manual", 6, "design"),
        ]

        result = calculate_schedule(PROJECT_START, tasks)

        assert_valid_schedule(result)
        assert any(t.is_critical for t in result)

    def test_order_is_preserved(self, diamond: list[Task]) -> None:
        """Output keeps input order even for unsorted input."""
        shuffled = [diamond[3], diamond[1], diamond[0], diamond[2]]

        result = calculate_schedule(PROJECT_START, shuffled)

        assert [t.id for t in result] == ["d", "b", "a", "c"]
        assert_valid_schedule(result)

    def test_reverse_ordered_chain_converges(self) -> None:
        """Relaxation handles a chain listed sink-first within the ceiling."""
        tasks = [task("c", 1, "b"), task("b", 3, "a"), task("a", 2)]

        result = CriticalPathScheduler(tasks, PROJECT_START).schedule()
        scheduled = by_id(result.tasks)

        assert result.converged
        assert result.forward_iterations <= 2 * len(tasks)
        assert scheduled["c"].start_date == day(5)
        assert all(t.is_critical for t in result.tasks)

    def test_makespan_is_latest_finish(self, diamond: list[Task]) -> None:
        """Project finish equals the maximum end date."""
        result = CriticalPathScheduler(diamond, PROJECT_START).schedule()

        assert result.project_finish == max(t.end_date for t in result.tasks if t.end_date)
        assert result.project_finish == day(7)
        assert result.duration_days == pytest.approx(7.0)

    def test_critical_sink_finishes_at_makespan(self, diamond: list[Task]) -> None:
        """Some critical task ends exactly at the makespan."""
        result = CriticalPathScheduler(diamond, PROJECT_START).schedule()

        assert any(t.end_date == result.project_finish for t in result.critical_tasks)

    def test_idempotent(self, diamond: list[Task]) -> None:
        """Same input gives identical output."""
        first = calculate_schedule(PROJECT_START, diamond)
        second = calculate_schedule(PROJECT_START, diamond)

        assert first == second

    def test_input_not_mutated(self, diamond: list[Task]) -> None:
        """The caller's task objects are left untouched."""
        diamond[0].slack = 99.0
        snapshot = copy.deepcopy(diamond)

        result = calculate_schedule(PROJECT_START, diamond)

        assert diamond == snapshot
        assert all(original is not scheduled for original, scheduled in zip(diamond, result))
        assert by_id(result)["a"].slack == 0.0

    def test_stale_computed_fields_are_overwritten(self) -> None:
        """Previously computed values on the input never leak into the result."""
        stale = task("a", 1, start_date=day(40), end_date=day(41), slack=-3.0, is_critical=False)

        result = calculate_schedule(PROJECT_START, [stale])

        assert result[0].start_date == PROJECT_START
        assert result[0].end_date == day(1)
        assert result[0].slack == 0.0
        assert result[0].is_critical

    def test_pass_through_fields(self) -> None:
        """Non-scheduling attributes are copied unchanged."""
        original = task(
            "a",
            1,
            name="Cut steel",
            status="IN_PROGRESS",
            progress=40.0,
            assigned_to="u42",
            meta={"color": "red"},
        )

        result = calculate_schedule(PROJECT_START, [original])[0]

        assert result.name == "Cut steel"
        assert result.status == "IN_PROGRESS"
        assert result.progress == 40.0
        assert result.assigned_to == "u42"
        assert result.meta == {"color": "red"}

    def test_fractional_durations_stay_critical(self) -> None:
        """Sub-day durations that add up exactly leave both branches critical."""
        tasks = [task("a", 0.1), task("b", 0.2, "a"), task("c", 0.3)]

        result = by_id(calculate_schedule(PROJECT_START, tasks))

        assert result["b"].end_date == result["c"].end_date
        assert all(t.is_critical for t in result.values())

    def test_date_project_start_means_midnight(self) -> None:
        """A plain date is interpreted as midnight of that day."""
        result = calculate_schedule(date(2025, 1, 6), [task("a", 1)])

        assert result[0].start_date == datetime(2025, 1, 6)
        assert result[0].end_date == datetime(2025, 1, 7)


class TestForcedStart:
    """Start-no-earlier-than constraints."""

    def test_forced_start_delays_task_and_successors(self) -> None:
        """The constrained task and everything after it move later."""
        tasks = [
            task("a", 2),
            task("b", 1, "a", forced_start=day(5)),
            task("c", 1, "b"),
        ]

        result = by_id(calculate_schedule(PROJECT_START, tasks))

        assert result["b"].start_date == day(5)
        assert result["c"].start_date == day(6)
        assert result["a"].slack == pytest.approx(3.0)
        assert result["b"].is_critical and result["c"].is_critical

    def test_earlier_forced_start_has_no_effect(self) -> None:
        """A constraint earlier than the predecessor finish does nothing."""
        tasks = [task("a", 3), task("b", 1, "a", forced_start=day(1))]

        result = by_id(calculate_schedule(PROJECT_START, tasks))

        assert result["b"].start_date == day(3)

    def test_forced_start_is_kept_on_output(self) -> None:
        """The constraint itself is an input field and passes through."""
        result = calculate_schedule(PROJECT_START, [task("a", 1, forced_start=day(2))])

        assert result[0].forced_start == day(2)
        assert result[0].start_date == day(2)

    def test_aware_forced_start_against_naive_project_start(self) -> None:
        """Aware constraints are compared in UTC with a naive project start."""
        forced = datetime(2025, 1, 8, 8, 0, tzinfo=timezone(timedelta(hours=2)))

        result = calculate_schedule(PROJECT_START, [task("a", 1, forced_start=forced)])

        assert result[0].start_date == datetime(2025, 1, 8, 6, 0)
        assert result[0].forced_start == datetime(2025, 1, 8, 6, 0)

    def test_aware_project_start_against_naive_forced_start(self) -> None:
        """An aware project start is normalized the same way."""
        start = datetime(2025, 1, 6, tzinfo=timezone.utc)

        result = calculate_schedule(start, [task("a", 1), task("b", 1, forced_start=day(3))])

        assert by_id(result)["a"].start_date == PROJECT_START
        assert by_id(result)["b"].start_date == day(3)


class TestPolicies:
    """Optional hardening for unknown references and cycles."""

    def test_cycle_warns_by_default(self) -> None:
        """The default policy records a warning instead of raising."""
        tasks = [task("a", 1, "b"), task("b", 1, "a"), task("c", 1)]

        result = CriticalPathScheduler(tasks, PROJECT_START).schedule()

        assert any(w.startswith("Circular dependency detected:") for w in result.warnings)
        assert any("Forward pass did not converge" in w for w in result.warnings)

    def test_cycle_error_policy_raises(self) -> None:
        """on_cycle=error raises before scheduling."""
        tasks = [task("a", 1, "b"), task("b", 1, "a")]
        config = SchedulingConfig(on_cycle=IssuePolicy.ERROR)

        with pytest.raises(CircularDependencyError, match="a -> b -> a"):
            calculate_schedule(PROJECT_START, tasks, config)

    def test_cycle_ignore_policy_skips_detection(self) -> None:
        """on_cycle=ignore keeps only the convergence warnings."""
        tasks = [task("a", 1, "b"), task("b", 1, "a")]
        config = SchedulingConfig(on_cycle=IssuePolicy.IGNORE)

        result = CriticalPathScheduler(tasks, PROJECT_START, config).schedule()

        assert not any("Circular" in w for w in result.warnings)
        assert not result.converged

    def test_missing_reference_ignored_by_default(self) -> None:
        """No warning for dangling ids under the default policy."""
        result = CriticalPathScheduler([task("a", 1, "ghost")], PROJECT_START).schedule()

        assert result.warnings == []

    def test_missing_reference_warn_policy(self) -> None:
        """on_missing_reference=warn records a warning and still schedules."""
        config = SchedulingConfig(on_missing_reference=IssuePolicy.WARN)

        result = CriticalPathScheduler([task("a", 1, "ghost")], PROJECT_START, config).schedule()

        assert result.warnings == ["Task a depends on unknown task(s): ghost"]
        assert result.tasks[0].start_date == PROJECT_START

    def test_missing_reference_error_policy(self) -> None:
        """on_missing_reference=error raises."""
        config = SchedulingConfig(on_missing_reference=IssuePolicy.ERROR)

        with pytest.raises(MissingReferenceError, match="ghost"):
            calculate_schedule(PROJECT_START, [task("a", 1, "ghost")], config)

    def test_custom_epsilon(self) -> None:
        """A wider epsilon treats near-zero slack as critical."""
        tasks = [task("x", 1), task("y", 1 - 1 / 48)]  # 30 minutes shorter
        config = SchedulingConfig(critical_epsilon_days=0.05)

        strict = by_id(calculate_schedule(PROJECT_START, tasks))
        relaxed = by_id(calculate_schedule(PROJECT_START, tasks, config))

        assert not strict["y"].is_critical
        assert relaxed["y"].is_critical
        assert relaxed["y"].slack == pytest.approx(1 / 48)

    def test_iteration_factor_bounds_cycle_work(self) -> None:
        """The ceiling scales with task count and iteration_factor."""
        tasks = [task("a", 1, "b"), task("b", 1, "a")]
        config = SchedulingConfig(iteration_factor=5, on_cycle=IssuePolicy.IGNORE)

        result = CriticalPathScheduler(tasks, PROJECT_START, config).schedule()

        assert result.forward_iterations == 10
        assert result.backward_iterations <= 10
        assert result.tasks[0].end_date is not None
        assert result.tasks[0].end_date - result.tasks[0].start_date == timedelta(days=1)


class TestInvalidInput:
    """Durations that cannot be turned into dates."""

    @pytest.mark.parametrize("duration", [float("nan"), float("inf"), -1.0])
    def test_invalid_duration_raises_validation_error(self, duration: float) -> None:
        """In-memory tasks with unusable durations are rejected up front."""
        with pytest.raises(ValidationError, match="Task a has an invalid duration"):
            calculate_schedule(PROJECT_START, [task("a", duration)])

    def test_date_overflow_raises_validation_error(self) -> None:
        """Finishing past the last representable date is a validation error."""
        tasks = [task("a", 4_000_000), task("b", 1, "a")]

        with pytest.raises(ValidationError, match="supported date range"):
            calculate_schedule(PROJECT_START, tasks)
