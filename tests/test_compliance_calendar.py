"""Unit tests for the compliance calendar view logic."""

import pytest
from datetime import date, datetime, timezone

from goaltrack.routine.models import (
    ComplianceMark,
    DailyProgress,
    Goal,
    Month,
    NavigationDirection,
    RoutineType,
)
from goaltrack.routine.services.compliance_calendar import (
    build_month_view,
    build_toggled_progress,
    can_navigate,
    compliance_for,
    days_in_view,
    initial_month,
    navigate,
    next_mark,
)


# ─────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────


@pytest.fixture
def january_goal():
    return Goal(id="g1", startDate=date(2025, 1, 1), endDate=date(2025, 1, 31))


@pytest.fixture
def spanning_goal():
    """Mid-month to mid-month across three months."""
    return Goal(id="g2", startDate=date(2025, 1, 20), endDate=date(2025, 3, 10))


# ─────────────────────────────────────────────────────────────────
# days_in_view
# ─────────────────────────────────────────────────────────────────


class TestDaysInView:
    def test_full_month_inside_interval(self, january_goal):
        days = days_in_view(january_goal, Month(2025, 1))
        assert len(days) == 31
        assert days[0] == date(2025, 1, 1)
        assert days[-1] == date(2025, 1, 31)

    def test_month_after_interval_is_empty(self, january_goal):
        assert days_in_view(january_goal, Month(2025, 2)) == []

    def test_month_before_interval_is_empty(self, january_goal):
        assert days_in_view(january_goal, Month(2024, 12)) == []

    def test_partial_first_and_last_months(self, spanning_goal):
        first = days_in_view(spanning_goal, Month(2025, 1))
        assert first[0] == date(2025, 1, 20)
        assert first[-1] == date(2025, 1, 31)

        middle = days_in_view(spanning_goal, Month(2025, 2))
        assert len(middle) == 28

        last = days_in_view(spanning_goal, Month(2025, 3))
        assert last[0] == date(2025, 3, 1)
        assert last[-1] == date(2025, 3, 10)

    def test_days_are_ordered_and_within_interval(self, spanning_goal):
        for month in (Month(2025, 1), Month(2025, 2), Month(2025, 3)):
            days = days_in_view(spanning_goal, month)
            assert days == sorted(days)
            assert all(spanning_goal.startDate <= d <= spanning_goal.endDate for d in days)

    def test_no_goal_or_interval_is_empty(self):
        assert days_in_view(None, Month(2025, 1)) == []
        assert days_in_view(Goal(id="g3"), Month(2025, 1)) == []

    def test_inverted_interval_is_empty(self):
        goal = Goal(id="g4", startDate=date(2025, 2, 1), endDate=date(2025, 1, 1))
        assert days_in_view(goal, Month(2025, 1)) == []

    def test_leap_february(self):
        goal = Goal(id="g5", startDate=date(2024, 1, 1), endDate=date(2024, 12, 31))
        assert len(days_in_view(goal, Month(2024, 2))) == 29


# ─────────────────────────────────────────────────────────────────
# Navigation
# ─────────────────────────────────────────────────────────────────


class TestNavigation:
    def test_single_month_goal_cannot_move(self, january_goal):
        assert can_navigate("next", Month(2025, 1), january_goal) is False
        assert can_navigate("prev", Month(2025, 1), january_goal) is False

    def test_moves_within_goal_months(self, spanning_goal):
        assert can_navigate(NavigationDirection.NEXT, Month(2025, 1), spanning_goal)
        assert not can_navigate(NavigationDirection.PREV, Month(2025, 1), spanning_goal)
        assert can_navigate(NavigationDirection.PREV, Month(2025, 2), spanning_goal)
        assert can_navigate(NavigationDirection.NEXT, Month(2025, 2), spanning_goal)
        assert not can_navigate(NavigationDirection.NEXT, Month(2025, 3), spanning_goal)

    def test_no_goal_cannot_move(self):
        assert can_navigate("next", Month(2025, 1), None) is False

    def test_navigate_shifts_month(self, spanning_goal):
        assert navigate("next", Month(2025, 1), spanning_goal) == Month(2025, 2)
        assert navigate("prev", Month(2025, 3), spanning_goal) == Month(2025, 2)

    def test_disallowed_navigation_is_noop(self, january_goal):
        assert navigate("next", Month(2025, 1), january_goal) == Month(2025, 1)

    def test_navigate_across_year_boundary(self):
        goal = Goal(id="g6", startDate=date(2024, 12, 1), endDate=date(2025, 1, 31))
        assert navigate("next", Month(2024, 12), goal) == Month(2025, 1)
        assert navigate("prev", Month(2025, 1), goal) == Month(2024, 12)

    def test_initial_month_is_goal_start(self, spanning_goal):
        assert initial_month(spanning_goal, date(2025, 3, 1)) == Month(2025, 1)
        assert initial_month(None, date(2025, 3, 1)) == Month(2025, 3)


# ─────────────────────────────────────────────────────────────────
# Marks
# ─────────────────────────────────────────────────────────────────


class TestComplianceFor:
    def test_unknown_without_record(self):
        assert compliance_for(date(2025, 1, 5), RoutineType.MEAL, None) == ComplianceMark.UNKNOWN
        assert compliance_for(date(2025, 1, 5), RoutineType.MEAL, {}) == ComplianceMark.UNKNOWN

    def test_reads_from_progress_map(self):
        log = {"2025-01-05": DailyProgress(date="2025-01-05", routines={"meal": "skipped"})}
        assert compliance_for(date(2025, 1, 5), RoutineType.MEAL, log) == ComplianceMark.SKIPPED
        assert compliance_for(date(2025, 1, 5), RoutineType.BATH, log) == ComplianceMark.UNKNOWN

    def test_reads_from_single_day_record(self):
        progress = DailyProgress(date="2025-01-05", routines={"bath": "done"})
        assert compliance_for(date(2025, 1, 5), RoutineType.BATH, progress) == ComplianceMark.DONE
        assert compliance_for(date(2025, 1, 6), RoutineType.BATH, progress) == ComplianceMark.UNKNOWN


class TestMarkCycle:
    def test_cycle_never_returns_to_unknown(self):
        mark = ComplianceMark.UNKNOWN
        seen = []
        for _ in range(6):
            mark = next_mark(mark)
            seen.append(mark)
        assert seen == [
            ComplianceMark.DONE, ComplianceMark.SKIPPED,
            ComplianceMark.DONE, ComplianceMark.SKIPPED,
            ComplianceMark.DONE, ComplianceMark.SKIPPED,
        ]

    def test_first_toggle_creates_record(self):
        progress = build_toggled_progress(None, date(2025, 1, 5), RoutineType.TEETH)
        assert progress.date == "2025-01-05"
        assert progress.mark_for(RoutineType.TEETH) == ComplianceMark.DONE

    def test_toggle_keeps_sibling_marks_and_fields(self):
        existing = DailyProgress(
            date="2025-01-05",
            routines={"meal": "done", "bath": "skipped"},
            satisfaction=4,
            notes="Steady",
        )

        updated = build_toggled_progress(existing, date(2025, 1, 5), RoutineType.MEAL)

        assert updated.mark_for(RoutineType.MEAL) == ComplianceMark.SKIPPED
        assert updated.mark_for(RoutineType.BATH) == ComplianceMark.SKIPPED
        assert updated.model_extra == {"satisfaction": 4, "notes": "Steady"}
        # Original untouched
        assert existing.mark_for(RoutineType.MEAL) == ComplianceMark.DONE


# ─────────────────────────────────────────────────────────────────
# build_month_view
# ─────────────────────────────────────────────────────────────────


class TestMonthView:
    def test_view_for_record(self, sample_record):
        now = datetime(2025, 1, 15, 9, 0, tzinfo=timezone.utc)

        view = build_month_view(sample_record, Month(2025, 1), RoutineType.MEAL, now)

        assert view["month"] == "2025-01"
        assert len(view["days"]) == 31
        day_10 = view["days"][9]
        assert day_10 == {"date": "2025-01-10", "mark": "done", "isToday": False, "isFuture": False}
        assert view["days"][14]["isToday"] is True
        assert view["days"][15]["isFuture"] is True
        assert view["canGoPrev"] is False
        assert view["canGoNext"] is False
        assert view["summary"] == {"not_logged": 30, "done": 1, "skipped": 0}

    def test_view_without_record_is_empty(self):
        now = datetime(2025, 1, 15, tzinfo=timezone.utc)
        view = build_month_view(None, Month(2025, 1), RoutineType.MEAL, now)
        assert view["days"] == []
        assert view["canGoPrev"] is False
        assert view["canGoNext"] is False
