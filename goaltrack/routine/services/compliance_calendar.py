"""
Compliance calendar.

Month views bounded to a goal's date interval, month navigation that never
leaves that interval, and the per-day mark cycle.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Union

from goaltrack.routine.models import (
    ComplianceMark,
    DailyProgress,
    Goal,
    GoalRecord,
    Month,
    NavigationDirection,
    RoutineType,
)
from goaltrack.routine.services.time_window import date_key, is_after_today

logger = logging.getLogger(__name__)


# Once a day has been logged it never returns to UNKNOWN.
MARK_TRANSITIONS: Dict[ComplianceMark, ComplianceMark] = {
    ComplianceMark.UNKNOWN: ComplianceMark.DONE,
    ComplianceMark.DONE: ComplianceMark.SKIPPED,
    ComplianceMark.SKIPPED: ComplianceMark.DONE,
}


def days_in_view(goal: Optional[Goal], month: Month) -> List[date]:
    """
    Days of `month` that fall inside the goal interval, in order.

    Empty when there is no goal, no interval, or no overlap.
    """
    if goal is None or not goal.has_interval:
        return []

    first = max(goal.startDate, month.first_day)
    last = min(goal.endDate, month.last_day)
    if first > last:
        return []

    return [day for day in month.days() if first <= day <= last]


def can_navigate(
    direction: Union[NavigationDirection, str],
    current_month: Month,
    goal: Optional[Goal],
) -> bool:
    """
    Whether moving one month in `direction` stays within the goal's months.

    prev is allowed while current_month is after the start month, next
    while it is before the end month.
    """
    if goal is None or not goal.has_interval:
        return False

    direction = NavigationDirection(direction)
    if direction == NavigationDirection.PREV:
        return current_month > Month.of(goal.startDate)
    return current_month < Month.of(goal.endDate)


def navigate(
    direction: Union[NavigationDirection, str],
    current_month: Month,
    goal: Optional[Goal],
) -> Month:
    """Shift one month, or stay put when navigation isn't allowed."""
    if not can_navigate(direction, current_month, goal):
        logger.debug(f"Navigation {direction} from {current_month} ignored")
        return current_month
    step = -1 if NavigationDirection(direction) == NavigationDirection.PREV else 1
    return current_month.shift(step)


def initial_month(goal: Optional[Goal], today: date) -> Month:
    """The calendar opens on the goal's start month."""
    if goal is not None and goal.startDate is not None:
        return Month.of(goal.startDate)
    return Month.of(today)


def compliance_for(
    day: date,
    routine_type: RoutineType,
    log: Union[DailyProgress, Mapping[str, DailyProgress], None],
) -> ComplianceMark:
    """
    Mark for one (day, routine type).

    Args:
        day: Calendar day
        routine_type: Routine to look up
        log: That day's DailyProgress, or the goal's whole date-keyed map

    Returns:
        The stored mark, UNKNOWN when nothing has been logged
    """
    if log is None:
        return ComplianceMark.UNKNOWN

    if isinstance(log, DailyProgress):
        progress = log if log.date == date_key(day) else None
    else:
        progress = log.get(date_key(day))

    if progress is None:
        return ComplianceMark.UNKNOWN
    return progress.mark_for(routine_type)


def next_mark(current: ComplianceMark) -> ComplianceMark:
    return MARK_TRANSITIONS[current]


def build_toggled_progress(
    existing: Optional[DailyProgress],
    day: date,
    routine_type: RoutineType,
) -> DailyProgress:
    """
    New DailyProgress for `day` with one mark advanced.

    Every other mark and every unrelated field of `existing` is kept.
    `existing` itself is not modified.
    """
    if existing is None:
        return DailyProgress(
            date=date_key(day),
            routines={routine_type: next_mark(ComplianceMark.UNKNOWN)},
        )

    updated = existing.model_copy(deep=True)
    updated.routines[routine_type] = next_mark(existing.mark_for(routine_type))
    return updated


def summarize_month(
    days: List[date],
    routine_type: RoutineType,
    progress: Mapping[str, DailyProgress],
) -> Dict[str, int]:
    """Count marks of one routine over the given days."""
    summary = {mark.value: 0 for mark in ComplianceMark}
    for day in days:
        summary[compliance_for(day, routine_type, progress).value] += 1
    return summary


def build_month_view(
    record: Optional[GoalRecord],
    month: Month,
    routine_type: RoutineType,
    now: datetime,
) -> Dict[str, Any]:
    """
    Calendar view model for one routine and month.

    A missing record yields an empty, non-interactive view.
    """
    goal = record.goal if record else None
    progress = record.dailyProgress if record else {}
    today = now.date()

    days = days_in_view(goal, month)

    return {
        "month": str(month),
        "routineType": routine_type.value,
        "days": [
            {
                "date": date_key(day),
                "mark": compliance_for(day, routine_type, progress).value,
                "isToday": day == today,
                "isFuture": is_after_today(day, now),
            }
            for day in days
        ],
        "canGoPrev": can_navigate(NavigationDirection.PREV, month, goal),
        "canGoNext": can_navigate(NavigationDirection.NEXT, month, goal),
        "summary": summarize_month(days, routine_type, progress),
    }
