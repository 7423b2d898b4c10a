"""
Compliance toggling.

Advances one day's mark for one routine and persists it, guarding against
future dates and against repeated taps while a write is still in flight.
"""

import logging
from datetime import date, datetime, timezone
from typing import Optional, Set, Tuple

from common.utils.exceptions import (
    ConflictException,
    FutureDateException,
    NotFoundException,
    ValidationException,
)
from goaltrack.routine.models import DailyProgress, GoalRecord, RoutineType
from goaltrack.routine.services.compliance_calendar import build_toggled_progress
from goaltrack.routine.services.routine_repository import (
    RoutineRepository,
    daily_progress_patch,
)
from goaltrack.routine.services.time_window import date_key, is_after_today

logger = logging.getLogger(__name__)


class ComplianceService:
    """
    Applies the mark cycle to a goal's daily log.

    The caller's GoalRecord is only updated once the repository has
    confirmed the write, so a failed write leaves it exactly as it was.
    """

    def __init__(self, repository: RoutineRepository):
        """
        Initialize ComplianceService.

        Args:
            repository: Goal persistence
        """
        self._repository = repository
        self._in_flight: Set[Tuple[str, str]] = set()

    def is_toggling(self, goal_id: str, day: date) -> bool:
        """Whether a write for this goal and day is outstanding."""
        return (goal_id, date_key(day)) in self._in_flight

    async def toggle_compliance(
        self,
        record: GoalRecord,
        day: date,
        routine_type: RoutineType,
        now: Optional[datetime] = None,
    ) -> DailyProgress:
        """
        Advance the mark for (day, routine_type) and persist it.

        Args:
            record: The goal's loaded data; updated in place on success
            day: Calendar day to toggle
            routine_type: Routine whose mark changes
            now: Current instant (defaults to UTC now)

        Returns:
            The day's updated DailyProgress

        Raises:
            FutureDateException: Day is after today
            NotFoundException: Goal has no date interval
            ValidationException: Day is outside the goal interval
            ConflictException: A write for this day is already in flight
            PersistenceException: The write failed; record is unchanged
        """
        now = now or datetime.now(timezone.utc)
        routine_type = RoutineType(routine_type)
        goal = record.goal
        key = date_key(day)

        if is_after_today(day, now):
            logger.warning(f"Rejected toggle of {routine_type.value} for future date {key}")
            raise FutureDateException(details={"date": key})

        if not goal.has_interval:
            raise NotFoundException(
                message="Goal has no date range to log against",
                code="GOAL_INTERVAL_NOT_SET",
            )

        if not goal.contains(day):
            raise ValidationException(
                message=f"{key} is outside the goal's date range",
                code="DATE_OUTSIDE_GOAL",
                details={"date": key},
            )

        in_flight_key = (goal.id, key)
        if in_flight_key in self._in_flight:
            logger.warning(f"Rejected toggle for {key}: previous write still pending")
            raise ConflictException(
                message="An update for this day is still being saved",
                code="TOGGLE_IN_FLIGHT",
                details={"date": key},
            )

        self._in_flight.add(in_flight_key)
        try:
            updated = build_toggled_progress(record.dailyProgress.get(key), day, routine_type)
            await self._repository.write(goal.id, daily_progress_patch(updated))
            record.dailyProgress[key] = updated
        finally:
            self._in_flight.discard(in_flight_key)

        logger.info(
            f"Marked {routine_type.value} as {updated.mark_for(routine_type).value} "
            f"on {key} for goal {goal.id}"
        )
        return updated
