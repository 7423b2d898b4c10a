"""
Routine system pipeline functions.

Stateless orchestration logic for timeline, calendar and toggle operations.
Results are plain dicts ready for the presentation layer.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, Optional

from common.utils.exceptions import AppException, NotFoundException, PersistenceException
from common.utils.responses import success_response
from goaltrack.routine.models import GoalRecord, Month, RoutineType
from goaltrack.routine.services.compliance_calendar import build_month_view, initial_month
from goaltrack.routine.services.compliance_service import ComplianceService
from goaltrack.routine.services.routine_repository import RoutineRepository
from goaltrack.routine.services.schedule_service import ScheduleService
from goaltrack.routine.services.timeline_classifier import TimelineClassifier

logger = logging.getLogger(__name__)


async def load_record_pipeline(
    repository: RoutineRepository,
    goal_id: Optional[str],
) -> Optional[GoalRecord]:
    """
    Load a goal, treating "no active goal" and "goal not found" alike.

    Returns:
        The GoalRecord, or None
    """
    if not goal_id:
        return None
    try:
        return await repository.read(goal_id)
    except NotFoundException:
        logger.info(f"Goal {goal_id} not found, routine views will be empty")
        return None


async def get_timeline_pipeline(
    repository: RoutineRepository,
    classifier: TimelineClassifier,
    schedule_service: ScheduleService,
    goal_id: Optional[str],
    now: datetime,
) -> Dict[str, Any]:
    """
    Today's routine timeline for a goal.

    Args:
        repository: For loading the goal
        classifier: For classifying scheduled routines
        schedule_service: For the daily completion reset
        goal_id: Active goal, or None
        now: Current instant

    Returns:
        dict with hasGoal flag and ordered entries
    """
    record = await load_record_pipeline(repository, goal_id)
    if record is None:
        return {"hasGoal": False, "entries": []}

    try:
        await schedule_service.apply_daily_reset(record, now)
    except PersistenceException as e:
        # Timeline still renders from the stored flags
        logger.warning(f"Daily routine reset failed for goal {goal_id}: {e.message}")

    entries = classifier.classify(record.catalog, now)

    return {
        "hasGoal": True,
        "entries": [entry.to_dict() for entry in entries],
    }


async def get_calendar_pipeline(
    repository: RoutineRepository,
    goal_id: Optional[str],
    routine_type: RoutineType,
    now: datetime,
    month: Optional[Month] = None,
) -> Dict[str, Any]:
    """
    Compliance calendar for one routine and month.

    Args:
        repository: For loading the goal
        goal_id: Active goal, or None
        routine_type: Routine the calendar tracks
        now: Current instant
        month: Month to show; defaults to the goal's start month

    Returns:
        Month view model (empty and non-interactive without a goal)
    """
    record = await load_record_pipeline(repository, goal_id)
    if month is None:
        month = initial_month(record.goal if record else None, now.date())

    view = build_month_view(record, month, RoutineType(routine_type), now)
    view["hasGoal"] = record is not None
    return view


async def toggle_compliance_pipeline(
    compliance_service: ComplianceService,
    record: Optional[GoalRecord],
    day: date,
    routine_type: RoutineType,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Advance one day's mark and report the outcome.

    Args:
        compliance_service: For the validated toggle and write
        record: The goal's loaded data, or None without an active goal;
            only changed on success
        day: Calendar day to toggle
        routine_type: Routine whose mark changes
        now: Current instant

    Returns:
        success_response with the updated progress, or error_response with
        the rejection message and code
    """
    if record is None:
        return NotFoundException(message="No active goal", code="GOAL_NOT_FOUND").to_response()

    routine_type = RoutineType(routine_type)
    try:
        progress = await compliance_service.toggle_compliance(record, day, routine_type, now)
    except AppException as e:
        return e.to_response()

    return success_response(
        data={
            "progress": progress.to_document(),
            "mark": progress.mark_for(routine_type).value,
        },
        message=f"{routine_type.value.capitalize()} status updated",
    )


async def toggle_instance_pipeline(
    schedule_service: ScheduleService,
    record: Optional[GoalRecord],
    routine_type: RoutineType,
    index: int,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Flip completion of one scheduled routine and report the outcome.

    Returns:
        success_response with the instance, or error_response
    """
    if record is None:
        return NotFoundException(message="No active goal", code="GOAL_NOT_FOUND").to_response()

    try:
        instance = await schedule_service.toggle_instance_completion(
            record, routine_type, index, now
        )
    except AppException as e:
        return e.to_response()

    return success_response(data={"instance": instance.model_dump(mode="json")})
