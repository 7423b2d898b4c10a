"""
Schedule maintenance.

Daily reset of completion flags, per-instance completion, the water counter
and whole-catalog replacement. Every change is written as a catalog patch
and only applied to the caller's record after the write succeeds.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple, Union

from common.utils.exceptions import ValidationException
from goaltrack.routine.models import (
    GoalRecord,
    RoutineCatalog,
    RoutineType,
    ScheduledInstance,
    WaterSettings,
)
from goaltrack.routine.services.catalog_validator import CatalogValidator
from goaltrack.routine.services.routine_repository import RoutineRepository, catalog_patch

logger = logging.getLogger(__name__)


def needs_daily_reset(catalog: RoutineCatalog, now: datetime) -> bool:
    last_reset = catalog.lastRoutineResetDate
    if last_reset is None:
        return True
    if last_reset.tzinfo is not None and now.tzinfo is not None:
        last_reset = last_reset.astimezone(now.tzinfo)
    return last_reset.date() != now.date()


def reset_daily_completions(
    catalog: RoutineCatalog,
    now: datetime,
) -> Tuple[RoutineCatalog, bool]:
    """
    Clear yesterday's completion flags and the water counter.

    Args:
        catalog: Current routine settings (not modified)
        now: Current instant

    Returns:
        (catalog, changed) - a reset copy and True, or the original and False

    Rules:
        - Nothing happens if the last reset was already today
        - Completed instances (naps included) become completed=False,
          completedAt=None
        - water.current goes back to 0
        - lastRoutineResetDate is stamped on the first reset of each day,
          even when there was nothing to clear, so later calls that day
          leave new completions alone
    """
    if not needs_daily_reset(catalog, now):
        return catalog, False

    reset = catalog.model_copy(deep=True)

    for _, _, instance in reset.iter_instances():
        if instance.completed:
            instance.completed = False
            instance.completedAt = None

    if reset.water:
        reset.water.current = 0

    reset.lastRoutineResetDate = now
    return reset, True


class ScheduleService:
    """
    Routine settings changes for one goal at a time.
    """

    def __init__(self, repository: RoutineRepository):
        """
        Initialize ScheduleService.

        Args:
            repository: Goal persistence
        """
        self._repository = repository

    async def _commit(self, record: GoalRecord, catalog: RoutineCatalog) -> None:
        await self._repository.write(record.goal.id, catalog_patch(catalog))
        record.catalog = catalog

    async def apply_daily_reset(
        self,
        record: GoalRecord,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Reset completion flags if the day has rolled over.

        Returns:
            True if the catalog was reset and written
        """
        now = now or datetime.now(timezone.utc)
        catalog, changed = reset_daily_completions(record.catalog, now)
        if not changed:
            return False

        await self._commit(record, catalog)
        logger.info(f"Daily routine reset applied for goal {record.goal.id}")
        return True

    async def toggle_instance_completion(
        self,
        record: GoalRecord,
        routine_type: RoutineType,
        index: int,
        now: Optional[datetime] = None,
    ) -> ScheduledInstance:
        """
        Flip the completed flag of one scheduled instance.

        Args:
            record: The goal's loaded data; updated on success
            routine_type: Which schedule list (SLEEP addresses naps)
            index: Position in that list
            now: Completion timestamp (defaults to UTC now)

        Returns:
            The updated instance

        Raises:
            ValidationException: WATER, or index out of range
        """
        now = now or datetime.now(timezone.utc)
        routine_type = RoutineType(routine_type)

        catalog = record.catalog.model_copy(deep=True)
        schedules = catalog.schedules_for(routine_type)
        if not 0 <= index < len(schedules):
            raise ValidationException(
                message=f"No {routine_type.value} routine at position {index}",
                code="INSTANCE_NOT_FOUND",
            )

        instance = schedules[index]
        instance.completed = not instance.completed
        instance.completedAt = now if instance.completed else None

        await self._commit(record, catalog)
        logger.info(
            f"{routine_type.value}[{index}] marked "
            f"{'complete' if instance.completed else 'incomplete'} for goal {record.goal.id}"
        )
        return instance

    async def adjust_water(self, record: GoalRecord, delta: int) -> WaterSettings:
        """
        Add or remove glasses, clamped to [0, goal].

        Returns:
            The updated water settings
        """
        catalog = record.catalog.model_copy(deep=True)
        water = catalog.water or WaterSettings()
        water.current = max(0, min(water.current + delta, water.goal))
        catalog.water = water

        await self._commit(record, catalog)
        logger.debug(f"Water intake for goal {record.goal.id}: {water.current}/{water.goal}")
        return water

    async def set_water_goal(self, record: GoalRecord, goal: int) -> WaterSettings:
        """
        Change the daily glass target, clamping today's count to it.

        Raises:
            ValidationException: goal < 1
        """
        if isinstance(goal, bool) or not isinstance(goal, int) or goal < 1:
            raise ValidationException(
                message="Water goal must be at least 1 glass",
                code="INVALID_WATER_GOAL",
            )

        catalog = record.catalog.model_copy(deep=True)
        water = catalog.water or WaterSettings()
        water.goal = goal
        water.current = min(water.current, goal)
        catalog.water = water

        await self._commit(record, catalog)
        return water

    async def update_catalog(
        self,
        record: GoalRecord,
        settings: Union[RoutineCatalog, Dict[str, Any]],
    ) -> RoutineCatalog:
        """
        Replace the goal's routine settings.

        Raises:
            ValidationException: Any entry breaks the scheduling rules
        """
        raw = settings.to_document() if isinstance(settings, RoutineCatalog) else settings

        is_valid, error = CatalogValidator.validate(raw)
        if not is_valid:
            raise ValidationException(message=error, code="VALIDATION_ERROR")

        catalog = RoutineCatalog.model_validate(raw)
        await self._commit(record, catalog)
        logger.info(f"Routine settings replaced for goal {record.goal.id}")
        return catalog
