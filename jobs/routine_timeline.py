"""
Routine timeline job.

Re-derives today's routine timeline for a user's active goal on a fixed
interval and logs what is happening now, coming up, or missed.

Usage:
    ACTIVE_USER_ID=<user id> python -m jobs.routine_timeline
"""

import asyncio
import logging
import sys
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from common.database import MongoDB, get_main_database, set_main_database
from common.utils.exceptions import AppException
from goaltrack.config import settings
from goaltrack.pipelines.routine import get_timeline_pipeline
from goaltrack.routine.dependencies import (
    get_routine_repository,
    get_schedule_service,
    get_timeline_classifier,
    init_routine_services,
)
from goaltrack.routine.services.routine_repository import RoutineRepository
from goaltrack.routine.services.schedule_service import ScheduleService
from goaltrack.routine.services.timeline_classifier import TimelineClassifier

logger = logging.getLogger(__name__)


class RoutineTimelineJob:
    """
    Periodic timeline refresh for one user.

    Each tick:
    1. Resolves the user's active goal
    2. Loads it and applies the daily completion reset
    3. Classifies the routines against the current time
    """

    def __init__(
        self,
        repository: RoutineRepository,
        user_id: str,
        classifier: Optional[TimelineClassifier] = None,
        schedule_service: Optional[ScheduleService] = None,
        interval_seconds: int = 60,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the timeline job.

        Args:
            repository: Goal persistence
            user_id: User whose active goal is followed
            classifier: Timeline classifier (default lookahead if omitted)
            schedule_service: Applies the daily reset (built on repository if omitted)
            interval_seconds: Seconds between ticks
            clock: Returns "now"; defaults to the configured timezone
        """
        self._repository = repository
        self._user_id = user_id
        self._classifier = classifier or TimelineClassifier()
        self._schedule_service = schedule_service or ScheduleService(repository=repository)
        self._interval_seconds = interval_seconds
        self._clock = clock or (lambda: datetime.now(settings.get_timezone()))
        self._stopped = asyncio.Event()

    async def run_once(self, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """
        Run a single tick.

        Returns:
            The classified timeline entries (empty without an active goal)
        """
        now = now or self._clock()
        goal_id = await self._repository.find_active_goal_id(self._user_id)

        result = await get_timeline_pipeline(
            repository=self._repository,
            classifier=self._classifier,
            schedule_service=self._schedule_service,
            goal_id=goal_id,
            now=now,
        )

        if not result["hasGoal"]:
            logger.info(f"No active goal for user {self._user_id}")
            return []

        for entry in result["entries"]:
            suffix = f" in {entry['minutesUntil']}m" if entry["minutesUntil"] else ""
            logger.info(
                f"[{entry['status']}] {entry['label'] or entry['type']} "
                f"at {entry['time']} for {entry['durationMinutes']} min{suffix}"
            )
        if not result["entries"]:
            logger.info("All clear: nothing current, upcoming or missed")

        return result["entries"]

    async def run_forever(self) -> None:
        """Tick every interval until stop() is called."""
        logger.info(
            f"Routine timeline job started for user {self._user_id} "
            f"(every {self._interval_seconds}s)"
        )
        while not self._stopped.is_set():
            try:
                await self.run_once()
            except AppException as e:
                logger.error(f"Timeline refresh failed: {e.message}")
            except Exception as e:
                logger.error(f"Timeline refresh failed: {str(e)}")

            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self._interval_seconds)
            except asyncio.TimeoutError:
                pass

        logger.info("Routine timeline job stopped")

    def stop(self) -> None:
        self._stopped.set()


async def main():
    """Main entry point for the routine timeline job."""
    logging.basicConfig(
        level=settings.get_log_level(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    settings.validate_required()
    if not settings.ACTIVE_USER_ID:
        logger.error("ACTIVE_USER_ID is not set")
        sys.exit(2)

    db = MongoDB()
    await db.connect(uri=settings.MONGODB_URI, database_name=settings.MONGODB_DATABASE)
    set_main_database(db)

    init_routine_services(
        get_main_database().db,
        collection_name=settings.GOALS_COLLECTION,
        upcoming_window_minutes=settings.UPCOMING_WINDOW_MINUTES,
    )

    job = RoutineTimelineJob(
        repository=get_routine_repository(),
        user_id=settings.ACTIVE_USER_ID,
        classifier=get_timeline_classifier(),
        schedule_service=get_schedule_service(),
        interval_seconds=settings.TIMELINE_REFRESH_SECONDS,
    )

    try:
        await job.run_forever()
    finally:
        await db.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
