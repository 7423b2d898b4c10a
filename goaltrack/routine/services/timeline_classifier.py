"""
Today's routine timeline.

Classifies every scheduled routine of a goal as happening now, coming up
soon, or missed, relative to a wall-clock instant.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from goaltrack.routine.models import (
    ClassifiedEntry,
    RoutineCatalog,
    ScheduledInstance,
    RoutineType,
    TimelineStatus,
)
from goaltrack.routine.services.time_window import (
    is_within_window,
    minutes_until,
    window_for,
)

logger = logging.getLogger(__name__)


_STATUS_RANK = {
    TimelineStatus.CURRENT: 0,
    TimelineStatus.UPCOMING: 1,
    TimelineStatus.MISSED: 2,
}


class TimelineClassifier:
    """
    Pure classification of a routine catalog against "now".

    Holds no state between calls; re-invoke on a timer to follow the clock.
    """

    DEFAULT_UPCOMING_WINDOW_MINUTES = 60

    def __init__(self, upcoming_window_minutes: int = DEFAULT_UPCOMING_WINDOW_MINUTES):
        """
        Initialize TimelineClassifier.

        Args:
            upcoming_window_minutes: How far ahead a routine counts as upcoming
        """
        self._upcoming_window = timedelta(minutes=upcoming_window_minutes)

    def classify(
        self,
        catalog: Optional[RoutineCatalog],
        now: datetime,
    ) -> List[ClassifiedEntry]:
        """
        Build the ordered timeline for today.

        Args:
            catalog: The active goal's routines, or None when there is no goal
            now: Current wall-clock instant

        Returns:
            Current entries first, then upcoming by minutes until start, then
            missed. Ties keep catalog order.

        Algorithm:
            1. Flatten every list (naps included), skipping completed entries
            2. Window each one as [start, start + duration) on today
            3. Inside the window -> current; past the end -> missed;
               starting within the upcoming window -> upcoming; else dropped
            4. Stable sort by (status rank, minutes until start)
        """
        if catalog is None:
            return []

        entries: List[ClassifiedEntry] = []
        for routine_type, index, instance in catalog.iter_instances():
            if instance.completed is True:
                continue
            entry = self._classify_instance(routine_type, index, instance, now)
            if entry is not None:
                entries.append(entry)

        entries.sort(key=lambda e: (_STATUS_RANK[e.status], e.minutesUntil or 0))

        logger.debug(
            f"Classified {len(entries)} timeline entries at {now.isoformat()}"
        )
        return entries

    def _classify_instance(
        self,
        routine_type: RoutineType,
        index: int,
        instance: ScheduledInstance,
        now: datetime,
    ) -> Optional[ClassifiedEntry]:
        start, end = window_for(instance.time, instance.durationMinutes, now)

        status: Optional[TimelineStatus] = None
        minutes: Optional[int] = None

        if is_within_window(now, start, end):
            status = TimelineStatus.CURRENT
        elif now >= end:
            status = TimelineStatus.MISSED
        elif timedelta(0) < start - now <= self._upcoming_window:
            status = TimelineStatus.UPCOMING
            minutes = minutes_until(start, now)

        if status is None:
            return None

        return ClassifiedEntry(
            type=routine_type,
            index=index,
            label=instance.label,
            time=instance.time,
            durationMinutes=instance.durationMinutes,
            icon=instance.icon,
            status=status,
            minutesUntil=minutes,
        )
