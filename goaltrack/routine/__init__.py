"""
Routine Scheduling & Compliance Tracking

Classifies a goal's time-of-day routines as current, upcoming or missed,
and keeps a per-day, per-routine compliance calendar within the goal's
date range.
"""

from goaltrack.routine.services.timeline_classifier import TimelineClassifier
from goaltrack.routine.services.compliance_service import ComplianceService
from goaltrack.routine.services.schedule_service import ScheduleService
from goaltrack.routine.services.routine_repository import (
    RoutineRepository,
    MongoRoutineRepository,
)

__all__ = [
    "TimelineClassifier",
    "ComplianceService",
    "ScheduleService",
    "RoutineRepository",
    "MongoRoutineRepository",
]
