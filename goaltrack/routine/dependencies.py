"""
Service wiring for the routine system.

Provides singleton access to routine-related services.
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from goaltrack.routine.services.timeline_classifier import TimelineClassifier
from goaltrack.routine.services.compliance_service import ComplianceService
from goaltrack.routine.services.schedule_service import ScheduleService
from goaltrack.routine.services.routine_repository import (
    RoutineRepository,
    MongoRoutineRepository,
)


_routine_repository: Optional[RoutineRepository] = None
_timeline_classifier: Optional[TimelineClassifier] = None
_compliance_service: Optional[ComplianceService] = None
_schedule_service: Optional[ScheduleService] = None


def init_routine_services(
    db: AsyncIOMotorDatabase,
    collection_name: str = "goals",
    upcoming_window_minutes: int = TimelineClassifier.DEFAULT_UPCOMING_WINDOW_MINUTES,
) -> None:
    """
    Initialize routine services with database connection.

    Called once at startup.

    Args:
        db: MongoDB database connection
        collection_name: Collection holding goal documents
        upcoming_window_minutes: Lookahead for upcoming timeline entries
    """
    global _routine_repository, _timeline_classifier, _compliance_service, _schedule_service

    _routine_repository = MongoRoutineRepository(db=db, collection_name=collection_name)
    _timeline_classifier = TimelineClassifier(upcoming_window_minutes=upcoming_window_minutes)
    _compliance_service = ComplianceService(repository=_routine_repository)
    _schedule_service = ScheduleService(repository=_routine_repository)


def get_routine_repository() -> RoutineRepository:
    """Get routine repository instance."""
    if _routine_repository is None:
        raise RuntimeError("Routine services not initialized. Call init_routine_services first.")
    return _routine_repository


def get_timeline_classifier() -> TimelineClassifier:
    """Get timeline classifier instance."""
    if _timeline_classifier is None:
        raise RuntimeError("Routine services not initialized. Call init_routine_services first.")
    return _timeline_classifier


def get_compliance_service() -> ComplianceService:
    """Get compliance service instance."""
    if _compliance_service is None:
        raise RuntimeError("Routine services not initialized. Call init_routine_services first.")
    return _compliance_service


def get_schedule_service() -> ScheduleService:
    """Get schedule service instance."""
    if _schedule_service is None:
        raise RuntimeError("Routine services not initialized. Call init_routine_services first.")
    return _schedule_service
