"""
Goal document persistence.

Reads a goal with its routine catalog and daily logs, and applies partial
patches to it. Writes are always `$set` on dotted paths, so fields outside
the patch are never overwritten.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from common.utils.exceptions import (
    NotFoundException,
    PersistenceException,
    ValidationException,
)
from goaltrack.routine.models import DailyProgress, GoalRecord, RoutineCatalog

logger = logging.getLogger(__name__)


def daily_progress_patch(progress: DailyProgress) -> Dict[str, Any]:
    """
    Patch for one day's routine log.

    Only the date key and the routines map are set; satisfaction, notes and
    other fields of that day stay as stored.
    """
    prefix = f"dailyProgress.{progress.date}"
    return {
        f"{prefix}.date": progress.date,
        f"{prefix}.routines": progress.routines_document(),
    }


def catalog_patch(catalog: RoutineCatalog) -> Dict[str, Any]:
    """Patch replacing the goal's routine settings."""
    return {"routineSettings": catalog.to_document()}


class RoutineRepository(ABC):
    """Read/write access to a goal's routine data."""

    @abstractmethod
    async def read(self, goal_id: str) -> GoalRecord:
        """
        Load a goal with its catalog and daily progress map.

        Raises:
            NotFoundException: Goal doesn't exist
            PersistenceException: Store read failed
            ValidationException: Stored document can't be parsed
        """

    @abstractmethod
    async def write(self, goal_id: str, patch: Dict[str, Any]) -> None:
        """
        Apply a partial update to a goal.

        Raises:
            NotFoundException: Goal doesn't exist
            PersistenceException: Store write failed
        """

    @abstractmethod
    async def find_active_goal_id(self, user_id: str) -> Optional[str]:
        """Most recently updated active goal of a user, or None."""


class MongoRoutineRepository(RoutineRepository):
    """
    Goal documents in MongoDB.
    Pure CRUD - no scheduling or calendar logic.
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "goals"):
        """
        Initialize MongoRoutineRepository.

        Args:
            db: MongoDB database connection
            collection_name: Collection holding goal documents
        """
        self._db = db
        self._goals_collection = db[collection_name]

    @staticmethod
    def _object_id(goal_id: str) -> ObjectId:
        try:
            return ObjectId(goal_id)
        except (InvalidId, TypeError):
            raise NotFoundException(
                message=f"Goal {goal_id} not found",
                code="GOAL_NOT_FOUND",
            )

    async def read(self, goal_id: str) -> GoalRecord:
        object_id = self._object_id(goal_id)

        try:
            doc = await self._goals_collection.find_one({"_id": object_id})
        except PyMongoError as e:
            logger.error(f"Failed to read goal {goal_id}: {e}")
            raise PersistenceException(
                message="Failed to load goal",
                details={"goalId": goal_id},
            ) from e

        if not doc:
            raise NotFoundException(
                message=f"Goal {goal_id} not found",
                code="GOAL_NOT_FOUND",
            )

        try:
            return GoalRecord.from_document(doc)
        except ValidationError as e:
            logger.error(f"Stored goal {goal_id} is malformed: {e}")
            raise ValidationException(
                message=f"Stored goal {goal_id} is malformed",
                code="MALFORMED_GOAL",
                errors=[
                    f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                    for err in e.errors()
                ],
            ) from e

    async def write(self, goal_id: str, patch: Dict[str, Any]) -> None:
        object_id = self._object_id(goal_id)
        update = {**patch, "updatedAt": datetime.now(timezone.utc)}

        try:
            result = await self._goals_collection.update_one(
                {"_id": object_id},
                {"$set": update},
            )
        except PyMongoError as e:
            logger.error(f"Failed to write goal {goal_id}: {e}")
            raise PersistenceException(
                message="Failed to save changes",
                details={"goalId": goal_id},
            ) from e

        if result.matched_count == 0:
            raise NotFoundException(
                message=f"Goal {goal_id} not found",
                code="GOAL_NOT_FOUND",
            )

        logger.info(f"Updated goal {goal_id}: {sorted(patch.keys())}")

    async def find_active_goal_id(self, user_id: str) -> Optional[str]:
        try:
            cursor = self._goals_collection.find(
                {"userId": ObjectId(user_id), "status": "active"},
                {"_id": 1},
            )
            cursor = cursor.sort("updatedAt", -1).limit(1)
            docs = await cursor.to_list(length=1)
        except (InvalidId, TypeError):
            return None
        except PyMongoError as e:
            logger.error(f"Failed to look up active goal for user {user_id}: {e}")
            raise PersistenceException(message="Failed to load active goal") from e

        return str(docs[0]["_id"]) if docs else None
