"""Shared test fixtures for routine core tests."""

import pytest
from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId

from goaltrack.routine.models import GoalRecord


@pytest.fixture
def sample_goal_id():
    return str(ObjectId())


@pytest.fixture
def sample_user_id():
    return str(ObjectId())


@pytest.fixture
def mock_collection():
    collection = AsyncMock()
    # Motor's find() returns a cursor synchronously (not a coroutine),
    # so use MagicMock for it. Async methods like find_one, update_one
    # stay as AsyncMock.
    collection.find = MagicMock()
    collection.update_one.return_value = MagicMock(matched_count=1, modified_count=1)
    return collection


@pytest.fixture
def mock_db(mock_collection):
    db = MagicMock()
    db.__getitem__ = MagicMock(return_value=mock_collection)
    return db


@pytest.fixture
def mock_repository():
    """RoutineRepository double: writes succeed, reads must be configured."""
    repository = MagicMock()
    repository.read = AsyncMock()
    repository.write = AsyncMock(return_value=None)
    repository.find_active_goal_id = AsyncMock(return_value=None)
    return repository


@pytest.fixture
def sample_routine_settings():
    return {
        "sleep": {
            "wakeTime": "06:30",
            "sleepTime": "22:30",
            "naps": [
                {"time": "15:00", "durationMinutes": 30, "label": "Afternoon nap", "icon": "MdBedtime"},
            ],
        },
        "water": {"goal": 8, "current": 3},
        "bath": [
            {"time": "07:00", "durationMinutes": 20, "label": "Morning shower", "icon": "MdOutlineShower"},
        ],
        "exercise": [
            {"time": "14:00", "durationMinutes": 60, "label": "Gym", "icon": "MdOutlineDirectionsRun"},
        ],
        "meal": [
            {"time": "08:00", "durationMinutes": 30, "label": "Breakfast", "icon": "MdOutlineRestaurant",
             "completed": True, "completedAt": datetime(2025, 1, 15, 8, 20)},
            {"time": "13:00", "durationMinutes": 45, "label": "Lunch", "icon": "MdOutlineRestaurant"},
            {"time": "19:30", "durationMinutes": 45, "label": "Dinner", "icon": "MdOutlineRestaurant"},
        ],
        "teeth": [
            {"time": "07:20", "durationMinutes": 5, "label": "Brush teeth", "icon": "MdOutlineCleaningServices"},
        ],
        "lastRoutineResetDate": datetime(2025, 1, 15, 0, 5),
    }


@pytest.fixture
def sample_goal_doc(sample_goal_id, sample_user_id, sample_routine_settings):
    return {
        "_id": ObjectId(sample_goal_id),
        "userId": ObjectId(sample_user_id),
        "name": "Get fit in January",
        "status": "active",
        "startDate": datetime(2025, 1, 1),
        "endDate": datetime(2025, 1, 31),
        "routineSettings": sample_routine_settings,
        "dailyProgress": {
            "2025-01-10": {
                "date": "2025-01-10",
                "satisfaction": 4,
                "notes": "Good day",
                "sessions": [],
                "routines": {"meal": "done", "bath": "skipped"},
            },
        },
        "createdAt": datetime(2024, 12, 31, 18, 0),
        "updatedAt": datetime(2025, 1, 10, 21, 0),
    }


@pytest.fixture
def sample_record(sample_goal_doc):
    return GoalRecord.from_document(sample_goal_doc)


@pytest.fixture
def today():
    return date(2025, 1, 15)


@pytest.fixture
def now():
    return datetime(2025, 1, 15, 14, 30, tzinfo=timezone.utc)
