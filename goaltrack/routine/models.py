"""
Pydantic models for the routine scheduling and compliance core.

Field names follow the stored goal document (camelCase), so a model dumps
straight back into the shape the document store holds. Older documents
used a handful of different keys and encodings; those are normalised here
on the way in.
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from common.utils.exceptions import ValidationException
from goaltrack.routine.services.time_window import (
    date_key,
    parse_date_key,
    parse_time_of_day,
    validate_duration,
)


# =============================================================================
# Enumerations
# =============================================================================

class RoutineType(str, Enum):
    """Kinds of daily routine a goal tracks."""
    SLEEP = "sleep"
    BATH = "bath"
    EXERCISE = "exercise"
    MEAL = "meal"
    TEETH = "teeth"
    WATER = "water"


# Catalog lists in timeline flattening order; sleep naps come last.
SCHEDULE_LISTS: Tuple[RoutineType, ...] = (
    RoutineType.BATH,
    RoutineType.EXERCISE,
    RoutineType.MEAL,
    RoutineType.TEETH,
)


class ComplianceMark(str, Enum):
    """Per-day, per-routine status."""
    UNKNOWN = "not_logged"
    DONE = "done"
    SKIPPED = "skipped"

    @classmethod
    def coerce(cls, value: Any) -> "ComplianceMark":
        """
        Normalise any stored encoding of a mark.

        None/False were written by older clients for "not logged", True
        for "logged".
        """
        if isinstance(value, cls):
            return value
        if value is None or value is False:
            return cls.UNKNOWN
        if value is True:
            return cls.DONE
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ValidationException(
            message=f"Unknown compliance mark {value!r}",
            code="INVALID_MARK",
        )


class TimelineStatus(str, Enum):
    """Where a scheduled routine sits relative to now."""
    CURRENT = "current"
    UPCOMING = "upcoming"
    MISSED = "missed"


class NavigationDirection(str, Enum):
    PREV = "prev"
    NEXT = "next"


# =============================================================================
# Routine catalog
# =============================================================================

class ScheduledInstance(BaseModel):
    """One recurring, time-of-day scheduled routine entry."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    time: str = Field(..., validation_alias=AliasChoices("time", "scheduledTime"))
    durationMinutes: int = Field(
        ..., validation_alias=AliasChoices("durationMinutes", "duration")
    )
    label: str = ""
    icon: Optional[str] = None
    completed: Optional[bool] = None
    completedAt: Optional[datetime] = None

    @field_validator("time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        parse_time_of_day(value)
        return value.strip()

    @field_validator("durationMinutes")
    @classmethod
    def _check_duration(cls, value: int) -> int:
        return validate_duration(value)


class SleepSettings(BaseModel):
    """Bedtime/wake time plus the nap schedule."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    wakeTime: Optional[str] = None
    sleepTime: Optional[str] = None
    naps: List[ScheduledInstance] = Field(
        default_factory=list, validation_alias=AliasChoices("naps", "napSchedule")
    )

    @field_validator("wakeTime", "sleepTime")
    @classmethod
    def _check_time(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        parse_time_of_day(value)
        return value.strip()

    @field_validator("naps", mode="before")
    @classmethod
    def _none_to_list(cls, value):
        return [] if value is None else value


class WaterSettings(BaseModel):
    """Daily water intake counter."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    goal: int = Field(8, ge=1, validation_alias=AliasChoices("goal", "waterGoalGlasses"))
    current: int = Field(0, ge=0, validation_alias=AliasChoices("current", "currentWaterGlasses"))


class RoutineCatalog(BaseModel):
    """All scheduled routines of one goal."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    sleep: Optional[SleepSettings] = None
    water: Optional[WaterSettings] = None
    bath: List[ScheduledInstance] = Field(default_factory=list)
    exercise: List[ScheduledInstance] = Field(default_factory=list)
    meal: List[ScheduledInstance] = Field(
        default_factory=list, validation_alias=AliasChoices("meal", "meals")
    )
    teeth: List[ScheduledInstance] = Field(default_factory=list)
    lastRoutineResetDate: Optional[datetime] = None

    @field_validator("bath", "exercise", "meal", "teeth", mode="before")
    @classmethod
    def _none_to_list(cls, value):
        return [] if value is None else value

    def schedules_for(self, routine_type: RoutineType) -> List[ScheduledInstance]:
        """
        Get the mutable schedule list for a routine type.

        Raises:
            ValidationException: For WATER, which has no time-of-day schedule
        """
        if routine_type == RoutineType.WATER:
            raise ValidationException(
                message="Water intake has no scheduled routines",
                code="NOT_SCHEDULABLE",
            )
        if routine_type == RoutineType.SLEEP:
            return self.sleep.naps if self.sleep else []
        return getattr(self, routine_type.value)

    def iter_instances(self) -> Iterator[Tuple[RoutineType, int, ScheduledInstance]]:
        """Yield (type, position, instance) for every scheduled routine, naps last."""
        for routine_type in SCHEDULE_LISTS:
            for index, instance in enumerate(getattr(self, routine_type.value)):
                yield routine_type, index, instance
        if self.sleep:
            for index, nap in enumerate(self.sleep.naps):
                yield RoutineType.SLEEP, index, nap

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump()


# =============================================================================
# Goal and daily progress
# =============================================================================

class Goal(BaseModel):
    """The goal whose date interval bounds scheduling and calendar views."""
    model_config = ConfigDict(extra="ignore")

    id: str
    userId: Optional[str] = None
    name: str = ""
    status: str = "active"
    startDate: Optional[date] = None
    endDate: Optional[date] = None

    @field_validator("startDate", "endDate", mode="before")
    @classmethod
    def _datetime_to_date(cls, value):
        if isinstance(value, datetime):
            return value.date()
        return value

    @property
    def has_interval(self) -> bool:
        return (
            self.startDate is not None
            and self.endDate is not None
            and self.startDate <= self.endDate
        )

    def contains(self, day: date) -> bool:
        """Inclusive interval membership; False when there is no interval."""
        return self.has_interval and self.startDate <= day <= self.endDate


class DailyProgress(BaseModel):
    """
    One day's log for a goal.

    Only `date` and `routines` belong to the routine core. Satisfaction,
    notes, sessions and the like are carried through untouched as extra
    fields.
    """
    model_config = ConfigDict(extra="allow")

    date: str
    routines: Dict[RoutineType, ComplianceMark] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _legacy_routine_log(cls, data):
        if isinstance(data, dict) and "routineLog" in data and "routines" not in data:
            data = dict(data)
            data["routines"] = data.pop("routineLog")
        return data

    @field_validator("date")
    @classmethod
    def _check_date(cls, value: str) -> str:
        parse_date_key(value)
        return value

    @field_validator("routines", mode="before")
    @classmethod
    def _coerce_marks(cls, value):
        if value is None:
            return {}
        return {key: ComplianceMark.coerce(mark) for key, mark in dict(value).items()}

    @property
    def day(self) -> date:
        return parse_date_key(self.date)

    def mark_for(self, routine_type: RoutineType) -> ComplianceMark:
        return self.routines.get(routine_type, ComplianceMark.UNKNOWN)

    def routines_document(self) -> Dict[str, str]:
        return {routine_type.value: mark.value for routine_type, mark in self.routines.items()}

    def to_document(self) -> Dict[str, Any]:
        document = self.model_dump()
        document["routines"] = self.routines_document()
        return document


class GoalRecord(BaseModel):
    """
    Everything the routine core reads for one goal.

    Owned by the caller; services only mutate it after the document store
    has confirmed a write.
    """
    goal: Goal
    catalog: RoutineCatalog = Field(default_factory=RoutineCatalog)
    dailyProgress: Dict[str, DailyProgress] = Field(default_factory=dict)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "GoalRecord":
        """
        Build a record from a raw goal document.

        Goals created before explicit start dates existed fall back to
        createdAt as their start.
        """
        goal_data = {
            "id": str(doc["_id"]),
            "userId": str(doc["userId"]) if doc.get("userId") is not None else None,
            "name": doc.get("name", ""),
            "status": doc.get("status", "active"),
            "startDate": doc.get("startDate") or doc.get("createdAt"),
            "endDate": doc.get("endDate"),
        }

        progress: Dict[str, DailyProgress] = {}
        for key, entry in (doc.get("dailyProgress") or {}).items():
            entry = dict(entry or {})
            entry.setdefault("date", key)
            progress[key] = DailyProgress.model_validate(entry)

        return cls(
            goal=Goal.model_validate(goal_data),
            catalog=RoutineCatalog.model_validate(doc.get("routineSettings") or {}),
            dailyProgress=progress,
        )

    def progress_for(self, day: date) -> Optional[DailyProgress]:
        return self.dailyProgress.get(date_key(day))


# =============================================================================
# View models
# =============================================================================

class ClassifiedEntry(BaseModel):
    """A scheduled routine placed on today's timeline."""
    type: RoutineType
    index: int
    label: str
    time: str
    durationMinutes: int
    icon: Optional[str] = None
    status: TimelineStatus
    minutesUntil: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


@dataclass(frozen=True, order=True)
class Month:
    """A calendar month; ordering is chronological."""
    year: int
    month: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValidationException(
                message=f"Invalid month {self.month}",
                code="INVALID_MONTH",
            )

    @classmethod
    def of(cls, day: date) -> "Month":
        return cls(day.year, day.month)

    @classmethod
    def parse(cls, value: str) -> "Month":
        """Parse "YYYY-MM"."""
        try:
            year, month = value.split("-")
            return cls(int(year), int(month))
        except (AttributeError, ValueError):
            raise ValidationException(
                message=f"Invalid month {value!r}, expected YYYY-MM",
                code="INVALID_MONTH",
            )

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, calendar.monthrange(self.year, self.month)[1])

    def shift(self, months: int) -> "Month":
        index = self.year * 12 + (self.month - 1) + months
        return Month(index // 12, index % 12 + 1)

    def days(self) -> List[date]:
        count = (self.last_day - self.first_day).days + 1
        return [self.first_day + timedelta(days=offset) for offset in range(count)]

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"
