"""
Routine catalog validation.

Validates raw schedule data before it replaces a goal's routine settings.
"""

from typing import Any, Dict, Optional, Tuple

from common.utils.exceptions import ValidationException
from goaltrack.routine.services.time_window import parse_time_of_day, validate_duration


class CatalogValidator:
    """
    Validates routine settings against the scheduling rules.
    """

    SCHEDULE_KEYS = ["bath", "exercise", "meal", "teeth"]

    MAX_LABEL_LENGTH = 100

    @classmethod
    def validate_instance(cls, entry: Any, where: str) -> Tuple[bool, Optional[str]]:
        """
        Validate one scheduled entry.

        Args:
            entry: dict with time, durationMinutes (or duration), label
            where: Position used in error messages, e.g. "meal[2]"

        Returns:
            tuple of (is_valid, error_message)
        """
        if not isinstance(entry, dict):
            return False, f"{where} must be an object"

        try:
            parse_time_of_day(entry.get("time", entry.get("scheduledTime")))
        except ValidationException as e:
            return False, f"{where}: {e.message}"

        duration = entry.get("durationMinutes", entry.get("duration"))
        try:
            validate_duration(duration)
        except ValidationException as e:
            return False, f"{where}: {e.message}"

        label = entry.get("label")
        if not isinstance(label, str) or not label.strip():
            return False, f"{where}: label cannot be empty"
        if len(label.strip()) > cls.MAX_LABEL_LENGTH:
            return False, f"{where}: label cannot exceed {cls.MAX_LABEL_LENGTH} characters"

        return True, None

    @classmethod
    def validate(cls, settings: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
        """
        Validate every schedule list, the sleep block and the water block.

        Args:
            settings: Raw routineSettings dict

        Returns:
            tuple of (is_valid, error_message)
        """
        for key in cls.SCHEDULE_KEYS:
            entries = settings.get(key) or []
            if not isinstance(entries, list):
                return False, f"Field '{key}' must be a list"
            for index, entry in enumerate(entries):
                is_valid, error = cls.validate_instance(entry, f"{key}[{index}]")
                if not is_valid:
                    return False, error

        sleep = settings.get("sleep")
        if sleep is not None and not isinstance(sleep, dict):
            return False, "Field 'sleep' must be an object"
        if sleep is not None:
            for field in ("wakeTime", "sleepTime"):
                if sleep.get(field) is not None:
                    try:
                        parse_time_of_day(sleep[field])
                    except ValidationException as e:
                        return False, f"sleep.{field}: {e.message}"
            for index, nap in enumerate(sleep.get("naps") or []):
                is_valid, error = cls.validate_instance(nap, f"sleep.naps[{index}]")
                if not is_valid:
                    return False, error

        water = settings.get("water")
        if water is not None and not isinstance(water, dict):
            return False, "Field 'water' must be an object"
        if water is not None:
            goal = water.get("goal", water.get("waterGoalGlasses"))
            if goal is not None and (isinstance(goal, bool) or not isinstance(goal, int) or goal < 1):
                return False, "water.goal must be at least 1"

        return True, None
