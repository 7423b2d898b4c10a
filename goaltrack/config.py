"""
Goal tracking application settings.

Extends the base settings with routine-specific configuration.
"""

from typing import Optional

import pytz

from common.config import BaseAppSettings


class Settings(BaseAppSettings):
    """Routine scheduling and compliance settings."""

    # ==========================================================================
    # Storage
    # ==========================================================================
    GOALS_COLLECTION: str = "goals"

    # ==========================================================================
    # Timeline Settings
    # ==========================================================================
    # How often the timeline is re-derived
    TIMELINE_REFRESH_SECONDS: int = 60

    # Instances starting within this many minutes count as upcoming
    UPCOMING_WINDOW_MINUTES: int = 60

    # Wall-clock zone that "today" is evaluated in
    TIMEZONE: str = "UTC"

    # User whose active goal the timeline job follows
    ACTIVE_USER_ID: Optional[str] = None

    def get_timezone(self):
        """Get the configured pytz timezone, falling back to UTC."""
        try:
            return pytz.timezone(self.TIMEZONE)
        except pytz.UnknownTimeZoneError:
            return pytz.utc


# Global settings instance
settings = Settings()
