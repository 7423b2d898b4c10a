"""
Application exceptions with error codes.

Every failure the routine core can report carries a human-readable message
and a machine-readable code, so callers can show a message and branch on
the code without parsing text.

Example:
    from common.utils import NotFoundException, ValidationException

    async def read(goal_id: str):
        doc = await goals.find_one({"_id": ObjectId(goal_id)})
        if not doc:
            raise NotFoundException("Goal not found", code="GOAL_NOT_FOUND")
        return doc
"""

from typing import Optional, Any, Dict

from common.utils.responses import error_response


class AppException(Exception):
    """
    Base application exception with error code support.

    Provides a consistent error payload across the application.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Any] = None,
    ):
        """
        Create an application exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details

    def to_response(self) -> Dict[str, Any]:
        """Render the exception as a standard error response dict."""
        return error_response(self.message, code=self.code, details=self.details)


class ValidationException(AppException, ValueError):
    """Rejected input: malformed time-of-day, bad duration, bad date."""

    def __init__(
        self,
        message: str = "Validation error",
        code: str = "VALIDATION_ERROR",
        details: Optional[Any] = None,
        errors: Optional[list] = None,
    ):
        detail_info = details
        if errors:
            detail_info = {"errors": errors, **(details or {})}
        super().__init__(message, code, detail_info)


class FutureDateException(ValidationException):
    """A compliance toggle was attempted for a day after today."""

    def __init__(
        self,
        message: str = "Cannot log routines for future dates",
        code: str = "FUTURE_DATE",
        details: Optional[Any] = None,
    ):
        super().__init__(message, code, details)


class NotFoundException(AppException):
    """Goal, catalog or log doesn't exist."""

    def __init__(
        self,
        message: str = "Not found",
        code: str = "NOT_FOUND",
        details: Optional[Any] = None,
    ):
        super().__init__(message, code, details)


class ConflictException(AppException):
    """State conflict, e.g. a write for the same day is still in flight."""

    def __init__(
        self,
        message: str = "Conflict",
        code: str = "CONFLICT",
        details: Optional[Any] = None,
    ):
        super().__init__(message, code, details)


class PersistenceException(AppException):
    """The document store rejected or failed a read/write."""

    def __init__(
        self,
        message: str = "Persistence error",
        code: str = "PERSISTENCE_ERROR",
        details: Optional[Any] = None,
    ):
        super().__init__(message, code, details)
