"""
Utilities module - Common helpers for responses and exceptions.
"""

from common.utils.responses import success_response, error_response
from common.utils.exceptions import (
    AppException,
    ValidationException,
    FutureDateException,
    NotFoundException,
    ConflictException,
    PersistenceException,
)

__all__ = [
    "success_response",
    "error_response",
    "AppException",
    "ValidationException",
    "FutureDateException",
    "NotFoundException",
    "ConflictException",
    "PersistenceException",
]
