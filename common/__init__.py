"""
Common library for reusable infrastructure components.

- database: Async MongoDB connection
- utils: Standard responses and exceptions
- config: Base settings class
"""

from common.database import MongoDB
from common.utils import (
    success_response,
    error_response,
    AppException,
    ValidationException,
    FutureDateException,
    NotFoundException,
    ConflictException,
    PersistenceException,
)
from common.config import BaseAppSettings

__all__ = [
    # Database
    "MongoDB",
    # Utils
    "success_response",
    "error_response",
    "AppException",
    "ValidationException",
    "FutureDateException",
    "NotFoundException",
    "ConflictException",
    "PersistenceException",
    # Config
    "BaseAppSettings",
]
