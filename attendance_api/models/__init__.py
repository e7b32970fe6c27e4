# models/__init__.py

from .student import Student
from .attendance import Attendance, today_key
from .errors import (
    ModelError,
    ValidationError,
    DuplicateKeyError,
    AlreadyCheckedInError,
    NotFoundError,
    StorageError,
    ServiceStartingError,
)

__all__ = [
    "Student",
    "Attendance",
    "today_key",
    "ModelError",
    "ValidationError",
    "DuplicateKeyError",
    "AlreadyCheckedInError",
    "NotFoundError",
    "StorageError",
    "ServiceStartingError",
]
