from .students import StudentStore
from .attendance import AttendanceStore

__all__ = ["StudentStore", "AttendanceStore"]
