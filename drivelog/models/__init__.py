from .driving_log import DayEntry, DrivingLog
from .session import Session
from .user import Role, User

__all__ = ["DayEntry", "DrivingLog", "Role", "Session", "User"]
