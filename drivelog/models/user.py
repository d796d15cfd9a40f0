"""User model and per-user computed totals"""

from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .driving_log import DayEntry, DrivingLog, get_entry, has_entry

# Rolling window for weekly_average
AVERAGE_WINDOW_DAYS = 28


class Role(str, Enum):
    ADMIN = "admin"
    DRIVER = "driver"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(BaseModel):
    """
    User record for both roles.

    Required day/night hours only mean something for drivers. Immutable:
    use ``model_copy(update=...)`` to derive a modified record.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    name: str
    password_hash: str
    role: Role = Role.DRIVER
    required_day_hours: float = Field(default=0.0, ge=0)
    required_night_hours: float = Field(default=0.0, ge=0)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    driving_log: DrivingLog = Field(default_factory=dict)

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_validator("driving_log", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_driver(self) -> bool:
        return self.role == Role.DRIVER

    def has_entry(self, day: str) -> bool:
        return has_entry(self.driving_log, day)

    def get_entry(self, day: str) -> DayEntry:
        return get_entry(self.driving_log, day)

    def total_day_hours(self) -> float:
        return sum(entry.day_hours for entry in self.driving_log.values())

    def total_night_hours(self) -> float:
        return sum(entry.night_hours for entry in self.driving_log.values())

    def total_hours(self) -> float:
        return self.total_day_hours() + self.total_night_hours()

    def day_progress(self) -> float:
        return _progress(self.total_day_hours(), self.required_day_hours)

    def night_progress(self) -> float:
        return _progress(self.total_night_hours(), self.required_night_hours)

    def weekly_average(self, today: Optional[date] = None) -> float:
        """Average hours per week over the last 28 days, today included"""
        today = today or date.today()
        cutoff = today - timedelta(days=AVERAGE_WINDOW_DAYS)

        total = 0.0
        for day, entry in self.driving_log.items():
            try:
                logged = date.fromisoformat(day)
            except ValueError:
                continue
            if cutoff < logged <= today:
                total += entry.total_hours
        return total / (AVERAGE_WINDOW_DAYS // 7)

    def stats(self, today: Optional[date] = None) -> Dict[str, float]:
        return {
            "total_day_hours": self.total_day_hours(),
            "total_night_hours": self.total_night_hours(),
            "total_hours": self.total_hours(),
            "required_day_hours": self.required_day_hours,
            "required_night_hours": self.required_night_hours,
            "day_progress": self.day_progress(),
            "night_progress": self.night_progress(),
            "weekly_average": self.weekly_average(today),
        }


def _progress(total: float, required: float) -> float:
    if required <= 0:
        return 0.0
    return min(100.0, total / required * 100)
