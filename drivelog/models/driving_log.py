"""Driving log models: per-date day/night hours"""

from typing import Dict

from pydantic import BaseModel, ConfigDict, Field


class DayEntry(BaseModel):
    """Hours logged for a single calendar date"""

    model_config = ConfigDict(frozen=True)

    day_hours: float = Field(default=0.0, ge=0)
    night_hours: float = Field(default=0.0, ge=0)

    @property
    def total_hours(self) -> float:
        return self.day_hours + self.night_hours

    def is_empty(self) -> bool:
        return self.day_hours <= 0 and self.night_hours <= 0


# YYYY-MM-DD -> DayEntry
DrivingLog = Dict[str, DayEntry]


def has_entry(log: DrivingLog, date: str) -> bool:
    """True only when a stored entry carries some hours; zero and absent are the same"""
    entry = log.get(date)
    return entry is not None and not entry.is_empty()


def get_entry(log: DrivingLog, date: str) -> DayEntry:
    return log.get(date) or DayEntry()


def with_entry(log: DrivingLog, date: str, day_hours: float, night_hours: float) -> DrivingLog:
    """
    Return a copy of ``log`` with ``date`` set to the given hours.

    An all-zero entry removes the date instead of storing zeros.
    """
    updated = dict(log)
    entry = DayEntry(day_hours=day_hours, night_hours=night_hours)
    if entry.is_empty():
        updated.pop(date, None)
    else:
        updated[date] = entry
    return updated


def without_entry(log: DrivingLog, date: str) -> DrivingLog:
    updated = dict(log)
    updated.pop(date, None)
    return updated
