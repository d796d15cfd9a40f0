"""
Month calendar grid for the driver dashboard.

Entry lookups are passed in as callbacks so this module never touches
storage.
"""

import calendar
from dataclasses import dataclass, field
from datetime import MAXYEAR, MINYEAR, date, datetime, timedelta
from typing import Any, Callable, List, Optional

MAX_CELLS = 42
SUNDAY = 6  # date.weekday()


@dataclass
class CalendarDay:
    day: int
    date: str
    is_other_month: bool
    is_today: bool
    has_entry: bool = False
    entry: Any = None


@dataclass
class CalendarData:
    year: int
    month: int
    month_name: str
    prev_month: int
    prev_year: int
    next_month: int
    next_year: int
    days: List[CalendarDay] = field(default_factory=list)


def get_calendar_data(
    year: int,
    month: int,
    has_entry: Optional[Callable[[str], bool]] = None,
    get_entry: Optional[Callable[[str], Any]] = None,
    today: Optional[date] = None,
) -> CalendarData:
    """
    Build the grid for ``year``/``month``.

    Starts on the Sunday on/before the 1st and stops once the month is
    covered and the week is complete (at most 6 weeks). An out-of-range
    month falls back to the current month.
    """
    today = today or date.today()
    if not 1 <= month <= 12 or not MINYEAR < year < MAXYEAR:
        year, month = today.year, today.month

    first = date(year, month, 1)
    last = date(year, month, calendar.monthrange(year, month)[1])
    prev_year, prev_month = (year - 1, 12) if month == 1 else (year, month - 1)
    next_year, next_month = (year + 1, 1) if month == 12 else (year, month + 1)

    # weekday(): Monday=0 .. Sunday=6
    current = first - timedelta(days=(first.weekday() + 1) % 7)
    today_iso = today.isoformat()

    days = []
    while len(days) < MAX_CELLS:
        iso = current.isoformat()
        in_month = current.month == month and current.year == year
        cell = CalendarDay(
            day=current.day,
            date=iso,
            is_other_month=not in_month,
            is_today=iso == today_iso,
        )
        if in_month and has_entry is not None:
            cell.has_entry = bool(has_entry(iso))
            if cell.has_entry and get_entry is not None:
                cell.entry = get_entry(iso)
        days.append(cell)

        current += timedelta(days=1)
        if current > last and current.weekday() == SUNDAY:
            break

    return CalendarData(
        year=year,
        month=month,
        month_name=calendar.month_name[month],
        prev_month=prev_month,
        prev_year=prev_year,
        next_month=next_month,
        next_year=next_year,
        days=days,
    )


def get_greeting(hour: Optional[int] = None) -> str:
    """Time-of-day greeting for the dashboard header"""
    if hour is None:
        hour = datetime.now().hour
    if 5 <= hour < 12:
        return "Good morning"
    if 12 <= hour < 17:
        return "Good afternoon"
    if 17 <= hour < 21:
        return "Good evening"
    return "Good night"
