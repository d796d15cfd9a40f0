"""Input validators; each raises ValidationError or returns the cleaned value"""

import math
import re
from datetime import date

from .exceptions import ValidationError

EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_BYTES = 72  # bcrypt input limit
MAX_NAME_LENGTH = 100
MAX_HOURS_PER_DAY = 24.0


def validate_email(email: str) -> str:
    email = (email or "").strip()
    if not email:
        raise ValidationError("Email is required")
    if not EMAIL_RE.match(email):
        raise ValidationError("Email address is not valid")
    return email


def validate_password(password: str) -> str:
    password = password or ""
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")
    return password


def validate_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Name is required")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"Name must be less than {MAX_NAME_LENGTH} characters")
    return name


def validate_date(value: str) -> str:
    """YYYY-MM-DD that is also a real calendar date"""
    value = (value or "").strip()
    if not value:
        raise ValidationError("Date is required")
    if not DATE_RE.match(value):
        raise ValidationError("Date must be in YYYY-MM-DD format")
    try:
        date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"{value} is not a valid date")
    return value


def validate_hours(hours: float, label: str = "Hours") -> float:
    if hours is None or not math.isfinite(hours):
        raise ValidationError(f"{label} must be a number")
    if hours < 0:
        raise ValidationError(f"{label} cannot be negative")
    if hours > MAX_HOURS_PER_DAY:
        raise ValidationError(f"{label} cannot exceed {MAX_HOURS_PER_DAY:g}")
    return float(hours)


def combine_hours_minutes(hours: float, minutes: float, label: str = "Hours") -> float:
    """Decimal hours from an hours + minutes pair"""
    hours = hours or 0.0
    minutes = minutes or 0.0
    if not math.isfinite(hours) or not math.isfinite(minutes):
        raise ValidationError(f"{label} must be a number")
    if hours < 0 or minutes < 0:
        raise ValidationError(f"{label} cannot be negative")
    if minutes >= 60:
        raise ValidationError(f"{label}: minutes must be less than 60")
    return validate_hours(hours + minutes / 60, label)


def validate_required_hours(hours: float, label: str = "Required hours") -> float:
    hours = 0.0 if hours is None else hours
    if not math.isfinite(hours):
        raise ValidationError(f"{label} must be a number")
    if hours < 0:
        raise ValidationError(f"{label} cannot be negative")
    return float(hours)
