"""Request/response models for the JSON API"""

from typing import Any, Dict, Optional

from pydantic import BaseModel

from drivelog.models.user import User


class LoginRequest(BaseModel):
    email: str
    password: str


class LogHoursRequest(BaseModel):
    date: str
    day_hours: float = 0
    day_minutes: float = 0
    night_hours: float = 0
    night_minutes: float = 0
    delete: bool = False


class ProfileUpdateRequest(BaseModel):
    name: str
    current_password: str = ""
    new_password: str = ""


class CreateUserRequest(BaseModel):
    email: str
    name: str
    password: str
    role: str = "driver"
    required_day_hours: float = 0
    required_night_hours: float = 0


class UpdateUserRequest(BaseModel):
    email: str
    name: str
    password: str = ""
    required_day_hours: float = 0
    required_night_hours: float = 0


def user_public(user: User, include_log: bool = False) -> Dict[str, Any]:
    """Serialize a user without the password hash"""
    data: Dict[str, Any] = {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role.value,
        "required_day_hours": user.required_day_hours,
        "required_night_hours": user.required_night_hours,
        "created_at": user.created_at.isoformat(),
        "updated_at": user.updated_at.isoformat(),
    }
    if include_log:
        data["driving_log"] = {
            day: entry.model_dump() for day, entry in sorted(user.driving_log.items())
        }
    return data


def user_with_stats(user: User, stats: Optional[Dict[str, float]] = None) -> Dict[str, Any]:
    data = user_public(user)
    data["stats"] = stats if stats is not None else user.stats()
    return data
