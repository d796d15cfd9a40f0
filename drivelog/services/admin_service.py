"""
Admin user management: create/edit/delete accounts, driver statistics and
editing a driver's logged hours.
"""

import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from drivelog.auth.user_auth import hash_password
from drivelog.models.user import Role, User
from drivelog.stores.session_store import SessionStore
from drivelog.stores.user_store import UserStore
from drivelog.utils.exceptions import LastAdminError, NotFoundError, ValidationError
from drivelog.utils.logger import get_logger
from drivelog.utils.validators import (
    validate_email,
    validate_name,
    validate_password,
    validate_required_hours,
)
from .driving_log_service import DrivingLogService

logger = get_logger(__name__)


def _parse_role(role: Any) -> Role:
    try:
        return Role(role)
    except ValueError:
        return Role.DRIVER


def _collect(errors: List[str], validator, *args):
    try:
        return validator(*args)
    except ValidationError as e:
        errors.extend(e.errors)
        return None


class AdminService:
    def __init__(
        self,
        user_store: UserStore,
        session_store: SessionStore,
        driving_log_service: Optional[DrivingLogService] = None,
    ):
        self.user_store = user_store
        self.session_store = session_store
        self.driving_log_service = driving_log_service or DrivingLogService(user_store)

    def get_user(self, user_id: str) -> User:
        user = self.user_store.get(user_id)
        if user is None:
            raise NotFoundError(f"User '{user_id}' not found")
        return user

    def list_users(self) -> List[User]:
        return self.user_store.list_all()

    def driver_overview(self, today: Optional[date] = None) -> List[Dict[str, Any]]:
        """Drivers with their computed totals, for the admin dashboard"""
        return [
            {"user": driver, "stats": driver.stats(today)}
            for driver in sorted(self.user_store.list_drivers(), key=lambda u: u.name.lower())
        ]

    def create_user(
        self,
        email: str,
        name: str,
        password: str,
        role: Any = Role.DRIVER,
        required_day_hours: float = 0,
        required_night_hours: float = 0,
    ) -> User:
        errors: List[str] = []
        email = _collect(errors, validate_email, email)
        name = _collect(errors, validate_name, name)
        password = _collect(errors, validate_password, password)
        day = _collect(errors, validate_required_hours, required_day_hours, "Required day hours")
        night = _collect(errors, validate_required_hours, required_night_hours, "Required night hours")
        if errors:
            raise ValidationError(errors[0], errors)

        if self.user_store.get_by_email(email) is not None:
            raise ValidationError("Email already in use")

        now = datetime.now(timezone.utc)
        user = User(
            id=str(uuid.uuid4()),
            email=email,
            name=name,
            password_hash=hash_password(password),
            role=_parse_role(role),
            required_day_hours=day,
            required_night_hours=night,
            created_at=now,
            updated_at=now,
        )
        stored = self.user_store.save(user)
        logger.info("Admin created user", user_id=stored.id, role=stored.role.value)
        return stored

    def update_user(
        self,
        user_id: str,
        email: str,
        name: str,
        password: str = "",
        required_day_hours: float = 0,
        required_night_hours: float = 0,
    ) -> User:
        """
        Edit a pool user. Another admin's password cannot be changed here;
        a supplied password for an admin account is ignored.
        """
        user = self.get_user(user_id)

        errors: List[str] = []
        email = _collect(errors, validate_email, email)
        name = _collect(errors, validate_name, name)
        day = _collect(errors, validate_required_hours, required_day_hours, "Required day hours")
        night = _collect(errors, validate_required_hours, required_night_hours, "Required night hours")
        can_change_password = not user.is_admin
        if password and can_change_password:
            _collect(errors, validate_password, password)
        if errors:
            raise ValidationError(errors[0], errors)

        existing = self.user_store.get_by_email(email)
        if existing is not None and existing.id != user.id:
            raise ValidationError("Email already in use")

        updates: Dict[str, Any] = {
            "email": email,
            "name": name,
            "required_day_hours": day,
            "required_night_hours": night,
        }
        if password and can_change_password:
            updates["password_hash"] = hash_password(password)

        stored = self.user_store.update(user.id, lambda current: current.model_copy(update=updates))
        if stored is None:
            raise NotFoundError(f"User '{user_id}' not found")
        logger.info("Admin updated user", user_id=user.id)
        return stored

    def delete_user(self, user_id: str) -> None:
        """
        Delete a pool user and drop their sessions.

        The primary admin slot cannot be deleted here, and no deletion may
        leave zero admins (primary slot and admin-role pool users counted
        together).
        """
        admins = self.user_store.list_admins()
        is_admin = any(a.id == user_id for a in admins)
        if is_admin and len(admins) <= 1:
            raise LastAdminError("Cannot delete the last admin user")
        if self.user_store.is_primary_admin(user_id):
            raise ValidationError("The primary administrator account cannot be deleted")

        self.get_user(user_id)

        self.user_store.delete(user_id)
        removed = self.session_store.delete_for_user(user_id)
        logger.info("Admin deleted user", user_id=user_id, sessions_removed=removed)

    def update_hours(self, user_id: str, entry_date: str, **hours: Any) -> User:
        """Edit one date of a pool user's log (same rules as self-logging)"""
        self.get_user(user_id)
        return self.driving_log_service.record(user_id, entry_date, **hours)
