"""Recording day/night hours against a user's driving log"""

from drivelog.models.driving_log import with_entry, without_entry
from drivelog.models.user import User
from drivelog.stores.user_store import UserStore
from drivelog.utils.exceptions import NotFoundError, ValidationError
from drivelog.utils.logger import get_logger
from drivelog.utils.validators import (
    MAX_HOURS_PER_DAY,
    combine_hours_minutes,
    validate_date,
)

logger = get_logger(__name__)


class DrivingLogService:
    def __init__(self, user_store: UserStore):
        self.user_store = user_store

    def record(
        self,
        user_id: str,
        date: str,
        day_hours: float = 0,
        day_minutes: float = 0,
        night_hours: float = 0,
        night_minutes: float = 0,
        delete: bool = False,
    ) -> User:
        """
        Set (replace) or clear the entry for ``date`` and persist the user.

        Hours and minutes are folded into decimal hours. A zero total is the
        same as ``delete``: the date is removed rather than stored as zeros.
        The change is applied to the stored record, so concurrent edits of
        other dates are kept.
        """
        date = validate_date(date)

        total_day = total_night = 0.0
        if not delete:
            errors = []
            try:
                total_day = combine_hours_minutes(day_hours, day_minutes, "Day hours")
            except ValidationError as e:
                errors.extend(e.errors)
            try:
                total_night = combine_hours_minutes(night_hours, night_minutes, "Night hours")
            except ValidationError as e:
                errors.extend(e.errors)
            if not errors and total_day + total_night > MAX_HOURS_PER_DAY:
                errors.append(f"Day and night hours together cannot exceed {MAX_HOURS_PER_DAY:g}")
            if errors:
                raise ValidationError(errors[0], errors)

        def apply(current: User) -> User:
            if delete:
                log = without_entry(current.driving_log, date)
            else:
                log = with_entry(current.driving_log, date, total_day, total_night)
            return current.model_copy(update={"driving_log": log})

        stored = self.user_store.update(user_id, apply)
        if stored is None:
            raise NotFoundError(f"User '{user_id}' not found")
        logger.info("Recorded hours", user_id=user_id, date=date, has_entry=stored.has_entry(date))
        return stored
