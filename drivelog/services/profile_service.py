"""Self-service profile updates (name and password) for both roles"""

from typing import Tuple

from drivelog.auth.user_auth import hash_password, verify_password
from drivelog.models.user import User
from drivelog.stores.user_store import UserStore
from drivelog.utils.exceptions import NotFoundError, ValidationError
from drivelog.utils.validators import validate_name, validate_password


class ProfileService:
    def __init__(self, user_store: UserStore):
        self.user_store = user_store

    def update_profile(
        self,
        user_id: str,
        name: str,
        current_password: str = "",
        new_password: str = "",
    ) -> Tuple[User, str]:
        """Returns the stored user and a success message; raises ValidationError with all problems"""
        user = self.user_store.find_account(user_id)
        if user is None:
            raise NotFoundError(f"User '{user_id}' not found")

        errors = []

        try:
            name = validate_name(name)
        except ValidationError as e:
            errors.extend(e.errors)

        if new_password:
            if not current_password:
                errors.append("Current password is required to set a new password")
            elif not verify_password(current_password, user.password_hash):
                errors.append("Current password is incorrect")
            try:
                validate_password(new_password)
            except ValidationError as e:
                errors.extend(e.errors)

        if errors:
            raise ValidationError(errors[0], errors)

        # Hashed before the store lock is taken
        updates = {"name": name}
        if new_password:
            updates["password_hash"] = hash_password(new_password)
            message = "Profile and password updated successfully"
        else:
            message = "Profile updated successfully"

        # The store writes the primary admin back to its own slot
        stored = self.user_store.update(user_id, lambda current: current.model_copy(update=updates))
        if stored is None:
            raise NotFoundError(f"User '{user_id}' not found")
        return stored, message
