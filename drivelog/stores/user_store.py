"""
User storage with JSON-file persistence.

One file per user under ``<data_dir>/users/<id>.json`` plus a single
primary admin slot in ``<data_dir>/admin.json``. A single reader/writer
lock guards all user-file I/O; there is no in-memory cache.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from drivelog.core.files import atomic_write_json, read_json
from drivelog.core.locks import RWLock
from drivelog.models.user import Role, User
from drivelog.utils.exceptions import StorageError, ValidationError
from drivelog.utils.logger import get_logger

logger = get_logger(__name__)

USERS_DIRNAME = "users"
ADMIN_FILENAME = "admin.json"
RECORD_SUFFIX = ".json"


def _is_safe_id(user_id: str) -> bool:
    return bool(user_id) and not any(c in user_id for c in ("/", "\\", "\0")) and user_id not in (".", "..")


class UserStore:
    """Flat-file user store (injected, not a singleton)"""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.users_dir = self.data_dir / USERS_DIRNAME
        self.admin_path = self.data_dir / ADMIN_FILENAME
        self._lock = RWLock()

        try:
            self.users_dir.mkdir(parents=True, exist_ok=True, mode=0o700)
        except OSError as e:
            raise StorageError(f"Failed to create users directory {self.users_dir}: {e}", str(self.users_dir))

    # --- single records ---

    def get(self, user_id: str) -> Optional[User]:
        """Load one pool user; None if no record exists"""
        if not _is_safe_id(user_id):
            return None
        with self._lock.read():
            return self._read_user(self._user_path(user_id))

    def save(self, user: User) -> User:
        """Create or overwrite a pool user; stamps updated_at and returns the stored copy"""
        if not _is_safe_id(user.id):
            raise ValidationError(f"Invalid user id: {user.id!r}")
        stored = user.model_copy(update={"updated_at": datetime.now(timezone.utc)})
        with self._lock.write():
            self._write_user(self._user_path(user.id), stored)
        logger.info("Saved user", user_id=user.id, role=stored.role.value)
        return stored

    def delete(self, user_id: str) -> None:
        """Remove a pool user; missing records are not an error"""
        if not _is_safe_id(user_id):
            return
        path = self._user_path(user_id)
        with self._lock.write():
            try:
                path.unlink()
            except FileNotFoundError:
                return
            except OSError as e:
                raise StorageError(f"Failed to delete user {user_id}: {e}", str(path))
        logger.info("Deleted user", user_id=user_id)

    def update(self, user_id: str, change: Callable[[User], User]) -> Optional[User]:
        """
        Read-modify-write one account under the write lock.

        ``change`` gets the freshly read record and returns the new one.
        The primary admin slot is resolved first, then the pool. Returns the
        stored copy, or None if no such account exists. Anything ``change``
        raises propagates and nothing is written.
        """
        with self._lock.write():
            admin = self._read_user(self.admin_path)
            if admin is not None and admin.id == user_id:
                path, current = self.admin_path, admin
            else:
                if not _is_safe_id(user_id):
                    return None
                path = self._user_path(user_id)
                current = self._read_user(path)
                if current is None:
                    return None
            stored = change(current).model_copy(
                update={"id": current.id, "updated_at": datetime.now(timezone.utc)}
            )
            self._write_user(path, stored)
        logger.info("Updated user", user_id=user_id)
        return stored

    # --- primary admin slot ---

    def get_admin(self) -> Optional[User]:
        with self._lock.read():
            return self._read_user(self.admin_path)

    def save_admin(self, admin: User) -> User:
        stored = admin.model_copy(update={"updated_at": datetime.now(timezone.utc)})
        with self._lock.write():
            self._write_user(self.admin_path, stored)
        logger.info("Saved primary admin", user_id=admin.id)
        return stored

    def is_primary_admin(self, user_id: str) -> bool:
        admin = self.get_admin()
        return admin is not None and admin.id == user_id

    # --- lookups / listings ---

    def get_by_email(self, email: str) -> Optional[User]:
        """Exact (case-sensitive) email match; the admin slot is checked first"""
        with self._lock.read():
            admin = self._read_user(self.admin_path)
            if admin is not None and admin.email == email:
                return admin
            for user in self._list_all():
                if user.email == email:
                    return user
        return None

    def find_account(self, user_id: str) -> Optional[User]:
        """Resolve an id against the admin slot first, then the pool"""
        with self._lock.read():
            admin = self._read_user(self.admin_path)
            if admin is not None and admin.id == user_id:
                return admin
            if not _is_safe_id(user_id):
                return None
            return self._read_user(self._user_path(user_id))

    def list_all(self) -> List[User]:
        """Every readable pool user; corrupt records are skipped"""
        with self._lock.read():
            return self._list_all()

    def list_by_role(self, role: Role) -> List[User]:
        return [u for u in self.list_all() if u.role == role]

    def list_drivers(self) -> List[User]:
        return self.list_by_role(Role.DRIVER)

    def list_admins(self) -> List[User]:
        """Primary admin plus admin-role pool users, de-duplicated by id"""
        with self._lock.read():
            admins: Dict[str, User] = {}
            primary = self._read_user(self.admin_path)
            if primary is not None:
                admins[primary.id] = primary
            for user in self._list_all():
                if user.role == Role.ADMIN:
                    admins.setdefault(user.id, user)
        return list(admins.values())

    # --- internals (caller holds the lock) ---

    def _user_path(self, user_id: str) -> Path:
        return self.users_dir / f"{user_id}{RECORD_SUFFIX}"

    def _read_user(self, path: Path) -> Optional[User]:
        try:
            raw = read_json(path)
        except FileNotFoundError:
            return None
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt user record {path}: {e}", str(path))
        except OSError as e:
            raise StorageError(f"Failed to read user record {path}: {e}", str(path))
        try:
            return User.model_validate(raw)
        except PydanticValidationError as e:
            raise StorageError(f"Invalid user record {path}: {e}", str(path))

    def _write_user(self, path: Path, user: User) -> None:
        try:
            atomic_write_json(path, user.model_dump(mode="json"))
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to save user to {path}: {e}", str(path))

    def _list_all(self) -> List[User]:
        try:
            entries = sorted(self.users_dir.iterdir())
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageError(f"Failed to list {self.users_dir}: {e}", str(self.users_dir))

        users = []
        for path in entries:
            if path.suffix != RECORD_SUFFIX or path.name.startswith(".") or not path.is_file():
                continue
            try:
                user = self._read_user(path)
            except StorageError as e:
                logger.warning("Skipping unreadable user record", path=str(path), error=str(e))
                continue
            if user is not None:
                users.append(user)
        return users
