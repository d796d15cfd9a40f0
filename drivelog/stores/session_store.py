"""
Session storage: every session lives in one JSON document,
``<data_dir>/sessions.json`` -> {"sessions": {token: {...}}}.

The whole collection is loaded and rewritten together, so every operation
is a read-modify-write under the store's own lock.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from drivelog.core.files import atomic_write_json, read_json
from drivelog.core.locks import RWLock
from drivelog.models.session import Session
from drivelog.utils.exceptions import StorageError
from drivelog.utils.logger import get_logger

logger = get_logger(__name__)

SESSIONS_FILENAME = "sessions.json"


class SessionStore:
    """Owned, locked aggregate over the sessions document"""

    def __init__(self, data_dir: Path):
        self.path = Path(data_dir) / SESSIONS_FILENAME
        self._lock = RWLock()

    def create(self, session: Session) -> None:
        """Insert or overwrite by token"""
        with self._lock.write():
            raw = self._load_raw()
            raw[session.token] = session.model_dump(mode="json")
            self._save_raw(raw)

    def get(self, token: str) -> Optional[Session]:
        """Live session for ``token``; expired sessions are treated as missing"""
        if not token:
            return None
        with self._lock.read():
            data = self._load_raw().get(token)
        if data is None:
            return None
        session = _parse(token, data)
        if session is None or session.is_expired():
            return None
        return session

    def delete(self, token: str) -> None:
        if not token:
            return
        with self._lock.write():
            raw = self._load_raw()
            if token not in raw:
                return
            del raw[token]
            self._save_raw(raw)

    def delete_for_user(self, user_id: str) -> int:
        """Drop every session belonging to ``user_id``"""
        with self._lock.write():
            raw = self._load_raw()
            doomed = [t for t, data in raw.items() if isinstance(data, dict) and data.get("user_id") == user_id]
            for token in doomed:
                del raw[token]
            if doomed:
                self._save_raw(raw)
        return len(doomed)

    def sweep_expired(self, now: Optional[datetime] = None) -> int:
        """
        Remove expired (and undecodable) sessions; return how many went.

        Survivors are written back from their stored form untouched.
        """
        now = now or datetime.now(timezone.utc)
        with self._lock.write():
            raw = self._load_raw()
            doomed = []
            for token, data in raw.items():
                session = _parse(token, data)
                if session is None or session.is_expired(now):
                    doomed.append(token)
            for token in doomed:
                del raw[token]
            if doomed:
                self._save_raw(raw)
        if doomed:
            logger.info("Swept expired sessions", removed=len(doomed))
        return len(doomed)

    def count(self) -> int:
        with self._lock.read():
            return len(self._load_raw())

    # --- internals (caller holds the lock) ---

    def _load_raw(self) -> Dict[str, Any]:
        try:
            doc = read_json(self.path)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt sessions file {self.path}: {e}", str(self.path))
        except OSError as e:
            raise StorageError(f"Failed to read sessions from {self.path}: {e}", str(self.path))

        sessions = doc.get("sessions") if isinstance(doc, dict) else None
        if sessions is None:
            return {}
        if not isinstance(sessions, dict):
            raise StorageError(f"Malformed sessions file {self.path}", str(self.path))
        return sessions

    def _save_raw(self, sessions: Dict[str, Any]) -> None:
        try:
            atomic_write_json(self.path, {"sessions": sessions})
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to save sessions to {self.path}: {e}", str(self.path))


def _parse(token: str, data: Any) -> Optional[Session]:
    if not isinstance(data, dict):
        return None
    try:
        return Session.model_validate({**data, "token": data.get("token", token)})
    except PydanticValidationError:
        logger.warning("Ignoring malformed session record")
        return None
