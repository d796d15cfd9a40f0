"""
Login/logout and session-to-user resolution.
"""

from datetime import datetime, timezone
from typing import Optional, Tuple

from drivelog.auth.user_auth import generate_session_token, verify_password
from drivelog.models.session import Session
from drivelog.models.user import User
from drivelog.stores.session_store import SessionStore
from drivelog.stores.user_store import UserStore
from drivelog.utils.config import SESSION_LIFETIME
from drivelog.utils.exceptions import AuthenticationError, ValidationError
from drivelog.utils.logger import get_logger

logger = get_logger(__name__)


class AuthService:
    def __init__(self, user_store: UserStore, session_store: SessionStore):
        self.user_store = user_store
        self.session_store = session_store

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """Return the user if credentials are valid, else None"""
        user = self.user_store.get_by_email(email)
        if not user:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    def login(self, email: str, password: str) -> Tuple[User, Session]:
        email = (email or "").strip()
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = self.authenticate(email, password)
        if not user:
            logger.info("Failed login", email=email)
            raise AuthenticationError("Invalid email or password")

        now = datetime.now(timezone.utc)
        session = Session(
            token=generate_session_token(),
            user_id=user.id,
            created_at=now,
            expires_at=now + SESSION_LIFETIME,
        )
        self.session_store.create(session)
        logger.info("User logged in", user_id=user.id, role=user.role.value)
        return user, session

    def logout(self, token: Optional[str]) -> None:
        """Invalidate a session token (idempotent)"""
        if token:
            self.session_store.delete(token)

    def user_for_token(self, token: Optional[str]) -> Optional[User]:
        """Validate a session token and return the associated user, or None"""
        if not token:
            return None
        session = self.session_store.get(token)
        if not session:
            return None
        return self.user_store.find_account(session.user_id)
