import uuid
from datetime import datetime, timezone

import pytest

from drivelog.models.user import Role, User
from drivelog.stores.session_store import SessionStore
from drivelog.stores.user_store import UserStore


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """Minimum bcrypt cost so hashing doesn't dominate the test run."""
    import drivelog.auth.user_auth as user_auth
    monkeypatch.setattr(user_auth, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def user_store(tmp_path):
    return UserStore(tmp_path)


@pytest.fixture
def session_store(tmp_path):
    return SessionStore(tmp_path)


@pytest.fixture
def make_user():
    def _make(email=None, role=Role.DRIVER, name="Test Driver", password_hash="x", **fields):
        now = datetime.now(timezone.utc)
        return User(
            id=fields.pop("id", str(uuid.uuid4())),
            email=email or f"{uuid.uuid4().hex[:8]}@example.com",
            name=name,
            password_hash=password_hash,
            role=role,
            created_at=now,
            updated_at=now,
            **fields,
        )
    return _make
