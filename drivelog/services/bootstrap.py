"""
First-run initialization: make sure a primary admin exists before serving.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from rich.console import Console
from rich.panel import Panel

from drivelog.models.user import Role, User
from drivelog.stores.user_store import UserStore
from drivelog.utils.exceptions import ValidationError
from drivelog.utils.logger import get_logger
from drivelog.utils.validators import MAX_PASSWORD_BYTES

logger = get_logger(__name__)

DEFAULT_ADMIN_EMAIL = "admin@localhost"
DEFAULT_ADMIN_NAME = "Admin"
DEFAULT_PASSWORD_LENGTH = 16
# 15 characters over the 72-symbol alphabet is the shortest that clears 90 bits
MIN_PASSWORD_LENGTH = 15


@dataclass
class InitResult:
    admin_created: bool
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None


def initialize(
    user_store: UserStore,
    hash_password: Callable[[str], str],
    generate_password: Callable[[int], str],
    password_length: int = DEFAULT_PASSWORD_LENGTH,
) -> InitResult:
    """
    Create the primary admin when the admin slot is empty.

    The generated plaintext password is only returned in the result; it is
    never logged or stored. Any failure propagates so startup aborts.
    """
    if user_store.get_admin() is not None:
        return InitResult(admin_created=False)

    if password_length < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Bootstrap password length must be at least {MIN_PASSWORD_LENGTH}")
    # bcrypt only reads the first 72 bytes; the alphabet is ASCII so length == bytes
    if password_length > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Bootstrap password length must be at most {MAX_PASSWORD_BYTES}")

    password = generate_password(password_length)
    now = datetime.now(timezone.utc)
    admin = User(
        id=str(uuid.uuid4()),
        email=DEFAULT_ADMIN_EMAIL,
        name=DEFAULT_ADMIN_NAME,
        password_hash=hash_password(password),
        role=Role.ADMIN,
        created_at=now,
        updated_at=now,
    )
    user_store.save_admin(admin)
    logger.info("Created primary admin on first run", user_id=admin.id, email=admin.email)

    return InitResult(admin_created=True, admin_email=admin.email, admin_password=password)


def print_admin_credentials(result: InitResult, console: Optional[Console] = None) -> None:
    """Show first-run credentials to the operator (stdout only, never the log)"""
    if not result.admin_created:
        return
    console = console or Console()
    console.print(
        Panel(
            f"[bold]Email:[/bold]    {result.admin_email}\n"
            f"[bold]Password:[/bold] {result.admin_password}\n\n"
            "Please save these credentials!",
            title="FIRST RUN - Admin Account Created",
            style="bold yellow",
        )
    )
