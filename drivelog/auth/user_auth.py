"""
Password hashing and random secret generation.
"""

import os
import secrets
import string

try:
    import bcrypt
except ImportError:
    raise ImportError("bcrypt is required. Install with: pip install bcrypt")

# Lowered in tests; 12 is the production cost
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# 72 symbols -> ~6.17 bits per character
PASSWORD_ALPHABET = string.ascii_letters + string.digits + "!@#$%^&*-_"

SESSION_TOKEN_BYTES = 32


def hash_password(password: str) -> str:
    """Hash a password using bcrypt"""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash (constant-time compare inside bcrypt)"""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash or over-long password
        return False


def generate_password(length: int = 16) -> str:
    """Random password from a CSPRNG"""
    if length <= 0:
        raise ValueError("Password length must be positive")
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


def generate_session_token() -> str:
    """URL-safe session token (43 characters)"""
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)
