"""
Configuration management.

Settings come from the environment (optionally seeded from a .env file).
The CSRF key is generated once and persisted under the data directory so
it survives restarts.
"""

import base64
import binascii
import os
import secrets
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from drivelog.core.files import atomic_write_bytes
from .exceptions import ConfigError
from .logger import get_logger
from .validators import MAX_PASSWORD_BYTES

logger = get_logger(__name__)

# Fixed; not configurable
SESSION_LIFETIME = timedelta(days=7)

CSRF_KEY_FILE = ".csrf_key"
CSRF_KEY_BYTES = 32


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "json"
    file_path: Optional[str] = None
    max_bytes: int = 10485760
    backup_count: int = 5


class Settings(BaseModel):
    data_dir: Path = Path("data")
    host: str = "127.0.0.1"
    port: int = 8080
    environment: str = "development"
    bootstrap_password_length: int = Field(default=16, ge=15, le=MAX_PASSWORD_BYTES)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def load_settings() -> Settings:
    """Build Settings from environment variables (.env is loaded first)"""
    load_dotenv()

    try:
        return Settings(
            data_dir=Path(os.getenv("DATA_DIR") or "data"),
            host=os.getenv("HOST", "127.0.0.1"),
            port=int(os.getenv("PORT", "8080")),
            environment=os.getenv("ENVIRONMENT", "development").strip().lower(),
            bootstrap_password_length=int(os.getenv("BOOTSTRAP_PASSWORD_LENGTH", "16")),
            logging=LoggingSettings(
                level=os.getenv("LOG_LEVEL", "INFO"),
                format=os.getenv("LOG_FORMAT", "json"),
                file_path=os.getenv("LOG_FILE") or None,
            ),
        )
    except ValueError as e:
        raise ConfigError(f"Invalid configuration: {e}")


def load_csrf_key(data_dir: Path) -> bytes:
    """
    Return the 32-byte CSRF key.

    Order: CSRF_KEY env var (base64), then <data_dir>/.csrf_key, then a
    freshly generated key that is persisted for the next start.
    """
    env_key = os.getenv("CSRF_KEY")
    if env_key:
        try:
            key = base64.b64decode(env_key, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ConfigError(f"CSRF_KEY is not valid base64: {e}")
        if len(key) != CSRF_KEY_BYTES:
            raise ConfigError(f"CSRF_KEY must decode to {CSRF_KEY_BYTES} bytes, got {len(key)}")
        return key

    key_path = Path(data_dir) / CSRF_KEY_FILE
    if key_path.exists():
        try:
            key = base64.b64decode(key_path.read_text(encoding="utf-8").strip(), validate=True)
            if len(key) == CSRF_KEY_BYTES:
                return key
            logger.warning("Ignoring CSRF key with unexpected length", path=str(key_path), length=len(key))
        except (binascii.Error, ValueError, OSError) as e:
            logger.warning("Ignoring unreadable CSRF key file", path=str(key_path), error=str(e))

    key = secrets.token_bytes(CSRF_KEY_BYTES)
    try:
        atomic_write_bytes(key_path, base64.b64encode(key))
    except OSError as e:
        raise ConfigError(f"Failed to save CSRF key to {key_path}: {e}")
    logger.info("Generated new CSRF key", path=str(key_path))
    return key
