"""Session model (opaque cookie token)"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class Session(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str
    user_id: str
    created_at: datetime
    expires_at: datetime

    @field_validator("created_at", "expires_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps in hand-edited files are read as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """A session is valid up to and including ``expires_at``"""
        now = now or datetime.now(timezone.utc)
        return now > self.expires_at
