from datetime import datetime

from sqlmodel import Field, SQLModel


class RateLimitEntry(SQLModel, table=True):
    """Attempt counter per (IP, action type)."""

    id: int | None = Field(default=None, primary_key=True)
    ip_address: str = Field(index=True, max_length=64)
    action_type: str = Field(index=True, max_length=32)
    attempts: int = 0
    first_attempt_at: datetime = Field(default_factory=datetime.utcnow)
    last_attempt_at: datetime = Field(default_factory=datetime.utcnow)
    blocked_until: datetime | None = None
