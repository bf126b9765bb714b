from datetime import datetime

from pydantic import BaseModel, field_validator


class RateLimitRequest(BaseModel):
    action_type: str | None = None


class RateLimitResult(BaseModel):
    allowed: bool
    reason: str | None = None
    remaining: int | None = None
    remaining_seconds: int | None = None
    blocked_until: datetime | None = None
    error: str | None = None


class RateLimitSettings(BaseModel):
    """Stored under app setting `rate_limit_settings`; missing keys fall back to these defaults."""

    enabled: bool = True
    order_max_attempts: int = 3
    order_window_minutes: int = 60
    order_block_minutes: int = 60
    contact_max_attempts: int = 5
    contact_window_minutes: int = 30
    contact_block_minutes: int = 30
    login_max_attempts: int = 5
    login_window_minutes: int = 15
    login_block_minutes: int = 30
    existing_customer_max_attempts: int = 5
    existing_customer_window_minutes: int = 15
    existing_customer_block_minutes: int = 30
    ip_whitelist: list[str] = []

    model_config = {"extra": "ignore"}

    @field_validator("ip_whitelist", mode="before")
    @classmethod
    def clean_whitelist(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        return [ip.strip() for ip in v if ip and ip.strip()]


class RateLimitEntryResponse(BaseModel):
    id: int
    ip_address: str
    action_type: str
    attempts: int
    first_attempt_at: datetime
    last_attempt_at: datetime
    blocked_until: datetime | None = None

    model_config = {"from_attributes": True}
