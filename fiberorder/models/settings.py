from datetime import datetime

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

RATE_LIMIT_SETTINGS_KEY = "rate_limit_settings"
SITE_PASSWORD_SETTINGS_KEY = "site_password_settings"


class AppSetting(SQLModel, table=True):
    """Key/value settings edited from the admin API. Replace `value` as a whole; in-place edits are not tracked."""

    id: int | None = Field(default=None, primary_key=True)
    key: str = Field(unique=True, index=True, max_length=64)
    value: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    updated_at: datetime = Field(default_factory=datetime.utcnow)
