from datetime import datetime

from pydantic import BaseModel, field_validator


class GateUnlockRequest(BaseModel):
    password: str


class GateUnlockResponse(BaseModel):
    access_token: str
    expires_at: datetime


class GateStatus(BaseModel):
    enabled: bool
    authenticated: bool


class SitePasswordUpdate(BaseModel):
    """Admin: turn the gate on/off; a new password invalidates every issued gate token."""

    enabled: bool
    password: str | None = None

    @field_validator("password")
    @classmethod
    def password_min_length(cls, v: str | None) -> str | None:
        if v is not None and len(v) < 6:
            raise ValueError("Passwort muss mindestens 6 Zeichen haben.")
        return v
