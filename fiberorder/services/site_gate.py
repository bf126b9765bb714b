"""
Site password gate.

Unlocking issues a signed token with an expiry and a fingerprint of the current
password hash. Changing the password changes the fingerprint, so every token
issued before the change stops verifying.
"""
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlmodel import Session, select

from fiberorder.core.clock import utcnow
from fiberorder.core.security import (
    create_gate_token,
    decode_gate_token,
    hash_password,
    secret_version,
    verify_password,
)
from fiberorder.models import SITE_PASSWORD_SETTINGS_KEY, AppSetting

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class GateSettings:
    enabled: bool = False
    password_hash: str = ""


def load_gate_settings(db: Session) -> GateSettings:
    row = db.exec(select(AppSetting).where(AppSetting.key == SITE_PASSWORD_SETTINGS_KEY)).first()
    if not row or not isinstance(row.value, dict):
        return GateSettings()
    return GateSettings(
        enabled=bool(row.value.get("enabled", False)),
        password_hash=str(row.value.get("password_hash") or ""),
    )


def save_gate_settings(db: Session, enabled: bool, password: str | None = None) -> GateSettings:
    """A new password replaces the hash; None keeps the current one."""
    current = load_gate_settings(db)
    password_hash = hash_password(password) if password else current.password_hash
    row = db.exec(select(AppSetting).where(AppSetting.key == SITE_PASSWORD_SETTINGS_KEY)).first()
    if row is None:
        row = AppSetting(key=SITE_PASSWORD_SETTINGS_KEY)
    row.value = {"enabled": bool(enabled), "password_hash": password_hash}
    row.updated_at = utcnow()
    db.add(row)
    db.commit()
    if password:
        log.info("Site password changed; previously issued gate tokens are invalid")
    return GateSettings(enabled=bool(enabled), password_hash=password_hash)


def unlock(gate: GateSettings, password: str) -> tuple[str, datetime] | None:
    """(token, expires_at) for the right password, None otherwise."""
    if not gate.password_hash or not verify_password(password or "", gate.password_hash):
        return None
    return create_gate_token(gate.password_hash)


def token_is_valid(gate: GateSettings, token: str | None) -> bool:
    if not token:
        return False
    payload = decode_gate_token(token)
    if payload is None:
        return False
    return payload.get("pwv") == secret_version(gate.password_hash)


def is_open(gate: GateSettings, token: str | None) -> bool:
    """Disabled gate is always open; otherwise a valid token for the current password is needed."""
    if not gate.enabled:
        return True
    return token_is_valid(gate, token)
