import base64
import hashlib
import hmac
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from .config import settings

ALGORITHM = "HS256"
MAX_BCRYPT_BYTES = 72  # bcrypt limit
GATE_TOKEN_SUBJECT = "site-gate"


def hash_password(password: str) -> str:
    p = password.encode("utf-8")[:MAX_BCRYPT_BYTES]
    return bcrypt.hashpw(p, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    p = plain.encode("utf-8")[:MAX_BCRYPT_BYTES]
    try:
        return bcrypt.checkpw(p, hashed.encode("utf-8"))
    except ValueError:
        # stored value is not a bcrypt hash
        return False


def secret_version(secret_hash: str) -> str:
    """Short HMAC fingerprint of a stored secret hash; changes whenever the secret changes."""
    raw = hmac.new(
        (settings.secret_key or "fiberorder").encode(),
        (secret_hash or "").encode(),
        hashlib.sha256,
    ).digest()
    return base64.urlsafe_b64encode(raw[:12]).decode().rstrip("=")


def create_gate_token(password_hash: str, now: datetime | None = None) -> tuple[str, datetime]:
    """Signed gate session token bound to the current password. Returns (token, expires_at)."""
    issued = now or datetime.now(timezone.utc)
    expires_at = issued + timedelta(hours=settings.gate_token_expire_hours)
    payload = {
        "sub": GATE_TOKEN_SUBJECT,
        "pwv": secret_version(password_hash),
        "iat": int(issued.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM), expires_at


def decode_gate_token(token: str) -> dict | None:
    """Payload of a valid, unexpired gate token; None otherwise."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if payload.get("sub") != GATE_TOKEN_SUBJECT:
        return None
    return payload


def constant_time_equals(provided: str | None, expected: str | None) -> bool:
    p = (provided or "").encode("utf-8")
    e = (expected or "").encode("utf-8")
    return hmac.compare_digest(p, e)
