"""
Action-type rate limiting (login, order form, contact form, existing customer portal).

Counts attempts per (IP, action type) in the database with a sliding start window
and a block period. Settings come from app setting `rate_limit_settings`; the
defaults below apply when nothing is stored. Every failure path fails open.
"""
import json
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from urllib.error import URLError
from urllib.request import Request, urlopen

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from fiberorder.core.clock import utcnow
from fiberorder.core.config import settings
from fiberorder.models import RATE_LIMIT_SETTINGS_KEY, AppSetting, RateLimitEntry, SecurityLog
from fiberorder.schemas.rate_limit import RateLimitResult, RateLimitSettings

log = logging.getLogger(__name__)

ACTION_TYPES = ("login", "order_form", "contact_form", "existing_customer")


@dataclass(frozen=True)
class LimitConfig:
    max_attempts: int
    window_minutes: int
    block_minutes: int


DEFAULT_LIMITS: dict[str, LimitConfig] = {
    "login": LimitConfig(5, 15, 30),
    "order_form": LimitConfig(3, 60, 60),
    "contact_form": LimitConfig(5, 30, 30),
    "existing_customer": LimitConfig(5, 15, 30),
}
FALLBACK_LIMIT = LimitConfig(5, 15, 30)

# action type -> key prefix in the stored settings
SETTINGS_PREFIX = {
    "order_form": "order",
    "contact_form": "contact",
    "login": "login",
    "existing_customer": "existing_customer",
}


def load_rate_limit_settings(db: Session) -> RateLimitSettings | None:
    """Stored settings, or None when nothing has been saved yet."""
    row = db.exec(select(AppSetting).where(AppSetting.key == RATE_LIMIT_SETTINGS_KEY)).first()
    if not row or not isinstance(row.value, dict):
        return None
    return RateLimitSettings.model_validate(row.value)


def save_rate_limit_settings(db: Session, data: RateLimitSettings) -> RateLimitSettings:
    row = db.exec(select(AppSetting).where(AppSetting.key == RATE_LIMIT_SETTINGS_KEY)).first()
    if row is None:
        row = AppSetting(key=RATE_LIMIT_SETTINGS_KEY)
    row.value = data.model_dump()
    row.updated_at = utcnow()
    db.add(row)
    db.commit()
    return data


def limit_config_for(action_type: str, stored: RateLimitSettings | None) -> LimitConfig:
    config = DEFAULT_LIMITS.get(action_type, FALLBACK_LIMIT)
    prefix = SETTINGS_PREFIX.get(action_type)
    if stored is None or prefix is None:
        return config
    return LimitConfig(
        max_attempts=getattr(stored, f"{prefix}_max_attempts", config.max_attempts),
        window_minutes=getattr(stored, f"{prefix}_window_minutes", config.window_minutes),
        block_minutes=getattr(stored, f"{prefix}_block_minutes", config.block_minutes),
    )


def _register_attempt(
    db: Session,
    ip: str,
    action_type: str,
    config: LimitConfig,
    now: datetime,
) -> RateLimitResult:
    entry = db.exec(
        select(RateLimitEntry).where(
            RateLimitEntry.ip_address == ip,
            RateLimitEntry.action_type == action_type,
        )
    ).first()

    if entry and entry.blocked_until and entry.blocked_until > now:
        remaining_seconds = math.ceil((entry.blocked_until - now).total_seconds())
        return RateLimitResult(
            allowed=False,
            reason="blocked",
            remaining=0,
            remaining_seconds=remaining_seconds,
            blocked_until=entry.blocked_until,
        )

    window = timedelta(minutes=config.window_minutes)
    if entry is None:
        entry = RateLimitEntry(ip_address=ip, action_type=action_type, attempts=0, first_attempt_at=now)
    elif entry.blocked_until or entry.first_attempt_at + window < now:
        # block served or window over: start a new window
        entry.attempts = 0
        entry.first_attempt_at = now
        entry.blocked_until = None

    entry.attempts += 1
    entry.last_attempt_at = now

    if entry.attempts > config.max_attempts:
        entry.blocked_until = now + timedelta(minutes=config.block_minutes)
        db.add(entry)
        db.add(
            SecurityLog(
                event="action_blocked",
                action_type=action_type,
                ip=ip,
                detail=f"{entry.attempts} attempts within {config.window_minutes} min",
            )
        )
        db.commit()
        log.warning("Rate limit block ip=%s action=%s until=%s", ip, action_type, entry.blocked_until)
        return RateLimitResult(
            allowed=False,
            reason="too_many_attempts",
            remaining=0,
            remaining_seconds=config.block_minutes * 60,
            blocked_until=entry.blocked_until,
        )

    db.add(entry)
    db.commit()
    return RateLimitResult(allowed=True, remaining=max(0, config.max_attempts - entry.attempts))


def check_rate_limit(
    db: Session,
    ip: str,
    action_type: str,
    now: datetime | None = None,
) -> RateLimitResult:
    """Counts one attempt for (ip, action_type) and says whether it may proceed."""
    now = now or utcnow()
    ip = ip or "unknown"
    try:
        stored = load_rate_limit_settings(db)
        if stored is not None:
            if not stored.enabled:
                return RateLimitResult(allowed=True, reason="rate_limiting_disabled")
            if ip in stored.ip_whitelist:
                return RateLimitResult(allowed=True, reason="ip_whitelisted")
        config = limit_config_for(action_type, stored)
        return _register_attempt(db, ip, action_type, config, now)
    except SQLAlchemyError as e:
        db.rollback()
        log.exception("Rate limit check failed ip=%s action=%s", ip, action_type)
        return RateLimitResult(allowed=True, error=f"Rate limit check failed: {e.__class__.__name__}")


def reset_attempts(db: Session, ip: str, action_type: str) -> None:
    """Forgets the counter for (ip, action_type), e.g. after a successful login."""
    try:
        entry = db.exec(
            select(RateLimitEntry).where(
                RateLimitEntry.ip_address == (ip or "unknown"),
                RateLimitEntry.action_type == action_type,
            )
        ).first()
        if entry is not None:
            db.delete(entry)
            db.commit()
    except SQLAlchemyError:
        db.rollback()
        log.exception("Rate limit reset failed ip=%s action=%s", ip, action_type)


def check_rate_limit_remote(action_type: str, base_url: str | None = None, timeout: float = 3) -> RateLimitResult:
    """Client for the /rate-limit endpoint of another instance. Transport errors count as allowed."""
    url = f"{(base_url or settings.rate_limit_service_url).rstrip('/')}/rate-limit"
    body = json.dumps({"action_type": action_type}).encode()
    req = Request(url, data=body, method="POST", headers={"Content-Type": "application/json"})
    try:
        with urlopen(req, timeout=timeout) as r:
            data = json.loads(r.read().decode())
        return RateLimitResult.model_validate(data)
    except (URLError, OSError, ValueError) as e:
        log.warning("Rate limit service unreachable (%s); allowing %s", e, action_type)
        return RateLimitResult(allowed=True, error="Rate limit check failed")


def format_block_time(seconds: int) -> str:
    """'4:05' for minutes, '42s' below one minute."""
    minutes, rest = divmod(max(0, int(seconds)), 60)
    if minutes > 0:
        return f"{minutes}:{rest:02d}"
    return f"{rest}s"


def blocked_message(result: RateLimitResult) -> str:
    minutes = max(1, math.ceil((result.remaining_seconds or 60) / 60))
    return f"Zu viele Versuche. Bitte warten Sie {minutes} Minute{'n' if minutes > 1 else ''}."
