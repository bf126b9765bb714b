"""Rate limit and site password settings, blocked IPs."""
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from fiberorder.admin.deps import require_admin
from fiberorder.core.database import get_db
from fiberorder.models import RateLimitEntry
from fiberorder.schemas import GateStatus, RateLimitSettings, SitePasswordUpdate
from fiberorder.schemas.rate_limit import RateLimitEntryResponse
from fiberorder.services import site_gate
from fiberorder.services.rate_limit import load_rate_limit_settings, save_rate_limit_settings

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/rate-limit", response_model=RateLimitSettings)
def rate_limit_settings_get(db: Session = Depends(get_db)):
    return load_rate_limit_settings(db) or RateLimitSettings()


@router.put("/rate-limit", response_model=RateLimitSettings)
def rate_limit_settings_put(data: RateLimitSettings, db: Session = Depends(get_db)):
    return save_rate_limit_settings(db, data)


@router.get("/rate-limit/entries", response_model=list[RateLimitEntryResponse])
def rate_limit_entries(limit: int = 100, db: Session = Depends(get_db)):
    stmt = select(RateLimitEntry).order_by(RateLimitEntry.last_attempt_at.desc()).limit(min(limit, 500))
    return db.exec(stmt).all()


@router.delete("/rate-limit/entries/{entry_id:int}")
def rate_limit_entry_delete(entry_id: int, db: Session = Depends(get_db)):
    """Unblocks an IP for one action type."""
    entry = db.get(RateLimitEntry, entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Eintrag nicht gefunden.")
    db.delete(entry)
    db.commit()
    return {"ok": True}


@router.get("/site-password", response_model=GateStatus)
def site_password_get(db: Session = Depends(get_db)):
    gate = site_gate.load_gate_settings(db)
    return GateStatus(enabled=gate.enabled, authenticated=False)


@router.put("/site-password", response_model=GateStatus)
def site_password_put(data: SitePasswordUpdate, db: Session = Depends(get_db)):
    current = site_gate.load_gate_settings(db)
    if data.enabled and not data.password and not current.password_hash:
        raise HTTPException(status_code=422, detail="Zum Aktivieren wird ein Passwort benötigt.")
    gate = site_gate.save_gate_settings(db, data.enabled, data.password)
    return GateStatus(enabled=gate.enabled, authenticated=False)
