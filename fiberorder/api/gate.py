import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlmodel import Session

from fiberorder.api.deps import get_gate_token
from fiberorder.core.config import settings
from fiberorder.core.database import get_db
from fiberorder.core.rate_limit import get_client_ip, limiter
from fiberorder.models import SecurityLog
from fiberorder.schemas import GateStatus, GateUnlockRequest, GateUnlockResponse
from fiberorder.services import site_gate
from fiberorder.services.rate_limit import blocked_message, check_rate_limit, reset_attempts

log = logging.getLogger(__name__)

router = APIRouter(prefix="/gate", tags=["gate"])
_UNLOCK_LIMIT = f"{settings.gate_unlock_per_minute}/minute"


@router.get("/status", response_model=GateStatus)
def gate_status(
    token: str | None = Depends(get_gate_token),
    db: Session = Depends(get_db),
):
    gate = site_gate.load_gate_settings(db)
    return GateStatus(enabled=gate.enabled, authenticated=site_gate.is_open(gate, token))


@router.post("/unlock", response_model=GateUnlockResponse)
@limiter.limit(_UNLOCK_LIMIT)
def gate_unlock(
    request: Request,
    body: GateUnlockRequest,
    db: Session = Depends(get_db),
):
    gate = site_gate.load_gate_settings(db)
    if not gate.enabled:
        raise HTTPException(status_code=400, detail="Zugangsschutz ist nicht aktiv.")

    ip = get_client_ip(request)
    limit = check_rate_limit(db, ip, "login")
    if not limit.allowed:
        raise HTTPException(status_code=429, detail=blocked_message(limit))

    issued = site_gate.unlock(gate, body.password)
    if issued is None:
        db.add(SecurityLog(event="gate_failed", action_type="login", ip=ip, endpoint=request.url.path))
        db.commit()
        raise HTTPException(status_code=401, detail="Falsches Passwort")

    reset_attempts(db, ip, "login")
    token, expires_at = issued
    log.info("Site gate unlocked ip=%s", ip)
    response = JSONResponse(
        content=GateUnlockResponse(access_token=token, expires_at=expires_at).model_dump(mode="json")
    )
    response.set_cookie(
        settings.gate_cookie_name,
        token,
        max_age=settings.gate_token_expire_hours * 3600,
        httponly=True,
        secure=settings.environment == "production",
        samesite="lax",
    )
    return response


@router.post("/lock")
def gate_lock():
    response = JSONResponse(content={"ok": True})
    response.delete_cookie(settings.gate_cookie_name)
    return response
