import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlmodel import Session

from fiberorder.core.database import get_db
from fiberorder.core.rate_limit import get_client_ip
from fiberorder.schemas import RateLimitRequest, RateLimitResult
from fiberorder.services.rate_limit import check_rate_limit

log = logging.getLogger(__name__)

router = APIRouter(tags=["rate-limit"])


@router.post("/rate-limit", response_model=RateLimitResult, response_model_exclude_none=True)
def rate_limit(
    request: Request,
    body: RateLimitRequest,
    db: Session = Depends(get_db),
):
    action_type = (body.action_type or "").strip()
    if not action_type:
        raise HTTPException(status_code=400, detail="action_type is required")
    ip = get_client_ip(request)
    log.info("Rate limit check ip=%s action=%s", ip, action_type)
    try:
        return check_rate_limit(db, ip, action_type)
    except Exception as e:
        # callers must never be locked out by a broken limiter
        log.exception("Rate limit endpoint failed; allowing request")
        return RateLimitResult(allowed=True, error=str(e)[:200])
