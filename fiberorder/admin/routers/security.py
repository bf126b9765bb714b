"""Security log: rate limit hits, blocked actions, failed gate unlocks."""
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session, select

from fiberorder.admin.deps import require_admin
from fiberorder.core.database import get_db
from fiberorder.models import SecurityLog

router = APIRouter(dependencies=[Depends(require_admin)])

EVENTS = ("rate_limit", "action_blocked", "gate_failed")


class SecurityLogOut(BaseModel):
    id: int
    event: str
    action_type: str | None = None
    ip: str | None = None
    endpoint: str | None = None
    detail: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


@router.get("", response_model=list[SecurityLogOut])
def security_list(limit: int = 100, event: str | None = None, db: Session = Depends(get_db)):
    stmt = select(SecurityLog).order_by(SecurityLog.id.desc()).limit(min(limit, 500))
    if event and event in EVENTS:
        stmt = stmt.where(SecurityLog.event == event)
    return db.exec(stmt).all()
