from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from fiberorder.core.config import settings
from fiberorder.core.database import get_db
from fiberorder.services import site_gate
from fiberorder.services.promotions import PromotionCatalog, load_promotion_catalog

security = HTTPBearer(auto_error=False)


def get_gate_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str | None:
    """Gate token from the Authorization header or the gate cookie."""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.gate_cookie_name)


def require_site_access(
    token: str | None = Depends(get_gate_token),
    db: Session = Depends(get_db),
) -> None:
    gate = site_gate.load_gate_settings(db)
    if not site_gate.is_open(gate, token):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Diese Seite ist passwortgeschützt.",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_promotion_catalog(db: Session = Depends(get_db)) -> PromotionCatalog:
    """Fresh snapshot of the active promotions for this request."""
    return load_promotion_catalog(db)
