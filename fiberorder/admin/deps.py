"""Admin auth: X-Admin-Secret header compared in constant time."""
import logging

from fastapi import Header, HTTPException, Request

from fiberorder.core.config import is_admin_configured, settings
from fiberorder.core.rate_limit import get_client_ip
from fiberorder.core.security import constant_time_equals

log = logging.getLogger(__name__)


def require_admin(
    request: Request,
    x_admin_secret: str | None = Header(None, alias="X-Admin-Secret"),
) -> None:
    if not is_admin_configured():
        raise HTTPException(status_code=503, detail="Admin-API ist nicht konfiguriert (ADMIN_SECRET fehlt).")
    if not constant_time_equals(x_admin_secret, settings.admin_secret):
        log.warning("Rejected admin request path=%s ip=%s", request.url.path, get_client_ip(request))
        raise HTTPException(status_code=403, detail="Nicht berechtigt.")
