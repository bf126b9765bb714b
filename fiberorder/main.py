import logging
import time
import traceback
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# load .env from the project root wherever uvicorn is started from
_PROJ_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJ_ROOT / ".env")

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlmodel import Session

from fiberorder.admin import admin_router
from fiberorder.api import gate, order, promotions, rate_limit
from fiberorder.core.config import settings
from fiberorder.core.database import database_ok, engine, init_db
from fiberorder.core.rate_limit import get_client_ip, limiter
from fiberorder.logging import setup_logging
from fiberorder.models import ErrorLog, SecurityLog

setup_logging(level=settings.log_level)
log = logging.getLogger("fiberorder")


def _cors_origins_list() -> list[str]:
    if not settings.cors_origins or settings.cors_origins.strip() == "*":
        return ["*"]
    return [o.strip() for o in settings.cors_origins.split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    log.info("Database ready; admin API %s", "enabled" if settings.admin_secret else "disabled (ADMIN_SECRET unset)")
    yield


app = FastAPI(
    title="Fiber Order API",
    description="Promotions, price quotes, promo codes, rate limiting and site gate for fiber orders",
    lifespan=lifespan,
)
app.state.limiter = limiter


def _error_response(
    request: Request,
    status_code: int,
    detail: str,
    headers: dict | None = None,
    extra: dict | None = None,
) -> JSONResponse:
    rid = getattr(request.state, "request_id", None)
    body = {"error": detail, "status_code": status_code, **(extra or {})}
    if rid:
        body["request_id"] = rid
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    try:
        with Session(engine) as db:
            db.add(SecurityLog(
                event="rate_limit",
                ip=get_client_ip(request),
                endpoint=request.url.path,
                detail=f"Rate limit exceeded ({exc.detail})",
            ))
            db.commit()
    except Exception as e:
        log.warning("SecurityLog rate_limit write failed: %s", e)
    return _error_response(
        request, 429, "Zu viele Anfragen. Bitte warten Sie eine Minute.", extra={"detail": str(exc.detail)}
    )


app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errs = exc.errors()
    log.warning("Request validation error (422): path=%s method=%s detail=%s", request.url.path, request.method, errs)
    first = errs[0] if errs else {}
    body = {
        "error": first.get("msg") or "Ungültige Anfrage.",
        "status_code": 422,
        "detail": [{"loc": list(e.get("loc") or []), "msg": e.get("msg"), "type": e.get("type")} for e in errs],
    }
    rid = getattr(request.state, "request_id", None)
    if rid:
        body["request_id"] = rid
    return JSONResponse(status_code=422, content=body)


@app.exception_handler(HTTPException)
def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _error_response(request, exc.status_code, detail, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled exception: path=%s %s", request.url.path, exc)
    try:
        with Session(engine) as db:
            db.add(ErrorLog(
                endpoint=request.url.path,
                method=request.method,
                error_message=str(exc)[:2000],
                stack_trace="".join(traceback.format_exception(exc))[:10000],
            ))
            db.commit()
    except Exception as e:
        log.warning("ErrorLog write failed: %s", e)
    return JSONResponse(status_code=500, content={"error": "Unerwarteter Serverfehler."})


@app.middleware("http")
async def request_id_and_latency(request: Request, call_next):
    request.state.request_id = str(uuid.uuid4())
    start = time.perf_counter()
    response = await call_next(request)
    latency_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Request-ID"] = request.state.request_id
    log.info(
        "request_id=%s method=%s path=%s status=%s latency_ms=%.2f",
        request.state.request_id,
        request.method,
        request.url.path,
        response.status_code,
        latency_ms,
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(promotions.router)
app.include_router(order.router)
app.include_router(order.promo_code_router)
app.include_router(rate_limit.router)
app.include_router(gate.router)
app.include_router(admin_router)


@app.get("/health")
def health():
    db_ok = database_ok()
    return {"status": "ok", "database": "ok" if db_ok else "error"}
