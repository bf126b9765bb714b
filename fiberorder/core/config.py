from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# .env lives in the project root: fiberorder/core/config.py -> fiberorder/core -> fiberorder -> root
_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _ROOT / ".env"


class Settings(BaseSettings):
    secret_key: str = "change-me-in-production"
    database_url: str = "sqlite:///./fiberorder.db"
    # comma separated origin list; "*" during development
    cors_origins: str = "*"
    # per-IP requests per minute on public endpoints (slowapi)
    rate_limit_per_minute: int = 60
    gate_unlock_per_minute: int = 10
    # admin API: X-Admin-Secret header; empty disables the admin API
    admin_secret: str = ""
    gate_token_expire_hours: int = 24 * 30
    gate_cookie_name: str = "site_access"
    # base URL of the rate-limit endpoint for check_rate_limit_remote
    rate_limit_service_url: str = "http://127.0.0.1:8000"
    environment: str = "development"  # production: Secure cookies
    log_level: str = "INFO"

    model_config = {
        "env_file": _ENV_FILE if _ENV_FILE.is_file() else ".env",
        "extra": "ignore",
    }

    @field_validator("secret_key", "admin_secret", mode="before")
    @classmethod
    def strip_secret(cls, v: str | None) -> str:
        """Operators paste these; trailing whitespace breaks HMAC comparisons."""
        return (v or "").strip()

    @field_validator("rate_limit_service_url", mode="before")
    @classmethod
    def strip_url(cls, v: str | None) -> str:
        return (v or "").strip().rstrip("/")


settings = Settings()


def is_admin_configured() -> bool:
    return bool((settings.admin_secret or "").strip())
