"""Site password gate: unlock, signed expiring tokens, invalidation on password change."""
from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from fiberorder.core.config import settings
from fiberorder.core.security import create_gate_token, decode_gate_token
from fiberorder.models import RateLimitEntry, SecurityLog
from fiberorder.services import site_gate

PASSWORD = "geheim123"


def enable_gate(db: Session, password: str = PASSWORD):
    return site_gate.save_gate_settings(db, True, password)


def test_disabled_gate_is_open(client: TestClient):
    assert client.get("/gate/status").json() == {"enabled": False, "authenticated": True}
    assert client.get("/promotions/active").status_code == 200
    r = client.post("/gate/unlock", json={"password": "x"})
    assert r.status_code == 400


def test_enabled_gate_blocks_public_endpoints(client: TestClient, db: Session):
    enable_gate(db)
    r = client.get("/promotions/active")
    assert r.status_code == 401
    assert r.json()["error"] == "Diese Seite ist passwortgeschützt."
    assert r.headers.get("WWW-Authenticate") == "Bearer"
    assert client.post("/order/quote", json={}).status_code == 401


def test_unlock_sets_cookie_and_returns_token(client: TestClient, db: Session):
    enable_gate(db)
    r = client.post("/gate/unlock", json={"password": PASSWORD})
    assert r.status_code == 200
    j = r.json()
    assert j["access_token"]
    assert settings.gate_cookie_name in r.cookies

    # cookie is sent back automatically
    assert client.get("/gate/status").json() == {"enabled": True, "authenticated": True}
    assert client.get("/promotions/active").status_code == 200

    client.cookies.clear()
    assert client.get("/promotions/active").status_code == 401
    headers = {"Authorization": f"Bearer {j['access_token']}"}
    assert client.get("/promotions/active", headers=headers).status_code == 200


def test_wrong_password(client: TestClient, db: Session):
    enable_gate(db)
    r = client.post("/gate/unlock", json={"password": "falsch"})
    assert r.status_code == 401
    assert r.json()["error"] == "Falsches Passwort"
    log = db.exec(select(SecurityLog).where(SecurityLog.event == "gate_failed")).first()
    assert log is not None
    assert log.action_type == "login"


def test_unlock_attempts_are_rate_limited(client: TestClient, db: Session):
    enable_gate(db)
    for _ in range(5):
        assert client.post("/gate/unlock", json={"password": "falsch"}).status_code == 401
    r = client.post("/gate/unlock", json={"password": PASSWORD})
    assert r.status_code == 429
    assert r.json()["error"].startswith("Zu viele Versuche.")


def test_expired_token_is_rejected(db: Session):
    gate = enable_gate(db)
    past = datetime.now(timezone.utc) - timedelta(hours=settings.gate_token_expire_hours + 1)
    token, expires_at = create_gate_token(gate.password_hash, now=past)
    assert expires_at < datetime.now(timezone.utc)
    assert decode_gate_token(token) is None
    assert not site_gate.is_open(gate, token)


def test_token_expiry_claim(db: Session):
    gate = enable_gate(db)
    token, expires_at = create_gate_token(gate.password_hash)
    payload = decode_gate_token(token)
    assert payload["exp"] == int(expires_at.timestamp())
    assert payload["sub"] == "site-gate"


def test_password_change_invalidates_tokens(db: Session):
    gate = enable_gate(db)
    token, _ = site_gate.unlock(gate, PASSWORD)
    assert site_gate.is_open(gate, token)

    new_gate = site_gate.save_gate_settings(db, True, "neues-passwort")
    assert not site_gate.is_open(new_gate, token)
    assert site_gate.unlock(new_gate, PASSWORD) is None

    # toggling without a new password keeps tokens valid
    fresh, _ = site_gate.unlock(new_gate, "neues-passwort")
    kept = site_gate.save_gate_settings(db, True)
    assert site_gate.is_open(kept, fresh)


def test_forged_token_is_rejected(db: Session):
    gate = enable_gate(db)
    assert not site_gate.is_open(gate, "not-a-token")
    assert not site_gate.is_open(gate, None)


def test_lock_clears_cookie(client: TestClient, db: Session):
    enable_gate(db)
    client.post("/gate/unlock", json={"password": PASSWORD})
    r = client.post("/gate/lock")
    assert r.status_code == 200
    client.cookies.clear()
    assert client.get("/gate/status").json()["authenticated"] is False


def test_successful_unlock_clears_attempts(client: TestClient, db: Session):
    enable_gate(db)
    for _ in range(4):
        assert client.post("/gate/unlock", json={"password": "falsch"}).status_code == 401
    assert client.post("/gate/unlock", json={"password": PASSWORD}).status_code == 200
    db.expire_all()
    assert db.exec(select(RateLimitEntry).where(RateLimitEntry.action_type == "login")).all() == []

    # a full budget of attempts again, e.g. for the next device
    for _ in range(5):
        assert client.post("/gate/unlock", json={"password": "falsch"}).status_code == 401
    assert client.post("/gate/unlock", json={"password": "falsch"}).status_code == 429
