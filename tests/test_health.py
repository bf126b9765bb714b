"""Health endpoint and the shared error envelope."""
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from fiberorder.main import app
from fiberorder.models import ErrorLog


def test_health_returns_ok(client: TestClient):
    r = client.get("/health")
    assert r.status_code == 200
    j = r.json()
    assert j.get("status") == "ok"
    assert j.get("database") == "ok"


def test_request_id_header(client: TestClient):
    r = client.get("/health")
    assert r.headers.get("X-Request-ID")


def test_validation_error_envelope(client: TestClient):
    r = client.post("/order/quote", json={"contract_duration": 36})
    assert r.status_code == 422
    j = r.json()
    assert j["status_code"] == 422
    assert j["error"]
    assert isinstance(j["detail"], list)


def test_http_error_envelope(client: TestClient):
    r = client.post("/promo-codes/apply", json={"code": "NOPE"})
    assert r.status_code == 400
    j = r.json()
    assert j == {"error": "Ungültiger Aktionscode.", "status_code": 400, "request_id": j["request_id"]}


def _explode():
    raise RuntimeError("kaputt")


app.add_api_route("/_explode", _explode, methods=["GET"])


def test_unhandled_error_is_logged(db: Session):
    with TestClient(app, raise_server_exceptions=False) as c:
        r = c.get("/_explode")
    assert r.status_code == 500
    assert r.json() == {"error": "Unerwarteter Serverfehler."}
    row = db.exec(select(ErrorLog)).one()
    assert row.endpoint == "/_explode"
    assert row.error_message == "kaputt"
    assert "RuntimeError" in row.stack_trace
