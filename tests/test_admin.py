"""Admin API: auth, promotions CRUD, catalog, promo codes, settings, security log."""
from decimal import Decimal

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from fiberorder.core.config import settings
from fiberorder.models import PromotionDiscount, RateLimitEntry
from fiberorder.services import site_gate
from fiberorder.services.rate_limit import check_rate_limit


def test_admin_requires_secret(client: TestClient):
    assert client.get("/admin/promotions").status_code == 403
    r = client.get("/admin/promotions", headers={"X-Admin-Secret": "wrong"})
    assert r.status_code == 403
    assert r.json()["error"] == "Nicht berechtigt."


def test_admin_disabled_without_secret(client: TestClient, admin_headers, monkeypatch):
    monkeypatch.setattr(settings, "admin_secret", "")
    assert client.get("/admin/promotions", headers=admin_headers).status_code == 503


def test_promotion_crud(client: TestClient, admin_headers, catalog, db: Session):
    body = {
        "name": "  FTTH Router  ",
        "code": " ftth-24 ",
        "start_date": "2026-01-01T00:00:00Z",
        "end_date": "2026-12-31T23:59:59Z",
        "discounts": [
            {"applies_to": "product", "discount_type": "fixed", "discount_amount": "0", "target_product_id": catalog["einfach-300"]},
            {
                "applies_to": "option",
                "discount_type": "fixed",
                "discount_amount": "4.00",
                "discount_duration_months": 24,
                "target_option_id": catalog["router-fritzbox-5690"],
            },
        ],
        "building_ids": ["B1", " B1 ", "B2", ""],
    }
    r = client.post("/admin/promotions", json=body, headers=admin_headers)
    assert r.status_code == 201, r.text
    created = r.json()
    assert created["name"] == "FTTH Router"
    assert created["code"] == "ftth-24"
    assert created["scope"] == "building_and_product"
    assert created["building_ids"] == ["B1", "B2"]
    assert [d["applies_to"] for d in created["discounts"]] == ["product", "option"]
    assert created["start_date"].startswith("2026-01-01T00:00:00")
    pid = created["id"]

    r = client.put(f"/admin/promotions/{pid}", json={"building_ids": [], "is_global": True}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["scope"] == "product"
    assert len(r.json()["discounts"]) == 2

    r = client.put(f"/admin/promotions/{pid}", json={"discounts": []}, headers=admin_headers)
    assert r.json()["scope"] == "global"

    assert [p["id"] for p in client.get("/admin/promotions", headers=admin_headers).json()] == [pid]
    assert client.get(f"/admin/promotions/{pid}", headers=admin_headers).json()["is_global"] is True

    assert client.delete(f"/admin/promotions/{pid}", headers=admin_headers).json() == {"ok": True}
    assert client.get(f"/admin/promotions/{pid}", headers=admin_headers).status_code == 404
    assert db.exec(select(PromotionDiscount)).all() == []


def test_promotion_validation(client: TestClient, admin_headers, catalog):
    r = client.post("/admin/promotions", json={"name": " "}, headers=admin_headers)
    assert r.status_code == 422
    r = client.post(
        "/admin/promotions",
        json={"name": "x", "start_date": "2026-02-01T00:00:00", "end_date": "2026-01-01T00:00:00"},
        headers=admin_headers,
    )
    assert r.status_code == 422
    r = client.post(
        "/admin/promotions",
        json={"name": "x", "discounts": [{"applies_to": "option", "discount_type": "fixed", "discount_amount": "-1"}]},
        headers=admin_headers,
    )
    assert r.status_code == 422
    r = client.post(
        "/admin/promotions",
        json={"name": "x", "discounts": [{"applies_to": "product", "discount_type": "fixed", "target_product_id": 999}]},
        headers=admin_headers,
    )
    assert r.status_code == 400
    assert r.json()["error"] == "Produkt 999 nicht gefunden."


def test_created_promotion_is_served_publicly(client: TestClient, admin_headers, catalog):
    client.post(
        "/admin/promotions",
        json={"name": "Haus B1", "building_ids": ["B1"], "discounts": [{"applies_to": "setup_fee", "discount_type": "waive"}]},
        headers=admin_headers,
    )
    j = client.get("/promotions/applicable", params={"building_id": "B1"}).json()
    assert [p["name"] for p in j["promotions"]] == ["Haus B1"]
    assert j["setup_fee_waived"] is True


def test_catalog_admin(client: TestClient, admin_headers):
    r = client.post(
        "/admin/catalog/products",
        json={"slug": " Einfach-600 ", "name": "einfach 600", "monthly_price": "47.00", "setup_fee": "99.00"},
        headers=admin_headers,
    )
    assert r.status_code == 201
    product = r.json()
    assert product["slug"] == "einfach-600"
    assert client.post(
        "/admin/catalog/products",
        json={"slug": "einfach-600", "name": "dup", "monthly_price": "1"},
        headers=admin_headers,
    ).status_code == 400

    r = client.patch(f"/admin/catalog/products/{product['id']}", json={"is_active": False}, headers=admin_headers)
    assert r.json()["is_active"] is False

    r = client.post(
        "/admin/catalog/options",
        json={"slug": "router-fritzbox-7690", "name": "FRITZ!Box 7690", "category": "router", "monthly_price": "7.00"},
        headers=admin_headers,
    )
    assert r.status_code == 201
    assert client.post(
        "/admin/catalog/options",
        json={"slug": "x", "name": "x", "category": "fax"},
        headers=admin_headers,
    ).status_code == 422
    assert len(client.get("/admin/catalog/options", params={"category": "router"}, headers=admin_headers).json()) == 1
    assert client.get("/admin/catalog/options", params={"category": "tv"}, headers=admin_headers).json() == []


def test_promo_code_admin(client: TestClient, admin_headers):
    r = client.post(
        "/admin/promo-codes",
        json={"code": "gwg-test", "router_discount": "4.00", "setup_fee_waived": True, "valid_streets": " fontanestraße "},
        headers=admin_headers,
    )
    assert r.status_code == 201
    code = r.json()
    assert code["code"] == "GWG-TEST"
    assert code["valid_streets"] == "fontanestraße"
    assert client.post("/admin/promo-codes", json={"code": "GWG-TEST"}, headers=admin_headers).status_code == 400

    r = client.put(f"/admin/promo-codes/{code['id']}", json={"code": "GWG-TEST", "router_discount": "6"}, headers=admin_headers)
    assert Decimal(r.json()["router_discount"]) == Decimal("6")
    assert r.json()["setup_fee_waived"] is False

    assert client.delete(f"/admin/promo-codes/{code['id']}", headers=admin_headers).json() == {"ok": True}
    assert client.get("/admin/promo-codes", headers=admin_headers).json() == []


def test_rate_limit_settings_admin(client: TestClient, admin_headers, db: Session):
    r = client.get("/admin/settings/rate-limit", headers=admin_headers)
    assert r.json()["order_max_attempts"] == 3

    r = client.put(
        "/admin/settings/rate-limit",
        json={"order_max_attempts": 1, "ip_whitelist": "10.0.0.1,  10.0.0.2"},
        headers=admin_headers,
    )
    assert r.json()["ip_whitelist"] == ["10.0.0.1", "10.0.0.2"]
    assert client.get("/admin/settings/rate-limit", headers=admin_headers).json()["order_max_attempts"] == 1

    check_rate_limit(db, "198.51.100.1", "order_form")
    assert not check_rate_limit(db, "198.51.100.1", "order_form").allowed
    entries = client.get("/admin/settings/rate-limit/entries", headers=admin_headers).json()
    assert len(entries) == 1
    assert entries[0]["blocked_until"] is not None

    r = client.delete(f"/admin/settings/rate-limit/entries/{entries[0]['id']}", headers=admin_headers)
    assert r.json() == {"ok": True}
    db.expire_all()
    assert db.exec(select(RateLimitEntry)).all() == []
    assert check_rate_limit(db, "198.51.100.1", "order_form").allowed


def test_site_password_admin(client: TestClient, admin_headers, db: Session):
    r = client.put("/admin/settings/site-password", json={"enabled": True}, headers=admin_headers)
    assert r.status_code == 422
    r = client.put("/admin/settings/site-password", json={"enabled": True, "password": "kurz"}, headers=admin_headers)
    assert r.status_code == 422

    r = client.put("/admin/settings/site-password", json={"enabled": True, "password": "geheim123"}, headers=admin_headers)
    assert r.json() == {"enabled": True, "authenticated": False}
    assert client.get("/admin/settings/site-password", headers=admin_headers).json()["enabled"] is True
    assert site_gate.load_gate_settings(db).password_hash.startswith("$2")
    # the admin API is not behind the gate
    assert client.get("/promotions/active").status_code == 401


def test_security_log(client: TestClient, admin_headers, db: Session):
    site_gate.save_gate_settings(db, True, "geheim123")
    client.post("/gate/unlock", json={"password": "falsch"})
    logs = client.get("/admin/security", params={"event": "gate_failed"}, headers=admin_headers).json()
    assert len(logs) == 1
    assert logs[0]["endpoint"] == "/gate/unlock"
    assert client.get("/admin/security", params={"event": "rate_limit"}, headers=admin_headers).json() == []
