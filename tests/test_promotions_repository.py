"""Loading active promotions from the database and the public /promotions endpoints."""
from datetime import datetime, timedelta
from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from fiberorder.services.promotions import fetch_active_promotions

from .helpers import add_promotion, option_discount, product_target

NOW = datetime(2026, 6, 1, 12, 0)


def test_window_and_active_flag(db: Session):
    add_promotion(db, "current", is_global=True, start_date=NOW - timedelta(days=1), end_date=NOW + timedelta(days=1))
    add_promotion(db, "expired", is_global=True, end_date=NOW - timedelta(seconds=1))
    add_promotion(db, "future", is_global=True, start_date=NOW + timedelta(days=1))
    add_promotion(db, "inactive", is_global=True, is_active=False)
    add_promotion(db, "open-ended", is_global=True)
    add_promotion(db, "ends-now", is_global=True, end_date=NOW)

    names = [p.name for p in fetch_active_promotions(db, now=NOW)]
    assert names == ["current", "open-ended", "ends-now"]


def test_target_slugs_are_resolved(db: Session, catalog):
    add_promotion(
        db,
        "router",
        discounts=[product_target(catalog["einfach-300"]), option_discount(catalog["router-fritzbox-5690"])],
        buildings=["B1", "B2"],
    )
    [p] = fetch_active_promotions(db, now=NOW)
    assert p.target_product_slugs == ("einfach-300",)
    assert p.target_option_slugs == ("router-fritzbox-5690",)
    assert p.building_ids == ("B1", "B2")
    assert p.discounts[1].discount_amount == Decimal("4.00")


def test_unresolvable_targets_are_dropped(db: Session, catalog):
    add_promotion(db, "dangling", discounts=[product_target(9999), option_discount(8888)])
    [p] = fetch_active_promotions(db, now=NOW)
    assert p.target_product_slugs == ()
    assert p.target_option_slugs == ()
    assert len(p.discounts) == 2
    assert p.discounts[0].target_product_slug is None


def test_database_error_yields_empty_list(db: Session, monkeypatch, caplog):
    add_promotion(db, "global", is_global=True)

    def broken(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is gone"))

    monkeypatch.setattr(db, "exec", broken)
    with caplog.at_level("ERROR"):
        assert fetch_active_promotions(db, now=NOW) == []
    assert "Loading active promotions failed" in caplog.text


def test_active_endpoint(client: TestClient, db: Session):
    add_promotion(db, "global", is_global=True)
    add_promotion(db, "expired", is_global=True, end_date=datetime(2000, 1, 1))
    r = client.get("/promotions/active")
    assert r.status_code == 200
    assert [p["name"] for p in r.json()] == ["global"]


def test_applicable_endpoint(client: TestClient, db: Session, catalog):
    add_promotion(
        db,
        "FTTH",
        discounts=[
            product_target(catalog["einfach-300"]),
            option_discount(catalog["router-fritzbox-5690"], "4.00", discount_duration_months=24),
        ],
    )
    add_promotion(
        db,
        "Haus B1",
        buildings=["B1"],
        discounts=[
            option_discount(catalog["router-fritzbox-5690"], "3.00"),
            {"applies_to": "setup_fee", "discount_type": "waive"},
        ],
    )

    r = client.get("/promotions/applicable", params={"tariff_slug": "einfach-1000", "building_id": "B1"})
    assert r.status_code == 200
    j = r.json()
    assert [p["name"] for p in j["promotions"]] == ["FTTH", "Haus B1"]
    assert Decimal(j["router_discount"]) == Decimal("7.00")
    assert Decimal(j["router_discount_monthly"]) == Decimal("7.00")
    assert Decimal(j["router_discount_one_time"]) == Decimal("0")
    assert j["router_discount_duration_months"] == 24
    assert j["setup_fee_waived"] is True

    r = client.get("/promotions/applicable", params={"tariff_slug": "fiber-basic-100", "building_id": "B2"})
    j = r.json()
    assert j["promotions"] == []
    assert Decimal(j["router_discount"]) == Decimal("0")
    assert j["setup_fee_waived"] is False
