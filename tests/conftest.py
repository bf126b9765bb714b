"""Pytest fixtures: test client, DB session (in-memory SQLite), admin headers, catalog rows."""
import os
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

# must be set before the app is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ADMIN_SECRET", "test-admin-secret")
# keep slowapi out of the way; the per-minute limit has its own test
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "1000")
os.environ.setdefault("GATE_UNLOCK_PER_MINUTE", "1000")

from sqlmodel import Session, SQLModel

from fiberorder import models  # noqa: F401
from fiberorder.core.database import engine
from fiberorder.core.rate_limit import limiter
from fiberorder.main import app
from fiberorder.models import Product, ProductOption

ADMIN_SECRET = os.environ["ADMIN_SECRET"]


@pytest.fixture(autouse=True)
def _fresh_state():
    """Every test starts with empty tables and empty slowapi counters."""
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    limiter.reset()
    yield


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db():
    with Session(engine) as session:
        yield session


@pytest.fixture
def admin_headers():
    return {"X-Admin-Secret": ADMIN_SECRET}


@pytest.fixture
def catalog(db: Session):
    """Tariffs and routers; returns {slug: id}."""
    rows = [
        Product(slug="einfach-300", name="einfach 300", monthly_price=Decimal("39.00"), setup_fee=Decimal("99.00")),
        Product(slug="einfach-1000", name="einfach 1000", monthly_price=Decimal("59.00"), setup_fee=Decimal("99.00")),
        Product(
            slug="fiber-basic-100",
            name="FiberBasic 100",
            monthly_price=Decimal("34.90"),
            monthly_price_12=Decimal("49.90"),
            setup_fee=Decimal("99.00"),
        ),
        ProductOption(slug="router-none", name="Eigener Router", category="router"),
        ProductOption(slug="router-fritzbox-5690", name="FRITZ!Box 5690", category="router", monthly_price=Decimal("4.00")),
        ProductOption(slug="router-fritzbox-5690-pro", name="FRITZ!Box 5690 Pro", category="router", monthly_price=Decimal("10.00")),
        ProductOption(slug="router-install", name="Router-Installation", category="router", one_time_price=Decimal("49.00")),
        ProductOption(slug="tv-comin", name="COM-IN TV", category="tv", monthly_price=Decimal("10.00")),
    ]
    for row in rows:
        db.add(row)
    db.commit()
    return {row.slug: row.id for row in rows}
