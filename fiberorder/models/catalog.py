from datetime import datetime
from decimal import Decimal

from sqlmodel import Field, SQLModel

OPTION_CATEGORIES = ("router", "phone", "tv", "tv-addon", "tv-hardware")
NO_ROUTER_SLUG = "router-none"


class Product(SQLModel, table=True):
    """Tariff, e.g. einfach-300."""

    id: int | None = Field(default=None, primary_key=True)
    slug: str = Field(unique=True, index=True, max_length=64)
    name: str = Field(max_length=200)
    monthly_price: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    monthly_price_12: Decimal | None = Field(default=None, max_digits=10, decimal_places=2)  # 12-month contract price
    setup_fee: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    contract_months: int = 24
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)


class ProductOption(SQLModel, table=True):
    """Router, TV or phone add-on."""

    id: int | None = Field(default=None, primary_key=True)
    slug: str = Field(unique=True, index=True, max_length=64)
    name: str = Field(max_length=200)
    category: str = Field(max_length=16)  # OPTION_CATEGORIES
    monthly_price: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    one_time_price: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
