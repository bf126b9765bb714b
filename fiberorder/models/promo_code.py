"""Manually entered promo codes (router discount, setup fee waiver, optional street restriction)."""
from datetime import date, datetime
from decimal import Decimal

from sqlmodel import Field, SQLModel


class PromoCode(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    code: str = Field(unique=True, index=True, max_length=64)  # stored upper-case, e.g. GWG-TEST
    description: str = ""
    # streets where the code is valid, comma separated, lower-case; empty = everywhere
    valid_streets: str | None = Field(default=None, max_length=512)
    router_discount: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)  # monthly
    setup_fee_waived: bool = False
    is_active: bool = True
    valid_from: date | None = None  # inclusive
    valid_until: date | None = None  # inclusive
    created_at: datetime = Field(default_factory=datetime.utcnow)
