from decimal import Decimal
from typing import Literal

from pydantic import BaseModel


class SelectionRequest(BaseModel):
    """Current state of the ordering flow; sent with every quote request."""

    tariff_slug: str | None = None
    building_id: str | None = None
    router_slug: str | None = None
    tv_slug: str | None = None
    addon_slugs: list[str] = []
    contract_duration: Literal[12, 24] = 24
    promo_code: str | None = None
    street: str | None = None


class PromoCodeApplyRequest(BaseModel):
    code: str
    street: str | None = None


class AppliedPromoCode(BaseModel):
    code: str
    description: str = ""
    router_discount: Decimal = Decimal("0")
    setup_fee_waived: bool = False


class PriceQuote(BaseModel):
    tariff_slug: str | None = None
    router_slug: str | None = None
    router_base_monthly: Decimal = Decimal("0")
    router_discount_monthly: Decimal = Decimal("0")
    router_price_monthly: Decimal = Decimal("0")
    router_discount_duration_months: int | None = None
    router_base_one_time: Decimal = Decimal("0")
    router_discount_one_time: Decimal = Decimal("0")
    router_price_one_time: Decimal = Decimal("0")
    setup_fee: Decimal = Decimal("0")
    setup_fee_waived: bool = False
    total_monthly: Decimal = Decimal("0")
    total_one_time: Decimal = Decimal("0")
    applied_promotions: list[str] = []
    promo_code: AppliedPromoCode | None = None
    promo_code_error: str | None = None
