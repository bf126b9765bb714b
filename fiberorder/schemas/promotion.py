from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, field_validator, model_validator

from fiberorder.models import AppliesTo, DiscountType, PriceType


class ActiveDiscount(BaseModel):
    """Read-only view of one discount of an active promotion, with resolved target slugs."""

    model_config = {"frozen": True}

    id: int
    applies_to: str
    discount_type: str
    discount_amount: Decimal | None = None
    price_type: str = PriceType.MONTHLY.value
    discount_duration_months: int | None = None
    target_product_id: int | None = None
    target_option_id: int | None = None
    target_product_slug: str | None = None
    target_option_slug: str | None = None


class ActivePromotion(BaseModel):
    """Immutable snapshot of a promotion that is active and inside its validity window."""

    model_config = {"frozen": True}

    id: int
    name: str
    code: str | None = None
    description: str | None = None
    is_global: bool = False
    is_active: bool = True
    requires_customer_number: bool = False
    available_text: str | None = None
    unavailable_text: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    discounts: tuple[ActiveDiscount, ...] = ()
    building_ids: tuple[str, ...] = ()
    target_product_slugs: tuple[str, ...] = ()
    target_option_slugs: tuple[str, ...] = ()


class ApplicablePromotionsResponse(BaseModel):
    tariff_slug: str | None = None
    building_id: str | None = None
    promotions: list[ActivePromotion]
    router_discount: Decimal
    router_discount_monthly: Decimal
    router_discount_one_time: Decimal
    router_discount_duration_months: int | None = None
    setup_fee_waived: bool


class DiscountIn(BaseModel):
    applies_to: AppliesTo
    discount_type: DiscountType
    discount_amount: Decimal | None = None
    price_type: PriceType = PriceType.MONTHLY
    discount_duration_months: int | None = None
    target_product_id: int | None = None
    target_option_id: int | None = None

    @field_validator("discount_amount")
    @classmethod
    def amount_not_negative(cls, v: Decimal | None) -> Decimal | None:
        if v is not None and v < 0:
            raise ValueError("Rabattbetrag darf nicht negativ sein.")
        return v


class DiscountOut(DiscountIn):
    id: int

    model_config = {"from_attributes": True}


def _clean_code(v: str | None) -> str | None:
    v = (v or "").strip()
    return v or None


class PromotionCreate(BaseModel):
    name: str
    code: str | None = None
    description: str | None = None
    customer_type: str = "private"
    is_global: bool = False
    is_active: bool = True
    start_date: datetime | None = None
    end_date: datetime | None = None
    requires_customer_number: bool = False
    available_text: str | None = None
    unavailable_text: str | None = None
    discounts: list[DiscountIn] = []
    building_ids: list[str] = []

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Name der Aktion fehlt.")
        return v

    @field_validator("code", mode="before")
    @classmethod
    def clean_code(cls, v: str | None) -> str | None:
        return _clean_code(v)

    @model_validator(mode="after")
    def window_order(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("Enddatum liegt vor dem Startdatum.")
        return self


class PromotionUpdate(BaseModel):
    """Partial update. `discounts` / `building_ids`, when given, replace the stored sets."""

    name: str | None = None
    code: str | None = None
    description: str | None = None
    customer_type: str | None = None
    is_global: bool | None = None
    is_active: bool | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    requires_customer_number: bool | None = None
    available_text: str | None = None
    unavailable_text: str | None = None
    discounts: list[DiscountIn] | None = None
    building_ids: list[str] | None = None

    @field_validator("code", mode="before")
    @classmethod
    def clean_code(cls, v: str | None) -> str | None:
        return _clean_code(v)


class PromotionResponse(BaseModel):
    id: int
    name: str
    code: str | None = None
    description: str | None = None
    customer_type: str
    is_global: bool
    is_active: bool
    start_date: datetime | None = None
    end_date: datetime | None = None
    requires_customer_number: bool
    available_text: str | None = None
    unavailable_text: str | None = None
    scope: str
    discounts: list[DiscountOut]
    building_ids: list[str]
