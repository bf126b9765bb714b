"""Promotions: time-bounded marketing rules with discounts, optionally restricted to buildings/products."""
from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlmodel import Field, SQLModel


class AppliesTo(str, Enum):
    PRODUCT = "product"
    OPTION = "option"  # routers and other add-on options
    SETUP_FEE = "setup_fee"


class DiscountType(str, Enum):
    FIXED = "fixed"
    PERCENTAGE = "percentage"
    WAIVE = "waive"


class PriceType(str, Enum):
    MONTHLY = "monthly"
    ONE_TIME = "one_time"


class Promotion(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=200)
    code: str | None = Field(default=None, index=True, max_length=64)
    description: str | None = None
    customer_type: str = Field(default="private", max_length=32)  # "private" | "business"
    is_global: bool = False
    is_active: bool = Field(default=True, index=True)
    start_date: datetime | None = None  # valid from (inclusive)
    end_date: datetime | None = None  # valid until (inclusive)
    requires_customer_number: bool = False
    available_text: str | None = None
    unavailable_text: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class PromotionDiscount(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    promotion_id: int = Field(foreign_key="promotion.id", index=True)
    applies_to: str = Field(max_length=16)  # AppliesTo
    discount_type: str = Field(max_length=16)  # DiscountType
    # only meaningful for fixed/percentage; null on a fixed discount contributes nothing
    discount_amount: Decimal | None = Field(default=None, max_digits=10, decimal_places=2)
    price_type: str = Field(default=PriceType.MONTHLY.value, max_length=16)
    discount_duration_months: int | None = None
    target_product_id: int | None = Field(default=None, index=True)
    target_option_id: int | None = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class PromotionBuilding(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    promotion_id: int = Field(foreign_key="promotion.id", index=True)
    building_id: str = Field(index=True, max_length=64)
    created_at: datetime = Field(default_factory=datetime.utcnow)
