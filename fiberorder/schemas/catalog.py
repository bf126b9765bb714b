from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, field_validator

OptionCategory = Literal["router", "phone", "tv", "tv-addon", "tv-hardware"]


def _slug(v: str) -> str:
    v = (v or "").strip().lower()
    if not v:
        raise ValueError("Slug fehlt.")
    return v


class ProductCreate(BaseModel):
    slug: str
    name: str
    monthly_price: Decimal
    monthly_price_12: Decimal | None = None
    setup_fee: Decimal = Decimal("0")
    contract_months: int = 24
    is_active: bool = True

    @field_validator("slug")
    @classmethod
    def clean_slug(cls, v: str) -> str:
        return _slug(v)


class ProductUpdate(BaseModel):
    name: str | None = None
    monthly_price: Decimal | None = None
    monthly_price_12: Decimal | None = None
    setup_fee: Decimal | None = None
    contract_months: int | None = None
    is_active: bool | None = None


class ProductResponse(ProductCreate):
    id: int

    model_config = {"from_attributes": True}


class OptionCreate(BaseModel):
    slug: str
    name: str
    category: OptionCategory
    monthly_price: Decimal = Decimal("0")
    one_time_price: Decimal = Decimal("0")
    is_active: bool = True

    @field_validator("slug")
    @classmethod
    def clean_slug(cls, v: str) -> str:
        return _slug(v)


class OptionUpdate(BaseModel):
    name: str | None = None
    category: OptionCategory | None = None
    monthly_price: Decimal | None = None
    one_time_price: Decimal | None = None
    is_active: bool | None = None


class OptionResponse(OptionCreate):
    id: int

    model_config = {"from_attributes": True}
