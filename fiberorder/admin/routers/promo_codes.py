"""Promo code management."""
from datetime import date, datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator
from sqlmodel import Session, select

from fiberorder.admin.deps import require_admin
from fiberorder.core.database import get_db
from fiberorder.models import PromoCode

router = APIRouter(dependencies=[Depends(require_admin)])


class PromoCodeIn(BaseModel):
    code: str
    description: str = ""
    valid_streets: str | None = None
    router_discount: Decimal = Decimal("0")
    setup_fee_waived: bool = False
    is_active: bool = True
    valid_from: date | None = None
    valid_until: date | None = None

    @field_validator("code")
    @classmethod
    def clean_code(cls, v: str) -> str:
        v = (v or "").strip().upper()
        if not v:
            raise ValueError("Code darf nicht leer sein.")
        return v

    @field_validator("valid_streets")
    @classmethod
    def clean_streets(cls, v: str | None) -> str | None:
        return (v or "").strip() or None


class PromoCodeOut(PromoCodeIn):
    id: int
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


@router.get("", response_model=list[PromoCodeOut])
def promo_codes_list(db: Session = Depends(get_db)):
    return db.exec(select(PromoCode).order_by(PromoCode.id.desc())).all()


@router.post("", response_model=PromoCodeOut, status_code=201)
def promo_code_create(data: PromoCodeIn, db: Session = Depends(get_db)):
    if db.exec(select(PromoCode).where(PromoCode.code == data.code)).first():
        raise HTTPException(status_code=400, detail="Dieser Code existiert bereits.")
    promo = PromoCode(**data.model_dump())
    db.add(promo)
    db.commit()
    db.refresh(promo)
    return promo


@router.put("/{code_id:int}", response_model=PromoCodeOut)
def promo_code_update(code_id: int, data: PromoCodeIn, db: Session = Depends(get_db)):
    promo = db.get(PromoCode, code_id)
    if not promo:
        raise HTTPException(status_code=404, detail="Code nicht gefunden.")
    existing = db.exec(select(PromoCode).where(PromoCode.code == data.code, PromoCode.id != code_id)).first()
    if existing:
        raise HTTPException(status_code=400, detail="Dieser Code wird bereits verwendet.")
    for key, value in data.model_dump().items():
        setattr(promo, key, value)
    db.add(promo)
    db.commit()
    db.refresh(promo)
    return promo


@router.delete("/{code_id:int}")
def promo_code_delete(code_id: int, db: Session = Depends(get_db)):
    promo = db.get(PromoCode, code_id)
    if promo:
        db.delete(promo)
        db.commit()
    return {"ok": True}
