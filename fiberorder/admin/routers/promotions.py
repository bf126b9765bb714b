"""Promotion management: CRUD with discounts and building assignment."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, delete, select

from fiberorder.admin.deps import require_admin
from fiberorder.core.clock import naive_utc, utcnow
from fiberorder.core.database import get_db
from fiberorder.models import Product, ProductOption, Promotion, PromotionBuilding, PromotionDiscount
from fiberorder.schemas import PromotionCreate, PromotionResponse, PromotionUpdate
from fiberorder.schemas.promotion import DiscountIn, DiscountOut

log = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


def _scope(has_products: bool, has_buildings: bool) -> str:
    if has_products and has_buildings:
        return "building_and_product"
    if has_buildings:
        return "building"
    if has_products:
        return "product"
    return "global"


def _to_response(db: Session, promo: Promotion) -> PromotionResponse:
    discounts = db.exec(
        select(PromotionDiscount).where(PromotionDiscount.promotion_id == promo.id).order_by(PromotionDiscount.id)
    ).all()
    building_ids = db.exec(
        select(PromotionBuilding.building_id)
        .where(PromotionBuilding.promotion_id == promo.id)
        .order_by(PromotionBuilding.id)
    ).all()
    has_products = any(d.target_product_id is not None for d in discounts)
    return PromotionResponse(
        id=promo.id,
        name=promo.name,
        code=promo.code,
        description=promo.description,
        customer_type=promo.customer_type,
        is_global=promo.is_global,
        is_active=promo.is_active,
        start_date=promo.start_date,
        end_date=promo.end_date,
        requires_customer_number=promo.requires_customer_number,
        available_text=promo.available_text,
        unavailable_text=promo.unavailable_text,
        scope=_scope(has_products, bool(building_ids)),
        discounts=[DiscountOut.model_validate(d) for d in discounts],
        building_ids=list(building_ids),
    )


def _check_targets(db: Session, discounts: list[DiscountIn]) -> None:
    for d in discounts:
        if d.target_product_id is not None and db.get(Product, d.target_product_id) is None:
            raise HTTPException(status_code=400, detail=f"Produkt {d.target_product_id} nicht gefunden.")
        if d.target_option_id is not None and db.get(ProductOption, d.target_option_id) is None:
            raise HTTPException(status_code=400, detail=f"Option {d.target_option_id} nicht gefunden.")


def _replace_discounts(db: Session, promotion_id: int, discounts: list[DiscountIn]) -> None:
    db.exec(delete(PromotionDiscount).where(PromotionDiscount.promotion_id == promotion_id))
    for d in discounts:
        db.add(
            PromotionDiscount(
                promotion_id=promotion_id,
                applies_to=d.applies_to.value,
                discount_type=d.discount_type.value,
                discount_amount=d.discount_amount,
                price_type=d.price_type.value,
                discount_duration_months=d.discount_duration_months,
                target_product_id=d.target_product_id,
                target_option_id=d.target_option_id,
            )
        )


def _replace_buildings(db: Session, promotion_id: int, building_ids: list[str]) -> None:
    db.exec(delete(PromotionBuilding).where(PromotionBuilding.promotion_id == promotion_id))
    seen: set[str] = set()
    for building_id in building_ids:
        building_id = (building_id or "").strip()
        if building_id and building_id not in seen:
            seen.add(building_id)
            db.add(PromotionBuilding(promotion_id=promotion_id, building_id=building_id))


@router.get("", response_model=list[PromotionResponse])
@router.get("/", response_model=list[PromotionResponse], include_in_schema=False)
def promotions_list(db: Session = Depends(get_db)):
    rows = db.exec(select(Promotion).order_by(Promotion.id.desc())).all()
    return [_to_response(db, p) for p in rows]


@router.get("/{promotion_id:int}", response_model=PromotionResponse)
def promotion_get(promotion_id: int, db: Session = Depends(get_db)):
    promo = db.get(Promotion, promotion_id)
    if not promo:
        raise HTTPException(status_code=404, detail="Aktion nicht gefunden.")
    return _to_response(db, promo)


@router.post("", response_model=PromotionResponse, status_code=201)
def promotion_create(data: PromotionCreate, db: Session = Depends(get_db)):
    _check_targets(db, data.discounts)
    fields = data.model_dump(exclude={"discounts", "building_ids"})
    for key in ("start_date", "end_date"):
        if fields[key] is not None:
            fields[key] = naive_utc(fields[key])
    promo = Promotion(**fields)
    db.add(promo)
    db.flush()
    _replace_discounts(db, promo.id, data.discounts)
    _replace_buildings(db, promo.id, data.building_ids)
    db.commit()
    db.refresh(promo)
    log.info("Promotion created id=%s name=%s", promo.id, promo.name)
    return _to_response(db, promo)


@router.put("/{promotion_id:int}", response_model=PromotionResponse)
def promotion_update(promotion_id: int, data: PromotionUpdate, db: Session = Depends(get_db)):
    promo = db.get(Promotion, promotion_id)
    if not promo:
        raise HTTPException(status_code=404, detail="Aktion nicht gefunden.")
    update = data.model_dump(exclude_unset=True, exclude={"discounts", "building_ids"})
    if "name" in update and not (update["name"] or "").strip():
        raise HTTPException(status_code=422, detail="Name der Aktion fehlt.")
    for key, value in update.items():
        if key in ("start_date", "end_date") and value is not None:
            value = naive_utc(value)
        setattr(promo, key, value)
    if promo.start_date and promo.end_date and promo.end_date < promo.start_date:
        raise HTTPException(status_code=422, detail="Enddatum liegt vor dem Startdatum.")
    if data.discounts is not None:
        _check_targets(db, data.discounts)
        _replace_discounts(db, promo.id, data.discounts)
    if data.building_ids is not None:
        _replace_buildings(db, promo.id, data.building_ids)
    promo.updated_at = utcnow()
    db.add(promo)
    db.commit()
    db.refresh(promo)
    return _to_response(db, promo)


@router.delete("/{promotion_id:int}")
def promotion_delete(promotion_id: int, db: Session = Depends(get_db)):
    promo = db.get(Promotion, promotion_id)
    if not promo:
        raise HTTPException(status_code=404, detail="Aktion nicht gefunden.")
    db.exec(delete(PromotionDiscount).where(PromotionDiscount.promotion_id == promotion_id))
    db.exec(delete(PromotionBuilding).where(PromotionBuilding.promotion_id == promotion_id))
    db.delete(promo)
    db.commit()
    log.info("Promotion deleted id=%s", promotion_id)
    return {"ok": True}
