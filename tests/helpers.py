"""Row builders shared by the test modules."""
from decimal import Decimal

from sqlmodel import Session

from fiberorder.models import PromoCode, Promotion, PromotionBuilding, PromotionDiscount


def add_promotion(db: Session, name, discounts=(), buildings=(), **fields) -> Promotion:
    p = Promotion(name=name, **fields)
    db.add(p)
    db.flush()
    for d in discounts:
        db.add(PromotionDiscount(promotion_id=p.id, **d))
    for b in buildings:
        db.add(PromotionBuilding(promotion_id=p.id, building_id=b))
    db.commit()
    db.refresh(p)
    return p


def option_discount(option_id, amount="4.00", **extra) -> dict:
    return {
        "applies_to": "option",
        "discount_type": "fixed",
        "discount_amount": Decimal(amount),
        "target_option_id": option_id,
        **extra,
    }


def product_target(product_id) -> dict:
    return {"applies_to": "product", "discount_type": "fixed", "discount_amount": Decimal("0"), "target_product_id": product_id}


def add_code(db: Session, code="GWG-TEST", router_discount="4.00", waived=True, streets=None, **fields):
    db.add(PromoCode(
        code=code,
        router_discount=Decimal(router_discount),
        setup_fee_waived=waived,
        valid_streets=streets,
        **fields,
    ))
    db.commit()
