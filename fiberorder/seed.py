"""Default catalog: einfach tariffs, FiberBasic, routers, TV packages, the GWG-TEST code and the FTTH router promotion.

Idempotent: rows are matched by slug/code and never overwritten.
"""
import logging
from decimal import Decimal

from sqlmodel import Session, select

from fiberorder.models import (
    AppliesTo,
    DiscountType,
    PriceType,
    Product,
    ProductOption,
    PromoCode,
    Promotion,
    PromotionDiscount,
)

log = logging.getLogger(__name__)

TARIFFS = [
    # slug, name, monthly, 12-month price
    ("einfach-150", "einfach 150", "35.00", "35.00"),
    ("einfach-300", "einfach 300", "39.00", "39.00"),
    ("einfach-600", "einfach 600", "47.00", "47.00"),
    ("einfach-1000", "einfach 1000", "59.00", "59.00"),
    ("fiber-basic-100", "FiberBasic 100", "34.90", "49.90"),
]
TARIFF_SETUP_FEE = Decimal("99.00")

OPTIONS = [
    # slug, name, category, monthly, one-time
    ("router-none", "Eigener Router", "router", "0", "0"),
    ("router-fritzbox-5690-pro", "FRITZ!Box 5690 Pro", "router", "10.00", "0"),
    ("router-fritzbox-5690", "FRITZ!Box 5690", "router", "4.00", "0"),
    ("router-fritzbox-7690", "FRITZ!Box 7690 (FTTB)", "router", "7.00", "0"),
    ("tv-comin", "COM-IN TV", "tv", "10.00", "0"),
    ("tv-basishd", "Basis HD", "tv-addon", "4.90", "0"),
    ("tv-familyhd", "Family HD", "tv-addon", "19.90", "0"),
]

FTTH_PROMOTION = "FTTH Router-Aktion"


def seed_catalog(db: Session) -> dict[str, int]:
    """Insert missing catalog rows; returns how many rows of each kind were created."""
    created = {"products": 0, "options": 0, "promo_codes": 0, "promotions": 0}

    for slug, name, monthly, monthly_12 in TARIFFS:
        if db.exec(select(Product).where(Product.slug == slug)).first():
            continue
        db.add(Product(
            slug=slug,
            name=name,
            monthly_price=Decimal(monthly),
            monthly_price_12=Decimal(monthly_12),
            setup_fee=TARIFF_SETUP_FEE,
        ))
        created["products"] += 1

    for slug, name, category, monthly, one_time in OPTIONS:
        if db.exec(select(ProductOption).where(ProductOption.slug == slug)).first():
            continue
        db.add(ProductOption(
            slug=slug,
            name=name,
            category=category,
            monthly_price=Decimal(monthly),
            one_time_price=Decimal(one_time),
        ))
        created["options"] += 1

    if not db.exec(select(PromoCode).where(PromoCode.code == "GWG-TEST")).first():
        db.add(PromoCode(
            code="GWG-TEST",
            description="GWG Testcode: 4 € Router-Rabatt, keine Anschlussgebühr",
            valid_streets="fontanestraße,fontanestrasse",
            router_discount=Decimal("4.00"),
            setup_fee_waived=True,
        ))
        created["promo_codes"] += 1
    db.flush()

    if not db.exec(select(Promotion).where(Promotion.name == FTTH_PROMOTION)).first():
        tariff = db.exec(select(Product).where(Product.slug == "einfach-300")).first()
        router = db.exec(select(ProductOption).where(ProductOption.slug == "router-fritzbox-5690")).first()
        promotion = Promotion(
            name=FTTH_PROMOTION,
            description="4 € Rabatt pro Monat auf die FRITZ!Box 5690 in den ersten 24 Monaten.",
            is_global=False,
        )
        db.add(promotion)
        db.flush()
        # product targets match across the whole einfach family
        db.add(PromotionDiscount(
            promotion_id=promotion.id,
            applies_to=AppliesTo.PRODUCT.value,
            discount_type=DiscountType.FIXED.value,
            discount_amount=Decimal("0"),
            target_product_id=tariff.id,
        ))
        db.add(PromotionDiscount(
            promotion_id=promotion.id,
            applies_to=AppliesTo.OPTION.value,
            discount_type=DiscountType.FIXED.value,
            discount_amount=Decimal("4.00"),
            price_type=PriceType.MONTHLY.value,
            discount_duration_months=24,
            target_option_id=router.id,
        ))
        created["promotions"] += 1

    db.commit()
    log.info("Catalog seeded: %s", created)
    return created
