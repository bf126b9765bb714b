"""
Active promotions: loading from the database, matching against the current
selection (tariff, building) and resolving router / setup fee discounts.

Loading is the only part that touches the database. Matching and resolving are
pure functions over the loaded snapshot and can be used without a session.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from fiberorder.core.clock import naive_utc, utcnow
from fiberorder.models import (
    AppliesTo,
    DiscountType,
    PriceType,
    Product,
    ProductOption,
    Promotion,
    PromotionBuilding,
    PromotionDiscount,
)
from fiberorder.schemas.promotion import ActiveDiscount, ActivePromotion

log = logging.getLogger(__name__)

# Only this tariff family matches across its members ("einfach-150" ~ "einfach-1000").
TARIFF_FAMILY_PREFIX = "einfach-"

ZERO = Decimal("0")


def is_within_window(promo: Promotion, now: datetime) -> bool:
    """Both bounds are optional and inclusive."""
    if promo.start_date and naive_utc(promo.start_date) > now:
        return False
    if promo.end_date and naive_utc(promo.end_date) < now:
        return False
    return True


# --- Loading ---------------------------------------------------------------


def _resolve_product_slug(db: Session, product_id: int | None) -> str | None:
    if product_id is None:
        return None
    product = db.get(Product, product_id)
    return product.slug if product and product.slug else None


def _resolve_option_slug(db: Session, option_id: int | None) -> str | None:
    if option_id is None:
        return None
    option = db.get(ProductOption, option_id)
    return option.slug if option and option.slug else None


def _load_promotion(db: Session, promo: Promotion) -> ActivePromotion:
    discount_rows = db.exec(
        select(PromotionDiscount)
        .where(PromotionDiscount.promotion_id == promo.id)
        .order_by(PromotionDiscount.id)
    ).all()
    building_ids = db.exec(
        select(PromotionBuilding.building_id)
        .where(PromotionBuilding.promotion_id == promo.id)
        .order_by(PromotionBuilding.id)
    ).all()

    discounts = [
        ActiveDiscount(
            id=d.id,
            applies_to=d.applies_to,
            discount_type=d.discount_type,
            discount_amount=d.discount_amount,
            price_type=d.price_type or PriceType.MONTHLY.value,
            discount_duration_months=d.discount_duration_months,
            target_product_id=d.target_product_id,
            target_option_id=d.target_option_id,
            target_product_slug=_resolve_product_slug(db, d.target_product_id),
            target_option_slug=_resolve_option_slug(db, d.target_option_id),
        )
        for d in discount_rows
    ]

    # unresolvable targets stay None on the discount and are left out of the slug lists
    return ActivePromotion(
        id=promo.id,
        name=promo.name,
        code=promo.code,
        description=promo.description,
        is_global=bool(promo.is_global),
        is_active=bool(promo.is_active),
        requires_customer_number=bool(promo.requires_customer_number),
        available_text=promo.available_text,
        unavailable_text=promo.unavailable_text,
        start_date=promo.start_date,
        end_date=promo.end_date,
        discounts=tuple(discounts),
        building_ids=tuple(building_ids),
        target_product_slugs=tuple(d.target_product_slug for d in discounts if d.target_product_slug),
        target_option_slugs=tuple(d.target_option_slug for d in discounts if d.target_option_slug),
    )


def fetch_active_promotions(db: Session, now: datetime | None = None) -> list[ActivePromotion]:
    """
    Active promotions inside their validity window, with discounts, buildings and target slugs.
    Any database error aborts the whole fetch: logged, and the result is an empty list.
    """
    now = naive_utc(now) if now else utcnow()
    try:
        rows = db.exec(
            select(Promotion).where(Promotion.is_active == True).order_by(Promotion.id)  # noqa: E712
        ).all()
        return [_load_promotion(db, promo) for promo in rows if is_within_window(promo, now)]
    except SQLAlchemyError:
        log.exception("Loading active promotions failed; continuing without promotions")
        return []


@dataclass(frozen=True)
class PromotionCatalog:
    """Request-scoped snapshot of the active promotions. Load a new one to refresh."""

    promotions: tuple[ActivePromotion, ...] = ()
    fetched_at: datetime = field(default_factory=utcnow)

    def applicable(self, tariff_slug: str | None, building_id: str | None) -> list[ActivePromotion]:
        return applicable_promotions(self.promotions, tariff_slug, building_id)


def load_promotion_catalog(db: Session, now: datetime | None = None) -> PromotionCatalog:
    promotions = fetch_active_promotions(db, now=now)
    log.debug("Loaded %d active promotions", len(promotions))
    return PromotionCatalog(promotions=tuple(promotions), fetched_at=utcnow())


# --- Matching ----------------------------------------------------------------


def _same_family(tariff_slug: str, target_slug: str) -> bool:
    return tariff_slug.startswith(TARIFF_FAMILY_PREFIX) and target_slug.startswith(TARIFF_FAMILY_PREFIX)


def matches_product(promo: ActivePromotion, tariff_slug: str | None) -> bool:
    if not tariff_slug:
        return False
    return any(
        tariff_slug == target or _same_family(tariff_slug, target)
        for target in promo.target_product_slugs
    )


def matches_building(promo: ActivePromotion, building_id: str | None) -> bool:
    return bool(building_id) and building_id in promo.building_ids


def is_applicable(promo: ActivePromotion, tariff_slug: str | None, building_id: str | None) -> bool:
    has_product_target = len(promo.target_product_slugs) > 0
    has_building_target = len(promo.building_ids) > 0

    if promo.is_global and not has_product_target and not has_building_target:
        return True
    if has_product_target and has_building_target:
        return matches_product(promo, tariff_slug) and matches_building(promo, building_id)
    if has_product_target:
        return matches_product(promo, tariff_slug)
    if has_building_target:
        return matches_building(promo, building_id)
    return promo.is_global


def applicable_promotions(
    promotions,
    tariff_slug: str | None,
    building_id: str | None,
) -> list[ActivePromotion]:
    """Promotions whose product/building targeting matches the selection. Order is preserved."""
    return [p for p in promotions if is_applicable(p, tariff_slug, building_id)]


# --- Resolving ---------------------------------------------------------------


def narrow_to_option(applicable, option_id: int | None) -> list[ActivePromotion]:
    """
    Applicable promotions with their option discounts limited to one selected option.
    Option discounts without a target apply to every option; other discounts are kept.
    """
    narrowed = []
    for promo in applicable:
        discounts = tuple(
            d
            for d in promo.discounts
            if d.applies_to != AppliesTo.OPTION.value or d.target_option_id in (None, option_id)
        )
        narrowed.append(promo.model_copy(update={"discounts": discounts}))
    return narrowed



def _router_discounts(applicable, price_type: str | None):
    for promo in applicable:
        for d in promo.discounts:
            if d.applies_to != AppliesTo.OPTION.value or d.discount_type != DiscountType.FIXED.value:
                continue
            if price_type is not None and (d.price_type or PriceType.MONTHLY.value) != price_type:
                continue
            yield d


def router_discount(applicable, price_type: str | None = None) -> Decimal:
    """
    Sum of fixed option (router) discounts over all applicable promotions.
    Not clamped to the router price; that happens in pricing.
    `price_type` restricts the sum to monthly or one-time discounts.
    """
    total = ZERO
    for d in _router_discounts(applicable, price_type):
        total += d.discount_amount or ZERO
    return total


def router_discount_duration(applicable) -> int | None:
    """Longest duration (months) among counted monthly router discounts; None = unlimited/unknown."""
    months = [
        d.discount_duration_months
        for d in _router_discounts(applicable, PriceType.MONTHLY.value)
        if d.discount_amount and d.discount_duration_months
    ]
    return max(months) if months else None


def is_setup_fee_waived(applicable) -> bool:
    for promo in applicable:
        for d in promo.discounts:
            if d.applies_to == AppliesTo.SETUP_FEE.value and d.discount_type == DiscountType.WAIVE.value:
                return True
    return False


def applicable_promotion_names(applicable) -> list[str]:
    return [p.name for p in applicable]
