"""
Order pricing: combines database promotions with a manually entered promo code.

Promotion and promo code router discounts do not stack, the larger one wins.
Prices never go below zero. The setup fee is waived if either source waives it.
"""
import logging
from decimal import Decimal

from sqlmodel import Session, select

from fiberorder.models import NO_ROUTER_SLUG, PriceType, Product, ProductOption
from fiberorder.schemas.order import AppliedPromoCode, PriceQuote, SelectionRequest
from fiberorder.services.promo_code import validate_promo_code
from fiberorder.services.promotions import (
    PromotionCatalog,
    applicable_promotion_names,
    is_setup_fee_waived,
    narrow_to_option,
    router_discount,
    router_discount_duration,
)

log = logging.getLogger(__name__)

ZERO = Decimal("0")
CENT = Decimal("0.01")
# monthly surcharge for a 12-month contract when the tariff has no dedicated 12-month price
SHORT_CONTRACT_SURCHARGE = Decimal("5.00")


def _dec(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value or 0))


def effective_router_discount(promotion_discount, promo_code_discount) -> Decimal:
    return max(_dec(promotion_discount), _dec(promo_code_discount))


def promoted_router_price(base_price, discount) -> Decimal:
    price = _dec(base_price) - _dec(discount)
    return max(ZERO, price)


def setup_fee_waived(promotion_waived: bool, promo_code_waived: bool) -> bool:
    return bool(promotion_waived) or bool(promo_code_waived)


def _money(value) -> Decimal:
    return _dec(value).quantize(CENT)


def _option_by_slug(db: Session, slug: str | None) -> ProductOption | None:
    if not slug:
        return None
    return db.exec(
        select(ProductOption).where(ProductOption.slug == slug, ProductOption.is_active == True)  # noqa: E712
    ).first()


def _tariff_monthly(tariff: Product | None, contract_duration: int) -> Decimal:
    if not tariff:
        return ZERO
    if contract_duration == 12:
        if tariff.monthly_price_12 is not None:
            return Decimal(tariff.monthly_price_12)
        return Decimal(tariff.monthly_price or 0) + SHORT_CONTRACT_SURCHARGE
    return Decimal(tariff.monthly_price or 0)


def build_price_quote(
    db: Session,
    selection: SelectionRequest,
    catalog: PromotionCatalog,
) -> PriceQuote:
    """Monthly and one-time totals for the current selection."""
    tariff = None
    if selection.tariff_slug:
        tariff = db.exec(
            select(Product).where(Product.slug == selection.tariff_slug, Product.is_active == True)  # noqa: E712
        ).first()

    applied_code: AppliedPromoCode | None = None
    code_error: str | None = None
    if selection.promo_code:
        applied_code, code_error = validate_promo_code(db, selection.promo_code, selection.street)

    applicable = catalog.applicable(selection.tariff_slug, selection.building_id) if tariff else []

    router = None
    if selection.router_slug and selection.router_slug != NO_ROUTER_SLUG:
        router = _option_by_slug(db, selection.router_slug)

    quote = PriceQuote(
        tariff_slug=tariff.slug if tariff else None,
        applied_promotions=applicable_promotion_names(applicable),
        promo_code=applied_code,
        promo_code_error=code_error,
    )

    if router:
        router_promotions = narrow_to_option(applicable, router.id)
        # the promo code discount is monthly only
        monthly_discount = effective_router_discount(
            router_discount(router_promotions, PriceType.MONTHLY.value),
            applied_code.router_discount if applied_code else ZERO,
        )
        one_time_discount = router_discount(router_promotions, PriceType.ONE_TIME.value)
        base_monthly = Decimal(router.monthly_price or 0)
        base_one_time = Decimal(router.one_time_price or 0)
        quote.router_slug = router.slug
        quote.router_base_monthly = _money(base_monthly)
        quote.router_discount_monthly = _money(min(monthly_discount, base_monthly))
        quote.router_price_monthly = _money(promoted_router_price(base_monthly, monthly_discount))
        quote.router_base_one_time = _money(base_one_time)
        quote.router_discount_one_time = _money(min(one_time_discount, base_one_time))
        quote.router_price_one_time = _money(promoted_router_price(base_one_time, one_time_discount))
        if quote.router_discount_monthly > 0:
            quote.router_discount_duration_months = router_discount_duration(router_promotions)

    quote.setup_fee = _money(tariff.setup_fee if tariff else ZERO)
    quote.setup_fee_waived = setup_fee_waived(
        is_setup_fee_waived(applicable),
        applied_code.setup_fee_waived if applied_code else False,
    )

    extras = [
        opt
        for opt in (_option_by_slug(db, slug) for slug in [selection.tv_slug, *selection.addon_slugs])
        if opt is not None
    ]

    total_monthly = _tariff_monthly(tariff, selection.contract_duration) + quote.router_price_monthly
    total_one_time = (ZERO if quote.setup_fee_waived else quote.setup_fee) + quote.router_price_one_time
    for opt in extras:
        total_monthly += Decimal(opt.monthly_price or 0)
        total_one_time += Decimal(opt.one_time_price or 0)

    quote.total_monthly = _money(total_monthly)
    quote.total_one_time = _money(total_one_time)
    log.debug(
        "Quote tariff=%s building=%s router=%s monthly=%s one_time=%s promotions=%s",
        quote.tariff_slug,
        selection.building_id,
        quote.router_slug,
        quote.total_monthly,
        quote.total_one_time,
        quote.applied_promotions,
    )
    return quote
