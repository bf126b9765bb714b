from fastapi import APIRouter, Depends, Query, Request

from fiberorder.api.deps import get_promotion_catalog, require_site_access
from fiberorder.core.config import settings
from fiberorder.core.rate_limit import limiter
from fiberorder.models import PriceType
from fiberorder.schemas import ActivePromotion, ApplicablePromotionsResponse
from fiberorder.services.promotions import (
    PromotionCatalog,
    is_setup_fee_waived,
    router_discount,
    router_discount_duration,
)

router = APIRouter(prefix="/promotions", tags=["promotions"], dependencies=[Depends(require_site_access)])
_RATE_LIMIT = f"{settings.rate_limit_per_minute}/minute"


@router.get("/active", response_model=list[ActivePromotion])
@limiter.limit(_RATE_LIMIT)
def list_active_promotions(
    request: Request,
    catalog: PromotionCatalog = Depends(get_promotion_catalog),
):
    return list(catalog.promotions)


@router.get("/applicable", response_model=ApplicablePromotionsResponse)
@limiter.limit(_RATE_LIMIT)
def list_applicable_promotions(
    request: Request,
    tariff_slug: str | None = Query(None),
    building_id: str | None = Query(None),
    catalog: PromotionCatalog = Depends(get_promotion_catalog),
):
    tariff_slug = (tariff_slug or "").strip() or None
    building_id = (building_id or "").strip() or None
    applicable = catalog.applicable(tariff_slug, building_id)
    return ApplicablePromotionsResponse(
        tariff_slug=tariff_slug,
        building_id=building_id,
        promotions=applicable,
        router_discount=router_discount(applicable),
        router_discount_monthly=router_discount(applicable, PriceType.MONTHLY.value),
        router_discount_one_time=router_discount(applicable, PriceType.ONE_TIME.value),
        router_discount_duration_months=router_discount_duration(applicable),
        setup_fee_waived=is_setup_fee_waived(applicable),
    )
