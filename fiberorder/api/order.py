import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlmodel import Session

from fiberorder.api.deps import get_promotion_catalog, require_site_access
from fiberorder.core.config import settings
from fiberorder.core.database import get_db
from fiberorder.core.rate_limit import limiter
from fiberorder.schemas import AppliedPromoCode, PriceQuote, PromoCodeApplyRequest, SelectionRequest
from fiberorder.services.pricing import build_price_quote
from fiberorder.services.promo_code import validate_promo_code
from fiberorder.services.promotions import PromotionCatalog

log = logging.getLogger(__name__)

router = APIRouter(prefix="/order", tags=["order"], dependencies=[Depends(require_site_access)])
promo_code_router = APIRouter(prefix="/promo-codes", tags=["order"], dependencies=[Depends(require_site_access)])
_RATE_LIMIT = f"{settings.rate_limit_per_minute}/minute"


@router.post("/quote", response_model=PriceQuote)
@limiter.limit(_RATE_LIMIT)
def quote(
    request: Request,
    body: SelectionRequest,
    db: Session = Depends(get_db),
    catalog: PromotionCatalog = Depends(get_promotion_catalog),
):
    return build_price_quote(db, body, catalog)


@promo_code_router.post("/apply", response_model=AppliedPromoCode)
@limiter.limit(_RATE_LIMIT)
def apply_promo_code(
    request: Request,
    body: PromoCodeApplyRequest,
    db: Session = Depends(get_db),
):
    applied, error = validate_promo_code(db, body.code, body.street)
    if error:
        log.info("Promo code rejected code=%s reason=%s", (body.code or "").strip().upper(), error)
        raise HTTPException(status_code=400, detail=error)
    return applied
