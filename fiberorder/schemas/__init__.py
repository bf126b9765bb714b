from .gate import GateStatus, GateUnlockRequest, GateUnlockResponse, SitePasswordUpdate
from .order import AppliedPromoCode, PriceQuote, PromoCodeApplyRequest, SelectionRequest
from .promotion import (
    ActiveDiscount,
    ActivePromotion,
    ApplicablePromotionsResponse,
    PromotionCreate,
    PromotionResponse,
    PromotionUpdate,
)
from .rate_limit import RateLimitRequest, RateLimitResult, RateLimitSettings

__all__ = [
    "ActiveDiscount",
    "ActivePromotion",
    "ApplicablePromotionsResponse",
    "AppliedPromoCode",
    "GateStatus",
    "GateUnlockRequest",
    "GateUnlockResponse",
    "PriceQuote",
    "PromoCodeApplyRequest",
    "PromotionCreate",
    "PromotionResponse",
    "PromotionUpdate",
    "RateLimitRequest",
    "RateLimitResult",
    "RateLimitSettings",
    "SelectionRequest",
    "SitePasswordUpdate",
]
