from .catalog import NO_ROUTER_SLUG, Product, ProductOption
from .logs import ErrorLog, SecurityLog
from .promo_code import PromoCode
from .promotion import AppliesTo, DiscountType, PriceType, Promotion, PromotionBuilding, PromotionDiscount
from .rate_limit import RateLimitEntry
from .settings import RATE_LIMIT_SETTINGS_KEY, SITE_PASSWORD_SETTINGS_KEY, AppSetting

__all__ = [
    "AppSetting",
    "AppliesTo",
    "DiscountType",
    "ErrorLog",
    "NO_ROUTER_SLUG",
    "PriceType",
    "Product",
    "ProductOption",
    "PromoCode",
    "Promotion",
    "PromotionBuilding",
    "PromotionDiscount",
    "RATE_LIMIT_SETTINGS_KEY",
    "RateLimitEntry",
    "SITE_PASSWORD_SETTINGS_KEY",
    "SecurityLog",
]
