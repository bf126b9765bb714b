"""Admin API under /admin; every router requires X-Admin-Secret."""
from fastapi import APIRouter

from fiberorder.admin.routers import catalog, promo_codes, promotions, security, settings

admin_router = APIRouter(prefix="/admin", tags=["admin"])

admin_router.include_router(promotions.router, prefix="/promotions", tags=["admin-promotions"])
admin_router.include_router(catalog.router, prefix="/catalog", tags=["admin-catalog"])
admin_router.include_router(promo_codes.router, prefix="/promo-codes", tags=["admin-promo-codes"])
admin_router.include_router(settings.router, prefix="/settings", tags=["admin-settings"])
admin_router.include_router(security.router, prefix="/security", tags=["admin-security"])
