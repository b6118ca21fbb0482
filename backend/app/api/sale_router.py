from fastapi import APIRouter

from app.api.sale_endpoints.admin import router as admin_router
from app.api.sale_endpoints.mint import router as mint_router
from app.api.sale_endpoints.views import router as views_router

router = APIRouter(prefix="/sale", tags=["sale"])

router.include_router(mint_router)
router.include_router(views_router)
router.include_router(admin_router)
