from fastapi import APIRouter

from grocery_pricing.api.health import router as health_router
from grocery_pricing.api.prices import router as prices_router

router = APIRouter(prefix="/api")
router.include_router(health_router)
router.include_router(prices_router)
