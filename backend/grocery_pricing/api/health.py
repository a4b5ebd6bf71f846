from fastapi import APIRouter

from grocery_pricing.config import settings

router = APIRouter()


@router.get("/health")
def health():
    return {"status": "ok", "app": settings.app_name, "env": settings.env}
