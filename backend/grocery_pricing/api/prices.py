from dataclasses import asdict

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from grocery_pricing.config import settings
from grocery_pricing.logging import get_logger
from grocery_pricing.schemas.pricing import (
    EnqueuedResponse,
    LockStatusResponse,
    PreviewRecipeOut,
    PreviewRequest,
    ResetLockResponse,
    RunSummaryResponse,
)
from grocery_pricing.services.pricing import sample_data
from grocery_pricing.services.pricing.calculation_run import CalculationRun, RunLock
from grocery_pricing.services.pricing.equivalence_cache import EquivalenceCache
from grocery_pricing.services.pricing.errors import ALREADY_IN_PROGRESS
from grocery_pricing.services.pricing.preview import PriceOffer, preview_prices
from grocery_pricing.services.pricing.records import Recipe, RecipeIngredient
from grocery_pricing.storage.repositories import SqlPricingStore
from grocery_pricing.workers.tasks import calculate_recipe_prices

router = APIRouter(prefix="/prices")
logger = get_logger(__name__)

# Shared by every request in this process; the Celery worker holds its own.
run_lock = RunLock()
equivalence_cache = EquivalenceCache(loader=lambda: SqlPricingStore().load_equivalences())


def build_run() -> CalculationRun:
    return CalculationRun(SqlPricingStore(), run_lock, equivalences=equivalence_cache)


@router.post("/calculate", response_model=RunSummaryResponse)
def calculate():
    """Price every recipe at every allowed store for the current week."""
    summary = build_run().run()
    if not summary.success and ALREADY_IN_PROGRESS in summary.errors:
        return JSONResponse(status_code=409, content=asdict(summary))
    return RunSummaryResponse(**asdict(summary))


@router.post("/calculate/async", response_model=EnqueuedResponse, status_code=202)
def calculate_async():
    task = calculate_recipe_prices.delay()
    logger.info("prices.calculate.enqueued task_id=%s", task.id)
    return EnqueuedResponse(task_id=task.id)


@router.get("/status", response_model=LockStatusResponse)
def status():
    return LockStatusResponse(**run_lock.status())


@router.post("/reset-lock", response_model=ResetLockResponse)
def reset_lock():
    """Operator escape hatch for a lock left behind by a crashed run."""
    was_running = run_lock.force_reset()
    return ResetLockResponse(was_running=was_running, state=run_lock.state.value)


@router.post("/preview", response_model=list[PreviewRecipeOut])
def preview(request: PreviewRequest | None = None):
    request = request or PreviewRequest()
    if request.recipes is None:
        recipes = sample_data.RECIPES
    else:
        recipes = [
            Recipe(r.id, r.name, [RecipeIngredient(i.ingredient_id, i.quantity, i.unit) for i in r.ingredients])
            for r in request.recipes
        ]
    if request.prices is None:
        offers = sample_data.PRICE_OFFERS
    else:
        offers = [PriceOffer(p.store_id, p.ingredient_id, p.price, p.quantity, p.unit) for p in request.prices]
    if request.allowed_store_ids is None:
        known = {s.id for s in sample_data.STORES} | {o.store_id for o in offers}
        allowed = known - set(settings.excluded_store_ids)
    else:
        allowed = set(request.allowed_store_ids)
    return preview_prices(recipes, offers, allowed)
