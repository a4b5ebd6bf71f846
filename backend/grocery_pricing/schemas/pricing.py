from pydantic import BaseModel


class RunSummaryResponse(BaseModel):
    success: bool
    recipes_processed: int = 0
    stores_processed: int = 0
    pairs_processed: int = 0
    errors: list[str] = []


class LockStatusResponse(BaseModel):
    state: str
    is_calculating: bool
    running_for_s: float | None = None
    last_outcome: str | None = None


class ResetLockResponse(BaseModel):
    was_running: bool
    state: str


class EnqueuedResponse(BaseModel):
    task_id: str
    status: str = "queued"


class PreviewIngredientIn(BaseModel):
    ingredient_id: str
    quantity: float
    unit: str = ""


class PreviewRecipeIn(BaseModel):
    id: str
    name: str
    ingredients: list[PreviewIngredientIn]


class PriceOfferIn(BaseModel):
    store_id: str
    ingredient_id: str
    price: float
    quantity: float
    unit: str


class PreviewRequest(BaseModel):
    recipes: list[PreviewRecipeIn] | None = None  # bundled sample recipes when omitted
    prices: list[PriceOfferIn] | None = None  # bundled sample shelf prices when omitted
    allowed_store_ids: list[str] | None = None  # every known store minus the excluded ones when omitted


class BestDeal(BaseModel):
    store_id: str
    price: float
    unit: str
    cost: float


class PreviewIngredientOut(BaseModel):
    ingredient_id: str
    quantity: float
    unit: str | None
    best_deal: BestDeal | None = None
    error: str | None = None


class PreviewRecipeOut(BaseModel):
    recipe_id: str
    recipe_name: str
    ingredients: list[PreviewIngredientOut]
    total_price: float
