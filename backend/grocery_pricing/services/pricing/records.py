from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

# Canonical units a conversion may land on. UNIT is the count sentinel.
GRAM = "g"
MILLILITER = "ml"
KILOGRAM = "kg"
LITER = "l"
UNIT = "unit"


class PriceSource(str, Enum):
    UNIFIED = "unified"
    PROMO = "promo"
    REFERENCE = "reference"
    ESTIMATE = "estimate"


@dataclass
class Ingredient:
    id: str
    name: str
    category: str | None = None


@dataclass
class RecipeIngredient:
    ingredient_id: str
    quantity: float | None
    unit: str | None


@dataclass
class Recipe:
    id: str
    name: str
    ingredients: list[RecipeIngredient] = field(default_factory=list)
    estimated_price: float | None = None


@dataclass
class Store:
    id: str
    name: str


@dataclass
class CatalogEntry:
    generic_product_name: str | None
    regular_price: float | None = None
    sale_price: float | None = None
    unit_price: float | None = None  # $/kg or $/L when present
    quantity: float | None = None
    unit: str | None = None


@dataclass
class PromotionEntry:
    product_name: str
    price: float
    valid_until: date | None = None


@dataclass
class ReferenceEntry:
    product_name: str
    price: float


@dataclass
class StoreCatalog:
    unified: list[CatalogEntry] = field(default_factory=list)
    promotions: list[PromotionEntry] = field(default_factory=list)
    references: list[ReferenceEntry] = field(default_factory=list)


@dataclass
class Equivalence:
    ingredient_name: str
    to_quantity: float
    to_unit: str


@dataclass
class PricingResult:
    ingredient_name: str
    price: float
    source: PriceSource
    normalized_unit: str | None = None


@dataclass
class IngredientBreakdownItem:
    ingredient_id: str
    name: str
    quantity: float
    unit: str
    unit_price: float
    price_unit: str
    calculated_cost: float
    source: str

    def to_dict(self) -> dict:
        return {
            "ingredient_id": self.ingredient_id,
            "name": self.name,
            "quantity": self.quantity,
            "unit": self.unit,
            "unit_price": self.unit_price,
            "price_unit": self.price_unit,
            "calculated_cost": self.calculated_cost,
            "source": self.source,
        }


@dataclass
class RecipeStorePrice:
    recipe_id: str
    store_id: str
    week_of: str
    total_cost: float
    missing_ingredients_count: int
    is_complete: bool
    breakdown: list[IngredientBreakdownItem] = field(default_factory=list)
    calculated_at: datetime | None = None


@dataclass
class RunSummary:
    success: bool
    recipes_processed: int = 0
    stores_processed: int = 0
    pairs_processed: int = 0
    errors: list[str] = field(default_factory=list)
