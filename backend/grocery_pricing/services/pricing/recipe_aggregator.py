from datetime import date, datetime, timezone
from typing import Iterable, Mapping

from grocery_pricing.config import settings
from grocery_pricing.logging import get_logger
from grocery_pricing.services.pricing.cost_calculator import CostCalculator, round_money
from grocery_pricing.services.pricing.price_selector import PriceSelector
from grocery_pricing.services.pricing.records import (
    KILOGRAM,
    LITER,
    UNIT,
    Ingredient,
    IngredientBreakdownItem,
    PriceSource,
    Recipe,
    RecipeIngredient,
    RecipeStorePrice,
    StoreCatalog,
)
from grocery_pricing.services.pricing.unit_converter import MASS, VOLUME, UnitConverter

logger = get_logger(__name__)

DEFAULT_UNIT = "unité"
PRICE_UNIT_KG = "kg"
PRICE_UNIT_L = "l"
PRICE_UNIT_ITEM = "unité"


def aggregate_lines(lines: Iterable[RecipeIngredient]) -> list[RecipeIngredient]:
    """Merge repeated ingredients: quantities are summed, the first unit seen is kept."""
    merged: dict[str, RecipeIngredient] = {}
    for line in lines:
        quantity = line.quantity or 1
        existing = merged.get(line.ingredient_id)
        if existing is None:
            merged[line.ingredient_id] = RecipeIngredient(line.ingredient_id, quantity, line.unit or DEFAULT_UNIT)
        else:
            existing.quantity += quantity
    return list(merged.values())


class RecipeAggregator:
    def __init__(
        self,
        selector: PriceSelector,
        calculator: CostCalculator,
        max_recipe_total: float | None = None,
    ) -> None:
        self.selector = selector
        self.calculator = calculator
        self.converter: UnitConverter = calculator.converter
        self.max_recipe_total = settings.max_recipe_total if max_recipe_total is None else max_recipe_total

    def price_unit_label(self, normalized_unit: str | None, recipe_unit: str) -> str:
        if normalized_unit == KILOGRAM:
            return PRICE_UNIT_KG
        if normalized_unit == LITER:
            return PRICE_UNIT_L
        if normalized_unit == UNIT:
            return PRICE_UNIT_ITEM
        kind = self.converter.unit_kind(recipe_unit)
        if kind == MASS:
            return PRICE_UNIT_KG
        if kind == VOLUME:
            return PRICE_UNIT_L
        return PRICE_UNIT_ITEM

    def price_recipe(
        self,
        recipe: Recipe,
        store_id: str,
        catalog: StoreCatalog,
        ingredients: Mapping[str, Ingredient],
        week_of: str,
        today: date | None = None,
        calculated_at: datetime | None = None,
    ) -> RecipeStorePrice:
        total = 0.0
        missing = 0
        breakdown: list[IngredientBreakdownItem] = []

        for line in aggregate_lines(recipe.ingredients):
            ingredient = ingredients.get(line.ingredient_id)
            if ingredient is None:
                logger.warning(
                    "recipe.unknown_ingredient recipe_id=%s ingredient_id=%s", recipe.id, line.ingredient_id
                )
                missing += 1
                continue

            pricing = self.selector.select_price(ingredient.name, ingredient.category, catalog, today=today)
            cost = self.calculator.cost(line.quantity, line.unit, pricing, ingredient.name)
            total += cost
            if pricing.source == PriceSource.ESTIMATE:
                missing += 1

            breakdown.append(
                IngredientBreakdownItem(
                    ingredient_id=ingredient.id,
                    name=ingredient.name,
                    quantity=line.quantity,
                    unit=line.unit,
                    unit_price=round_money(pricing.price),
                    price_unit=self.price_unit_label(pricing.normalized_unit, line.unit),
                    calculated_cost=cost,
                    source=pricing.source.value,
                )
            )

        total = min(round_money(total), self.max_recipe_total)
        return RecipeStorePrice(
            recipe_id=recipe.id,
            store_id=store_id,
            week_of=week_of,
            total_cost=total,
            missing_ingredients_count=missing,
            is_complete=missing == 0 and total > 0,
            breakdown=breakdown,
            calculated_at=calculated_at or datetime.now(timezone.utc),
        )
