"""
Quick price preview over an in-memory price table.

Only mass/volume canonicalization is applied: no fuzzy matching, no price caps and
no count-based heuristics. Offers are matched to recipe lines by ingredient id.
"""

from dataclasses import dataclass
from typing import Iterable

from grocery_pricing.services.pricing.records import Recipe
from grocery_pricing.services.pricing.unit_converter import UnitConverter

NO_PRICE_ERROR = "No price available in the selected stores"


@dataclass
class PriceOffer:
    store_id: str
    ingredient_id: str
    price: float
    quantity: float
    unit: str


def canonical_quantity(converter: UnitConverter, quantity: float, unit: str | None) -> float:
    """Grams or milliliters (density 1); unknown units keep the raw quantity."""
    canonical = converter.to_canonical(quantity, unit)
    return quantity if canonical is None else canonical[0]


def preview_prices(
    recipes: Iterable[Recipe],
    offers: Iterable[PriceOffer],
    allowed_store_ids: Iterable[str],
    converter: UnitConverter | None = None,
) -> list[dict]:
    converter = converter or UnitConverter()
    allowed = set(allowed_store_ids)
    offers = [o for o in offers if o.store_id in allowed]

    results = []
    for recipe in recipes:
        total = 0.0
        valid = True
        lines = []
        for line in recipe.ingredients:
            quantity = line.quantity or 0
            needed = canonical_quantity(converter, quantity, line.unit)
            best = None
            for offer in offers:
                if offer.ingredient_id != line.ingredient_id:
                    continue
                offered = canonical_quantity(converter, offer.quantity, offer.unit)
                if offered <= 0:
                    continue
                cost = offer.price / offered * needed
                if best is None or cost < best[0]:
                    best = (cost, offer)

            entry = {"ingredient_id": line.ingredient_id, "quantity": quantity, "unit": line.unit}
            if best is None:
                valid = False
                entry.update(best_deal=None, error=NO_PRICE_ERROR)
            else:
                cost, offer = best
                total += cost
                entry["best_deal"] = {
                    "store_id": offer.store_id,
                    "price": offer.price,
                    "unit": offer.unit,
                    "cost": round(cost, 2),
                }
            lines.append(entry)

        results.append(
            {
                "recipe_id": recipe.id,
                "recipe_name": recipe.name,
                "ingredients": lines,
                "total_price": round(total, 2) if valid else 0.0,
            }
        )
    return results
