"""
Cost of the quantity a recipe needs, given the price picked for the ingredient.

Three shapes of price are handled:
  - per item ("unit"): price x quantity
  - per kg or per L (unified catalog): price x quantity converted to kg or L
  - per package (promotions, reference prices, estimates): the share of a standard
    retail package the recipe uses, or per item when the price is low enough to be
    the price of a single onion, lemon, etc.
Every result is clamped to [0.01, global max] and rounded to cents.
"""

import math

from grocery_pricing.config import settings
from grocery_pricing.logging import get_logger
from grocery_pricing.services.pricing.records import KILOGRAM, LITER, UNIT, PricingResult
from grocery_pricing.services.pricing.unit_converter import UnitConverter

logger = get_logger(__name__)

MIN_COST = 0.01
DEFAULT_GRAMS_PER_UNIT = 100
# Without a known item weight we never charge for more than two packages.
MAX_PACKAGES_WITHOUT_WEIGHT = 2


def round_money(value: float) -> float:
    """Round half up to cents (round() would give banker's rounding)."""
    return math.floor(value * 100 + 0.5) / 100


class CostCalculator:
    def __init__(self, converter: UnitConverter, max_cost: float | None = None) -> None:
        self.converter = converter
        self.max_cost = settings.global_max_ingredient_cost if max_cost is None else max_cost

    def cost(self, quantity: float, unit: str | None, pricing: PricingResult, ingredient_name: str) -> float:
        if pricing.normalized_unit == UNIT:
            raw = pricing.price * quantity
        elif pricing.normalized_unit in (KILOGRAM, LITER):
            raw = self.cost_from_unit_price(quantity, unit, pricing.price, ingredient_name, pricing.normalized_unit)
        else:
            raw = self.proportional_cost(quantity, unit, pricing.price, ingredient_name)
        return self.clamp(raw)

    def clamp(self, raw: float) -> float:
        if math.isnan(raw):
            return MIN_COST
        return round_money(min(max(raw, MIN_COST), self.max_cost))

    def grams_per_unit(self, ingredient_name: str) -> float:
        grams = self.converter.grams_per_unit(ingredient_name)
        if grams is None:
            grams = self.converter.item_rule(ingredient_name).item_weight
        return DEFAULT_GRAMS_PER_UNIT if grams is None else grams

    def cost_from_unit_price(
        self, quantity: float, unit: str | None, unit_price: float, ingredient_name: str, price_unit: str
    ) -> float:
        amount = self.converter.convert(quantity, unit, price_unit)
        if amount is None:
            # Counted ("3 gousses") or unknown recipe unit against a $/kg price.
            grams = self.grams_per_unit(ingredient_name)
            amount = quantity * grams / 1000
            logger.debug(
                "cost.per_unit_weight ingredient=%s quantity=%s grams_per_unit=%s",
                ingredient_name,
                quantity,
                grams,
            )
        return unit_price * amount

    def proportional_cost(self, quantity: float, unit: str | None, price: float, ingredient_name: str) -> float:
        if self.converter.is_count_based(ingredient_name, unit):
            return self._count_based_cost(quantity, unit, price, ingredient_name)

        size = self.converter.package_size(ingredient_name, unit)
        if size is None:
            return price
        needed = self.converter.convert(quantity, unit, size.unit)
        if needed is None:
            return price
        return package_share(price, needed, size.size)

    def _count_based_cost(self, quantity: float, unit: str | None, price: float, ingredient_name: str) -> float:
        weight = self.converter.grams_per_unit(ingredient_name)
        if weight is None:
            packages = min(math.ceil(quantity), MAX_PACKAGES_WITHOUT_WEIGHT)
            logger.debug(
                "cost.unknown_weight ingredient=%s quantity=%s unit=%s packages=%s",
                ingredient_name,
                quantity,
                unit,
                packages,
            )
            return price * packages

        rule = self.converter.item_rule(ingredient_name)
        if rule.per_item_threshold is not None and price < rule.per_item_threshold:
            return price * quantity
        return package_share(price, quantity * weight, rule.package_weight)


def package_share(price: float, needed: float, package_size: float) -> float:
    """Price of the needed fraction of a package, never more than the whole packages bought."""
    proportion = needed / package_size
    return min(price * proportion, price * math.ceil(proportion))
