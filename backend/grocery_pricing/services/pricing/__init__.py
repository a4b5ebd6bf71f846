"""Recipe pricing engine: unit canonicalization, product matching, price selection and cost rollup."""

from grocery_pricing.services.pricing.calculation_run import CalculationRun, RunLock, RunState
from grocery_pricing.services.pricing.cost_calculator import CostCalculator
from grocery_pricing.services.pricing.equivalence_cache import EquivalenceCache
from grocery_pricing.services.pricing.price_selector import PriceSelector
from grocery_pricing.services.pricing.product_matcher import ProductMatcher
from grocery_pricing.services.pricing.recipe_aggregator import RecipeAggregator
from grocery_pricing.services.pricing.unit_converter import UnitConverter

__all__ = [
    "CalculationRun",
    "CostCalculator",
    "EquivalenceCache",
    "PriceSelector",
    "ProductMatcher",
    "RecipeAggregator",
    "RunLock",
    "RunState",
    "UnitConverter",
]
