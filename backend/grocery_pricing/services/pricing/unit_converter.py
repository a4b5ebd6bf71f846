"""
Quantity canonicalization.

Recipe and catalog quantities come with free-text units ("c. à soupe", "lbs", "gousses").
Mass units resolve to grams and volume units to milliliters. Mass and volume are
converted into each other with a density of 1, which is close enough for the
liquids and pastes recipes measure by volume but wrong for flour or sugar.
"""

from typing import Callable

from grocery_pricing.services.pricing.records import GRAM, KILOGRAM, LITER, MILLILITER
from grocery_pricing.services.pricing.tables import (
    DEFAULT_TABLES,
    ItemPricingRule,
    PackageSize,
    PricingTables,
    lookup,
)
from grocery_pricing.services.pricing.text import contains_word, mentions, normalize_text

MASS = "mass"
VOLUME = "volume"
COUNT = "count"

DEFAULT_PACKAGE_GRAMS = 500
DEFAULT_PACKAGE_ML = 500


class UnitConverter:
    def __init__(
        self,
        tables: PricingTables = DEFAULT_TABLES,
        equivalence_lookup: Callable[[str], float | None] | None = None,
    ) -> None:
        self.tables = tables
        # Usually EquivalenceCache.resolve; consulted before the static weights.
        self._equivalence_lookup = equivalence_lookup

    def normalize_unit(self, unit: str | None) -> str:
        return normalize_text(unit)

    def unit_kind(self, unit: str | None) -> str | None:
        """MASS, VOLUME, COUNT, or None when the unit is not recognized."""
        u = self.normalize_unit(unit)
        if u in self.tables.mass_units:
            return MASS
        if u in self.tables.volume_units:
            return VOLUME
        if u in self.tables.counting_units:
            return COUNT
        return None

    def is_measured(self, unit: str | None) -> bool:
        return self.unit_kind(unit) in (MASS, VOLUME)

    def to_canonical(self, quantity: float, unit: str | None) -> tuple[float, str] | None:
        """(amount, "g") or (amount, "ml"); None for count and unknown units."""
        u = self.normalize_unit(unit)
        if u in self.tables.mass_units:
            return quantity * self.tables.mass_units[u], GRAM
        if u in self.tables.volume_units:
            return quantity * self.tables.volume_units[u], MILLILITER
        return None

    def convert(self, quantity: float, unit: str | None, target: str) -> float | None:
        """Convert into g, ml, kg or l, crossing mass/volume at density 1."""
        canonical = self.to_canonical(quantity, unit)
        if canonical is None:
            return None
        amount, _ = canonical
        if target in (GRAM, MILLILITER):
            return amount
        if target in (KILOGRAM, LITER):
            return amount / 1000
        raise ValueError(f"unsupported target unit {target!r}")

    def is_count_based(self, ingredient_name: str, unit: str | None) -> bool:
        """Bought whole (eggs, onions, cloves) rather than weighed out.

        A mass or volume recipe unit always wins over the ingredient name:
        "500 g oignons" is weighed, "2 oignons" is counted.
        """
        if self.is_measured(unit):
            return False
        if self.unit_kind(unit) == COUNT:
            return True
        name = normalize_text(ingredient_name)
        return any(mentions(name, item) for item in self.tables.count_based_names)

    def grams_per_unit(self, ingredient_name: str) -> float | None:
        if self._equivalence_lookup is not None:
            grams = self._equivalence_lookup(ingredient_name)
            if grams is not None:
                return grams
        return lookup(self.tables.unit_weights, ingredient_name)

    def package_size(self, ingredient_name: str, unit: str | None) -> PackageSize | None:
        size = lookup(self.tables.package_sizes, ingredient_name)
        if size is not None:
            return size
        name = normalize_text(ingredient_name)
        for keywords, category_size in self.tables.category_package_sizes:
            if any(contains_word(name, kw) for kw in keywords):
                return category_size
        kind = self.unit_kind(unit)
        if kind == MASS:
            return PackageSize(DEFAULT_PACKAGE_GRAMS, GRAM)
        if kind == VOLUME:
            return PackageSize(DEFAULT_PACKAGE_ML, MILLILITER)
        return None

    def item_rule(self, ingredient_name: str) -> ItemPricingRule:
        name = normalize_text(ingredient_name)
        for rule in self.tables.item_rules:
            if rule.matches(name):
                return rule
        return self.tables.default_item_rule
