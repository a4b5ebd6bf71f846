"""
Best price for one ingredient at one store.

Sources are tried in order: unified catalog, flyer promotions, reference prices,
then a per-category estimate. Every step is bounded by the ingredient's price cap,
which is what keeps a $80 box of diapers from being priced as "couches de lasagne".
"""

from datetime import date

from grocery_pricing.config import settings
from grocery_pricing.logging import get_logger
from grocery_pricing.services.pricing.product_matcher import ProductMatcher
from grocery_pricing.services.pricing.records import (
    KILOGRAM,
    LITER,
    UNIT,
    CatalogEntry,
    PriceSource,
    PricingResult,
    StoreCatalog,
)
from grocery_pricing.services.pricing.tables import lookup
from grocery_pricing.services.pricing.text import contains_word, mentions, normalize_text, tokenize
from grocery_pricing.services.pricing.unit_converter import COUNT, MASS, VOLUME, UnitConverter

logger = get_logger(__name__)

MIN_SEARCH_TERM_LENGTH = 3


class PriceSelector:
    def __init__(
        self,
        converter: UnitConverter,
        matcher: ProductMatcher,
        global_max_price: float | None = None,
        default_estimate: float | None = None,
    ) -> None:
        self.converter = converter
        self.matcher = matcher
        self.tables = converter.tables
        self.global_max_price = (
            settings.global_max_ingredient_price if global_max_price is None else global_max_price
        )
        self.default_estimate = (
            settings.default_category_estimate if default_estimate is None else default_estimate
        )

    def price_cap(self, ingredient_name: str) -> float:
        cap = lookup(self.tables.price_caps, ingredient_name)
        return self.global_max_price if cap is None else cap

    def select_price(
        self,
        ingredient_name: str,
        category: str | None,
        catalog: StoreCatalog,
        today: date | None = None,
    ) -> PricingResult:
        cap = self.price_cap(ingredient_name)

        unified = self.find_unified_price(ingredient_name, catalog.unified)
        if unified is not None:
            unit_price, normalized_unit = unified
            return PricingResult(ingredient_name, min(unit_price, cap), PriceSource.UNIFIED, normalized_unit)

        promos = [
            (p.product_name, p.price)
            for p in catalog.promotions
            if today is None or p.valid_until is None or p.valid_until >= today
        ]
        promo = self._best_named_price(ingredient_name, promos, cap)
        if promo is not None:
            product_name, price, score = promo
            logger.debug(
                "price.match ingredient=%s product=%s price=%s score=%.2f cap=%s",
                ingredient_name,
                product_name,
                price,
                score,
                cap,
            )
            return PricingResult(ingredient_name, price, PriceSource.PROMO)

        reference = self._best_named_price(
            ingredient_name, [(r.product_name, r.price) for r in catalog.references], cap
        )
        if reference is not None:
            return PricingResult(ingredient_name, reference[1], PriceSource.REFERENCE)

        return PricingResult(ingredient_name, min(self.category_estimate(category), cap), PriceSource.ESTIMATE)

    def category_estimate(self, category: str | None) -> float:
        if not category:
            return self.default_estimate
        return self.tables.category_estimates.get(normalize_text(category), self.default_estimate)

    def find_unified_price(
        self, ingredient_name: str, entries: list[CatalogEntry]
    ) -> tuple[float, str] | None:
        """(unit price, "kg" | "l" | "unit") of the best usable catalog entry."""
        name = normalize_text(ingredient_name)
        if not name:
            return None
        terms = tokenize(name, min_length=MIN_SEARCH_TERM_LENGTH)

        best: tuple[float, str] | None = None
        best_score = 0.0
        for entry in entries:
            product = normalize_text(entry.generic_product_name)
            if not product or self.matcher.is_excluded(product):
                continue
            resolved = self.resolve_unit_price(entry)
            if resolved is None:
                continue
            if product == name:
                return resolved
            if mentions(product, name) or any(contains_word(product, t) for t in terms):
                score = len(name) / len(product)
                if best is None or score > best_score:
                    best, best_score = resolved, score
        return best

    def resolve_unit_price(self, entry: CatalogEntry) -> tuple[float, str] | None:
        """Price per kg, per L, or per unit; None when the entry cannot be compared."""
        price = effective_price(entry)
        if price is None:
            return None
        kind = self.converter.unit_kind(entry.unit)
        if kind is None:
            return None
        if entry.unit_price is not None and entry.unit_price > 0:
            if kind == MASS:
                return entry.unit_price, KILOGRAM
            if kind == VOLUME:
                return entry.unit_price, LITER
            return entry.unit_price, UNIT

        quantity = entry.quantity if entry.quantity and entry.quantity > 0 else 1
        if kind == COUNT:
            return price / quantity, UNIT
        target = KILOGRAM if kind == MASS else LITER
        amount = self.converter.convert(quantity, entry.unit, target)
        if not amount:
            return None
        return price / amount, target

    def _best_named_price(
        self, ingredient_name: str, offers: list[tuple[str, float]], cap: float
    ) -> tuple[str, float, float] | None:
        """Highest match score wins, ties go to the lowest price."""
        best: tuple[str, float, float] | None = None
        for product_name, price in offers:
            if price is None or price <= 0 or price > cap:
                continue
            score = self.matcher.score(ingredient_name, product_name)
            if score < self.matcher.threshold:
                continue
            if best is None or score > best[2] or (score == best[2] and price < best[1]):
                best = (product_name, price, score)
        return best


def effective_price(entry: CatalogEntry) -> float | None:
    """Sale price when there is one, else the regular price. None unless positive."""
    for price in (entry.sale_price, entry.regular_price):
        if price is not None and price > 0:
            return price
    return None
