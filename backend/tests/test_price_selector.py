from datetime import date

import pytest

from grocery_pricing.services.pricing.price_selector import PriceSelector, effective_price
from grocery_pricing.services.pricing.product_matcher import ProductMatcher
from grocery_pricing.services.pricing.records import (
    CatalogEntry,
    PriceSource,
    PromotionEntry,
    ReferenceEntry,
    StoreCatalog,
)
from grocery_pricing.services.pricing.unit_converter import UnitConverter


def _selector() -> PriceSelector:
    converter = UnitConverter()
    return PriceSelector(converter, ProductMatcher())


def test_unified_exact_name_wins():
    catalog = StoreCatalog(
        unified=[
            CatalogEntry("Boeuf haché extra maigre", regular_price=9.0, quantity=1, unit="kg"),
            CatalogEntry("Boeuf haché", regular_price=4.44, quantity=1, unit="lb"),
        ]
    )
    result = _selector().select_price("Boeuf haché", "Viandes", catalog)
    assert result.source == PriceSource.UNIFIED
    assert result.normalized_unit == "kg"
    assert result.price == pytest.approx(4.44 / 0.454)


def test_unified_prefers_sale_price():
    catalog = StoreCatalog(unified=[CatalogEntry("Lait", regular_price=5.99, sale_price=4.99, quantity=2, unit="l")])
    result = _selector().select_price("lait", None, catalog)
    assert result.price == pytest.approx(2.495)
    assert result.normalized_unit == "l"


def test_unified_explicit_unit_price_is_capped():
    catalog = StoreCatalog(unified=[CatalogEntry("Beurre", regular_price=5.0, unit_price=11.01, quantity=454, unit="g")])
    result = _selector().select_price("beurre", None, catalog)
    assert result.source == PriceSource.UNIFIED
    assert result.price == 8


def test_unified_count_unit_gives_price_per_item():
    catalog = StoreCatalog(unified=[CatalogEntry("Citron", regular_price=2.0, quantity=4, unit="")])
    result = _selector().select_price("citron", None, catalog)
    assert result.normalized_unit == "unit"
    assert result.price == pytest.approx(0.5)


def test_unified_best_containment_score():
    catalog = StoreCatalog(
        unified=[
            CatalogEntry("Tomates italiennes en conserve", regular_price=2.0, quantity=796, unit="ml"),
            CatalogEntry("Tomates cerises", regular_price=5.0, quantity=1, unit="kg"),
        ]
    )
    result = _selector().select_price("tomates", None, catalog)
    assert result.price == pytest.approx(5.0)
    assert result.normalized_unit == "kg"


def test_unusable_unified_entries_are_skipped():
    catalog = StoreCatalog(
        unified=[
            CatalogEntry("Savon au lait", regular_price=3.0, quantity=1, unit="kg"),
            CatalogEntry("Lait", regular_price=None, quantity=1, unit="l"),
            CatalogEntry("Lait", regular_price=4.0, quantity=1, unit="caisse"),
        ],
        promotions=[PromotionEntry("Lait écrémé", 5.49)],
    )
    result = _selector().select_price("lait", None, catalog)
    assert result.source == PriceSource.PROMO
    assert result.price == 5.49


def test_promotions_filtered_by_cap_validity_and_score():
    catalog = StoreCatalog(
        promotions=[
            PromotionEntry("Lait 2% 4L", 6.49, date(2025, 1, 10)),
            PromotionEntry("Lait écrémé", 5.49, date(2025, 1, 10)),
            PromotionEntry("Lait expiré", 1.00, date(2025, 1, 1)),
            PromotionEntry("Chocolat", 0.99, date(2025, 1, 10)),
        ]
    )
    result = _selector().select_price("lait", None, catalog, today=date(2025, 1, 5))
    assert result.source == PriceSource.PROMO
    assert result.price == 5.49
    assert result.normalized_unit is None


def test_promotion_ties_go_to_lowest_price():
    catalog = StoreCatalog(promotions=[PromotionEntry("Lait 1%", 4.99), PromotionEntry("Lait 3.25%", 4.79)])
    assert _selector().select_price("lait", None, catalog).price == 4.79


def test_reference_prices_after_promotions():
    catalog = StoreCatalog(references=[ReferenceEntry("Farine tout usage", 4.29)])
    result = _selector().select_price("farine", None, catalog)
    assert result.source == PriceSource.REFERENCE
    assert result.price == 4.29


def test_category_estimate_fallback():
    selector = _selector()
    empty = StoreCatalog()
    assert selector.select_price("Safran pur", "Épicerie", empty).price == 3.99
    assert selector.select_price("Safran pur", None, empty).price == 3.99
    assert selector.select_price("Boeuf haché", "viandes", empty).price == 8.99
    assert selector.select_price("Filet de saumon", "Poissons", empty).price == 12.99
    result = selector.select_price("Safran pur", "Inconnue", empty)
    assert result.source == PriceSource.ESTIMATE
    assert result.price == 3.99


def test_estimate_is_capped():
    catalog = StoreCatalog(promotions=[PromotionEntry("Sel de mer", 9.99)])
    result = _selector().select_price("sel", "Viandes", catalog)
    assert result.source == PriceSource.ESTIMATE
    assert result.price == 4


def test_effective_price():
    assert effective_price(CatalogEntry("x", regular_price=3.0, sale_price=2.5)) == 2.5
    assert effective_price(CatalogEntry("x", regular_price=3.0, sale_price=0)) == 3.0
    assert effective_price(CatalogEntry("x")) is None


def test_compound_non_food_promotion_is_never_picked():
    catalog = StoreCatalog(
        promotions=[
            PromotionEntry("Multivitamines gélifiées à l'orange", 4.99),
            PromotionEntry("Oranges navel", 1.29),
        ]
    )
    result = _selector().select_price("orange", "Fruits et légumes", catalog)
    assert result.source == PriceSource.PROMO
    assert result.price == 1.29
