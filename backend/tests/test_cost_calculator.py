import pytest

from grocery_pricing.services.pricing.cost_calculator import CostCalculator, package_share, round_money
from grocery_pricing.services.pricing.records import PriceSource, PricingResult
from grocery_pricing.services.pricing.unit_converter import UnitConverter


def _calculator() -> CostCalculator:
    return CostCalculator(UnitConverter())


def _unified(name: str, price: float, unit: str) -> PricingResult:
    return PricingResult(name, price, PriceSource.UNIFIED, unit)


def _promo(name: str, price: float) -> PricingResult:
    return PricingResult(name, price, PriceSource.PROMO)


def test_round_money_rounds_half_up():
    assert round_money(0.125) == 0.13
    assert round_money(6.7449) == 6.74


def test_price_per_item():
    assert _calculator().cost(3, "", _unified("citron", 0.5, "unit"), "citron") == 1.5


def test_price_per_kg_and_per_liter():
    calc = _calculator()
    assert calc.cost(1, "lb", _unified("Boeuf haché", 4.44 / 0.454, "kg"), "Boeuf haché") == 4.44
    assert calc.cost(1, "kg", _unified("Pommes de terre", 2.99 / 2.27, "kg"), "Pommes de terre") == 1.32
    assert calc.cost(398, "ml", _unified("Maïs en crème", 0.99 / 0.398, "l"), "Maïs en crème") == 0.99


def test_price_per_kg_with_volume_recipe_unit():
    assert _calculator().cost(250, "ml", _unified("sucre", 2.0, "kg"), "sucre") == 0.5


def test_price_per_kg_with_counted_recipe_unit():
    calc = _calculator()
    # 2 onions x 150 g
    assert calc.cost(2, "", _unified("oignon", 3.0, "kg"), "oignon") == 0.9
    # No known weight: 100 g per item
    assert calc.cost(2, "", _unified("navet", 5.0, "kg"), "navet") == 1.0


def test_proportional_cost_of_standard_package():
    calc = _calculator()
    # 30 ml out of a 750 ml bottle
    assert calc.cost(2, "c. à soupe", _promo("Huile d'olive", 9.0), "Huile d'olive") == 0.36
    # 100 g out of the 500 g default package
    estimate = PricingResult("Safran pur", 3.99, PriceSource.ESTIMATE)
    assert calc.cost(100, "g", estimate, "Safran pur") == 0.8
    assert calc.cost(2, "g", estimate, "Safran pur") == 0.02


def test_unknown_unit_costs_whole_package():
    calc = _calculator()
    assert calc.cost(1, "boîte", _promo("Truc inconnu", 4.5), "Truc inconnu") == 4.5
    assert calc.cost(1, "bouteille", _promo("Vinaigre balsamique", 3.49), "Vinaigre balsamique") == 3.49


def test_count_based_price_per_item_below_threshold():
    assert _calculator().cost(3, "", _promo("citron", 0.79), "citron") == 2.37


def test_count_based_package_price_above_threshold():
    calc = _calculator()
    # 2 x 150 g out of a 1.5 kg bag
    assert calc.cost(2, "", _promo("oignon", 2.99), "oignon") == 0.6
    # Garlic is always a 50 g head: 3 x 5 g
    assert calc.cost(3, "gousses", _promo("ail", 1.99), "ail") == 0.6


def test_count_based_without_weight_caps_at_two_packages():
    calc = _calculator()
    assert calc.cost(5, "tranches", _promo("Fromage suisse", 4.0), "Fromage suisse") == 8.0
    assert calc.cost(0.5, "tranches", _promo("Fromage suisse", 4.0), "Fromage suisse") == 4.0


def test_costs_are_clamped():
    calc = _calculator()
    assert calc.cost(100, "kg", _unified("boeuf", 40.0, "kg"), "boeuf") == 60.0
    assert calc.cost(0.1, "g", _promo("sel", 0.5), "sel") == 0.01
    assert calc.clamp(float("nan")) == 0.01
    assert calc.clamp(float("inf")) == 60.0


def test_package_share_never_exceeds_whole_packages():
    assert package_share(3.0, 250, 500) == pytest.approx(1.5)
    assert package_share(3.0, 1200, 500) == pytest.approx(7.2)
