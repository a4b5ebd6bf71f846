from grocery_pricing.services.pricing.unit_converter import COUNT, MASS, VOLUME, UnitConverter


def test_pound_equals_454_grams():
    converter = UnitConverter()
    assert converter.convert(1, "lb", "g") == converter.convert(454, "g", "g")
    assert converter.convert(1, "Livre", "kg") == 0.454


def test_liter_equals_1000_ml():
    converter = UnitConverter()
    assert converter.convert(1, "L", "ml") == 1000
    assert converter.convert(1000, "ml", "l") == 1


def test_spoons_and_cups():
    converter = UnitConverter()
    assert converter.convert(2, "c. à soupe", "ml") == 30
    assert converter.convert(1, "C. à thé", "ml") == 5
    assert converter.convert(1, "tasse", "ml") == 250


def test_mass_volume_cross_conversion_uses_density_one():
    converter = UnitConverter()
    assert converter.convert(250, "ml", "g") == 250
    assert converter.convert(500, "g", "l") == 0.5


def test_count_and_unknown_units_have_no_canonical_quantity():
    converter = UnitConverter()
    assert converter.to_canonical(2, "gousses") is None
    assert converter.to_canonical(1, "boîte") is None


def test_unit_kind():
    converter = UnitConverter()
    assert converter.unit_kind("Kg ") == MASS
    assert converter.unit_kind("tasse") == VOLUME
    assert converter.unit_kind("") == COUNT
    assert converter.unit_kind(None) == COUNT
    assert converter.unit_kind("boîte") is None


def test_count_based_resolution():
    converter = UnitConverter()
    assert converter.is_count_based("Oignons", "")
    assert converter.is_count_based("Boeuf haché", "gousse")
    # A measured unit wins over the ingredient name.
    assert not converter.is_count_based("oignon", "g")
    assert not converter.is_count_based("sel", "pincée")
    assert not converter.is_count_based("Farine", "boîte")


def test_grams_per_unit_static_table():
    converter = UnitConverter()
    assert converter.grams_per_unit("Oignon jaune") == 150
    assert converter.grams_per_unit("Pommes de terre") == 200
    assert converter.grams_per_unit("oeuf") == 50
    assert converter.grams_per_unit("Gousses d'ail") == 5
    assert converter.grams_per_unit("Navet") is None


def test_grams_per_unit_prefers_equivalences():
    converter = UnitConverter(equivalence_lookup=lambda name: 42.0 if name.lower() == "ail" else None)
    assert converter.grams_per_unit("ail") == 42.0
    assert converter.grams_per_unit("oignon") == 150


def test_package_size_resolution():
    converter = UnitConverter()
    size = converter.package_size("Huile d'olive extra vierge", "ml")
    assert (size.size, size.unit) == (750, "ml")
    size = converter.package_size("Poitrine de poulet", "g")
    assert (size.size, size.unit) == (1000, "g")
    size = converter.package_size("Filet de saumon", "g")
    assert (size.size, size.unit) == (500, "g")
    size = converter.package_size("Truc inconnu", "g")
    assert (size.size, size.unit) == (500, "g")
    size = converter.package_size("Truc inconnu", "ml")
    assert (size.size, size.unit) == (500, "ml")
    assert converter.package_size("Truc inconnu", "boîte") is None


def test_item_rules_first_match_wins():
    converter = UnitConverter()
    assert converter.item_rule("Oignons verts").package_weight == 100
    assert converter.item_rule("Oignons verts").per_item_threshold is None
    assert converter.item_rule("oignon").per_item_threshold == 0.80
    assert converter.item_rule("Pommes de terre").package_weight == 2000
    assert converter.item_rule("pomme").per_item_threshold == 1.50
    assert converter.item_rule("gousse d'ail").package_weight == 50
    assert converter.item_rule("Navet").package_weight == 500
