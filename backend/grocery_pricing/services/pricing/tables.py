"""
Heuristic tables for the pricing engine: unit synonyms, per-item weights, standard
retail package sizes, price caps, keyword expansions and the non-food denylist.

Values are tuned for Québec grocery flyers (French product names, CAD prices).
Every table is keyed by normalized text and validated when built: two raw keys
that normalize to the same key with different values raise TableValidationError.
Callers receive a frozen PricingTables bundle, so a region-specific variant can be
passed to the components instead of DEFAULT_TABLES.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping

from grocery_pricing.services.pricing.errors import TableValidationError
from grocery_pricing.services.pricing.text import contains_word, mentions, normalize_text


@dataclass(frozen=True)
class PackageSize:
    size: float
    unit: str  # "g" or "ml"


@dataclass(frozen=True)
class ItemPricingRule:
    """How a count-based ingredient family is sold.

    A displayed price under per_item_threshold is read as the price of one item;
    otherwise it is the price of a package weighing package_weight grams.
    A threshold of None means the family is only ever sold by the package.
    """

    keywords: tuple[str, ...]
    package_weight: float
    per_item_threshold: float | None = None
    item_weight: float | None = None
    excludes: tuple[str, ...] = ()

    def matches(self, name: str) -> bool:
        if any(contains_word(name, ex) for ex in self.excludes):
            return False
        return any(contains_word(name, kw) for kw in self.keywords)


# --- raw data -------------------------------------------------------------------

_MASS_UNITS = (
    ("g", 1), ("gramme", 1), ("grammes", 1), ("gram", 1), ("grams", 1),
    ("kg", 1000), ("kilogramme", 1000), ("kilogrammes", 1000),
    # 1 lb is rounded to 454 g on purpose: flyer prices are printed against that figure.
    ("lb", 454), ("lbs", 454), ("livre", 454), ("livres", 454), ("pound", 454), ("pounds", 454),
    ("oz", 28.35), ("once", 28.35), ("onces", 28.35), ("ounce", 28.35), ("ounces", 28.35),
    ("pincée", 0.5), ("pincee", 0.5), ("pinch", 0.5),
)

_VOLUME_UNITS = (
    ("c. à soupe", 15), ("c.s.", 15), ("c. s.", 15), ("tbsp", 15),
    ("cuillère à soupe", 15), ("cuillères à soupe", 15), ("tablespoon", 15), ("tablespoons", 15),
    ("c. à thé", 5), ("c.t.", 5), ("c. t.", 5), ("tsp", 5),
    ("cuillère à thé", 5), ("cuillères à thé", 5), ("teaspoon", 5), ("teaspoons", 5),
    ("tasse", 250), ("tasses", 250), ("cup", 250), ("cups", 250),
    ("ml", 1), ("millilitre", 1), ("millilitres", 1),
    ("cl", 10), ("centilitre", 10), ("centilitres", 10),
    ("l", 1000), ("litre", 1000), ("litres", 1000), ("liter", 1000), ("liters", 1000),
)

_COUNTING_UNITS = (
    "", "gousse", "gousses", "branche", "branches", "tige", "tiges",
    "feuille", "feuilles", "tranche", "tranches", "morceau", "morceaux",
    "unité", "unités", "pièce", "pièces", "botte", "bottes",
    "clove", "cloves", "slice", "slices", "piece", "pieces", "leaf", "leaves",
    "branch", "sprig", "sprigs", "unit", "units", "each", "bunch",
)

# Ingredients bought whole rather than weighed out.
_COUNT_BASED_NAMES = (
    "oeuf", "oeufs", "œuf", "œufs",
    "oignon", "oignons", "oignon vert", "oignons verts", "échalote verte",
    "ail", "gousse d'ail", "gousses d'ail",
    "citron", "citrons", "lime", "limes", "orange", "oranges",
    "pomme", "pommes", "banane", "bananes", "avocat", "avocats",
    "tomate", "tomates", "poivron", "poivrons", "concombre", "concombres",
    "carotte", "carottes", "pomme de terre", "pommes de terre", "patate", "patates",
    "poulet", "poitrine de poulet", "cuisse de poulet",
    "pain", "baguette",
    "piment", "piment oiseau", "jalapeño",
)

# Grams for one item / clove / bunch.
_UNIT_WEIGHTS = (
    ("ail", 5), ("gousse d'ail", 5), ("gousses d'ail", 5),
    ("oignon", 150), ("oignons", 150),
    ("oeuf", 50), ("oeufs", 50),
    ("citron", 100), ("citrons", 100),
    ("lime", 70), ("limes", 70),
    ("orange", 180), ("oranges", 180),
    ("pomme", 180), ("pommes", 180),
    ("banane", 120), ("bananes", 120),
    ("avocat", 200), ("avocats", 200),
    ("tomate", 150), ("tomates", 150),
    ("poivron", 150), ("poivrons", 150),
    ("concombre", 300), ("concombres", 300),
    ("carotte", 80), ("carottes", 80),
    ("pomme de terre", 200), ("pommes de terre", 200), ("patate", 200), ("patates", 200),
    ("thym", 10), ("thym frais", 10),
    ("feuille de laurier", 0.3), ("feuilles de laurier", 0.3), ("laurier", 0.3),
    ("basilic frais", 15),
    ("romarin", 10), ("romarin frais", 10),
    ("persil", 15), ("persil frais", 15),
    ("coriandre", 15), ("coriandre fraîche", 15),
    ("menthe", 10), ("menthe fraîche", 10),
    ("oignon vert", 15), ("oignons verts", 15), ("échalote verte", 15),
    ("piment oiseau", 5), ("piment", 10), ("jalapeño", 15),
    ("gingembre", 10), ("gingembre frais", 10),
    ("échalote", 30),
    ("brocoli", 300), ("laitue", 400), ("chou", 500), ("chou-fleur", 500),
    ("courgette", 200), ("courgettes", 200),
    ("céleri", 40),
    ("champignon", 20), ("champignons", 20),
)

# What one buys at the grocery store, in g or ml.
_PACKAGE_SIZES = (
    ("huile", (750, "ml")), ("huile d'olive", (750, "ml")), ("huile olive", (750, "ml")),
    ("huile végétale", (946, "ml")), ("huile de canola", (946, "ml")),
    ("vinaigre", (500, "ml")), ("vinaigre balsamique", (250, "ml")),
    ("sauce soya", (450, "ml")), ("sauce soja", (450, "ml")),
    ("sirop d'érable", (540, "ml")), ("sirop erable", (540, "ml")),
    ("miel", (500, "ml")), ("lait", (2000, "ml")),
    ("crème", (473, "ml")), ("crème fraîche", (250, "ml")), ("crème sure", (500, "ml")),
    ("bouillon", (900, "ml")), ("bouillon de boeuf", (900, "ml")),
    ("bouillon de poulet", (900, "ml")), ("bouillon de légumes", (900, "ml")),
    ("moutarde", (250, "ml")), ("moutarde de dijon", (250, "ml")),
    ("mayonnaise", (450, "ml")), ("ketchup", (750, "ml")), ("sriracha", (480, "ml")),
    ("sauce piquante", (150, "ml")), ("tabasco", (60, "ml")), ("sambal", (200, "ml")),
    ("pâte de tomate", (156, "ml")), ("pâte de tomates", (156, "ml")),
    ("vin", (750, "ml")), ("vin rouge", (750, "ml")), ("vin blanc", (750, "ml")),
    ("paprika", (50, "g")), ("paprika fumé", (50, "g")), ("cumin", (50, "g")),
    ("origan", (25, "g")), ("oregano", (25, "g")), ("thym", (25, "g")), ("thym frais", (25, "g")),
    ("feuille de laurier", (10, "g")), ("feuilles de laurier", (10, "g")), ("laurier", (10, "g")),
    # Fresh herbs come in ~250 ml clamshells.
    ("basilic", (250, "ml")), ("basilic frais", (250, "ml")), ("basilic haché", (250, "ml")),
    ("romarin", (250, "ml")), ("romarin frais", (250, "ml")),
    ("persil", (250, "ml")), ("persil frais", (250, "ml")), ("persil haché", (250, "ml")),
    ("coriandre", (250, "ml")), ("coriandre fraîche", (250, "ml")), ("coriandre hachée", (250, "ml")),
    ("menthe", (250, "ml")), ("menthe fraîche", (250, "ml")),
    ("ciboulette", (250, "ml")), ("aneth", (250, "ml")),
    ("cannelle", (50, "g")), ("muscade", (30, "g")), ("poivre", (50, "g")), ("sel", (500, "g")),
    ("ail en poudre", (50, "g")), ("poudre d'ail", (50, "g")),
    ("oignon en poudre", (50, "g")), ("poudre d'oignon", (50, "g")),
    ("herbes de provence", (30, "g")), ("épices italiennes", (30, "g")),
    ("cari", (50, "g")), ("curry", (50, "g")), ("gingembre moulu", (40, "g")),
    ("piment", (40, "g")), ("cayenne", (40, "g")),
    ("farine", (2500, "g")), ("sucre", (2000, "g")), ("cassonade", (1000, "g")),
    ("riz", (900, "g")), ("pâtes", (450, "g")), ("spaghetti", (450, "g")),
    ("quinoa", (400, "g")), ("avoine", (1000, "g")), ("chapelure", (425, "g")),
    ("beurre", (454, "g")), ("fromage", (400, "g")), ("parmesan", (200, "g")),
    ("yogourt", (650, "g")),
)

# Fallback package sizes by product family, checked in order.
_CATEGORY_PACKAGE_SIZES = (
    (("poulet", "boeuf", "porc", "viande", "jambon", "saucisse", "bacon", "dinde"), (1000, "g")),
    (("poisson", "saumon", "crevette", "morue"), (500, "g")),
    (("fromage",), (400, "g")),
)

# Highest believable unit price per ingredient family ($/kg, $/L or $/package).
# Anything above is a mismatch (a box of diapers matched to "couche de lasagne").
_PRICE_CAPS = (
    ("eau", 3), ("water", 3),
    ("sel", 4), ("salt", 4),
    ("poivre", 8), ("pepper", 8),
    ("sucre", 6), ("sugar", 6),
    ("miel", 12), ("honey", 12), ("sirop", 12), ("syrup", 12),
    ("sauce soya", 6), ("soy sauce", 6), ("sauce soja", 6),
    ("sauce poisson", 6), ("fish sauce", 6),
    ("vinaigre", 6), ("vinegar", 6),
    ("huile", 12), ("oil", 12),
    ("moutarde", 5), ("mustard", 5),
    ("ketchup", 5),
    ("mayonnaise", 6), ("mayo", 6),
    ("sambal", 6), ("sriracha", 6),
    ("ail", 5), ("garlic", 5),
    ("oignon", 4), ("onion", 4),
    ("echalote", 4), ("shallot", 4),
    ("oignons verts", 4), ("green onion", 4),
    ("gingembre", 5), ("ginger", 5),
    ("coriandre", 4), ("cilantro", 4),
    ("persil", 4), ("parsley", 4),
    ("basilic", 4), ("basil", 4),
    ("thym", 4), ("thyme", 4),
    ("romarin", 4), ("rosemary", 4),
    ("menthe", 4), ("mint", 4),
    ("laurier", 4), ("bay", 4),
    ("piment", 4), ("chili", 4), ("jalapeno", 4),
    ("cumin", 5), ("paprika", 5), ("curcuma", 5),
    ("carotte", 5), ("carrot", 5),
    ("celeri", 4), ("celery", 4),
    ("pomme de terre", 6), ("pommes de terre", 6), ("potato", 6), ("patate", 6),
    ("tomate", 6), ("tomato", 6),
    ("concombre", 4), ("cucumber", 4),
    ("poivron", 5), ("bell pepper", 5),
    ("laitue", 4), ("lettuce", 4),
    ("epinard", 5), ("spinach", 5),
    ("brocoli", 5), ("broccoli", 5),
    ("chou", 4), ("cabbage", 4),
    ("courgette", 4), ("zucchini", 4),
    ("champignon", 6), ("mushroom", 6),
    ("citron", 4), ("lemon", 4),
    ("lime", 4),
    ("orange", 5),
    ("pomme", 5), ("apple", 5),
    ("banane", 4), ("banana", 4),
    ("beurre", 8), ("butter", 8),
    ("creme", 6), ("cream", 6),
    ("lait", 6), ("milk", 6),
    ("yogourt", 6), ("yogurt", 6),
    ("ricotta", 8),
    ("feta", 10),
    ("parmesan", 12),
    ("bouillon", 5), ("broth", 5), ("stock", 5),
    ("pate de tomate", 4), ("tomato paste", 4),
    ("concentre", 5),
    ("farine", 6), ("flour", 6),
    ("oeuf", 8), ("egg", 8),
    ("tapioca", 6), ("fecule", 5), ("starch", 5),
    ("levure", 5), ("yeast", 5),
    ("gelatine", 5),
    ("pates", 6), ("pasta", 6), ("spaghetti", 6), ("macaroni", 6),
    ("riz", 8), ("rice", 8),
    ("quinoa", 10),
    ("couscous", 6),
    ("noix", 15), ("nut", 15), ("amande", 15), ("almond", 15),
    ("arachide", 8), ("peanut", 8),
    ("sesame", 8),
)

# Canonical family -> words a flyer may use for it instead.
_KEYWORD_EXPANSIONS = (
    ("poulet", ("poulet", "volaille", "poitrine de poulet", "cuisse de poulet", "ailes de poulet")),
    ("boeuf", ("boeuf", "bifteck", "steak", "viande hachée", "haché")),
    ("porc", ("porc", "côtelette", "longe", "filet de porc", "bacon", "jambon")),
    ("poisson", ("poisson", "saumon", "tilapia", "truite", "morue", "sole", "thon")),
    ("oeuf", ("oeuf", "oeufs")),
    ("lait", ("lait", "lactose")),
    ("fromage", ("fromage", "cheddar", "mozzarella", "parmesan", "brie", "feta")),
    ("yogourt", ("yogourt", "yaourt", "grec", "iogo")),
    ("pain", ("pain", "baguette", "croûte", "tranché")),
    ("pâtes", ("pâtes", "spaghetti", "macaroni", "penne", "fusilli", "catelli")),
    ("riz", ("riz", "basmati", "jasmin")),
    ("tomate", ("tomate", "tomates")),
    ("oignon", ("oignon", "oignons", "échalote")),
    ("ail", ("ail", "gousse")),
    ("carotte", ("carotte", "carottes")),
    ("pomme de terre", ("pomme de terre", "pommes de terre", "patate", "patates")),
    ("beurre", ("beurre", "margarine")),
    ("huile", ("huile", "olive", "canola", "végétale")),
    ("sucre", ("sucre", "cassonade")),
    ("farine", ("farine", "blé")),
    ("légumes", ("légume", "légumes", "brocoli", "épinard", "courgette", "poivron")),
    ("fruits", ("pomme", "banane", "orange", "fraise", "bleuet", "framboise")),
)

_NON_FOOD_KEYWORDS = (
    "pampers", "huggies", "couche", "couches", "diaper", "diapers",
    "tablet", "tablette", "samsung", "apple", "iphone", "ipad", "galaxy",
    "television", "téléviseur", "écran", "monitor",
    "matelas", "meuble", "meubles", "furniture",
    "bicycle", "exercice", "fitness",
    "pelle", "neige", "outils", "tools",
    "shampoo", "shampooing", "savon", "soap", "détergent", "detergent", "nettoyant",
    "papier toilette", "toilet paper", "mouchoir", "tissue",
    "vêtement", "clothing", "shirt", "pantalon",
    "matcha", "supplement", "supplément", "vitamine", "vitamin",
    "fonctionnel", "functional", "adaptogène", "adaptogen",
)

_CATEGORY_ESTIMATES = (
    ("Viandes", 8.99),
    ("Poissons", 12.99),
    ("Produits laitiers", 4.99),
    ("Fruits et légumes", 2.99),
    ("Boulangerie", 3.49),
    ("Épicerie", 3.99),
    ("Surgelés", 5.99),
)

# Checked in order; the first matching rule wins. Thresholds are in dollars and
# reflect Québec produce prices, so they need retuning for another market.
_ITEM_RULES = (
    ItemPricingRule(keywords=("ail", "gousse"), package_weight=50),
    ItemPricingRule(
        keywords=("oignon vert", "oignons verts", "echalote verte", "echalotes vertes"),
        package_weight=100,
    ),
    ItemPricingRule(
        keywords=("herbe", "thym", "romarin", "basilic", "persil", "coriandre", "menthe", "laurier"),
        package_weight=30,
    ),
    ItemPricingRule(keywords=("carotte",), per_item_threshold=0.80, item_weight=80, package_weight=1000),
    ItemPricingRule(
        keywords=("oignon",), excludes=("vert", "verts"),
        per_item_threshold=0.80, item_weight=150, package_weight=1500,
    ),
    ItemPricingRule(
        keywords=("pomme de terre", "pommes de terre", "patate"),
        per_item_threshold=0.80, item_weight=200, package_weight=2000,
    ),
    ItemPricingRule(keywords=("citron", "lime"), per_item_threshold=1.50, item_weight=100, package_weight=1000),
    ItemPricingRule(keywords=("orange",), per_item_threshold=1.50, item_weight=180, package_weight=1000),
    ItemPricingRule(keywords=("piment", "jalapeno"), package_weight=100),
    ItemPricingRule(keywords=("banane",), per_item_threshold=1.00, item_weight=120, package_weight=1000),
    ItemPricingRule(
        keywords=("pomme",), excludes=("terre",),
        per_item_threshold=1.50, item_weight=180, package_weight=1000,
    ),
    ItemPricingRule(keywords=("tomate",), per_item_threshold=1.50, item_weight=150, package_weight=1000),
    ItemPricingRule(keywords=("avocat",), per_item_threshold=3.00, item_weight=200, package_weight=600),
    ItemPricingRule(keywords=("concombre",), per_item_threshold=1.50, item_weight=300, package_weight=600),
    ItemPricingRule(keywords=("poivron",), per_item_threshold=1.50, item_weight=150, package_weight=500),
    ItemPricingRule(keywords=("celeri",), package_weight=500),
)

_DEFAULT_ITEM_RULE = ItemPricingRule(keywords=(), package_weight=500)


# --- building and validation ----------------------------------------------------


def build_table(name: str, pairs: Iterable[tuple[str, object]]) -> Mapping[str, object]:
    """Normalize keys and freeze. Same-key duplicates are fine only if they agree."""
    table: dict[str, object] = {}
    for raw_key, value in pairs:
        key = normalize_text(raw_key)
        if key in table and table[key] != value:
            raise TableValidationError(
                f"{name}: key {raw_key!r} normalizes to {key!r} with conflicting values "
                f"{table[key]!r} and {value!r}"
            )
        table[key] = value
    return MappingProxyType(table)


def _build_words(name: str, words: Iterable[str], allow_empty: bool = False) -> tuple[str, ...]:
    out: list[str] = []
    for raw in words:
        word = normalize_text(raw)
        if not word and not allow_empty:
            raise TableValidationError(f"{name}: empty keyword")
        if word not in out:
            out.append(word)
    return tuple(out)


def _build_rules(rules: Iterable[ItemPricingRule]) -> tuple[ItemPricingRule, ...]:
    built = []
    for rule in rules:
        if rule.package_weight <= 0:
            raise TableValidationError(f"item_rules: non-positive package weight for {rule.keywords}")
        if rule.per_item_threshold is not None and rule.per_item_threshold <= 0:
            raise TableValidationError(f"item_rules: non-positive threshold for {rule.keywords}")
        built.append(
            ItemPricingRule(
                keywords=_build_words("item_rules", rule.keywords),
                package_weight=rule.package_weight,
                per_item_threshold=rule.per_item_threshold,
                item_weight=rule.item_weight,
                excludes=_build_words("item_rules", rule.excludes),
            )
        )
    return tuple(built)


def _check_positive(name: str, table: Mapping[str, object]) -> None:
    for key, value in table.items():
        number = value.size if isinstance(value, PackageSize) else value
        if not isinstance(number, (int, float)) or number <= 0:
            raise TableValidationError(f"{name}: value for {key!r} must be positive, got {value!r}")


def lookup(table: Mapping[str, object], name: str):
    """Exact key first, then the longest key that mentions (or is mentioned by) the name."""
    normalized = normalize_text(name)
    if not normalized:
        return None
    if normalized in table:
        return table[normalized]
    best_key = None
    for key in table:
        if mentions(normalized, key) and (best_key is None or len(key) > len(best_key)):
            best_key = key
    return table[best_key] if best_key is not None else None


@dataclass(frozen=True)
class PricingTables:
    mass_units: Mapping[str, float]
    volume_units: Mapping[str, float]
    counting_units: frozenset
    count_based_names: tuple[str, ...]
    unit_weights: Mapping[str, float]
    package_sizes: Mapping[str, PackageSize]
    category_package_sizes: tuple[tuple[tuple[str, ...], PackageSize], ...]
    price_caps: Mapping[str, float]
    keyword_expansions: Mapping[str, tuple[str, ...]]
    non_food_keywords: tuple[str, ...]
    category_estimates: Mapping[str, float]
    item_rules: tuple[ItemPricingRule, ...]
    default_item_rule: ItemPricingRule = field(default=_DEFAULT_ITEM_RULE)

    def validate(self) -> "PricingTables":
        for name in ("mass_units", "volume_units", "unit_weights", "package_sizes", "price_caps",
                     "category_estimates"):
            _check_positive(name, getattr(self, name))
        overlap = set(self.mass_units) & set(self.volume_units)
        if overlap:
            raise TableValidationError(f"units listed as both mass and volume: {sorted(overlap)}")
        measured = (set(self.mass_units) | set(self.volume_units)) & set(self.counting_units)
        if measured:
            raise TableValidationError(f"units listed as both counting and measured: {sorted(measured)}")
        for size in self.package_sizes.values():
            if size.unit not in ("g", "ml"):
                raise TableValidationError(f"package sizes must be in g or ml, got {size.unit!r}")
        return self


def default_tables() -> PricingTables:
    return PricingTables(
        mass_units=build_table("mass_units", _MASS_UNITS),
        volume_units=build_table("volume_units", _VOLUME_UNITS),
        counting_units=frozenset(_build_words("counting_units", _COUNTING_UNITS, allow_empty=True)),
        count_based_names=_build_words("count_based_names", _COUNT_BASED_NAMES),
        unit_weights=build_table("unit_weights", _UNIT_WEIGHTS),
        package_sizes=build_table(
            "package_sizes", ((k, PackageSize(size, unit)) for k, (size, unit) in _PACKAGE_SIZES)
        ),
        category_package_sizes=tuple(
            (_build_words("category_package_sizes", words), PackageSize(size, unit))
            for words, (size, unit) in _CATEGORY_PACKAGE_SIZES
        ),
        price_caps=build_table("price_caps", _PRICE_CAPS),
        keyword_expansions=build_table(
            "keyword_expansions",
            ((k, _build_words("keyword_expansions", v)) for k, v in _KEYWORD_EXPANSIONS),
        ),
        non_food_keywords=_build_words("non_food_keywords", _NON_FOOD_KEYWORDS),
        category_estimates=build_table("category_estimates", _CATEGORY_ESTIMATES),
        item_rules=_build_rules(_ITEM_RULES),
    ).validate()


DEFAULT_TABLES = default_tables()
