from grocery_pricing.config import settings
from grocery_pricing.services.pricing.tables import DEFAULT_TABLES, PricingTables
from grocery_pricing.services.pricing.text import contains_word, mentions, normalize_text, tokenize

PARTIAL_MATCH_WEIGHT = 0.5
PARTIAL_SCORE_FACTOR = 0.3
MIN_PARTIAL_WORD_LENGTH = 4
EXPANSION_FLOOR = 0.5


class ProductMatcher:
    """Scores free-text flyer/catalog product names against an ingredient name.

    Matching works on whole words: "ail" matches "gousses d'ail" but never "taille".
    The non-food denylist is the exception: any product name containing an entry
    ("multivitamines", "couches-culottes") always scores 0.
    """

    def __init__(self, tables: PricingTables = DEFAULT_TABLES, threshold: float | None = None) -> None:
        self.tables = tables
        self.threshold = settings.match_threshold if threshold is None else threshold

    def is_excluded(self, product_name: str) -> bool:
        product = normalize_text(product_name)
        return any(kw in product for kw in self.tables.non_food_keywords)

    def related_keywords(self, ingredient_name: str) -> list[str]:
        name = normalize_text(ingredient_name)
        related: list[str] = []
        for family, words in self.tables.keyword_expansions.items():
            if mentions(name, family) or any(contains_word(name, w) for w in words):
                related.extend(w for w in words if w not in related)
        return related

    def score(self, ingredient_name: str, product_name: str) -> float:
        ingredient = normalize_text(ingredient_name)
        product = normalize_text(product_name)
        if not ingredient or not product or self.is_excluded(product):
            return 0.0
        if contains_word(product, ingredient):
            return 1.0

        ingredient_words = tokenize(ingredient)
        if not ingredient_words:
            return 0.0
        product_words = tokenize(product)

        exact = 0
        partial = 0.0
        for word in ingredient_words:
            if word in product_words:
                exact += 1
            elif len(word) >= MIN_PARTIAL_WORD_LENGTH and any(
                pw.startswith(word) or pw.endswith(word) for pw in product_words
            ):
                partial += PARTIAL_MATCH_WEIGHT
        n = len(ingredient_words)
        base = exact / n + PARTIAL_SCORE_FACTOR * (partial / n)

        if any(contains_word(product, kw) for kw in self.related_keywords(ingredient)):
            return max(base, EXPANSION_FLOOR)
        return base

    def accepts(self, ingredient_name: str, product_name: str) -> bool:
        return self.score(ingredient_name, product_name) >= self.threshold
