"""Small fixed dataset: four allowed stores, two excluded ones, two recipes."""

from grocery_pricing.services.pricing.preview import PriceOffer
from grocery_pricing.services.pricing.records import (
    CatalogEntry,
    Ingredient,
    Recipe,
    RecipeIngredient,
    Store,
    StoreCatalog,
)

STORES = [
    Store("iga", "IGA"),
    Store("metro", "Metro"),
    Store("super-c", "Super C"),
    Store("maxi", "Maxi"),
    Store("provigo", "Provigo"),
    Store("adonis", "Adonis"),
]

INGREDIENTS = [
    Ingredient("ing_boeuf", "Boeuf haché", "Viandes"),
    Ingredient("ing_patates", "Pommes de terre", "Fruits et légumes"),
    Ingredient("ing_mais", "Maïs en crème", "Épicerie"),
    # Not sold anywhere.
    Ingredient("ing_safran", "Safran pur", "Épicerie"),
]

RECIPES = [
    Recipe(
        "rec_pate_chinois",
        "Pâté chinois classique",
        [
            RecipeIngredient("ing_boeuf", 1, "lb"),
            RecipeIngredient("ing_patates", 1, "kg"),
            RecipeIngredient("ing_mais", 398, "ml"),
        ],
    ),
    Recipe(
        "rec_paella",
        "Paella",
        [
            RecipeIngredient("ing_safran", 2, "g"),
            RecipeIngredient("ing_boeuf", 500, "g"),
        ],
    ),
]

# Shelf prices for the exact quantity listed, not per unit.
PRICE_OFFERS = [
    PriceOffer("iga", "ing_boeuf", 6.99, 1, "lb"),
    PriceOffer("iga", "ing_patates", 4.99, 5, "lb"),
    PriceOffer("iga", "ing_mais", 1.99, 398, "ml"),
    PriceOffer("super-c", "ing_boeuf", 4.44, 1, "lb"),
    PriceOffer("super-c", "ing_patates", 2.99, 5, "lb"),
    PriceOffer("super-c", "ing_mais", 0.99, 398, "ml"),
    PriceOffer("metro", "ing_boeuf", 5.49, 1, "lb"),
    PriceOffer("metro", "ing_patates", 3.49, 5, "lb"),
    PriceOffer("metro", "ing_mais", 1.49, 398, "ml"),
    PriceOffer("maxi", "ing_boeuf", 4.99, 1, "lb"),
    PriceOffer("maxi", "ing_patates", 2.49, 5, "lb"),
    PriceOffer("maxi", "ing_mais", 0.89, 398, "ml"),
    # Cheapest everywhere, but excluded.
    PriceOffer("adonis", "ing_boeuf", 1.00, 1, "lb"),
    PriceOffer("adonis", "ing_patates", 0.99, 5, "lb"),
    PriceOffer("adonis", "ing_mais", 0.49, 398, "ml"),
    PriceOffer("provigo", "ing_boeuf", 5.99, 1, "lb"),
]


def store_catalog(store_id: str) -> StoreCatalog:
    """The store's offers as unified catalog entries named after the ingredient."""
    names = {i.id: i.name for i in INGREDIENTS}
    return StoreCatalog(
        unified=[
            CatalogEntry(
                generic_product_name=names[offer.ingredient_id],
                regular_price=offer.price,
                quantity=offer.quantity,
                unit=offer.unit,
            )
            for offer in PRICE_OFFERS
            if offer.store_id == store_id
        ]
    )
