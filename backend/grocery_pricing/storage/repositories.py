from datetime import date, datetime, timezone

from sqlalchemy import or_
from sqlmodel import Session, select

from grocery_pricing.logging import get_logger
from grocery_pricing.services.pricing import records, sample_data
from grocery_pricing.storage import db
from grocery_pricing.storage.models import (
    FlyerPromotion,
    Ingredient,
    IngredientEquivalence,
    Recipe,
    RecipeIngredient,
    RecipeStorePrice,
    ReferencePrice,
    Store,
    UnifiedPrice,
)

logger = get_logger(__name__)


def upsert_recipe_store_price(session: Session, row: records.RecipeStorePrice) -> RecipeStorePrice:
    """One row per (recipe, store, week): a later run in the same week overwrites it."""
    model = session.exec(
        select(RecipeStorePrice).where(
            RecipeStorePrice.recipe_id == row.recipe_id,
            RecipeStorePrice.store_id == row.store_id,
            RecipeStorePrice.week_of == row.week_of,
        )
    ).first()
    if model is None:
        model = RecipeStorePrice(recipe_id=row.recipe_id, store_id=row.store_id, week_of=row.week_of, total_cost=0)
    model.total_cost = row.total_cost
    model.missing_ingredients_count = row.missing_ingredients_count
    model.is_complete = row.is_complete
    model.breakdown = [item.to_dict() for item in row.breakdown]
    model.calculated_at = row.calculated_at or datetime.now(timezone.utc)
    session.add(model)
    session.commit()
    session.refresh(model)
    return model


class SqlPricingStore:
    """Data access for CalculationRun. Each call uses its own short session."""

    def __init__(self, engine=None) -> None:
        self._engine = engine

    def _session(self) -> Session:
        # Resolved per call so tests can swap db.engine.
        return Session(self._engine or db.engine)

    def load_stores(self) -> list[records.Store]:
        with self._session() as session:
            return [records.Store(s.id, s.name) for s in session.exec(select(Store).order_by(Store.id))]

    def load_ingredients(self) -> list[records.Ingredient]:
        with self._session() as session:
            return [records.Ingredient(i.id, i.name, i.category) for i in session.exec(select(Ingredient))]

    def load_recipes(self) -> list[records.Recipe]:
        with self._session() as session:
            recipes = {
                r.id: records.Recipe(r.id, r.name, estimated_price=r.estimated_price)
                for r in session.exec(select(Recipe).order_by(Recipe.id))
            }
            for line in session.exec(select(RecipeIngredient).order_by(RecipeIngredient.id)):
                recipe = recipes.get(line.recipe_id)
                if recipe is not None:
                    recipe.ingredients.append(records.RecipeIngredient(line.ingredient_id, line.quantity, line.unit))
        return list(recipes.values())

    def load_store_catalog(self, store_id: str, today: date) -> records.StoreCatalog:
        with self._session() as session:
            unified = session.exec(select(UnifiedPrice).where(UnifiedPrice.store_id == store_id))
            promos = session.exec(
                select(FlyerPromotion).where(
                    FlyerPromotion.store_id == store_id,
                    or_(FlyerPromotion.valid_until.is_(None), FlyerPromotion.valid_until >= today),
                )
            )
            refs = session.exec(select(ReferencePrice).where(ReferencePrice.store_id == store_id))
            catalog = records.StoreCatalog(
                unified=[
                    records.CatalogEntry(
                        generic_product_name=u.generic_product_name,
                        regular_price=u.regular_price,
                        sale_price=u.sale_price,
                        unit_price=u.unit_price,
                        quantity=u.quantity,
                        unit=u.unit,
                    )
                    for u in unified
                ],
                promotions=[records.PromotionEntry(p.product_name, p.promo_price, p.valid_until) for p in promos],
                references=[records.ReferenceEntry(r.product_name, r.price) for r in refs],
            )
        logger.info(
            "catalog.loaded store_id=%s unified=%s promos=%s refs=%s",
            store_id,
            len(catalog.unified),
            len(catalog.promotions),
            len(catalog.references),
        )
        return catalog

    def load_equivalences(self) -> list[records.Equivalence]:
        with self._session() as session:
            rows = session.exec(
                select(Ingredient.name, IngredientEquivalence.to_quantity, IngredientEquivalence.to_unit)
                .select_from(IngredientEquivalence)
                .join(Ingredient, Ingredient.id == IngredientEquivalence.ingredient_id)
                .where(IngredientEquivalence.to_quantity.is_not(None))
            )
            return [records.Equivalence(name, quantity, unit or "") for name, quantity, unit in rows]

    def upsert_recipe_store_price(self, row: records.RecipeStorePrice) -> None:
        with self._session() as session:
            upsert_recipe_store_price(session, row)

    def load_recipe_store_prices(self, week_of: str) -> list[records.RecipeStorePrice]:
        with self._session() as session:
            rows = session.exec(select(RecipeStorePrice).where(RecipeStorePrice.week_of == week_of))
            return [
                records.RecipeStorePrice(
                    recipe_id=r.recipe_id,
                    store_id=r.store_id,
                    week_of=r.week_of,
                    total_cost=r.total_cost,
                    missing_ingredients_count=r.missing_ingredients_count,
                    is_complete=r.is_complete,
                    breakdown=[records.IngredientBreakdownItem(**item) for item in r.breakdown or []],
                    calculated_at=r.calculated_at,
                )
                for r in rows
            ]

    def update_estimated_price(self, recipe_id: str, price: float) -> None:
        with self._session() as session:
            recipe = session.get(Recipe, recipe_id)
            if recipe is None:
                logger.warning("recipe.estimated_price.missing recipe_id=%s", recipe_id)
                return
            recipe.estimated_price = price
            session.add(recipe)
            session.commit()
        logger.info("recipe.estimated_price.updated recipe_id=%s price=%s", recipe_id, price)


def seed_sample_data(session: Session) -> bool:
    """Load the bundled demo stores, ingredients, recipes and shelf prices into an empty database."""
    if session.exec(select(Store)).first() is not None:
        return False
    session.add_all([Store(id=s.id, name=s.name) for s in sample_data.STORES])
    session.add_all([Ingredient(id=i.id, name=i.name, category=i.category) for i in sample_data.INGREDIENTS])
    session.add_all([Recipe(id=r.id, name=r.name) for r in sample_data.RECIPES])
    session.commit()
    session.add_all(
        [
            RecipeIngredient(recipe_id=r.id, ingredient_id=line.ingredient_id, quantity=line.quantity, unit=line.unit)
            for r in sample_data.RECIPES
            for line in r.ingredients
        ]
    )
    for store in sample_data.STORES:
        for entry in sample_data.store_catalog(store.id).unified:
            session.add(
                UnifiedPrice(
                    store_id=store.id,
                    generic_product_name=entry.generic_product_name,
                    regular_price=entry.regular_price,
                    quantity=entry.quantity,
                    unit=entry.unit,
                )
            )
    session.commit()
    logger.info("sample_data.seeded stores=%s recipes=%s", len(sample_data.STORES), len(sample_data.RECIPES))
    return True
