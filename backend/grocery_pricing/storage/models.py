from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import Column, JSON, UniqueConstraint
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Store(SQLModel, table=True):
    id: str = Field(primary_key=True)
    name: str


class Ingredient(SQLModel, table=True):
    id: str = Field(primary_key=True)
    name: str
    category: Optional[str] = None


class Recipe(SQLModel, table=True):
    id: str = Field(primary_key=True)
    name: str
    estimated_price: Optional[float] = None  # cheapest complete store total, set by the price run
    created_at: datetime = Field(default_factory=utc_now)


class RecipeIngredient(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    recipe_id: str = Field(foreign_key="recipe.id", index=True)
    ingredient_id: str = Field(foreign_key="ingredient.id")
    quantity: Optional[float] = None
    unit: Optional[str] = None


class UnifiedPrice(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    store_id: str = Field(foreign_key="store.id", index=True)
    generic_product_name: Optional[str] = None
    regular_price: Optional[float] = None
    sale_price: Optional[float] = None
    unit_price: Optional[float] = None  # $/kg or $/L
    quantity: Optional[float] = None
    unit: Optional[str] = None


class FlyerPromotion(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    store_id: str = Field(foreign_key="store.id", index=True)
    product_name: str
    promo_price: float
    valid_until: Optional[date] = None


class ReferencePrice(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    store_id: str = Field(foreign_key="store.id", index=True)
    product_name: str
    price: float


class IngredientEquivalence(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    ingredient_id: str = Field(foreign_key="ingredient.id")
    to_quantity: Optional[float] = None
    to_unit: Optional[str] = None  # only "g" rows are used


class RecipeStorePrice(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("recipe_id", "store_id", "week_of"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    recipe_id: str = Field(foreign_key="recipe.id", index=True)
    store_id: str = Field(foreign_key="store.id")
    week_of: str  # ISO date of the Monday
    total_cost: float
    missing_ingredients_count: int = 0
    is_complete: bool = False
    breakdown: Optional[list] = Field(default=None, sa_column=Column(JSON, default=None))
    calculated_at: datetime = Field(default_factory=utc_now)
