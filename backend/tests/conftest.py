import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from grocery_pricing import main
from grocery_pricing.api import prices as prices_api
from grocery_pricing.services.pricing import sample_data
from grocery_pricing.services.pricing.calculation_run import RunLock
from grocery_pricing.services.pricing.equivalence_cache import EquivalenceCache
from grocery_pricing.storage import db as db_module
from grocery_pricing.storage.repositories import SqlPricingStore


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class MemoryStore:
    """In-memory stand-in for SqlPricingStore."""

    def __init__(self, stores, ingredients, recipes, catalogs, equivalences=()):
        self.stores = list(stores)
        self.ingredients = list(ingredients)
        self.recipes = list(recipes)
        self.catalogs = dict(catalogs)
        self.equivalences = list(equivalences)
        self.rows = {}
        self.estimated_prices = {}
        self.failing_pairs = set()

    def load_stores(self):
        return list(self.stores)

    def load_ingredients(self):
        return list(self.ingredients)

    def load_recipes(self):
        return list(self.recipes)

    def load_store_catalog(self, store_id, today):
        return self.catalogs[store_id]

    def load_equivalences(self):
        return list(self.equivalences)

    def upsert_recipe_store_price(self, row):
        if (row.recipe_id, row.store_id) in self.failing_pairs:
            raise RuntimeError("disk full")
        self.rows[(row.recipe_id, row.store_id, row.week_of)] = row

    def load_recipe_store_prices(self, week_of):
        return [row for key, row in self.rows.items() if key[2] == week_of]

    def update_estimated_price(self, recipe_id, price):
        self.estimated_prices[recipe_id] = price


@pytest.fixture(name="clock")
def clock_fixture():
    return FakeClock()


@pytest.fixture(name="memory_store")
def memory_store_fixture():
    return MemoryStore(
        stores=sample_data.STORES,
        ingredients=sample_data.INGREDIENTS,
        recipes=sample_data.RECIPES,
        catalogs={s.id: sample_data.store_catalog(s.id) for s in sample_data.STORES},
    )


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(monkeypatch, engine):
    monkeypatch.setattr(db_module, "engine", engine)
    monkeypatch.setattr(prices_api, "run_lock", RunLock())
    monkeypatch.setattr(
        prices_api,
        "equivalence_cache",
        EquivalenceCache(loader=lambda: SqlPricingStore(engine).load_equivalences()),
    )

    client = TestClient(main.app)
    return client
