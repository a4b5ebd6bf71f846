"""
Single-flight price calculation over every allowed store x every recipe.

The lock is process-wide, not distributed: an API process and a Celery worker each
hold their own. A run that has held the lock longer than max_calculation_s is
considered stuck and reset on the next start attempt; operators can also reset it
by hand. Resetting only frees the lock, it does not stop work already in flight.
"""

import threading
import time
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Iterable, Protocol

from grocery_pricing.config import settings
from grocery_pricing.logging import get_logger
from grocery_pricing.services.pricing.cost_calculator import CostCalculator
from grocery_pricing.services.pricing.equivalence_cache import EquivalenceCache
from grocery_pricing.services.pricing.errors import RunAlreadyInProgress
from grocery_pricing.services.pricing.price_selector import PriceSelector
from grocery_pricing.services.pricing.product_matcher import ProductMatcher
from grocery_pricing.services.pricing.recipe_aggregator import RecipeAggregator
from grocery_pricing.services.pricing.records import (
    Equivalence,
    Ingredient,
    Recipe,
    RecipeStorePrice,
    RunSummary,
    Store,
    StoreCatalog,
)
from grocery_pricing.services.pricing.tables import DEFAULT_TABLES, PricingTables
from grocery_pricing.services.pricing.unit_converter import UnitConverter
from grocery_pricing.utils.timing import time_span

logger = get_logger(__name__)


class RunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RunLock:
    def __init__(self, max_duration_s: float | None = None, clock: Callable[[], float] = time.monotonic) -> None:
        self.max_duration_s = settings.max_calculation_s if max_duration_s is None else max_duration_s
        self._clock = clock
        self._mutex = threading.Lock()
        self._state = RunState.IDLE
        self._started_at: float | None = None
        self._holder = 0
        self.last_outcome: RunState | None = None

    @property
    def state(self) -> RunState:
        return self._state

    def running_for_s(self) -> float | None:
        if self._state != RunState.RUNNING or self._started_at is None:
            return None
        return self._clock() - self._started_at

    def try_start(self) -> int:
        """IDLE -> RUNNING, or raise RunAlreadyInProgress without touching anything.

        Returns the holder token to pass back to finish().
        """
        with self._mutex:
            if self._state == RunState.RUNNING:
                elapsed = self._clock() - self._started_at
                if elapsed < self.max_duration_s:
                    raise RunAlreadyInProgress(started_seconds_ago=elapsed)
                logger.warning("prices.lock.stuck_reset running_for_s=%.0f", elapsed)
            self._state = RunState.RUNNING
            self._started_at = self._clock()
            self._holder += 1
            return self._holder

    def finish(self, token: int, success: bool) -> bool:
        """RUNNING -> SUCCEEDED | FAILED -> IDLE, only for the current holder.

        A run that was reset as stuck (or by hand) finishes without touching the
        lock now held by its successor; returns False in that case.
        """
        with self._mutex:
            if token != self._holder or self._state != RunState.RUNNING:
                logger.warning("prices.lock.stale_finish token=%s holder=%s", token, self._holder)
                return False
            self.last_outcome = RunState.SUCCEEDED if success else RunState.FAILED
            self._state = RunState.IDLE
            self._started_at = None
            return True

    def force_reset(self) -> bool:
        """Clear the lock; returns True if a run was holding it."""
        with self._mutex:
            was_running = self._state == RunState.RUNNING
            self._state = RunState.IDLE
            self._started_at = None
        logger.info("prices.lock.force_reset was_running=%s", was_running)
        return was_running

    def status(self) -> dict:
        running_for = self.running_for_s()
        return {
            "state": self._state.value,
            "is_calculating": self._state == RunState.RUNNING,
            "running_for_s": None if running_for is None else round(running_for, 1),
            "last_outcome": self.last_outcome.value if self.last_outcome else None,
        }


class PricingStore(Protocol):
    """Data access the calculation needs; see storage.repositories.SqlPricingStore."""

    def load_recipes(self) -> list[Recipe]: ...

    def load_ingredients(self) -> list[Ingredient]: ...

    def load_stores(self) -> list[Store]: ...

    def load_store_catalog(self, store_id: str, today: date) -> StoreCatalog: ...

    def load_equivalences(self) -> Iterable[Equivalence]: ...

    def upsert_recipe_store_price(self, row: RecipeStorePrice) -> None: ...

    def load_recipe_store_prices(self, week_of: str) -> list[RecipeStorePrice]: ...

    def update_estimated_price(self, recipe_id: str, price: float) -> None: ...


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def week_start(day: date) -> date:
    """Monday of the week containing day."""
    return day - timedelta(days=day.weekday())


class CalculationRun:
    def __init__(
        self,
        store: PricingStore,
        lock: RunLock,
        equivalences: EquivalenceCache | None = None,
        tables: PricingTables = DEFAULT_TABLES,
        excluded_store_ids: Iterable[str] | None = None,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.lock = lock
        self.equivalences = equivalences or EquivalenceCache(loader=store.load_equivalences)
        self.excluded_store_ids = set(
            settings.excluded_store_ids if excluded_store_ids is None else excluded_store_ids
        )
        self._now = now

        converter = UnitConverter(tables, equivalence_lookup=self.equivalences.resolve)
        self.aggregator = RecipeAggregator(
            PriceSelector(converter, ProductMatcher(tables)),
            CostCalculator(converter),
        )

    def run(self) -> RunSummary:
        try:
            token = self.lock.try_start()
        except RunAlreadyInProgress as exc:
            logger.warning("prices.run.rejected reason=already_in_progress")
            return RunSummary(success=False, errors=[str(exc)])

        success = False
        try:
            summary = self._execute()
            success = summary.success
            return summary
        except Exception as exc:
            logger.exception("prices.run.failed error=%s", exc)
            return RunSummary(success=False, errors=[f"Calculation failed: {exc}"])
        finally:
            self.lock.finish(token, success)

    def _execute(self) -> RunSummary:
        now = self._now()
        today = now.date()
        week_of = week_start(today).isoformat()
        self.equivalences.refresh()

        stores = [s for s in self.store.load_stores() if s.id not in self.excluded_store_ids]
        recipes = self.store.load_recipes()
        ingredients = {i.id: i for i in self.store.load_ingredients()}
        logger.info(
            "prices.run.start week_of=%s stores=%s recipes=%s ingredients=%s",
            week_of,
            len(stores),
            len(recipes),
            len(ingredients),
        )

        errors: list[str] = []
        pairs = 0
        with time_span("prices.run", week_of=week_of, stores=len(stores), recipes=len(recipes)):
            for store in stores:
                catalog = self.store.load_store_catalog(store.id, today)
                with time_span("prices.store", store_id=store.id):
                    for recipe in recipes:
                        try:
                            row = self.aggregator.price_recipe(
                                recipe, store.id, catalog, ingredients, week_of, today=today, calculated_at=now
                            )
                            self.store.upsert_recipe_store_price(row)
                            pairs += 1
                        except Exception as exc:
                            logger.warning(
                                "prices.pair.failed recipe_id=%s store_id=%s error=%s", recipe.id, store.id, exc
                            )
                            errors.append(f"Recipe {recipe.id} / Store {store.id}: {exc}")

            updated = self.rollup(week_of, {s.id for s in stores})

        logger.info(
            "prices.run.done week_of=%s pairs=%s errors=%s estimated_prices_updated=%s",
            week_of,
            pairs,
            len(errors),
            updated,
        )
        return RunSummary(
            success=True,
            recipes_processed=len(recipes),
            stores_processed=len(stores),
            pairs_processed=pairs,
            errors=errors,
        )

    def rollup(self, week_of: str, allowed_store_ids: set[str]) -> int:
        """Set each recipe's estimated price to its cheapest complete total this week."""
        cheapest: dict[str, float] = {}
        for row in self.store.load_recipe_store_prices(week_of):
            if not row.is_complete or row.store_id not in allowed_store_ids:
                continue
            current = cheapest.get(row.recipe_id)
            if current is None or row.total_cost < current:
                cheapest[row.recipe_id] = row.total_cost
        for recipe_id, price in cheapest.items():
            self.store.update_estimated_price(recipe_id, price)
        return len(cheapest)
