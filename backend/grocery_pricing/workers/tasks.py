from dataclasses import asdict

from celery.utils.log import get_task_logger

from grocery_pricing.logging import get_logger
from grocery_pricing.services.pricing.calculation_run import CalculationRun, RunLock
from grocery_pricing.services.pricing.equivalence_cache import EquivalenceCache
from grocery_pricing.storage.repositories import SqlPricingStore
from grocery_pricing.utils.timing import time_span
from grocery_pricing.workers.celery_app import celery_app

logger = get_task_logger(__name__)
app_logger = get_logger(__name__)

# Worker-process state, separate from the API process lock.
worker_lock = RunLock()
worker_equivalences = EquivalenceCache(loader=lambda: SqlPricingStore().load_equivalences())


@celery_app.task(bind=True)
def calculate_recipe_prices(self) -> dict:
    task_id = self.request.id
    app_logger.info("prices.task.start task_id=%s", task_id)
    with time_span("prices.task.total", task_id=task_id):
        summary = CalculationRun(SqlPricingStore(), worker_lock, equivalences=worker_equivalences).run()
    if summary.success:
        logger.info(
            "prices.task.done task_id=%s recipes=%s stores=%s errors=%s",
            task_id,
            summary.recipes_processed,
            summary.stores_processed,
            len(summary.errors),
        )
    else:
        logger.warning("prices.task.failed task_id=%s errors=%s", task_id, summary.errors)
    return asdict(summary)
