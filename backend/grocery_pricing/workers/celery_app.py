from celery import Celery

from grocery_pricing.config import settings
from grocery_pricing.logging import configure_logging, get_logger


celery_app = Celery("grocery_pricing", broker=settings.redis_url, backend=settings.redis_url)
celery_app.conf.task_routes = {"grocery_pricing.workers.tasks.*": {"queue": "celery"}}
# A price run is single-flight per process; more than one worker slot would only queue on the lock.
celery_app.conf.worker_concurrency = 1
# Hard stop a little after the lock would be treated as stuck anyway.
celery_app.conf.task_time_limit = settings.max_calculation_s + 60

# Registers calculate_recipe_prices on this app.
from grocery_pricing.workers import tasks  # noqa: F401,E402

configure_logging()
logger = get_logger(__name__)
logger.info("celery.configured broker=%s task_time_limit_s=%s", settings.redis_url, celery_app.conf.task_time_limit)
