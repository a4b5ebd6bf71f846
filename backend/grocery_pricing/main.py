from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from grocery_pricing.api.routes import router as api_router
from grocery_pricing.config import settings
from grocery_pricing.logging import configure_logging, get_logger
from grocery_pricing.storage.db import create_db_and_tables, get_session
from grocery_pricing.storage.repositories import seed_sample_data

app = FastAPI(title="Grocery Pricing API")
logger = get_logger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup() -> None:
    configure_logging()
    logger.info("startup: creating tables env=%s", settings.env)
    create_db_and_tables()
    if settings.seed_sample_data:
        with get_session() as session:
            seed_sample_data(session)


app.include_router(api_router)
