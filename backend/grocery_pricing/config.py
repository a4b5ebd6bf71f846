from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "grocery-pricing"
    env: str = "local"
    log_level: str = "INFO"

    database_url: str = "sqlite:///./grocery_pricing.db"
    redis_url: str = "redis://redis:6379/0"

    # Stores never priced, even when they would be the cheapest.
    excluded_store_ids: list[str] = ["provigo", "adonis"]

    equivalence_cache_ttl_s: int = 300
    # A run holding the lock longer than this is considered stuck and reset.
    max_calculation_s: int = 600

    # Safety caps, in dollars.
    global_max_ingredient_price: float = 50.0
    global_max_ingredient_cost: float = 60.0
    max_recipe_total: float = 200.0

    match_threshold: float = 0.5
    default_category_estimate: float = 3.99

    # Load the bundled demo dataset into an empty database on startup.
    seed_sample_data: bool = False

    class Config:
        env_file = ".env"


settings = Settings()
