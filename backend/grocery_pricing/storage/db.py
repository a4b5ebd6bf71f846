from sqlmodel import SQLModel, Session, create_engine

from grocery_pricing.config import settings


def _connect_args(url: str) -> dict:
    # SQLite connections are shared between the API threadpool and the calculation.
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(settings.database_url, pool_pre_ping=True, connect_args=_connect_args(settings.database_url))


def create_db_and_tables() -> None:
    SQLModel.metadata.create_all(engine)


def get_session() -> Session:
    return Session(engine)
