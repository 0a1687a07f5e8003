from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from zulu_assistant.config import settings


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False, "timeout": settings.store_timeout_seconds}}
    return {"pool_pre_ping": True, "pool_timeout": settings.store_timeout_seconds}


engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None) -> None:
    """Create tables for every registered model."""
    import zulu_assistant.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
