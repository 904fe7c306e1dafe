"""
Engine, session factory and declarative base for intake storage.

PostgreSQL in deployment; a ``sqlite://`` DATABASE_URL is accepted for local
runs, in which case the connection may be shared across FastAPI's worker
threads.
"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from anamnesis.config import settings

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict:
    if make_url(url).get_backend_name() == "sqlite":
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_size": 5}


engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


class Base(DeclarativeBase):
    pass


def create_schema() -> None:
    """Create any missing intake tables."""
    # Table classes register themselves on Base when imported.
    from anamnesis.models import patient  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready (%s)", make_url(settings.DATABASE_URL).get_backend_name())


def get_db():
    """FastAPI dependency that yields a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
