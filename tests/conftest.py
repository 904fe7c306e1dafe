"""Shared pytest fixtures."""

import os

# Must be set before anything imports anamnesis.config.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DEFAULT_LANGUAGE", "de")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from anamnesis.models import patient  # noqa: E402,F401  (registers tables)
from anamnesis.models.database import Base  # noqa: E402

# 1x1 transparent PNG
PNG_BASE64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_converter():
    """Stands in for WeasyPrint: wraps the markup in a minimal PDF envelope."""

    def convert(markup, target):
        target.write(b"%PDF-1.7\n")
        target.write(markup.encode("utf-8"))
        target.write(b"\n%%EOF\n")

    return convert
