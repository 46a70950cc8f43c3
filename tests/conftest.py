import pytest

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shiftswap.core.config import settings
from shiftswap.db.database import Base
import shiftswap.db.models  # noqa: F401

from swap_seed import seed_restaurants


@pytest.fixture(autouse=True)
def log_notifier(monkeypatch):
    # keep the default notifier off the real database
    monkeypatch.setattr(settings, "NOTIFIER", "log")


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    factory = sessionmaker(bind=engine, autoflush=False)
    session = factory()
    try:
        seed_restaurants(session)
    finally:
        session.close()
    return factory


@pytest.fixture
def db(session_factory):
    """Per-test session on a fresh, seeded in-memory database."""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
