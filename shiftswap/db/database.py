from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from shiftswap.core.config import settings


class Base(DeclarativeBase):
    pass


def _connect_args(url: str) -> dict:
    # sqlite connections are shared with the sweeper thread
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(settings.DATABASE_URL, connect_args=_connect_args(settings.DATABASE_URL), pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False)


def init_db() -> None:
    """Create tables for any models that don't have one yet."""
    import shiftswap.db.models  # noqa: F401  registers mappers on Base.metadata

    Base.metadata.create_all(bind=engine)
