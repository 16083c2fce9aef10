"""
Booking store connection.

One engine per process, built from DATABASE_URL. SQLite is used for local
runs and tests (in-memory URLs share a single connection); PostgreSQL is
the production target.
"""

from __future__ import annotations

import logging
from typing import Any, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeMeta, Session, declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from studio_booking.core.config import settings

logger = logging.getLogger(__name__)

# PostgreSQL engine tuning:
# - pool_timeout fails fast so an exhausted pool surfaces as store_unavailable.
# - statement_timeout caps runaway queries.
_POSTGRES_CONNECT_ARGS: dict[str, Any] = {
    "options": "-c statement_timeout=15000",
    "connect_timeout": 5,
    "application_name": "studio_booking",
}


def _build_engine_kwargs(db_url: str) -> dict[str, Any]:
    """Engine kwargs for the configured dialect."""
    if db_url.startswith("sqlite"):
        kwargs: dict[str, Any] = {
            "connect_args": {"check_same_thread": False},
            "future": True,
        }
        if ":memory:" in db_url or db_url.rstrip("/") == "sqlite:":
            kwargs["poolclass"] = StaticPool
        return kwargs

    return {
        "poolclass": QueuePool,
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
        "pool_timeout": settings.database_pool_timeout,
        "pool_recycle": 300,
        "pool_pre_ping": True,
        "future": True,
        "connect_args": dict(_POSTGRES_CONNECT_ARGS),
    }


db_url = settings.get_database_url()
engine: Engine = create_engine(db_url, **_build_engine_kwargs(db_url))


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)

Base: DeclarativeMeta = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session: committed when the handler returns, always closed."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    """Create missing tables; existing tables are left untouched."""
    # Import models so Base.metadata is populated.
    import studio_booking.models  # noqa: F401

    Base.metadata.create_all(bind or engine)


__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "get_db",
    "init_db",
]
