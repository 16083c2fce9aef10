# backend/tests/conftest.py
"""
Pytest configuration for the studio booking service.

Every test gets a fresh in-memory SQLite database with the default
studio catalog seeded, so tests never touch a developer's local database
and never see each other's rows.
"""

import os

# Set test configuration BEFORE any studio_booking imports
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SEED_STUDIOS"] = "false"
os.environ["STUDIO_TIMEZONE"] = "Asia/Kolkata"

from datetime import date, timedelta
from typing import Iterator

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from studio_booking.core.timezone_utils import get_studio_today
from studio_booking.database import Base, get_db
from studio_booking.events.publisher import BookingEventPublisher
from studio_booking.main import app
import studio_booking.models  # noqa: F401
from studio_booking.services.studio_service import StudioService


def make_memory_engine() -> Engine:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_engine() -> Iterator[Engine]:
    engine = make_memory_engine()
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(db_engine: Engine) -> Iterator[Session]:
    """Session on a fresh database with Studio A/B/C seeded."""
    TestSessionLocal = sessionmaker(
        bind=db_engine, autoflush=False, expire_on_commit=False, future=True
    )
    session = TestSessionLocal()
    StudioService(session).seed_default_studios()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(autouse=True)
def _reset_event_listeners() -> Iterator[None]:
    BookingEventPublisher.clear()
    yield
    BookingEventPublisher.clear()


@pytest.fixture
def client(db: Session) -> Iterator[TestClient]:
    """Create a test client with the test database."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    # Don't use context manager - the lifespan would bootstrap the default database
    test_client = TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
    test_client.close()


@pytest.fixture
def tomorrow() -> date:
    return get_studio_today() + timedelta(days=1)


@pytest.fixture
def staff_headers() -> dict:
    return {"X-Caller-Role": "staff"}


@pytest.fixture
def admin_headers() -> dict:
    return {"X-Caller-Role": "admin"}
