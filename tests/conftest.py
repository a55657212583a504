from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["LOG_TO_FILE"] = "false"
os.environ["PUBLIC_RATE_LIMIT_ENABLED"] = "false"
os.environ["ADMIN_API_KEY"] = ""

from dataclasses import dataclass
from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import venuebook.models  # noqa: F401
from venuebook.core.config import get_settings
from venuebook.core.deps import get_db
from venuebook.db.base import Base
from venuebook.main import app
from venuebook.services.rate_limit import get_public_booking_limiter


@dataclass
class FakeBooking:
    booking_date: date
    start_time: str
    end_time: str
    status: str = "pending"
    time_slot: str | None = None
    guest_count: int = 50
    id: str = ""


@dataclass
class FakeEvent:
    event_date: date
    event_type: str = "blocked"
    status: str = "blocked"


@pytest.fixture
def day() -> date:
    return date(2030, 6, 15)


@pytest.fixture
def future_day() -> date:
    return date.today() + timedelta(days=30)


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(engine):
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    get_public_booking_limiter().reset()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def settings():
    return get_settings()
