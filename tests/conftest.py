from datetime import datetime, timedelta, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from gym_api.database import Base, get_db, get_session_factory
from gym_api.records import models  # noqa: F401 (registers every table on Base)
from gym_api.router import router as api_router


# Saturday afternoon; the 30-day window opens 2024-05-17, the 90-day window 2024-03-18
NOW = datetime(2024, 6, 15, 14, 30, tzinfo=timezone.utc)


def days_ago(days: int, hour: int = 10, minute: int = 0) -> datetime:
    return (NOW - timedelta(days=days)).replace(hour=hour, minute=minute, second=0, microsecond=0)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def db_engine(tmp_path):
    # File-backed so every worker thread gets its own connection
    engine = create_engine(
        f"sqlite:///{tmp_path / 'gym-test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    app = FastAPI()
    app.include_router(api_router)

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    with TestClient(app) as test_client:
        yield test_client
