from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from gym_api.config import DATABASE_URL, LOG_SQL_QUERIES


def _engine_kwargs(url: str) -> dict:
    kwargs = {"echo": LOG_SQL_QUERIES, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        # Report pulls run in worker threads
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in {"sqlite://", "sqlite:///:memory:"}:
            kwargs["poolclass"] = StaticPool
    return kwargs


engine = create_engine(DATABASE_URL, **_engine_kwargs(DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency yielding a request-scoped session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory():
    """FastAPI dependency for endpoints that open one session per concurrent pull."""
    return SessionLocal
