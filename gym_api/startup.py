import logging
import random
from datetime import datetime, timezone
from typing import Optional

from gym_api.database import Base, SessionLocal, engine
from gym_api.mock_data import generate_demo_records
from gym_api.records.models import Member


logger = logging.getLogger(__name__)


def create_tables() -> None:
    Base.metadata.create_all(bind=engine)


def populate_demo_data(
    session_factory=SessionLocal,
    num_members: int = 200,
    seed: Optional[int] = 42,
    now: Optional[datetime] = None,
) -> int:
    """Seed a demo gym when the members table is empty; idempotent on startup.

    Returns the number of rows written (0 when the database was already populated).
    """
    db = session_factory()
    try:
        if db.query(Member).first():
            logger.info("Database already populated; skipping demo seed.")
            return 0
        rows = generate_demo_records(
            now or datetime.now(timezone.utc),
            rng=random.Random(seed),
            num_members=num_members,
        )
        db.add_all(rows)
        db.commit()
        logger.info("Seeded %d demo rows", len(rows))
        return len(rows)
    finally:
        db.close()
