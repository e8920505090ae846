import argparse
import random
from datetime import datetime, timezone

from gym_api.database import Base, SessionLocal, engine
from gym_api.mock_data import generate_demo_records
from gym_api.startup import create_tables


def generate_mock_data(num_members: int = 200, seed: int = 42, reset: bool = False) -> None:
    """Write a synthetic gym into the configured database (``DATABASE_URL``).

    The dataset is generated relative to the current time so the dashboard's
    30/90-day and 12-month windows are all populated.
    """
    if reset:
        print("Dropping existing tables...")
        Base.metadata.drop_all(bind=engine)
    create_tables()

    print(f"Generating a demo gym with {num_members} members...")
    rows = generate_demo_records(
        datetime.now(timezone.utc),
        rng=random.Random(seed),
        num_members=num_members,
    )

    db = SessionLocal()
    try:
        db.add_all(rows)
        db.commit()
    finally:
        db.close()

    print(f"\nSuccessfully wrote {len(rows)} rows.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the gym database with demo data.")
    parser.add_argument("--members", type=int, default=200)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--reset", action="store_true", help="drop and recreate all tables first")
    args = parser.parse_args()
    generate_mock_data(num_members=args.members, seed=args.seed, reset=args.reset)
