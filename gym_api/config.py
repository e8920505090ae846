import os
from dotenv import load_dotenv


load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./gym.db")
LOG_SQL_QUERIES = os.getenv("LOG_SQL_QUERIES", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Seed a demo dataset on startup when the members table is empty
SEED_DEMO_DATA = os.getenv("SEED_DEMO_DATA", "false").lower() == "true"

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
