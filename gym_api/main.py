import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gym_api.config import CORS_ORIGINS, LOG_LEVEL, SEED_DEMO_DATA
from gym_api.router import router as api_router
from gym_api.startup import create_tables, populate_demo_data


logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# Create tables and optionally seed a demo gym
create_tables()
if SEED_DEMO_DATA:
    populate_demo_data()

app = FastAPI(title="Gym Analytics API")

# CORS: the operator dashboard is served from its own origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET"],
    allow_headers=["*"],
)

# Mount feature routers
app.include_router(api_router)
