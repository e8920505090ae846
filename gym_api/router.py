from fastapi import APIRouter
from gym_api.analytics.router import router as analytics_router
from gym_api.health.router import router as health_router

router = APIRouter()
router.include_router(analytics_router, tags=["analytics"])
router.include_router(health_router, tags=["health"])
