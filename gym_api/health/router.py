import logging
import time
from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gym_api.database import get_db


router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def check_health(db: Session = Depends(get_db)):
    """Ping the database; 503 with the same payload when it is unreachable."""
    start = time.perf_counter()
    payload = {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat(), "database": "connected"}
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("Database ping failed: %s", exc)
        payload.update(status="error", database="disconnected", details="Database ping failed")
    payload["response_time_ms"] = round((time.perf_counter() - start) * 1000, 2)
    if payload["status"] != "ok":
        return JSONResponse(payload, status_code=503)
    return payload
