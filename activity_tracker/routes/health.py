"""
Activity Tracker — Health Check Route
=======================================

What:  Readiness endpoint for process supervisors and load balancers.
How:   Opens a connection from the pool and runs a trivial SELECT; the
       database is the only dependency whose loss stops pages from rendering.

    200 {"status": "healthy",   "database": "connected", ...}
    503 {"status": "unhealthy", "database": "disconnected", ...}
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import literal, select
from sqlalchemy.exc import SQLAlchemyError

from activity_tracker import __version__
from activity_tracker.database import engine
from activity_tracker.schemas.activity import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

STARTED_AT = time.monotonic()


async def _database_reachable() -> bool:
    try:
        async with engine.connect() as conn:
            await conn.scalar(select(literal(1)))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Health probe could not reach the database: %s", e)
        return False
    return True


@router.get("/health", response_model=HealthResponse)
async def health_check():
    reachable = await _database_reachable()
    payload = HealthResponse(
        status="healthy" if reachable else "unhealthy",
        version=__version__,
        database="connected" if reachable else "disconnected",
        uptime_seconds=round(time.monotonic() - STARTED_AT, 2),
    )
    return JSONResponse(status_code=200 if reachable else 503, content=payload.model_dump())
