"""
e-Foncier Backend: Health Check Route
======================================

What:  Liveness and readiness check for Docker and load balancers.
How:   Runs `SELECT 1` against the database and checks that the document
       store is a writable directory.

    Status levels:
    - healthy:   database reachable and storage writable (HTTP 200)
    - degraded:  database reachable, storage not writable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503)
"""

import logging
import os
import time
from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from efoncier import __version__
from efoncier.config import settings
from efoncier.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check():
    db_status = "connected"
    storage_status = "writable"
    overall = "healthy"

    try:
        from efoncier.database import engine
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    storage = Path(settings.storage_root)
    if not (storage.is_dir() and os.access(storage, os.W_OK)):
        storage_status = "unavailable"
        if overall == "healthy":
            overall = "degraded"
        logger.warning("Health check: storage %s is not writable", storage)

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall == "unhealthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
