"""
Health Check Endpoints

- /health/live  - Basic liveness (app is running)
- /health/ready - Readiness check (database reachable)
"""

import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.core.logging_config import logger


router = APIRouter(prefix="/health", tags=["Health Checks"])


@router.get("/live")
async def liveness():
    return {"status": "alive"}


@router.get("/ready")
async def readiness(request: Request):
    """Ready only when the database answers"""
    start = time.perf_counter()
    try:
        await request.app.state.database.ping()
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"[Health] Database check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "database": "unreachable"},
        )

    return {
        "status": "ready",
        "database": "ok",
        "latency_ms": round((time.perf_counter() - start) * 1000, 2),
    }
