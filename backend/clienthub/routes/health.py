"""
ClientHub Backend - Health Check Route
=======================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Checks the database (SELECT 1) and the asset directory (writable).
Who:   Called by Docker health checks, load balancers, and monitoring systems.
When:  Periodically (e.g., every 30 seconds by Docker).

Status levels:
    - healthy:   database reachable and storage writable (HTTP 200)
    - unhealthy: either dependency down (HTTP 503, stop routing traffic)
"""

import logging
import os
import time

from fastapi import APIRouter, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from clienthub import __version__
from clienthub.database import engine
from clienthub.schemas.common import HealthResponse
from clienthub.services.asset_service import asset_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "A dependency is down", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    """
    Probe the database and the image directory.

    Bypasses the admission gate, so a saturated server still answers probes.
    """
    db_status = "connected"
    storage_status = "writable"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        logger.warning("Health check: database unreachable: %s", str(e))

    root = asset_service.storage_root
    if not (root.is_dir() and os.access(root, os.W_OK)):
        storage_status = "unavailable"
        logger.warning("Health check: storage root not writable: %s", root)

    healthy = db_status == "connected" and storage_status == "writable"
    if not healthy:
        response.status_code = 503

    return HealthResponse(
        status="healthy" if healthy else "unhealthy",
        version=__version__,
        database=db_status,
        storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
