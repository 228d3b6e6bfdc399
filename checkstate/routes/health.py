"""
Checkstate: Health Check Route
================================

What:  Liveness/readiness probe for process supervisors and load balancers.
How:   The only dependency is the storage root, so the service is healthy
       exactly when that directory exists and is readable and writable.

Status levels:
    - healthy:   storage usable (HTTP 200)
    - unhealthy: storage missing or not writable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends, Response

from checkstate import __version__
from checkstate.dependencies import get_store
from checkstate.schemas.state import HealthResponse
from checkstate.services.state_store import CheckStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(
    response: Response,
    store: CheckStore = Depends(get_store),
) -> HealthResponse:
    """
    Report whether the storage root can serve reads and writes.

    What:    Checks that data_dir exists as a readable, writable directory.
    How:     CheckStore.is_healthy(); no marker files are touched.

    Returns:
        HealthResponse with HTTP 200 when healthy, 503 when the root is
        missing or not writable (e.g. before first startup created it).
    """
    storage_status = "available"
    overall = "healthy"

    if not await store.is_healthy():
        storage_status = "unavailable"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: storage root %s is not usable", store.root)

    return HealthResponse(
        status=overall,
        version=__version__,
        storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
