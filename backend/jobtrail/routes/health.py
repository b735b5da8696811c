"""
JobTrail Backend — Health Check Route
=======================================

What:  GET /health for container probes and load balancers.
How:   Runs SELECT 1 against the record store. The service is "healthy" when
       the store answers and "degraded" otherwise; the endpoint itself always
       answers 200 so a probe can tell a slow database from a dead process.
"""

import logging

from fastapi import APIRouter, Depends

from jobtrail import __version__
from jobtrail.context import ServiceContext
from jobtrail.dependencies import get_context
from jobtrail.schemas.common import HealthResponse
from jobtrail.timestamps import utc_now

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(context: ServiceContext = Depends(get_context)) -> HealthResponse:
    connected = await context.check_store()
    uptime = (utc_now() - context.started_at).total_seconds()

    return HealthResponse(
        status="healthy" if connected else "degraded",
        version=__version__,
        database="connected" if connected else "disconnected",
        storage_mode=context.settings.storage_mode,
        uptime_seconds=round(uptime, 2),
    )
