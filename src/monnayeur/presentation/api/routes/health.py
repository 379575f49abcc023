"""
Health check API routes.

Liveness and readiness probes.
"""

from fastapi import APIRouter, Depends, Response, status

from monnayeur.di.dependencies import get_health_check
from monnayeur.infrastructure.monitoring.health_check import (
    HealthStatus,
    MonnayeurHealthCheck,
)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_probe(
    response: Response,
    health_check: MonnayeurHealthCheck = Depends(get_health_check),
):
    """
    Liveness probe endpoint.

    Returns 200 if service is alive, 503 if dead.
    """
    result = await health_check.check_liveness()

    if result["status"] != HealthStatus.HEALTHY.value:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return result


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness_probe(
    response: Response,
    health_check: MonnayeurHealthCheck = Depends(get_health_check),
):
    """
    Readiness probe endpoint.

    Returns 200 if ready, 503 if not ready.

    Checks:
    - Database connectivity
    - Schema version marker
    """
    result = await health_check.check_readiness()

    if result["status"] in (HealthStatus.UNHEALTHY.value, HealthStatus.DEGRADED.value):
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return result


@router.get("", status_code=status.HTTP_200_OK)
async def health_check_endpoint(
    response: Response,
    health_check: MonnayeurHealthCheck = Depends(get_health_check),
):
    """General health check endpoint (alias for readiness)."""
    return await readiness_probe(response, health_check)
