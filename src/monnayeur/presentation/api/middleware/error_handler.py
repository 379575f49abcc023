"""
Global error handling middleware.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from monnayeur.domain.exceptions import MonnayeurException
from monnayeur.infrastructure.monitoring.logger import get_logger

logger = get_logger(__name__)


async def monnayeur_exception_handler(
    request: Request, exc: MonnayeurException
) -> JSONResponse:
    """
    Handle Monnayeur domain exceptions.

    Converts domain exceptions that escaped a use case to HTTP responses.
    """
    status_code_map = {
        "ENTITY_NOT_FOUND": status.HTTP_404_NOT_FOUND,
        "VALIDATION_ERROR": status.HTTP_422_UNPROCESSABLE_ENTITY,
        "CONSTRAINT_VIOLATION": status.HTTP_409_CONFLICT,
        "SESSION_EXPIRED": status.HTTP_410_GONE,
        "MIGRATION_DEGRADED": status.HTTP_503_SERVICE_UNAVAILABLE,
    }

    status_code = status_code_map.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    if status_code >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content={
            "error": exc.code,
            "message": exc.message,
        },
    )
