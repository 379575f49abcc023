"""
Request ID middleware for request tracking.
"""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from monnayeur.infrastructure.monitoring.logger import (
    get_request_id,
    set_request_id,
)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware to generate and track request IDs.

    Adds X-Request-ID header to responses; the id also lands on every JSON
    log line written while handling the request.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Bind a request id for the duration of the request.

        Args:
            request: FastAPI request
            call_next: Next middleware/handler

        Returns:
            Response carrying the X-Request-ID header
        """
        # Honour an upstream id (webapp or webhook relay), else mint one
        request_id = request.headers.get("X-Request-ID") or set_request_id()
        set_request_id(request_id)

        response = await call_next(request)

        # Echo on the response
        response.headers["X-Request-ID"] = get_request_id() or ""

        return response
