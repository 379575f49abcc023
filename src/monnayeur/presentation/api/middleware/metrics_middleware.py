"""
Prometheus metrics middleware for FastAPI.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from monnayeur.infrastructure.monitoring import metrics


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Middleware to collect HTTP metrics.

    Records request count by method/endpoint/status and request duration
    by method/endpoint.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Time the request and count it by status.

        Args:
            request: FastAPI request
            call_next: Next middleware/handler

        Returns:
            Response from handler
        """
        # Path only, no query string
        endpoint = request.url.path
        method = request.method

        # Anything that raises is counted as a 500
        start_time = time.time()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            # Record duration and count, on success or exception
            metrics.http_request_duration_seconds.labels(
                method=method,
                endpoint=endpoint,
            ).observe(time.time() - start_time)

            metrics.http_requests_total.labels(
                method=method,
                endpoint=endpoint,
                status=status_code,
            ).inc()
