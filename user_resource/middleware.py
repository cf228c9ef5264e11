"""
Middleware components for request handling, logging and metrics.
"""

import time
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .logging_config import bind_request_id, clear_request_id

logger = structlog.get_logger(__name__)


UNMATCHED_ENDPOINT = "unmatched"


def _endpoint_label(request: Request) -> str:
    """
    Metric label for the endpoint a request was routed to.

    Templated routes report their template. Fixed Starlette routes (the API
    document, /docs) report their path. Requests that matched no route share
    one label, so unknown paths cannot grow the number of series.
    """
    route = request.scope.get("route")
    template = getattr(route, "path", None)
    if template:
        return template
    if "endpoint" in request.scope:
        return request.url.path
    return UNMATCHED_ENDPOINT


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for request and response logging.

    Binds a request ID (taken from X-Request-ID or generated) to the
    structlog context, logs request start and completion with timing, and
    echoes the request ID on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = bind_request_id(request.headers.get("X-Request-ID"))
        start_time = time.perf_counter()

        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            client_host=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start_time) * 1000
            response.headers["X-Request-ID"] = request_id

            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )
            return response
        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                duration_ms=round(duration_ms, 2),
                error=str(exc),
            )
            raise
        finally:
            clear_request_id()


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware to track Prometheus metrics for all HTTP requests.

    Tracks:
    - Request count by method, endpoint, and status code
    - Request duration by method and endpoint
    """

    def __init__(self, app: ASGIApp, track_func: Callable):
        """
        Initialize the middleware.

        Args:
            app: ASGI application
            track_func: Called with (method, endpoint, status_code, duration)
        """
        super().__init__(app)
        self.track_func = track_func

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()

        response = await call_next(request)

        duration = time.time() - start_time
        self.track_func(
            method=request.method,
            endpoint=_endpoint_label(request),
            status_code=response.status_code,
            duration=duration,
        )
        return response
