"""
Prometheus metrics for the user resource service.

Tracks HTTP traffic and user store operations.
"""

from fastapi import Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Request metrics
http_requests_total = Counter(
    "user_http_requests_total", "Total HTTP requests", ["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "user_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0),
)

# User store metrics
user_store_operations_total = Counter(
    "user_store_operations_total", "Total user store operations", ["operation", "status"]
)

user_store_size = Gauge("user_store_size", "Number of users currently stored")


def track_request_metrics(method: str, endpoint: str, status_code: int, duration: float):
    """Track HTTP request metrics."""
    http_requests_total.labels(method=method, endpoint=endpoint, status=status_code).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)


def track_store_operation(operation: str, success: bool):
    """Track user store operations."""
    status = "success" if success else "failure"
    user_store_operations_total.labels(operation=operation, status=status).inc()


def update_store_size(size: int):
    """Update stored users gauge."""
    user_store_size.set(size)


async def metrics_endpoint():
    """
    Prometheus metrics endpoint.

    Returns:
        Response with Prometheus metrics in text format
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
