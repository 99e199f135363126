"""Prometheus metrics for the Chroma admin service.

Provides metrics instrumentation for:
- HTTP request latency and counts
- Embedding request latency and batch sizes
- Multi-collection search latency and per-collection outcomes
- Gateway operations against the Chroma server
"""

import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from chroma_admin.logging_config import get_logger

logger = get_logger(__name__)

# HTTP Request Metrics
HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status_code"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

HTTP_REQUEST_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

# Embedding Metrics
EMBEDDING_REQUEST_DURATION = Histogram(
    "embedding_request_duration_seconds",
    "Embedding request duration in seconds",
    ["transport", "status"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0],
)

EMBEDDING_REQUEST_TOTAL = Counter(
    "embedding_requests_total",
    "Total embedding requests",
    ["transport", "status"],
)

EMBEDDING_BATCH_SIZE = Histogram(
    "embedding_batch_size",
    "Embedding batch size",
    ["transport"],
    buckets=[1, 5, 10, 25, 50, 100, 250, 500],
)

# Search Metrics
SEARCH_DURATION = Histogram(
    "search_duration_seconds",
    "Multi-collection search duration in seconds",
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

SEARCH_COLLECTION_QUERIES = Counter(
    "search_collection_queries_total",
    "Per-collection queries issued by search",
    ["outcome"],  # ok, not_found, error, timeout
)

SEARCH_RESULTS_RETURNED = Histogram(
    "search_results_returned",
    "Number of merged results returned per search",
    buckets=[0, 1, 2, 5, 10, 20, 50, 100],
)

# Gateway Metrics
GATEWAY_OPERATION_DURATION = Histogram(
    "gateway_operation_duration_seconds",
    "Chroma gateway operation duration",
    ["operation", "status"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0],
)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect HTTP request metrics."""

    def __init__(self, app: ASGIApp) -> None:
        """Initialize the middleware."""
        super().__init__(app)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process request and collect metrics."""
        # Skip metrics endpoint to avoid recursion
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        endpoint = self._normalize_endpoint(request.url.path)

        HTTP_REQUEST_DURATION.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).observe(duration)

        HTTP_REQUEST_TOTAL.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()

        return response

    def _normalize_endpoint(self, path: str) -> str:
        """Normalize endpoint path to reduce cardinality.

        Collection names and document ids are replaced with placeholders.
        """
        if path.startswith("/health"):
            return "/health"
        parts = path.strip("/").split("/")
        if parts[0] == "collections":
            if len(parts) == 1:
                return "/collections"
            if len(parts) == 2:
                return "/collections/{name}"
            return "/collections/{name}/documents/{id}"
        return path


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST


def track_embedding_request(
    transport: str,
    duration: float,
    batch_size: int,
    success: bool = True,
) -> None:
    """Track embedding request metrics.

    Args:
        transport: Embedding transport name.
        duration: Request duration in seconds.
        batch_size: Number of texts in the batch.
        success: Whether the request succeeded.
    """
    status = "success" if success else "error"

    EMBEDDING_REQUEST_DURATION.labels(transport=transport, status=status).observe(duration)
    EMBEDDING_REQUEST_TOTAL.labels(transport=transport, status=status).inc()
    EMBEDDING_BATCH_SIZE.labels(transport=transport).observe(batch_size)


def track_collection_query(outcome: str) -> None:
    """Count one per-collection query outcome."""
    SEARCH_COLLECTION_QUERIES.labels(outcome=outcome).inc()


def track_search_request(duration: float, results_returned: int) -> None:
    """Track a completed multi-collection search.

    Args:
        duration: Search duration in seconds.
        results_returned: Number of merged results.
    """
    SEARCH_DURATION.observe(duration)
    SEARCH_RESULTS_RETURNED.observe(results_returned)


def track_gateway_operation(operation: str, duration: float, success: bool = True) -> None:
    """Track one gateway call against the Chroma server."""
    status = "success" if success else "error"
    GATEWAY_OPERATION_DURATION.labels(operation=operation, status=status).observe(duration)
