"""Observability module for metrics and monitoring."""

from chroma_admin.observability.metrics import (
    MetricsMiddleware,
    get_metrics,
    track_collection_query,
    track_embedding_request,
    track_gateway_operation,
    track_search_request,
)

__all__ = [
    "MetricsMiddleware",
    "get_metrics",
    "track_collection_query",
    "track_embedding_request",
    "track_gateway_operation",
    "track_search_request",
]
