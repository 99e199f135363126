"""Tests for observability module."""

import pytest
from httpx import ASGITransport, AsyncClient

from chroma_admin.api.app import app
from chroma_admin.observability.metrics import (
    MetricsMiddleware,
    get_metrics,
    track_collection_query,
    track_embedding_request,
    track_gateway_operation,
    track_search_request,
)


class TestMetricsEndpoint:
    """Tests for /metrics endpoint."""

    @pytest.mark.asyncio
    async def test_metrics_endpoint_returns_prometheus_format(self) -> None:
        """Metrics endpoint returns Prometheus format."""
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/metrics")

        assert response.status_code == 200
        assert "text/plain" in response.headers["content-type"]
        assert b"# HELP" in response.content


class TestMetricsFunctions:
    """Tests for metrics tracking functions."""

    def test_get_metrics_returns_bytes(self) -> None:
        """get_metrics returns bytes."""
        metrics = get_metrics()
        assert isinstance(metrics, bytes)

    def test_track_embedding_request(self) -> None:
        """track_embedding_request records request."""
        track_embedding_request(
            transport="local",
            duration=0.1,
            batch_size=10,
            success=True,
        )

        metrics = get_metrics().decode()
        assert "embedding_request_duration_seconds" in metrics
        assert 'embedding_batch_size_count{transport="local"}' in metrics

    def test_track_embedding_failure(self) -> None:
        """Failed embedding requests are labelled as errors."""
        track_embedding_request(transport="http", duration=0.5, batch_size=1, success=False)

        metrics = get_metrics().decode()
        assert 'embedding_requests_total{transport="http",status="error"}' in metrics

    def test_track_collection_query(self) -> None:
        """Per-collection outcomes are counted by label."""
        track_collection_query("not_found")

        metrics = get_metrics().decode()
        assert 'search_collection_queries_total{outcome="not_found"}' in metrics

    def test_track_search_request(self) -> None:
        """track_search_request records duration and result count."""
        track_search_request(duration=0.2, results_returned=7)

        metrics = get_metrics().decode()
        assert "search_duration_seconds" in metrics
        assert "search_results_returned" in metrics

    def test_track_gateway_operation(self) -> None:
        """Gateway calls are recorded by operation."""
        track_gateway_operation("list_collections", 0.01)

        metrics = get_metrics().decode()
        assert 'operation="list_collections"' in metrics


class TestMetricsMiddleware:
    """Tests for MetricsMiddleware."""

    async def test_middleware_records_request_metrics(self, client: AsyncClient) -> None:
        """Middleware records HTTP request metrics."""
        await client.get("/health")

        metrics = get_metrics().decode()
        assert "http_request_duration_seconds" in metrics
        assert "http_requests_total" in metrics

    async def test_collection_paths_are_grouped(self, client: AsyncClient) -> None:
        """Collection names do not leak into metric labels."""
        await client.get("/collections/some_unique_name")

        metrics = get_metrics().decode()
        assert 'endpoint="/collections/{name}"' in metrics
        assert "some_unique_name" not in metrics

    def test_normalize_endpoint(self) -> None:
        """Paths collapse onto route templates."""
        middleware = MetricsMiddleware(app)
        assert middleware._normalize_endpoint("/health/ready") == "/health"
        assert middleware._normalize_endpoint("/collections") == "/collections"
        assert middleware._normalize_endpoint("/collections/docs") == "/collections/{name}"
        assert (
            middleware._normalize_endpoint("/collections/docs/documents/a1")
            == "/collections/{name}/documents/{id}"
        )
        assert middleware._normalize_endpoint("/search") == "/search"
