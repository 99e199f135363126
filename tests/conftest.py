"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from chroma_admin.api.app import create_app
from chroma_admin.api.dependencies import ServiceContainer
from chroma_admin.config import ChromaSettings, SearchSettings, Settings
from chroma_admin.embeddings.service import TransportEmbeddingService
from chroma_admin.embeddings.transport import LocalEmbeddingTransport
from chroma_admin.search.aggregator import SearchAggregator
from chroma_admin.vectorstore.client import ChromaClientProvider
from chroma_admin.vectorstore.gateway import CollectionGateway
from tests.fakes import FIXED_NOW, FakeChromaClient


@pytest.fixture
def fake_chroma() -> FakeChromaClient:
    """In-memory Chroma client."""
    return FakeChromaClient()


@pytest.fixture
def settings() -> Settings:
    """Settings with short timeouts and no connection retries."""
    return Settings(
        chroma=ChromaSettings(url="http://localhost:8000", timeout=5.0, connect_attempts=1),
        search=SearchSettings(query_timeout=5.0, max_distance=None),
    )


@pytest.fixture
def services(fake_chroma: FakeChromaClient, settings: Settings) -> ServiceContainer:
    """Services wired to the in-memory Chroma client."""
    embedding_service = TransportEmbeddingService(
        LocalEmbeddingTransport(dimension=settings.embedding.dimension),
        settings=settings.embedding,
    )
    provider = ChromaClientProvider(
        settings=settings.chroma,
        client=fake_chroma,  # type: ignore[arg-type]
    )
    gateway = CollectionGateway(
        provider,
        embedding_service,
        settings=settings,
        clock=lambda: FIXED_NOW,
    )
    aggregator = SearchAggregator(gateway, embedding_service, settings=settings.search)
    return ServiceContainer(settings, embedding_service, gateway, aggregator)


@pytest.fixture
async def client(services: ServiceContainer) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client for the FastAPI app.

    Yields:
        AsyncClient configured for testing.
    """
    transport = ASGITransport(app=create_app(services))
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
