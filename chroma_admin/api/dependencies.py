"""Service wiring for the API.

Services are built once per application and stored on ``app.state``;
route handlers receive them through FastAPI dependencies.
"""

from fastapi import Request

from chroma_admin.config import Settings, get_settings
from chroma_admin.embeddings.service import EmbeddingService, TransportEmbeddingService
from chroma_admin.search.aggregator import SearchAggregator
from chroma_admin.vectorstore.client import ChromaClientProvider
from chroma_admin.vectorstore.gateway import CollectionGateway


class ServiceContainer:
    """Holds the explicitly constructed services of one application."""

    def __init__(
        self,
        settings: Settings,
        embedding_service: EmbeddingService,
        gateway: CollectionGateway,
        aggregator: SearchAggregator,
    ) -> None:
        self.settings = settings
        self.embedding_service = embedding_service
        self.gateway = gateway
        self.aggregator = aggregator

    @classmethod
    def build(cls, settings: Settings | None = None) -> "ServiceContainer":
        """Construct every service from settings.

        Nothing connects here; the Chroma client connects on first use.
        """
        settings = settings or get_settings()
        embedding_service = TransportEmbeddingService(settings=settings.embedding)
        provider = ChromaClientProvider(settings=settings.chroma)
        gateway = CollectionGateway(provider, embedding_service, settings=settings)
        aggregator = SearchAggregator(gateway, embedding_service, settings=settings.search)
        return cls(settings, embedding_service, gateway, aggregator)

    async def aclose(self) -> None:
        """Release held resources."""
        await self.embedding_service.close()


def get_services(request: Request) -> ServiceContainer:
    """Dependency returning the application's services."""
    services: ServiceContainer = request.app.state.services
    return services


def get_gateway(request: Request) -> CollectionGateway:
    """Dependency returning the collection gateway."""
    return get_services(request).gateway


def get_aggregator(request: Request) -> SearchAggregator:
    """Dependency returning the search aggregator."""
    return get_services(request).aggregator
