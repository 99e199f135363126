"""API routes for collection, document, search and embedding operations."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from chroma_admin.api.dependencies import (
    ServiceContainer,
    get_aggregator,
    get_gateway,
    get_services,
)
from chroma_admin.embeddings.models import EmbeddingRequest, EmbeddingResponse
from chroma_admin.embeddings.transport import build_embeddings
from chroma_admin.exceptions import (
    ChromaAdminError,
    EmbeddingGenerationError,
    RequestTimeoutError,
    UpstreamUnavailableError,
)
from chroma_admin.logging_config import get_logger
from chroma_admin.search.aggregator import SearchAggregator
from chroma_admin.search.models import SkippedCollection
from chroma_admin.vectorstore.gateway import CollectionGateway
from chroma_admin.vectorstore.models import (
    Collection,
    CollectionConfig,
    Document,
    SearchResult,
)

logger = get_logger(__name__)


router = APIRouter()


class MessageResponse(BaseModel):
    """Outcome of a mutation."""

    success: bool = Field(description="Whether the operation succeeded")
    message: str = Field(description="Human-readable outcome")


class CollectionsResponse(BaseModel):
    """Response listing collections."""

    collections: list[Collection] = Field(description="All collections")


class CreateCollectionRequest(BaseModel):
    """Request body for collection creation."""

    name: str = Field(default="", description="Collection name")
    metadata: dict[str, Any] | None = Field(
        default=None,
        description="Collection metadata",
    )


class DocumentsResponse(BaseModel):
    """Response listing documents of a collection."""

    documents: list[Document] = Field(description="Documents in the collection")


class AddDocumentsRequest(BaseModel):
    """Request body for adding documents."""

    documents: list[Document] = Field(description="Documents to add")


class UpdateDocumentRequest(BaseModel):
    """Request body for updating a document."""

    document: str | None = Field(default=None, description="New document text")
    metadata: dict[str, Any] | None = Field(
        default=None,
        description="New document metadata",
    )


class SearchRequest(BaseModel):
    """Request body for multi-collection search."""

    model_config = ConfigDict(populate_by_name=True)

    query: str = Field(default="", description="Query text")
    collection_names: list[str] = Field(
        default_factory=list,
        alias="collectionNames",
        description="Collections to search",
    )
    n_results: int | None = Field(
        default=None,
        ge=1,
        le=100,
        alias="nResults",
        description="Matches per collection",
    )
    max_distance: float | None = Field(
        default=None,
        ge=0.0,
        alias="maxDistance",
        description="Drop matches farther than this distance",
    )


class SearchResponse(BaseModel):
    """Response from multi-collection search."""

    results: list[SearchResult] = Field(description="Matches sorted by distance")
    skipped: list[SkippedCollection] = Field(
        default_factory=list,
        description="Collections that could not be searched",
    )


class ServerCheckResponse(BaseModel):
    """Result of the Chroma connection check."""

    success: bool = Field(description="Whether the server answered")
    chroma_url: str = Field(serialization_alias="chromaUrl", description="Server address")
    heartbeat: int = Field(description="Server heartbeat value")
    collections: int = Field(description="Number of collections on the server")
    message: str = Field(description="Human-readable outcome")


@router.get("/collections", response_model=CollectionsResponse, tags=["Collections"])
async def list_collections_endpoint(
    gateway: CollectionGateway = Depends(get_gateway),
) -> CollectionsResponse:
    """List all collections."""
    return CollectionsResponse(collections=await gateway.list_collections())


@router.post("/collections", response_model=MessageResponse, tags=["Collections"])
async def create_collection_endpoint(
    request: CreateCollectionRequest,
    gateway: CollectionGateway = Depends(get_gateway),
) -> MessageResponse:
    """Create a collection."""
    config = CollectionConfig(name=request.name, metadata=request.metadata or {})
    await gateway.create_collection(config)
    return MessageResponse(
        success=True,
        message=f'Collection "{config.name}" created successfully',
    )


@router.delete("/collections/{name}", response_model=MessageResponse, tags=["Collections"])
async def delete_collection_endpoint(
    name: str,
    gateway: CollectionGateway = Depends(get_gateway),
) -> MessageResponse:
    """Delete a collection."""
    await gateway.delete_collection(name)
    return MessageResponse(success=True, message=f'Collection "{name}" deleted successfully')


@router.get("/collections/{name}", response_model=DocumentsResponse, tags=["Documents"])
async def list_documents_endpoint(
    name: str,
    gateway: CollectionGateway = Depends(get_gateway),
) -> DocumentsResponse:
    """List the documents of a collection."""
    return DocumentsResponse(documents=await gateway.list_documents(name))


@router.post("/collections/{name}", response_model=MessageResponse, tags=["Documents"])
async def add_documents_endpoint(
    name: str,
    request: AddDocumentsRequest,
    gateway: CollectionGateway = Depends(get_gateway),
) -> MessageResponse:
    """Add documents to a collection."""
    added = await gateway.add_documents(name, request.documents)
    return MessageResponse(
        success=True,
        message=f'Added {added} documents to collection "{name}"',
    )


@router.put(
    "/collections/{name}/documents/{doc_id}",
    response_model=MessageResponse,
    tags=["Documents"],
)
async def update_document_endpoint(
    name: str,
    doc_id: str,
    request: UpdateDocumentRequest,
    gateway: CollectionGateway = Depends(get_gateway),
) -> MessageResponse:
    """Update a document's text and metadata."""
    await gateway.update_document(name, doc_id, request.document, request.metadata)
    return MessageResponse(success=True, message=f'Document "{doc_id}" updated successfully')


@router.delete(
    "/collections/{name}/documents/{doc_id}",
    response_model=MessageResponse,
    tags=["Documents"],
)
async def delete_document_endpoint(
    name: str,
    doc_id: str,
    gateway: CollectionGateway = Depends(get_gateway),
) -> MessageResponse:
    """Delete a document."""
    await gateway.delete_document(name, doc_id)
    return MessageResponse(success=True, message=f'Document "{doc_id}" deleted successfully')


@router.post("/search", response_model=SearchResponse, tags=["Search"])
async def search_endpoint(
    request: SearchRequest,
    aggregator: SearchAggregator = Depends(get_aggregator),
) -> SearchResponse:
    """Search one or more collections."""
    outcome = await aggregator.search_detailed(
        request.query,
        request.collection_names,
        n_results=request.n_results,
        max_distance=request.max_distance,
    )
    return SearchResponse(results=outcome.results, skipped=outcome.skipped)


@router.post("/embeddings", response_model=EmbeddingResponse, tags=["Embeddings"])
async def embeddings_endpoint(
    request: EmbeddingRequest,
    services: ServiceContainer = Depends(get_services),
) -> EmbeddingResponse:
    """Generate deterministic fallback embeddings for a batch of texts."""
    try:
        body = build_embeddings(request.texts, services.settings.embedding.dimension)
    except ChromaAdminError as e:
        raise EmbeddingGenerationError(e.message, details=e.details) from e
    return EmbeddingResponse(**body)


@router.get(
    "/test-server",
    response_model=ServerCheckResponse,
    response_model_by_alias=True,
    tags=["Diagnostics"],
)
async def test_server_endpoint(
    gateway: CollectionGateway = Depends(get_gateway),
) -> ServerCheckResponse:
    """Check the connection to the Chroma server."""
    logger.info(f"Testing connection to Chroma at: {gateway.chroma_url}")
    try:
        heartbeat = await gateway.heartbeat()
        collections = await gateway.list_collections()
    except (UpstreamUnavailableError, RequestTimeoutError):
        raise
    except ChromaAdminError as e:
        raise UpstreamUnavailableError(
            f"Chroma connection failed: {e.message}",
            details={"chroma_url": gateway.chroma_url, **e.details},
        ) from e

    return ServerCheckResponse(
        success=True,
        chroma_url=gateway.chroma_url,
        heartbeat=heartbeat,
        collections=len(collections),
        message="Chroma connection successful",
    )
