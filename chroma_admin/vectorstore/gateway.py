"""Collection and document operations against the Chroma server."""

import asyncio
import time
from collections.abc import Awaitable, Callable, Mapping
from datetime import UTC, datetime
from typing import Any, TypeVar

from chromadb.api import AsyncClientAPI
from chromadb.api.models.AsyncCollection import AsyncCollection

from chroma_admin.config import Settings, get_settings
from chroma_admin.embeddings.service import EmbeddingService
from chroma_admin.exceptions import (
    AlreadyExistsError,
    ChromaAdminError,
    ErrorCode,
    InvalidArgumentError,
    InvalidNameError,
    NotFoundError,
    RequestTimeoutError,
    UpstreamUnavailableError,
)
from chroma_admin.logging_config import get_logger
from chroma_admin.observability.metrics import track_gateway_operation
from chroma_admin.vectorstore.client import ChromaClientProvider, classify_error
from chroma_admin.vectorstore.models import (
    COLLECTION_NAME_PATTERN,
    Collection,
    CollectionConfig,
    Document,
)

logger = get_logger(__name__)

T = TypeVar("T")

QUERY_INCLUDE = ["documents", "metadatas", "distances"]


def validate_collection_name(name: str) -> str:
    """Check a collection name against the naming rule.

    Raises:
        InvalidNameError: If the name is empty or has characters other than
            letters, digits, underscores and hyphens.
    """
    if not name or not COLLECTION_NAME_PATTERN.fullmatch(name):
        raise InvalidNameError(
            "Collection name must be non-empty and contain only letters, "
            "digits, underscores and hyphens",
            details={"name": name},
        )
    return name


def apply_default_metadata(
    name: str,
    metadata: Mapping[str, Any] | None,
    created_by: str,
    now: datetime,
) -> dict[str, Any]:
    """Fill default collection metadata without touching caller values.

    ``description``, ``created_at`` and ``created_by`` are added only when
    the caller did not supply them.
    """
    filled = dict(metadata or {})
    filled.setdefault("description", f"Collection {name}")
    filled.setdefault("created_at", now.isoformat())
    filled.setdefault("created_by", created_by)
    return filled


def _to_store_metadata(metadata: Mapping[str, Any] | None) -> dict[str, Any] | None:
    # Chroma rejects empty metadata mappings
    return dict(metadata) if metadata else None


class CollectionGateway:
    """CRUD gateway over the Chroma collection API.

    Every call goes to the server; nothing is cached between calls.
    Document text is embedded with the injected embedding service before it
    is sent, so the store never needs an embedding function of its own.
    """

    def __init__(
        self,
        provider: ChromaClientProvider,
        embedding_service: EmbeddingService,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            provider: Source of the connected Chroma client.
            embedding_service: Service used to embed document text.
            settings: Application settings.
            clock: Current-time source for collection metadata.
        """
        self._provider = provider
        self._embedding_service = embedding_service
        self._settings = settings or get_settings()
        self._clock = clock or (lambda: datetime.now(UTC))

    @property
    def chroma_url(self) -> str:
        """Configured Chroma server address."""
        return self._provider.url

    async def _call(
        self,
        operation: str,
        func: Callable[[AsyncClientAPI], Awaitable[T]],
        collection: str | None = None,
    ) -> T:
        """Run one store call with a deadline, metrics and error mapping."""
        start = time.perf_counter()
        try:
            client = await self._provider.get_client()
            result = await asyncio.wait_for(func(client), timeout=self._settings.chroma.timeout)
        except Exception as e:
            track_gateway_operation(operation, time.perf_counter() - start, success=False)
            error = classify_error(e, operation, collection)
            if isinstance(error, UpstreamUnavailableError):
                self._provider.reset()
            if error is not e:
                logger.warning(
                    f"Chroma {operation} failed: {e}",
                    extra={"operation": operation, "collection": collection},
                )
                raise error from e
            raise

        track_gateway_operation(operation, time.perf_counter() - start)
        return result

    async def heartbeat(self) -> int:
        """Ping the Chroma server.

        Returns:
            The server heartbeat value (nanoseconds since epoch).
        """
        return await self._call("heartbeat", lambda client: client.heartbeat())

    async def list_collections(self) -> list[Collection]:
        """List every collection on the server."""
        stored = await self._call(
            "list_collections",
            lambda client: client.list_collections(),
        )
        return [
            Collection(name=item.name, metadata=dict(item.metadata or {}))
            for item in stored
        ]

    async def create_collection(self, config: CollectionConfig) -> Collection:
        """Create a collection with default metadata filled in.

        Raises:
            InvalidNameError: If the name breaks the naming rule.
            AlreadyExistsError: If a collection with the name exists.
        """
        name = validate_collection_name(config.name)

        existing = await self.list_collections()
        if any(collection.name == name for collection in existing):
            raise AlreadyExistsError(
                f'Collection "{name}" already exists',
                details={"collection": name},
            )

        metadata = apply_default_metadata(
            name,
            config.metadata,
            created_by=self._settings.collection_created_by,
            now=self._clock(),
        )
        await self._call(
            "create_collection",
            lambda client: client.create_collection(
                name=name,
                metadata=metadata,
                embedding_function=None,
            ),
            collection=name,
        )
        logger.info(f"Created collection: {name}", extra={"collection": name})
        return Collection(name=name, metadata=metadata)

    async def delete_collection(self, name: str) -> None:
        """Delete a collection and all of its documents.

        Raises:
            InvalidNameError: If the name breaks the naming rule.
            NotFoundError: If the collection does not exist.
        """
        validate_collection_name(name)
        await self._call(
            "delete_collection",
            lambda client: client.delete_collection(name=name),
            collection=name,
        )
        logger.info(f"Deleted collection: {name}", extra={"collection": name})

    async def get_collection(self, name: str) -> AsyncCollection:
        """Resolve a collection handle by name.

        Raises:
            NotFoundError: If the collection cannot be resolved.
            UpstreamUnavailableError: If the server cannot be reached.
            RequestTimeoutError: If the lookup timed out.
        """
        try:
            return await self._call(
                "get_collection",
                lambda client: client.get_collection(name=name, embedding_function=None),
                collection=name,
            )
        except (UpstreamUnavailableError, RequestTimeoutError):
            raise
        except ChromaAdminError as e:
            raise NotFoundError(
                f'Collection "{name}" not found',
                code=ErrorCode.COLLECTION_NOT_FOUND,
                details={"collection": name, "reason": e.message},
            ) from e

    async def list_documents(self, collection_name: str) -> list[Document]:
        """List every document in a collection."""
        collection = await self.get_collection(collection_name)
        result = await self._call(
            "get_documents",
            lambda _client: collection.get(include=["documents", "metadatas"]),
            collection=collection_name,
        )

        ids = result.get("ids") or []
        texts = result.get("documents") or []
        metadatas = result.get("metadatas") or []
        return [
            Document(
                id=doc_id,
                document=texts[i] if i < len(texts) and texts[i] is not None else "",
                metadata=dict(metadatas[i] or {}) if i < len(metadatas) else {},
            )
            for i, doc_id in enumerate(ids)
        ]

    async def add_documents(self, collection_name: str, docs: list[Document]) -> int:
        """Add a batch of documents in a single store request.

        The whole batch is embedded before the store is touched; an
        embedding failure aborts the call with nothing written.

        Returns:
            Number of documents added.

        Raises:
            InvalidArgumentError: If the batch is empty or repeats an id.
            NotFoundError: If the collection does not exist.
            EmbeddingGenerationError: If embedding fails.
        """
        if not docs:
            raise InvalidArgumentError(
                "Invalid input. Expected a non-empty array of documents.",
                details={"collection": collection_name},
            )
        ids = [doc.id for doc in docs]
        if len(set(ids)) != len(ids):
            duplicates = sorted({doc_id for doc_id in ids if ids.count(doc_id) > 1})
            raise InvalidArgumentError(
                "Document ids must be unique within a batch",
                details={"collection": collection_name, "duplicates": duplicates},
            )

        collection = await self.get_collection(collection_name)
        embeddings = await self._embedding_service.embed_batch([doc.document for doc in docs])

        metadatas = [_to_store_metadata(doc.metadata) for doc in docs]
        await self._call(
            "add_documents",
            lambda _client: collection.add(
                ids=ids,
                embeddings=embeddings,
                documents=[doc.document for doc in docs],
                metadatas=metadatas if any(metadatas) else None,
            ),
            collection=collection_name,
        )

        logger.info(
            f"Added {len(docs)} documents",
            extra={"collection": collection_name},
        )
        return len(docs)

    async def _require_document(
        self,
        collection: AsyncCollection,
        collection_name: str,
        doc_id: str,
    ) -> None:
        found = await self._call(
            "get_document",
            lambda _client: collection.get(ids=[doc_id], include=["documents"]),
            collection=collection_name,
        )
        if not found.get("ids"):
            raise NotFoundError(
                f'Document "{doc_id}" not found in collection "{collection_name}"',
                code=ErrorCode.DOCUMENT_NOT_FOUND,
                details={"collection": collection_name, "id": doc_id},
            )

    async def update_document(
        self,
        collection_name: str,
        doc_id: str,
        document: str | None,
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        """Replace a document's text and metadata, re-embedding the text.

        An empty or missing metadata mapping leaves stored metadata as is.

        Raises:
            InvalidArgumentError: If the document text is missing.
            NotFoundError: If the collection or document does not exist.
        """
        if not document:
            raise InvalidArgumentError(
                "Document content is required",
                details={"collection": collection_name, "id": doc_id},
            )

        collection = await self.get_collection(collection_name)
        await self._require_document(collection, collection_name, doc_id)
        embedding = await self._embedding_service.embed(document)

        store_metadata = _to_store_metadata(metadata)
        await self._call(
            "update_document",
            lambda _client: collection.update(
                ids=[doc_id],
                embeddings=[embedding],
                documents=[document],
                metadatas=[store_metadata] if store_metadata else None,
            ),
            collection=collection_name,
        )
        logger.info(
            f'Updated document "{doc_id}"',
            extra={"collection": collection_name},
        )

    async def delete_document(self, collection_name: str, doc_id: str) -> None:
        """Delete one document.

        Raises:
            NotFoundError: If the collection or document does not exist.
        """
        collection = await self.get_collection(collection_name)
        await self._require_document(collection, collection_name, doc_id)
        await self._call(
            "delete_document",
            lambda _client: collection.delete(ids=[doc_id]),
            collection=collection_name,
        )
        logger.info(
            f'Deleted document "{doc_id}"',
            extra={"collection": collection_name},
        )

    async def query(
        self,
        collection: AsyncCollection,
        query_embedding: list[float],
        n_results: int,
    ) -> Mapping[str, Any]:
        """Run a similarity query for one embedding against one collection.

        Returns:
            The raw Chroma query result with nested per-query lists.
        """
        return await self._call(
            "query",
            lambda _client: collection.query(
                query_embeddings=[query_embedding],
                n_results=n_results,
                include=QUERY_INCLUDE,
            ),
            collection=collection.name,
        )
