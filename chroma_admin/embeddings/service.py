"""Embedding service interface and transport-backed implementation."""

import time
from abc import ABC, abstractmethod
from numbers import Real
from typing import Any

from chroma_admin.config import EmbeddingSettings, get_settings
from chroma_admin.embeddings.transport import EmbeddingTransport, create_transport
from chroma_admin.exceptions import EmbeddingGenerationError
from chroma_admin.logging_config import get_logger
from chroma_admin.observability.metrics import track_embedding_request

logger = get_logger(__name__)


class EmbeddingService(ABC):
    """Abstract base class for embedding services.

    Defines the interface for generating text embeddings.
    """

    @abstractmethod
    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for multiple texts.

        Args:
            texts: List of texts to embed.

        Returns:
            One vector per text, in input order.

        Raises:
            EmbeddingGenerationError: If embedding fails.
        """
        ...

    async def embed(self, text: str) -> list[float]:
        """Generate embedding for a single text.

        Raises:
            EmbeddingGenerationError: If embedding fails.
        """
        vectors = await self.embed_batch([text])
        return vectors[0]

    async def close(self) -> None:
        """Release any held resources."""


class TransportEmbeddingService(EmbeddingService):
    """Embedding service that delegates to an injected transport.

    Large inputs are split into batches; a failure in any batch fails the
    whole call and no vectors are returned.
    """

    def __init__(
        self,
        transport: EmbeddingTransport | None = None,
        settings: EmbeddingSettings | None = None,
    ) -> None:
        """Initialize the embedding service.

        Args:
            transport: Transport to send requests through.
                Built from settings if not provided.
            settings: Embedding configuration. Uses defaults if not provided.
        """
        self._settings = settings or get_settings().embedding
        self._transport = transport or create_transport(self._settings)

    @property
    def transport_name(self) -> str:
        """Name of the transport in use."""
        return self._transport.name

    async def close(self) -> None:
        """Close the underlying transport."""
        await self._transport.close()

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        all_vectors: list[list[float]] = []
        batch_size = self._settings.batch_size

        for i in range(0, len(texts), batch_size):
            batch = texts[i : i + batch_size]
            all_vectors.extend(await self._embed_batch_request(batch))

        return all_vectors

    async def _embed_batch_request(self, texts: list[str]) -> list[list[float]]:
        """Send one batch through the transport and validate the reply.

        Raises:
            EmbeddingGenerationError: If the request fails or the reply
                does not hold one numeric vector per text.
        """
        start = time.perf_counter()
        try:
            data = await self._transport.send({"texts": texts})
            vectors = _parse_embeddings(data, expected=len(texts))
        except Exception as e:
            track_embedding_request(
                self.transport_name,
                time.perf_counter() - start,
                len(texts),
                success=False,
            )
            if isinstance(e, EmbeddingGenerationError):
                raise
            raise EmbeddingGenerationError(
                f"Failed to generate embeddings: {e}",
                details={"transport": self.transport_name, "error": str(e)},
            ) from e

        track_embedding_request(
            self.transport_name,
            time.perf_counter() - start,
            len(texts),
        )
        logger.debug(
            f"Embedded {len(texts)} texts",
            extra={"transport": self.transport_name},
        )
        return vectors


def _parse_embeddings(data: dict[str, Any], expected: int) -> list[list[float]]:
    embeddings = data.get("embeddings")
    if not isinstance(embeddings, list):
        raise EmbeddingGenerationError(
            "Invalid response from embedding endpoint: missing embeddings",
            details={"keys": sorted(data.keys())},
        )
    if len(embeddings) != expected:
        raise EmbeddingGenerationError(
            f"Expected {expected} embeddings, got {len(embeddings)}",
            details={"expected": expected, "received": len(embeddings)},
        )

    vectors: list[list[float]] = []
    for index, vector in enumerate(embeddings):
        if (
            not isinstance(vector, list)
            or not vector
            or not all(
                isinstance(value, Real) and not isinstance(value, bool)
                for value in vector
            )
        ):
            raise EmbeddingGenerationError(
                f"Embedding {index} is not a list of numbers",
                details={"index": index},
            )
        vectors.append([float(value) for value in vector])
    return vectors
