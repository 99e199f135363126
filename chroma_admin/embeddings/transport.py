"""Embedding transports.

A transport has one capability: send a JSON payload, get a JSON payload back.
The embedding service is written against this interface only, so it behaves
the same whether vectors are computed in-process or by a remote endpoint.
"""

from abc import ABC, abstractmethod
from typing import Any

import httpx

from chroma_admin.config import EmbeddingSettings, EmbeddingTransportKind, get_settings
from chroma_admin.embeddings.generator import generate_embedding
from chroma_admin.exceptions import EmbeddingGenerationError, InvalidArgumentError
from chroma_admin.logging_config import get_logger

logger = get_logger(__name__)


def build_embeddings(texts: list[str], dimension: int) -> dict[str, Any]:
    """Compute the ``{"embeddings": [...]}`` body for a list of texts."""
    return {"embeddings": [generate_embedding(text, dimension) for text in texts]}


def resolve_endpoint(base_url: str, endpoint: str) -> str:
    """Resolve a relative endpoint against a base address.

    Absolute endpoints are returned unchanged.
    """
    url = httpx.URL(endpoint)
    if url.is_absolute_url:
        return str(url)
    return str(httpx.URL(base_url).join(endpoint))


class EmbeddingTransport(ABC):
    """Send a JSON payload to an embedding backend."""

    @abstractmethod
    async def send(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Send a request payload and return the decoded response.

        Raises:
            EmbeddingGenerationError: If the backend fails.
        """
        ...

    async def close(self) -> None:
        """Release any held resources."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short transport name used in logs and metrics."""
        ...


class LocalEmbeddingTransport(EmbeddingTransport):
    """Compute embeddings in-process with the deterministic generator."""

    def __init__(self, dimension: int | None = None) -> None:
        self._dimension = dimension or get_settings().embedding.dimension

    @property
    def name(self) -> str:
        return "local"

    async def send(self, payload: dict[str, Any]) -> dict[str, Any]:
        texts = payload.get("texts")
        if not isinstance(texts, list) or not all(isinstance(t, str) for t in texts):
            raise EmbeddingGenerationError(
                "Invalid input. Expected an array of texts.",
                details={"transport": self.name},
            )
        try:
            return build_embeddings(texts, self._dimension)
        except InvalidArgumentError as e:
            raise EmbeddingGenerationError(e.message, details=e.details) from e


class HTTPEmbeddingTransport(EmbeddingTransport):
    """Post payloads to an embedding HTTP endpoint."""

    def __init__(
        self,
        settings: EmbeddingSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the HTTP transport.

        Args:
            settings: Embedding configuration. Uses defaults if not provided.
            client: HTTP client. Creates new one if not provided.
        """
        self._settings = settings or get_settings().embedding
        self._client = client
        self._owns_client = client is None
        self.url = resolve_endpoint(self._settings.base_url, self._settings.endpoint)

    @property
    def name(self) -> str:
        return "http"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def send(self, payload: dict[str, Any]) -> dict[str, Any]:
        client = await self._get_client()

        try:
            response = await client.post(self.url, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(
                f"Embedding request failed: {status_code}",
                extra={"url": self.url, "status": status_code},
            )
            raise EmbeddingGenerationError(
                f"Embedding endpoint returned {status_code}: {_error_text(e.response)}",
                details={"status_code": status_code, "url": self.url},
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Embedding request error: {e}", extra={"url": self.url})
            raise EmbeddingGenerationError(
                f"Failed to connect to embedding endpoint: {e}",
                details={"url": self.url},
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise EmbeddingGenerationError(
                f"Invalid response from embedding endpoint: {e}",
                details={"url": self.url},
            ) from e

        if not isinstance(data, dict):
            raise EmbeddingGenerationError(
                "Invalid response from embedding endpoint: expected a JSON object",
                details={"url": self.url},
            )
        return data


def _error_text(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            return str(error.get("message", response.reason_phrase))
        if error:
            return str(error)
    return response.reason_phrase


def create_transport(settings: EmbeddingSettings | None = None) -> EmbeddingTransport:
    """Build the transport selected by configuration."""
    settings = settings or get_settings().embedding
    if settings.transport == EmbeddingTransportKind.HTTP:
        return HTTPEmbeddingTransport(settings=settings)
    return LocalEmbeddingTransport(dimension=settings.dimension)
