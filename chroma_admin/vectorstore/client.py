"""Chroma client construction and upstream error classification."""

import asyncio

import chromadb
import httpx
from chromadb.api import AsyncClientAPI
from chromadb.errors import InvalidArgumentError as ChromaInvalidArgumentError
from chromadb.errors import NotFoundError as ChromaNotFoundError
from chromadb.errors import UniqueConstraintError
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from chroma_admin.config import ChromaSettings, get_settings
from chroma_admin.exceptions import (
    AlreadyExistsError,
    ChromaAdminError,
    ErrorCode,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    RequestTimeoutError,
    UpstreamUnavailableError,
)
from chroma_admin.logging_config import get_logger

logger = get_logger(__name__)


def is_connection_error(exc: BaseException) -> bool:
    """Whether an exception means the server could not be reached."""
    if isinstance(exc, (httpx.TransportError, ConnectionError)):
        return not isinstance(exc, httpx.TimeoutException)
    message = str(exc).lower()
    return "could not connect" in message or "connection refused" in message


def is_timeout_error(exc: BaseException) -> bool:
    """Whether an exception means a deadline expired."""
    return isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError, TimeoutError))


def classify_error(
    exc: BaseException,
    operation: str,
    collection: str | None = None,
) -> ChromaAdminError:
    """Map an exception raised while talking to Chroma onto the error taxonomy.

    Args:
        exc: The raised exception.
        operation: Gateway operation name, recorded in the details.
        collection: Collection involved, if any.

    Returns:
        The most specific application error for the failure. Unrecognized
        failures become InternalError with the upstream message attached.
    """
    if isinstance(exc, ChromaAdminError):
        return exc

    details: dict[str, object] = {"operation": operation}
    if collection is not None:
        details["collection"] = collection

    message = str(exc)
    lowered = message.lower()

    if is_timeout_error(exc):
        return RequestTimeoutError(
            f"Chroma request timed out during {operation}",
            details=details,
        )
    if is_connection_error(exc):
        return UpstreamUnavailableError(
            f"Cannot reach the Chroma server: {message}",
            details=details,
        )
    if isinstance(exc, ChromaNotFoundError) or "does not exist" in lowered:
        target = f'Collection "{collection}"' if collection else "Resource"
        return NotFoundError(
            f"{target} not found",
            code=ErrorCode.COLLECTION_NOT_FOUND,
            details={**details, "upstream_error": message},
        )
    if isinstance(exc, UniqueConstraintError) or "already exists" in lowered:
        target = f'Collection "{collection}"' if collection else "Resource"
        return AlreadyExistsError(
            f"{target} already exists",
            details={**details, "upstream_error": message},
        )
    # The chromadb client validates ids, metadata and names locally with ValueError
    if isinstance(exc, (ValueError, ChromaInvalidArgumentError)):
        return InvalidArgumentError(
            f"Chroma rejected the {operation} request: {message}",
            details={**details, "upstream_error": message},
        )

    return InternalError(
        f"Chroma {operation} failed: {message}",
        details={**details, "upstream_error": message},
    )


class ChromaClientProvider:
    """Owns the Chroma async HTTP client for one application.

    The client is connected on first use. Connection failures are retried
    with exponential backoff; if every attempt fails the error is raised and
    the next call starts over instead of reusing the failure.
    """

    def __init__(
        self,
        settings: ChromaSettings | None = None,
        client: AsyncClientAPI | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            settings: Chroma configuration.
            client: Existing client (for testing).
        """
        self._settings = settings or get_settings().chroma
        self._client = client
        self._lock = asyncio.Lock()

    @property
    def url(self) -> str:
        """Configured Chroma server address."""
        return self._settings.url

    async def get_client(self) -> AsyncClientAPI:
        """Get the connected client, connecting if needed.

        Raises:
            UpstreamUnavailableError: If the server cannot be reached.
            RequestTimeoutError: If connecting timed out.
        """
        if self._client is not None:
            return self._client

        async with self._lock:
            if self._client is None:
                self._client = await self._connect()
        return self._client

    async def _connect(self) -> AsyncClientAPI:
        url = httpx.URL(self._settings.url)
        ssl = url.scheme == "https"
        port = url.port or (443 if ssl else 8000)
        client: AsyncClientAPI | None = None

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._settings.connect_attempts),
                wait=wait_exponential(multiplier=self._settings.connect_backoff, max=10),
                retry=retry_if_exception(is_connection_error),
                reraise=True,
            ):
                with attempt:
                    client = await asyncio.wait_for(
                        chromadb.AsyncHttpClient(
                            host=url.host,
                            port=port,
                            ssl=ssl,
                            tenant=self._settings.tenant,
                            database=self._settings.database,
                        ),
                        timeout=self._settings.timeout,
                    )
        except Exception as e:
            logger.error(
                f"Failed to connect to Chroma: {e}",
                extra={"chroma_url": self._settings.url},
            )
            error = classify_error(e, "connect")
            if not isinstance(error, (UpstreamUnavailableError, RequestTimeoutError)):
                error = UpstreamUnavailableError(
                    f"Cannot reach the Chroma server: {e}",
                    details={"operation": "connect", "upstream_error": str(e)},
                )
            raise error from e

        logger.info("Connected to Chroma", extra={"chroma_url": self._settings.url})
        return client  # type: ignore[return-value]

    def reset(self) -> None:
        """Forget the current client so the next call reconnects."""
        self._client = None
