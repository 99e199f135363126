"""Application exception hierarchy.

All custom exceptions inherit from ChromaAdminError.
Each exception has an error code for structured error handling.
"""

from enum import Enum
from typing import Any

CONNECTION_SUGGESTION = (
    "Check that the Chroma server is running and reachable, "
    "then run the connection check at GET /test-server."
)


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "VDB-1000"
    INVALID_ARGUMENT = "VDB-1001"
    REQUEST_TIMEOUT = "VDB-1002"

    # Collection and document errors (2xxx)
    INVALID_NAME = "VDB-2000"
    COLLECTION_NOT_FOUND = "VDB-2001"
    COLLECTION_EXISTS = "VDB-2002"
    DOCUMENT_NOT_FOUND = "VDB-2003"

    # Embedding errors (3xxx)
    EMBEDDING_GENERATION_FAILED = "VDB-3000"

    # Upstream errors (4xxx)
    UPSTREAM_UNAVAILABLE = "VDB-4000"


class ChromaAdminError(Exception):
    """Base exception for all application errors.

    Attributes:
        message: Human-readable error message.
        code: Structured error code.
        details: Additional error context.
    """

    suggestion: str | None = None

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        error: dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }
        if self.suggestion:
            error["suggestion"] = self.suggestion
        return {"error": error}


class InvalidArgumentError(ChromaAdminError):
    """Malformed or missing request field."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.INVALID_ARGUMENT, details)


class InvalidNameError(ChromaAdminError):
    """Collection name breaks the naming rule."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.INVALID_NAME, details)


class NotFoundError(ChromaAdminError):
    """Collection or document is absent."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.COLLECTION_NOT_FOUND,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class AlreadyExistsError(ChromaAdminError):
    """Collection name collision."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.COLLECTION_EXISTS, details)


class UpstreamUnavailableError(ChromaAdminError):
    """The Chroma server cannot be reached."""

    suggestion = CONNECTION_SUGGESTION

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.UPSTREAM_UNAVAILABLE, details)


class RequestTimeoutError(ChromaAdminError):
    """A call exceeded its deadline."""

    suggestion = CONNECTION_SUGGESTION

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.REQUEST_TIMEOUT, details)


class EmbeddingGenerationError(ChromaAdminError):
    """Embedding transport or generator failure."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.EMBEDDING_GENERATION_FAILED, details)


class InternalError(ChromaAdminError):
    """Unexpected failure, usually an unrecognized upstream error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.INTERNAL_ERROR, details)
