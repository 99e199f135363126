"""Embedding generation module."""

from chroma_admin.embeddings.generator import generate_embedding
from chroma_admin.embeddings.models import EmbeddingRequest, EmbeddingResponse
from chroma_admin.embeddings.service import EmbeddingService, TransportEmbeddingService
from chroma_admin.embeddings.transport import (
    EmbeddingTransport,
    HTTPEmbeddingTransport,
    LocalEmbeddingTransport,
)

__all__ = [
    "EmbeddingRequest",
    "EmbeddingResponse",
    "EmbeddingService",
    "EmbeddingTransport",
    "HTTPEmbeddingTransport",
    "LocalEmbeddingTransport",
    "TransportEmbeddingService",
    "generate_embedding",
]
