"""Vector store module."""

from chroma_admin.vectorstore.client import ChromaClientProvider, classify_error
from chroma_admin.vectorstore.gateway import (
    CollectionGateway,
    apply_default_metadata,
    validate_collection_name,
)
from chroma_admin.vectorstore.models import (
    Collection,
    CollectionConfig,
    Document,
    SearchResult,
)

__all__ = [
    "ChromaClientProvider",
    "Collection",
    "CollectionConfig",
    "CollectionGateway",
    "Document",
    "SearchResult",
    "apply_default_metadata",
    "classify_error",
    "validate_collection_name",
]
