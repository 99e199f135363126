"""Collection, document and search result models."""

import re
from typing import Any

from pydantic import BaseModel, Field

COLLECTION_NAME_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


class Collection(BaseModel):
    """A named container of documents in the vector database.

    Attributes:
        name: Unique collection name.
        metadata: Collection-level metadata.
    """

    name: str = Field(description="Collection name")
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Collection metadata",
    )


class CollectionConfig(BaseModel):
    """Everything needed to create a collection."""

    name: str = Field(description="Collection name")
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Caller-supplied collection metadata",
    )


class Document(BaseModel):
    """A unit of text plus metadata stored in a collection.

    Attributes:
        id: Identifier, unique within its collection.
        document: Text body.
        metadata: Scalar metadata values.
    """

    id: str = Field(min_length=1, description="Document identifier")
    document: str = Field(description="Document text")
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Document metadata",
    )


class SearchResult(BaseModel):
    """One match produced by a multi-collection search.

    Attributes:
        id: Document identifier.
        document: Document text.
        metadata: Document metadata.
        distance: Dissimilarity to the query (0 is identical, lower is better).
        collection: Name of the collection the match came from.
    """

    id: str = Field(description="Document identifier")
    document: str = Field(default="", description="Document text")
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Document metadata",
    )
    distance: float = Field(ge=0.0, description="Distance to the query")
    collection: str = Field(description="Source collection name")
