"""Search outcome models."""

from pydantic import BaseModel, Field

from chroma_admin.vectorstore.models import SearchResult


class SkippedCollection(BaseModel):
    """A collection left out of a search because it failed.

    Attributes:
        name: Collection name.
        reason: One of ``not_found``, ``timeout`` or ``error``.
        message: Failure description.
    """

    name: str = Field(description="Collection name")
    reason: str = Field(description="Why the collection was skipped")
    message: str = Field(default="", description="Failure description")


class SearchOutcome(BaseModel):
    """Merged results of a multi-collection search."""

    results: list[SearchResult] = Field(
        default_factory=list,
        description="Matches sorted by ascending distance",
    )
    skipped: list[SkippedCollection] = Field(
        default_factory=list,
        description="Collections that could not be searched",
    )
