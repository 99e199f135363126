"""Embedding request/response models."""

from pydantic import BaseModel, Field


class EmbeddingRequest(BaseModel):
    """Batch of texts to embed.

    Attributes:
        texts: Texts in the order their vectors should be returned.
    """

    texts: list[str] = Field(description="Texts to embed")


class EmbeddingResponse(BaseModel):
    """Embeddings for a batch of texts.

    Attributes:
        embeddings: One vector per input text, same order as the request.
    """

    embeddings: list[list[float]] = Field(description="Embedding vectors")
