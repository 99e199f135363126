"""In-memory stand-in for the chromadb async client used by the tests."""

from datetime import UTC, datetime
from typing import Any

HEARTBEAT = 1_700_000_000_000_000_000
FIXED_NOW = datetime(2025, 1, 2, 3, 4, 5, tzinfo=UTC)


def _squared_l2(a: list[float], b: list[float]) -> float:
    return sum((x - y) ** 2 for x, y in zip(a, b, strict=True))


class FakeCollection:
    """Collection keeping records in insertion order."""

    def __init__(self, name: str, metadata: dict[str, Any] | None = None) -> None:
        self.name = name
        self.metadata = metadata
        self.records: dict[str, dict[str, Any]] = {}
        self.query_error: Exception | None = None
        self.add_calls = 0

    async def get(
        self,
        ids: list[str] | None = None,
        include: list[str] | None = None,
        **_kwargs: Any,
    ) -> dict[str, Any]:
        selected = [doc_id for doc_id in self.records if ids is None or doc_id in ids]
        return {
            "ids": selected,
            "documents": [self.records[i]["document"] for i in selected],
            "metadatas": [self.records[i]["metadata"] for i in selected],
        }

    async def add(
        self,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict[str, Any] | None] | None = None,
    ) -> None:
        self.add_calls += 1
        existing = [doc_id for doc_id in ids if doc_id in self.records]
        if existing:
            raise ValueError(f"Expected IDs to be unique, found duplicates of: {existing}")
        for i, doc_id in enumerate(ids):
            self.records[doc_id] = {
                "document": documents[i],
                "metadata": metadatas[i] if metadatas else None,
                "embedding": embeddings[i],
            }

    async def update(
        self,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict[str, Any]] | None = None,
    ) -> None:
        for i, doc_id in enumerate(ids):
            record = self.records[doc_id]
            record["document"] = documents[i]
            record["embedding"] = embeddings[i]
            if metadatas:
                record["metadata"] = metadatas[i]

    async def delete(self, ids: list[str]) -> None:
        for doc_id in ids:
            self.records.pop(doc_id, None)

    async def query(
        self,
        query_embeddings: list[list[float]],
        n_results: int,
        include: list[str] | None = None,
    ) -> dict[str, Any]:
        if self.query_error is not None:
            raise self.query_error

        vector = query_embeddings[0]
        ranked = sorted(
            self.records.items(),
            key=lambda item: _squared_l2(vector, item[1]["embedding"]),
        )[:n_results]
        return {
            "ids": [[doc_id for doc_id, _ in ranked]],
            "documents": [[record["document"] for _, record in ranked]],
            "metadatas": [[record["metadata"] for _, record in ranked]],
            "distances": [[_squared_l2(vector, record["embedding"]) for _, record in ranked]],
        }


class FakeChromaClient:
    """Client exposing the async chromadb calls the gateway makes."""

    def __init__(self) -> None:
        self.collections: dict[str, FakeCollection] = {}
        self.get_errors: dict[str, Exception] = {}
        self.heartbeat_error: Exception | None = None
        self.calls: list[str] = []

    async def heartbeat(self) -> int:
        self.calls.append("heartbeat")
        if self.heartbeat_error is not None:
            raise self.heartbeat_error
        return HEARTBEAT

    async def list_collections(self) -> list[FakeCollection]:
        self.calls.append("list_collections")
        return list(self.collections.values())

    async def create_collection(
        self,
        name: str,
        metadata: dict[str, Any] | None = None,
        embedding_function: Any = None,
    ) -> FakeCollection:
        self.calls.append("create_collection")
        if name in self.collections:
            raise ValueError(f"Collection {name} already exists")
        collection = FakeCollection(name, metadata)
        self.collections[name] = collection
        return collection

    async def get_collection(self, name: str, embedding_function: Any = None) -> FakeCollection:
        self.calls.append("get_collection")
        if name in self.get_errors:
            raise self.get_errors[name]
        if name not in self.collections:
            raise ValueError(f"Collection {name} does not exist.")
        return self.collections[name]

    async def delete_collection(self, name: str) -> None:
        self.calls.append("delete_collection")
        if name not in self.collections:
            raise ValueError(f"Collection {name} does not exist.")
        del self.collections[name]
