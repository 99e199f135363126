"""Multi-collection similarity search.

Fans a query out to several collections, tolerates failures of individual
collections, and merges everything into one list ordered by distance.
"""

import asyncio
import time
from collections.abc import Mapping, Sequence
from typing import Any

from chroma_admin.config import SearchSettings, get_settings
from chroma_admin.embeddings.service import EmbeddingService
from chroma_admin.exceptions import (
    ChromaAdminError,
    InvalidArgumentError,
    NotFoundError,
    RequestTimeoutError,
)
from chroma_admin.logging_config import get_logger
from chroma_admin.observability.metrics import track_collection_query, track_search_request
from chroma_admin.search.models import SearchOutcome, SkippedCollection
from chroma_admin.vectorstore.gateway import CollectionGateway
from chroma_admin.vectorstore.models import SearchResult

logger = get_logger(__name__)


def _first_query(value: Any) -> list[Any]:
    """Take the single-query row out of Chroma's nested result lists."""
    if not value:
        return []
    row = value[0]
    return list(row) if row is not None else []


def normalize_query_result(
    collection_name: str,
    raw: Mapping[str, Any],
) -> list[SearchResult]:
    """Flatten a raw single-query Chroma result into tagged search results.

    Missing documents become ``""``, missing metadata ``{}`` and missing
    distances ``0.0``. Intra-collection rank order is preserved.
    """
    ids = _first_query(raw.get("ids"))
    documents = _first_query(raw.get("documents"))
    metadatas = _first_query(raw.get("metadatas"))
    distances = _first_query(raw.get("distances"))

    results: list[SearchResult] = []
    for i, doc_id in enumerate(ids):
        document = documents[i] if i < len(documents) else None
        metadata = metadatas[i] if i < len(metadatas) else None
        distance = distances[i] if i < len(distances) else None

        results.append(
            SearchResult(
                id=str(doc_id),
                document=document or "",
                metadata=dict(metadata or {}),
                # float noise from cosine spaces can dip just below zero
                distance=max(0.0, float(distance or 0.0)),
                collection=collection_name,
            )
        )
    return results


def merge_results(
    groups: Sequence[Sequence[SearchResult]],
    max_distance: float | None = None,
) -> list[SearchResult]:
    """Merge per-collection results into one list sorted by distance.

    Results farther than ``max_distance`` are dropped first. The sort is
    stable, so ties keep collection order and then in-collection rank.
    """
    combined = [result for group in groups for result in group]
    if max_distance is not None:
        combined = [result for result in combined if result.distance <= max_distance]
    return sorted(combined, key=lambda result: result.distance)


class SearchAggregator:
    """Search several collections with one query.

    Each collection is resolved and queried on its own, up to
    ``max_concurrency`` at a time. A collection that cannot be resolved,
    fails its query, or exceeds the per-collection timeout is logged and
    skipped; the search itself only fails on bad input, an unreachable
    server, or an embedding failure.
    """

    def __init__(
        self,
        gateway: CollectionGateway,
        embedding_service: EmbeddingService,
        settings: SearchSettings | None = None,
    ) -> None:
        """Initialize the aggregator.

        Args:
            gateway: Gateway used to resolve and query collections.
            embedding_service: Service used to embed the query text.
            settings: Search configuration.
        """
        self._gateway = gateway
        self._embedding_service = embedding_service
        self._settings = settings or get_settings().search

    async def search(
        self,
        query: str,
        collection_names: Sequence[str],
        n_results: int | None = None,
        max_distance: float | None = None,
    ) -> list[SearchResult]:
        """Search collections and return merged results.

        See ``search_detailed`` for arguments and errors.
        """
        outcome = await self.search_detailed(query, collection_names, n_results, max_distance)
        return outcome.results

    async def search_detailed(
        self,
        query: str,
        collection_names: Sequence[str],
        n_results: int | None = None,
        max_distance: float | None = None,
    ) -> SearchOutcome:
        """Search collections and report skipped ones alongside the results.

        Args:
            query: Query text.
            collection_names: Collections to search, in tie-break order.
            n_results: Matches requested from each collection.
            max_distance: Drop matches farther than this. Falls back to the
                configured threshold; ``None`` in both places disables it.

        Returns:
            SearchOutcome with results sorted by ascending distance.

        Raises:
            InvalidArgumentError: If the query or collection list is empty,
                or n_results is below 1.
            UpstreamUnavailableError: If the Chroma server is unreachable.
            EmbeddingGenerationError: If the query cannot be embedded.
        """
        if not query or not query.strip():
            raise InvalidArgumentError("Query text is required")
        if not collection_names:
            raise InvalidArgumentError("At least one collection name is required")

        n_results = n_results if n_results is not None else self._settings.default_n_results
        if n_results < 1:
            raise InvalidArgumentError(
                "nResults must be at least 1",
                details={"n_results": n_results},
            )
        threshold = max_distance if max_distance is not None else self._settings.max_distance

        start = time.perf_counter()

        await self._gateway.heartbeat()
        query_embedding = await self._embedding_service.embed(query)

        semaphore = asyncio.Semaphore(self._settings.max_concurrency)

        async def run(name: str) -> list[SearchResult] | SkippedCollection:
            async with semaphore:
                return await self._search_collection(name, query_embedding, n_results)

        # gather keeps input order regardless of completion order
        outcomes = await asyncio.gather(*(run(name) for name in collection_names))

        groups = [outcome for outcome in outcomes if isinstance(outcome, list)]
        skipped = [outcome for outcome in outcomes if isinstance(outcome, SkippedCollection)]
        results = merge_results(groups, threshold)

        track_search_request(time.perf_counter() - start, len(results))
        logger.info(
            f"Search returned {len(results)} results",
            extra={
                "collections": len(collection_names),
                "skipped": [s.name for s in skipped],
                "n_results": n_results,
                "max_distance": threshold,
            },
        )
        return SearchOutcome(results=results, skipped=skipped)

    async def _search_collection(
        self,
        name: str,
        query_embedding: list[float],
        n_results: int,
    ) -> list[SearchResult] | SkippedCollection:
        """Resolve and query one collection, turning failures into a skip."""
        try:
            results = await asyncio.wait_for(
                self._query_one(name, query_embedding, n_results),
                timeout=self._settings.query_timeout,
            )
        except NotFoundError as e:
            return self._skip(name, "not_found", e.message)
        except (asyncio.TimeoutError, RequestTimeoutError):
            return self._skip(name, "timeout", f"Query exceeded {self._settings.query_timeout}s")
        except ChromaAdminError as e:
            return self._skip(name, "error", e.message)
        except (TypeError, ValueError) as e:
            return self._skip(name, "error", f"Malformed query result: {e}")

        track_collection_query("ok")
        return results

    async def _query_one(
        self,
        name: str,
        query_embedding: list[float],
        n_results: int,
    ) -> list[SearchResult]:
        collection = await self._gateway.get_collection(name)
        raw = await self._gateway.query(collection, query_embedding, n_results)
        return normalize_query_result(name, raw)

    def _skip(self, name: str, reason: str, message: str) -> SkippedCollection:
        track_collection_query(reason)
        logger.warning(
            f'Skipping collection "{name}": {message}',
            extra={"collection": name, "reason": reason},
        )
        return SkippedCollection(name=name, reason=reason, message=message)
