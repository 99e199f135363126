"""Multi-collection search module."""

from chroma_admin.search.aggregator import (
    SearchAggregator,
    merge_results,
    normalize_query_result,
)
from chroma_admin.search.models import SearchOutcome, SkippedCollection

__all__ = [
    "SearchAggregator",
    "SearchOutcome",
    "SkippedCollection",
    "merge_results",
    "normalize_query_result",
]
