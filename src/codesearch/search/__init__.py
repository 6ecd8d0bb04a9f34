"""Search layer — result ranking and store query helpers."""

from codesearch.search.query import (
    candidate_count,
    search_paths,
    search_with_options,
    search_with_similarity,
)
from codesearch.search.ranking import (
    CODE_EXACT,
    CODE_SIMILAR,
    DEFAULT_OPTIONS,
    RankOptions,
    adaptive_cutoff,
    rank,
    rank_by_similarity,
)
from codesearch.search.types import SearchResult

__all__ = [
    "CODE_EXACT",
    "CODE_SIMILAR",
    "DEFAULT_OPTIONS",
    "RankOptions",
    "SearchResult",
    "adaptive_cutoff",
    "candidate_count",
    "rank",
    "rank_by_similarity",
    "search_paths",
    "search_with_options",
    "search_with_similarity",
]
