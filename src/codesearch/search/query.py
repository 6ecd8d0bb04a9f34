"""Query helpers — fetch raw nearest neighbors from a store and rank them."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from codesearch.search.ranking import DEFAULT_OPTIONS, RankOptions, rank, rank_by_similarity

if TYPE_CHECKING:
    from codesearch.search.types import SearchResult
    from codesearch.store import IndexStore

MIN_CANDIDATES: int = 100


def candidate_count(max_results: int) -> int:
    """Number of raw hits to fetch so the ranker has a distribution to inspect."""
    return max(max_results * 2, MIN_CANDIDATES)


async def search_with_options(
    store: IndexStore,
    vector: list[float],
    options: RankOptions = DEFAULT_OPTIONS,
) -> list[SearchResult]:
    """Return ranked results for *vector* using distance thresholds."""
    hits = await store.knn(vector, candidate_count(options.max_results))
    return rank(hits, options)


async def search_with_similarity(
    store: IndexStore,
    vector: list[float],
    min_similarity: float,
    max_results: int,
) -> list[SearchResult]:
    """Return ranked results whose ``distance`` slot holds similarity (``1 - distance``)."""
    hits = await store.knn(vector, candidate_count(max_results))
    return rank_by_similarity(hits, min_similarity, max_results)


async def search_paths(store: IndexStore, vector: list[float], limit: int) -> list[str]:
    """Return just the matching paths, using fixed (non-adaptive) thresholds."""
    options = replace(DEFAULT_OPTIONS, max_results=limit, adaptive=False)
    return [result.path for result in await search_with_options(store, vector, options)]
