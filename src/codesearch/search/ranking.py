"""Result ranking — turn raw nearest-neighbor hits into a bounded result set.

A top-k query always returns *k* hits no matter how relevant they are.  The
ranker trims that list with a distance threshold, optionally tightened by an
adaptive cutoff placed in the largest early gap between consecutive
distances, and then guarantees a minimum number of results whenever any
candidates exist.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from codesearch.search.types import SearchResult

GAP_WINDOW: int = 20
"""Only the first N hits are scanned for the adaptive gap."""

MIN_GAP: float = 0.05
"""Smallest distance jump treated as a relevance drop-off."""


@dataclass(frozen=True, slots=True)
class RankOptions:
    """Options controlling :func:`rank`.

    Attributes:
        max_distance: Hits farther than this are dropped.
        min_results: Floor on the number of results when any hits exist.
        max_results: Hard cap on the number of results.
        adaptive: Tighten ``max_distance`` with the largest-gap cutoff.
    """

    max_distance: float = 0.8
    min_results: int = 2
    max_results: int = 20
    adaptive: bool = True

    def __post_init__(self) -> None:
        if self.max_distance < 0:
            raise ValueError("max_distance must be non-negative")
        if self.min_results < 0:
            raise ValueError("min_results must be non-negative")
        if self.max_results < 0:
            raise ValueError("max_results must be non-negative")


DEFAULT_OPTIONS = RankOptions()
CODE_SIMILAR = RankOptions(max_distance=0.6, min_results=3, max_results=15, adaptive=True)
CODE_EXACT = RankOptions(max_distance=0.3, min_results=1, max_results=10, adaptive=False)


def adaptive_cutoff(hits: Sequence[SearchResult], max_distance: float) -> float:
    """Return a cutoff distance at the largest gap among the first hits.

    The cutoff sits halfway across the largest gap between consecutive
    distances within the first :data:`GAP_WINDOW` hits.  It is used only
    when that gap exceeds :data:`MIN_GAP` and the cutoff is tighter than
    *max_distance*; otherwise *max_distance* is returned.
    """
    if len(hits) <= 1:
        return max_distance

    largest_gap = 0.0
    gap_index = 0
    for i in range(1, min(len(hits), GAP_WINDOW)):
        gap = hits[i].distance - hits[i - 1].distance
        if gap > largest_gap:
            largest_gap = gap
            gap_index = i

    if largest_gap > MIN_GAP and gap_index > 0:
        cutoff = hits[gap_index - 1].distance + largest_gap / 2
        if cutoff < max_distance:
            return cutoff

    return max_distance


def rank(hits: Sequence[SearchResult], options: RankOptions = DEFAULT_OPTIONS) -> list[SearchResult]:
    """Filter and bound *hits*, which must be sorted by ascending distance."""
    if not hits:
        return []

    if options.adaptive:
        threshold = adaptive_cutoff(hits, options.max_distance)
    else:
        threshold = options.max_distance

    filtered = [hit for hit in hits if hit.distance <= threshold][: options.max_results]

    # Floor: fall back to the closest raw hits, ignoring the threshold.
    if len(filtered) < options.min_results:
        count = min(options.min_results, len(hits), options.max_results)
        return list(hits[:count])

    return filtered


def rank_by_similarity(
    hits: Sequence[SearchResult],
    min_similarity: float,
    max_results: int,
) -> list[SearchResult]:
    """Rank with a similarity threshold and report similarities instead of distances.

    ``min_similarity`` becomes ``max_distance = 1 - min_similarity``; adaptive
    ranking is on and at least one hit is returned when any exist.
    """
    options = RankOptions(
        max_distance=1.0 - min_similarity,
        min_results=1,
        max_results=max_results,
        adaptive=True,
    )
    return [replace(hit, distance=1.0 - hit.distance) for hit in rank(hits, options)]
