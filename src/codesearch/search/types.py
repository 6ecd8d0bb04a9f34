"""Search layer data types — raw store hits and ranked results."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SearchResult:
    """A single ranked hit.

    Attributes:
        id: Id of the matched ``IndexedFile`` row.
        path: Relative path of the matched file.
        distance: Cosine distance (0-2, lower is closer).  Similarity-mode
            searches report ``1 - distance`` in this slot instead.
    """

    id: int
    path: str
    distance: float
