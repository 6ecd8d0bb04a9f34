"""IndexStore protocol — the storage capability set used by ranking and sync."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from codesearch.models import IndexedFile, Project
    from codesearch.search.types import SearchResult


@runtime_checkable
class IndexStore(Protocol):
    """Transactional storage for file rows, their vectors, and the project row.

    Every mutating call is atomic on its own.  Failures raise
    :class:`~codesearch.exceptions.StorageError`.
    """

    async def open(self) -> None:
        """Create tables and open the connection pool."""
        ...

    async def close(self) -> None:
        """Release connections."""
        ...

    async def upsert_project(self, project: Project) -> None:
        """Insert *project* or overwrite every field of the existing row."""
        ...

    async def get_project(self, alias: str) -> Project:
        """Return the project row, or raise ``ProjectNotFoundError``."""
        ...

    async def replace_file(self, old_id: int | None, path: str, vector: list[float]) -> int:
        """Delete *old_id* (if given) and insert *path* + *vector*; return the new id."""
        ...

    async def delete_file(self, file_id: int) -> None:
        """Delete a file row and its vector."""
        ...

    async def clear(self) -> None:
        """Delete every file row and vector."""
        ...

    async def list_files(self) -> list[IndexedFile]:
        """Return all file rows, oldest first."""
        ...

    async def knn(self, vector: list[float], k: int) -> list[SearchResult]:
        """Return up to *k* nearest files ordered by ascending distance."""
        ...

    async def count(self) -> int:
        """Return the number of indexed files."""
        ...
