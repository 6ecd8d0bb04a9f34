"""CodeSearch — async facade wiring store, embedding provider, reconciler, and ranker."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from codesearch.config import (
    DEFAULT_EXTENSIONS,
    DEFAULT_FIND_LIMIT,
    DEFAULT_MIN_SIMILARITY,
    DEFAULT_MODEL,
    DEFAULT_PROVIDER,
    database_path,
    parse_extensions,
    resolve_data_dir,
    validate_alias,
)
from codesearch.exceptions import ConfigurationError, ProjectNotFoundError, ProviderError
from codesearch.models import Project
from codesearch.providers import ProviderKind, create_provider
from codesearch.search.query import search_with_similarity
from codesearch.store import SQLiteIndexStore
from codesearch.sync import Reconciler

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from codesearch.providers import EmbeddingProvider
    from codesearch.search.types import SearchResult
    from codesearch.sync import ProgressCallback, SyncReport

logger = logging.getLogger(__name__)


class CodeSearch:
    """Build, sync, and query per-project embedding indexes.

    Each project lives in its own SQLite database ``<data_dir>/<alias>.db``.
    Every operation opens the store, resolves the provider once, runs, and
    releases both again::

        cs = CodeSearch()
        await cs.build("myproj", "/src/myproj", "ollama", "nomic-embed-text")
        await cs.sync("myproj")
        for hit in await cs.find("myproj", "where are retries configured"):
            print(hit.path, hit.distance)
    """

    def __init__(
        self,
        *,
        data_dir: str | Path | None = None,
        provider_factory: Callable[[str, str], EmbeddingProvider] = create_provider,
    ) -> None:
        self._data_dir = resolve_data_dir(data_dir)
        self._provider_factory = provider_factory

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def build(
        self,
        alias: str,
        path: str | Path,
        provider: str = DEFAULT_PROVIDER,
        model: str = DEFAULT_MODEL,
        extensions: str | list[str] | tuple[str, ...] = DEFAULT_EXTENSIONS,
        *,
        progress: ProgressCallback | None = None,
    ) -> SyncReport:
        """Create or fully rebuild the index for *alias* from the tree at *path*."""
        alias = validate_alias(alias)
        root = Path(path).expanduser().resolve()
        if not root.is_dir():
            raise ConfigurationError(f"project path {str(root)!r} is not a directory")
        kind = ProviderKind.parse(provider)
        project = Project(
            alias=alias,
            path=str(root),
            client=kind.value,
            model=model,
            extensions=",".join(parse_extensions(extensions)),
        )

        async with self._session(alias, project.client, project.model, create=True) as (
            store,
            embedder,
        ):
            report = await Reconciler(store, embedder, progress=progress).rebuild(project)

        logger.info(
            "Project '%s' built: %d files indexed, %d skipped",
            alias, len(report.added), len(report.skipped),
        )
        return report

    async def sync(self, alias: str, *, progress: ProgressCallback | None = None) -> SyncReport:
        """Bring the index for *alias* in line with its files on disk."""
        alias = validate_alias(alias)
        async with self._store(alias, create=False) as store:
            project = await store.get_project(alias)
            async with self._embedder(project.client, project.model) as embedder:
                report = await Reconciler(store, embedder, progress=progress).sync(project)

        logger.info(
            "Project '%s' synced: %d added, %d updated, %d removed, %d skipped",
            alias, len(report.added), len(report.updated), len(report.removed),
            len(report.skipped),
        )
        return report

    async def find(
        self,
        alias: str,
        query: str,
        *,
        limit: int = DEFAULT_FIND_LIMIT,
        min_similarity: float = DEFAULT_MIN_SIMILARITY,
    ) -> list[SearchResult]:
        """Return files similar to *query*; ``distance`` holds the similarity score."""
        alias = validate_alias(alias)
        query = query.strip()
        if not query:
            raise ConfigurationError("search query cannot be empty")

        async with self._store(alias, create=False) as store:
            project = await store.get_project(alias)
            async with self._embedder(project.client, project.model) as embedder:
                try:
                    vector = await embedder.embed(query)
                except ProviderError as exc:
                    raise ProviderError(
                        f"error generating embeddings for query: {exc}"
                    ) from exc
            return await search_with_similarity(store, vector, min_similarity, limit)

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _store(self, alias: str, *, create: bool) -> AsyncIterator[SQLiteIndexStore]:
        db_path = database_path(alias, self._data_dir)
        if create:
            db_path.parent.mkdir(parents=True, exist_ok=True)
        elif not db_path.exists():
            raise ProjectNotFoundError(alias)

        store = SQLiteIndexStore.from_path(db_path)
        await store.open()
        try:
            yield store
        finally:
            await store.close()

    @asynccontextmanager
    async def _embedder(self, client: str, model: str) -> AsyncIterator[EmbeddingProvider]:
        embedder = self._provider_factory(client, model)
        try:
            yield embedder
        finally:
            await embedder.close()

    @asynccontextmanager
    async def _session(
        self, alias: str, client: str, model: str, *, create: bool
    ) -> AsyncIterator[tuple[SQLiteIndexStore, EmbeddingProvider]]:
        async with AsyncExitStack() as stack:
            embedder = await stack.enter_async_context(self._embedder(client, model))
            store = await stack.enter_async_context(self._store(alias, create=create))
            yield store, embedder
