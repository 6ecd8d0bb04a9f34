"""Reconciler — keep a project's index in step with its files on disk.

``rebuild`` throws the index away and embeds every file again.  ``sync``
diffs local paths against stored rows and only touches what it must:

* new paths (on disk, not stored) are embedded and inserted,
* stored paths still on disk are re-embedded oldest-first and replaced
  (the row gets a new id),
* stored paths gone from disk are deleted.

A file whose content cannot be read or embedded is logged and skipped; it
keeps its previous state and is retried on the next run.  Storage errors
abort the run, and a project root that is no longer a directory stops it
before anything is touched.  Each file is committed on its own, so an
aborted or cancelled run keeps everything written before the failure.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from codesearch.exceptions import ConfigurationError, ProviderError
from codesearch.files import recursive_files

if TYPE_CHECKING:
    from codesearch.models import Project
    from codesearch.providers import EmbeddingProvider
    from codesearch.store import IndexStore

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

_PROBE_TEXT = "1"


@dataclass(slots=True)
class SyncReport:
    """Paths touched by a rebuild or sync, grouped by outcome."""

    added: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.added) + len(self.updated) + len(self.removed) + len(self.skipped)


def embedding_text(path: str, content: str) -> str:
    """Return the text sent to the provider for one file."""
    return f"{path}\n{content}"


class Reconciler:
    """Drive embedding and storage for one project at a time.

    *progress*, if given, is called as ``progress(processed, total)`` after
    every file.
    """

    def __init__(
        self,
        store: IndexStore,
        provider: EmbeddingProvider,
        *,
        progress: ProgressCallback | None = None,
    ) -> None:
        self._store = store
        self._provider = provider
        self._progress = progress

    # ------------------------------------------------------------------
    # Full rebuild
    # ------------------------------------------------------------------

    async def rebuild(self, project: Project) -> SyncReport:
        """Replace the project's whole index with fresh embeddings."""
        paths = await self._local_files(project)
        project.dimensions = await self.probe_dimensions()
        await self._store.upsert_project(project)
        await self._store.clear()

        logger.info("Syncing code files to the database")
        logger.info("Found %d files", len(paths))

        report = SyncReport()
        for i, path in enumerate(paths, start=1):
            logger.info("Processing file: %s", path)
            vector = await self._embed_file(project, path)
            if vector is None:
                report.skipped.append(path)
            else:
                await self._store.replace_file(None, path, vector)
                report.added.append(path)
            self._notify(i, len(paths))

        return report

    async def probe_dimensions(self) -> int:
        """Embed a one-character text and return the vector width."""
        try:
            vector = await self._provider.embed(_PROBE_TEXT)
        except ProviderError as exc:
            raise ProviderError(f"error generating embedding for dimensions: {exc}") from exc
        if not vector:
            raise ProviderError("received empty embedding dimensions")
        return len(vector)

    # ------------------------------------------------------------------
    # Incremental sync
    # ------------------------------------------------------------------

    async def sync(self, project: Project) -> SyncReport:
        """Reconcile the stored index with the project's files on disk."""
        local = await self._local_files(project)
        local_set = set(local)

        # Snapshot before inserting so new files are embedded once.
        stored = await self._store.list_files()
        stored_paths = {record.path for record in stored}

        new = [path for path in local if path not in stored_paths]
        total = len(new) + len(stored)
        done = 0
        report = SyncReport()

        logger.info("Processing %d new files", len(new))
        for path in new:
            logger.info("Adding new file: %s", path)
            vector = await self._embed_file(project, path)
            if vector is None:
                report.skipped.append(path)
            else:
                await self._store.replace_file(None, path, vector)
                report.added.append(path)
            done += 1
            self._notify(done, total)

        logger.info("Processing %d existing files", len(stored))
        for record in stored:
            if record.path in local_set:
                logger.info("Updating file: %s", record.path)
                vector = await self._embed_file(project, record.path)
                if vector is None:
                    report.skipped.append(record.path)
                else:
                    await self._store.replace_file(record.id, record.path, vector)
                    report.updated.append(record.path)
            else:
                logger.info("Removing deleted file: %s", record.path)
                await self._store.delete_file(record.id)  # type: ignore[arg-type]
                report.removed.append(record.path)
            done += 1
            self._notify(done, total)

        return report

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _local_files(self, project: Project) -> list[str]:
        # A missing root must not read as every file deleted.
        if not await asyncio.to_thread(Path(project.path).is_dir):
            raise ConfigurationError(
                f"project path {project.path!r} is not a directory; "
                "restore it or rebuild the project"
            )
        return await asyncio.to_thread(recursive_files, project.path, project.extension_list)

    async def _embed_file(self, project: Project, path: str) -> list[float] | None:
        """Read and embed one file; return None (after logging) on failure."""
        full_path = Path(project.path) / path
        try:
            content = await asyncio.to_thread(
                full_path.read_text, encoding="utf-8", errors="replace"
            )
        except OSError as exc:
            logger.warning("Error reading file %s: %s", full_path, exc)
            return None

        try:
            vector = await self._provider.embed(embedding_text(path, content))
        except ProviderError as exc:
            logger.warning("Error generating embeddings for file %s: %s", full_path, exc)
            return None
        if not vector:
            logger.warning("Empty embedding for file %s", full_path)
            return None
        return vector

    def _notify(self, processed: int, total: int) -> None:
        if self._progress is not None:
            self._progress(processed, total)
