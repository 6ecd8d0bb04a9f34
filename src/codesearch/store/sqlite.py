"""SQLiteIndexStore — file rows, vectors, and project metadata in one SQLite file."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
from sqlalchemy import delete, event, func
from sqlalchemy.dialects import sqlite as sqlite_dialect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel, select
from usearch.index import Index

from codesearch.exceptions import ProjectNotFoundError, StorageError
from codesearch.models import FileVector, IndexedFile, Project
from codesearch.search.types import SearchResult

if TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)


def pack_vector(vector: list[float]) -> bytes:
    """Serialize *vector* as little-endian float32 bytes."""
    return np.asarray(vector, dtype="<f4").tobytes()


def unpack_vector(blob: bytes) -> np.ndarray:
    """Inverse of :func:`pack_vector`."""
    return np.frombuffer(blob, dtype="<f4")


class SQLiteIndexStore:
    """Index store backed by a single SQLite database.

    File rows and vectors live in two tables sharing the same integer id.
    Nearest-neighbor queries run an exact cosine search through a usearch
    index built from the stored vectors, so distances fall in ``[0, 2]``.

    Implements the ``IndexStore`` protocol.  Single writer: no locking
    beyond per-transaction atomicity.
    """

    def __init__(self, url: str) -> None:
        self._url = url
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._dimensions: int | None = None

    @classmethod
    def from_path(cls, db_path: Path) -> SQLiteIndexStore:
        """Return a store for the database file at *db_path*."""
        return cls(f"sqlite+aiosqlite:///{db_path}")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        """Create the engine and any missing tables."""
        if self._session_factory is not None:
            return

        engine = create_async_engine(self._url, echo=False)

        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_connection: object, connection_record: object) -> None:
            cursor = dbapi_connection.cursor()  # type: ignore[union-attr]
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA busy_timeout=5000")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        try:
            async with engine.begin() as conn:
                tables = [
                    SQLModel.metadata.tables[name]
                    for name in (Project.__tablename__, IndexedFile.__tablename__,
                                 FileVector.__tablename__)
                ]
                await conn.run_sync(lambda c: SQLModel.metadata.create_all(c, tables=tables))
        except SQLAlchemyError as exc:
            await engine.dispose()
            raise StorageError(f"failed to initialize database: {exc}") from exc

        self._engine = engine
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.debug("Opened index store %s", self._url)

    async def close(self) -> None:
        """Dispose of the engine."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

    async def __aenter__(self) -> SQLiteIndexStore:
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _session(self) -> AsyncSession:
        if self._session_factory is None:
            raise StorageError("store is not open")
        return self._session_factory()

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    async def upsert_project(self, project: Project) -> None:
        """Insert *project* or overwrite all fields of the existing row."""
        values = {
            "alias": project.alias,
            "path": project.path,
            "client": project.client,
            "model": project.model,
            "extensions": project.extensions,
            "dimensions": project.dimensions,
        }
        stmt = sqlite_dialect.insert(Project).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["alias"],
            set_={k: v for k, v in values.items() if k != "alias"},
        )
        try:
            async with self._session() as session, session.begin():
                await session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StorageError(
                f"failed to upsert project with alias '{project.alias}': {exc}"
            ) from exc
        self._dimensions = project.dimensions or None

    async def get_project(self, alias: str) -> Project:
        """Return the project registered as *alias*."""
        try:
            async with self._session() as session:
                project = await session.get(Project, alias)
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to get project with alias '{alias}': {exc}") from exc
        if project is None:
            raise ProjectNotFoundError(alias)
        self._dimensions = project.dimensions or None
        return project

    # ------------------------------------------------------------------
    # Files and vectors
    # ------------------------------------------------------------------

    async def replace_file(self, old_id: int | None, path: str, vector: list[float]) -> int:
        """Atomically swap *old_id* for a new row holding *path* and *vector*.

        With ``old_id=None`` this is a plain insert.  The two deletes and
        two inserts commit together or not at all.
        """
        await self._check_dimensions(len(vector))
        blob = pack_vector(vector)
        try:
            async with self._session() as session, session.begin():
                if old_id is not None:
                    await session.execute(delete(FileVector).where(FileVector.id == old_id))
                    await session.execute(delete(IndexedFile).where(IndexedFile.id == old_id))
                row = IndexedFile(path=path)
                session.add(row)
                await session.flush()
                session.add(FileVector(id=row.id, embedding=blob))
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to store embedding for {path}: {exc}") from exc
        return row.id  # type: ignore[return-value]

    async def delete_file(self, file_id: int) -> None:
        """Delete the vector and the file row for *file_id* in one transaction."""
        try:
            async with self._session() as session, session.begin():
                await session.execute(delete(FileVector).where(FileVector.id == file_id))
                await session.execute(delete(IndexedFile).where(IndexedFile.id == file_id))
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to delete file {file_id}: {exc}") from exc

    async def clear(self) -> None:
        """Delete every file row and vector in one transaction."""
        try:
            async with self._session() as session, session.begin():
                await session.execute(delete(FileVector))
                await session.execute(delete(IndexedFile))
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to delete existing vector data: {exc}") from exc
        logger.debug("Cleared all indexed files")

    async def list_files(self) -> list[IndexedFile]:
        """Return all file rows ordered by creation time, oldest first."""
        stmt = select(IndexedFile).order_by(IndexedFile.created_at, IndexedFile.id)
        try:
            async with self._session() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to query files for sync: {exc}") from exc

    async def count(self) -> int:
        """Return the number of indexed files."""
        try:
            async with self._session() as session:
                result = await session.execute(select(func.count()).select_from(IndexedFile))
                return int(result.scalar_one())
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to count files: {exc}") from exc

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def knn(self, vector: list[float], k: int) -> list[SearchResult]:
        """Return up to *k* files nearest to *vector*, closest first."""
        stmt = select(IndexedFile.id, IndexedFile.path, FileVector.embedding).join(
            FileVector, FileVector.id == IndexedFile.id
        )
        try:
            async with self._session() as session:
                rows = (await session.execute(stmt)).all()
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to execute search query: {exc}") from exc

        if not rows or k <= 0:
            return []

        matrix = np.vstack([unpack_vector(row.embedding) for row in rows])
        query = np.asarray(vector, dtype=np.float32)
        if query.ndim != 1 or query.shape[0] != matrix.shape[1]:
            raise StorageError(
                f"dimension mismatch: query has {query.size} values, "
                f"index holds {matrix.shape[1]}"
            )

        keys = np.array([row.id for row in rows], dtype=np.uint64)
        paths = {int(row.id): row.path for row in rows}

        index = Index(ndim=matrix.shape[1], metric="cos", dtype="f32")
        index.add(keys, matrix)
        matches = index.search(query, min(k, len(rows)), exact=True)

        results = [
            SearchResult(id=int(key), path=paths[int(key)], distance=float(distance))
            for key, distance in zip(
                matches.keys.tolist(), matches.distances.tolist(), strict=True
            )
            if int(key) in paths
        ]
        results.sort(key=lambda r: r.distance)
        return results

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _check_dimensions(self, width: int) -> None:
        if width == 0:
            raise StorageError("refusing to store an empty embedding")
        if self._dimensions is None:
            try:
                async with self._session() as session:
                    result = await session.execute(select(Project.dimensions))
                    dims = result.scalars().first()
            except SQLAlchemyError as exc:
                raise StorageError(f"failed to read project dimensions: {exc}") from exc
            self._dimensions = dims or None
        if self._dimensions is not None and width != self._dimensions:
            raise StorageError(
                f"dimension mismatch: embedding has {width} values, "
                f"project expects {self._dimensions}"
            )
