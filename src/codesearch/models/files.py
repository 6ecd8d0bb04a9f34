"""IndexedFile and FileVector models.

Every ``IndexedFile`` row owns exactly one ``FileVector`` row with the same
``id``.  The pair is always inserted and deleted inside one transaction, so
neither table ever holds an orphan.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, LargeBinary
from sqlmodel import Field, SQLModel


class IndexedFile(SQLModel, table=True):
    """A file path that has been embedded.

    ``id`` is assigned by SQLite with ``AUTOINCREMENT`` so a deleted id is
    never handed out again: replacing a file always yields a new id.
    """

    __tablename__ = "indexed_files"
    __table_args__ = {"sqlite_autoincrement": True}

    id: int | None = Field(default=None, primary_key=True)
    path: str = Field(index=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),
    )


class FileVector(SQLModel, table=True):
    """The embedding of one ``IndexedFile``, stored as packed float32 bytes."""

    __tablename__ = "file_vectors"

    id: int = Field(primary_key=True, foreign_key="indexed_files.id")
    embedding: bytes = Field(sa_type=LargeBinary)
