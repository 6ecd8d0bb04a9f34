"""Index stores — protocol and the SQLite implementation."""

from codesearch.store.protocols import IndexStore
from codesearch.store.sqlite import SQLiteIndexStore

__all__ = [
    "IndexStore",
    "SQLiteIndexStore",
]
