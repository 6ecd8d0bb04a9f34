"""codesearch: semantic search over a local source tree.

Index files into embeddings, keep the index in sync with the disk, and
rank nearest-neighbor hits into a small, relevant result set.
"""

__version__ = "0.1.0"

from codesearch._codesearch import CodeSearch
from codesearch.exceptions import (
    CodeSearchError,
    ConfigurationError,
    ProjectNotFoundError,
    ProviderError,
    StorageError,
)
from codesearch.models import FileVector, IndexedFile, Project
from codesearch.providers import EmbeddingProvider, ProviderKind, create_provider
from codesearch.search import (
    CODE_EXACT,
    CODE_SIMILAR,
    DEFAULT_OPTIONS,
    RankOptions,
    SearchResult,
    rank,
    rank_by_similarity,
)
from codesearch.store import IndexStore, SQLiteIndexStore
from codesearch.sync import Reconciler, SyncReport

__all__ = [
    "CODE_EXACT",
    "CODE_SIMILAR",
    "DEFAULT_OPTIONS",
    "CodeSearch",
    "CodeSearchError",
    "ConfigurationError",
    "EmbeddingProvider",
    "FileVector",
    "IndexStore",
    "IndexedFile",
    "Project",
    "ProjectNotFoundError",
    "ProviderError",
    "ProviderKind",
    "RankOptions",
    "Reconciler",
    "SQLiteIndexStore",
    "SearchResult",
    "StorageError",
    "SyncReport",
    "__version__",
    "create_provider",
    "rank",
    "rank_by_similarity",
]
