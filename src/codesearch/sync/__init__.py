"""Index synchronization — full rebuilds and incremental reconciliation."""

from codesearch.sync.reconciler import ProgressCallback, Reconciler, SyncReport

__all__ = [
    "ProgressCallback",
    "Reconciler",
    "SyncReport",
]
