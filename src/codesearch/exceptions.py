"""Custom exception hierarchy for codesearch."""


class CodeSearchError(Exception):
    """Base exception for all codesearch errors."""


class ConfigurationError(CodeSearchError):
    """Raised on missing or invalid arguments, before any I/O happens."""


class ProviderError(CodeSearchError):
    """Raised when an embedding provider fails (HTTP error, empty embedding, etc.)."""


class StorageError(CodeSearchError):
    """Raised on index store failures (transaction, schema, dimension mismatch)."""


class ProjectNotFoundError(StorageError):
    """Raised when no project is registered under the requested alias."""

    def __init__(self, alias: str) -> None:
        super().__init__(f"project with alias '{alias}' not found")
        self.alias = alias
