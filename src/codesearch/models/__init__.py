"""SQLModel database models for codesearch."""

from codesearch.models.files import FileVector, IndexedFile
from codesearch.models.projects import Project

__all__ = [
    "FileVector",
    "IndexedFile",
    "Project",
]
