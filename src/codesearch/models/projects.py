"""Project model — one row per project database."""

from __future__ import annotations

from sqlmodel import Field, SQLModel


class Project(SQLModel, table=True):
    """Build configuration of an indexed project.

    Created on first build, overwritten on every rebuild, read by sync and
    find.  ``extensions`` holds the comma-joined extension filter.
    """

    __tablename__ = "projects"

    alias: str = Field(primary_key=True)
    path: str
    client: str
    model: str
    extensions: str = Field(default="")
    dimensions: int = Field(default=0)

    @property
    def extension_list(self) -> list[str]:
        """Return the extension filter as a list (empty string → empty list)."""
        if not self.extensions:
            return []
        return self.extensions.split(",")
