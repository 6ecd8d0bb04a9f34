"""Local file enumeration for indexing."""

from __future__ import annotations

import logging
from pathlib import Path

from codesearch.config import parse_extensions

logger = logging.getLogger(__name__)


def is_hidden(rel: Path) -> bool:
    """Return True if any component of *rel* starts with a dot."""
    return any(part.startswith(".") for part in rel.parts)


def recursive_files(root: str | Path, extensions: list[str] | tuple[str, ...]) -> list[str]:
    """Return relative POSIX paths of files under *root* matching *extensions*.

    Hidden files and anything inside hidden directories are skipped.  An
    empty *extensions* list matches every file.  The result is sorted.
    """
    root = Path(root)
    wanted = {f".{ext}" for ext in parse_extensions(list(extensions))}

    found: list[str] = []
    for p in root.rglob("*"):
        rel = p.relative_to(root)
        if is_hidden(rel):
            continue
        try:
            if not p.is_file():
                continue
        except OSError as exc:
            logger.warning("Error accessing path %s: %s", p, exc)
            continue
        if wanted and p.suffix.lower() not in wanted:
            continue
        found.append(rel.as_posix())

    found.sort()
    return found
