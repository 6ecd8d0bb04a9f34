"""Shared fixtures for codesearch tests."""

from __future__ import annotations

import hashlib
import math
from typing import TYPE_CHECKING

import pytest

from codesearch.exceptions import ProviderError
from codesearch.store import SQLiteIndexStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable
    from pathlib import Path

FAKE_DIM = 32


def hash_vector(text: str) -> list[float]:
    """Deterministic unit vector from text hash."""
    h = hashlib.sha256(text.encode()).digest()
    raw = [float(b) + 1.0 for b in h]
    norm = math.sqrt(sum(x * x for x in raw))
    return [x / norm for x in raw]


class FakeProvider:
    """Deterministic async embedding provider that records every request.

    Texts whose first line is in *fail_on* raise ``ProviderError``.
    """

    def __init__(self, *, fail_on: tuple[str, ...] = ()) -> None:
        self.calls: list[str] = []
        self.fail_on = fail_on
        self.closed = False

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if text.split("\n", 1)[0] in self.fail_on:
            raise ProviderError(f"provider refused {text.split(chr(10), 1)[0]}")
        return hash_vector(text)

    @property
    def model_name(self) -> str:
        return "fake"

    async def close(self) -> None:
        self.closed = True

    @property
    def embedded_paths(self) -> list[str]:
        """Paths of files sent for embedding, in request order."""
        return [c.split("\n", 1)[0] for c in self.calls if "\n" in c]


@pytest.fixture
def make_provider() -> Callable[..., FakeProvider]:
    """Return a factory for ``FakeProvider`` instances (``make_provider(fail_on=...)``)."""
    return FakeProvider


@pytest.fixture
def provider(make_provider: Callable[..., FakeProvider]) -> FakeProvider:
    return make_provider()


@pytest.fixture
def fake_dim() -> int:
    """Width of the vectors ``FakeProvider`` returns."""
    return FAKE_DIM


@pytest.fixture
async def store(tmp_path: Path) -> AsyncIterator[SQLiteIndexStore]:
    """Open SQLite store in a temporary directory."""
    s = SQLiteIndexStore.from_path(tmp_path / "index.db")
    await s.open()
    yield s
    await s.close()


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Return a factory writing ``{relative path: content}`` under a project root."""
    root = tmp_path / "project"

    def _make(files: dict[str, str]) -> Path:
        root.mkdir(exist_ok=True)
        for rel, content in files.items():
            target = root / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
        return root

    return _make
