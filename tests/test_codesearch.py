"""End-to-end tests for the CodeSearch facade with a fake provider."""

from __future__ import annotations

import shutil
from typing import TYPE_CHECKING, Any

import pytest

from codesearch import CodeSearch
from codesearch.exceptions import ConfigurationError, ProjectNotFoundError, ProviderError
from codesearch.store import SQLiteIndexStore

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


class RecordingFactory:
    """Provider factory that remembers every provider it hands out."""

    def __init__(self, make_provider: Callable, **kwargs) -> None:
        self.make_provider = make_provider
        self.kwargs = kwargs
        self.created: list[tuple[str, str, Any]] = []

    def __call__(self, client: str, model: str):
        provider = self.make_provider(**self.kwargs)
        self.created.append((client, model, provider))
        return provider


@pytest.fixture
def factory(make_provider: Callable) -> RecordingFactory:
    return RecordingFactory(make_provider)


@pytest.fixture
def cs(tmp_path: Path, factory: RecordingFactory) -> CodeSearch:
    return CodeSearch(data_dir=tmp_path / "data", provider_factory=factory)


@pytest.fixture
def tree(make_tree: Callable) -> Path:
    return make_tree(
        {
            "a.py": "alpha",
            "b.py": "beta",
            "pkg/c.go": "gamma",
            "README.md": "not indexed",
        }
    )


# ==================================================================
# build
# ==================================================================


class TestBuild:
    @pytest.mark.asyncio
    async def test_build_indexes_matching_files(self, cs: CodeSearch, tree: Path):
        report = await cs.build("demo", tree, "ollama", "nomic-embed-text", "py,go")
        assert sorted(report.added) == ["a.py", "b.py", "pkg/c.go"]
        assert (cs.data_dir / "demo.db").exists()

    @pytest.mark.asyncio
    async def test_build_uses_requested_provider(
        self, cs: CodeSearch, tree: Path, factory: RecordingFactory
    ):
        await cs.build("demo", tree, "OLLAMA", "nomic-embed-text")
        client, model, provider = factory.created[0]
        assert (client, model) == ("ollama", "nomic-embed-text")
        assert provider.closed

    @pytest.mark.asyncio
    async def test_build_reports_progress(self, cs: CodeSearch, tree: Path):
        calls: list[tuple[int, int]] = []
        await cs.build("demo", tree, extensions="py", progress=lambda d, t: calls.append((d, t)))
        assert calls == [(1, 2), (2, 2)]

    @pytest.mark.asyncio
    async def test_rejects_unknown_provider(self, cs: CodeSearch, tree: Path):
        with pytest.raises(ConfigurationError, match="unsupported client"):
            await cs.build("demo", tree, "pinecone")
        assert not (cs.data_dir / "demo.db").exists()

    @pytest.mark.asyncio
    async def test_rejects_missing_directory(self, cs: CodeSearch, tmp_path: Path):
        with pytest.raises(ConfigurationError, match="not a directory"):
            await cs.build("demo", tmp_path / "missing")

    @pytest.mark.asyncio
    async def test_rejects_bad_alias(self, cs: CodeSearch, tree: Path):
        with pytest.raises(ConfigurationError, match="invalid project alias"):
            await cs.build("../escape", tree)

    @pytest.mark.asyncio
    async def test_probe_failure_propagates(
        self, tmp_path: Path, tree: Path, make_provider: Callable
    ):
        cs = CodeSearch(
            data_dir=tmp_path / "data",
            provider_factory=RecordingFactory(make_provider, fail_on=("1",)),
        )
        with pytest.raises(ProviderError, match="dimensions"):
            await cs.build("demo", tree)


# ==================================================================
# sync
# ==================================================================


class TestSync:
    @pytest.mark.asyncio
    async def test_sync_uses_stored_configuration(
        self, cs: CodeSearch, tree: Path, factory: RecordingFactory
    ):
        await cs.build("demo", tree, "ollama", "nomic-embed-text", "py")
        (tree / "a.py").unlink()
        (tree / "d.py").write_text("delta")

        report = await cs.sync("demo")

        assert report.added == ["d.py"]
        assert report.updated == ["b.py"]
        assert report.removed == ["a.py"]
        client, model, provider = factory.created[-1]
        assert (client, model) == ("ollama", "nomic-embed-text")
        assert provider.closed

    @pytest.mark.asyncio
    async def test_missing_root_is_configuration_error(self, cs: CodeSearch, tree: Path):
        await cs.build("demo", tree, extensions="py")
        shutil.rmtree(tree)
        with pytest.raises(ConfigurationError, match="not a directory"):
            await cs.sync("demo")
        async with SQLiteIndexStore.from_path(cs.data_dir / "demo.db") as store:
            assert sorted(f.path for f in await store.list_files()) == ["a.py", "b.py"]

    @pytest.mark.asyncio
    async def test_unknown_alias(self, cs: CodeSearch):
        with pytest.raises(ProjectNotFoundError, match="'ghost' not found"):
            await cs.sync("ghost")
        assert not (cs.data_dir / "ghost.db").exists()


# ==================================================================
# find
# ==================================================================


class TestFind:
    @pytest.mark.asyncio
    async def test_identical_text_ranks_first(self, cs: CodeSearch, tree: Path):
        await cs.build("demo", tree, extensions="py,go")

        results = await cs.find("demo", "a.py\nalpha")

        assert results[0].path == "a.py"
        assert results[0].distance == pytest.approx(1.0, abs=1e-4)

    @pytest.mark.asyncio
    async def test_limit(self, cs: CodeSearch, make_tree: Callable):
        root = make_tree({f"f{i}.py": f"content {i}" for i in range(8)})
        await cs.build("demo", root, extensions="py")

        results = await cs.find("demo", "something else", limit=3, min_similarity=0.0)

        assert 1 <= len(results) <= 3
        assert all(0.0 <= r.distance <= 1.0 for r in results)

    @pytest.mark.asyncio
    async def test_empty_query(self, cs: CodeSearch, tree: Path):
        await cs.build("demo", tree)
        with pytest.raises(ConfigurationError, match="empty"):
            await cs.find("demo", "   ")

    @pytest.mark.asyncio
    async def test_unknown_alias(self, cs: CodeSearch):
        with pytest.raises(ProjectNotFoundError):
            await cs.find("ghost", "anything")
        assert not (cs.data_dir / "ghost.db").exists()

    @pytest.mark.asyncio
    async def test_query_embedding_failure(
        self, tmp_path: Path, tree: Path, make_provider: Callable
    ):
        cs = CodeSearch(
            data_dir=tmp_path / "data",
            provider_factory=RecordingFactory(make_provider, fail_on=("broken query",)),
        )
        await cs.build("demo", tree)
        with pytest.raises(ProviderError, match="error generating embeddings for query"):
            await cs.find("demo", "broken query")

    @pytest.mark.asyncio
    async def test_empty_index(self, cs: CodeSearch, make_tree: Callable):
        root = make_tree({"notes.txt": "x"})
        await cs.build("demo", root, extensions="py")
        assert await cs.find("demo", "anything") == []
