"""Tests for local file enumeration."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from codesearch.files import is_hidden, recursive_files

if TYPE_CHECKING:
    from collections.abc import Callable


class TestIsHidden:
    @pytest.mark.parametrize(
        ("rel", "hidden"),
        [
            ("a.py", False),
            ("pkg/a.py", False),
            (".env", True),
            (".git/config", True),
            ("pkg/.cache/a.py", True),
        ],
    )
    def test_components(self, rel: str, hidden: bool):
        assert is_hidden(Path(rel)) is hidden


class TestRecursiveFiles:
    def test_filters_by_extension(self, make_tree: Callable):
        root = make_tree({"a.py": "", "b.go": "", "c.txt": "", "d.PY": ""})
        assert recursive_files(root, ["py", "go"]) == ["a.py", "b.go", "d.PY"]

    def test_relative_posix_paths_sorted(self, make_tree: Callable):
        root = make_tree({"z.py": "", "pkg/sub/m.py": "", "pkg/a.py": ""})
        assert recursive_files(root, ["py"]) == ["pkg/a.py", "pkg/sub/m.py", "z.py"]

    def test_skips_hidden_files_and_dirs(self, make_tree: Callable):
        root = make_tree({".hidden.py": "", ".git/hook.py": "", "src/.venv/x.py": "", "ok.py": ""})
        assert recursive_files(root, ["py"]) == ["ok.py"]

    def test_empty_filter_matches_all(self, make_tree: Callable):
        root = make_tree({"a.py": "", "Makefile": "", "notes.md": ""})
        assert recursive_files(root, []) == ["Makefile", "a.py", "notes.md"]

    def test_extension_forms_normalized(self, make_tree: Callable):
        root = make_tree({"a.py": "", "b.go": ""})
        assert recursive_files(root, [".PY", " go "]) == ["a.py", "b.go"]

    def test_directories_not_listed(self, make_tree: Callable):
        root = make_tree({"pkg.py/inner.txt": ""})
        assert recursive_files(root, ["py"]) == []

    def test_accepts_string_root(self, make_tree: Callable):
        root = make_tree({"a.py": ""})
        assert recursive_files(str(root), ["py"]) == ["a.py"]
