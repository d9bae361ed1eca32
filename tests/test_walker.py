"""Tests for projintel.walker."""

from __future__ import annotations

from pathlib import Path

import pytest

from projintel.errors import MAX_FILE_BYTES, FileAccessError, PathError, SizeError
from projintel.models import HTML, OTHER, ROOT_MANIFEST, SOURCE
from projintel.walker import (
    ProjectTree,
    WalkPolicy,
    classify,
    is_documentable,
    read_text,
    walk,
    write_text,
)
from tests._fixtures.repo_builder import RepoBuilder


def test_walk_skips_ignored_and_hidden_directories(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "src/app.ts": "export const app = 1;\n",
            "node_modules/react/index.js": "module.exports = {};\n",
            "target/debug/build.rs": "fn main() {}\n",
            ".cache/data.py": "x = 1\n",
            "dist/bundle.js": "console.log(1);\n",
            "__pycache__/mod.py": "x = 1\n",
        }
    )

    paths = [entry.relative_path for entry in repo_builder.scan()]

    assert paths == ["src/app.ts"]


def test_walk_results_are_sorted_with_forward_slashes(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "b/z.py": "",
            "a/y.py": "",
            "a/b/x.py": "",
            "root.py": "",
        }
    )

    paths = [entry.relative_path for entry in repo_builder.scan()]

    assert paths == sorted(paths)
    assert "a/b/x.py" in paths
    assert all("\\" not in path and not path.startswith("/") for path in paths)


def test_walk_depth_ten_is_walked_depth_eleven_is_not(repo_builder: RepoBuilder) -> None:
    ten = "/".join(f"d{i}" for i in range(1, 11))
    eleven = "/".join(f"d{i}" for i in range(1, 12))
    repo_builder.write({f"{ten}/deep.py": "x = 1\n", f"{eleven}/deeper.py": "x = 2\n"})

    paths = [entry.relative_path for entry in repo_builder.scan()]

    assert f"{ten}/deep.py" in paths
    assert f"{eleven}/deeper.py" not in paths


def test_walk_honours_exclude_paths(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "src/app.py": "",
            "generated/client.py": "",
            "docs/notes.py": "",
        }
    )

    policy = WalkPolicy(exclude_paths=("generated/", "/docs"))
    paths = [entry.relative_path for entry in repo_builder.scan(policy)]

    assert paths == ["src/app.py"]


def test_walk_raises_path_error_for_missing_root(tmp_path: Path) -> None:
    with pytest.raises(PathError):
        walk(tmp_path / "missing")


def test_walk_raises_path_error_for_file_root(tmp_path: Path) -> None:
    target = tmp_path / "file.txt"
    target.write_text("hi", encoding="utf-8")

    with pytest.raises(PathError):
        walk(target)


@pytest.mark.parametrize(
    ("relative", "kind"),
    [
        ("package.json", ROOT_MANIFEST),
        ("prisma/schema.prisma", ROOT_MANIFEST),
        ("docker-compose.yml", ROOT_MANIFEST),
        ("setup.py", ROOT_MANIFEST),
        ("nested/package.json", OTHER),
        ("src/main.rs", SOURCE),
        ("index.html", HTML),
        ("README.md", OTHER),
    ],
)
def test_classify(relative: str, kind: str) -> None:
    assert classify(relative) == kind


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("app.tsx", True),
        ("service.py", True),
        ("lib.rs", False),
        ("mod.rs", False),
        ("index.ts", False),
        ("vite-env.d.ts", False),
        ("app.test.ts", False),
        ("button.spec.tsx", False),
        ("test_engine.py", False),
        ("styles.css", False),
        ("main.c", False),
    ],
)
def test_is_documentable(name: str, expected: bool) -> None:
    assert is_documentable(name) is expected


def test_read_text_size_boundary(tmp_path: Path) -> None:
    exact = tmp_path / "exact.ts"
    exact.write_bytes(b"a" * MAX_FILE_BYTES)
    over = tmp_path / "over.ts"
    over.write_bytes(b"a" * (MAX_FILE_BYTES + 1))

    assert len(read_text(exact)) == MAX_FILE_BYTES
    with pytest.raises(SizeError):
        read_text(over)


def test_read_text_reports_missing_and_undecodable_files(tmp_path: Path) -> None:
    binary = tmp_path / "blob.py"
    binary.write_bytes(b"\xff\xfe\x00bad")

    with pytest.raises(FileAccessError):
        read_text(tmp_path / "missing.py")
    with pytest.raises(FileAccessError):
        read_text(binary)


def test_read_and_write_preserve_crlf(tmp_path: Path) -> None:
    target = tmp_path / "windows.ts"
    write_text(target, "line one\r\nline two\r\n")

    assert target.read_bytes() == b"line one\r\nline two\r\n"
    assert read_text(target) == "line one\r\nline two\r\n"


def test_project_tree_helpers(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "package.json": "{}",
            "index.html": "<html></html>",
            "about.html": "<html></html>",
            "src/app.ts": "export const app = 1;\n",
            "src/index.ts": "export * from './app';\n",
            "a/b/c/d/e/f/g.ts": "export const g = 1;\n",
        }
    )
    repo_builder.mkdir("src-tauri")
    tree = ProjectTree(repo_builder.path())

    assert tree.is_dir("src-tauri")
    assert tree.is_file("package.json")
    assert tree.root_files(".html") == ["about.html", "index.html"]
    assert [entry.relative_path for entry in tree.documentable()] == [
        "a/b/c/d/e/f/g.ts",
        "src/app.ts",
    ]
    assert "a/b/c/d/e/f/g.ts" not in [entry.relative_path for entry in tree.source_files(5)]
    assert tree.read_optional("missing.json") is None
    assert tree.read_optional("package.json") == "{}"
