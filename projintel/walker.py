"""Project tree traversal, file classification and bounded file access."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

from .errors import MAX_FILE_BYTES, FileAccessError, PathError, SizeError
from .logging import get_logger
from .models import HTML, OTHER, ROOT_MANIFEST, SOURCE, WalkEntry

logger = get_logger("walker")

IGNORED_DIRS = frozenset(
    {
        "node_modules",
        "target",
        "dist",
        "build",
        ".next",
        "__pycache__",
        ".venv",
        "venv",
        "coverage",
        ".turbo",
        ".git",
    }
)

SOURCE_SUFFIXES = frozenset(
    {
        ".ts",
        ".tsx",
        ".js",
        ".jsx",
        ".rs",
        ".py",
        ".go",
        ".dart",
        ".java",
        ".kt",
        ".swift",
        ".rb",
        ".php",
        ".cs",
        ".cpp",
        ".c",
        ".h",
        ".vue",
        ".svelte",
    }
)

DOCUMENTABLE_SUFFIXES = frozenset(
    {".ts", ".tsx", ".js", ".jsx", ".rs", ".py", ".go", ".java", ".kt", ".swift"}
)

SKIPPED_NAMES = frozenset(
    {
        "mod.rs",
        "main.rs",
        "lib.rs",
        "index.ts",
        "index.js",
        "main.ts",
        "main.tsx",
        "vite-env.d.ts",
    }
)

ROOT_MANIFESTS = frozenset(
    {
        "tsconfig.json",
        "package.json",
        "Cargo.toml",
        "pyproject.toml",
        "setup.py",
        "requirements.txt",
        "go.mod",
        "pubspec.yaml",
        "pom.xml",
        "build.gradle",
        "build.gradle.kts",
        "Gemfile",
        "composer.json",
        "Package.swift",
        "manifest.json",
        "tailwind.config.js",
        "tailwind.config.ts",
        "tailwind.config.mjs",
        "docker-compose.yml",
        "docker-compose.yaml",
    }
)

NESTED_MANIFESTS = frozenset({"prisma/schema.prisma"})


@dataclass
class IgnoreRule:
    """Gitignore-style exclusion pattern from .projintel.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return rel_path.startswith(f"{self.pattern}/")

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_ignore_rule(pattern: str) -> IgnoreRule | None:
    """Parse one exclusion pattern; blank patterns yield None."""
    pattern = pattern.strip()
    if not pattern or pattern.startswith("#"):
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern.rstrip("/")

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern.lstrip("/")

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        has_slash="/" in pattern,
    )


@dataclass
class WalkPolicy:
    """Traversal limits and exclusions for one walk."""

    max_depth: int = 10
    exclude_paths: Sequence[str] = field(default_factory=tuple)

    def rules(self) -> List[IgnoreRule]:
        rules = []
        for pattern in self.exclude_paths:
            rule = build_ignore_rule(pattern)
            if rule is not None:
                rules.append(rule)
        return rules


def is_ignored_dir(name: str) -> bool:
    return name.startswith(".") or name in IGNORED_DIRS


def is_test_file(name: str) -> bool:
    return ".test." in name or ".spec." in name or name.startswith("test_")


def is_documentable(name: str) -> bool:
    """Return True when a file name may carry a documentation header."""
    suffix = os.path.splitext(name)[1].lower()
    if suffix not in DOCUMENTABLE_SUFFIXES:
        return False
    if name in SKIPPED_NAMES:
        return False
    return not is_test_file(name)


def classify(relative_path: str) -> str:
    """Return the entry kind for a root-relative path."""
    name = relative_path.rsplit("/", 1)[-1]
    if ("/" not in relative_path and name in ROOT_MANIFESTS) or relative_path in NESTED_MANIFESTS:
        return ROOT_MANIFEST
    suffix = os.path.splitext(name)[1].lower()
    if suffix in SOURCE_SUFFIXES:
        return SOURCE
    if suffix == ".html":
        return HTML
    return OTHER


def resolve_root(root: str | os.PathLike[str]) -> Path:
    """Return the absolute project root or raise PathError."""
    root_path = Path(root).expanduser()
    try:
        root_path = root_path.resolve()
    except OSError as exc:
        raise PathError(f"Project path could not be resolved: {root}") from exc
    if not root_path.exists():
        raise PathError(f"Project path not found: {root}")
    if not root_path.is_dir():
        raise PathError(f"Project path is not a directory: {root}")
    if not os.access(root_path, os.R_OK | os.X_OK):
        raise PathError(f"Project path is not readable: {root}")
    return root_path


def walk(root: str | os.PathLike[str], policy: WalkPolicy | None = None) -> List[WalkEntry]:
    """Enumerate files below *root*, sorted by relative path."""
    root_path = resolve_root(root)
    return _collect(root_path, policy or WalkPolicy())


def _collect(root: Path, policy: WalkPolicy) -> List[WalkEntry]:
    entries = list(_iter_entries(root, policy))
    entries.sort(key=lambda entry: entry.relative_path)
    return entries


def _log_walk_error(exc: OSError) -> None:
    logger.debug("Skipping unreadable directory %s: %s", exc.filename, exc.strerror)


def _iter_entries(root: Path, policy: WalkPolicy) -> Iterator[WalkEntry]:
    rules = policy.rules()
    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""
        depth = rel_dir.count("/") + 1 if rel_dir else 0

        if depth >= policy.max_depth:
            dirnames[:] = []
        else:
            kept = []
            for name in dirnames:
                if is_ignored_dir(name):
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if any(rule.matches(rel_path, True) for rule in rules):
                    continue
                kept.append(name)
            dirnames[:] = kept

        for filename in filenames:
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if any(rule.matches(rel_path, False) for rule in rules):
                continue
            path = current_dir / filename
            try:
                stat_result = path.stat()
            except OSError as exc:
                logger.debug("Skipping %s: %s", rel_path, exc)
                continue
            kind = classify(rel_path)
            yield WalkEntry(
                absolute_path=path,
                relative_path=rel_path,
                kind=kind,
                documentable=is_documentable(filename),
                size=stat_result.st_size,
                mtime=stat_result.st_mtime,
            )


def read_text(path: Path, *, limit: int = MAX_FILE_BYTES) -> str:
    """Read a UTF-8 file without newline translation, enforcing the size cap."""
    try:
        size = path.stat().st_size
    except OSError as exc:
        raise FileAccessError(f"Failed to read {path}: {exc}") from exc
    if size > limit:
        raise SizeError(str(path), size, limit)
    try:
        with path.open("r", encoding="utf-8", newline="") as handle:
            return handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise FileAccessError(f"Failed to read {path}: {exc}") from exc


def write_text(path: Path, text: str) -> None:
    """Write *text* verbatim, keeping its line terminators."""
    try:
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(text)
    except OSError as exc:
        raise FileAccessError(f"Failed to write {path}: {exc}") from exc


class ProjectTree:
    """Read-only view of a project root for the duration of one analysis."""

    def __init__(self, root: str | os.PathLike[str], policy: WalkPolicy | None = None) -> None:
        self.root = resolve_root(root)
        self.policy = policy or WalkPolicy()
        self._entries: Optional[List[WalkEntry]] = None
        self._texts: Dict[str, Optional[str]] = {}

    @property
    def name(self) -> str:
        return self.root.name

    def entries(self, max_depth: int | None = None) -> List[WalkEntry]:
        """Return walked entries, optionally limited to directories up to *max_depth*."""
        if self._entries is None:
            self._entries = _collect(self.root, self.policy)
        if max_depth is None or max_depth >= self.policy.max_depth:
            return list(self._entries)
        return [entry for entry in self._entries if entry.relative_path.count("/") <= max_depth]

    def source_files(self, max_depth: int | None = None) -> List[WalkEntry]:
        return [entry for entry in self.entries(max_depth) if entry.suffix in SOURCE_SUFFIXES]

    def documentable(self) -> List[WalkEntry]:
        return [entry for entry in self.entries() if entry.documentable]

    def path(self, relative: str) -> Path:
        return self.root / relative

    def exists(self, relative: str) -> bool:
        return self.path(relative).exists()

    def is_dir(self, relative: str) -> bool:
        return self.path(relative).is_dir()

    def is_file(self, relative: str) -> bool:
        return self.path(relative).is_file()

    def read_text(self, relative: str) -> str:
        """Read a file below the root; raises SizeError or FileAccessError."""
        return read_text(self.path(relative))

    def read_optional(self, relative: str) -> Optional[str]:
        """Return a root file's text, or None when it is absent or unreadable."""
        if relative in self._texts:
            return self._texts[relative]
        text: Optional[str] = None
        if self.is_file(relative):
            try:
                text = read_text(self.path(relative))
            except (SizeError, FileAccessError) as exc:
                logger.warning("Ignoring %s: %s", relative, exc)
        self._texts[relative] = text
        return text

    def root_files(self, suffix: str) -> List[str]:
        """Names of files directly under the root with the given suffix, sorted."""
        try:
            names = [
                child.name
                for child in self.root.iterdir()
                if child.is_file() and child.name.lower().endswith(suffix)
            ]
        except OSError as exc:
            logger.debug("Unable to list %s: %s", self.root, exc)
            return []
        return sorted(names)


__all__ = [
    "DOCUMENTABLE_SUFFIXES",
    "IGNORED_DIRS",
    "IgnoreRule",
    "ProjectTree",
    "ROOT_MANIFESTS",
    "SOURCE_SUFFIXES",
    "WalkPolicy",
    "build_ignore_rule",
    "classify",
    "is_documentable",
    "is_test_file",
    "read_text",
    "resolve_root",
    "walk",
    "write_text",
]
