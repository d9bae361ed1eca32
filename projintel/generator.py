"""Template documentation headers built from a file's extracted symbols."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Sequence

from .models import DocHeader, SymbolSet
from .scoring import PLACEHOLDER_MARKER

_STRIPPED_PREFIXES = ("src/", "src-tauri/src/")
_TODO = f"{PLACEHOLDER_MARKER}:"


def module_path_for(relative_path: str) -> str:
    """Module identifier for a root-relative path, e.g. ``components/App``.

    A leading ``src/`` or ``src-tauri/src/`` is dropped along with the extension.
    """
    path = relative_path.replace("\\", "/").lstrip("/")
    for prefix in _STRIPPED_PREFIXES:
        if path.startswith(prefix):
            path = path[len(prefix) :]
    suffix = PurePosixPath(path).suffix
    if suffix:
        path = path[: -len(suffix)]
    return path


def infer_description(relative_path: str, exports: Sequence[str]) -> str:
    stem = PurePosixPath(relative_path).stem or "module"
    if not exports:
        return f"{_TODO} Describe what {stem} does"
    first = exports[0].replace("_", " ")
    if len(exports) == 1:
        return f"Module providing {first} functionality"
    return f"Module providing {first} and {len(exports) - 1} more exports"


def template_header(relative_path: str, symbols: SymbolSet) -> DocHeader:
    """Build a placeholder header the user (or an enhancer) fills in.

    Placeholder text starts with ``TODO:`` so the freshness scorer can tell an
    unedited header from a written one.
    """
    stem = PurePosixPath(relative_path).stem or "this module"
    return DocHeader(
        module_path=module_path_for(relative_path),
        description=infer_description(relative_path, symbols.exports),
        purpose=[f"{_TODO} Describe the main responsibility of {stem}"],
        dependencies=[f"{path} - {_TODO} why needed" for path in symbols.imports],
        exports=[f"{name} - {_TODO} what it does" for name in symbols.exports],
        patterns=[f"{_TODO} Describe usage patterns"],
        claude_notes=[f"{_TODO} Add important context for Claude"],
    )


__all__ = ["infer_description", "module_path_for", "template_header"]
