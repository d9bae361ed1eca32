"""Line-based detection of exported names and internal imports."""

from __future__ import annotations

import re
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .errors import MAX_FILE_BYTES
from .header.styles import normalize_language
from .models import SymbolSet

DEFAULT_SUFFIX = " (default)"

_JS_FAMILY = frozenset({"ts", "tsx", "js", "jsx"})
_IDENT = r"[A-Za-z_$][\w$]*"

Rule = Tuple[re.Pattern, Callable[[re.Match], Optional[str]]]


def _group(index: int = 1) -> Callable[[re.Match], Optional[str]]:
    return lambda match: match.group(index)


def _default(match: re.Match[str]) -> Optional[str]:
    return f"{match.group(1)}{DEFAULT_SUFFIX}"


def _public_python(match: re.Match[str]) -> Optional[str]:
    name = match.group(1)
    return None if name.startswith("_") else name


def _kotlin_function(match: re.Match[str]) -> Optional[str]:
    name = match.group(1)
    return None if "." in name else name


def _java_member(match: re.Match[str]) -> Optional[str]:
    line = match.string
    paren = line.find("(")
    if paren < 0:
        return None
    equals = line.find("=")
    if 0 <= equals < paren:
        return None
    found = re.search(rf"({_IDENT})\s*\($", line[: paren + 1])
    return found.group(1) if found else None


_JS_EXPORTS: Sequence[Rule] = (
    (re.compile(rf"^export\s+default\s+(?:async\s+)?function\*?\s+({_IDENT})\s*[<(]"), _default),
    (re.compile(rf"^export\s+default\s+(?:abstract\s+)?class\s+({_IDENT})"), _default),
    (re.compile(rf"^export\s+default\s+({_IDENT})\s*;?\s*$"), _default),
    (re.compile(rf"^export\s+(?:async\s+)?function\*?\s+({_IDENT})\s*[<(]"), _group()),
    (re.compile(rf"^export\s+const\s+({_IDENT})"), _group()),
    (re.compile(rf"^export\s+interface\s+({_IDENT})"), _group()),
    (re.compile(rf"^export\s+type\s+({_IDENT})"), _group()),
    (re.compile(rf"^export\s+(?:abstract\s+)?class\s+({_IDENT})"), _group()),
)

_RUST_EXPORTS: Sequence[Rule] = (
    (
        re.compile(
            r'^pub\s+(?:const\s+)?(?:async\s+)?(?:unsafe\s+)?(?:extern\s+"[^"]*"\s+)?fn\s+([A-Za-z_]\w*)'
        ),
        _group(),
    ),
    (re.compile(r"^pub\s+(?:struct|enum|const|type|trait)\s+([A-Za-z_]\w*)"), _group()),
)

_PYTHON_EXPORTS: Sequence[Rule] = (
    (re.compile(r"^(?:async\s+)?def\s+([A-Za-z_]\w*)\s*\("), _public_python),
    (re.compile(r"^class\s+([A-Za-z_]\w*)"), _group()),
)

_GO_EXPORTS: Sequence[Rule] = (
    (re.compile(r"^func\s+([A-Z]\w*)\s*[\[(]"), _group()),
    (re.compile(r"^type\s+([A-Z]\w*)\b"), _group()),
)

_JAVA_EXPORTS: Sequence[Rule] = (
    (
        re.compile(
            r"^public\s+(?:(?:abstract|final|static|sealed|strictfp)\s+)*"
            r"(?:class|interface|enum|record|@interface)\s+([A-Za-z_$][\w$]*)"
        ),
        _group(),
    ),
    (re.compile(r"^public\s+.*\("), _java_member),
)

_KOTLIN_MODIFIERS = (
    r"(?:(?:public|internal|open|override|suspend|inline|operator|infix|tailrec|"
    r"abstract|final|sealed|enum|annotation|inner|value|external|expect|actual)\s+)*"
)

_KOTLIN_EXPORTS: Sequence[Rule] = (
    (re.compile(rf"^{_KOTLIN_MODIFIERS}fun\s+(?:<[^>]*>\s*)?([\w.]+)\s*\("), _kotlin_function),
    (
        re.compile(rf"^{_KOTLIN_MODIFIERS}(?:data\s+)?(?:fun\s+)?(?:class|object|interface)\s+([A-Za-z_]\w*)"),
        _group(),
    ),
)

_SWIFT_EXPORTS: Sequence[Rule] = (
    (
        re.compile(
            r"^(?:(?:public|open|internal|final|static|class|override|mutating|nonmutating|"
            r"indirect|@MainActor|@objc)\s+)*(?:func|class|struct|enum|protocol|actor)\s+([A-Za-z_]\w*)"
        ),
        _group(),
    ),
)

_EXPORT_RULES: Dict[str, Sequence[Rule]] = {
    **{language: _JS_EXPORTS for language in _JS_FAMILY},
    "rs": _RUST_EXPORTS,
    "py": _PYTHON_EXPORTS,
    "go": _GO_EXPORTS,
    "java": _JAVA_EXPORTS,
    "kt": _KOTLIN_EXPORTS,
    "swift": _SWIFT_EXPORTS,
}

_JS_IMPORT = re.compile(r"""^(?:import\b.*?\bfrom|\}\s*from)\s*['"]([^'"]+)['"]""")
_JS_INTERNAL_PREFIXES = ("@/", "./", "../")
_RUST_IMPORT = re.compile(r"^(?:pub\s+)?use\s+crate::([^;]+)")
_PY_FROM_IMPORT = re.compile(r"^from\s+(\S+)\s+import\b")
_PY_IMPORT = re.compile(r"^import\s+([\w.]+)")
_JVM_IMPORT = re.compile(r"^import\s+(?:static\s+)?([\w.*]+)")
_JVM_PLATFORM_PREFIXES = ("java.", "javax.", "kotlin.", "kotlinx.")
_SWIFT_IMPORT = re.compile(
    r"^(?:@testable\s+)?import\s+(?:(?:class|struct|enum|func|protocol|typealias|var|let)\s+)?([\w.]+)"
)
_SWIFT_SYSTEM_MODULES = frozenset({"Foundation", "UIKit", "SwiftUI", "Combine"})


def _too_large(text: str) -> bool:
    if len(text) * 4 <= MAX_FILE_BYTES:
        return False
    return len(text.encode("utf-8")) > MAX_FILE_BYTES


def _is_comment(stripped: str, language: str) -> bool:
    if stripped.startswith(("//", "/*", "*")):
        return True
    return language == "py" and stripped.startswith("#")


def _code_lines(text: str, language: str) -> Iterator[str]:
    for line in text.splitlines():
        stripped = line.strip()
        if stripped and not _is_comment(stripped, language):
            yield stripped


def _unique(values: Iterable[str]) -> List[str]:
    seen = set()
    result: List[str] = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


def detect_exports(text: str, language: str) -> List[str]:
    """Public names declared in *text*, in source order."""
    language = normalize_language(language)
    rules = _EXPORT_RULES.get(language)
    if not rules or _too_large(text):
        return []

    names: List[str] = []
    for line in _code_lines(text, language):
        for pattern, capture in rules:
            match = pattern.match(line)
            if match is None:
                continue
            name = capture(match)
            if name:
                names.append(name)
            break
    return _unique(names)


def _import_for(line: str, language: str) -> Optional[str]:
    if language in _JS_FAMILY:
        match = _JS_IMPORT.match(line)
        if match and match.group(1).startswith(_JS_INTERNAL_PREFIXES):
            return match.group(1)
        return None
    if language == "rs":
        match = _RUST_IMPORT.match(line)
        return "".join(match.group(1).split()) if match else None
    if language == "py":
        match = _PY_FROM_IMPORT.match(line)
        if match:
            return None if match.group(1) == "__future__" else match.group(1)
        match = _PY_IMPORT.match(line)
        return match.group(1) if match else None
    if language in {"java", "kt"}:
        match = _JVM_IMPORT.match(line)
        if match and not match.group(1).startswith(_JVM_PLATFORM_PREFIXES):
            return match.group(1)
        return None
    if language == "swift":
        match = _SWIFT_IMPORT.match(line)
        if match and match.group(1).split(".")[0] not in _SWIFT_SYSTEM_MODULES:
            return match.group(1)
        return None
    return None


def detect_imports(text: str, language: str) -> List[str]:
    """Project-internal import paths referenced by *text*, in source order."""
    language = normalize_language(language)
    if _too_large(text):
        return []
    imports = (_import_for(line, language) for line in _code_lines(text, language))
    return _unique(value for value in imports if value)


def extract_symbols(text: str, language: str) -> SymbolSet:
    """Return exports and internal imports for a source text."""
    return SymbolSet(exports=detect_exports(text, language), imports=detect_imports(text, language))


__all__ = ["DEFAULT_SUFFIX", "detect_exports", "detect_imports", "extract_symbols"]
