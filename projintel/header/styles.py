"""Comment styles used to embed documentation headers in source files."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

MODULE_MARKER = "@module"
DESCRIPTION_MARKER = "@description"
MARKERS = (MODULE_MARKER, DESCRIPTION_MARKER)

SECTION_HEADINGS: Dict[str, str] = {
    "PURPOSE:": "purpose",
    "DEPENDENCIES:": "dependencies",
    "EXPORTS:": "exports",
    "PATTERNS:": "patterns",
    "CLAUDE NOTES:": "claude_notes",
}

SECTION_END = re.compile(r"^[A-Z][A-Z0-9 _]*:$")

BLOCK = "block"
DOCSTRING = "docstring"
LINE = "line"


def is_heading(content: str) -> bool:
    return content in SECTION_HEADINGS or bool(SECTION_END.match(content))


@dataclass(frozen=True)
class CommentStyle:
    """How a header is opened, continued and closed in one comment syntax."""

    name: str
    kind: str
    line_prefix: str
    open: Optional[str] = None
    close: Optional[str] = None
    marker_first: bool = False

    @property
    def lead(self) -> str:
        return self.open if self.open is not None else self.line_prefix.strip()

    @property
    def blank_line(self) -> str:
        return self.line_prefix.rstrip()

    def render(self, content: Sequence[str]) -> List[str]:
        """Wrap header content lines (empty string = blank line) in this style."""
        lines: List[str] = []
        if self.open is not None:
            lines.append(self.open)
        for item in content:
            lines.append(f"{self.line_prefix}{item}".rstrip() if item else self.blank_line)
        if self.close is not None:
            lines.append(self.close)
        return lines

    def opens(self, line: str) -> bool:
        """Return True when *line* can be the first line of a header in this style."""
        stripped = line.strip()
        if not stripped.startswith(self.lead):
            return False
        if self.kind != LINE:
            return True
        if self.lead == "//" and stripped.startswith(("///", "//!")):
            return False
        if self.marker_first:
            return stripped[len(self.lead):].strip().startswith(MODULE_MARKER)
        return True

    def scan_header_end(self, lines: Sequence[str], start: int) -> Optional[int]:
        """Index of the last header line for a header opening at *start*, or None."""
        if start >= len(lines) or not self.opens(lines[start]):
            return None
        if self.kind == BLOCK:
            return self._scan_delimited(lines, start, "*/")
        if self.kind == DOCSTRING:
            return self._scan_delimited(lines, start, '"""')
        return self._scan_line_run(lines, start)

    def _scan_delimited(self, lines: Sequence[str], start: int, terminator: str) -> Optional[int]:
        first = lines[start].strip()
        if terminator in first[len(self.lead):]:
            return start
        for index in range(start + 1, len(lines)):
            if terminator in lines[index]:
                return index
        return None

    def _scan_line_run(self, lines: Sequence[str], start: int) -> Optional[int]:
        prefix = self.lead
        last: Optional[int] = None
        in_section = False
        for index in range(start, len(lines)):
            stripped = lines[index].strip()
            if not stripped:
                continue
            if not stripped.startswith(prefix):
                break
            if prefix == "//" and stripped.startswith(("///", "//!")):
                break
            content = stripped[len(prefix):].strip()
            if not content:
                continue
            if content.startswith(MARKERS):
                in_section = False
            elif is_heading(content):
                in_section = True
            elif not (in_section and content.startswith("-")):
                break
            last = index
        return last


BLOCK_STAR = CommentStyle("block-star", BLOCK, " * ", open="/**", close=" */")
TRIPLE_QUOTE = CommentStyle("triple-quote", DOCSTRING, "", open='"""', close='"""')
DOUBLE_SLASH_BANG = CommentStyle("double-slash-bang", LINE, "//! ")
TRIPLE_SLASH = CommentStyle("triple-slash", LINE, "/// ")
DOUBLE_SLASH = CommentStyle("double-slash", LINE, "// ", marker_first=True)

STYLES = (BLOCK_STAR, TRIPLE_QUOTE, DOUBLE_SLASH_BANG, TRIPLE_SLASH, DOUBLE_SLASH)

_STYLE_BY_LANGUAGE: Dict[str, CommentStyle] = {
    "ts": BLOCK_STAR,
    "tsx": BLOCK_STAR,
    "js": BLOCK_STAR,
    "jsx": BLOCK_STAR,
    "java": BLOCK_STAR,
    "kt": BLOCK_STAR,
    "rs": DOUBLE_SLASH_BANG,
    "swift": TRIPLE_SLASH,
    "py": TRIPLE_QUOTE,
    "go": DOUBLE_SLASH,
}


def normalize_language(language: str) -> str:
    return language.strip().lower().lstrip(".")


def style_for(language: str) -> CommentStyle:
    """Comment style for a language tag; unknown tags use the block style."""
    return _STYLE_BY_LANGUAGE.get(normalize_language(language), BLOCK_STAR)


def style_opening(line: str) -> Optional[CommentStyle]:
    """Infer the style whose opener starts *line* (longest opener wins)."""
    stripped = line.strip()
    if stripped.startswith("/**"):
        return BLOCK_STAR
    if stripped.startswith('"""'):
        return TRIPLE_QUOTE
    if stripped.startswith("//!"):
        return DOUBLE_SLASH_BANG
    if stripped.startswith("///"):
        return TRIPLE_SLASH
    if stripped.startswith("//"):
        return DOUBLE_SLASH
    return None


__all__ = [
    "BLOCK_STAR",
    "CommentStyle",
    "DESCRIPTION_MARKER",
    "DOUBLE_SLASH",
    "DOUBLE_SLASH_BANG",
    "MARKERS",
    "MODULE_MARKER",
    "SECTION_HEADINGS",
    "STYLES",
    "TRIPLE_QUOTE",
    "TRIPLE_SLASH",
    "is_heading",
    "normalize_language",
    "style_for",
    "style_opening",
]
