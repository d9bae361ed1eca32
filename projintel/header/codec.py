"""Parse, format, locate and apply documentation headers."""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence, Tuple

from ..errors import check_size
from ..models import DocHeader, HeaderExtent
from .styles import (
    DESCRIPTION_MARKER,
    MARKERS,
    MODULE_MARKER,
    SECTION_END,
    SECTION_HEADINGS,
    CommentStyle,
    style_for,
    style_opening,
)

PARSE_WINDOW = 60
MARKER_WINDOW = 40

# Longest tokens first so "//!" is not consumed as "//".
_LEADING_PREFIXES = ('"""', "/**", "*/", "//!", "///", "//", "*", "#")
_TRAILING_SUFFIXES = ("*/", '"""')
_CODING_COOKIE = re.compile(r"^[ \t\f]*#.*?coding[:=][ \t]*[-\w.]+")

_SECTIONS: Tuple[Tuple[str, str], ...] = tuple(
    (heading, attr) for heading, attr in SECTION_HEADINGS.items()
)


def _split_lines(text: str) -> List[str]:
    """Split on LF keeping terminators so offsets can be recomputed exactly."""
    pieces = text.split("\n")
    lines = [piece + "\n" for piece in pieces[:-1]]
    if pieces[-1]:
        lines.append(pieces[-1])
    return lines


def _preamble_end(lines: Sequence[str]) -> int:
    """Number of leading lines that must stay above a header.

    That is a shebang on the first line and a PEP 263 encoding cookie, which
    Python only honours on line one or two.
    """
    end = 0
    for index, line in enumerate(lines[:2]):
        if index == 0 and line.startswith("#!") and not line.startswith("#!["):
            end = 1
        elif _CODING_COOKIE.match(line):
            end = index + 1
    return end


def _first_content(lines: Sequence[str], start: int) -> Optional[int]:
    for index in range(start, len(lines)):
        if lines[index].strip():
            return index
    return None


def _strip_prefix(line: str) -> str:
    content = line.strip()
    for prefix in _LEADING_PREFIXES:
        if content.startswith(prefix):
            content = content[len(prefix):].strip()
            break
    for suffix in _TRAILING_SUFFIXES:
        if content.endswith(suffix):
            content = content[: -len(suffix)].strip()
            break
    return content


def _has_marker(lines: Sequence[str]) -> bool:
    return any(marker in line for line in lines for marker in MARKERS)


def _header_region(lines: Sequence[str]) -> Optional[List[str]]:
    """Lines of the leading comment when it is a recognisable header."""
    start = _first_content(lines, _preamble_end(lines))
    if start is None:
        return None
    style = style_opening(lines[start])
    if style is None:
        return None
    end = style.scan_header_end(lines, start)
    if end is None:
        return None
    region = list(lines[start : end + 1])
    return region if _has_marker(region) else None


def parse_header(text: str) -> Optional[DocHeader]:
    """Extract a DocHeader from file text, or None when no header is present.

    A marker token alone is not enough: at least one field must carry a
    value, so ``"@module"`` inside ordinary code does not count. Malformed
    sections are salvaged: unknown headings close the current section and
    stray lines are ignored, so this never raises.
    """
    lines = _split_lines(text)
    if not _has_marker(lines[:MARKER_WINDOW]):
        return None
    region = _header_region(lines)
    if region is None:
        region = lines[:PARSE_WINDOW]
    doc = _parse_lines(region)
    return None if doc.is_empty() else doc


def _parse_lines(lines: Sequence[str]) -> DocHeader:
    doc = DocHeader()
    sections: Dict[str, List[str]] = {attr: [] for _, attr in _SECTIONS}
    seen_module = False
    seen_description = False
    current: Optional[str] = None

    for raw in lines:
        content = _strip_prefix(raw)
        if not content:
            continue
        if content.startswith(MODULE_MARKER):
            if not seen_module:
                doc.module_path = content[len(MODULE_MARKER):].strip()
                seen_module = True
            current = None
            continue
        if content.startswith(DESCRIPTION_MARKER):
            if not seen_description:
                doc.description = content[len(DESCRIPTION_MARKER):].strip()
                seen_description = True
            current = None
            continue

        section = _match_section(content)
        if section is not None:
            current, inline = section
            if inline:
                sections[current].append(inline)
            continue
        if SECTION_END.match(content):
            current = None
            continue
        if current is not None and content.startswith("-"):
            sections[current].append(content[1:].strip())

    for attr, items in sections.items():
        setattr(doc, attr, items)
    return doc


def _match_section(content: str) -> Optional[Tuple[str, str]]:
    for heading, attr in _SECTIONS:
        if content == heading:
            return attr, ""
        if content.startswith(heading):
            # Salvage "PURPOSE: text" written on one line.
            return attr, content[len(heading):].strip().lstrip("-").strip()
    return None


def _clean(value: str) -> str:
    return " ".join(str(value).split())


def format_header(doc: DocHeader, language: str) -> str:
    """Render *doc* in the comment form of *language*, without a trailing newline."""
    return "\n".join(_render(doc, style_for(language)))


def _render(doc: DocHeader, style: CommentStyle) -> List[str]:
    content: List[str] = [
        f"{MODULE_MARKER} {_clean(doc.module_path)}".rstrip(),
        f"{DESCRIPTION_MARKER} {_clean(doc.description)}".rstrip(),
    ]
    for heading, attr in _SECTIONS:
        items = getattr(doc, attr)
        if not items:
            continue
        content.append("")
        content.append(heading)
        content.extend(f"- {_clean(item)}".rstrip() for item in items)
    return style.render(content)


def locate_header(text: str, language: str) -> Optional[HeaderExtent]:
    """Character range of the header leading *text*, including its line terminator."""
    lines = _split_lines(text)
    start = _first_content(lines, _preamble_end(lines))
    if start is None:
        return None
    end = style_for(language).scan_header_end(lines, start)
    if end is None or not _has_marker(lines[start : end + 1]):
        return None
    start_offset = sum(len(line) for line in lines[:start])
    end_offset = start_offset + sum(len(line) for line in lines[start : end + 1])
    return HeaderExtent(start=start_offset, end=end_offset)


def _newline_for(text: str) -> str:
    index = text.find("\n")
    if index > 0 and text[index - 1] == "\r":
        return "\r\n"
    return "\n"


def apply_header(body: str, doc: DocHeader, language: str) -> str:
    """Replace the existing header in *body* or prepend a new one.

    Raises SizeError when the body is larger than the 2 MB cap.
    """
    check_size("file body", body)
    newline = _newline_for(body)
    header = format_header(doc, language).replace("\n", newline)

    extent = locate_header(body, language)
    if extent is not None:
        return body[: extent.start] + header + newline + body[extent.end :]

    lines = _split_lines(body)
    insert_at = sum(len(line) for line in lines[: _preamble_end(lines)])
    return body[:insert_at] + header + newline + body[insert_at:]


__all__ = ["apply_header", "format_header", "locate_header", "parse_header"]
