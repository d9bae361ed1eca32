"""Turn enhancer responses into documentation headers, whatever their shape."""

from __future__ import annotations

import json
import re
from dataclasses import replace
from typing import Any, Optional

from ..header import parse_header
from ..logging import get_logger
from ..models import DocHeader

logger = get_logger("enhance.salvage")

_FENCED_BLOCK = re.compile(r"```(?:json|JSON)?\s*\n(.*?)```", re.DOTALL)
_LEADING_MARKUP = re.compile(r"^(?:#+|\*+|-|>)\s*")


def _load_json(text: str) -> Optional[Any]:
    candidates = [match.group(1) for match in _FENCED_BLOCK.finditer(text)]
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        candidates.append(text[start : end + 1])
    for candidate in candidates:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue
    return None


def _first_line(text: str) -> str:
    for line in text.splitlines():
        cleaned = _LEADING_MARKUP.sub("", line.strip()).strip()
        if cleaned and not cleaned.startswith("```"):
            return cleaned
    return ""


def salvage_header(response: str, fallback: DocHeader) -> DocHeader:
    """Extract a header from *response*, keeping *fallback* fields it omits.

    JSON objects (bare or fenced) map onto the header fields. A response that
    is itself a header comment is parsed as one. Anything else is treated as
    prose and only its first line is kept, as the description.
    """
    text = response.strip()
    if not text:
        return fallback

    payload = _load_json(text)
    if isinstance(payload, dict):
        parsed = DocHeader.from_dict(payload)
        if not parsed.is_empty():
            return _merge(parsed, fallback)
        logger.debug("Enhancer JSON carried no header fields; using template")

    parsed_header = parse_header(text)
    if parsed_header is not None and not parsed_header.is_empty():
        return _merge(parsed_header, fallback)

    description = _first_line(text)
    if not description:
        return fallback
    return replace(fallback, description=description)


def _merge(parsed: DocHeader, fallback: DocHeader) -> DocHeader:
    return DocHeader(
        module_path=parsed.module_path or fallback.module_path,
        description=parsed.description or fallback.description,
        purpose=parsed.purpose or list(fallback.purpose),
        dependencies=parsed.dependencies or list(fallback.dependencies),
        exports=parsed.exports or list(fallback.exports),
        patterns=parsed.patterns or list(fallback.patterns),
        claude_notes=parsed.claude_notes or list(fallback.claude_notes),
    )


__all__ = ["salvage_header"]
