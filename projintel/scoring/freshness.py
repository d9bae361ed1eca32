"""Per-file staleness scoring: compare a header with the symbols of its file."""

from __future__ import annotations

import re
from datetime import datetime
from typing import List, Optional, Sequence, Union

from ..models import CURRENT, MISSING, OUTDATED, DocHeader, FreshnessVerdict, SymbolSet
from ..symbols import extract_symbols
from .weights import DEFAULT_FRESHNESS, FreshnessPolicy

Timestamp = Union[datetime, float, int]

_SECONDS_PER_DAY = 86_400
_PAREN_SUFFIX = re.compile(r"\s*\([^)]*\)\s*$")

PLACEHOLDER_MARKER = "TODO"


def item_name(item: str) -> str:
    """Return the name part of a header list item (text before `` - ``)."""
    return item.split(" - ", 1)[0].strip().strip("`").strip()


def export_base(name: str) -> str:
    """Display form of an export name with any parenthesised suffix removed."""
    return _PAREN_SUFFIX.sub("", item_name(name)).strip()


def is_placeholder(text: str) -> bool:
    """True when *text* still carries the generator's ``TODO`` marker."""
    return PLACEHOLDER_MARKER in text


def _export_key(name: str) -> str:
    return export_base(name).lower()


def _paths_match(listed: str, current: str) -> bool:
    listed = listed.lower()
    current = current.lower()
    return listed in current or current in listed


def _as_seconds(value: Timestamp) -> float:
    if isinstance(value, datetime):
        return value.timestamp()
    return float(value)


def _export_changes(
    header: DocHeader, symbols: SymbolSet, policy: FreshnessPolicy
) -> tuple[int, List[str]]:
    deduction = 0
    changes: List[str] = []
    current_keys = {_export_key(name) for name in symbols.exports}
    listed = [export_base(item) for item in header.exports if export_base(item)]
    listed_keys = {name.lower() for name in listed}

    for name in listed:
        if name.lower() not in current_keys:
            deduction += policy.missing_export
            changes.append(f"Listed export missing from code: {name}")

    for name in symbols.exports:
        base = export_base(name)
        if base.lower() not in listed_keys:
            deduction += policy.unlisted_export
            changes.append(f"Current export not listed in header: {base}")
    return deduction, changes


def _import_changes(
    header: DocHeader, symbols: SymbolSet, policy: FreshnessPolicy
) -> tuple[int, List[str]]:
    deduction = 0
    changes: List[str] = []
    listed = [item_name(item) for item in header.dependencies if item_name(item)]

    for path in listed:
        if not any(_paths_match(path, current) for current in symbols.imports):
            deduction += policy.stale_import
            changes.append(f"Listed import no longer present: {path}")

    for current in symbols.imports:
        if not any(_paths_match(path, current) for path in listed):
            deduction += policy.unlisted_import
            changes.append(f"Current internal import not listed: {current}")
    return deduction, changes


def _drift_days(mtime: Optional[Timestamp], header_updated_at: Optional[Timestamp]) -> Optional[int]:
    if mtime is None or header_updated_at is None:
        return None
    delta = _as_seconds(mtime) - _as_seconds(header_updated_at)
    return int(delta // _SECONDS_PER_DAY)


def score_freshness(
    text: str,
    header: Optional[DocHeader],
    language: str,
    *,
    mtime: Optional[Timestamp] = None,
    header_updated_at: Optional[Timestamp] = None,
    policy: FreshnessPolicy = DEFAULT_FRESHNESS,
    symbols: Optional[SymbolSet] = None,
) -> FreshnessVerdict:
    """Score how well *header* still describes *text*.

    ``header_updated_at`` is the moment the header was last written; the
    modification-time signal is only evaluated when the caller supplies it.
    Pre-extracted *symbols* may be passed to avoid scanning the text twice.
    """
    if header is None:
        return FreshnessVerdict(score=0, status=MISSING, changes=[])

    if symbols is None:
        symbols = extract_symbols(text, language)

    score = 100
    changes: List[str] = []

    deduction, found = _export_changes(header, symbols, policy)
    score -= deduction
    changes.extend(found)

    deduction, found = _import_changes(header, symbols, policy)
    score -= deduction
    changes.extend(found)

    days = _drift_days(mtime, header_updated_at)
    if days is not None and days > policy.grace_days:
        score -= policy.modified_after_header
        changes.append(f"Source modified {days} days after header update")

    if not header.description.strip():
        score -= policy.empty_description
        changes.append("Header description is empty")
    elif is_placeholder(header.description):
        score -= policy.placeholder_description
        changes.append("Header description is a placeholder")

    # An omitted PURPOSE section is allowed; one left as template text is not.
    if header.purpose and all(is_placeholder(item) for item in header.purpose):
        score -= policy.placeholder_purpose
        changes.append("Header purpose only holds placeholders")

    score = max(0, score)
    status = CURRENT if score >= policy.current_cutoff else OUTDATED
    return FreshnessVerdict(score=score, status=status, changes=changes)


def mean_freshness(verdicts: Sequence[FreshnessVerdict]) -> Optional[float]:
    """Mean score over documented files; current files count as fully fresh."""
    documented = [verdict for verdict in verdicts if verdict.status != MISSING]
    if not documented:
        return None
    total = sum(100 if verdict.status == CURRENT else verdict.score for verdict in documented)
    return total / len(documented)


__all__ = [
    "PLACEHOLDER_MARKER",
    "export_base",
    "is_placeholder",
    "item_name",
    "mean_freshness",
    "score_freshness",
]
