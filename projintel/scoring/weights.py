"""Scoring weights, freshness deductions and cutoffs."""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from typing import Dict


@dataclass(frozen=True)
class ScoringWeights:
    """Caps for each health component; they must add up to 100."""

    claude_md: int = 25
    module_docs: int = 25
    freshness: int = 15
    skills: int = 15
    context: int = 10
    enforcement: int = 10

    def total(self) -> int:
        return sum(getattr(self, item.name) for item in fields(self))

    def as_dict(self) -> Dict[str, int]:
        return {item.name: getattr(self, item.name) for item in fields(self)}


@dataclass(frozen=True)
class FreshnessPolicy:
    """Per-signal deductions applied to a header's freshness score."""

    missing_export: int = 15
    unlisted_export: int = 10
    stale_import: int = 5
    unlisted_import: int = 3
    modified_after_header: int = 5
    empty_description: int = 10
    placeholder_description: int = 15
    placeholder_purpose: int = 12
    grace_days: int = 30
    current_cutoff: int = 80


def validate_weights(weights: ScoringWeights) -> ScoringWeights:
    total = weights.total()
    if total != 100:
        raise ValueError(f"Health weights must sum to 100, got {total}")
    return weights


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp(value: int, cap: int) -> int:
    return max(0, min(int(value), cap))


DEFAULT_WEIGHTS = validate_weights(ScoringWeights())
DEFAULT_FRESHNESS = FreshnessPolicy()

__all__ = [
    "DEFAULT_FRESHNESS",
    "DEFAULT_WEIGHTS",
    "FreshnessPolicy",
    "ScoringWeights",
    "clamp",
    "round_half_up",
    "validate_weights",
]
