"""Freshness verdicts and project health scoring."""

from .freshness import (
    PLACEHOLDER_MARKER,
    export_base,
    is_placeholder,
    item_name,
    mean_freshness,
    score_freshness,
)
from .health import (
    build_report,
    claude_md_score,
    compute_health,
    context_score,
    estimate_tokens,
    freshness_score,
    module_docs_score,
    quick_wins,
    risk_label,
    skills_score,
)
from .weights import (
    DEFAULT_FRESHNESS,
    DEFAULT_WEIGHTS,
    FreshnessPolicy,
    ScoringWeights,
    validate_weights,
)

__all__ = [
    "DEFAULT_FRESHNESS",
    "DEFAULT_WEIGHTS",
    "FreshnessPolicy",
    "PLACEHOLDER_MARKER",
    "ScoringWeights",
    "build_report",
    "claude_md_score",
    "compute_health",
    "context_score",
    "estimate_tokens",
    "export_base",
    "freshness_score",
    "is_placeholder",
    "item_name",
    "mean_freshness",
    "module_docs_score",
    "quick_wins",
    "risk_label",
    "skills_score",
    "score_freshness",
    "validate_weights",
]
