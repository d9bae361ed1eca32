"""Project health aggregation and quick-win ranking."""

from __future__ import annotations

import math
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..models import HealthComponents, HealthInputs, HealthReport, QuickWin
from .weights import DEFAULT_WEIGHTS, ScoringWeights, clamp, round_half_up

CLAUDE_MD_PRESENT = 10
LONG_CONTENT, LONG_BONUS = 200, 10
SHORT_CONTENT, SHORT_BONUS = 50, 5
MANY_HEADINGS, MANY_BONUS = 3, 5
ONE_HEADING_BONUS = 2
POINTS_PER_SKILL = 3

LOW_RISK_TOTAL = 70
MEDIUM_RISK_TOTAL = 40


def estimate_tokens(text: str) -> int:
    """Approximate token count: one token per four characters, rounded up."""
    return math.ceil(len(text) / 4)


def claude_md_score(text: Optional[str], cap: int = DEFAULT_WEIGHTS.claude_md) -> int:
    """Score a CLAUDE.md body; ``None`` means the file does not exist."""
    if text is None:
        return 0
    score = CLAUDE_MD_PRESENT
    if len(text) > LONG_CONTENT:
        score += LONG_BONUS
    elif len(text) > SHORT_CONTENT:
        score += SHORT_BONUS

    headings = sum(1 for line in text.splitlines() if line.startswith("## "))
    if headings >= MANY_HEADINGS:
        score += MANY_BONUS
    elif headings >= 1:
        score += ONE_HEADING_BONUS
    return clamp(score, cap)


def module_docs_score(documented: int, documentable: int, cap: int = DEFAULT_WEIGHTS.module_docs) -> int:
    if documentable <= 0:
        return 0
    coverage = min(documented, documentable) / documentable
    return clamp(round_half_up(coverage * cap), cap)


def freshness_score(mean: Optional[float], cap: int = DEFAULT_WEIGHTS.freshness) -> int:
    """Scale a mean per-file freshness (0-100) onto the component cap."""
    if mean is None:
        return 0
    return clamp(round_half_up(mean / 100 * cap), cap)


def skills_score(count: int, cap: int = DEFAULT_WEIGHTS.skills) -> int:
    return clamp(count * POINTS_PER_SKILL, cap)


def context_score(used_tokens: int, budget: int, cap: int = DEFAULT_WEIGHTS.context) -> int:
    """Invert token-budget utilisation: an empty context earns the full cap."""
    if budget <= 0:
        return 0
    return clamp(round_half_up((1 - used_tokens / budget) * cap), cap)


def risk_label(total: int) -> str:
    if total >= LOW_RISK_TOTAL:
        return "low"
    if total >= MEDIUM_RISK_TOTAL:
        return "medium"
    return "high"


WinText = Tuple[str, str, str]


def _claude_md_win(observed: int, has_docs: bool) -> WinText:
    if observed == 0:
        return (
            "Create CLAUDE.md",
            "Add a CLAUDE.md at the project root describing architecture and conventions.",
            "low",
        )
    return (
        "Improve CLAUDE.md",
        "Expand CLAUDE.md with more detail and '## ' sections for each area of the project.",
        "low",
    )


def _module_docs_win(observed: int, has_docs: bool) -> WinText:
    if observed == 0:
        return (
            "Add module documentation",
            "Generate documentation headers for the project's source modules.",
            "medium",
        )
    return (
        "Increase module doc coverage",
        "Add headers to the remaining undocumented source files.",
        "medium",
    )


def _freshness_win(observed: int, has_docs: bool) -> WinText:
    if not has_docs:
        return (
            "Keep module docs fresh",
            "Freshness is measured once modules carry documentation headers.",
            "medium",
        )
    if observed == 0:
        return (
            "Update stale documentation",
            "Regenerate headers whose exports and imports no longer match the code.",
            "medium",
        )
    return (
        "Fix outdated module docs",
        "Review the outdated headers reported by the module scan.",
        "low",
    )


def _skills_win(observed: int, has_docs: bool) -> WinText:
    if observed == 0:
        return (
            "Create reusable skills",
            "Capture recurring workflows as skills the assistant can reuse.",
            "medium",
        )
    return ("Add more skills", "Cover more recurring workflows with skills.", "low")


def _context_win(observed: int, has_docs: bool) -> WinText:
    return (
        "Reduce context usage",
        "Trim always-loaded context so more of the token budget is free for work.",
        "medium",
    )


def _enforcement_win(observed: int, has_docs: bool) -> WinText:
    if observed == 0:
        return (
            "Enable enforcement hooks",
            "Turn on hooks that keep documentation and conventions enforced.",
            "low",
        )
    return (
        "Strengthen enforcement",
        "Enable the remaining enforcement rules for the project.",
        "low",
    )


_WIN_BUILDERS: Sequence[Tuple[str, Callable[[int, bool], WinText]]] = (
    ("claude_md", _claude_md_win),
    ("module_docs", _module_docs_win),
    ("freshness", _freshness_win),
    ("skills", _skills_win),
    ("context", _context_win),
    ("enforcement", _enforcement_win),
)


def quick_wins(
    components: HealthComponents,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> List[QuickWin]:
    """One win per component below its cap, ranked by recoverable points."""
    caps: Dict[str, int] = weights.as_dict()
    has_docs = components.module_docs > 0
    ranked: List[Tuple[int, int, QuickWin]] = []
    for name, builder in _WIN_BUILDERS:
        cap = caps[name]
        observed = getattr(components, name)
        if observed >= cap:
            continue
        title, description, effort = builder(observed, has_docs)
        win = QuickWin(title=title, description=description, impact=cap - observed, effort=effort)
        ranked.append((win.impact, cap, win))
    ranked.sort(key=lambda item: (-item[0], -item[1]))
    return [win for _, _, win in ranked]


def build_report(
    components: HealthComponents, weights: ScoringWeights = DEFAULT_WEIGHTS
) -> HealthReport:
    """Clamp every component to its cap and derive total, risk and quick wins."""
    caps = weights.as_dict()
    bounded = HealthComponents(
        **{name: clamp(getattr(components, name), cap) for name, cap in caps.items()}
    )
    total = sum(getattr(bounded, name) for name in caps)
    return HealthReport(
        total=total,
        components=bounded,
        quick_wins=quick_wins(bounded, weights),
        risk=risk_label(total),
    )


def compute_health(
    inputs: HealthInputs,
    *,
    claude_md_text: Optional[str] = None,
    documented: int = 0,
    documentable: int = 0,
    mean: Optional[float] = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> HealthReport:
    """Combine caller-supplied components with ones measured from the project.

    ``claude_md``, ``module_docs`` and ``freshness`` on *inputs* override the
    measured values; the remaining components always come from the caller.
    """
    components = HealthComponents(
        claude_md=(
            inputs.claude_md
            if inputs.claude_md is not None
            else claude_md_score(claude_md_text, weights.claude_md)
        ),
        module_docs=(
            inputs.module_docs
            if inputs.module_docs is not None
            else module_docs_score(documented, documentable, weights.module_docs)
        ),
        freshness=(
            inputs.freshness
            if inputs.freshness is not None
            else freshness_score(mean, weights.freshness)
        ),
        skills=inputs.skills,
        context=inputs.context,
        enforcement=inputs.enforcement,
    )
    return build_report(components, weights)


__all__ = [
    "build_report",
    "claude_md_score",
    "compute_health",
    "context_score",
    "estimate_tokens",
    "freshness_score",
    "module_docs_score",
    "quick_wins",
    "risk_label",
    "skills_score",
]
