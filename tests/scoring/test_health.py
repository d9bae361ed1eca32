"""Tests for project health scoring."""

from __future__ import annotations

import pytest

from projintel.models import HealthComponents, HealthInputs
from projintel.scoring import (
    DEFAULT_WEIGHTS,
    ScoringWeights,
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
    validate_weights,
)


def test_default_weights_sum_to_one_hundred() -> None:
    assert DEFAULT_WEIGHTS.total() == 100
    assert DEFAULT_WEIGHTS.as_dict() == {
        "claude_md": 25,
        "module_docs": 25,
        "freshness": 15,
        "skills": 15,
        "context": 10,
        "enforcement": 10,
    }


def test_invalid_weights_are_rejected() -> None:
    with pytest.raises(ValueError):
        validate_weights(ScoringWeights(claude_md=30))


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        (None, 0),
        ("", 10),
        ("## Overview\n" + "x" * 48, 17),
        ("x" * 201, 20),
        ("## A\n## B\n## C\n" + "x" * 200, 25),
        ("# Title\n### Not counted\n", 10),
    ],
)
def test_claude_md_score(text: str | None, expected: int) -> None:
    assert claude_md_score(text) == expected


def test_module_docs_score_rounds_half_up() -> None:
    assert module_docs_score(0, 0) == 0
    assert module_docs_score(0, 3) == 0
    assert module_docs_score(1, 2) == 13
    assert module_docs_score(1, 3) == 8
    assert module_docs_score(3, 3) == 25


def test_freshness_score_scales_mean() -> None:
    assert freshness_score(None) == 0
    assert freshness_score(100) == 15
    assert freshness_score(50) == 8
    assert freshness_score(0) == 0


def test_caller_helpers() -> None:
    assert skills_score(0) == 0
    assert skills_score(2) == 6
    assert skills_score(9) == 15
    assert context_score(0, 1000) == 10
    assert context_score(250, 1000) == 8
    assert context_score(2000, 1000) == 0
    assert context_score(10, 0) == 0
    assert estimate_tokens("") == 0
    assert estimate_tokens("abcde") == 2


@pytest.mark.parametrize(("total", "label"), [(100, "low"), (70, "low"), (69, "medium"), (40, "medium"), (39, "high")])
def test_risk_label(total: int, label: str) -> None:
    assert risk_label(total) == label


def test_report_clamps_components_to_caps() -> None:
    report = build_report(
        HealthComponents(claude_md=40, module_docs=-5, freshness=15, skills=15, context=10, enforcement=99)
    )

    assert report.components.to_dict() == {
        "claudeMd": 25,
        "moduleDocs": 0,
        "freshness": 15,
        "skills": 15,
        "context": 10,
        "enforcement": 10,
    }
    assert report.total == 75
    assert report.risk == "low"
    assert [win.title for win in report.quick_wins] == ["Add module documentation"]
    assert report.quick_wins[0].impact == 25


def test_quick_wins_order_by_impact_then_cap() -> None:
    components = HealthComponents(
        claude_md=15, module_docs=20, freshness=5, skills=15, context=0, enforcement=10
    )

    wins = quick_wins(components)

    # claudeMd 10 (cap 25), freshness 10 (cap 15), context 10 (cap 10), moduleDocs 5
    assert [(win.title, win.impact) for win in wins] == [
        ("Improve CLAUDE.md", 10),
        ("Fix outdated module docs", 10),
        ("Reduce context usage", 10),
        ("Increase module doc coverage", 5),
    ]


def test_quick_wins_for_empty_project() -> None:
    wins = quick_wins(HealthComponents())

    assert [win.title for win in wins] == [
        "Create CLAUDE.md",
        "Add module documentation",
        "Keep module docs fresh",
        "Create reusable skills",
        "Reduce context usage",
        "Enable enforcement hooks",
    ]
    assert [win.effort for win in wins] == ["low", "medium", "medium", "medium", "medium", "low"]


def test_compute_health_prefers_caller_components() -> None:
    report = compute_health(
        HealthInputs(claude_md=20, module_docs=25, freshness=15, skills=6, context=8, enforcement=5),
        claude_md_text=None,
        documented=0,
        documentable=10,
    )

    assert report.total == 20 + 25 + 15 + 6 + 8 + 5
    assert report.to_dict()["components"]["claudeMd"] == 20


def test_compute_health_measures_missing_components() -> None:
    report = compute_health(
        HealthInputs(skills=15, context=10, enforcement=10),
        claude_md_text="## Overview\n" + "x" * 48,
        documented=1,
        documentable=2,
        mean=100.0,
    )

    assert report.components.claude_md == 17
    assert report.components.module_docs == 13
    assert report.components.freshness == 15
    assert report.total == 17 + 13 + 15 + 35
    assert report.risk == "low"
