"""Tests for per-file freshness verdicts."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from projintel.models import CURRENT, MISSING, OUTDATED, DocHeader, FreshnessVerdict
from projintel.scoring import FreshnessPolicy, mean_freshness, score_freshness

APP_HEADER = DocHeader(module_path="app", description="Entry.", exports=["App (default)"])
APP_BODY = "export default function App() {}\n"


def test_missing_header_scores_zero() -> None:
    verdict = score_freshness(APP_BODY, None, "tsx")

    assert (verdict.score, verdict.status, verdict.changes) == (0, MISSING, [])


def test_matching_header_is_fully_fresh() -> None:
    verdict = score_freshness(APP_BODY, APP_HEADER, "tsx")

    assert (verdict.score, verdict.status, verdict.changes) == (100, CURRENT, [])


def test_unlisted_export_costs_ten() -> None:
    body = APP_BODY + "export function helper() {}\n"

    verdict = score_freshness(body, APP_HEADER, "tsx")

    assert verdict.score == 90
    assert verdict.status == CURRENT
    assert verdict.changes == ["Current export not listed in header: helper"]


def test_listed_export_missing_costs_fifteen() -> None:
    header = DocHeader(
        module_path="app",
        description="Entry.",
        exports=["App (default) - root component", "removedHelper - gone"],
    )

    verdict = score_freshness(APP_BODY, header, "tsx")

    assert verdict.score == 85
    assert verdict.changes == ["Listed export missing from code: removedHelper"]


def test_export_names_compare_case_insensitively_on_base_name() -> None:
    header = DocHeader(module_path="app", description="Entry.", exports=["app (component)"])

    assert score_freshness(APP_BODY, header, "tsx").score == 100


def test_import_drift() -> None:
    header = DocHeader(
        module_path="app",
        description="Entry.",
        dependencies=["./old - removed module", "./utils - helpers"],
        exports=["App (default)"],
    )
    body = (
        'import { format } from "./utils/format";\n'
        'import { api } from "@/lib/api";\n'
        + APP_BODY
    )

    verdict = score_freshness(body, header, "tsx")

    assert verdict.score == 100 - 5 - 3
    assert verdict.changes == [
        "Listed import no longer present: ./old",
        "Current internal import not listed: @/lib/api",
    ]


def test_empty_description_costs_ten() -> None:
    header = DocHeader(module_path="app", exports=["App (default)"])

    verdict = score_freshness(APP_BODY, header, "tsx")

    assert verdict.score == 90
    assert verdict.changes == ["Header description is empty"]


def test_placeholder_description_costs_fifteen() -> None:
    header = DocHeader(
        module_path="app", description="TODO: Describe what app does", exports=["App (default)"]
    )

    verdict = score_freshness(APP_BODY, header, "tsx")

    assert (verdict.score, verdict.status) == (85, CURRENT)
    assert verdict.changes == ["Header description is a placeholder"]


def test_placeholder_only_purpose_costs_twelve() -> None:
    header = DocHeader(
        module_path="app",
        description="Entry.",
        purpose=["TODO: Describe the main responsibility of app"],
        exports=["App (default)"],
    )

    verdict = score_freshness(APP_BODY, header, "tsx")

    assert verdict.score == 88
    assert verdict.changes == ["Header purpose only holds placeholders"]


def test_written_purpose_or_omitted_purpose_is_not_penalised() -> None:
    partly_written = DocHeader(
        module_path="app",
        description="Entry.",
        purpose=["Mounts the root component", "TODO: mention routing"],
        exports=["App (default)"],
    )

    assert score_freshness(APP_BODY, partly_written, "tsx").score == 100
    assert score_freshness(APP_BODY, APP_HEADER, "tsx").score == 100


def test_untouched_template_header_drops_below_cutoff() -> None:
    header = DocHeader(
        module_path="notes",
        description="TODO: Describe what notes does",
        purpose=["TODO: Describe the main responsibility of notes"],
    )

    verdict = score_freshness("const local = 1;\n", header, "ts")

    assert (verdict.score, verdict.status) == (73, OUTDATED)
    assert verdict.changes == [
        "Header description is a placeholder",
        "Header purpose only holds placeholders",
    ]


def test_modification_after_header_beyond_grace_period() -> None:
    header_time = datetime(2026, 1, 1, tzinfo=timezone.utc)
    modified = header_time + timedelta(days=45)

    verdict = score_freshness(
        APP_BODY,
        APP_HEADER,
        "tsx",
        mtime=modified.timestamp(),
        header_updated_at=header_time,
    )

    assert verdict.score == 95
    assert verdict.changes == ["Source modified 45 days after header update"]


def test_modification_within_grace_period_or_without_stamp_is_ignored() -> None:
    header_time = datetime(2026, 1, 1, tzinfo=timezone.utc)
    modified = header_time + timedelta(days=10)

    within = score_freshness(
        APP_BODY, APP_HEADER, "tsx", mtime=modified.timestamp(), header_updated_at=header_time
    )
    unstamped = score_freshness(APP_BODY, APP_HEADER, "tsx", mtime=modified.timestamp())

    assert within.score == 100
    assert unstamped.score == 100


def test_score_floors_at_zero_and_status_is_outdated() -> None:
    header = DocHeader(exports=[f"gone{i}" for i in range(10)])

    verdict = score_freshness(APP_BODY, header, "tsx")

    assert verdict.score == 0
    assert verdict.status == OUTDATED


def test_custom_cutoff() -> None:
    body = APP_BODY + "export function helper() {}\n"

    verdict = score_freshness(body, APP_HEADER, "tsx", policy=FreshnessPolicy(current_cutoff=95))

    assert verdict.status == OUTDATED


def test_mean_freshness_counts_current_files_as_fresh() -> None:
    verdicts = [
        FreshnessVerdict(90, CURRENT),
        FreshnessVerdict(50, OUTDATED),
        FreshnessVerdict(0, MISSING),
    ]

    assert mean_freshness(verdicts) == 75
    assert mean_freshness([FreshnessVerdict(0, MISSING)]) is None
