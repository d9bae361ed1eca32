"""CLI parser and command behaviour tests."""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from projintel.cli import _build_parser, main
from tests._fixtures.repo_builder import RepoBuilder


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "scan"])
    assert args.verbose is True
    assert args.command == "scan"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["health", "repo", "--verbose"])
    assert args.verbose is True
    assert args.command == "health"
    assert args.path == "repo"


def test_cli_parses_header_generate_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(["header", "generate", "a.ts", "b.ts", "--root", "proj", "--apply"])
    assert args.header_command == "generate"
    assert args.files == [Path("a.ts"), Path("b.ts")]
    assert args.root == Path("proj")
    assert args.apply is True
    assert args.enhance is False


def test_cli_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        _build_parser().parse_args([])


def test_detect_prints_stack_json(repo_builder: RepoBuilder, capsys) -> None:
    repo_builder.write({"tsconfig.json": "{}", "src/app.ts": "export const a = 1;\n"})

    assert main(["detect", str(repo_builder.path())]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["language"]["value"] == "TypeScript"
    assert payload["projectName"] == "repo"


def test_scan_reports_missing_root(tmp_path: Path, capsys) -> None:
    assert main(["scan", str(tmp_path / "missing")]) == 1

    payload = json.loads(capsys.readouterr().out)
    assert payload["error"]["kind"] == "path"


def test_scan_reads_header_stamps(repo_builder: RepoBuilder, tmp_path: Path, capsys) -> None:
    repo_builder.write({"src/util.py": "def run():\n    pass\n"})
    stamps = tmp_path / "stamps.json"
    stamps.write_text(json.dumps({"src/util.py": 0, "ignored": "soon"}), encoding="utf-8")

    assert main(["scan", str(repo_builder.path()), "--stamps", str(stamps)]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload == [{"path": "src/util.py", "status": "missing", "freshnessScore": 0}]


def test_header_format_and_apply(repo_builder: RepoBuilder, tmp_path: Path, capsys, monkeypatch) -> None:
    target = repo_builder.write_raw("src/util.py", "def run():\n    pass\n")
    doc = {"modulePath": "util", "description": "Runs things.", "exports": ["run - entry"]}
    doc_file = tmp_path / "doc.json"
    doc_file.write_text(json.dumps(doc), encoding="utf-8")

    assert main(["header", "format", str(doc_file), "--language", "py"]) == 0
    rendered = capsys.readouterr().out
    assert rendered.startswith('"""\n@module util\n@description Runs things.')

    monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(doc)))
    assert main(["header", "apply", str(target), "--doc", "-"]) == 0
    assert json.loads(capsys.readouterr().out)["status"] == "applied"

    assert main(["header", "show", str(target)]) == 0
    shown = json.loads(capsys.readouterr().out)
    assert shown["modulePath"] == "util"
    assert shown["exports"] == ["run - entry"]


def test_header_apply_rejects_invalid_json(repo_builder: RepoBuilder, tmp_path: Path, capsys) -> None:
    target = repo_builder.write_raw("src/util.py", "def run():\n    pass\n")
    doc_file = tmp_path / "doc.json"
    doc_file.write_text("[1, 2]", encoding="utf-8")

    assert main(["header", "apply", str(target), "--doc", str(doc_file)]) == 1

    assert json.loads(capsys.readouterr().out)["error"]["kind"] == "input"
    assert target.read_text(encoding="utf-8") == "def run():\n    pass\n"


def test_header_generate_prints_drafts(repo_builder: RepoBuilder, capsys) -> None:
    repo_builder.write({"src/util.py": "def run():\n    pass\n"})

    assert main(["header", "generate", "src/util.py", "--root", str(repo_builder.path())]) == 0

    [draft] = json.loads(capsys.readouterr().out)
    assert draft["modulePath"] == "util"
    assert draft["exports"] == ["run - TODO: what it does"]


def test_health_combines_caller_inputs(repo_builder: RepoBuilder, capsys) -> None:
    repo_builder.write({"CLAUDE.md": "x" * 201, "src/util.py": "def run():\n    pass\n"})

    exit_code = main(
        [
            "health",
            str(repo_builder.path()),
            "--skills",
            "2",
            "--context-used",
            "250",
            "--context-budget",
            "1000",
            "--enforcement",
            "5",
        ]
    )

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["components"] == {
        "claudeMd": 20,
        "moduleDocs": 0,
        "freshness": 0,
        "skills": 6,
        "context": 8,
        "enforcement": 5,
    }
    assert payload["total"] == 39
    assert payload["risk"] == "high"
