"""Tests for enhancer prompt rendering."""

from __future__ import annotations

import json

from projintel.enhance import PromptRenderer, truncate
from projintel.generator import template_header
from projintel.models import SymbolSet


def test_truncate_reports_cut() -> None:
    assert truncate("abcdef", 4) == ("abcd", True)
    assert truncate("abc", 4) == ("abc", False)
    assert truncate("abc", 0) == ("abc", False)


def test_render_includes_symbols_draft_and_source() -> None:
    symbols = SymbolSet(exports=["slugify"], imports=["./text"])
    draft = template_header("src/util.ts", symbols)

    prompts = PromptRenderer().render("src/util.ts", "ts", "export function slugify() {}", symbols, draft)

    assert "JSON object" in prompts.system
    assert "File: src/util.ts" in prompts.user
    assert "Module path: util" in prompts.user
    assert "- slugify" in prompts.user
    assert "- ./text" in prompts.user
    assert json.dumps(draft.to_dict()["description"]) in prompts.user
    assert "export function slugify() {}" in prompts.user
    assert "truncated" not in prompts.user


def test_render_truncates_long_sources() -> None:
    symbols = SymbolSet()
    draft = template_header("big.py", symbols)
    source = "x = 1\n" * 100

    prompts = PromptRenderer(max_input_chars=30).render("big.py", "py", source, symbols, draft)

    assert "truncated to the first 30 characters" in prompts.user
    assert "Detected exports: none" in prompts.user
    assert source not in prompts.user
    assert source[:30] in prompts.user
