"""Tests for projintel.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from projintel.config import ConfigError, EngineConfig, EnhancerConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, EngineConfig)
    assert config.root == tmp_path.resolve()
    assert config.enhancer is None
    assert config.exclude_paths == []
    assert config.max_depth == 10
    assert config.freshness.grace_days == 30
    assert config.freshness.current_cutoff == 80


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".projintel.yml"
    config_file.write_text(
        """
enhancer:
  runner: "http"
  model: "llama3:8b-instruct"
  temperature: 0.15
  max_tokens: 256
  base_url: "http://localhost:12434/engines/v1"
  api_key: "test-key"
  request_timeout: 60
  max_input_chars: 4000
freshness:
  grace_days: 14
  current_cutoff: 90
exclude_paths:
  - "sandbox/"
  - "*.generated.ts"
max_depth: 6
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert isinstance(config.enhancer, EnhancerConfig)
    assert config.enhancer.runner == "http"
    assert config.enhancer.model == "llama3:8b-instruct"
    assert config.enhancer.temperature == pytest.approx(0.15)
    assert config.enhancer.max_tokens == 256
    assert config.enhancer.base_url == "http://localhost:12434/engines/v1"
    assert config.enhancer.api_key == "test-key"
    assert config.enhancer.request_timeout == pytest.approx(60.0)
    assert config.enhancer.max_input_chars == 4000

    assert config.freshness.grace_days == 14
    assert config.freshness.current_cutoff == 90
    assert config.exclude_paths == ["sandbox/", "*.generated.ts"]
    assert config.max_depth == 6


def test_load_config_ignores_invalid_values(tmp_path: Path) -> None:
    (tmp_path / ".projintel.yml").write_text(
        """
freshness:
  grace_days: -3
  current_cutoff: 250
exclude_paths: "dist/"
max_depth: "deep"
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.freshness.grace_days == 30
    assert config.freshness.current_cutoff == 100
    assert config.exclude_paths == ["dist/"]
    assert config.max_depth == 10


def test_empty_config_file_yields_defaults(tmp_path: Path) -> None:
    (tmp_path / ".projintel.yml").write_text("\n", encoding="utf-8")

    assert load_config(tmp_path).exclude_paths == []


@pytest.mark.parametrize("content", ["enhancer: [unclosed\n", "- just\n- a list\n"])
def test_malformed_config_raises(tmp_path: Path, content: str) -> None:
    (tmp_path / ".projintel.yml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError) as excinfo:
        load_config(tmp_path)

    assert excinfo.value.to_dict()["kind"] == "config"
