"""Tests for the header enhancer transports."""

from __future__ import annotations

import json
import subprocess
from urllib.error import URLError

import pytest

from projintel.config import EnhancerConfig
from projintel.enhance import LLMEnhancer
from projintel.errors import EnhancerError

_ENV_KEYS = (
    "PROJINTEL_LLM_MODEL",
    "PROJINTEL_LLM_BASE_URL",
    "PROJINTEL_LLM_API_KEY",
    "OPENAI_MODEL",
    "OPENAI_BASE_URL",
    "OPENAI_API_KEY",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class FakeResponse:
    def __init__(self, payload):
        self._payload = payload

    def read(self):
        return json.dumps(self._payload).encode("utf-8")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


def test_enhancer_constructs_request() -> None:
    captured = {}

    def fake_runner(request):
        captured["prompt"] = request.prompt
        captured["system"] = request.system
        captured["model"] = request.model
        captured["temperature"] = request.temperature
        captured["max_tokens"] = request.max_tokens
        captured["base_url"] = request.base_url
        captured["api_key"] = request.api_key
        captured["request_timeout"] = request.request_timeout
        return "response"

    enhancer = LLMEnhancer(
        model="custom-model",
        base_url=None,
        temperature=0.15,
        max_tokens=256,
        request_timeout=42.0,
        runner=fake_runner,
    )

    assert enhancer("system message", "Document this") == "response"
    assert captured == {
        "prompt": "Document this",
        "system": "system message",
        "model": "custom-model",
        "temperature": 0.15,
        "max_tokens": 256,
        "base_url": None,
        "api_key": None,
        "request_timeout": 42.0,
    }


def test_enhancer_defaults_and_environment(monkeypatch) -> None:
    default = LLMEnhancer()
    assert default.model == "llama3.1"
    assert default.base_url == "http://localhost:11434/v1"
    assert default.api_key is None

    monkeypatch.setenv("OPENAI_MODEL", "gpt-test")
    monkeypatch.setenv("PROJINTEL_LLM_BASE_URL", "https://llm.example.com/v1/")
    monkeypatch.setenv("OPENAI_API_KEY", "secret")
    configured = LLMEnhancer()
    assert configured.model == "gpt-test"
    assert configured.base_url == "https://llm.example.com/v1"
    assert configured.api_key == "secret"


def test_http_runner_posts_chat_completion(monkeypatch) -> None:
    captured = {}

    def fake_urlopen(request, timeout=None):
        captured["url"] = request.full_url
        captured["headers"] = {k.lower(): v for k, v in request.header_items()}
        captured["payload"] = json.loads(request.data.decode("utf-8"))
        captured["timeout"] = timeout
        return FakeResponse({"choices": [{"message": {"content": '  {"description": "x"}  '}}]})

    monkeypatch.setattr("projintel.enhance.runner.urlopen", fake_urlopen)

    enhancer = LLMEnhancer(
        model="llama3:8b",
        base_url="http://localhost:12434/engines/v1/",
        api_key="local-key",
        temperature=0.05,
        max_tokens=128,
        request_timeout=25.0,
    )
    result = enhancer("Return JSON.", "Document util.py")

    assert result == '{"description": "x"}'
    assert captured["url"] == "http://localhost:12434/engines/v1/chat/completions"
    assert captured["headers"]["authorization"] == "Bearer local-key"
    assert captured["payload"]["messages"] == [
        {"role": "system", "content": "Return JSON."},
        {"role": "user", "content": "Document util.py"},
    ]
    assert captured["payload"]["temperature"] == 0.05
    assert captured["payload"]["max_tokens"] == 128
    assert captured["timeout"] == 25.0


def test_http_runner_wraps_transport_errors(monkeypatch) -> None:
    def fake_urlopen(request, timeout=None):
        raise URLError("connection refused")

    monkeypatch.setattr("projintel.enhance.runner.urlopen", fake_urlopen)

    with pytest.raises(EnhancerError, match="connection refused"):
        LLMEnhancer(base_url="http://localhost:1/v1")("s", "u")


def test_http_runner_rejects_empty_completion(monkeypatch) -> None:
    monkeypatch.setattr(
        "projintel.enhance.runner.urlopen",
        lambda request, timeout=None: FakeResponse({"choices": []}),
    )

    with pytest.raises(EnhancerError, match="empty response"):
        LLMEnhancer(base_url="http://localhost:1/v1")("s", "u")


def test_cli_runner_reports_missing_executable(monkeypatch) -> None:
    def fake_run(*args, **kwargs):
        raise FileNotFoundError("ollama")

    monkeypatch.setattr("projintel.enhance.runner.subprocess.run", fake_run)

    with pytest.raises(EnhancerError, match="Unable to locate"):
        LLMEnhancer(base_url=None, executable="ollama")("s", "u")


def test_cli_runner_passes_system_prompt(monkeypatch) -> None:
    captured = {}

    def fake_run(args, **kwargs):
        captured["args"] = args
        return subprocess.CompletedProcess(args, 0, stdout=" drafted \n", stderr="")

    monkeypatch.setattr("projintel.enhance.runner.subprocess.run", fake_run)

    result = LLMEnhancer(model="llama3.1", base_url=None)("Be brief.", "Document it")

    assert result == "drafted"
    assert captured["args"] == ["ollama", "run", "llama3.1", "--system", "Be brief.", "Document it"]


def test_from_config_selects_runner() -> None:
    cli = LLMEnhancer.from_config(EnhancerConfig(runner="ollama", model="phi3"))
    http = LLMEnhancer.from_config(
        EnhancerConfig(runner="http", base_url="http://llm:8080/v1", max_tokens=64)
    )

    assert (cli.model, cli.base_url) == ("phi3", None)
    assert (http.base_url, http.max_tokens) == ("http://llm:8080/v1", 64)
    assert LLMEnhancer.from_config(None).base_url == "http://localhost:11434/v1"


def test_from_config_rejects_unknown_runner() -> None:
    with pytest.raises(EnhancerError):
        LLMEnhancer.from_config(EnhancerConfig(runner="carrier-pigeon"))
