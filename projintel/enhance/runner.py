"""Chat-completions and Ollama CLI transports for the header enhancer."""

from __future__ import annotations

import json
import os
import subprocess
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..config import EnhancerConfig
from ..errors import EnhancerError
from ..logging import get_logger

logger = get_logger("enhance")

_AUTO_BASE_URL = object()
_AUTO_API_KEY = object()

HTTP_RUNNER = "http"
CLI_RUNNER = "ollama"


class Enhancer(Protocol):
    """Anything that turns a system and user prompt into response text."""

    def __call__(self, system_prompt: str, user_prompt: str) -> str:
        ...


@dataclass
class EnhancerRequest:
    """A single completion request handed to a transport."""

    prompt: str
    system: Optional[str]
    model: str
    temperature: Optional[float]
    max_tokens: Optional[int]
    executable: Optional[str]
    base_url: Optional[str]
    api_key: Optional[str]
    request_timeout: Optional[float]


class LLMEnhancer:
    """Sends header prompts to an OpenAI-compatible endpoint or the ollama CLI."""

    DEFAULT_MODEL = "llama3.1"
    DEFAULT_BASE_URL = "http://localhost:11434/v1"
    ENV_MODEL_KEYS = ("PROJINTEL_LLM_MODEL", "OPENAI_MODEL")
    ENV_BASE_URL_KEYS = ("PROJINTEL_LLM_BASE_URL", "OPENAI_BASE_URL")
    ENV_API_KEY_KEYS = ("PROJINTEL_LLM_API_KEY", "OPENAI_API_KEY")

    def __init__(
        self,
        model: str | None = None,
        *,
        base_url: str | None | object = _AUTO_BASE_URL,
        executable: str = "ollama",
        temperature: Optional[float] = 0.2,
        max_tokens: Optional[int] = None,
        api_key: str | None | object = _AUTO_API_KEY,
        request_timeout: Optional[float] = 60.0,
        runner: Callable[[EnhancerRequest], str] | None = None,
    ) -> None:
        self.model = self._resolve_model(model)
        self.base_url = self._resolve_base_url(base_url)
        self.executable = executable
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.api_key = self._resolve_api_key(api_key)
        self.request_timeout = request_timeout
        if runner is not None:
            self._runner = runner
        else:
            self._runner = self._http_runner if self.base_url else self._cli_runner

    @classmethod
    def from_config(
        cls,
        config: EnhancerConfig | None,
        *,
        runner: Callable[[EnhancerRequest], str] | None = None,
    ) -> "LLMEnhancer":
        """Build an enhancer from the ``enhancer`` block of .projintel.yml."""
        config = config or EnhancerConfig()
        if config.runner not in (None, HTTP_RUNNER, CLI_RUNNER):
            raise EnhancerError(f"Unknown enhancer runner '{config.runner}'")
        kwargs: dict[str, object] = {"runner": runner}
        if config.runner == CLI_RUNNER:
            kwargs["base_url"] = None
        elif config.base_url:
            kwargs["base_url"] = config.base_url
        if config.api_key:
            kwargs["api_key"] = config.api_key
        if config.temperature is not None:
            kwargs["temperature"] = config.temperature
        if config.max_tokens is not None:
            kwargs["max_tokens"] = config.max_tokens
        if config.request_timeout is not None:
            kwargs["request_timeout"] = config.request_timeout
        return cls(config.model, **kwargs)  # type: ignore[arg-type]

    def __call__(self, system_prompt: str, user_prompt: str) -> str:
        request = EnhancerRequest(
            prompt=user_prompt,
            system=system_prompt,
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            executable=self.executable,
            base_url=self.base_url,
            api_key=self.api_key,
            request_timeout=self.request_timeout,
        )
        logger.debug("Requesting header enhancement from %s", self.base_url or self.executable)
        return self._runner(request)

    @staticmethod
    def _cli_runner(request: EnhancerRequest) -> str:
        args = [request.executable or "ollama", "run", request.model]
        if request.system:
            args.extend(["--system", request.system])
        args.append(request.prompt)
        try:
            completed = subprocess.run(
                args,
                check=True,
                capture_output=True,
                text=True,
                timeout=request.request_timeout,
            )
        except FileNotFoundError as exc:
            raise EnhancerError(
                f"Unable to locate '{request.executable}'. Install Ollama or configure a base_url."
            ) from exc
        except subprocess.CalledProcessError as exc:
            raise EnhancerError(
                f"Enhancer CLI failed with exit code {exc.returncode}: {exc.stderr.strip()}"
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise EnhancerError(f"Enhancer CLI timed out after {exc.timeout} seconds") from exc
        return completed.stdout.strip()

    @staticmethod
    def _http_runner(request: EnhancerRequest) -> str:
        if not request.base_url:
            raise EnhancerError("HTTP runner requires a base_url to be configured.")
        endpoint = f"{request.base_url}/chat/completions"
        payload: dict[str, object] = {
            "model": request.model,
            "messages": LLMEnhancer._build_messages(request.system, request.prompt),
        }
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        if request.max_tokens is not None:
            payload["max_tokens"] = request.max_tokens

        data = json.dumps(payload).encode("utf-8")
        headers = {"Content-Type": "application/json"}
        if request.api_key:
            headers["Authorization"] = f"Bearer {request.api_key}"

        http_request = Request(endpoint, data=data, headers=headers, method="POST")
        timeout = request.request_timeout or 60.0

        try:
            with urlopen(http_request, timeout=timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            message = detail.strip() or exc.reason
            raise EnhancerError(f"Enhancer request failed with status {exc.code}: {message}") from exc
        except URLError as exc:
            raise EnhancerError(f"Enhancer request failed: {exc.reason}") from exc

        try:
            response_payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise EnhancerError("Enhancer endpoint returned invalid JSON") from exc

        content = LLMEnhancer._extract_content(response_payload)
        if not content:
            raise EnhancerError("Enhancer endpoint returned an empty response")
        return content.strip()

    @staticmethod
    def _build_messages(system: str | None, prompt: str) -> list[dict[str, str]]:
        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages

    @staticmethod
    def _extract_content(payload: object) -> str:
        if not isinstance(payload, dict):
            return ""
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            return ""
        first = choices[0]
        if not isinstance(first, dict):
            return ""
        message = first.get("message")
        if isinstance(message, dict):
            content = message.get("content")
            if isinstance(content, str):
                return content
        text = first.get("text")
        if isinstance(text, str):
            return text
        return ""

    def _resolve_model(self, model: str | None) -> str:
        if model:
            return model
        return self._first_env_value(self.ENV_MODEL_KEYS) or self.DEFAULT_MODEL

    def _resolve_base_url(self, base_url: str | None | object) -> str | None:
        if base_url is None:
            return None
        if base_url is not _AUTO_BASE_URL:
            return str(base_url).rstrip("/")
        env_value = self._first_env_value(self.ENV_BASE_URL_KEYS)
        return (env_value or self.DEFAULT_BASE_URL).rstrip("/")

    def _resolve_api_key(self, api_key: str | None | object) -> str | None:
        if api_key is _AUTO_API_KEY:
            return self._first_env_value(self.ENV_API_KEY_KEYS)
        return api_key  # type: ignore[return-value]

    @staticmethod
    def _first_env_value(keys: Sequence[str]) -> str | None:
        for key in keys:
            value = os.getenv(key)
            if value:
                return value
        return None


__all__ = ["CLI_RUNNER", "Enhancer", "EnhancerRequest", "HTTP_RUNNER", "LLMEnhancer"]
