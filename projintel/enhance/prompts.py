"""Renders enhancer prompts from the packaged Jinja2 templates."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from jinja2 import Environment, FileSystemLoader

from ..models import DocHeader, SymbolSet

MAX_INPUT_CHARS = 12_000


def truncate(text: str, limit: int = MAX_INPUT_CHARS) -> Tuple[str, bool]:
    """Cut *text* to *limit* characters; the flag reports whether it was cut."""
    if limit <= 0 or len(text) <= limit:
        return text, False
    return text[:limit], True


@dataclass(frozen=True)
class PromptPair:
    system: str
    user: str


class PromptRenderer:
    """Builds the system and user prompts for one header request."""

    def __init__(
        self, templates_dir: Path | None = None, *, max_input_chars: int = MAX_INPUT_CHARS
    ) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self.max_input_chars = max_input_chars
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(
        self,
        relative_path: str,
        language: str,
        text: str,
        symbols: SymbolSet,
        draft: DocHeader,
    ) -> PromptPair:
        source, truncated = truncate(text, self.max_input_chars)
        system = self._env.get_template("system.j2").render().strip()
        user = self._env.get_template("module_doc.j2").render(
            relative_path=relative_path,
            module_path=draft.module_path,
            language=language,
            exports=symbols.exports,
            imports=symbols.imports,
            draft=draft.to_dict(),
            source=source,
            truncated=truncated,
            limit=self.max_input_chars,
        )
        return PromptPair(system=system, user=user.strip() + "\n")


__all__ = ["MAX_INPUT_CHARS", "PromptPair", "PromptRenderer", "truncate"]
