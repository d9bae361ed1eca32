"""Engine facade: the entry points callers use to analyse a project root."""

from __future__ import annotations

import os
from dataclasses import replace
from pathlib import Path
from typing import Iterable, List, Mapping, Optional

from . import header as codec
from .config import EngineConfig, load_config
from .enhance import Enhancer, PromptRenderer, salvage_header
from .errors import EngineError, EnhancerError, FileAccessError, SizeError
from .generator import template_header
from .logging import get_logger
from .models import (
    MISSING,
    DocHeader,
    FreshnessVerdict,
    HealthInputs,
    HealthReport,
    ModuleStatus,
    StackDetection,
)
from .scoring import (
    DEFAULT_FRESHNESS,
    DEFAULT_WEIGHTS,
    FreshnessPolicy,
    ScoringWeights,
    mean_freshness,
    score_freshness,
)
from .scoring import compute_health as score_health
from .scoring.freshness import Timestamp
from .stack import StackDetector
from .symbols import extract_symbols
from .walker import ProjectTree, WalkPolicy, read_text, resolve_root, write_text

PathLike = str | os.PathLike[str]


def _language_of(path: Path) -> str:
    return path.suffix.lower().lstrip(".")


class ProjectEngine:
    """Runs stack detection, module scans, header edits and health scoring.

    Each call is independent: the project tree is walked afresh and nothing
    is cached between calls. Settings come from *config* when given,
    otherwise from the ``.projintel.yml`` found at each analysed root.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        *,
        weights: ScoringWeights = DEFAULT_WEIGHTS,
        prompt_renderer: PromptRenderer | None = None,
    ) -> None:
        self.config = config
        self.weights = weights
        self.prompt_renderer = prompt_renderer
        self.logger = get_logger("engine")

    # Settings

    def _config_for(self, root: Path) -> EngineConfig:
        if self.config is not None:
            return self.config
        return load_config(root)

    @staticmethod
    def _walk_policy(config: EngineConfig) -> WalkPolicy:
        return WalkPolicy(max_depth=config.max_depth, exclude_paths=tuple(config.exclude_paths))

    @staticmethod
    def _freshness_policy(config: EngineConfig) -> FreshnessPolicy:
        return replace(
            DEFAULT_FRESHNESS,
            grace_days=config.freshness.grace_days,
            current_cutoff=config.freshness.current_cutoff,
        )

    def _tree(self, root: PathLike) -> tuple[ProjectTree, EngineConfig]:
        root_path = resolve_root(root)
        config = self._config_for(root_path)
        return ProjectTree(root_path, self._walk_policy(config)), config

    def _renderer(self, config: EngineConfig) -> PromptRenderer:
        if self.prompt_renderer is not None:
            return self.prompt_renderer
        if config.enhancer is not None:
            return PromptRenderer(max_input_chars=config.enhancer.max_input_chars)
        return PromptRenderer()

    # Entry points

    def detect_stack(self, root: PathLike) -> StackDetection:
        tree, _ = self._tree(root)
        self.logger.debug("Detecting stack for %s", tree.root)
        return StackDetector().detect(tree)

    def scan_modules(
        self,
        root: PathLike,
        *,
        header_stamps: Mapping[str, Timestamp] | None = None,
    ) -> List[ModuleStatus]:
        """Documentation status for every documentable file, sorted by path.

        *header_stamps* maps relative paths to the time their header was last
        written; files without a stamp skip the modification-time check.
        """
        tree, config = self._tree(root)
        return self._scan(tree, self._freshness_policy(config), header_stamps or {})

    def _scan(
        self,
        tree: ProjectTree,
        policy: FreshnessPolicy,
        header_stamps: Mapping[str, Timestamp],
    ) -> List[ModuleStatus]:
        results: List[ModuleStatus] = []
        for entry in tree.documentable():
            relative = entry.relative_path
            try:
                text = tree.read_text(relative)
            except SizeError as exc:
                self.logger.debug("Skipping oversized %s: %s", relative, exc)
                results.append(
                    ModuleStatus(
                        relative, MISSING, 0, [f"File exceeds the size limit ({exc.size} bytes)"]
                    )
                )
                continue
            except FileAccessError as exc:
                self.logger.debug("Skipping unreadable %s: %s", relative, exc)
                results.append(ModuleStatus(relative, MISSING, 0, ["File could not be read"]))
                continue

            verdict = score_freshness(
                text,
                codec.parse_header(text),
                entry.language,
                mtime=entry.mtime,
                header_updated_at=header_stamps.get(relative),
                policy=policy,
            )
            results.append(
                ModuleStatus(
                    path=relative,
                    status=verdict.status,
                    freshness_score=verdict.score,
                    changes=verdict.changes or None,
                )
            )
        self.logger.debug("Scanned %d documentable files under %s", len(results), tree.root)
        return results

    def read_header(self, path: PathLike) -> Optional[DocHeader]:
        """Parse the header of a file on disk; raises SizeError or FileAccessError."""
        return codec.parse_header(read_text(Path(path)))

    def format_header(self, doc: DocHeader, language: str) -> str:
        return codec.format_header(doc, language)

    def apply_header(self, path: PathLike, doc: DocHeader) -> None:
        """Write *doc* into the file at *path*, replacing any existing header."""
        file_path = Path(path)
        body = read_text(file_path)
        updated = codec.apply_header(body, doc, _language_of(file_path))
        if updated == body:
            self.logger.debug("Header already up to date in %s", file_path)
            return
        write_text(file_path, updated)
        self.logger.info("Applied header to %s", file_path)

    def compute_health(self, root: PathLike, inputs: HealthInputs | None = None) -> HealthReport:
        """Health report; components missing from *inputs* are measured from *root*."""
        inputs = inputs or HealthInputs()
        tree, config = self._tree(root)

        claude_md_text = tree.read_optional("CLAUDE.md") if inputs.claude_md is None else None
        documented = documentable = 0
        mean: Optional[float] = None
        if inputs.module_docs is None or inputs.freshness is None:
            statuses = self._scan(tree, self._freshness_policy(config), {})
            documentable = len(statuses)
            documented = sum(1 for status in statuses if status.status != MISSING)
            mean = mean_freshness(
                [FreshnessVerdict(status.freshness_score, status.status) for status in statuses]
            )

        report = score_health(
            inputs,
            claude_md_text=claude_md_text,
            documented=documented,
            documentable=documentable,
            mean=mean,
            weights=self.weights,
        )
        self.logger.debug("Health for %s: %d (%s risk)", tree.root, report.total, report.risk)
        return report

    # Header generation

    def generate_header(
        self, path: PathLike, root: PathLike, *, enhancer: Enhancer | None = None
    ) -> DocHeader:
        """Draft a header for *path* from its symbols, optionally refined by *enhancer*.

        Enhancer failures are logged and the template header is returned.
        """
        root_path = resolve_root(root)
        file_path = self._resolve_file(root_path, path)
        relative = self._relative(root_path, file_path)
        language = _language_of(file_path)

        text = read_text(file_path)
        symbols = extract_symbols(text, language)
        draft = template_header(relative, symbols)
        if enhancer is None:
            return draft

        prompts = self._renderer(self._config_for(root_path)).render(
            relative, language, text, symbols, draft
        )
        try:
            response = enhancer(prompts.system, prompts.user)
        except EnhancerError as exc:
            self.logger.warning("Enhancer failed for %s, using template: %s", relative, exc)
            return draft
        return salvage_header(response, draft)

    def batch_generate(
        self,
        paths: Iterable[PathLike],
        root: PathLike,
        *,
        enhancer: Enhancer | None = None,
    ) -> List[ModuleStatus]:
        """Generate and apply headers for *paths*, recording failures per file.

        Each applied file is reported with the freshness verdict of its new
        header, so untouched placeholders show up in ``changes``.
        """
        root_path = resolve_root(root)
        policy = self._freshness_policy(self._config_for(root_path))
        results: List[ModuleStatus] = []
        for path in paths:
            file_path = self._resolve_file(root_path, path)
            relative = self._relative(root_path, file_path)
            try:
                doc = self.generate_header(file_path, root_path, enhancer=enhancer)
            except EngineError as exc:
                self.logger.warning("Failed to generate header for %s: %s", relative, exc)
                results.append(
                    ModuleStatus(relative, MISSING, 0, [f"Failed to generate: {exc}"])
                )
                continue
            try:
                self.apply_header(file_path, doc)
                text = read_text(file_path)
            except (SizeError, FileAccessError) as exc:
                self.logger.warning("Failed to apply header to %s: %s", relative, exc)
                results.append(
                    ModuleStatus(
                        relative, MISSING, 0, [f"Failed to apply: {exc}"], suggested_doc=doc
                    )
                )
                continue
            verdict = score_freshness(
                text, codec.parse_header(text), _language_of(file_path), policy=policy
            )
            results.append(
                ModuleStatus(relative, verdict.status, verdict.score, verdict.changes or None)
            )
        return results

    @staticmethod
    def _resolve_file(root: Path, path: PathLike) -> Path:
        candidate = Path(path).expanduser()
        return candidate if candidate.is_absolute() else root / candidate

    @staticmethod
    def _relative(root: Path, file_path: Path) -> str:
        try:
            return file_path.resolve().relative_to(root).as_posix()
        except (OSError, ValueError):
            return file_path.name


__all__ = ["ProjectEngine"]
