"""Stack detection entry point fusing the per-category detectors."""

from __future__ import annotations

import os
from typing import Optional, Sequence

from ..logging import get_logger
from ..models import DetectedValue, StackDetection
from ..walker import ProjectTree, WalkPolicy
from .base import DetectionContext, Detector
from .categories import DatabaseDetector, StylingDetector, TestingDetector
from .framework import FrameworkDetector
from .language import LanguageDetector

logger = get_logger("stack")

WEB_APP_FRAMEWORKS = frozenset(
    {
        "Next.js",
        "Nuxt",
        "Remix",
        "SolidJS",
        "Svelte",
        "Angular",
        "Vue",
        "React",
        "Alpine.js",
        "Leptos",
        "Yew",
        "Dioxus",
    }
)
API_FRAMEWORKS = frozenset(
    {
        "Express",
        "Fastify",
        "Hono",
        "NestJS",
        "Actix Web",
        "Axum",
        "Rocket",
        "Warp",
        "FastAPI",
        "Django",
        "Flask",
        "Starlette",
        "Tornado",
        "Gin",
        "Fiber",
        "Echo",
        "Gorilla Mux",
        "Rails",
        "Sinatra",
        "Laravel",
        "Symfony",
        "Spring Boot",
    }
)
DESKTOP_FRAMEWORKS = frozenset({"Tauri", "Electron"})
CLI_CRATES = ("clap", "structopt")


def confidence_bucket(language: Optional[DetectedValue]) -> str:
    """Summarise the language confidence as high/medium/low/none."""
    if language is None:
        return "none"
    if language.confidence >= 0.9:
        return "high"
    if language.confidence >= 0.5:
        return "medium"
    return "low"


def infer_project_type(
    context: DetectionContext, framework: Optional[DetectedValue]
) -> Optional[str]:
    """Map the (framework, language) pair onto a coarse project type."""
    name = framework.value if framework is not None else ""
    if name in WEB_APP_FRAMEWORKS:
        return "Web App"
    if name in API_FRAMEWORKS:
        return "API"
    if name == "Flutter":
        return "Mobile"
    if name in DESKTOP_FRAMEWORKS:
        return "Desktop"
    if name == "Chrome Extension":
        return "Extension"

    language = context.language_name
    if language == "Swift":
        return "Mobile"
    if not name and language == "Rust" and context.tree.is_file("src/main.rs"):
        crates = {crate.lower() for crate in context.cargo_dependencies()}
        if any(crate in crates for crate in CLI_CRATES):
            return "CLI"
    return None


class StackDetector:
    """Runs the language detector, then the dependent category detectors."""

    def __init__(
        self,
        *,
        policy: WalkPolicy | None = None,
        detectors: Sequence[Detector] | None = None,
    ) -> None:
        self.policy = policy
        self.language_detector = LanguageDetector()
        self.framework_detector = FrameworkDetector()
        self.detectors: Sequence[Detector] = (
            detectors
            if detectors is not None
            else (DatabaseDetector(), TestingDetector(), StylingDetector())
        )

    def detect(self, root: str | os.PathLike[str] | ProjectTree) -> StackDetection:
        """Return the stack report for *root*; raises PathError for a bad root."""
        tree = root if isinstance(root, ProjectTree) else ProjectTree(root, self.policy)
        context = DetectionContext(tree=tree)

        context.language = self.language_detector.detect(context)
        framework = self.framework_detector.detect(context)

        result = StackDetection(
            language=context.language,
            framework=framework,
            project_type=infer_project_type(context, framework),
            project_name=tree.name or None,
            file_count=len(tree.source_files()),
            has_existing_claude_md=tree.is_file("CLAUDE.md"),
            confidence=confidence_bucket(context.language),
        )
        for detector in self.detectors:
            if detector.supports(context):
                setattr(result, detector.category, detector.detect(context))

        logger.debug(
            "Detected stack for %s: language=%s framework=%s",
            tree.root,
            result.language.value if result.language else None,
            result.framework.value if result.framework else None,
        )
        return result


def detect_stack(
    root: str | os.PathLike[str], policy: WalkPolicy | None = None
) -> StackDetection:
    """Convenience wrapper around StackDetector.detect."""
    return StackDetector(policy=policy).detect(root)


__all__ = ["StackDetector", "confidence_bucket", "detect_stack", "infer_project_type"]
