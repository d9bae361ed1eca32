"""Base classes for stack detectors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from ..models import DetectedValue
from ..walker import ProjectTree
from . import manifests

T = TypeVar("T")

JS_LANGUAGES = frozenset({"TypeScript", "JavaScript"})
CDN_CONFIDENCE = 0.80


@dataclass
class DetectionContext:
    """Per-request state shared by detectors: the tree plus memoised manifests."""

    tree: ProjectTree
    language: Optional[DetectedValue] = None
    _memo: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def language_name(self) -> str:
        return self.language.value if self.language is not None else ""

    def memo(self, key: str, factory: Callable[[], T]) -> T:
        if key not in self._memo:
            self._memo[key] = factory()
        return self._memo[key]

    def node_dependencies(self) -> Dict[str, str]:
        return self.memo(
            "node",
            lambda: manifests.merged_node_dependencies(manifests.load_package_json(self.tree)),
        )

    def python_dependencies(self) -> List[str]:
        def _load() -> List[str]:
            names = manifests.load_pyproject_dependencies(self.tree)
            names.extend(
                name for name in manifests.load_requirements(self.tree) if name not in names
            )
            return names

        return self.memo("python", _load)

    def cargo_dependencies(self, *, include_dev: bool = False) -> List[str]:
        key = "cargo-dev" if include_dev else "cargo"
        return self.memo(
            key, lambda: manifests.load_cargo_dependencies(self.tree, include_dev=include_dev)
        )

    def go_modules(self) -> List[str]:
        return self.memo("go", lambda: manifests.load_go_modules(self.tree))

    def java_dependencies(self) -> List[str]:
        return self.memo("java", lambda: manifests.load_java_dependencies(self.tree))

    def root_html(self) -> List[Tuple[str, str]]:
        """(name, text) for each .html file directly under the root."""

        def _load() -> List[Tuple[str, str]]:
            pages = []
            for name in self.tree.root_files(".html"):
                text = self.tree.read_optional(name)
                if text is not None:
                    pages.append((name, text))
            return pages

        return self.memo("html", _load)


class Detector(ABC):
    """Contract for detectors that fill one StackDetection category."""

    category: str = ""

    def supports(self, context: DetectionContext) -> bool:
        """Return True when this detector should run for the project."""
        return True

    @abstractmethod
    def detect(self, context: DetectionContext) -> Optional[DetectedValue]:
        """Return the first matching value for the category, if any."""


def match_dependency(
    names: Sequence[str],
    table: Sequence[Tuple[str, str]],
    *,
    confidence: float,
    manifest: str,
) -> Optional[DetectedValue]:
    """First table entry whose package name appears in *names* (case-insensitive)."""
    present = {name.lower() for name in names}
    for package, value in table:
        if package.lower() in present:
            return DetectedValue(value=value, confidence=confidence, source=f"{package} in {manifest}")
    return None


def match_module_prefix(
    modules: Sequence[str],
    table: Sequence[Tuple[str, str]],
    *,
    confidence: float,
    manifest: str,
) -> Optional[DetectedValue]:
    """First table entry that prefixes one of the required module paths."""
    for prefix, value in table:
        if any(module == prefix or module.startswith(f"{prefix}/") for module in modules):
            return DetectedValue(value=value, confidence=confidence, source=f"{prefix} in {manifest}")
    return None


def match_cdn(
    context: DetectionContext, table: Sequence[Tuple[str, str]], label: str
) -> Optional[DetectedValue]:
    """Scan root-level HTML pages for known CDN URL fragments."""
    for name, text in context.root_html():
        for fragment, value in table:
            if fragment in text:
                return DetectedValue(
                    value=value, confidence=CDN_CONFIDENCE, source=f"{label} ({name})"
                )
    return None


def first_match(*steps: Callable[[], Optional[DetectedValue]]) -> Optional[DetectedValue]:
    """Run detection steps in priority order and return the first hit."""
    for step in steps:
        result = step()
        if result is not None:
            return result
    return None
