"""Primary language detection from marker files and an extension census."""

from __future__ import annotations

from collections import Counter
from typing import Dict, Optional, Sequence, Tuple

from ..logging import get_logger
from ..models import DetectedValue
from .base import DetectionContext, Detector

logger = get_logger("stack.language")

CENSUS_DEPTH = 5
CENSUS_CEILING = 0.85

# (marker files, language, confidence); the first present marker wins.
MARKER_RULES: Sequence[Tuple[Tuple[str, ...], str, float]] = (
    (("tsconfig.json",), "TypeScript", 0.95),
    (("Cargo.toml",), "Rust", 0.95),
    (("pyproject.toml",), "Python", 0.95),
    (("setup.py", "requirements.txt"), "Python", 0.90),
    (("go.mod",), "Go", 0.95),
    (("pubspec.yaml",), "Dart", 0.95),
    (("pom.xml",), "Java", 0.95),
    (("build.gradle", "build.gradle.kts"), "Java", 0.85),
    (("Gemfile",), "Ruby", 0.95),
    (("composer.json",), "PHP", 0.95),
    (("package.json",), "JavaScript", 0.80),
    (("Package.swift",), "Swift", 0.95),
)

# Ordered: ties in the census go to the language listed first.
CENSUS_LANGUAGES: Dict[str, str] = {
    ".ts": "TypeScript",
    ".tsx": "TypeScript",
    ".js": "JavaScript",
    ".jsx": "JavaScript",
    ".rs": "Rust",
    ".py": "Python",
    ".go": "Go",
    ".dart": "Dart",
    ".java": "Java",
    ".kt": "Kotlin",
    ".swift": "Swift",
    ".rb": "Ruby",
    ".php": "PHP",
    ".cs": "C#",
    ".cpp": "C++",
    ".c": "C",
    ".vue": "TypeScript",
    ".svelte": "TypeScript",
}


class LanguageDetector(Detector):
    """Marker files first; the extension census only when no marker exists."""

    category = "language"

    def detect(self, context: DetectionContext) -> Optional[DetectedValue]:
        return self._from_markers(context) or self._from_census(context)

    @staticmethod
    def _from_markers(context: DetectionContext) -> Optional[DetectedValue]:
        for names, language, confidence in MARKER_RULES:
            for name in names:
                if context.tree.is_file(name):
                    return DetectedValue(
                        value=language, confidence=confidence, source=f"{name} found"
                    )
        return None

    @staticmethod
    def _from_census(context: DetectionContext) -> Optional[DetectedValue]:
        counts: Counter[str] = Counter()
        for entry in context.tree.entries(CENSUS_DEPTH):
            language = CENSUS_LANGUAGES.get(entry.suffix)
            if language is not None:
                counts[language] += 1

        total = sum(counts.values())
        if total == 0:
            logger.debug("No source files found for the extension census")
            return None

        order = list(dict.fromkeys(CENSUS_LANGUAGES.values()))
        winner = max(order, key=lambda language: (counts[language], -order.index(language)))
        share = counts[winner] / total
        return DetectedValue(
            value=winner,
            confidence=round(share * CENSUS_CEILING, 3),
            source=f"extension census: {counts[winner]} of {total} source files",
        )
