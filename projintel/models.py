"""Core data models shared across projintel components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

SOURCE = "source"
ROOT_MANIFEST = "root-manifest"
HTML = "html"
OTHER = "other"

CURRENT = "current"
OUTDATED = "outdated"
MISSING = "missing"


@dataclass
class WalkEntry:
    """A file yielded by the path walker."""

    absolute_path: Path
    relative_path: str
    kind: str
    documentable: bool = False
    size: int = 0
    mtime: float = 0.0

    @property
    def suffix(self) -> str:
        return self.absolute_path.suffix.lower()

    @property
    def language(self) -> str:
        """Language tag derived from the extension (``ts``, ``py``...)."""
        return self.suffix.lstrip(".")


@dataclass
class DocHeader:
    """Structured documentation header carried at the top of a source file."""

    module_path: str = ""
    description: str = ""
    purpose: List[str] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    exports: List[str] = field(default_factory=list)
    patterns: List[str] = field(default_factory=list)
    claude_notes: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not any(
            (
                self.module_path,
                self.description,
                self.purpose,
                self.dependencies,
                self.exports,
                self.patterns,
                self.claude_notes,
            )
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "modulePath": self.module_path,
            "description": self.description,
            "purpose": list(self.purpose),
            "dependencies": list(self.dependencies),
            "exports": list(self.exports),
            "patterns": list(self.patterns),
            "claudeNotes": list(self.claude_notes),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DocHeader":
        """Build a header from camelCase or snake_case keys, ignoring bad values."""

        def _text(*keys: str) -> str:
            for key in keys:
                value = data.get(key)
                if isinstance(value, str):
                    return value.strip()
            return ""

        def _items(*keys: str) -> List[str]:
            for key in keys:
                value = data.get(key)
                if isinstance(value, str):
                    return [value.strip()] if value.strip() else []
                if isinstance(value, list):
                    return [str(item).strip() for item in value if str(item).strip()]
            return []

        return cls(
            module_path=_text("modulePath", "module_path", "module"),
            description=_text("description"),
            purpose=_items("purpose"),
            dependencies=_items("dependencies"),
            exports=_items("exports"),
            patterns=_items("patterns"),
            claude_notes=_items("claudeNotes", "claude_notes"),
        )


@dataclass
class HeaderExtent:
    """Character range of an existing header inside a decoded file body."""

    start: int
    end: int


@dataclass
class SymbolSet:
    """Exports and internal imports found in a source file, in source order."""

    exports: List[str] = field(default_factory=list)
    imports: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"exports": list(self.exports), "imports": list(self.imports)}


@dataclass
class FreshnessVerdict:
    """Outcome of comparing a header with the live symbols of its file."""

    score: int
    status: str
    changes: List[str] = field(default_factory=list)


@dataclass
class ModuleStatus:
    """Documentation status for one documentable file."""

    path: str
    status: str
    freshness_score: int
    changes: Optional[List[str]] = None
    suggested_doc: Optional[DocHeader] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "path": self.path,
            "status": self.status,
            "freshnessScore": self.freshness_score,
        }
        if self.changes:
            payload["changes"] = list(self.changes)
        if self.suggested_doc is not None:
            payload["suggestedDoc"] = self.suggested_doc.to_dict()
        return payload


@dataclass
class DetectedValue:
    """A detected stack attribute with its confidence and evidence."""

    value: str
    confidence: float
    source: str

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "confidence": self.confidence, "source": self.source}


@dataclass
class StackDetection:
    """Tech-stack report for a project root."""

    language: Optional[DetectedValue] = None
    framework: Optional[DetectedValue] = None
    database: Optional[DetectedValue] = None
    testing: Optional[DetectedValue] = None
    styling: Optional[DetectedValue] = None
    project_type: Optional[str] = None
    project_name: Optional[str] = None
    file_count: int = 0
    has_existing_claude_md: bool = False
    confidence: str = "none"

    def to_dict(self) -> Dict[str, Any]:
        def _value(item: Optional[DetectedValue]) -> Optional[Dict[str, Any]]:
            return item.to_dict() if item is not None else None

        return {
            "language": _value(self.language),
            "framework": _value(self.framework),
            "database": _value(self.database),
            "testing": _value(self.testing),
            "styling": _value(self.styling),
            "projectType": self.project_type,
            "projectName": self.project_name,
            "fileCount": self.file_count,
            "hasExistingClaudeMd": self.has_existing_claude_md,
            "confidence": self.confidence,
        }


@dataclass
class QuickWin:
    """Actionable suggestion tied to an underweight health component."""

    title: str
    description: str
    impact: int
    effort: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "impact": self.impact,
            "effort": self.effort,
        }


@dataclass
class HealthComponents:
    """Per-component health scores, each bounded by its weight."""

    claude_md: int = 0
    module_docs: int = 0
    freshness: int = 0
    skills: int = 0
    context: int = 0
    enforcement: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "claudeMd": self.claude_md,
            "moduleDocs": self.module_docs,
            "freshness": self.freshness,
            "skills": self.skills,
            "context": self.context,
            "enforcement": self.enforcement,
        }


@dataclass
class HealthInputs:
    """Caller-provided health components; the first three are computed when absent."""

    claude_md: Optional[int] = None
    module_docs: Optional[int] = None
    freshness: Optional[int] = None
    skills: int = 0
    context: int = 0
    enforcement: int = 0


@dataclass
class HealthReport:
    """Aggregate project health with ranked improvement suggestions."""

    total: int
    components: HealthComponents
    quick_wins: List[QuickWin] = field(default_factory=list)
    risk: str = "high"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "components": self.components.to_dict(),
            "quickWins": [win.to_dict() for win in self.quick_wins],
            "risk": self.risk,
        }
