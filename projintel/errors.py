"""Error types raised by the project intelligence engine."""

from __future__ import annotations

MAX_FILE_BYTES = 2 * 1024 * 1024


class EngineError(RuntimeError):
    """Base class for engine failures surfaced to callers."""

    kind = "engine"

    def to_dict(self) -> dict[str, str]:
        """Return the error as a plain record for CLI and service output."""
        return {"kind": self.kind, "detail": str(self)}


class PathError(EngineError):
    """Raised when a project root is missing, not a directory, or unreadable."""

    kind = "path"


class SizeError(EngineError):
    """Raised when a file body exceeds the read/modify size cap."""

    kind = "size"

    def __init__(self, target: str, size: int, limit: int = MAX_FILE_BYTES) -> None:
        super().__init__(f"{target} is {size} bytes, exceeding the {limit} byte limit")
        self.target = target
        self.size = size
        self.limit = limit


class FileAccessError(EngineError):
    """Raised when an individual file cannot be read or written."""

    kind = "io"


class EnhancerError(EngineError):
    """Raised when the AI enhancer transport fails."""

    kind = "enhancer"


def check_size(target: str, data: str | bytes, limit: int = MAX_FILE_BYTES) -> None:
    """Raise SizeError when *data* is larger than *limit* bytes once encoded."""
    size = len(data.encode("utf-8")) if isinstance(data, str) else len(data)
    if size > limit:
        raise SizeError(target, size, limit)


__all__ = [
    "EngineError",
    "EnhancerError",
    "FileAccessError",
    "MAX_FILE_BYTES",
    "PathError",
    "SizeError",
    "check_size",
]
