"""Project intelligence engine: stack detection, documentation headers and health."""

from .engine import ProjectEngine
from .errors import EngineError, FileAccessError, PathError, SizeError
from .models import DocHeader, HealthInputs, HealthReport, ModuleStatus, StackDetection

__version__ = "0.1.0"

__all__ = [
    "DocHeader",
    "EngineError",
    "FileAccessError",
    "HealthInputs",
    "HealthReport",
    "ModuleStatus",
    "PathError",
    "ProjectEngine",
    "SizeError",
    "StackDetection",
    "__version__",
]
