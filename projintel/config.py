"""Configuration loading for projintel (.projintel.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import EngineError

CONFIG_FILENAME = ".projintel.yml"


class ConfigError(EngineError):
    """Raised when the configuration file cannot be parsed."""

    kind = "config"


@dataclass
class FreshnessConfig:
    """Staleness thresholds applied by the freshness scorer."""

    grace_days: int = 30
    current_cutoff: int = 80


@dataclass
class EnhancerConfig:
    """AI enhancer runtime settings."""

    runner: Optional[str] = None
    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    request_timeout: Optional[float] = None
    max_input_chars: int = 12_000


@dataclass
class EngineConfig:
    """Represents the settings defined in .projintel.yml."""

    root: Path
    freshness: FreshnessConfig = field(default_factory=FreshnessConfig)
    enhancer: Optional[EnhancerConfig] = None
    exclude_paths: List[str] = field(default_factory=list)
    max_depth: int = 10


def load_config(config_path: Path) -> EngineConfig:
    """Load configuration from disk; a missing file yields defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return EngineConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    freshness = FreshnessConfig()
    freshness_data = _as_dict(data.get("freshness"))
    if freshness_data:
        grace_days = _as_int(freshness_data.get("grace_days"))
        if grace_days is not None and grace_days >= 0:
            freshness.grace_days = grace_days
        cutoff = _as_int(freshness_data.get("current_cutoff"))
        if cutoff is not None:
            freshness.current_cutoff = min(max(cutoff, 0), 100)

    enhancer_data = _as_dict(data.get("enhancer"))
    enhancer = None
    if enhancer_data:
        enhancer = EnhancerConfig(
            runner=_as_str(enhancer_data.get("runner")),
            model=_as_str(enhancer_data.get("model")),
            temperature=_as_float(enhancer_data.get("temperature")),
            max_tokens=_as_int(enhancer_data.get("max_tokens")),
            base_url=_as_str(enhancer_data.get("base_url")),
            api_key=_as_str(enhancer_data.get("api_key")),
            request_timeout=_as_float(enhancer_data.get("request_timeout")),
        )
        max_chars = _as_int(enhancer_data.get("max_input_chars"))
        if max_chars is not None and max_chars > 0:
            enhancer.max_input_chars = max_chars

    config = EngineConfig(
        root=root,
        freshness=freshness,
        enhancer=enhancer,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
    )
    max_depth = _as_int(data.get("max_depth"))
    if max_depth is not None and max_depth >= 0:
        config.max_depth = max_depth
    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "EngineConfig",
    "EnhancerConfig",
    "FreshnessConfig",
    "load_config",
]
