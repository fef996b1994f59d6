"""Configuration loading for bonsaigen (.bonsaigen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .models import MARKER_ATTRIBUTE

CONFIG_FILENAME = ".bonsaigen.yml"
DEFAULT_OUTPUT_DIR = "obj/Generated/bonsaigen"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class BonsaiGenConfig:
    """Represents the settings defined in .bonsaigen.yml."""

    root: Path
    output_dir: Path
    marker: str = MARKER_ATTRIBUTE
    emit_bootstrap: bool = True
    prune_stale: bool = True
    exclude_paths: List[str] = field(default_factory=list)
    templates_dir: Optional[Path] = None


def load_config(config_path: Path) -> BonsaiGenConfig:
    """Load configuration from disk, falling back to defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return BonsaiGenConfig(root=root, output_dir=root / DEFAULT_OUTPUT_DIR)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    output_dir_str = _as_str(data.get("output_dir")) or DEFAULT_OUTPUT_DIR
    templates_dir_str = _as_str(data.get("templates_dir"))

    marker = _as_str(data.get("marker")) or MARKER_ATTRIBUTE
    emit_bootstrap = _as_bool(data.get("emit_bootstrap"))
    prune_stale = _as_bool(data.get("prune_stale"))

    return BonsaiGenConfig(
        root=root,
        output_dir=root / output_dir_str,
        marker=marker,
        emit_bootstrap=True if emit_bootstrap is None else emit_bootstrap,
        prune_stale=True if prune_stale is None else prune_stale,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        templates_dir=root / templates_dir_str if templates_dir_str else None,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = ["BonsaiGenConfig", "CONFIG_FILENAME", "ConfigError", "DEFAULT_OUTPUT_DIR", "load_config"]
