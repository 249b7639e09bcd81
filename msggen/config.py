"""Configuration loading for msggen (.msggen.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".msggen.yml"


@dataclass
class EmitterConfig:
    """Template overrides for the default emitter."""

    templates_dir: Optional[Path] = None
    base_interface: Optional[str] = None


@dataclass
class GeneratorConfig:
    """Represents the settings defined in .msggen.yml."""

    root: Path
    package_path: List[Path] = field(default_factory=list)
    sources: List[Path] = field(default_factory=list)
    output_path: Optional[Path] = None
    package_names: List[str] = field(default_factory=list)
    emitter: EmitterConfig = field(default_factory=EmitterConfig)
    log_file: Optional[Path] = None


def load_config(config_path: Path) -> GeneratorConfig:
    """Load configuration from disk; a missing file yields defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return GeneratorConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    emitter_data = _as_dict(data.get("emitter"))
    emitter = EmitterConfig()
    if emitter_data:
        templates_dir = _as_str(emitter_data.get("templates_dir"))
        emitter.templates_dir = root / templates_dir if templates_dir else None
        emitter.base_interface = _as_str(emitter_data.get("base_interface"))

    output_path = _as_str(data.get("output_path"))
    log_file = _as_str(data.get("log_file"))

    return GeneratorConfig(
        root=root,
        package_path=[root / entry for entry in split_path_list(data.get("package_path"))],
        sources=[root / entry for entry in split_path_list(data.get("sources"))],
        output_path=root / output_path if output_path else None,
        package_names=_as_str_list(data.get("package_names")),
        emitter=emitter,
        log_file=root / log_file if log_file else None,
    )


def split_path_list(value: Any) -> List[str]:
    """Split ``os.pathsep`` separated strings or flatten lists of them."""
    entries: List[str] = []
    for item in _as_str_list(value):
        entries.extend(part for part in item.split(os.pathsep) if part.strip())
    return entries


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


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
    "EmitterConfig",
    "GeneratorConfig",
    "load_config",
    "split_path_list",
]
