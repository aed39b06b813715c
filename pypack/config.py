"""Configuration loading for pypack (.pypack.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".pypack.yml"

_INSERT_POSITIONS = ("start", "end")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class PackConfig:
    """Represents the bundling defaults defined in .pypack.yml."""

    root: Path
    dialect: Optional[str] = None
    library_paths: List[Path] = field(default_factory=list)
    product: Optional[str] = None
    marker: Optional[str] = None
    isolation_token: bool = True
    insert_fallback: str = "start"


def load_config(config_path: Path) -> PackConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return PackConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    library_paths = [
        (root / path).resolve() for path in _as_str_list(data.get("library_paths"))
    ]

    isolation_token = _as_bool(data.get("isolation_token"))
    if data.get("isolation_token") is not None and isolation_token is None:
        raise ConfigError("isolation_token must be a boolean")

    insert_fallback = _as_str(data.get("insert_fallback")) or "start"
    if insert_fallback not in _INSERT_POSITIONS:
        raise ConfigError(
            f"insert_fallback must be one of {', '.join(_INSERT_POSITIONS)}, got {insert_fallback!r}"
        )

    return PackConfig(
        root=root,
        dialect=_as_str(data.get("dialect")),
        library_paths=library_paths,
        product=_as_str(data.get("product")),
        marker=_as_str(data.get("marker")),
        isolation_token=True if isolation_token is None else isolation_token,
        insert_fallback=insert_fallback,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


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
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["CONFIG_FILENAME", "ConfigError", "PackConfig", "load_config"]
