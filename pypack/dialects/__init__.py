"""Code generation dialects and their discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Dict, Iterable, List

from ..errors import UnsupportedDialectError
from .base import Dialect
from .escaping import escape_for_literal
from .legacy import LegacyDialect
from .modern import ModernDialect

_ENTRY_POINT_GROUP = "pypack.dialects"

_BUILTIN_FACTORIES: List[Callable[[], Dialect]] = [LegacyDialect, ModernDialect]

DEFAULT_DIALECT = ModernDialect.name


def available_dialects() -> Dict[str, Dialect]:
    """Return every known dialect keyed by each of its tokens."""
    registry: Dict[str, Dialect] = {}

    def _add(instance: Dialect) -> None:
        for token in instance.tokens():
            registry.setdefault(token.lower(), instance)

    for factory in _BUILTIN_FACTORIES:
        _add(factory())

    for entry in _iter_entry_points():
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - defensive guard
            raise RuntimeError(f"Failed to load dialect entry point '{entry.name}': {exc}") from exc
        instance = _coerce_dialect(loaded)
        if not instance.name:
            instance.name = entry.name
        _add(instance)

    return registry


def get_dialect(token: str) -> Dialect:
    """Select the dialect for one bundling run."""
    registry = available_dialects()
    dialect = registry.get(token.strip().lower())
    if dialect is None:
        known = ", ".join(sorted(registry))
        raise UnsupportedDialectError(f"unknown dialect {token!r} (expected one of: {known})")
    return dialect


def _coerce_dialect(obj: object) -> Dialect:
    if isinstance(obj, Dialect):
        return obj
    if isinstance(obj, type) and issubclass(obj, Dialect):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, Dialect):
            return instance
    raise TypeError("Dialect entry point must be a Dialect subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    try:
        entry_points = metadata.entry_points()
    except Exception:  # pragma: no cover - defensive guard
        return []

    if hasattr(entry_points, "select"):
        return entry_points.select(group=_ENTRY_POINT_GROUP)  # type: ignore[return-value]

    return entry_points.get(_ENTRY_POINT_GROUP, [])  # type: ignore[return-value]


__all__ = [
    "DEFAULT_DIALECT",
    "Dialect",
    "LegacyDialect",
    "ModernDialect",
    "available_dialects",
    "escape_for_literal",
    "get_dialect",
]
