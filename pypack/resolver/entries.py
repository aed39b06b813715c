"""Resolving manifest entries to source files or libraries on disk."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from ..errors import NotFoundError
from .locator import find_library
from .manifest import SELF_REFERENCE, decode_source, split_lines
from .naming import SEPARATOR, strip_trailing_separator, validate_identifier

SOURCE_SUFFIX = ".py"
INITIALIZER_FILENAME = "__init__.py"


@dataclass(frozen=True)
class ResolvedEntry:
    """Concrete file backing a local manifest entry."""

    entry: str
    path: Path
    is_composite: bool


def entry_segments(entry: str) -> list[str]:
    """Return the path segments of a local entry (empty for the self-reference)."""
    local = strip_trailing_separator(entry)[len(SELF_REFERENCE):]
    if not local:
        return []
    validate_identifier(local, "manifest entry")
    return local.split(SEPARATOR)


def resolve_local_entry(base_dir: Path, entry: str, *, enclosing: str) -> ResolvedEntry:
    """Find the plain file or package initializer for a local entry.

    ``.a.b`` maps to ``base_dir/a/b.py`` or, failing that,
    ``base_dir/a/b/__init__.py``.
    """
    base_path = base_dir.joinpath(*entry_segments(entry))
    plain = base_path.with_name(base_path.name + SOURCE_SUFFIX)
    composite = base_path / INITIALIZER_FILENAME

    if base_path != base_dir and plain.is_file():
        return ResolvedEntry(entry=entry, path=plain, is_composite=False)
    if composite.is_file():
        return ResolvedEntry(entry=entry, path=composite, is_composite=True)
    raise NotFoundError(f"could not find {entry} in {enclosing or base_dir}")


def resolve_library_entry(entry: str, roots: Sequence[Path]) -> Path:
    return find_library(entry, False, roots)


def read_source(path: Path) -> str:
    """Read a unit body, honouring its coding cookie."""
    raw = decode_source(path.read_bytes())
    return "\n".join(split_lines(raw))


__all__ = [
    "INITIALIZER_FILENAME",
    "ResolvedEntry",
    "SOURCE_SUFFIX",
    "entry_segments",
    "read_source",
    "resolve_library_entry",
    "resolve_local_entry",
]
