"""Qualified module name assembly for bundled units."""

from __future__ import annotations

import keyword
from typing import Optional, Tuple

from ..errors import InvalidIdentifierError, MalformedManifestError

SEPARATOR = "."


def strip_trailing_separator(name: str) -> str:
    """Drop a single trailing separator that marks a namespace segment."""
    if name.endswith(SEPARATOR):
        return name[: -len(SEPARATOR)]
    return name


def qualify(namespace: str, entry: str) -> str:
    """Combine an enclosing namespace and a local manifest entry.

    ``qualify("pkg", ".sub.leaf")`` is ``"pkg.sub.leaf"`` and the
    self-reference ``"."`` names the namespace itself. An empty namespace
    places the entry at the top level.
    """
    base = strip_trailing_separator(namespace)
    local = strip_trailing_separator(entry)
    if not base:
        name = local[len(SEPARATOR):] if local.startswith(SEPARATOR) else local
    else:
        name = base + local
    if not name:
        raise MalformedManifestError(
            f"entry {entry!r} can only be used inside a named namespace"
        )
    return name


def split_parent(name: str) -> Tuple[Optional[str], str]:
    """Return ``(parent, local_name)``; parent is None for top-level names."""
    if SEPARATOR not in name:
        return None, name
    parent, local = name.rsplit(SEPARATOR, 1)
    return parent, local


def declaring_package(name: str, is_composite: bool) -> str:
    if is_composite:
        return name
    parent, _ = split_parent(name)
    return parent or ""


def validate_identifier(name: str, what: str = "name") -> str:
    """Ensure every dotted segment of ``name`` is a usable Python identifier.

    Returns the name with any trailing separator removed.
    """
    cleaned = strip_trailing_separator(name)
    for segment in cleaned.split(SEPARATOR):
        if not segment.isidentifier() or keyword.iskeyword(segment):
            raise InvalidIdentifierError(
                f"{what} {name!r} is not a valid module path (bad segment {segment!r})"
            )
    return cleaned


__all__ = [
    "SEPARATOR",
    "declaring_package",
    "qualify",
    "split_parent",
    "strip_trailing_separator",
    "validate_identifier",
]
