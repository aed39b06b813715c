"""Recursive expansion of manifests into ordered module descriptors."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..dialects import Dialect
from ..errors import (
    CircularReferenceError,
    ConflictingDefinitionError,
    MalformedManifestError,
)
from ..logging import get_logger
from ..models import ModuleDescriptor, Unit
from .entries import read_source, resolve_library_entry, resolve_local_entry
from .manifest import is_local_entry, read_manifest, require_self_reference
from .naming import qualify, validate_identifier

_LOGGER = get_logger("graph")

DescriptorMap = Dict[str, ModuleDescriptor]


def merge_descriptors(target: DescriptorMap, incoming: Mapping[str, ModuleDescriptor]) -> None:
    """Merge ``incoming`` into ``target``, keeping first-seen order.

    A name that is already present must carry identical fragments.
    """
    for name, descriptor in incoming.items():
        existing = target.get(name)
        if existing is None:
            target[name] = descriptor
        elif not existing.same_fragments(descriptor):
            raise ConflictingDefinitionError(name)


def check_parents(descriptors: Mapping[str, ModuleDescriptor]) -> None:
    """Every nested unit must have its parent bundled so it can be linked."""
    for name, descriptor in descriptors.items():
        parent = descriptor.unit.parent_name
        if parent is not None and parent not in descriptors:
            raise MalformedManifestError(
                f"{name} is bundled but its parent module {parent} is not; "
                f"list the parent package in the manifest"
            )


class GraphBuilder:
    """Walks manifests and synthesizes one descriptor per discovered unit.

    Units of the main library are top-level modules, or live under the
    product namespace when one is given. Every external library is its own
    namespace (nested under the product when there is one) and must list
    itself (``.``) as its final manifest entry.
    """

    def __init__(
        self,
        dialect: Dialect,
        roots: Sequence[Path],
        *,
        product: Optional[str] = None,
    ) -> None:
        self.dialect = dialect
        self.roots = [Path(root) for root in roots]
        self.product = validate_identifier(product, "product name") if product else None
        self._active: List[Tuple[str, Path]] = []

    def build_main(self, library_dir: Path, library_name: str, entries: Sequence[str]) -> DescriptorMap:
        """Expand the main library's manifest entries."""
        namespace = self.product or ""
        if self.product:
            require_self_reference(entries, library_name)
        return self._expand(library_dir, library_name, namespace, entries)

    def build_library(self, library_name: str) -> DescriptorMap:
        """Locate an external library and expand its manifest."""
        name = validate_identifier(library_name, "library name")
        library_dir = resolve_library_entry(name, self.roots)
        entries = read_manifest(library_dir)
        require_self_reference(entries, name)
        namespace = f"{self.product}.{name}" if self.product else name
        return self._expand(library_dir, name, namespace, entries)

    def _expand(
        self,
        library_dir: Path,
        library_name: str,
        namespace: str,
        entries: Sequence[str],
    ) -> DescriptorMap:
        key = (library_name, library_dir.resolve())
        if key in self._active:
            start = self._active.index(key)
            chain = [name for name, _ in self._active[start:]]
            raise CircularReferenceError(chain + [library_name])

        _LOGGER.debug("Expanding %s (%d entries) from %s", library_name, len(entries), library_dir)
        self._active.append(key)
        try:
            descriptors: DescriptorMap = {}
            for entry in entries:
                if is_local_entry(entry):
                    descriptor = self._describe_local(library_dir, library_name, namespace, entry)
                    merge_descriptors(descriptors, {descriptor.unit.qualified_name: descriptor})
                else:
                    merge_descriptors(descriptors, self.build_library(entry))
        finally:
            self._active.pop()
        return descriptors

    def _describe_local(
        self,
        library_dir: Path,
        library_name: str,
        namespace: str,
        entry: str,
    ) -> ModuleDescriptor:
        resolved = resolve_local_entry(library_dir, entry, enclosing=library_name)
        unit = Unit(
            qualified_name=qualify(namespace, entry),
            is_composite=resolved.is_composite,
            path=resolved.path,
            source=read_source(resolved.path),
        )
        _LOGGER.debug("Resolved %s -> %s", unit.qualified_name, resolved.path)
        return self.dialect.describe(unit)


__all__ = ["DescriptorMap", "GraphBuilder", "check_parents", "merge_descriptors"]
