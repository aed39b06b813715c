"""Core data models shared across pypack components."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .resolver.naming import declaring_package, split_parent


@dataclass(frozen=True)
class Unit:
    """A resolved source item destined to become one bundled module."""

    qualified_name: str
    is_composite: bool
    path: Path
    source: str

    @property
    def parent_name(self) -> Optional[str]:
        return split_parent(self.qualified_name)[0]

    @property
    def local_name(self) -> str:
        return split_parent(self.qualified_name)[1]

    @property
    def package_name(self) -> str:
        return declaring_package(self.qualified_name, self.is_composite)


@dataclass(frozen=True)
class ModuleDescriptor:
    """The alloc/link/load code fragments synthesized for one unit."""

    unit: Unit
    alloc: str
    link: str
    load: str

    def same_fragments(self, other: "ModuleDescriptor") -> bool:
        return (
            self.alloc == other.alloc
            and self.link == other.link
            and self.load == other.load
        )
