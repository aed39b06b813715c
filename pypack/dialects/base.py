"""Base class for code generation dialects."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Tuple

from ..models import ModuleDescriptor, Unit


def module_ref(name: str) -> str:
    """Return the expression that looks ``name`` up in the module table."""
    return f"sys.modules[{json.dumps(name)}]"


class Dialect(ABC):
    """Strategy that renders the alloc/link/load fragments for one runtime."""

    name: str = ""
    aliases: Tuple[str, ...] = ()
    header: str = ""

    @abstractmethod
    def render_alloc(self, unit: Unit) -> str:
        """Create the empty module and register it under its qualified name."""

    @abstractmethod
    def render_load(self, unit: Unit) -> str:
        """Execute the unit body inside the allocated module namespace."""

    def render_link(self, unit: Unit) -> str:
        parent = unit.parent_name
        if parent is None:
            return ""
        return (
            f"setattr({module_ref(parent)}, {json.dumps(unit.local_name)}, "
            f"{module_ref(unit.qualified_name)})"
        )

    def describe(self, unit: Unit) -> ModuleDescriptor:
        return ModuleDescriptor(
            unit=unit,
            alloc=self.render_alloc(unit),
            link=self.render_link(unit),
            load=self.render_load(unit),
        )

    def tokens(self) -> Tuple[str, ...]:
        return (self.name, *self.aliases)
