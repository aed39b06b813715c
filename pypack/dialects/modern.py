"""Python 3.5+ dialect built on ``importlib.util`` module specs."""

from __future__ import annotations

import json

from ..models import Unit
from .base import Dialect, module_ref
from .escaping import embed


class ModernDialect(Dialect):
    name = "3.5"
    aliases = ("modern", "3")
    header = "import sys, importlib.util"

    def render_alloc(self, unit: Unit) -> str:
        # module_from_spec stamps __name__, __package__, __spec__ and, for
        # packages, an empty __path__.
        name = json.dumps(unit.qualified_name)
        is_package = "True" if unit.is_composite else "False"
        return (
            f"{module_ref(unit.qualified_name)} = importlib.util.module_from_spec("
            f"importlib.util.spec_from_loader({name}, loader=None, is_package={is_package}))"
        )

    def render_load(self, unit: Unit) -> str:
        return f"exec({embed(unit.source)}, {module_ref(unit.qualified_name)}.__dict__)"
