"""Python 2.7 dialect built on the ``imp`` module and the exec statement."""

from __future__ import annotations

import json

from ..models import Unit
from .base import Dialect, module_ref
from .escaping import embed


class LegacyDialect(Dialect):
    """Fragments for Python 2.7 interpreters.

    Unit bodies are embedded as ASCII-only byte-string literals: non-ASCII
    text becomes the escapes of its UTF-8 bytes and undecodable bytes are
    reproduced as they were, so the bundle needs no coding declaration of
    its own. A unit that declares a coding other than UTF-8 is still
    misread by Python 2, which honours the cookie inside the exec'd string.
    """

    name = "2.7"
    aliases = ("legacy",)
    header = "import sys, imp"

    def render_alloc(self, unit: Unit) -> str:
        name = json.dumps(unit.qualified_name)
        ref = module_ref(unit.qualified_name)
        lines = [
            f"{ref} = imp.new_module({name})",
            f"{ref}.__name__ = {name}",
            f"{ref}.__package__ = {json.dumps(unit.package_name)}",
        ]
        if unit.is_composite:
            lines.append(f"{ref}.__path__ = []")
        return "\n".join(lines)

    def render_load(self, unit: Unit) -> str:
        literal = embed(unit.source, ascii_only=True)
        return f"exec {literal} in {module_ref(unit.qualified_name)}.__dict__"
