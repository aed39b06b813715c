"""Rewriting top-level imports of bundled names onto the product namespace."""

from __future__ import annotations

import re
from typing import Iterable, Mapping, Set

from ..models import ModuleDescriptor

_IMPORT = re.compile(
    r"^import\s+(?P<module>[A-Za-z_][\w.]*)(?:\s+as\s+(?P<alias>[A-Za-z_]\w*))?(?P<rest>\s*(?:#.*)?)$"
)
_FROM_IMPORT = re.compile(r"^from\s+(?P<module>[A-Za-z_][\w.]*)(?P<rest>\s+import\b.*)$")


def product_children(product: str, descriptors: Mapping[str, ModuleDescriptor]) -> Set[str]:
    """Return the names bundled directly below the product namespace."""
    prefix = product + "."
    children: Set[str] = set()
    for name in descriptors:
        if name.startswith(prefix):
            children.add(name[len(prefix):].split(".", 1)[0])
    return children


class ImportRewriter:
    """Points plain imports of bundled modules at the product namespace.

    Only column-zero statements importing a single module are touched, so
    relative imports and imports of anything that is not bundled keep their
    meaning.
    """

    def __init__(self, product: str, names: Iterable[str]) -> None:
        self.product = product
        self.names = set(names)

    def rewrite_line(self, line: str) -> str:
        match = _IMPORT.match(line)
        if match:
            return self._rewrite_import(match) or line
        match = _FROM_IMPORT.match(line)
        if match and self._is_bundled(match.group("module")):
            return f"from {self.product}.{match.group('module')}{match.group('rest')}"
        return line

    def rewrite(self, source: str) -> str:
        return "\n".join(self.rewrite_line(line) for line in source.split("\n"))

    def _rewrite_import(self, match: "re.Match[str]") -> str | None:
        module = match.group("module")
        if not self._is_bundled(module):
            return None
        alias = match.group("alias")
        rest = match.group("rest")
        head, _, tail = module.rpartition(".")
        if alias is None:
            # ``import x.y`` binds ``x``; submodules are linked as attributes.
            top = module.split(".", 1)[0]
            return f"from {self.product} import {top}{rest}"
        if head:
            return f"from {self.product}.{head} import {tail} as {alias}{rest}"
        return f"from {self.product} import {module} as {alias}{rest}"

    def _is_bundled(self, module: str) -> bool:
        return module.split(".", 1)[0] in self.names


__all__ = ["ImportRewriter", "product_children"]
