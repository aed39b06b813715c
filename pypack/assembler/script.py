"""Splicing generated module preambles into the main entry script."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from jinja2 import Environment, FileSystemLoader

from ..dialects import Dialect
from ..logging import get_logger
from ..models import ModuleDescriptor
from .insertion import InsertionStrategy, choose_insertion_index, default_strategies

_LOGGER = get_logger("assembler")

ISOLATION_TOKEN_NAME = "__pack_isolation_token"


@dataclass
class AssemblyOptions:
    """Knobs that shape the assembled script."""

    isolation_token: bool = True
    marker: Optional[str] = None
    insert_fallback: str = "start"


class ScriptAssembler:
    """Renders the alloc, link and load blocks and splices them into a script.

    Every module is allocated and linked to its parent before any module
    body runs, since a body may reach siblings or parents by dotted path at
    import time.
    """

    def __init__(
        self,
        dialect: Dialect,
        options: AssemblyOptions | None = None,
        *,
        strategies: Sequence[InsertionStrategy] | None = None,
        templates_dir: Path | None = None,
    ) -> None:
        self.dialect = dialect
        self.options = options or AssemblyOptions()
        self.strategies = list(
            strategies
            if strategies is not None
            else default_strategies(self.options.marker, self.options.insert_fallback)
        )
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render_preamble(self, descriptors: Mapping[str, ModuleDescriptor]) -> str:
        values = list(descriptors.values())
        template = self._env.get_template("preamble.j2")
        return template.render(
            isolation_token=self.options.isolation_token,
            token_name=ISOLATION_TOKEN_NAME,
            header=self.dialect.header,
            allocs=[descriptor.alloc for descriptor in values],
            links=[descriptor.link for descriptor in values if descriptor.link],
            loads=[descriptor.load for descriptor in values],
        )

    def assemble(self, main_lines: Sequence[str], descriptors: Mapping[str, ModuleDescriptor]) -> str:
        """Return the main entry with the preamble inserted.

        With nothing to bundle the main entry comes back unchanged.
        """
        lines: List[str] = list(main_lines)
        if not descriptors:
            _LOGGER.info("No modules to bundle; main entry left unchanged")
            return "\n".join(lines)

        index = choose_insertion_index(lines, self.strategies)
        _LOGGER.debug("Inserting %d module(s) at line %d", len(descriptors), index + 1)
        lines.insert(index, self.render_preamble(descriptors) + "\n")
        return "\n".join(lines)


__all__ = ["AssemblyOptions", "ISOLATION_TOKEN_NAME", "ScriptAssembler"]
