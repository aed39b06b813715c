"""Pipeline orchestration: locate, resolve, synthesize and assemble."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from .assembler.imports import ImportRewriter, product_children
from .assembler.script import AssemblyOptions, ScriptAssembler
from .config import PackConfig
from .dialects import DEFAULT_DIALECT, Dialect, get_dialect
from .logging import get_logger
from .resolver.graph import DescriptorMap, GraphBuilder, check_parents
from .resolver.locator import find_library
from .resolver.manifest import (
    MANIFEST_FILENAME,
    read_main_entry,
    read_manifest,
    read_script,
)
from .resolver.naming import validate_identifier

_LOGGER = get_logger("orchestrator")


class Packer:
    """Coordinates one bundling run from library name to output text.

    Explicit arguments win over the values loaded from ``.pypack.yml``.
    """

    def __init__(self, config: PackConfig | None = None) -> None:
        self.config = config

    def pack(
        self,
        dialect: str | None,
        library_name: str,
        roots: Sequence[Path] | None = None,
        *,
        product: Optional[str] = None,
        marker: Optional[str] = None,
        isolation_token: Optional[bool] = None,
        insert_fallback: Optional[str] = None,
    ) -> str:
        """Bundle the main library ``library_name`` into a single script."""
        selected = self._select_dialect(dialect)
        search_roots = self._roots(roots)
        product = product or (self.config.product if self.config else None)
        if product:
            product = validate_identifier(product, "product name")

        library_dir = find_library(library_name, True, search_roots)
        _LOGGER.info("Packing %s from %s (dialect %s)", library_name, library_dir, selected.name)
        main_lines = read_main_entry(library_dir)
        entries = read_manifest(library_dir)

        return self._pack_lines(
            selected,
            library_dir,
            validate_identifier(library_name, "library name"),
            entries,
            main_lines,
            search_roots,
            product=product,
            options=self._options(marker, isolation_token, insert_fallback),
        )

    def pack_script(
        self,
        script_path: Path,
        *,
        dialect: str | None = None,
        roots: Sequence[Path] | None = None,
    ) -> str:
        """Bundle a standalone script whose directory acts as the main library.

        The ``pack.list`` beside the script is optional.
        """
        script_path = Path(script_path)
        library_dir = script_path.parent
        selected = self._select_dialect(dialect)
        search_roots = list(roots) if roots else self._roots(None) or [library_dir]

        manifest_path = library_dir / MANIFEST_FILENAME
        entries = read_manifest(manifest_path) if manifest_path.is_file() else []
        main_lines = read_script(script_path)
        _LOGGER.info("Packing script %s (dialect %s)", script_path, selected.name)

        return self._pack_lines(
            selected,
            library_dir,
            script_path.stem,
            entries,
            main_lines,
            search_roots,
            product=None,
            options=self._options(None, None, None),
        )

    def _pack_lines(
        self,
        dialect: Dialect,
        library_dir: Path,
        library_name: str,
        entries: Sequence[str],
        main_lines: Sequence[str],
        roots: Sequence[Path],
        *,
        product: Optional[str],
        options: AssemblyOptions,
    ) -> str:
        builder = GraphBuilder(dialect, roots, product=product)
        descriptors = builder.build_main(library_dir, library_name, entries)
        check_parents(descriptors)

        if product:
            rewriter = ImportRewriter(product, product_children(product, descriptors))
            descriptors = _rewrite_sources(dialect, descriptors, rewriter)
            main_lines = [rewriter.rewrite_line(line) for line in main_lines]

        _LOGGER.info("Bundling %d module(s)", len(descriptors))
        return ScriptAssembler(dialect, options).assemble(main_lines, descriptors)

    def _select_dialect(self, dialect: str | None) -> Dialect:
        token = dialect or (self.config.dialect if self.config else None) or DEFAULT_DIALECT
        return get_dialect(token)

    def _roots(self, roots: Sequence[Path] | None) -> list[Path]:
        if roots:
            return [Path(root) for root in roots]
        if self.config:
            return list(self.config.library_paths)
        return []

    def _options(
        self,
        marker: Optional[str],
        isolation_token: Optional[bool],
        insert_fallback: Optional[str],
    ) -> AssemblyOptions:
        options = AssemblyOptions()
        if self.config:
            options.marker = self.config.marker
            options.isolation_token = self.config.isolation_token
            options.insert_fallback = self.config.insert_fallback
        if marker is not None:
            options.marker = marker
        if isolation_token is not None:
            options.isolation_token = isolation_token
        if insert_fallback is not None:
            options.insert_fallback = insert_fallback
        return options


def _rewrite_sources(dialect: Dialect, descriptors: DescriptorMap, rewriter: ImportRewriter) -> DescriptorMap:
    rewritten: DescriptorMap = {}
    for name, descriptor in descriptors.items():
        unit = replace(descriptor.unit, source=rewriter.rewrite(descriptor.unit.source))
        rewritten[name] = dialect.describe(unit)
    return rewritten


def pack(
    dialect: str,
    library_name: str,
    roots: Sequence[Path],
    *,
    product: Optional[str] = None,
) -> str:
    """Bundle ``library_name`` found on ``roots`` without any configuration file."""
    return Packer().pack(dialect, library_name, roots, product=product)


__all__ = ["Packer", "pack"]
