"""Locating libraries on an ordered list of search roots."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from ..errors import NotFoundError
from ..logging import get_logger
from .manifest import MAIN_ENTRY_FILENAME, MANIFEST_FILENAME
from .naming import validate_identifier

_LOGGER = get_logger("locator")


def find_library(name: str, require_main_entry: bool, roots: Sequence[Path]) -> Path:
    """Return the first ``root/name`` directory that holds a usable library.

    A candidate needs a manifest and, for main libraries, a ``__main__.py``.
    Candidates that fall short are skipped and the search moves on to the
    next root.
    """
    library = validate_identifier(name, "library name")
    for root in roots:
        candidate = Path(root) / library
        if not (candidate / MANIFEST_FILENAME).is_file():
            continue
        if require_main_entry and not (candidate / MAIN_ENTRY_FILENAME).is_file():
            _LOGGER.debug("Skipping %s: no %s", candidate, MAIN_ENTRY_FILENAME)
            continue
        _LOGGER.debug("Found library %s at %s", library, candidate)
        return candidate

    searched = ", ".join(str(root) for root in roots) or "(no library paths)"
    required = MANIFEST_FILENAME
    if require_main_entry:
        required += f" and {MAIN_ENTRY_FILENAME}"
    raise NotFoundError(
        f"could not find {library} in library paths ({required} available?); "
        f"searched: {searched}"
    )


__all__ = ["find_library"]
