"""Strategies that pick where the generated preamble goes in the main entry."""

from __future__ import annotations

import io
import re
import tokenize
from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence, Set

from ..logging import get_logger

DEFAULT_MARKER = "# pypack: modules"

_IMPORT_LINE = re.compile(r"^(import|from)\s+")
_FUTURE_IMPORT = re.compile(r"^from\s+__future__\s+import\b")
_CODING_COMMENT = re.compile(r"^#.*coding[:=]")

_LOGGER = get_logger("assembler")

# f-strings (3.12+) and t-strings (3.14+) are tokenized in pieces.
_STRING_OPENERS = {
    getattr(tokenize, name) for name in ("FSTRING_START", "TSTRING_START") if hasattr(tokenize, name)
}
_STRING_CLOSERS = {
    getattr(tokenize, name) for name in ("FSTRING_END", "TSTRING_END") if hasattr(tokenize, name)
}


def string_continuation_lines(lines: Sequence[str]) -> Set[int]:
    """Return the indices of lines that continue a multi-line string literal.

    Tokenizing stops quietly at the first error, so sources that do not
    tokenize cleanly only lose protection below that point.
    """
    covered: Set[int] = set()
    opened: list[int] = []

    def cover(start_row: int, end_row: int) -> None:
        # token rows are 1-based; the opening line itself stays eligible
        covered.update(range(start_row, end_row))

    readline = io.StringIO("\n".join(lines)).readline
    try:
        for token in tokenize.generate_tokens(readline):
            if token.type == tokenize.STRING:
                cover(token.start[0], token.end[0])
            elif token.type in _STRING_OPENERS:
                opened.append(token.start[0])
            elif token.type in _STRING_CLOSERS and opened:
                cover(opened.pop(), token.end[0])
    except (tokenize.TokenError, SyntaxError) as exc:
        _LOGGER.debug("Stopped scanning for string literals: %s", exc)
    return covered


def future_floor(lines: Sequence[str]) -> int:
    """Return the first index at which code may be inserted.

    A shebang, an encoding declaration and any ``from __future__`` imports
    must stay above the preamble.
    """
    floor = 0
    for index, line in enumerate(lines[:2]):
        if (index == 0 and line.startswith("#!")) or _CODING_COMMENT.match(line):
            floor = index + 1
    for index, line in enumerate(lines):
        if _FUTURE_IMPORT.match(line):
            floor = max(floor, index + 1)
    return floor


class InsertionStrategy(ABC):
    """Finds the line index the preamble is spliced in at."""

    @abstractmethod
    def locate(self, lines: Sequence[str]) -> Optional[int]:
        """Return an index into ``lines`` or None when the strategy does not apply."""


class ImportStatementInsertion(InsertionStrategy):
    """Insert right before the first top-level import."""

    def locate(self, lines: Sequence[str]) -> Optional[int]:
        floor = future_floor(lines)
        inside_strings = string_continuation_lines(lines)
        for index in range(floor, len(lines)):
            line = lines[index]
            if index in inside_strings:
                continue
            if _IMPORT_LINE.match(line) and not _FUTURE_IMPORT.match(line):
                return index
        return None


class MarkerInsertion(InsertionStrategy):
    """Insert at an explicit sentinel comment line."""

    def __init__(self, marker: str = DEFAULT_MARKER) -> None:
        self.marker = marker.strip()

    def locate(self, lines: Sequence[str]) -> Optional[int]:
        floor = future_floor(lines)
        inside_strings = string_continuation_lines(lines)
        for index in range(floor, len(lines)):
            if index not in inside_strings and lines[index].strip() == self.marker:
                return index
        return None


class BoundaryInsertion(InsertionStrategy):
    """Fallback: the start of the script (below the header) or its end."""

    POSITIONS = ("start", "end")

    def __init__(self, position: str = "start") -> None:
        if position not in self.POSITIONS:
            raise ValueError(f"insert position must be one of {self.POSITIONS}, got {position!r}")
        self.position = position

    def locate(self, lines: Sequence[str]) -> Optional[int]:
        if self.position == "end":
            end = len(lines)
            # keep a trailing newline as the last line of the file
            if end and lines[-1] == "":
                end -= 1
            return max(end, future_floor(lines))
        return future_floor(lines)


def default_strategies(
    marker: Optional[str] = None, fallback: str = "start"
) -> list[InsertionStrategy]:
    strategies: list[InsertionStrategy] = [ImportStatementInsertion()]
    if marker:
        strategies.append(MarkerInsertion(marker))
    strategies.append(BoundaryInsertion(fallback))
    return strategies


def choose_insertion_index(lines: Sequence[str], strategies: Iterable[InsertionStrategy]) -> int:
    for strategy in strategies:
        index = strategy.locate(lines)
        if index is not None:
            return index
    return future_floor(lines)


__all__ = [
    "BoundaryInsertion",
    "DEFAULT_MARKER",
    "ImportStatementInsertion",
    "InsertionStrategy",
    "MarkerInsertion",
    "choose_insertion_index",
    "default_strategies",
    "future_floor",
    "string_continuation_lines",
]
