"""Tests for preamble insertion strategies."""

from __future__ import annotations

import pytest

from pypack.assembler.insertion import (
    BoundaryInsertion,
    ImportStatementInsertion,
    MarkerInsertion,
    choose_insertion_index,
    default_strategies,
    future_floor,
    string_continuation_lines,
)


def test_import_strategy_finds_first_top_level_import() -> None:
    lines = ["# comment", "x = 1", "    import hidden", "from a import b", "import c"]

    assert ImportStatementInsertion().locate(lines) == 3


def test_import_strategy_skips_future_imports() -> None:
    lines = ['"""Doc."""', "from __future__ import annotations", "", "import os"]

    assert ImportStatementInsertion().locate(lines) == 3


def test_import_strategy_ignores_lookalikes() -> None:
    assert ImportStatementInsertion().locate(["important = True", "fromage = 1"]) is None


def test_marker_strategy_matches_stripped_line() -> None:
    lines = ["x = 1", "  # pypack: modules  ", "run()"]

    assert MarkerInsertion().locate(lines) == 1
    assert MarkerInsertion("# other").locate(lines) is None


def test_boundary_strategy_respects_header_lines() -> None:
    lines = ["#!/usr/bin/env python", "# -*- coding: utf-8 -*-", "run()", ""]

    assert BoundaryInsertion("start").locate(lines) == 2
    assert BoundaryInsertion("end").locate(lines) == 3


def test_boundary_strategy_rejects_unknown_position() -> None:
    with pytest.raises(ValueError):
        BoundaryInsertion("middle")


def test_future_floor_covers_future_imports() -> None:
    lines = ["#!/usr/bin/env python", "from __future__ import annotations", "x = 1"]

    assert future_floor(lines) == 2


def test_strategies_are_tried_in_order() -> None:
    with_marker = ["x = 1", "# here", "run()"]
    with_import = ["x = 1", "# here", "import os"]

    assert choose_insertion_index(with_marker, default_strategies("# here")) == 1
    assert choose_insertion_index(with_import, default_strategies("# here")) == 2
    assert choose_insertion_index(with_marker, default_strategies(None, "end")) == 3
    assert choose_insertion_index(with_marker, default_strategies()) == 0


def test_import_strategy_skips_text_inside_multiline_strings() -> None:
    lines = [
        'USAGE = """',
        "import this line is help text",
        '"""',
        "import os",
    ]

    assert ImportStatementInsertion().locate(lines) == 3


def test_marker_strategy_skips_text_inside_multiline_strings() -> None:
    lines = ["NOTE = '''", "# pypack: modules", "'''", "# pypack: modules", "run()"]

    assert MarkerInsertion().locate(lines) == 3


def test_string_continuation_lines_leaves_opening_line_eligible() -> None:
    lines = ["x = 1", 'doc = """first', "import inside", 'last"""', "import os"]

    assert string_continuation_lines(lines) == {2, 3}


def test_string_continuation_lines_tolerates_unterminated_strings() -> None:
    assert string_continuation_lines(["import os", 'broken = """never closed']) == set()
