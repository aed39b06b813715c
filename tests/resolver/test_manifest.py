"""Tests for pypack.resolver.manifest."""

from __future__ import annotations

from pathlib import Path

import pytest

from pypack.errors import MalformedManifestError, NotFoundError
from pypack.resolver.manifest import (
    is_local_entry,
    read_main_entry,
    read_manifest,
    require_self_reference,
)


def test_read_manifest_trims_entries_and_drops_blank_lines(tmp_path: Path) -> None:
    manifest = tmp_path / "pack.list"
    manifest.write_bytes(b"  .a  \r\n\r\n.b\rutil\n   \n\t.\n")

    assert read_manifest(manifest) == [".a", ".b", "util", "."]


def test_read_manifest_accepts_library_directory(tmp_path: Path) -> None:
    (tmp_path / "pack.list").write_text(".only\n", encoding="utf-8")

    assert read_manifest(tmp_path) == [".only"]


def test_read_manifest_reports_missing_file(tmp_path: Path) -> None:
    with pytest.raises(NotFoundError) as excinfo:
        read_manifest(tmp_path / "pack.list")
    assert "pack.list" in str(excinfo.value)


def test_read_main_entry_normalises_line_endings(tmp_path: Path) -> None:
    (tmp_path / "__main__.py").write_bytes(b"import a\r\nprint(a)\r\n")

    assert read_main_entry(tmp_path) == ["import a", "print(a)", ""]


def test_read_main_entry_redeclares_foreign_coding_as_utf8(tmp_path: Path) -> None:
    (tmp_path / "__main__.py").write_bytes(
        b"#!/usr/bin/env python\n# -*- coding: latin-1 -*-\nprint('\xe9')\n"
    )

    assert read_main_entry(tmp_path) == [
        "#!/usr/bin/env python",
        "# -*- coding: utf-8 -*-",
        "print('é')",
        "",
    ]


def test_read_main_entry_keeps_utf8_cookie_untouched(tmp_path: Path) -> None:
    (tmp_path / "__main__.py").write_bytes("# coding=utf8\nprint('é')\n".encode("utf-8"))

    assert read_main_entry(tmp_path) == ["# coding=utf8", "print('é')", ""]


def test_read_main_entry_reports_missing_file(tmp_path: Path) -> None:
    with pytest.raises(NotFoundError):
        read_main_entry(tmp_path)


def test_require_self_reference_accepts_trailing_dot() -> None:
    require_self_reference([".a", "util", "."], "pkg")


@pytest.mark.parametrize("entries", [[], [".a"], [".", ".a"]])
def test_require_self_reference_rejects_other_endings(entries: list[str]) -> None:
    with pytest.raises(MalformedManifestError) as excinfo:
        require_self_reference(entries, "pkg")
    assert "must self-reference" in str(excinfo.value)


def test_is_local_entry_distinguishes_library_references() -> None:
    assert is_local_entry(".a.b")
    assert is_local_entry(".")
    assert not is_local_entry("util")
