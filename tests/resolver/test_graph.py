"""Tests for pypack.resolver.graph."""

from __future__ import annotations

import pytest

from pypack.dialects import ModernDialect
from pypack.errors import (
    CircularReferenceError,
    ConflictingDefinitionError,
    MalformedManifestError,
    NotFoundError,
)
from pypack.resolver.graph import GraphBuilder, check_parents, merge_descriptors
from pypack.resolver.manifest import read_manifest


def _build_main(libraries, name: str, *, product: str | None = None):
    root = libraries.root()
    builder = GraphBuilder(ModernDialect(), [root], product=product)
    library_dir = root / name
    return builder.build_main(library_dir, name, read_manifest(library_dir))


def test_local_units_follow_manifest_order(libraries) -> None:
    libraries.library(
        "app",
        [".c", ".a", ".b"],
        {"a.py": "A = 1\n", "b.py": "B = 2\n", "c.py": "C = 3\n", "__main__.py": ""},
    )

    descriptors = _build_main(libraries, "app")

    assert list(descriptors) == ["c", "a", "b"]
    assert descriptors["a"].unit.source == "A = 1\n"
    assert all(not descriptor.link for descriptor in descriptors.values())


def test_external_library_is_qualified_under_its_name(libraries) -> None:
    libraries.library("app", ["util", ".main_helpers"], {"main_helpers.py": ""})
    libraries.library(
        "util",
        [".text", ".io.files", ".io", "."],
        {"__init__.py": "", "text.py": "", "io/__init__.py": "", "io/files.py": ""},
    )

    descriptors = _build_main(libraries, "app")

    assert list(descriptors) == ["util.text", "util.io.files", "util.io", "util", "main_helpers"]
    assert descriptors["util.io"].unit.is_composite is True
    assert descriptors["util.io.files"].unit.parent_name == "util.io"
    assert descriptors["util"].unit.parent_name is None
    check_parents(descriptors)


def test_diamond_references_are_merged_once(libraries) -> None:
    libraries.library("app", ["left", "right"])
    libraries.library("left", ["base", "."], {"__init__.py": "L = 1\n"})
    libraries.library("right", ["base", "."], {"__init__.py": "R = 1\n"})
    libraries.library("base", ["."], {"__init__.py": "BASE = 1\n"})

    descriptors = _build_main(libraries, "app")

    assert list(descriptors) == ["base", "left", "right"]


def test_conflicting_definitions_are_rejected(libraries) -> None:
    libraries.library("app", [".helpers", "helpers"], {"helpers.py": "VERSION = 1\n"})
    libraries.library("helpers", ["."], {"__init__.py": "VERSION = 2\n"})

    with pytest.raises(ConflictingDefinitionError) as excinfo:
        _build_main(libraries, "app")

    assert "helpers" in str(excinfo.value)


def test_conflict_between_two_libraries(libraries) -> None:
    libraries.library("app", ["A", "A.x"])
    libraries.library("A", [".x", "."], {"__init__.py": "", "x.py": "WHO = 'A'\n"})
    libraries.library("A.x", ["."], {"__init__.py": "WHO = 'A.x'\n"})

    with pytest.raises(ConflictingDefinitionError) as excinfo:
        _build_main(libraries, "app")

    assert excinfo.value.name == "A.x"


def test_identical_redefinitions_are_tolerated(libraries) -> None:
    libraries.library("app", [".helpers", "helpers"], {"helpers/__init__.py": "VERSION = 1\n"})
    libraries.library("helpers", ["."], {"__init__.py": "VERSION = 1\n"})

    descriptors = _build_main(libraries, "app")

    assert list(descriptors) == ["helpers"]


def test_external_library_must_self_reference(libraries) -> None:
    libraries.library("app", ["util"])
    libraries.library("util", [".text"], {"__init__.py": "", "text.py": ""})

    with pytest.raises(MalformedManifestError) as excinfo:
        _build_main(libraries, "app")

    assert "self-reference" in str(excinfo.value)


def test_missing_external_library_is_reported(libraries) -> None:
    libraries.library("app", [".a", "missing_lib"], {"a.py": ""})

    with pytest.raises(NotFoundError) as excinfo:
        _build_main(libraries, "app")

    assert "missing_lib" in str(excinfo.value)


def test_circular_library_references_are_detected(libraries) -> None:
    libraries.library("app", ["first"])
    libraries.library("first", ["second", "."], {"__init__.py": ""})
    libraries.library("second", ["first", "."], {"__init__.py": ""})

    with pytest.raises(CircularReferenceError) as excinfo:
        _build_main(libraries, "app")

    assert excinfo.value.chain == ["first", "second", "first"]


def test_library_referencing_itself_is_detected(libraries) -> None:
    libraries.library("app", ["app", ".a", "."], {"a.py": "", "__init__.py": ""})

    with pytest.raises(CircularReferenceError):
        _build_main(libraries, "app")


def test_product_namespace_nests_every_unit(libraries) -> None:
    libraries.library("app", ["util", ".greet", "."], {"__init__.py": "", "greet.py": ""})
    libraries.library("util", [".text", "."], {"__init__.py": "", "text.py": ""})

    descriptors = _build_main(libraries, "app", product="acme")

    assert list(descriptors) == ["acme.util.text", "acme.util", "acme.greet", "acme"]
    check_parents(descriptors)


def test_product_main_manifest_must_self_reference(libraries) -> None:
    libraries.library("app", [".greet"], {"greet.py": ""})

    with pytest.raises(MalformedManifestError):
        _build_main(libraries, "app", product="acme")


def test_check_parents_requires_bundled_parent(libraries) -> None:
    libraries.library("app", [".sub.leaf"], {"sub/__init__.py": "", "sub/leaf.py": ""})

    descriptors = _build_main(libraries, "app")

    with pytest.raises(MalformedManifestError) as excinfo:
        check_parents(descriptors)
    assert "sub.leaf" in str(excinfo.value)


def test_merge_descriptors_keeps_first_seen_order(libraries) -> None:
    libraries.library("app", [".a", ".b"], {"a.py": "", "b.py": ""})
    descriptors = _build_main(libraries, "app")

    merged = {"b": descriptors["b"]}
    merge_descriptors(merged, descriptors)

    assert list(merged) == ["b", "a"]
