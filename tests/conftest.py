from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.library_builder import LibraryBuilder


@pytest.fixture
def libraries(tmp_path: Path) -> LibraryBuilder:
    """Provide a reusable library tree builder rooted at the pytest tmp_path."""
    return LibraryBuilder(tmp_path)
