"""Reading pack.list manifests and main-entry scripts."""

from __future__ import annotations

import io
import re
import tokenize
from pathlib import Path
from typing import List, Sequence

from ..errors import MalformedManifestError, NotFoundError
from ..logging import get_logger

MANIFEST_FILENAME = "pack.list"
MAIN_ENTRY_FILENAME = "__main__.py"
SELF_REFERENCE = "."
OUTPUT_ENCODING = "utf-8"

_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_CODING_COOKIE = re.compile(r"^([ \t\f]*#.*?coding[:=][ \t]*)([-\w.]+)")

_LOGGER = get_logger("manifest")


def split_lines(text: str) -> List[str]:
    """Split text on any line ending."""
    return _LINE_BREAK.split(text)


def source_encoding(raw: bytes) -> str:
    """Return the encoding Python would use for ``raw`` (BOM, then PEP 263 cookie)."""
    try:
        encoding, _ = tokenize.detect_encoding(io.BytesIO(raw).readline)
    except SyntaxError as exc:
        _LOGGER.debug("No usable encoding declaration (%s); assuming utf-8", exc)
        return OUTPUT_ENCODING
    return encoding


def decode_source(raw: bytes) -> str:
    """Decode Python source the way the interpreter does.

    Bytes that are invalid in the declared encoding are kept as surrogate
    escapes so they can still be reproduced byte for byte.
    """
    return raw.decode(source_encoding(raw), errors="surrogateescape")


def read_script(path: Path) -> List[str]:
    """Return the lines of a script that is copied verbatim into the bundle.

    The bundle is written as UTF-8, so a coding cookie naming any other
    encoding is rewritten to match.
    """
    raw = path.read_bytes()
    lines = split_lines(decode_source(raw))
    if source_encoding(raw) not in (OUTPUT_ENCODING, "utf-8-sig"):
        for index, line in enumerate(lines[:2]):
            match = _CODING_COOKIE.match(line)
            if match:
                lines[index] = match.group(1) + OUTPUT_ENCODING + line[match.end():]
                break
    return lines


def read_manifest(path: Path) -> List[str]:
    """Return the ordered, non-blank entries of a manifest file.

    ``path`` may point at the manifest itself or at the directory holding it.
    """
    manifest_path = path / MANIFEST_FILENAME if path.is_dir() else path
    try:
        text = manifest_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise NotFoundError(f"manifest not found: {manifest_path}") from exc
    entries = [line.strip() for line in split_lines(text)]
    return [entry for entry in entries if entry]


def read_main_entry(library_dir: Path) -> List[str]:
    """Return the lines of a library's __main__.py."""
    main_path = library_dir / MAIN_ENTRY_FILENAME
    try:
        return read_script(main_path)
    except FileNotFoundError as exc:
        raise NotFoundError(f"main entry not found: {main_path}") from exc


def is_local_entry(entry: str) -> bool:
    return entry.startswith(SELF_REFERENCE)


def require_self_reference(entries: Sequence[str], library: str) -> None:
    """Validate the manifest of a library that initializes its own namespace."""
    if not entries or entries[-1] != SELF_REFERENCE:
        raise MalformedManifestError(
            f"final entry of the {MANIFEST_FILENAME} for {library} must self-reference "
            f"({SELF_REFERENCE!r})"
        )


__all__ = [
    "MAIN_ENTRY_FILENAME",
    "MANIFEST_FILENAME",
    "OUTPUT_ENCODING",
    "SELF_REFERENCE",
    "decode_source",
    "is_local_entry",
    "read_main_entry",
    "read_manifest",
    "read_script",
    "require_self_reference",
    "split_lines",
]
