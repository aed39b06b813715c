"""Embedding arbitrary source text inside a triple-quoted string literal."""

from __future__ import annotations

import re

QUOTE = "'"
DELIMITER = QUOTE * 3

_SURROGATE = re.compile("[\udc80-\udcff]")
_NON_ASCII = re.compile(r"[^\x00-\x7f]")


def escape_for_literal(text: str, *, ascii_only: bool = False) -> str:
    """Escape ``text`` so that ``'''<result>'''`` evaluates back to ``text``.

    Backslashes are escaped before quotes so the quote escapes are not
    doubled. NUL characters and the lone surrogates produced by
    ``surrogateescape`` decoding become escape sequences, which keeps the
    emitted file valid source and encodable as UTF-8.

    With ``ascii_only`` every non-ASCII character is written as the
    ``\\xNN`` escapes of its UTF-8 bytes, and surrogates as the raw byte they
    stand for. The literal then reads back as the source's bytes in a
    byte-string literal.
    """
    escaped = text.replace("\\", "\\\\").replace(QUOTE, "\\" + QUOTE)
    escaped = escaped.replace("\0", "\\x00")
    if ascii_only:
        return _NON_ASCII.sub(_byte_escapes, escaped)
    return _SURROGATE.sub(lambda match: f"\\u{ord(match.group()):04x}", escaped)


def _byte_escapes(match: "re.Match[str]") -> str:
    char = match.group()
    if _SURROGATE.match(char):
        data = bytes([ord(char) - 0xDC00])
    else:
        data = char.encode("utf-8")
    return "".join(f"\\x{byte:02x}" for byte in data)


def embed(text: str, *, ascii_only: bool = False) -> str:
    """Return ``text`` as a complete triple-quoted literal."""
    return f"{DELIMITER}{escape_for_literal(text, ascii_only=ascii_only)}{DELIMITER}"


__all__ = ["DELIMITER", "embed", "escape_for_literal"]
