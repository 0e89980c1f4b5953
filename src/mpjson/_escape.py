"""UTF-8 validation and JSON string literals that are also safe inside JavaScript."""

from __future__ import annotations

import re
from typing import Any
from typing import Final

from ._errors import InvalidEncodingError

_CONTROL_LIMIT: Final = 0x20
_BMP_LIMIT: Final = 0xFFFF


def _build_escape_table() -> dict[int, str]:
    table = {
        ord('"'): '\\"',
        ord("\\"): "\\\\",
        ord("\b"): "\\b",
        ord("\f"): "\\f",
        ord("\n"): "\\n",
        ord("\r"): "\\r",
        ord("\t"): "\\t",
    }
    for code in range(_CONTROL_LIMIT):
        table.setdefault(code, f"\\u{code:04x}")

    # Legal unescaped in JSON, but JavaScript treats both as line terminators
    # even inside a string literal.
    table[0x2028] = "\\u2028"
    table[0x2029] = "\\u2029"
    return table


_ESCAPE_TABLE: Final = _build_escape_table()
_NON_ASCII: Final = re.compile(r"[^\x00-\x7f]")


def _escape_non_ascii(match: re.Match[str]) -> str:
    code = ord(match.group())
    if code <= _BMP_LIMIT:
        return f"\\u{code:04x}"

    # Astral code points become a UTF-16 surrogate pair
    code -= 0x10000
    high = 0xD800 | (code >> 10)
    low = 0xDC00 | (code & 0x3FF)
    return f"\\u{high:04x}\\u{low:04x}"


def decode_utf8(raw: memoryview | bytes, doc: Any = b"", start: int = 0) -> str:
    """
    Decodes string payload bytes, rejecting anything that is not UTF-8.

    ``start`` is the payload's offset in ``doc`` so the error can point at
    the first invalid byte of the whole buffer.
    """
    try:
        return str(raw, "utf-8")
    except UnicodeDecodeError as e:
        raise InvalidEncodingError(
            f"Invalid UTF-8 in string: {e.reason}", doc, start + e.start
        ) from e


def escape_string(s: str, ensure_ascii: bool = False) -> str:
    """
    Renders text as a double-quoted JSON string literal.

    Quotes, backslashes and control characters use JSON escapes, and
    U+2028/U+2029 are always escaped so the literal can be evaluated as
    JavaScript. With ``ensure_ascii`` every non-ASCII character is escaped
    as well.
    """
    escaped = s.translate(_ESCAPE_TABLE)
    if ensure_ascii:
        escaped = _NON_ASCII.sub(_escape_non_ascii, escaped)
    return f'"{escaped}"'
