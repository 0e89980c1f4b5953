"""
Pytest configuration and shared fixtures for mpjson tests.

Provides immutable test case fixtures covering the MessagePack format table
and the failures every decoder must report.
"""

from dataclasses import dataclass
from typing import Any

import pytest

import mpjson


@dataclass(frozen=True)
class MsgPackTestCase:
    """
    Immutable container for MessagePack test case data.

    Holds the raw input buffer and either the expected JSON text or the
    error class the decode must raise.
    """

    description: str
    input_data: bytes
    expected_output: str = ""
    expected_error: type[mpjson.MsgPackDecodeError] | None = None
    expected_pos: int = 0


@pytest.fixture
def format_table_cases() -> list[MsgPackTestCase]:
    """
    Provides one buffer per MessagePack format family with its JSON text.
    """
    return [
        MsgPackTestCase("positive fixint", b"\x05", "5"),
        MsgPackTestCase("largest positive fixint", b"\x7f", "127"),
        MsgPackTestCase("negative fixint -1", b"\xff", "-1"),
        MsgPackTestCase("negative fixint -32", b"\xe0", "-32"),
        MsgPackTestCase("nil", b"\xc0", "null"),
        MsgPackTestCase("false", b"\xc2", "false"),
        MsgPackTestCase("true", b"\xc3", "true"),
        MsgPackTestCase("uint 8", b"\xcc\xff", "255"),
        MsgPackTestCase("uint 16", b"\xcd\x01\x00", "256"),
        MsgPackTestCase("uint 32", b"\xce\x00\x01\x00\x00", "65536"),
        MsgPackTestCase(
            "uint 64",
            b"\xcf\xff\xff\xff\xff\xff\xff\xff\xff",
            "18446744073709551615",
        ),
        MsgPackTestCase("int 8", b"\xd0\x80", "-128"),
        MsgPackTestCase("int 8 positive", b"\xd0\x7f", "127"),
        MsgPackTestCase("int 16", b"\xd1\x80\x00", "-32768"),
        MsgPackTestCase("int 32", b"\xd2\xff\xff\xff\xff", "-1"),
        MsgPackTestCase(
            "int 64",
            b"\xd3\x80\x00\x00\x00\x00\x00\x00\x00",
            "-9223372036854775808",
        ),
        MsgPackTestCase("float 64", b"\xcb\x3f\xf8\x00\x00\x00\x00\x00\x00", "1.5"),
        MsgPackTestCase("float 32", b"\xca\x3f\xc0\x00\x00", "1.5"),
        MsgPackTestCase("fixstr", b"\xa3abc", '"abc"'),
        MsgPackTestCase("empty fixstr", b"\xa0", '""'),
        MsgPackTestCase("str 8", b"\xd9\x03abc", '"abc"'),
        MsgPackTestCase("str 16", b"\xda\x00\x03abc", '"abc"'),
        MsgPackTestCase("str 32", b"\xdb\x00\x00\x00\x03abc", '"abc"'),
        MsgPackTestCase("bin 8", b"\xc4\x03\x01\x02\x03", '"AQID"'),
        MsgPackTestCase("bin 16", b"\xc5\x00\x03\x01\x02\x03", '"AQID"'),
        MsgPackTestCase(
            "bin 32", b"\xc6\x00\x00\x00\x03\x01\x02\x03", '"AQID"'
        ),
        MsgPackTestCase("fixarray", b"\x92\x01\x02", "[1,2]"),
        MsgPackTestCase("empty fixarray", b"\x90", "[]"),
        MsgPackTestCase("array 16", b"\xdc\x00\x02\x01\x02", "[1,2]"),
        MsgPackTestCase("array 32", b"\xdd\x00\x00\x00\x02\x01\x02", "[1,2]"),
        MsgPackTestCase("fixmap", b"\x81\xa1a\x01", '{"a":1}'),
        MsgPackTestCase("empty fixmap", b"\x80", "{}"),
        MsgPackTestCase("map 16", b"\xde\x00\x01\xa1a\x01", '{"a":1}'),
        MsgPackTestCase(
            "map 32", b"\xdf\x00\x00\x00\x01\xa1a\x01", '{"a":1}'
        ),
    ]


@pytest.fixture
def failure_cases() -> list[MsgPackTestCase]:
    """
    Provides buffers that must fail, with the error class and offset.
    """
    return [
        MsgPackTestCase(
            "empty buffer", b"", expected_error=mpjson.OutOfBoundsError
        ),
        MsgPackTestCase(
            "never used tag",
            b"\xc1",
            expected_error=mpjson.UnsupportedTypeError,
        ),
        MsgPackTestCase(
            "ext 8", b"\xc7\x01\x01\x00", expected_error=mpjson.UnsupportedTypeError
        ),
        MsgPackTestCase(
            "fixext 1",
            b"\xd4\x01\x00",
            expected_error=mpjson.UnsupportedTypeError,
        ),
        MsgPackTestCase(
            "unsupported tag inside array",
            b"\x92\x01\xd8",
            expected_error=mpjson.UnsupportedTypeError,
            expected_pos=2,
        ),
        MsgPackTestCase(
            "truncated uint 16",
            b"\xcd\x01",
            expected_error=mpjson.OutOfBoundsError,
            expected_pos=1,
        ),
        MsgPackTestCase(
            "truncated float 64",
            b"\xcb\x00\x00",
            expected_error=mpjson.OutOfBoundsError,
            expected_pos=1,
        ),
        MsgPackTestCase(
            "truncated str 16 header",
            b"\xda\x00",
            expected_error=mpjson.OutOfBoundsError,
            expected_pos=1,
        ),
        MsgPackTestCase(
            "string shorter than declared",
            b"\xa5ab",
            expected_error=mpjson.OutOfBoundsError,
            expected_pos=1,
        ),
        MsgPackTestCase(
            "array shorter than declared",
            b"\x93\x01\x02",
            expected_error=mpjson.OutOfBoundsError,
            expected_pos=3,
        ),
        MsgPackTestCase(
            "unsupported tag inside short array",
            b"\x92\xc1",
            expected_error=mpjson.UnsupportedTypeError,
            expected_pos=1,
        ),
        MsgPackTestCase(
            "nil key in map shorter than declared",
            b"\x82\xc0\x01\x02",
            expected_error=mpjson.InvalidKeyError,
            expected_pos=1,
        ),
        MsgPackTestCase(
            "map missing its value",
            b"\x81\xa1a",
            expected_error=mpjson.OutOfBoundsError,
            expected_pos=3,
        ),
        MsgPackTestCase(
            "invalid utf-8 continuation",
            b"\xa2\xc3\x28",
            expected_error=mpjson.InvalidEncodingError,
            expected_pos=1,
        ),
        MsgPackTestCase(
            "encoded surrogate",
            b"\x91\xa3\xed\xa0\x80",
            expected_error=mpjson.InvalidEncodingError,
            expected_pos=2,
        ),
        MsgPackTestCase(
            "nil map key",
            b"\x81\xc0\x01",
            expected_error=mpjson.InvalidKeyError,
            expected_pos=1,
        ),
        MsgPackTestCase(
            "nested nil map key",
            b"\x91\x82\xa1a\x01\xc0\x02",
            expected_error=mpjson.InvalidKeyError,
            expected_pos=5,
        ),
        MsgPackTestCase(
            "NaN float 64",
            b"\xcb\x7f\xf8\x00\x00\x00\x00\x00\x00",
            expected_error=mpjson.NonFiniteFloatError,
        ),
        MsgPackTestCase(
            "infinite float 32",
            b"\xca\x7f\x80\x00\x00",
            expected_error=mpjson.NonFiniteFloatError,
        ),
    ]


@pytest.fixture
def reference_document() -> dict[str, Any]:
    """
    Provides a document exercising every type msgpack can encode as JSON.
    """
    return {
        "JSON Test Pattern pass1": ["array with 1 element"],
        "empty object": {},
        "empty array": [],
        "integer": 1234567890,
        "negative": -42,
        "real": -9876.54321,
        "e": 0.123456789e-12,
        "E": 1.23456789e34,
        "huge": 23456789012e66,
        "zero": 0,
        "one": 1,
        "uint64 max": 2**64 - 1,
        "int64 min": -(2**63),
        "space": " ",
        "quote": '"',
        "backslash": "\\",
        "controls": "\b\f\n\r\t\x00\x1f",
        "slash": "/ & \\/",
        "special": "`1~!@#$%^&*()_+-={':[,]}|;.</>?",
        "hex": "\u0123\u4567\u89ab\ucdef\uabcd\uef4a",
        "separators": "line\u2028paragraph\u2029end",
        "astral": "\U0001f600",
        "true": True,
        "false": False,
        "null": None,
        "long string": "x" * 300,
        "compact": list(range(20)),
        "nested": [[[[["deep"]]]]],
        "jsontext": '{"object with 1 member":["array with 1 element"]}',
    }
