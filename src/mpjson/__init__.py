"""
MessagePack to JSON text conversion for JavaScript bridges.

Decodes one MessagePack value straight into JSON text in a single pass,
without building an intermediate object tree. The output is valid JSON and
can also be evaluated verbatim as a JavaScript expression.
"""

import base64
import logging
import math
import os
import struct
import sys
import time
from dataclasses import dataclass
from enum import Enum
from typing import IO
from typing import Any
from typing import Final
from typing import TypeAlias

from ._cursor import ByteCursor
from ._errors import ExtraDataError
from ._errors import InvalidEncodingError
from ._errors import InvalidKeyError
from ._errors import MsgPackDecodeError
from ._errors import NestingDepthError
from ._errors import NonFiniteFloatError
from ._errors import OutOfBoundsError
from ._errors import UnsupportedTypeError
from ._escape import decode_utf8
from ._escape import escape_string

__version__ = "0.1.0"

# Type aliases for domain concepts
BytesLike = bytes | bytearray | memoryview
Offset: TypeAlias = int

logger = logging.getLogger(__name__)

# Profiling infrastructure - zero-cost when disabled
PROFILE_HOT_PATHS = __debug__ and "MPJSON_PROFILE" in os.environ

DEFAULT_MAX_DEPTH: Final = 256
# Frames kept free for the caller when bounding max_depth
_STACK_HEADROOM: Final = 100
# Python frames per nesting level: decode_value, decode_map, _decode_key
_FRAMES_PER_LEVEL: Final = 3
# Significant digits that always round-trip an IEEE-754 binary32
_FLOAT32_MAX_DIGITS: Final = 9


@dataclass
class HotPathStats:
    """Statistics for profiling hot paths during decoding."""

    function_name: str
    call_count: int = 0
    total_time_ns: int = 0
    bytes_processed: int = 0

    def record_call(self, duration_ns: int, nbytes: int = 0) -> None:
        """Records a function call with timing and byte processing info."""
        self.call_count += 1
        self.total_time_ns += duration_ns
        self.bytes_processed += nbytes


if PROFILE_HOT_PATHS:
    _hot_path_stats: dict[str, HotPathStats] = {}

    class ProfileContext:
        """Context manager for profiling hot paths."""

        def __init__(self, func_name: str, bytes_to_process: int = 0):
            self.func_name = func_name
            self.nbytes = bytes_to_process
            self.start_time = 0

        def __enter__(self) -> "ProfileContext":
            self.start_time = time.perf_counter_ns()
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            duration = time.perf_counter_ns() - self.start_time
            if self.func_name not in _hot_path_stats:
                _hot_path_stats[self.func_name] = HotPathStats(self.func_name)
            _hot_path_stats[self.func_name].record_call(duration, self.nbytes)

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        """Returns current profiling statistics."""
        return _hot_path_stats.copy()

    def clear_hot_path_stats() -> None:
        """Clears profiling statistics."""
        _hot_path_stats.clear()

else:

    class ProfileContext:  # type: ignore[no-redef]
        """No-op stand-in used when MPJSON_PROFILE is unset."""

        def __init__(self, func_name: str, bytes_to_process: int = 0) -> None:
            pass

        def __enter__(self) -> "ProfileContext":
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            pass

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        return {}

    def clear_hot_path_stats() -> None:
        pass


class BinaryEncoding(Enum):
    """Text renderings for MessagePack ``bin`` payloads."""

    BASE64 = "base64"
    HEX = "hex"
    BYTE_ARRAY = "array"


class TagKind(Enum):
    """
    Value families a MessagePack tag byte can announce.

    Several tags share a family and differ only in header or payload width.
    """

    POSITIVE_FIXINT = "positive_fixint"
    NEGATIVE_FIXINT = "negative_fixint"
    NIL = "nil"
    FALSE = "false"
    TRUE = "true"
    BIN = "bin"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    UINT = "uint"
    INT = "int"
    STR = "str"
    ARRAY = "array"
    MAP = "map"


@dataclass(frozen=True)
class TagRule:
    """
    How to decode the value that follows a tag byte.

    ``width`` is the size in bytes of the big-endian header (length or count)
    or of the numeric payload. Fix formats carry their length in the tag's
    low bits instead, selected by ``inline_mask``.
    """

    kind: TagKind
    width: int = 0
    inline_mask: int = 0


# The MessagePack format table: (first tag, last tag, rule).
# Tags not covered here (0xc1, ext, fixext and timestamps) are unsupported.
_TAG_RANGES: Final = (
    (0x00, 0x7F, TagRule(TagKind.POSITIVE_FIXINT)),
    (0x80, 0x8F, TagRule(TagKind.MAP, inline_mask=0x0F)),
    (0x90, 0x9F, TagRule(TagKind.ARRAY, inline_mask=0x0F)),
    (0xA0, 0xBF, TagRule(TagKind.STR, inline_mask=0x1F)),
    (0xC0, 0xC0, TagRule(TagKind.NIL)),
    (0xC2, 0xC2, TagRule(TagKind.FALSE)),
    (0xC3, 0xC3, TagRule(TagKind.TRUE)),
    (0xC4, 0xC4, TagRule(TagKind.BIN, 1)),
    (0xC5, 0xC5, TagRule(TagKind.BIN, 2)),
    (0xC6, 0xC6, TagRule(TagKind.BIN, 4)),
    (0xCA, 0xCA, TagRule(TagKind.FLOAT32, 4)),
    (0xCB, 0xCB, TagRule(TagKind.FLOAT64, 8)),
    (0xCC, 0xCC, TagRule(TagKind.UINT, 1)),
    (0xCD, 0xCD, TagRule(TagKind.UINT, 2)),
    (0xCE, 0xCE, TagRule(TagKind.UINT, 4)),
    (0xCF, 0xCF, TagRule(TagKind.UINT, 8)),
    (0xD0, 0xD0, TagRule(TagKind.INT, 1)),
    (0xD1, 0xD1, TagRule(TagKind.INT, 2)),
    (0xD2, 0xD2, TagRule(TagKind.INT, 4)),
    (0xD3, 0xD3, TagRule(TagKind.INT, 8)),
    (0xD9, 0xD9, TagRule(TagKind.STR, 1)),
    (0xDA, 0xDA, TagRule(TagKind.STR, 2)),
    (0xDB, 0xDB, TagRule(TagKind.STR, 4)),
    (0xDC, 0xDC, TagRule(TagKind.ARRAY, 2)),
    (0xDD, 0xDD, TagRule(TagKind.ARRAY, 4)),
    (0xDE, 0xDE, TagRule(TagKind.MAP, 2)),
    (0xDF, 0xDF, TagRule(TagKind.MAP, 4)),
    (0xE0, 0xFF, TagRule(TagKind.NEGATIVE_FIXINT)),
)


def _build_tag_table() -> tuple[TagRule | None, ...]:
    table: list[TagRule | None] = [None] * 256
    for first, last, rule in _TAG_RANGES:
        for tag in range(first, last + 1):
            if table[tag] is not None:
                raise RuntimeError(f"tag 0x{tag:02x} mapped twice")
            table[tag] = rule
    return tuple(table)


TAG_TABLE: Final = _build_tag_table()


def _max_supported_depth() -> int:
    return (sys.getrecursionlimit() - _STACK_HEADROOM) // _FRAMES_PER_LEVEL


@dataclass(frozen=True)
class DecodeConfig:
    """
    Configures MessagePack decoding with immutable settings.

    Defaults reproduce the reference rendering: trailing bytes are ignored,
    map keys are emitted verbatim and binary payloads become base64 strings.
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    allow_trailing_data: bool = True
    binary_encoding: BinaryEncoding = BinaryEncoding.BASE64
    allow_nan: bool = False
    ensure_ascii: bool = False
    stringify_keys: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.max_depth, bool) or not isinstance(
            self.max_depth, int
        ):
            raise TypeError("max_depth must be an integer")
        if self.max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        if self.max_depth > _max_supported_depth():
            raise ValueError(
                f"max_depth {self.max_depth} exceeds the "
                f"{_max_supported_depth()} levels the recursion limit allows"
            )
        for name in (
            "allow_trailing_data",
            "allow_nan",
            "ensure_ascii",
            "stringify_keys",
        ):
            if not isinstance(getattr(self, name), bool):
                raise TypeError(f"{name} must be a boolean")
        if isinstance(self.binary_encoding, str):
            object.__setattr__(
                self, "binary_encoding", BinaryEncoding(self.binary_encoding)
            )
        elif not isinstance(self.binary_encoding, BinaryEncoding):
            raise TypeError("binary_encoding must be a BinaryEncoding")


def _to_signed(value: int, width: int) -> int:
    """Reinterprets an unsigned big-endian value as two's complement."""
    bits = width * 8
    if value & (1 << (bits - 1)):
        return value - (1 << bits)
    return value


def _format_float32(value: float, raw: bytes) -> str:
    """
    Renders a binary32 with the fewest digits that map back to its bits.

    Widening to a double first would expose representation noise
    (0.1f is 0.10000000149011612 as a double), so digits are grown until
    the text packs to the original four bytes.
    """
    for precision in range(1, _FLOAT32_MAX_DIGITS + 1):
        candidate = float(f"{value:.{precision}g}")
        try:
            packed = struct.pack(">f", candidate)
        except OverflowError:
            continue
        if packed == raw:
            return repr(candidate)
    return repr(value)


class MsgPackDecoder:
    """
    Recursive descent renderer from MessagePack to JSON text.

    Reads one tag at a time from the cursor and appends JSON fragments to a
    single output list, which is joined once when the top-level value is
    complete.
    """

    def __init__(self, cursor: ByteCursor, config: DecodeConfig):
        self.cursor = cursor
        self.config = config
        self.depth = 0
        self._out: list[str] = []

    def decode(self) -> str:
        """Decodes exactly one value and returns its JSON text."""
        self.decode_value()
        return "".join(self._out)

    def _read_length(self, tag: int, rule: TagRule) -> int:
        if rule.inline_mask:
            return tag & rule.inline_mask
        return self.cursor.read_uint(rule.width)

    def decode_value(self) -> None:  # noqa: PLR0912
        """Reads one tag byte and renders the value it introduces."""
        start = self.cursor.pos
        tag = self.cursor.read_tag()
        rule = TAG_TABLE[tag]
        if rule is None:
            raise UnsupportedTypeError(tag, self.cursor.data, start)

        kind = rule.kind
        out = self._out

        if kind is TagKind.POSITIVE_FIXINT:
            out.append(str(tag))
        elif kind is TagKind.NEGATIVE_FIXINT:
            out.append(str(tag - 0x100))
        elif kind is TagKind.NIL:
            out.append("null")
        elif kind is TagKind.FALSE:
            out.append("false")
        elif kind is TagKind.TRUE:
            out.append("true")
        elif kind is TagKind.UINT:
            out.append(str(self.cursor.read_uint(rule.width)))
        elif kind is TagKind.INT:
            value = self.cursor.read_uint(rule.width)
            out.append(str(_to_signed(value, rule.width)))
        elif kind is TagKind.FLOAT32 or kind is TagKind.FLOAT64:
            out.append(self._decode_float(rule, start))
        elif kind is TagKind.STR:
            self.decode_string(self._read_length(tag, rule))
        elif kind is TagKind.BIN:
            self.decode_binary(self._read_length(tag, rule))
        elif kind is TagKind.ARRAY:
            self.decode_array(self._read_length(tag, rule), start)
        elif kind is TagKind.MAP:
            self.decode_map(self._read_length(tag, rule), start)
        else:
            raise UnsupportedTypeError(tag, self.cursor.data, start)

    def _decode_float(self, rule: TagRule, start: Offset) -> str:
        single = rule.kind is TagKind.FLOAT32
        raw = bytes(self.cursor.read_raw(rule.width))
        (value,) = struct.unpack(">f" if single else ">d", raw)

        if not math.isfinite(value):
            if not self.config.allow_nan:
                raise NonFiniteFloatError(
                    "Out of range float values are not JSON compliant",
                    self.cursor.data,
                    start,
                )
            if math.isnan(value):
                return "NaN"
            return "Infinity" if value > 0 else "-Infinity"

        if single:
            return _format_float32(value, raw)
        return repr(value)

    def decode_string(self, length: int) -> None:
        """Validates and escapes a UTF-8 payload as a JSON string literal."""
        with ProfileContext("decode_string", length):
            start = self.cursor.pos
            raw = self.cursor.read_raw(length)
            text = decode_utf8(raw, self.cursor.data, start)
            self._out.append(escape_string(text, self.config.ensure_ascii))

    def decode_binary(self, length: int) -> None:
        """Renders a bin payload with the configured encoding."""
        raw = self.cursor.read_raw(length)
        encoding = self.config.binary_encoding

        if encoding is BinaryEncoding.BASE64:
            self._out.append(f'"{base64.b64encode(raw).decode("ascii")}"')
        elif encoding is BinaryEncoding.HEX:
            self._out.append(f'"{raw.hex()}"')
        else:
            self._out.append("[" + ",".join(map(str, raw)) + "]")

    def _enter_container(self, start: Offset) -> None:
        self.depth += 1
        if self.depth > self.config.max_depth:
            raise NestingDepthError(
                self.config.max_depth, self.cursor.data, start
            )

    def decode_array(self, count: int, start: Offset = 0) -> None:
        """Renders ``count`` values as a JSON array."""
        with ProfileContext("decode_array"):
            self._enter_container(start)
            out = self._out
            out.append("[")
            for i in range(count):
                if i:
                    out.append(",")
                self.decode_value()
            out.append("]")
            self.depth -= 1

    def _decode_key(self) -> None:
        """Renders one map key, rejecting keys that decode to null."""
        start = self.cursor.pos
        out = self._out
        mark = len(out)
        self.decode_value()

        if out[mark:] == ["null"]:
            raise InvalidKeyError(
                "Map key must not be null", self.cursor.data, start
            )

        if self.config.stringify_keys:
            is_string = len(out) == mark + 1 and out[mark].startswith('"')
            if not is_string:
                key_text = "".join(out[mark:])
                del out[mark:]
                out.append(escape_string(key_text, self.config.ensure_ascii))

    def decode_map(self, count: int, start: Offset = 0) -> None:
        """Renders ``count`` key/value pairs as a JSON object."""
        with ProfileContext("decode_map"):
            self._enter_container(start)
            out = self._out
            out.append("{")
            for i in range(count):
                if i:
                    out.append(",")
                self._decode_key()
                out.append(":")
                self.decode_value()
            out.append("}")
            self.depth -= 1


def _decode_buffer(buffer: BytesLike, config: DecodeConfig) -> str:
    """
    Decodes the first value in ``buffer`` and checks what is left over.

    One cursor and one decoder are created per call and dropped afterwards.
    """
    cursor = ByteCursor(buffer)
    with ProfileContext("decode", cursor.length):
        logger.debug("Decoding %d-byte MessagePack buffer", cursor.length)

        decoder = MsgPackDecoder(cursor, config)
        text = decoder.decode()

        if cursor.remaining:
            if not config.allow_trailing_data:
                raise ExtraDataError("Extra data", buffer, cursor.pos)
            logger.debug(
                "Ignoring %d trailing byte(s) after offset %d",
                cursor.remaining,
                cursor.pos,
            )

        return text


def decode(buffer: BytesLike, **kwargs: Any) -> str:
    """
    Renders one MessagePack value as JSON text that is safe to eval in JavaScript.

    Validates input type and delegates to the decoder with immutable
    configuration. A top-level nil yields the text ``"null"``.
    """
    if not isinstance(buffer, bytes | bytearray | memoryview):
        raise TypeError(
            "the MessagePack buffer must be bytes-like, "
            f"not {type(buffer).__name__}"
        )

    config = DecodeConfig(**kwargs)
    return _decode_buffer(buffer, config)


# Historical name of the decode operation
unpack_as_string = decode


def load(fp: IO[bytes], **kwargs: Any) -> str:
    """
    Decodes the MessagePack value stored in a binary file-like object.
    """
    if not hasattr(fp, "read"):
        raise TypeError("fp must have a read() method")

    return decode(fp.read(), **kwargs)


__all__ = [
    "TAG_TABLE",
    "BinaryEncoding",
    "ByteCursor",
    "DecodeConfig",
    "ExtraDataError",
    "HotPathStats",
    "InvalidEncodingError",
    "InvalidKeyError",
    "MsgPackDecodeError",
    "MsgPackDecoder",
    "NestingDepthError",
    "NonFiniteFloatError",
    "OutOfBoundsError",
    "TagKind",
    "TagRule",
    "UnsupportedTypeError",
    "clear_hot_path_stats",
    "decode",
    "escape_string",
    "get_hot_path_stats",
    "load",
    "unpack_as_string",
]
