"""Decode failures raised while rendering MessagePack as JSON text."""

from __future__ import annotations

from typing import Any


class MsgPackDecodeError(ValueError):
    """
    Handles MessagePack decoding failures with the offending byte offset.

    Error state containing the input buffer and the cursor offset at which
    decoding stopped, so callers can point at the exact bad byte.
    """

    def __init__(self, msg: str, doc: Any = b"", pos: int = 0) -> None:
        if not isinstance(msg, str):
            raise TypeError("msg must be a string")
        if not isinstance(pos, int) or pos < 0:
            raise ValueError("pos must be a non-negative integer")

        self.msg = msg
        self.doc = doc
        self.pos = pos

        super().__init__(f"{msg} at offset {pos}")


class OutOfBoundsError(MsgPackDecodeError):
    """A read asked for more bytes than remain in the buffer."""

    def __init__(
        self, doc: Any = b"", pos: int = 0, needed: int = 1, available: int = 0
    ) -> None:
        self.needed = needed
        self.available = available
        super().__init__(
            f"Unexpected end of data: needed {needed} byte(s), "
            f"{available} available",
            doc,
            pos,
        )


class UnsupportedTypeError(MsgPackDecodeError):
    """The tag byte matches no supported MessagePack format."""

    def __init__(self, tag: int, doc: Any = b"", pos: int = 0) -> None:
        self.tag = tag
        super().__init__(f"Unsupported type tag 0x{tag:02x}", doc, pos)


class InvalidEncodingError(MsgPackDecodeError):
    """String payload is not well-formed UTF-8."""


class InvalidKeyError(MsgPackDecodeError):
    """A map key decoded to null."""


class NestingDepthError(MsgPackDecodeError):
    """Containers are nested deeper than the configured maximum."""

    def __init__(self, max_depth: int, doc: Any = b"", pos: int = 0) -> None:
        self.max_depth = max_depth
        super().__init__(
            f"Maximum nesting depth of {max_depth} exceeded", doc, pos
        )


class ExtraDataError(MsgPackDecodeError):
    """Bytes remain after the first complete value in strict mode."""


class NonFiniteFloatError(MsgPackDecodeError):
    """A float is NaN or infinite and NaN literals are not allowed."""
