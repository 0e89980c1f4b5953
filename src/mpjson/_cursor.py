"""Bounds-checked forward reads over an immutable MessagePack buffer."""

from __future__ import annotations

from typing import Final

from ._errors import OutOfBoundsError

_UINT_WIDTHS: Final = frozenset({1, 2, 4, 8})


class ByteCursor:
    """
    Reads primitives from a byte buffer, strictly front to back.

    The buffer is wrapped in a read-only memoryview so raw reads hand out
    zero-copy slices. ``pos`` only ever grows and never passes ``length``.
    """

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self.data: Final = data
        self._view: Final = memoryview(data).cast("B").toreadonly()
        self.pos = 0
        self.length: Final = len(self._view)

    @property
    def remaining(self) -> int:
        """Bytes left between the cursor and the end of the buffer."""
        return self.length - self.pos

    def _require(self, count: int) -> None:
        if count > self.length - self.pos:
            raise OutOfBoundsError(
                self.data, self.pos, needed=count, available=self.remaining
            )

    def read_tag(self) -> int:
        """Returns the next byte and advances by one."""
        self._require(1)
        tag = self._view[self.pos]
        self.pos += 1
        return tag

    def read_uint(self, width: int) -> int:
        """Reads a big-endian unsigned integer of 1, 2, 4 or 8 bytes."""
        if width not in _UINT_WIDTHS:
            raise ValueError(f"unsupported integer width: {width}")

        self._require(width)
        start = self.pos
        self.pos += width
        return int.from_bytes(self._view[start : self.pos], "big")

    def read_raw(self, length: int) -> memoryview:
        """Returns the next ``length`` bytes as a view and advances past them."""
        if length < 0:
            raise ValueError("length must be non-negative")

        self._require(length)
        start = self.pos
        self.pos += length
        return self._view[start : self.pos]
