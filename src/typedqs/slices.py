"""Zero-copy views over query-string bytes with deferred percent-decoding.

A :class:`RawSlice` is a window into the caller's input. Nothing is copied
until a consumer asks for decoded bytes, and then only when the window
actually contains ``%`` escapes or ``+``.
"""
from __future__ import annotations

import re
import typing as t

from typedqs.errors import DecodeError

_PLUS = 0x2B
_SPACE = 0x20
_SPECIAL = re.compile(rb"[%+]")
_HEX = {byte: int(chr(byte), 16) for byte in b"0123456789abcdefABCDEF"}


def has_escapes(data: bytes, start: int = 0, end: int | None = None) -> bool:
    """Return True if ``data[start:end]`` contains ``%`` or ``+``."""
    if end is None:
        end = len(data)
    return _SPECIAL.search(data, start, end) is not None


def percent_decode(
    data: bytes, out: bytearray, start: int = 0, end: int | None = None
) -> bytearray:
    """Decode ``%XX`` escapes and ``+`` in ``data[start:end]`` into ``out``.

    ``out`` is cleared first and reused, so a single buffer can serve any
    number of calls. Raises :class:`DecodeError` when a ``%`` is not
    followed by two hex digits.
    """
    if end is None:
        end = len(data)
    view = memoryview(data)
    out.clear()
    pos = start
    for match in _SPECIAL.finditer(data, start, end):
        index = match.start()
        out += view[pos:index]
        if data[index] == _PLUS:
            out.append(_SPACE)
            pos = index + 1
            continue
        if index + 2 >= end:
            raise DecodeError.invalid_encoding(data[start:end])
        try:
            out.append(_HEX[data[index + 1]] << 4 | _HEX[data[index + 2]])
        except KeyError:
            raise DecodeError.invalid_encoding(data[start:end]) from None
        pos = index + 3
    out += view[pos:end]
    return out


class RawSlice:
    """A borrowed byte range of the input plus a "needs decoding" flag."""

    __slots__ = ("_data", "start", "end", "needs_decode")

    def __init__(
        self,
        data: bytes,
        start: int = 0,
        end: int | None = None,
        needs_decode: bool | None = None,
    ) -> None:
        if end is None:
            end = len(data)
        if needs_decode is None:
            needs_decode = has_escapes(data, start, end)
        self._data = data
        self.start = start
        self.end = end
        self.needs_decode = needs_decode

    def __len__(self) -> int:
        return self.end - self.start

    def __repr__(self) -> str:
        return f"RawSlice({self.tobytes()!r})"

    def as_raw(self) -> memoryview:
        """Return the undecoded bytes without copying."""
        return memoryview(self._data)[self.start:self.end]

    def tobytes(self) -> bytes:
        return self._data[self.start:self.end]

    def decode(self, scratch: bytearray) -> memoryview | bytearray:
        """Return the decoded bytes.

        When no decoding is needed this is the zero-copy view; otherwise the
        bytes are decoded into ``scratch``, which stays valid until the
        buffer's next use.
        """
        if not self.needs_decode:
            return self.as_raw()
        return percent_decode(self._data, scratch, self.start, self.end)

    def normalized(self) -> t.Hashable:
        """Identity of the decoded bytes, used to compare keys."""
        if not self.needs_decode:
            return self.as_raw()
        return bytes(self.decode(bytearray()))

    def find(self, byte: int, start: int = 0) -> int:
        """Offset of ``byte`` relative to this slice, or -1."""
        index = self._data.find(bytes((byte,)), self.start + start, self.end)
        if index == -1:
            return -1
        return index - self.start

    def subslice(self, start: int, end: int | None = None) -> "RawSlice":
        """Zero-copy slice relative to this one, with its own flag."""
        if end is None:
            end = len(self)
        return RawSlice(self._data, self.start + start, self.start + end)

    def split(self, separator: int) -> list["RawSlice"]:
        """Split at every ``separator`` byte into zero-copy pieces."""
        pieces = []
        pos = 0
        while True:
            index = self.find(separator, pos)
            if index == -1:
                pieces.append(self.subslice(pos))
                return pieces
            pieces.append(self.subslice(pos, index))
            pos = index + 1


class DecodedSlice:
    """A :class:`RawSlice` read through a reusable scratch buffer.

    Each accessor decodes at most once; the result is cached as an immutable
    object so the scratch buffer can be reused by the next slice.
    """

    __slots__ = ("raw", "_scratch", "_bytes", "_text")

    def __init__(self, raw: RawSlice, scratch: bytearray) -> None:
        self.raw = raw
        self._scratch = scratch
        self._bytes: bytes | memoryview | None = None
        self._text: str | None = None

    def __repr__(self) -> str:
        return f"DecodedSlice({self.raw.tobytes()!r})"

    def as_bytes(self) -> bytes | memoryview:
        if self._bytes is None:
            decoded = self.raw.decode(self._scratch)
            if isinstance(decoded, bytearray):
                decoded = bytes(decoded)
            self._bytes = decoded
        return self._bytes

    def as_str(self) -> str:
        if self._text is None:
            try:
                self._text = str(self.as_bytes(), "utf-8")
            except UnicodeDecodeError:
                raise DecodeError.invalid_encoding(
                    self.raw.tobytes(), "invalid UTF-8"
                ) from None
        return self._text


EMPTY = RawSlice(b"", needs_decode=False)


__all__ = [
    "EMPTY",
    "DecodedSlice",
    "RawSlice",
    "has_escapes",
    "percent_decode",
]
