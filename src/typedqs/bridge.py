"""Adapts a :class:`PairCollection` to the key/value pull protocol."""
from __future__ import annotations

import typing as t

from typedqs.errors import DecodeError
from typedqs.parsers import Bracketed, Delimited, Repeated, Single, Value
from typedqs.protocol import KeyConsumer, MapAccess, ValueAccess, ValueConsumer
from typedqs.slices import EMPTY, DecodedSlice, RawSlice

_NOTHING = object()


class MapBridge(MapAccess):
    """Walks ``(key, value)`` pairs one key and one value at a time.

    The bridge owns one scratch buffer for decoding keys and one for values;
    both are reused for every pair, so decoded data handed out must be
    copied (or converted) before the next call.
    """

    __slots__ = ("_pairs", "_key", "_value", "_key_scratch", "_value_scratch")

    def __init__(self, pairs: t.Iterable[tuple[RawSlice, Value]]) -> None:
        self._pairs = iter(pairs)
        self._key: RawSlice | None = None
        self._value: t.Any = _NOTHING
        self._key_scratch = bytearray()
        self._value_scratch = bytearray()

    def next_key(self, consumer: KeyConsumer) -> t.Any:
        pair = next(self._pairs, None)
        if pair is None:
            self._key = None
            self._value = _NOTHING
            return None
        self._key, self._value = pair
        return consumer.consume_key(DecodedSlice(self._key, self._key_scratch))

    def next_value(self, consumer: ValueConsumer) -> t.Any:
        value = self._value
        if value is _NOTHING:
            raise RuntimeError("next_value() called before next_key()")
        self._value = _NOTHING
        try:
            return consumer.consume_value(access_for(value, self._value_scratch))
        except DecodeError as exc:
            exc.add_key(self._key_text())
            raise

    def _key_text(self) -> str:
        try:
            return DecodedSlice(self._key, bytearray()).as_str()
        except DecodeError:
            return self._key.tobytes().decode("latin-1")


class SliceAccess(ValueAccess):
    """A single raw value; it cannot be read as a sequence or map."""

    __slots__ = ("raw", "scratch")

    def __init__(self, raw: RawSlice | None, scratch: bytearray) -> None:
        self.raw = raw
        self.scratch = scratch

    def is_absent(self) -> bool:
        return self.raw is None

    def scalar(self) -> DecodedSlice:
        return DecodedSlice(self.raw or EMPTY, self.scratch)

    def sequence(self) -> list[ValueAccess]:
        raise DecodeError.invalid_type(
            "a sequence", "a single value", _raw_bytes(self.raw)
        )

    def mapping(self) -> MapAccess:
        raise DecodeError.invalid_type("a map", "a single value", _raw_bytes(self.raw))

    def skip(self) -> None:
        _check_escapes((self.raw,), self.scratch)


class RepeatedAccess(ValueAccess):
    """Every occurrence of a key: all of them as a sequence, the last as a
    scalar."""

    __slots__ = ("raws", "scratch")

    def __init__(self, raws: list[RawSlice | None], scratch: bytearray) -> None:
        self.raws = raws
        self.scratch = scratch

    def is_absent(self) -> bool:
        return self.raws[-1] is None

    def scalar(self) -> DecodedSlice:
        return DecodedSlice(self.raws[-1] or EMPTY, self.scratch)

    def sequence(self) -> list[ValueAccess]:
        return [SliceAccess(raw, self.scratch) for raw in self.raws]

    def mapping(self) -> MapAccess:
        raise DecodeError.invalid_type("a map", "a sequence")

    def skip(self) -> None:
        _check_escapes(self.raws, self.scratch)


class DelimitedAccess(ValueAccess):
    __slots__ = ("raw", "separator", "scratch")

    def __init__(
        self, raw: RawSlice | None, separator: int, scratch: bytearray
    ) -> None:
        self.raw = raw
        self.separator = separator
        self.scratch = scratch

    def is_absent(self) -> bool:
        return self.raw is None

    def scalar(self) -> DecodedSlice:
        return DecodedSlice(self.raw or EMPTY, self.scratch)

    def sequence(self) -> list[ValueAccess]:
        if not self.raw:
            return []
        return [
            SliceAccess(piece, self.scratch)
            for piece in self.raw.split(self.separator)
        ]

    def mapping(self) -> MapAccess:
        raise DecodeError.invalid_type("a map", "a single value", _raw_bytes(self.raw))

    def skip(self) -> None:
        _check_escapes((self.raw,), self.scratch)


class BracketedAccess(ValueAccess):
    """A bracket-mode group.

    As a sequence: positional values first, then one element per named
    segment in first-seen order. As a scalar: the last positional value.
    As a map: the named segments, through a new :class:`MapBridge`.
    """

    __slots__ = ("group", "scratch")

    def __init__(self, group: Bracketed, scratch: bytearray) -> None:
        self.group = group
        self.scratch = scratch

    def is_absent(self) -> bool:
        group = self.group
        return not group.named and group.positional[-1] is None

    def scalar(self) -> DecodedSlice:
        positional = self.group.positional
        if not positional:
            raise DecodeError.invalid_type("a value", "a map")
        return DecodedSlice(positional[-1] or EMPTY, self.scratch)

    def sequence(self) -> list[ValueAccess]:
        items: list[ValueAccess] = [
            SliceAccess(raw, self.scratch) for raw in self.group.positional
        ]
        items.extend(
            RepeatedAccess(values, self.scratch)
            for _, values in self.group.named.values()
        )
        return items

    def mapping(self) -> MapAccess:
        named = self.group.named
        if not named:
            raise DecodeError.invalid_type("a map", "a sequence")
        return MapBridge(
            (segment, Repeated(values)) for segment, values in named.values()
        )

    def skip(self) -> None:
        group = self.group
        _check_escapes(group.positional, self.scratch)
        for _, values in group.named.values():
            _check_escapes(values, self.scratch)


class RootAccess(ValueAccess):
    """The whole query string, which can only be read as a map."""

    __slots__ = ("pairs",)

    def __init__(self, pairs: t.Iterable[tuple[RawSlice, Value]]) -> None:
        self.pairs = pairs

    def is_absent(self) -> bool:
        return False

    def scalar(self) -> DecodedSlice:
        raise DecodeError.invalid_type("a value", "a query string map")

    def sequence(self) -> list[ValueAccess]:
        raise DecodeError.invalid_type("a sequence", "a query string map")

    def mapping(self) -> MapAccess:
        # Union targets may read the root more than once.
        if not isinstance(self.pairs, list):
            self.pairs = list(self.pairs)
        return MapBridge(self.pairs)


def access_for(value: Value, scratch: bytearray) -> ValueAccess:
    if isinstance(value, Single):
        return SliceAccess(value.raw, scratch)
    if isinstance(value, Repeated):
        return RepeatedAccess(value.raws, scratch)
    if isinstance(value, Delimited):
        return DelimitedAccess(value.raw, value.separator, scratch)
    if isinstance(value, Bracketed):
        return BracketedAccess(value, scratch)
    raise TypeError(f"Unsupported pair value: {value!r}")


def _check_escapes(
    raws: t.Iterable[RawSlice | None], scratch: bytearray
) -> None:
    for raw in raws:
        if raw is not None and raw.needs_decode:
            raw.decode(scratch)


def _raw_bytes(raw: RawSlice | None) -> bytes | None:
    return None if raw is None else raw.tobytes()


__all__ = [
    "BracketedAccess",
    "DelimitedAccess",
    "MapBridge",
    "RepeatedAccess",
    "RootAccess",
    "SliceAccess",
    "access_for",
]
