"""The four query-string grammars.

Every parser splits the input into ``&``-separated fields and each field at
its first ``=``. Nothing but keys is decoded here: keys are normalized so
that different encodings of the same name compare equal, values stay as
:class:`RawSlice` until a consumer reads them.
"""
from __future__ import annotations

import typing as t

from typedqs.modes import Mode, ParseMode
from typedqs.slices import RawSlice

_OPEN_BRACKET = 0x5B
_CLOSE_BRACKET = 0x5D


class Single:
    """One value per key (urlencoded mode)."""

    __slots__ = ("raw",)

    def __init__(self, raw: RawSlice | None) -> None:
        self.raw = raw

    def __repr__(self) -> str:
        return f"Single({self.raw!r})"


class Repeated:
    """Every occurrence of a key in encounter order (duplicate mode)."""

    __slots__ = ("raws",)

    def __init__(self, raws: list[RawSlice | None]) -> None:
        self.raws = raws

    def __repr__(self) -> str:
        return f"Repeated({self.raws!r})"


class Delimited:
    """One value per key, split at ``separator`` on demand."""

    __slots__ = ("raw", "separator")

    def __init__(self, raw: RawSlice | None, separator: int) -> None:
        self.raw = raw
        self.separator = separator

    def __repr__(self) -> str:
        return f"Delimited({self.raw!r}, {bytes((self.separator,))!r})"


class Bracketed:
    """All entries sharing one root key in bracket mode.

    ``positional`` holds values of ``name`` and ``name[]`` fields.
    ``named`` maps the normalized segment of ``name[seg]`` fields to the
    first-seen segment slice and its values, in first-seen order.
    """

    __slots__ = ("positional", "named")

    def __init__(self) -> None:
        self.positional: list[RawSlice | None] = []
        self.named: dict[t.Hashable, tuple[RawSlice, list[RawSlice | None]]] = {}

    def add(self, segment: RawSlice | None, value: RawSlice | None) -> None:
        if segment is None:
            self.positional.append(value)
            return
        key = segment.normalized()
        entry = self.named.get(key)
        if entry is None:
            self.named[key] = (segment, [value])
        else:
            entry[1].append(value)

    def __repr__(self) -> str:
        named = {bytes(k): v for k, (_, v) in self.named.items()}
        return f"Bracketed({self.positional!r}, {named!r})"


Value = t.Union[Single, Repeated, Delimited, Bracketed]


class PairCollection:
    """The ordered ``(key, value)`` pairs of one parse.

    It can be iterated once; a second consumer must parse again.
    """

    __slots__ = ("_pairs", "_consumed")

    def __init__(self, pairs: list[tuple[RawSlice, Value]]) -> None:
        self._pairs = pairs
        self._consumed = False

    def __len__(self) -> int:
        return len(self._pairs)

    def __iter__(self) -> t.Iterator[tuple[RawSlice, Value]]:
        if self._consumed:
            raise RuntimeError("PairCollection has already been consumed")
        self._consumed = True
        return iter(self._pairs)

    def __repr__(self) -> str:
        return f"<PairCollection {len(self._pairs)} keys>"


def iter_fields(data: bytes) -> t.Iterator[tuple[RawSlice, RawSlice | None]]:
    """Yield ``(key, value)`` for every non-empty ``&``-separated field.

    ``value`` is None when the field has no ``=``.
    """
    end = len(data)
    pos = 0
    while pos < end:
        amp = data.find(b"&", pos)
        if amp == -1:
            amp = end
        if amp > pos:
            eq = data.find(b"=", pos, amp)
            if eq == -1:
                yield RawSlice(data, pos, amp), None
            else:
                yield RawSlice(data, pos, eq), RawSlice(data, eq + 1, amp)
        pos = amp + 1


def parse_urlencoded(data: bytes) -> PairCollection:
    seen: dict[t.Hashable, tuple[RawSlice, Single]] = {}
    for key, value in iter_fields(data):
        identity = key.normalized()
        entry = seen.get(identity)
        if entry is None:
            seen[identity] = (key, Single(value))
        else:
            entry[1].raw = value
    return PairCollection(list(seen.values()))


def parse_duplicate(data: bytes) -> PairCollection:
    seen: dict[t.Hashable, tuple[RawSlice, Repeated]] = {}
    for key, value in iter_fields(data):
        identity = key.normalized()
        entry = seen.get(identity)
        if entry is None:
            seen[identity] = (key, Repeated([value]))
        else:
            entry[1].raws.append(value)
    return PairCollection(list(seen.values()))


def parse_delimiter(data: bytes, separator: int) -> PairCollection:
    seen: dict[t.Hashable, tuple[RawSlice, Delimited]] = {}
    for key, value in iter_fields(data):
        identity = key.normalized()
        entry = seen.get(identity)
        if entry is None:
            seen[identity] = (key, Delimited(value, separator))
        else:
            entry[1].raw = value
    return PairCollection(list(seen.values()))


def split_brackets(key: RawSlice) -> tuple[RawSlice, RawSlice | None]:
    """Split ``name[seg]`` into ``(name, seg)``.

    ``seg`` is None for ``name`` and ``name[]``. Only the first ``[`` and
    a trailing ``]`` count, so ``a[b][c]`` gives ``(a, b][c)``.
    """
    length = len(key)
    if length < 2 or key.as_raw()[length - 1] != _CLOSE_BRACKET:
        return key, None
    open_at = key.find(_OPEN_BRACKET)
    if open_at == -1:
        return key, None
    root = key.subslice(0, open_at)
    if open_at == length - 2:
        return root, None
    return root, key.subslice(open_at + 1, length - 1)


def parse_brackets(data: bytes) -> PairCollection:
    groups: dict[t.Hashable, tuple[RawSlice, Bracketed]] = {}
    for key, value in iter_fields(data):
        root, segment = split_brackets(key)
        identity = root.normalized()
        entry = groups.get(identity)
        if entry is None:
            entry = groups[identity] = (root, Bracketed())
        entry[1].add(segment, value)
    return PairCollection(list(groups.values()))


def parse(data: bytes | bytearray | memoryview, mode: Mode) -> PairCollection:
    """Parse ``data`` with the grammar ``mode`` selects."""
    if not isinstance(data, bytes):
        data = bytes(data)
    kind = mode.kind
    if kind is ParseMode.URLENCODED:
        return parse_urlencoded(data)
    if kind is ParseMode.DUPLICATE:
        return parse_duplicate(data)
    if kind is ParseMode.DELIMITER:
        return parse_delimiter(data, mode.separator)
    if kind is ParseMode.BRACKETS:
        return parse_brackets(data)
    raise ValueError(f"Unknown parse mode: {mode!r}")


__all__ = [
    "Bracketed",
    "Delimited",
    "PairCollection",
    "Repeated",
    "Single",
    "iter_fields",
    "parse",
    "parse_brackets",
    "parse_delimiter",
    "parse_duplicate",
    "parse_urlencoded",
    "split_brackets",
]
