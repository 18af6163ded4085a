"""Parse modes: the grammar used for repeated and bracketed keys."""
from __future__ import annotations

import enum
import typing as t


class ParseMode(enum.Enum):
    #: ``a=1&a=2`` keeps only ``a=2``.
    URLENCODED = "urlencoded"
    #: ``a=1&a=2`` is a sequence for sequence targets, ``2`` for scalars.
    DUPLICATE = "duplicate"
    #: ``a=1,2`` is split at a caller-chosen separator byte.
    DELIMITER = "delimiter"
    #: PHP-style ``a[]=1&a[x]=2``.
    BRACKETS = "brackets"


class Mode:
    """A :class:`ParseMode` plus the separator byte for delimiter mode."""

    __slots__ = ("kind", "separator")

    def __init__(self, kind: ParseMode | str, separator: t.Any = None) -> None:
        kind = ParseMode(kind)
        if kind is ParseMode.DELIMITER:
            separator = _separator_byte(separator)
        elif separator is not None:
            raise ValueError(f"{kind.value} mode does not take a separator")
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "separator", separator)

    def __setattr__(self, name: str, value: t.Any) -> None:
        raise AttributeError("Mode is immutable")

    @classmethod
    def urlencoded(cls) -> "Mode":
        return cls(ParseMode.URLENCODED)

    @classmethod
    def duplicate(cls) -> "Mode":
        return cls(ParseMode.DUPLICATE)

    @classmethod
    def delimiter(cls, separator: t.Any) -> "Mode":
        return cls(ParseMode.DELIMITER, separator)

    @classmethod
    def brackets(cls) -> "Mode":
        return cls(ParseMode.BRACKETS)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mode):
            return NotImplemented
        return self.kind is other.kind and self.separator == other.separator

    def __hash__(self) -> int:
        return hash((self.kind, self.separator))

    def __repr__(self) -> str:
        if self.separator is None:
            return f"Mode({self.kind.value!r})"
        return f"Mode({self.kind.value!r}, {bytes((self.separator,))!r})"


def _separator_byte(separator: t.Any) -> int:
    if isinstance(separator, int) and not isinstance(separator, bool):
        if 0 <= separator <= 255:
            return separator
    elif isinstance(separator, str):
        if len(separator) == 1 and ord(separator) < 128:
            return ord(separator)
    elif isinstance(separator, (bytes, bytearray)):
        if len(separator) == 1:
            return separator[0]
    raise ValueError(
        f"Delimiter mode needs a single-byte separator, got {separator!r}"
    )


URLENCODED = Mode.urlencoded()
DUPLICATE = Mode.duplicate()
BRACKETS = Mode.brackets()


__all__ = [
    "BRACKETS",
    "DUPLICATE",
    "Mode",
    "ParseMode",
    "URLENCODED",
]
