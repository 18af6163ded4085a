"""The pull-based interface between the bridge and a typed-value driver.

A driver walks a :class:`MapAccess` by alternating ``next_key`` and
``next_value``. It hands ``next_key`` a :class:`KeyConsumer` that turns the
decoded key into whatever identifies a field, and ``next_value`` a
:class:`ValueConsumer` that receives a :class:`ValueAccess`. The consumer
declares the shape it wants by the accessor method it calls: a consumer
building a list calls :meth:`ValueAccess.sequence`, one building an int calls
:meth:`ValueAccess.scalar`. The bridge never guesses the shape from the data.
"""
from __future__ import annotations

import abc
import typing as t

if t.TYPE_CHECKING:
    from typedqs.slices import DecodedSlice


class KeyConsumer(abc.ABC):
    @abc.abstractmethod
    def consume_key(self, key: "DecodedSlice") -> t.Any:
        """Turn a decoded key into a non-None identifier."""
        raise NotImplementedError


class ValueConsumer(abc.ABC):
    @abc.abstractmethod
    def consume_value(self, value: "ValueAccess") -> t.Any:
        """Build a value by calling one of the accessor methods."""
        raise NotImplementedError


class ValueAccess(abc.ABC):
    """One value of the pair collection, readable in several shapes."""

    @abc.abstractmethod
    def is_absent(self) -> bool:
        """True when the key was given without ``=``."""
        raise NotImplementedError

    @abc.abstractmethod
    def scalar(self) -> "DecodedSlice":
        raise NotImplementedError

    @abc.abstractmethod
    def sequence(self) -> list["ValueAccess"]:
        raise NotImplementedError

    @abc.abstractmethod
    def mapping(self) -> "MapAccess":
        raise NotImplementedError

    def skip(self) -> None:
        """Discard the value, still rejecting malformed percent-escapes."""


class MapAccess(abc.ABC):
    @abc.abstractmethod
    def next_key(self, consumer: KeyConsumer) -> t.Any:
        """Advance to the next key; None once every key was visited."""
        raise NotImplementedError

    @abc.abstractmethod
    def next_value(self, consumer: ValueConsumer) -> t.Any:
        """Consume the value of the key returned by the last ``next_key``."""
        raise NotImplementedError


__all__ = [
    "KeyConsumer",
    "MapAccess",
    "ValueAccess",
    "ValueConsumer",
]
