"""Errors raised while decoding a query string."""
from __future__ import annotations

import enum
import typing as t


class ErrorKind(enum.Enum):
    """The closed set of decode failures."""

    #: A ``%`` not followed by two hex digits, or decoded text that is not
    #: valid UTF-8.
    INVALID_ENCODING = "invalid encoding"
    #: The value cannot be coerced to the requested shape.
    INVALID_TYPE = "invalid type"
    #: A fixed-size sequence received the wrong number of elements.
    INVALID_LENGTH = "invalid length"
    #: Raised by the typed-value driver, e.g. an unknown or missing field.
    CUSTOM = "custom"


class DecodeError(ValueError):
    """A query string could not be decoded into the requested type.

    ``kind`` tells which of the :class:`ErrorKind` failures occurred,
    ``value`` keeps the offending raw text when there is one, and ``path``
    lists the keys leading to the failing value, outermost first.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        value: bytes | str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        if isinstance(value, (bytearray, memoryview)):
            value = bytes(value)
        self.value = value
        self.path: list[str] = []

    @classmethod
    def invalid_encoding(
        cls, value: t.Any, reason: str = "invalid percent-escape"
    ) -> "DecodeError":
        return cls(ErrorKind.INVALID_ENCODING, reason, value)

    @classmethod
    def invalid_type(
        cls, expected: str, found: str, value: t.Any = None
    ) -> "DecodeError":
        return cls(
            ErrorKind.INVALID_TYPE, f"expected {expected}, found {found}", value
        )

    @classmethod
    def invalid_length(cls, expected: int, found: int) -> "DecodeError":
        return cls(
            ErrorKind.INVALID_LENGTH,
            f"expected a sequence of {expected} elements, found {found}",
        )

    @classmethod
    def custom(cls, message: str) -> "DecodeError":
        return cls(ErrorKind.CUSTOM, message)

    def add_key(self, key: str) -> None:
        """Record that the failure happened below ``key``."""
        self.path.insert(0, key)

    @property
    def location(self) -> str | None:
        if not self.path:
            return None
        head, *rest = self.path
        return head + "".join(f"[{segment}]" for segment in rest)

    def __str__(self) -> str:
        text = self.message
        if self.value is not None and self.kind is ErrorKind.INVALID_ENCODING:
            raw = self.value
            if isinstance(raw, bytes):
                raw = raw.decode("latin-1")
            text = f"{text} in {raw!r}"
        location = self.location
        if location is not None:
            text = f"{text} at {location!r}"
        return text

    def __repr__(self) -> str:
        return f"<DecodeError {self.kind.name}: {self}>"


__all__ = [
    "DecodeError",
    "ErrorKind",
]
