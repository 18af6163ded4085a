"""Typed-value construction from type hints.

A :class:`Decoder` holds an ordered list of :class:`Shape` handlers. For a
target annotation the first shape whose :meth:`Shape.check` accepts it
builds the value from a :class:`~typedqs.protocol.ValueAccess`, recursing
through the decoder for element, key and field types.
"""
from __future__ import annotations

import collections.abc
import dataclasses
import enum
import re
import types
import typing as t

from typedqs.bridge import RootAccess
from typedqs.errors import DecodeError, ErrorKind
from typedqs.protocol import KeyConsumer, MapAccess, ValueAccess, ValueConsumer
from typedqs.slices import DecodedSlice

_INT = re.compile(r"[+-]?[0-9]+")
_FLOAT = re.compile(
    r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
    r"|[+-]?(?:inf|infinity|nan)",
    re.IGNORECASE,
)

_UNION_TYPES: tuple[t.Any, ...] = (t.Union,)
if hasattr(types, "UnionType"):
    _UNION_TYPES += (types.UnionType,)

_SEQUENCE_ORIGINS = {
    list: list,
    set: set,
    frozenset: frozenset,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Iterable: list,
    collections.abc.Collection: list,
    collections.abc.Set: frozenset,
    collections.abc.MutableSet: set,
}

_MAPPING_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)


class Shape:
    """Base class for the kinds of value a :class:`Decoder` can build."""

    __slots__ = ("decoder",)

    def __init__(self, decoder: "Decoder") -> None:
        self.decoder = decoder

    def check(self, annotation: t.Any) -> bool:
        """Check if this shape builds values of ``annotation``."""
        raise NotImplementedError

    def decode(self, annotation: t.Any, value: ValueAccess) -> t.Any:
        """Build a value of ``annotation`` from ``value``."""
        raise NotImplementedError


class OptionalShape(Shape):
    __slots__ = ()

    def check(self, annotation: t.Any) -> bool:
        return _is_optional(annotation)

    def decode(self, annotation: t.Any, value: ValueAccess) -> t.Any:
        if value.is_absent():
            return None
        inner = [arg for arg in t.get_args(annotation) if arg is not type(None)]
        if len(inner) == 1:
            return self.decoder.decode_value(inner[0], value)
        return self.decoder.decode_value(t.Union[tuple(inner)], value)


class UnionShape(Shape):
    """Tries each member of a union in declaration order."""

    __slots__ = ()

    def check(self, annotation: t.Any) -> bool:
        return t.get_origin(annotation) in _UNION_TYPES

    def decode(self, annotation: t.Any, value: ValueAccess) -> t.Any:
        members = t.get_args(annotation)
        for member in members:
            try:
                return self.decoder.decode_value(member, value)
            except DecodeError as exc:
                if exc.kind is ErrorKind.INVALID_ENCODING:
                    raise
        names = ", ".join(_type_name(member) for member in members)
        raise DecodeError.invalid_type(f"one of {names}", "no matching member")


class AnyShape(Shape):
    __slots__ = ()

    def check(self, annotation: t.Any) -> bool:
        return annotation is t.Any

    def decode(self, annotation: t.Any, value: ValueAccess) -> t.Any:
        if value.is_absent():
            return None
        return value.scalar().as_str()


class BoolShape(Shape):
    __slots__ = ()

    def check(self, annotation: t.Any) -> bool:
        return annotation is bool

    def decode(self, annotation: t.Any, value: ValueAccess) -> t.Any:
        text = value.scalar().as_str()
        if text == "true":
            return True
        if text == "false":
            return False
        raise DecodeError.invalid_type("a boolean", repr(text), text)


class IntShape(Shape):
    __slots__ = ()

    def check(self, annotation: t.Any) -> bool:
        return annotation is int

    def decode(self, annotation: t.Any, value: ValueAccess) -> t.Any:
        text = value.scalar().as_str()
        if _INT.fullmatch(text) is None:
            raise DecodeError.invalid_type("an integer", repr(text), text)
        return int(text)


class FloatShape(Shape):
    __slots__ = ()

    def check(self, annotation: t.Any) -> bool:
        return annotation is float

    def decode(self, annotation: t.Any, value: ValueAccess) -> t.Any:
        text = value.scalar().as_str()
        if _FLOAT.fullmatch(text) is None:
            raise DecodeError.invalid_type("a float", repr(text), text)
        return float(text)


class StrShape(Shape):
    __slots__ = ()

    def check(self, annotation: t.Any) -> bool:
        return annotation is str

    def decode(self, annotation: t.Any, value: ValueAccess) -> t.Any:
        return value.scalar().as_str()


class BytesShape(Shape):
    __slots__ = ()

    def check(self, annotation: t.Any) -> bool:
        return annotation is bytes

    def decode(self, annotation: t.Any, value: ValueAccess) -> t.Any:
        return bytes(value.scalar().as_bytes())


class LiteralShape(Shape):
    __slots__ = ()

    def check(self, annotation: t.Any) -> bool:
        return t.get_origin(annotation) is t.Literal

    def decode(self, annotation: t.Any, value: ValueAccess) -> t.Any:
        text = value.scalar().as_str()
        choices = t.get_args(annotation)
        for choice in choices:
            if _literal_text(choice) == text:
                return choice
        expected = ", ".join(repr(_literal_text(choice)) for choice in choices)
        raise DecodeError.invalid_type(f"one of {expected}", repr(text), text)


class EnumShape(Shape):
    """Unit enum values, matched case-sensitively by member name."""

    __slots__ = ()

    def check(self, annotation: t.Any) -> bool:
        return isinstance(annotation, type) and issubclass(annotation, enum.Enum)

    def decode(self, annotation: t.Any, value: ValueAccess) -> t.Any:
        text = value.scalar().as_str()
        member = annotation.__members__.get(text)
        if member is None:
            expected = ", ".join(annotation.__members__)
            raise DecodeError.invalid_type(
                f"one of the variants {expected}", repr(text), text
            )
        return member


class TupleShape(Shape):
    __slots__ = ()

    def check(self, annotation: t.Any) -> bool:
        return annotation is tuple or t.get_origin(annotation) is tuple

    def decode(self, annotation: t.Any, value: ValueAccess) -> t.Any:
        items = value.sequence()
        args = t.get_args(annotation)
        if not args or (len(args) == 2 and args[1] is Ellipsis):
            element = args[0] if args else t.Any
            return tuple(self.decoder.decode_value(element, item) for item in items)
        if len(items) != len(args):
            raise DecodeError.invalid_length(len(args), len(items))
        return tuple(
            self.decoder.decode_value(element, item)
            for element, item in zip(args, items)
        )


class SequenceShape(Shape):
    """``list``, ``set``, ``frozenset`` and the abstract sequence types."""

    __slots__ = ()

    def check(self, annotation: t.Any) -> bool:
        return (
            annotation in (list, set, frozenset)
            or t.get_origin(annotation) in _SEQUENCE_ORIGINS
        )

    def decode(self, annotation: t.Any, value: ValueAccess) -> t.Any:
        origin = t.get_origin(annotation) or annotation
        args = t.get_args(annotation)
        element = args[0] if args else t.Any
        items = [self.decoder.decode_value(element, item) for item in value.sequence()]
        factory = _SEQUENCE_ORIGINS[origin]
        if factory is list:
            return items
        return factory(items)


class MappingShape(Shape):
    __slots__ = ()

    def check(self, annotation: t.Any) -> bool:
        return annotation is dict or t.get_origin(annotation) in _MAPPING_ORIGINS

    def decode(self, annotation: t.Any, value: ValueAccess) -> t.Any:
        args = t.get_args(annotation)
        key_type, value_type = args if args else (str, t.Any)
        access = value.mapping()
        keys = TypedKey(self.decoder, key_type)
        values = TypedValue(self.decoder, value_type)
        result = {}
        while True:
            key = access.next_key(keys)
            if key is None:
                return result
            result[key] = access.next_value(values)


class DataclassShape(Shape):
    """Dataclasses, with keys matched to field names."""

    __slots__ = ()

    def check(self, annotation: t.Any) -> bool:
        return isinstance(annotation, type) and dataclasses.is_dataclass(annotation)

    def decode(self, annotation: t.Any, value: ValueAccess) -> t.Any:
        hints = t.get_type_hints(annotation)
        fields = {field.name: field for field in dataclasses.fields(annotation) if field.init}
        access = value.mapping()
        result: dict[str, t.Any] = {}
        while True:
            name = access.next_key(FIELD_NAME)
            if name is None:
                break
            if name not in fields:
                if self.decoder.deny_unknown_fields:
                    expected = ", ".join(repr(field) for field in fields)
                    raise DecodeError.custom(
                        f"unknown field {name!r}, expected one of {expected}"
                    )
                access.next_value(IGNORED)
                continue
            result[name] = access.next_value(TypedValue(self.decoder, hints[name]))

        for name, field in fields.items():
            if name in result or _has_default(field):
                continue
            if _is_optional(hints[name]):
                result[name] = None
            else:
                raise DecodeError.custom(f"missing field {name!r}")
        return annotation(**result)


class TypedValue(ValueConsumer):
    __slots__ = ("decoder", "annotation")

    def __init__(self, decoder: "Decoder", annotation: t.Any) -> None:
        self.decoder = decoder
        self.annotation = annotation

    def consume_value(self, value: ValueAccess) -> t.Any:
        return self.decoder.decode_value(self.annotation, value)


class TypedKey(KeyConsumer):
    __slots__ = ("decoder", "annotation")

    def __init__(self, decoder: "Decoder", annotation: t.Any) -> None:
        self.decoder = decoder
        self.annotation = annotation

    def consume_key(self, key: DecodedSlice) -> t.Any:
        return self.decoder.decode_value(self.annotation, KeyAccess(key))


class FieldName(KeyConsumer):
    __slots__ = ()

    def consume_key(self, key: DecodedSlice) -> t.Any:
        return key.as_str()


class Ignored(ValueConsumer):
    __slots__ = ()

    def consume_value(self, value: ValueAccess) -> t.Any:
        value.skip()
        return None


FIELD_NAME = FieldName()
IGNORED = Ignored()


class KeyAccess(ValueAccess):
    """A decoded key read as a value, for typed mapping keys."""

    __slots__ = ("key",)

    def __init__(self, key: DecodedSlice) -> None:
        self.key = key

    def is_absent(self) -> bool:
        return False

    def scalar(self) -> DecodedSlice:
        return self.key

    def sequence(self) -> list[ValueAccess]:
        raise DecodeError.invalid_type("a sequence", "a key")

    def mapping(self) -> MapAccess:
        raise DecodeError.invalid_type("a map", "a key")


class Decoder:
    """Builds typed values by dispatching annotations to shapes."""

    __slots__ = ("order", "deny_unknown_fields")

    default_shapes = [
        OptionalShape,
        UnionShape,
        AnyShape,
        BoolShape,
        IntShape,
        FloatShape,
        StrShape,
        BytesShape,
        LiteralShape,
        EnumShape,
        TupleShape,
        SequenceShape,
        MappingShape,
        DataclassShape,
    ]

    def __init__(self, deny_unknown_fields: bool = False) -> None:
        self.order: list[Shape] = []
        self.deny_unknown_fields = deny_unknown_fields

        for cls in self.default_shapes:
            self.register(cls)

    def register(self, shape_class: type[Shape], index: int | None = None) -> None:
        shape = shape_class(self)
        if index is None:
            self.order.append(shape)
        else:
            self.order.insert(index, shape)

    def shape_for(self, annotation: t.Any) -> Shape:
        for shape in self.order:
            if shape.check(annotation):
                return shape
        raise TypeError(f"Cannot decode a query string into {annotation!r}")

    def decode_value(self, annotation: t.Any, value: ValueAccess) -> t.Any:
        return self.shape_for(annotation).decode(annotation, value)

    def decode_root(self, annotation: t.Any, pairs: t.Iterable[t.Any]) -> t.Any:
        return self.decode_value(annotation, RootAccess(pairs))


def _literal_text(choice: t.Any) -> str:
    if isinstance(choice, bool):
        return "true" if choice else "false"
    if isinstance(choice, enum.Enum):
        return choice.name
    return str(choice)


def _has_default(field: dataclasses.Field) -> bool:
    return (
        field.default is not dataclasses.MISSING
        or field.default_factory is not dataclasses.MISSING
    )


def _is_optional(annotation: t.Any) -> bool:
    return t.get_origin(annotation) in _UNION_TYPES and type(None) in t.get_args(
        annotation
    )


def _type_name(annotation: t.Any) -> str:
    return getattr(annotation, "__name__", None) or repr(annotation)


__all__ = [
    "Decoder",
    "Shape",
    "TypedKey",
    "TypedValue",
]
