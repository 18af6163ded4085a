"""Decoding in brackets mode: ``name[]`` and ``name[seg]`` fields."""
from dataclasses import dataclass, field, make_dataclass
from typing import Dict, List, Optional, Tuple

import pytest

from typedqs import BRACKETS, DecodeError, ErrorKind, Mode, decode, mode_for


def primitive(annotation):
    return make_dataclass("Primitive", [("value", annotation)])


@dataclass
class Nested:
    bar: str
    baz: str


@dataclass
class Filters:
    name: Nested
    flags: List[str] = field(default_factory=list)


@dataclass
class Bracketed:
    __querystring_mode__ = BRACKETS

    ids: List[int]


@dataclass
class Counts:
    counts: Dict[str, int]
    limit: Optional[int] = None


class TestSequences:
    def test_named_segments_in_first_seen_order(self):
        result = decode(b"value[3]=300&value[2]=200&value[1]=100", primitive(List[int]), BRACKETS)
        assert result.value == [300, 200, 100]

    def test_empty_brackets(self):
        result = decode(b"value[]=1&value[]=2", primitive(List[int]), BRACKETS)
        assert result.value == [1, 2]

    def test_bare_key_is_positional(self):
        result = decode(b"value=1&value[]=2&value=3", primitive(List[int]), BRACKETS)
        assert result.value == [1, 2, 3]

    def test_positional_then_named(self):
        result = decode(b"value[1]=1337&value=11", primitive(List[int]), BRACKETS)
        assert result.value == [11, 1337]

    def test_repeated_named_segment_gives_last(self):
        result = decode(b"value[a]=1&value[b]=2&value[a]=3", primitive(List[int]), BRACKETS)
        assert result.value == [3, 2]

    def test_fixed_length(self):
        model = primitive(Tuple[int, int, int])
        assert decode(b"value[]=1&value[]=2&value[]=3", model, BRACKETS).value == (1, 2, 3)
        with pytest.raises(DecodeError) as info:
            decode(b"value[]=1&value[]=2", model, BRACKETS)
        assert info.value.kind is ErrorKind.INVALID_LENGTH

    def test_encoded_brackets_are_not_structural(self):
        result = decode(b"value%5B%5D=1&value[]=2", Dict[str, int], BRACKETS)
        assert result == {"value[]": 1, "value": 2}


class TestMaps:
    def test_struct(self):
        result = decode(b"name[bar]=baz&name[baz]=qux", Filters, BRACKETS)
        assert result == Filters(name=Nested(bar="baz", baz="qux"), flags=[])

    def test_struct_and_sequence(self):
        result = decode(b"flags[]=a&name[baz]=2&flags[]=b&name[bar]=1", Filters, BRACKETS)
        assert result == Filters(name=Nested(bar="1", baz="2"), flags=["a", "b"])

    def test_dict(self):
        result = decode(b"counts[a]=1&counts[b%20c]=2&limit=5", Counts, BRACKETS)
        assert result == Counts(counts={"a": 1, "b c": 2}, limit=5)

    def test_repeated_segment_scalar_is_last(self):
        result = decode(b"counts[a]=1&counts[a]=2", Counts, BRACKETS)
        assert result.counts == {"a": 2}

    def test_encoded_segments_are_one_key(self):
        result = decode(b"counts[%61]=1&counts[a]=2", Counts, BRACKETS)
        assert result.counts == {"a": 2}

    def test_map_ignores_positional_entries(self):
        result = decode(b"counts=9&counts[a]=1", Counts, BRACKETS)
        assert result.counts == {"a": 1}

    def test_sub_segments_stay_in_the_key(self):
        result = decode(b"counts[a][b]=1", Counts, BRACKETS)
        assert result.counts == {"a][b": 1}


class TestScalars:
    def test_last_positional(self):
        assert decode(b"value=1&value=2", primitive(int), BRACKETS).value == 2

    def test_scalar_on_named_segments(self):
        with pytest.raises(DecodeError) as info:
            decode(b"value[a]=1", primitive(int), BRACKETS)
        assert info.value.kind is ErrorKind.INVALID_TYPE
        assert info.value.path == ["value"]

    def test_absent(self):
        assert decode(b"value", primitive(Optional[int]), BRACKETS).value is None
        assert decode(b"value[]", primitive(Optional[int]), BRACKETS).value is None


class TestErrors:
    def test_map_from_positional_only(self):
        with pytest.raises(DecodeError) as info:
            decode(b"counts[]=1", Counts, BRACKETS)
        assert info.value.kind is ErrorKind.INVALID_TYPE

    def test_nested_error_location(self):
        with pytest.raises(DecodeError) as info:
            decode(b"counts[a]=1&counts[b]=x", Counts, BRACKETS)
        assert info.value.path == ["counts", "b"]
        assert info.value.location == "counts[b]"
        assert str(info.value).endswith("at 'counts[b]'")

    def test_missing_nested_field(self):
        with pytest.raises(DecodeError) as info:
            decode(b"name[bar]=1", Filters, BRACKETS)
        assert info.value.kind is ErrorKind.CUSTOM
        assert info.value.path == ["name"]

    def test_unknown_nested_field_denied(self):
        with pytest.raises(DecodeError) as info:
            decode(
                b"name[bar]=1&name[baz]=2&name[qux]=3",
                Filters,
                BRACKETS,
                deny_unknown_fields=True,
            )
        assert info.value.kind is ErrorKind.CUSTOM
        assert "qux" in info.value.message


class TestDeclaredMode:
    def test_mode_for(self):
        assert mode_for(Bracketed) == BRACKETS
        assert mode_for(Counts) == Mode.urlencoded()

    def test_declared_mode_is_used(self):
        assert decode(b"ids[]=1&ids[]=2", Bracketed).ids == [1, 2]

    def test_explicit_mode_wins(self):
        with pytest.raises(DecodeError):
            decode(b"ids[]=1&ids[]=2", Bracketed, Mode.urlencoded())

    def test_declared_by_name(self):
        model = make_dataclass("ByName", [("ids", List[int])])
        model.__querystring_mode__ = "duplicate"
        assert decode(b"ids=1&ids=2", model).ids == [1, 2]
