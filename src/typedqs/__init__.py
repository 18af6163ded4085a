"""typedqs: decode query strings into typed Python values."""

__version__ = "0.1.0"

from typedqs.config import Config
from typedqs.decoder import decode, decode_str, mode_for
from typedqs.errors import DecodeError, ErrorKind
from typedqs.extract import QueryString, QueryStringRejection
from typedqs.modes import BRACKETS, DUPLICATE, URLENCODED, Mode, ParseMode
from typedqs.parsers import PairCollection, parse
from typedqs.protocol import KeyConsumer, MapAccess, ValueAccess, ValueConsumer
from typedqs.shapes import Decoder, Shape
from typedqs.slices import DecodedSlice, RawSlice

__all__ = [
    "__version__",
    "BRACKETS",
    "DUPLICATE",
    "URLENCODED",
    "Config",
    "DecodeError",
    "DecodedSlice",
    "Decoder",
    "ErrorKind",
    "KeyConsumer",
    "MapAccess",
    "Mode",
    "PairCollection",
    "ParseMode",
    "QueryString",
    "QueryStringRejection",
    "RawSlice",
    "Shape",
    "ValueAccess",
    "ValueConsumer",
    "decode",
    "decode_str",
    "mode_for",
    "parse",
]
