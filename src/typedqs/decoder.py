"""Decode a query string into a typed value."""
from __future__ import annotations

import logging
import typing as t

from typedqs.modes import URLENCODED, Mode
from typedqs.parsers import parse
from typedqs.shapes import Decoder

T = t.TypeVar("T")

logger = logging.getLogger(__name__)

default_decoder = Decoder()
strict_decoder = Decoder(deny_unknown_fields=True)


def mode_for(target: t.Any, default: Mode = URLENCODED) -> Mode:
    """Return the mode ``target`` declares with ``__querystring_mode__``."""
    mode = getattr(target, "__querystring_mode__", None)
    if mode is None:
        return default
    if not isinstance(mode, Mode):
        mode = Mode(mode)
    return mode


def decode(
    data: bytes | bytearray | memoryview | str,
    target: type[T],
    mode: Mode | None = None,
    *,
    deny_unknown_fields: bool = False,
    decoder: Decoder | None = None,
) -> T:
    """Decode the query string ``data`` into an instance of ``target``.

    ``data`` is everything after the ``?`` of a URL; text is encoded as
    UTF-8 first. ``target`` must be a dataclass or a ``dict`` annotation.
    When ``mode`` is omitted, the mode declared by ``target`` (see
    :func:`mode_for`) or urlencoded mode is used.

    Raises :class:`~typedqs.errors.DecodeError` when the input is malformed
    or does not fit ``target``.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    elif not isinstance(data, bytes):
        data = bytes(data)
    if mode is None:
        mode = mode_for(target)
    if decoder is None:
        decoder = strict_decoder if deny_unknown_fields else default_decoder

    logger.debug("decoding %d bytes in %s mode", len(data), mode.kind.value)
    pairs = parse(data, mode)
    return decoder.decode_root(target, pairs)


def decode_str(
    text: str,
    target: type[T],
    mode: Mode | None = None,
    **kwargs: t.Any,
) -> T:
    """Same as :func:`decode` for text input."""
    return decode(text, target, mode, **kwargs)
