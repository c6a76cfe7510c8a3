"""Default converters from environment variable text to Python values."""

from __future__ import annotations

import re
import types
import typing
from collections.abc import Callable
from typing import Any

Converter = Callable[[str], Any]

_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


def _unwrap_optional(hint: Any) -> Any:
    """Return X for ``X | None`` or ``Optional[X]``; anything else unchanged."""
    if typing.get_origin(hint) in (typing.Union, types.UnionType):
        args = [arg for arg in typing.get_args(hint) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


def _check_plain(text: str, kind: str) -> None:
    if not text or text != text.strip() or "_" in text:
        raise ValueError(f"invalid {kind} syntax: {text!r}")


def _parse_bool(text: str) -> bool:
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"invalid boolean syntax: {text!r}")


def _parse_int(text: str) -> int:
    if not _INT_PATTERN.fullmatch(text):
        raise ValueError(f"invalid integer syntax: {text!r}")
    return int(text)


def _parse_float(text: str) -> float:
    _check_plain(text, "float")
    return float(text)


def _parse_complex(text: str) -> complex:
    _check_plain(text, "complex")
    if "j" in text.lower():
        raise ValueError(f"invalid complex syntax: {text!r}")
    inner = text[1:-1] if text.startswith("(") and text.endswith(")") else text
    if inner.endswith("i"):
        inner = inner[:-1] + "j"
    try:
        return complex(inner)
    except ValueError:
        raise ValueError(f"invalid complex syntax: {text!r}") from None


# bool must come before int: bool is a subclass of int.
_PARSERS: tuple[tuple[type, Callable[[str], Any]], ...] = (
    (bool, _parse_bool),
    (str, str),
    (int, _parse_int),
    (float, _parse_float),
    (complex, _parse_complex),
)


def default_converter(type_: Any) -> Converter:
    """Return a converter for str, bool, int, float and complex types.

    ``X | None`` is converted as X. Subclasses of the supported types are
    built from the parsed value. Raises TypeError for any other type.
    """
    target = _unwrap_optional(type_)
    if isinstance(target, type):
        for base, parse in _PARSERS:
            if issubclass(target, base):
                if target is base:
                    return parse

                def convert(text: str, _parse=parse, _cls=target) -> Any:
                    return _cls(_parse(text))

                return convert
    name = getattr(target, "__name__", str(target))
    raise TypeError(f"type {name} is not supported")