"""Typed access to environment variables through a small builder."""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
import os
import queue
import types
import typing
from typing import Any

from appkit.env.converters import Converter, _unwrap_optional, default_converter

_log = logging.getLogger(__name__)

_INVALID_BASES = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    queue.Queue,
    asyncio.Queue,
)


class VariableError(ValueError):
    """A required environment variable is missing or cannot be converted."""


def _type_name(type_: Any) -> str:
    return getattr(type_, "__name__", str(type_))


def _check_type(type_: Any) -> None:
    target = _unwrap_optional(type_)
    if target is None or target is type(None):
        raise TypeError("None is not a valid type for an environment variable")
    cls = typing.get_origin(target) or target
    if (
        target is Any
        or cls is object
        or not isinstance(cls, type)
        or issubclass(cls, _INVALID_BASES)
        or inspect.isabstract(cls)
        or getattr(cls, "_is_protocol", False)
    ):
        raise TypeError(
            f"cannot use {_type_name(target)} as type for an environment variable"
        )


class Variable:
    """Builder for reading one environment variable as a given type.

    A variable is required unless a fallback is set. Reading a required
    variable that is missing or cannot be converted raises VariableError;
    an optional one returns its fallback instead and logs the failure.
    """

    def __init__(self, key: str, type_: Any) -> None:
        _check_type(type_)
        self.key = key
        self.type = type_
        self.default: Any = None
        self._converter: Converter | None = None
        self._optional = False

    def or_die(self) -> Variable:
        """Mark the variable as required: reading it raises on any failure."""
        if self._optional:
            raise RuntimeError("cannot use or_die with with_fallback")
        return self

    def no_fallback(self) -> Variable:
        """Mark the variable as having no fallback: reading it raises on any failure."""
        if self._optional:
            raise RuntimeError("cannot use no_fallback with with_fallback")
        return self

    def with_fallback(self, default: Any) -> Variable:
        """Use this value when the variable is missing or cannot be converted."""
        self.default = default
        self._optional = True
        return self

    def convert(self, converter: Converter | None) -> Variable:
        """Use a custom converter instead of the default one for the type."""
        self._converter = converter
        return self

    def raw(self) -> str:
        """Return the unconverted text; an optional missing variable gives ""."""
        try:
            return os.environ[self.key]
        except KeyError:
            self._fail(None)
            return ""

    def value(self) -> Any:
        """Return the converted value of the variable."""
        text = os.environ.get(self.key)
        if text is None:
            return self._fail(None)

        converter = self._converter
        if converter is None:
            try:
                converter = default_converter(self.type)
            except TypeError as exc:
                return self._fail(
                    f"no default converter for type {_type_name(self.type)}: {exc}",
                    exc,
                )
            self._converter = converter

        try:
            return converter(text)
        except Exception as exc:  # any converter failure is reported the same way
            quoted = json.dumps(text, ensure_ascii=False)
            return self._fail(f"failed to convert value {quoted}: {exc}", exc)

    def _fail(self, reason: str | None, cause: BaseException | None = None) -> Any:
        if self._optional:
            if reason is not None:
                _log.error(
                    "Failed to get environment variable %s: %s", self.key, reason
                )
            return self.default
        key = json.dumps(self.key, ensure_ascii=False)
        if reason is None:
            raise VariableError(f"environment variable {key} is required")
        raise VariableError(
            f"failed to get environment variable {key}: {reason}"
        ) from cause


def get(key: str, type_: Any) -> Variable:
    """Return a builder for the variable; raises TypeError for unusable types."""
    return Variable(key, type_)


def get_with_fallback(key: str, default: Any, converter: Converter | None = None) -> Any:
    """Read a variable typed like its default, returning the default on failure."""
    return get(key, type(default)).with_fallback(default).convert(converter).value()


def must_get(key: str, type_: Any, converter: Converter | None = None) -> Any:
    """Read a required variable, raising VariableError on any failure."""
    return get(key, type_).or_die().convert(converter).value()