"""Validation rules and the registry of rule checkers."""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from appkit.config.errors import ComparisonError, FieldRequiredError, ParserError


class Rule(str):
    """Name of a validation rule as written in a validation tag."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"Rule({str.__repr__(self)})"

    def register(self, checker: RuleChecker) -> None:
        """Register a custom rule; built-in rules cannot be replaced."""
        if self.is_builtin():
            raise ValueError("builtin rule cannot be registered")
        _validators[str(self)] = checker

    def unregister(self) -> None:
        """Remove a custom rule; built-in rules cannot be removed."""
        if self.is_builtin():
            raise ValueError("builtin rule cannot be unregistered")
        _validators.pop(str(self), None)

    def is_builtin(self) -> bool:
        return str(self) in _BUILTIN

    def is_registered(self) -> bool:
        return str(self) in _validators


REQUIRED = Rule("required")
MINIMUM = Rule("min")
MAXIMUM = Rule("max")
LENGTH = Rule("len")
EQUAL = Rule("eq")
NOT_EQUAL = Rule("ne")
GREATER_THAN = Rule("gt")
LESS_THAN = Rule("lt")
GREATER_THAN_EQUAL = Rule("gte")
LESS_THAN_EQUAL = Rule("lte")


class RuleChecker(ABC):
    """Checks a value against the condition of a rule."""

    @abstractmethod
    def validate(self, value: Any, condition: str) -> None:
        """Raise an error if the value does not satisfy the condition."""


_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_CONTAINERS = (list, tuple, dict, set, frozenset, bytes, bytearray)
_SIZED = (str, *_CONTAINERS)


def _parse_int(text: str) -> int:
    if not _INT_PATTERN.fullmatch(text):
        raise ValueError(f"invalid integer: {text!r}")
    return int(text)


def _parse_float(text: str) -> float:
    if not text or text != text.strip() or "_" in text:
        raise ValueError(f"invalid float: {text!r}")
    return float(text)


def _is_zero(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, _CONTAINERS):
        return False
    try:
        zero = type(value)()
    except TypeError:
        return False
    return bool(value == zero)


class RequiredRule(RuleChecker):
    """The value must not be None or the zero value of its type.

    Containers count as set whenever they are not None.
    """

    def validate(self, value: Any, condition: str) -> None:
        if _is_zero(value):
            raise FieldRequiredError()


class LengthRule(RuleChecker):
    """The value must have exactly the given length."""

    def validate(self, value: Any, condition: str) -> None:
        try:
            expected = _parse_int(condition)
        except ValueError:
            raise ParserError(LENGTH, condition) from None
        if value is None:
            return
        if not isinstance(value, _SIZED):
            raise ValueError(f"unsupported type: {type(value).__name__}")
        size = len(value)
        if size != expected:
            raise ValueError(f"length must be {expected}; got {size}")


def _compare(value: Any, condition: Any, rule: str) -> None:
    if rule == GREATER_THAN:
        if value <= condition:
            raise ComparisonError(value, condition, GREATER_THAN)
    elif rule == LESS_THAN:
        if value >= condition:
            raise ComparisonError(value, condition, LESS_THAN)
    elif rule in (GREATER_THAN_EQUAL, MINIMUM):
        if value < condition:
            raise ComparisonError(value, condition, GREATER_THAN_EQUAL)
    elif rule in (LESS_THAN_EQUAL, MAXIMUM):
        if value > condition:
            raise ComparisonError(value, condition, LESS_THAN_EQUAL)


@dataclass(frozen=True)
class ComparisonRule(RuleChecker):
    """Orders the value against the condition; containers compare by size."""

    rule: Rule

    def validate(self, value: Any, condition: str) -> None:
        if value is None or isinstance(value, bool):
            return
        if isinstance(value, str):
            _compare(value, condition, self.rule)
            return
        if isinstance(value, int):
            parse: Any = _parse_int
        elif isinstance(value, float):
            parse = _parse_float
        elif isinstance(value, _CONTAINERS):
            if self.rule not in (MINIMUM, MAXIMUM):
                raise ParserError(self.rule, condition)
            parse = _parse_int
            value = len(value)
        else:
            return
        try:
            bound = parse(condition)
        except ValueError:
            raise ParserError(self.rule, condition) from None
        _compare(value, bound, self.rule)


@dataclass(frozen=True)
class EqualityRule(RuleChecker):
    """Checks that the value is equal, or not equal, to the condition."""

    rule: Rule

    def validate(self, value: Any, condition: str) -> None:
        if value is None:
            return
        if isinstance(value, str):
            expected: Any = condition
        elif isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"unsupported type: {type(value).__name__}")
        else:
            parse = _parse_int if isinstance(value, int) else _parse_float
            try:
                expected = parse(condition)
            except ValueError:
                raise ParserError(self.rule, condition) from None

        if self.rule == EQUAL:
            if value != expected:
                raise ComparisonError(value, expected, EQUAL)
        elif self.rule == NOT_EQUAL:
            if value == expected:
                raise ComparisonError(value, expected, NOT_EQUAL)
        else:
            raise ComparisonError(value, expected, self.rule)


_BUILTIN: dict[str, RuleChecker] = {
    REQUIRED: RequiredRule(),
    MINIMUM: ComparisonRule(MINIMUM),
    MAXIMUM: ComparisonRule(MAXIMUM),
    LENGTH: LengthRule(),
    EQUAL: EqualityRule(EQUAL),
    NOT_EQUAL: EqualityRule(NOT_EQUAL),
    GREATER_THAN: ComparisonRule(GREATER_THAN),
    LESS_THAN: ComparisonRule(LESS_THAN),
    GREATER_THAN_EQUAL: ComparisonRule(GREATER_THAN_EQUAL),
    LESS_THAN_EQUAL: ComparisonRule(LESS_THAN_EQUAL),
}

_validators: dict[str, RuleChecker] = dict(_BUILTIN)


def checker_for(rule: str) -> RuleChecker:
    """Return the checker registered for a rule, or raise ValueError."""
    try:
        return _validators[str(rule)]
    except KeyError:
        raise ValueError(
            f"unknown validation rule: {json.dumps(str(rule), ensure_ascii=False)}"
        ) from None