"""Errors raised while loading and validating configurations."""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any


def _quote(text: object) -> str:
    return json.dumps(str(text), ensure_ascii=False)


def _format(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)


class _FieldError(ValueError):
    """Common shape of the errors that describe one configuration field."""

    _state = ""

    def __init__(self, field: str = "", type_name: str = "", message: str = "") -> None:
        super().__init__(field, type_name, message)
        self.field = field
        self.type_name = type_name
        self.message = message

    def __str__(self) -> str:
        if not (self.field or self.type_name or self.message):
            return ""
        text = f"field {_quote(self.field)} ({self.type_name}) is {self._state}"
        if self.message:
            return f"{text}: {self.message}"
        return text


class FieldRequiredError(_FieldError):
    """A required configuration field is missing."""

    _state = "required"


class FieldInvalidError(_FieldError):
    """A configuration field holds an invalid value."""

    _state = "invalid"


class ConfigEmptyError(ValueError):
    """The loaded configuration is empty."""

    def __init__(self) -> None:
        super().__init__("you must provide a configuration")


class ParserError(ValueError):
    """The value of a validation rule could not be parsed."""

    def __init__(self, rule: str | None, value: str) -> None:
        super().__init__(rule, value)
        self.rule = rule or ""
        self.value = value

    def __str__(self) -> str:
        if not self.rule:
            return f"invalid value {_quote(self.value)}"
        return f"invalid value {_quote(self.value)} for {self.rule}"


class RuleError(ValueError):
    """One or more validation rules failed for a value."""

    def __init__(self, rule: str, errors: Iterable[BaseException | None]) -> None:
        collected = [error for error in errors if error is not None]
        super().__init__(rule, collected)
        self.rule = rule
        self.errors = collected

    def __str__(self) -> str:
        return "; ".join(str(error) for error in self.errors)


_OPERATIONS = {
    "gt": "greater than",
    "lt": "less than",
    "gte": "greater than or equal to",
    "lte": "less than or equal to",
    "eq": "equal to",
    "ne": "not equal to",
    "min": "greater than or equal to",
    "max": "less than or equal to",
}


class ComparisonError(ValueError):
    """A value does not satisfy a comparison against a condition."""

    def __init__(self, value: Any, condition: Any, rule: str) -> None:
        super().__init__(value, condition, rule)
        self.value = value
        self.condition = condition
        self.rule = rule

    def __str__(self) -> str:
        if isinstance(self.condition, str):
            value = _quote(self.value)
            condition = _quote(self.condition)
        else:
            value = _format(self.value)
            condition = _format(self.condition)
        operation = _OPERATIONS.get(str(self.rule), "")
        if operation:
            return f"value = {value}, want a value {operation} {condition}"
        return f"unknown operation: {_quote(self.rule)}"


def wrap_field_error(
    name: str, type_name: str, err: BaseException | None
) -> BaseException | None:
    """Attach a field's name and type to a validation error.

    Field errors are rebuilt for the field; a rule error yields the wrapped
    form of its first error; any other error is returned unchanged.
    """
    if err is None:
        return None
    if isinstance(err, FieldRequiredError):
        return FieldRequiredError(name, type_name, str(err))
    if isinstance(err, FieldInvalidError):
        return FieldInvalidError(name, type_name, str(err))
    if isinstance(err, RuleError):
        for inner in err.errors:
            wrapped = wrap_field_error(name, type_name, inner)
            if wrapped is not None:
                return wrapped
        return None
    return err