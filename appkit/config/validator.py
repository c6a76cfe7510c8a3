"""Validation of configuration dataclasses through "validate" field metadata."""

from __future__ import annotations

import dataclasses
from typing import Any, Protocol, runtime_checkable

from appkit.config.errors import ParserError, RuleError, wrap_field_error
from appkit.config.rules import Rule, RuleChecker, checker_for

TAG = "validate"


@runtime_checkable
class Validator(Protocol):
    """A configuration that validates itself."""

    def validate(self) -> None:
        """Raise an error if the configuration is invalid."""


def _is_instance(value: Any) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _type_name(field: dataclasses.Field) -> str:
    hint = field.type
    if isinstance(hint, str):
        return hint
    return getattr(hint, "__name__", str(hint))


def _parse_tag(tag: str) -> list[tuple[Rule, RuleChecker, str]]:
    """Turn a tag such as "required,min=1" into checkers; unknown rules raise."""
    parsed = []
    for condition in dict.fromkeys(tag.split(",")):
        name, _, value = condition.partition("=")
        rule = Rule(name)
        parsed.append((rule, checker_for(rule), value))
    return parsed


def _apply(value: Any, tag: str) -> RuleError | None:
    rules = _parse_tag(tag)
    failures: list[Exception] = []
    last_rule = Rule("")
    for rule, checker, condition in rules:
        try:
            checker.validate(value, condition)
        except ParserError:
            raise
        except Exception as exc:  # a failed rule is collected, not fatal
            failures.append(exc)
            last_rule = rule
    if failures:
        return RuleError(last_rule, failures)
    return None


def validate(cfg: Any) -> None:
    """Validate a configuration.

    Objects with their own ``validate`` method are asked to validate
    themselves. Dataclass instances are checked field by field using the
    rules in each field's ``metadata["validate"]``; failures are raised
    together as an ExceptionGroup. Malformed tags raise ValueError or
    ParserError at once, and anything else raises TypeError.
    """
    if isinstance(cfg, Validator):
        cfg.validate()
        return
    if not _is_instance(cfg):
        raise TypeError(
            "value must be a dataclass instance to use validation "
            "without implementing a validate method"
        )

    errors: list[Exception] = []
    for field in dataclasses.fields(cfg):
        tag = field.metadata.get(TAG)
        if tag is None or tag == "-" or field.name.startswith("_"):
            continue
        value = getattr(cfg, field.name)
        type_name = _type_name(field)

        if _is_instance(value):
            caught: type[BaseException] = (
                Exception if isinstance(value, Validator) else ExceptionGroup
            )
            try:
                validate(value)
            except caught as exc:
                errors.append(wrap_field_error(field.name, type_name, exc))
            continue

        failure = _apply(value, tag)
        if failure is not None:
            errors.append(wrap_field_error(field.name, type_name, failure))

    if errors:
        raise ExceptionGroup("invalid configuration", errors)