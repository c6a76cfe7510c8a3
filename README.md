# appkit

appkit is a set of small building blocks that most applications need.

- `appkit.config` loads a configuration dataclass from a YAML file and from
  environment variables, and checks it against validation rules.
- `appkit.dependency` is a dependency-injection container with singleton and
  factory providers.
- `appkit.env` reads typed environment variables.
- `appkit.executors.policies` wraps asynchronous actions in policies: retry,
  timeout, rate limit, circuit breaker and protection.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Configuration

```python
from dataclasses import dataclass, field

from appkit.config.loader import Loadable, load, set_name
from appkit.config.validator import validate


@dataclass
class Config(Loadable):
    host: str = field(default="", metadata={"validate": "required"})
    port: int = field(default=0, metadata={"validate": "required,min=1024,max=65535"})

    def is_empty(self) -> bool:
        return self == Config()


set_name("my-app")
cfg = load(Config, "config.yaml")
validate(cfg)
```

`load(cls, path, *fallbacks)` takes a dataclass that has an `is_empty()`
method. If the path is empty, it calls the fallbacks in order and uses the
first path one of them returns; with no fallbacks it uses
`default_fallback()`, which gives `<user config dir>/<app name>/config.yaml`.
A missing file is not an error. Environment variables named
`<APP_NAME>_<FIELD>` (and `<APP_NAME>_<FIELD>_<SUBFIELD>` for nested
dataclasses) override values from the file. If the result is empty, `load`
raises `ConfigEmptyError`.

`validate(cfg)` reads the rules from each field's `metadata["validate"]`.
These rules are built in: `required`, `min`, `max`, `len`, `eq`, `ne`, `gt`,
`lt`, `gte` and `lte`. Fields tagged `-` and fields whose names start with an
underscore are skipped. Failed fields are raised together as an
`ExceptionGroup` of `FieldRequiredError`, `FieldInvalidError` or other
errors; an unknown rule raises `ValueError`, and a rule value that cannot be
parsed raises `ParserError`. An object with its own `validate()` method (see
the `Validator` protocol) validates itself instead.

To add a rule of your own, subclass `RuleChecker` and register it:

```python
from appkit.config.rules import Rule, RuleChecker


class NotLocalhost(RuleChecker):
    def validate(self, value, condition):
        if value == "localhost":
            raise ValueError("localhost is not allowed")


Rule("notlocal").register(NotLocalhost())
```

Built-in rules can be neither registered again nor unregistered.

## Dependency injection

```python
from appkit.dependency.container import Container
from appkit.dependency.providers import Factory, Singleton, SingletonFunc

container = Container()
container.provide(
    Singleton("primary"),
    Factory(lambda: "fresh", type_=str).named("factory"),
)

container.resolve(str)              # "primary"
container.resolve_named("factory")  # "fresh"
list(container.resolve_all(str))    # [(str, "primary"), (str, "fresh")]
```

A provider is registered under its declared `type_` if one is given,
otherwise under the concrete type of its value. `Singleton` always returns
the same value, `Factory` calls its factory on every resolve, and
`SingletonFunc` calls its factory once, on first use. `resolve` and
`resolve_named` return `None` when nothing matches.

## Environment variables

```python
from datetime import timedelta

from appkit.env.variable import get, get_with_fallback, must_get

port = get_with_fallback("PORT", 8080)
debug = get("DEBUG", bool).no_fallback().value()
host = must_get("HOST", str)
timeout = get_with_fallback(
    "TIMEOUT", timedelta(seconds=5), lambda s: timedelta(seconds=float(s))
)
```

Default converters exist for `str`, `bool`, `int`, `float` and `complex`
(and `X | None` of these); other types need a converter. A required variable
that is missing or cannot be converted raises `VariableError`; a variable
with a fallback returns the fallback and logs the conversion failure.

## Executors

An action is an argument-less callable that returns an awaitable and fails
by raising. Each policy in `appkit.executors.policies` takes an action and
returns a new one, so policies are combined by nesting them:

```python
from appkit.executors.policies import (
    Retrier,
    circuit_breaker,
    protector,
    rate_limiter,
    timeouter,
)


async def task():
    ...


action = protector(
    circuit_breaker(3, 1.0,
        rate_limiter(1.0,
            timeouter(1.0, Retrier(max_retries=3).retry(task)))))
await action()
```

- `Retrier(max_retries, backoff).retry(action)` tries up to `max_retries`
  times, sleeping `backoff(attempt)` seconds after each failure;
  `default_backoff` waits 2 to the power of the attempt. `retry(action)`
  uses the shared default retrier (3 tries), which `set_max_retries` and
  `set_backoff` change.
- `timeouter(timeout, action)` raises `TimeoutError` when the action runs too
  long, and at once for a timeout of zero or less.
- `rate_limiter(rate, action)` allows `rate` calls per second; a rate of zero
  or less raises `InvalidRateLimitError` on every call.
- `circuit_breaker(max_failures, reset_timeout, action)` raises
  `CircuitOpenError` once `max_failures` failures in a row have happened,
  until `reset_timeout` seconds have passed.
- `protector(action)` raises whatever the action raised inside an
  `ExceptionGroup`.

Durations may be given as seconds or as `timedelta`.

## What is not included

The executors come as plain functions only: there is no wrapper object for
chaining policies, no helper for falling back to a second action, and no
helpers for running several actions one after another or side by side.
Use `asyncio.gather` or `asyncio.TaskGroup` for that.