"""Providers that hand out dependencies to a container."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any


def _conform(value: Any, declared: Any) -> Any:
    """Return the value, or raise TypeError if it does not match the declared type."""
    if declared is None:
        return value
    try:
        matches = isinstance(value, declared)
    except TypeError:
        return value
    if not matches:
        name = getattr(declared, "__name__", str(declared))
        raise TypeError(f"{type(value).__name__} does not implement {name}")
    return value


class Provider(ABC):
    """Source of a dependency, registered under a type and optionally a name.

    When a type is declared, the provider is registered under it (an
    interface, an abstract base class); otherwise under the concrete type
    of the value it provides.
    """

    def __init__(self, type_: Any = None) -> None:
        self.name = ""
        self._declared = type_

    def named(self, name: str) -> Provider:
        """Give the provider a name and return it."""
        self.name = name
        return self

    @property
    def type(self) -> Any:
        """The type this provider is registered under."""
        if self._declared is not None:
            return self._declared
        return self._concrete_type()

    @abstractmethod
    def _concrete_type(self) -> type:
        """The concrete type of the provided value."""

    @abstractmethod
    def resolve(self) -> Any:
        """Return the provided value."""


class Singleton(Provider):
    """Provides the same value every time."""

    def __init__(self, value: Any, type_: Any = None) -> None:
        super().__init__(type_)
        self._value = _conform(value, type_)

    def _concrete_type(self) -> type:
        return type(self._value)

    def resolve(self) -> Any:
        return self._value


class Factory(Provider):
    """Provides a new value from the factory every time."""

    def __init__(self, factory: Callable[[], Any], type_: Any = None) -> None:
        super().__init__(type_)
        self._factory = factory

    def _concrete_type(self) -> type:
        return type(self._factory())

    def resolve(self) -> Any:
        return _conform(self._factory(), self._declared)


class SingletonFunc(Factory):
    """Calls the factory once, on first use, and provides that value ever after."""

    def __init__(self, factory: Callable[[], Any], type_: Any = None) -> None:
        super().__init__(factory, type_)
        self._lock = threading.Lock()
        self._created = False
        self._value: Any = None

    def _instance(self) -> Any:
        with self._lock:
            if not self._created:
                self._value = self._factory()
                self._created = True
            return self._value

    def _concrete_type(self) -> type:
        return type(self._instance())

    def resolve(self) -> Any:
        return _conform(self._instance(), self._declared)