"""A dependency injection container."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from typing import Any

from appkit.dependency.providers import Provider


class Container:
    """Holds providers by type and by name.

    One type may have several providers, so that several implementations of
    the same interface can live side by side. Names are unique; a later
    provider with the same name replaces the earlier one.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._providers: dict[Any, list[Provider]] = {}
        self._named: dict[str, Provider] = {}

    def __len__(self) -> int:
        """Number of distinct types that have providers."""
        with self._lock:
            return len(self._providers)

    def provide(self, *providers: Provider) -> None:
        """Add providers to the container."""
        with self._lock:
            for provider in providers:
                self._providers.setdefault(provider.type, []).append(provider)
                if provider.name:
                    self._named[provider.name] = provider

    def resolve(self, type_: Any) -> Any:
        """Return the value of the first provider of a type, or None."""
        with self._lock:
            providers = self._providers.get(type_)
            if providers:
                return providers[0].resolve()
        return None

    def resolve_named(self, name: str) -> Any:
        """Return the value of the provider with a name, or None."""
        with self._lock:
            provider = self._named.get(name)
            if provider is not None:
                return provider.resolve()
        return None

    def resolve_all(self, type_: Any) -> Iterator[tuple[Any, Any]]:
        """Yield (type, value) for every provider of a type, in the order provided."""
        with self._lock:
            providers = list(self._providers.get(type_, ()))
        for provider in providers:
            yield type_, provider.resolve()