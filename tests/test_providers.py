import threading
from abc import ABC, abstractmethod

import pytest

from appkit.dependency.providers import Factory, Singleton, SingletonFunc


class Stringer(ABC):
    @abstractmethod
    def __str__(self) -> str: ...


class Buffer(Stringer):
    def __init__(self, text: str) -> None:
        self.text = text

    def __str__(self) -> str:
        return self.text


def test_singleton_returns_same_object():
    value = ["item"]
    provider = Singleton(value)
    assert provider.resolve() is value
    assert provider.resolve() is provider.resolve()


def test_singleton_type_is_concrete_type():
    assert Singleton(["item"]).type is list


def test_singleton_declared_type_wins():
    provider = Singleton(Buffer("buffer"), Stringer)
    assert provider.type is Stringer
    assert str(provider.resolve()) == "buffer"


def test_singleton_rejects_value_not_matching_declared_type():
    with pytest.raises(TypeError):
        Singleton("text", Stringer)


def test_named_sets_name_and_returns_provider():
    provider = Singleton("test")
    assert provider.name == ""
    assert provider.named("singleton-1") is provider
    assert provider.name == "singleton-1"


def test_factory_returns_new_value_each_time():
    provider = Factory(list)
    first = provider.resolve()
    second = provider.resolve()
    assert first == second == []
    assert first is not second


def test_factory_type_comes_from_factory_result():
    calls = []

    def make():
        calls.append(1)
        return "test"

    provider = Factory(make)
    assert provider.type is str
    assert len(calls) == 1


def test_factory_declared_type_does_not_call_factory():
    calls = []

    def make():
        calls.append(1)
        return Buffer("factory")

    provider = Factory(make, Stringer)
    assert provider.type is Stringer
    assert calls == []


def test_factory_checks_declared_type_on_resolve():
    provider = Factory(lambda: "text", Stringer)
    with pytest.raises(TypeError):
        provider.resolve()


def test_factory_named():
    provider = Factory(lambda: "test").named("factory")
    assert provider.name == "factory"
    assert provider.resolve() == "test"


def test_singleton_func_calls_factory_once():
    calls = []

    def make():
        calls.append(1)
        return ["made"]

    provider = SingletonFunc(make)
    assert provider.type is list
    first = provider.resolve()
    assert provider.resolve() is first
    assert len(calls) == 1


def test_singleton_func_is_lazy():
    calls = []

    def make():
        calls.append(1)
        return Buffer("lazy")

    provider = SingletonFunc(make, Stringer)
    assert calls == []
    assert str(provider.resolve()) == "lazy"
    assert len(calls) == 1


def test_singleton_func_once_across_threads():
    calls = []
    results = []

    def make():
        calls.append(1)
        return ["made"]

    provider = SingletonFunc(make)

    def worker():
        results.append(provider.resolve())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    value = provider.resolve()
    assert value == ["made"]
    assert len(calls) == 1
    assert [id(result) for result in results] == [id(value)] * 8