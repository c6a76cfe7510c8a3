"""Loading of configuration dataclasses from YAML files and the environment."""

import dataclasses
import os
import sys
import threading
import types
import typing
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import yaml

from appkit.config.errors import ConfigEmptyError

T = TypeVar("T")
Fallback = Callable[[], str]

_lock = threading.Lock()
_app_name = Path(sys.argv[0]).name if sys.argv and sys.argv[0] else ""

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}
_NAMED_TYPES = {"str": str, "int": int, "float": float, "bool": bool}


class Loadable(ABC):
    """A configuration that can tell whether it is empty."""

    @abstractmethod
    def is_empty(self) -> bool:
        """Return True if the configuration holds nothing."""


def set_name(name: str) -> None:
    """Replace the application name used for paths and environment variables."""
    global _app_name
    with _lock:
        _app_name = name


def _user_config_dir() -> Path:
    if os.name == "nt":
        appdata = os.environ.get("APPDATA", "")
        if not appdata:
            raise OSError("%AppData% is not defined")
        return Path(appdata)
    home = os.environ.get("HOME", "")
    if sys.platform == "darwin":
        if not home:
            raise OSError("$HOME is not defined")
        return Path(home, "Library", "Application Support")
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    if xdg:
        if not os.path.isabs(xdg):
            raise OSError("path in $XDG_CONFIG_HOME is relative")
        return Path(xdg)
    if not home:
        raise OSError("neither $XDG_CONFIG_HOME nor $HOME are defined")
    return Path(home, ".config")


def default_fallback() -> str:
    """Return <user config dir>/<app name>/config.yaml."""
    try:
        base = _user_config_dir()
    except OSError as exc:
        raise OSError(f"failed to get user home directory: {exc}") from exc
    return str(base / _app_name / "config.yaml")


def _env_name(parts: list[str]) -> str:
    key = "_".join(parts).upper().replace(".", "_").replace("-", "_")
    prefix = _app_name.replace("-", "_").upper()
    return f"{prefix}_{key}" if prefix else key


def _unwrap_optional(hint: Any) -> Any:
    origin = typing.get_origin(hint)
    if origin in (typing.Union, types.UnionType):
        args = [a for a in typing.get_args(hint) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


def _resolve_hint(field: dataclasses.Field) -> Any:
    """Return the field's type, reading simple names from string annotations."""
    hint = field.type
    if isinstance(hint, str):
        text = hint.strip()
        if text.startswith("Optional[") and text.endswith("]"):
            text = text[len("Optional["):-1].strip()
        else:
            parts = [p.strip() for p in text.split("|") if p.strip() != "None"]
            if len(parts) == 1:
                text = parts[0]
        resolved = _NAMED_TYPES.get(text, Any)
        if resolved is Any:
            factory = field.default_factory
            if isinstance(factory, type) and dataclasses.is_dataclass(factory):
                return factory
        return resolved
    return _unwrap_optional(hint)


def _coerce(value: Any, hint: Any, name: str) -> Any:
    failure = ValueError(f"cannot decode {value!r} into {name!r}")
    if hint is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            if value in _TRUE:
                return True
            if value in _FALSE:
                return False
        raise failure
    if hint is int:
        if isinstance(value, bool):
            raise failure
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                raise failure from None
        raise failure
    if hint is float:
        if isinstance(value, bool):
            raise failure
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                raise failure from None
        raise failure
    if hint is str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (str, int, float)):
            return str(value)
        raise failure
    return value


def _zero(hint: Any) -> Any:
    if hint in (int, float, str, bool):
        return hint()
    return None


def _build(cls: type, data: dict, parts: list[str]) -> Any:
    lowered = {str(k).lower(): v for k, v in data.items()}
    kwargs: dict[str, Any] = {}
    for field in dataclasses.fields(cls):
        if not field.init:
            continue
        key = field.name.lower()
        hint = _resolve_hint(field)
        path = [*parts, key]
        if isinstance(hint, type) and dataclasses.is_dataclass(hint):
            section = lowered.get(key) or {}
            if not isinstance(section, dict):
                raise ValueError(f"cannot decode {section!r} into {field.name!r}")
            kwargs[field.name] = _build(hint, section, path)
            continue
        env_value = os.environ.get(_env_name(path))
        if env_value is not None:
            kwargs[field.name] = _coerce(env_value, hint, field.name)
        elif key in lowered:
            kwargs[field.name] = _coerce(lowered[key], hint, field.name)
        elif (
            field.default is dataclasses.MISSING
            and field.default_factory is dataclasses.MISSING
        ):
            kwargs[field.name] = _zero(hint)
    return cls(**kwargs)


def _read(path: str) -> dict:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as exc:
        raise ValueError(f"failed to read configuration file: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"failed to read configuration file: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("failed to unmarshal configuration: expected a mapping")
    return data


def load(cls: type[T], path: str = "", *fallbacks: Fallback) -> T:
    """Load a configuration dataclass from a YAML file and the environment.

    With an empty path, the fallbacks are tried in order (by default the
    user's config directory). A missing file is not an error. Environment
    variables named <APP>_<FIELD>[_<SUBFIELD>] override file values.
    Raises ConfigEmptyError if the result is empty.
    """
    if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
        raise TypeError("given type is not a dataclass")
    if not callable(getattr(cls, "is_empty", None)):
        raise TypeError("given type has no is_empty method")

    if not path:
        chain = fallbacks or (default_fallback,)
        last_error: Exception | None = None
        for fallback in chain:
            try:
                path = fallback()
                break
            except Exception as exc:  # try the next fallback
                last_error = exc
        else:
            raise ValueError(
                f"failed to get fallback path: {last_error}"
            ) from last_error

    try:
        cfg = _build(cls, _read(path), [])
    except (TypeError, ValueError) as exc:
        if isinstance(exc, ValueError) and str(exc).startswith("failed to"):
            raise
        raise ValueError(f"failed to unmarshal configuration: {exc}") from exc

    if cfg.is_empty():
        raise ConfigEmptyError()
    return cfg