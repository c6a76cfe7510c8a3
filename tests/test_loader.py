import sys
from dataclasses import dataclass
from pathlib import Path

import pytest

from appkit.config.errors import ConfigEmptyError
from appkit.config.loader import Loadable, default_fallback, load, set_name


@dataclass
class Config(Loadable):
    Host: str = ""
    Port: int = 0

    def is_empty(self):
        return self == Config()


GOOD = "Host: localhost\nPort: 8080\n"


@pytest.fixture(autouse=True)
def app_name():
    set_name("appkit-test")
    yield
    set_name(Path(sys.argv[0]).name)


def write(path, text):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_load_success(tmp_path):
    path = write(tmp_path / "config.yaml", GOOD)
    assert load(Config, path) == Config("localhost", 8080)


def test_load_lowercase_keys(tmp_path):
    path = write(tmp_path / "config.yaml", "host: localhost\nport: 8080\n")
    assert load(Config, path) == Config("localhost", 8080)


def test_load_fallback(tmp_path):
    path = write(tmp_path / "config.yaml", GOOD)
    assert load(Config, "", lambda: path) == Config("localhost", 8080)


def test_load_first_working_fallback(tmp_path):
    path = write(tmp_path / "config.yaml", GOOD)

    def broken():
        raise OSError("error")

    assert load(Config, "", broken, lambda: path) == Config("localhost", 8080)


def test_load_fallback_error():
    def broken():
        raise OSError("error")

    with pytest.raises(ValueError, match="failed to get fallback path: error"):
        load(Config, "", broken)


def test_load_default_fallback(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    monkeypatch.setenv("APPDATA", str(tmp_path))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    path = default_fallback()
    assert Path(path).parts[-2:] == ("appkit-test", "config.yaml")
    write(path, GOOD)
    assert load(Config, "") == Config("localhost", 8080)


def test_load_empty_config(tmp_path):
    path = write(tmp_path / "empty.yaml", 'Host: ""\nPort: 0\n')
    with pytest.raises(ConfigEmptyError):
        load(Config, path)


def test_load_missing_file_is_empty(tmp_path):
    with pytest.raises(ConfigEmptyError):
        load(Config, str(tmp_path / "missing.yaml"))


def test_load_invalid_format(tmp_path):
    path = write(tmp_path / "invalid.yaml", "in: va: lid\n")
    with pytest.raises(ValueError, match="failed to read configuration file"):
        load(Config, path)


def test_load_wrong_value_type(tmp_path):
    path = write(tmp_path / "config.yaml", "Host: localhost\nPort: abc\n")
    with pytest.raises(ValueError, match="failed to unmarshal"):
        load(Config, path)


def test_load_invalid_type(tmp_path):
    path = write(tmp_path / "config.yaml", GOOD)
    with pytest.raises(TypeError):
        load(int, path)


def test_environment_overrides_file(tmp_path, monkeypatch):
    path = write(tmp_path / "config.yaml", GOOD)
    monkeypatch.setenv("APPKIT_TEST_PORT", "9090")
    assert load(Config, path) == Config("localhost", 9090)


def test_set_name_changes_env_prefix(tmp_path, monkeypatch):
    set_name("other")
    monkeypatch.setenv("OTHER_HOST", "example.com")
    path = write(tmp_path / "config.yaml", GOOD)
    assert load(Config, path).Host == "example.com"


def test_set_name_changes_fallback_path(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("APPDATA", str(tmp_path))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    set_name("test")
    assert Path(default_fallback()).parent.name == "test"