"""Tests for settings loading and project paths."""

from __future__ import annotations

from pathlib import Path

import pytest

from quartermaster.runtime import Settings, get_paths, load_settings, load_settings_file, reset_paths


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("QUARTERMASTER_API_URL", raising=False)
    monkeypatch.delenv("QUARTERMASTER_HOME", raising=False)
    load_settings_file.cache_clear()
    reset_paths()
    yield
    load_settings_file.cache_clear()
    reset_paths()


def _write(tmp_path: Path, text: str) -> str:
    path = tmp_path / "quartermaster.toml"
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    assert load_settings(str(tmp_path / "absent.toml")) == Settings()


def test_values_are_read_from_toml(tmp_path: Path) -> None:
    config = _write(
        tmp_path,
        '[api]\nbase_url = "https://stores.example/api/"\ntimeout = 5\n\n[display]\nserialized_suffix = " #"\n',
    )

    settings = load_settings(config)

    assert settings == Settings(api_url="https://stores.example/api", timeout=5.0, serialized_suffix=" #")


def test_environment_overrides_base_url(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config = _write(tmp_path, '[api]\nbase_url = "https://stores.example/api"\n')
    monkeypatch.setenv("QUARTERMASTER_API_URL", "http://override.test/api/")

    assert load_settings(config).api_url == "http://override.test/api"


@pytest.mark.parametrize(
    "text",
    [
        'api = "not a table"\n',
        '[api]\ntimeout = "soon"\n',
        "[api]\ntimeout = 0\n",
    ],
)
def test_invalid_settings_raise(tmp_path: Path, text: str) -> None:
    with pytest.raises(ValueError):
        load_settings(_write(tmp_path, text))


def test_default_settings_file_follows_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "quartermaster.toml").write_text("[api]\ntimeout = 12.5\n", encoding="utf-8")
    monkeypatch.setenv("QUARTERMASTER_HOME", str(tmp_path))

    assert get_paths().settings_file == tmp_path.resolve() / "config" / "quartermaster.toml"
    assert load_settings().timeout == 12.5


def test_api_url_override_is_read_after_file_is_cached(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config = _write(tmp_path, '[api]\nbase_url = "https://stores.example/api"\n')

    assert load_settings(config).api_url == "https://stores.example/api"
    monkeypatch.setenv("QUARTERMASTER_API_URL", "http://late.test/api")
    assert load_settings(config).api_url == "http://late.test/api"
    monkeypatch.delenv("QUARTERMASTER_API_URL")
    assert load_settings(config).api_url == "https://stores.example/api"
    assert load_settings_file.cache_info().misses == 1
