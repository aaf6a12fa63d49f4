"""Tests for :mod:`arangograph.config`."""

from __future__ import annotations

import pytest

from arangograph import config
from arangograph.errors import ConfigurationError


ARANGO_VARIABLES = (
    "ARANGO_URL",
    "ARANGO_DATABASE",
    "ARANGO_USERNAME",
    "ARANGO_PASSWORD",
    "ARANGO_TIMEOUT",
    "ARANGO_CONNECT_RETRIES",
    "ARANGO_COLLECTION_NAMING",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    config._load_environment.cache_clear()
    for name in ARANGO_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    yield
    config._load_environment.cache_clear()


def test_dotenv_is_loaded_once_per_process(monkeypatch):
    """The ``.env`` loader runs once until the cache is cleared."""

    calls = []
    monkeypatch.setattr(config, "load_dotenv", lambda *args, **kwargs: calls.append((args, kwargs)))

    config.get_env("ARANGO_URL")
    config.get_env("ARANGO_DATABASE")
    assert len(calls) == 1
    assert calls[0][1] == {"override": False}

    config._load_environment.cache_clear()
    config.get_env("ARANGO_URL")
    assert len(calls) == 2


def test_get_env_prefers_process_environment(monkeypatch):
    monkeypatch.setenv("ARANGO_DATABASE", "in-memory")

    assert config.get_env("ARANGO_DATABASE") == "in-memory"


def test_get_env_falls_back_to_default():
    assert config.get_env("ARANGO_DATABASE", "fallback") == "fallback"


def test_store_settings_defaults():
    settings = config.StoreSettings.from_env()

    assert settings == config.StoreSettings()
    assert settings.url == "http://localhost:8529"
    assert settings.collection_naming is None


def test_store_settings_read_environment(monkeypatch):
    monkeypatch.setenv("ARANGO_URL", "https://arango.internal:8530/")
    monkeypatch.setenv("ARANGO_DATABASE", "social")
    monkeypatch.setenv("ARANGO_USERNAME", "app")
    monkeypatch.setenv("ARANGO_PASSWORD", "secret")
    monkeypatch.setenv("ARANGO_TIMEOUT", "2.5")
    monkeypatch.setenv("ARANGO_CONNECT_RETRIES", "5")
    monkeypatch.setenv("ARANGO_COLLECTION_NAMING", "snake_case")

    settings = config.StoreSettings.from_env()

    assert settings.url == "https://arango.internal:8530"
    assert settings.database == "social"
    assert (settings.username, settings.password) == ("app", "secret")
    assert settings.timeout == 2.5
    assert settings.connect_retries == 5
    assert settings.collection_naming == "snake_case"


@pytest.mark.parametrize(
    "name, value",
    [
        ("ARANGO_TIMEOUT", "soon"),
        ("ARANGO_CONNECT_RETRIES", "many"),
        ("ARANGO_CONNECT_RETRIES", "0"),
    ],
)
def test_store_settings_reject_bad_numbers(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError, match=name):
        config.StoreSettings.from_env()
