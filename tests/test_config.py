"""Tests for environment-driven settings."""

from unittest.mock import patch

import pytest

from haulquote.config import (
    DEFAULT_ALLOWED_ORIGINS,
    ConfigError,
    Settings,
    load_settings,
    parse_list,
)


ENV_VARS = (
    "ALLOWED_ORIGINS",
    "NO_RATE_LIMIT_IPS",
    "RATE_LIMIT_WINDOW_MS",
    "RATE_LIMIT_MAX_REQUESTS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isolate each test from the real environment and any .env file."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    with patch("haulquote.config._load_env"):
        yield


def test_parse_list():
    assert parse_list(" a , b,,c ") == ("a", "b", "c")
    assert parse_list("") == ()
    assert parse_list(None) == ()


def test_defaults():
    settings = load_settings()
    assert settings.allowed_origins == parse_list(DEFAULT_ALLOWED_ORIGINS)
    assert settings.no_rate_limit_ips == ()
    assert settings.rate_limit_window_ms == 60_000
    assert settings.rate_limit_max_requests == 10


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("ALLOWED_ORIGINS", "https://haul.example, https://www.haul.example")
    monkeypatch.setenv("NO_RATE_LIMIT_IPS", "10.0.0.1,10.0.0.2")
    monkeypatch.setenv("RATE_LIMIT_WINDOW_MS", "30000")
    monkeypatch.setenv("RATE_LIMIT_MAX_REQUESTS", "5")

    assert load_settings() == Settings(
        allowed_origins=("https://haul.example", "https://www.haul.example"),
        no_rate_limit_ips=("10.0.0.1", "10.0.0.2"),
        rate_limit_window_ms=30_000,
        rate_limit_max_requests=5,
    )


def test_empty_allowed_origins(monkeypatch):
    """An explicitly empty list disables every internal origin."""
    monkeypatch.setenv("ALLOWED_ORIGINS", "")
    assert load_settings().allowed_origins == ()


def test_invalid_integer(monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_MAX_REQUESTS", "ten")
    with pytest.raises(ConfigError, match="RATE_LIMIT_MAX_REQUESTS"):
        load_settings()


def test_non_positive_integer(monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_WINDOW_MS", "0")
    with pytest.raises(ConfigError, match="must be positive"):
        load_settings()
