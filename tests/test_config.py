from __future__ import annotations

import pytest

from warranty_client_sdk.config import ConfigError, load_config

_KEYS = (
    "WARRANTY_ENV",
    "WARRANTY_GRAPHQL_URL",
    "WARRANTY_GRAPHQL_URL_DEV",
    "WARRANTY_GRAPHQL_URL_STAGING",
    "WARRANTY_UPLOAD_URL",
    "WARRANTY_TIMEOUT_SECONDS",
    "WARRANTY_CONNECT_TIMEOUT_SECONDS",
    "WARRANTY_READ_TIMEOUT_SECONDS",
    "WARRANTY_MAX_CONNECTIONS",
    "WARRANTY_VERIFY_SSL",
    "WARRANTY_CACHE_TTL_SECONDS",
    "WARRANTY_DEFAULT_PAGE_SIZE",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _KEYS:
        monkeypatch.delenv(key, raising=False)


def test_load_config_requires_graphql_url() -> None:
    with pytest.raises(ConfigError, match="WARRANTY_GRAPHQL_URL"):
        load_config()


def test_load_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WARRANTY_GRAPHQL_URL", "https://api.example.com/graphql")
    cfg = load_config()
    assert cfg.env_name == "dev"
    assert cfg.upload_url is None
    assert cfg.default_page_size == 10
    assert cfg.max_connections == 10
    assert cfg.verify_ssl is True
    assert cfg.connect_timeout_seconds == 5.0
    assert cfg.read_timeout_seconds == 10.0


def test_load_config_profile(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WARRANTY_ENV", "Staging")
    monkeypatch.setenv("WARRANTY_GRAPHQL_URL", "https://fallback.example.com/graphql")
    monkeypatch.setenv("WARRANTY_GRAPHQL_URL_STAGING", "https://staging.example.com/graphql")
    cfg = load_config()
    assert cfg.graphql_url == "https://staging.example.com/graphql"
    assert cfg.normalized_env == "staging"


def test_load_config_verify_ssl_toggle(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WARRANTY_GRAPHQL_URL", "https://api.example.com/graphql")
    monkeypatch.setenv("WARRANTY_VERIFY_SSL", "off")
    assert load_config().verify_ssl is False


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("WARRANTY_TIMEOUT_SECONDS", "0"),
        ("WARRANTY_CONNECT_TIMEOUT_SECONDS", "0"),
        ("WARRANTY_READ_TIMEOUT_SECONDS", "-1"),
        ("WARRANTY_MAX_CONNECTIONS", "0"),
        ("WARRANTY_CACHE_TTL_SECONDS", "-0.5"),
        ("WARRANTY_DEFAULT_PAGE_SIZE", "0"),
    ],
)
def test_load_config_rejects_invalid_ranges(monkeypatch: pytest.MonkeyPatch, key: str, value: str) -> None:
    monkeypatch.setenv("WARRANTY_GRAPHQL_URL", "https://api.example.com/graphql")
    monkeypatch.setenv(key, value)

    with pytest.raises(ConfigError, match=key):
        load_config()


@pytest.mark.parametrize(
    "key",
    [
        "WARRANTY_TIMEOUT_SECONDS",
        "WARRANTY_MAX_CONNECTIONS",
        "WARRANTY_DEFAULT_PAGE_SIZE",
    ],
)
def test_load_config_rejects_invalid_types(monkeypatch: pytest.MonkeyPatch, key: str) -> None:
    monkeypatch.setenv("WARRANTY_GRAPHQL_URL", "https://api.example.com/graphql")
    monkeypatch.setenv(key, "abc")

    with pytest.raises(ConfigError, match=key):
        load_config()
