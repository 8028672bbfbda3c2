from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable

from dotenv import load_dotenv


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ClientConfig:
    env_name: str
    graphql_url: str
    upload_url: str | None = None
    connect_timeout_seconds: float = 5.0
    read_timeout_seconds: float = 15.0
    max_connections: int = 10
    verify_ssl: bool = True
    cache_ttl_seconds: float = 30.0
    default_page_size: int = 10

    @property
    def normalized_env(self) -> str:
        return self.env_name.lower().strip()


def _require(values: dict[str, str | None], required: Iterable[str]) -> None:
    missing = [key for key in required if not values.get(key)]
    if missing:
        raise ConfigError(f"Missing required config values: {', '.join(missing)}")


def _coerce_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _read_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name}: expected a number, got {raw!r}") from exc


def _read_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name}: expected an integer, got {raw!r}") from exc


def _validate(condition: bool, message: str) -> None:
    if not condition:
        raise ConfigError(message)


def _profiled(name: str, env_key: str) -> str:
    return (os.getenv(f"{name}_{env_key}") or "").strip() or (os.getenv(name) or "").strip()


def load_config(env_file: str | None = None) -> ClientConfig:
    """Load config from environment with optional .env override.

    URLs can be set per profile (``WARRANTY_GRAPHQL_URL_STAGING``) and fall
    back to the unprofiled variable.
    """
    load_dotenv(env_file)

    env_name = (os.getenv("WARRANTY_ENV") or "dev").strip()
    env_key = env_name.upper()

    graphql_url = _profiled("WARRANTY_GRAPHQL_URL", env_key)
    upload_url = _profiled("WARRANTY_UPLOAD_URL", env_key) or None

    timeout_seconds = _read_float("WARRANTY_TIMEOUT_SECONDS", "10")
    _validate(timeout_seconds > 0, f"Invalid WARRANTY_TIMEOUT_SECONDS: expected > 0, got {timeout_seconds}")

    connect_timeout_seconds = _read_float("WARRANTY_CONNECT_TIMEOUT_SECONDS", str(min(timeout_seconds, 5.0)))
    _validate(
        connect_timeout_seconds > 0,
        f"Invalid WARRANTY_CONNECT_TIMEOUT_SECONDS: expected > 0, got {connect_timeout_seconds}",
    )

    read_timeout_seconds = _read_float(
        "WARRANTY_READ_TIMEOUT_SECONDS",
        str(max(timeout_seconds, connect_timeout_seconds)),
    )
    _validate(
        read_timeout_seconds > 0,
        f"Invalid WARRANTY_READ_TIMEOUT_SECONDS: expected > 0, got {read_timeout_seconds}",
    )

    max_connections = _read_int("WARRANTY_MAX_CONNECTIONS", "10")
    _validate(max_connections >= 1, f"Invalid WARRANTY_MAX_CONNECTIONS: expected >= 1, got {max_connections}")

    cache_ttl_seconds = _read_float("WARRANTY_CACHE_TTL_SECONDS", "30")
    _validate(cache_ttl_seconds >= 0, f"Invalid WARRANTY_CACHE_TTL_SECONDS: expected >= 0, got {cache_ttl_seconds}")

    default_page_size = _read_int("WARRANTY_DEFAULT_PAGE_SIZE", "10")
    _validate(default_page_size >= 1, f"Invalid WARRANTY_DEFAULT_PAGE_SIZE: expected >= 1, got {default_page_size}")

    verify_ssl = _coerce_bool(os.getenv("WARRANTY_VERIFY_SSL"), True)

    _require({"WARRANTY_GRAPHQL_URL": graphql_url}, ["WARRANTY_GRAPHQL_URL"])

    return ClientConfig(
        env_name=env_name,
        graphql_url=graphql_url,
        upload_url=upload_url,
        connect_timeout_seconds=connect_timeout_seconds,
        read_timeout_seconds=read_timeout_seconds,
        max_connections=max_connections,
        verify_ssl=verify_ssl,
        cache_ttl_seconds=cache_ttl_seconds,
        default_page_size=default_page_size,
    )
