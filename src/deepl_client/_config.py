"""Normalize translator configuration.

'why': validate constructor input once and hand immutable settings to the transport
"""
from __future__ import annotations

import os
import platform
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from urllib.parse import urlsplit
from typing import Final

from dotenv import dotenv_values

from ._errors import ConfigurationError
from ._logging import set_log_level
from ._models import AppInfo, LogLevel, Settings, TransportConfig


CLIENT_VERSION: Final[str] = "0.1.0"
DEFAULT_TIMEOUT: Final[float] = 5.0
DEFAULT_MAX_RETRIES: Final[int] = 5
DEFAULT_RETRY_BACKOFF: Final[float] = 1.0
FREE_SERVER_URL: Final[str] = "https://api-free.deepl.com/v2"
PRO_SERVER_URL: Final[str] = "https://api.deepl.com/v2"
AUTH_KEY_ENV: Final[str] = "DEEPL_AUTH_KEY"
SERVER_URL_ENV: Final[str] = "DEEPL_SERVER_URL"

_FREE_KEY_SUFFIX: Final[str] = ":fx"
_RESERVED_HEADERS: Final[frozenset[str]] = frozenset({"authorization", "user-agent"})


def is_free_account_auth_key(auth_key: str) -> bool:
    """Return True when the key belongs to a free-tier account."""

    return auth_key.endswith(_FREE_KEY_SUFFIX)


def build_settings(
    auth_key: str,
    *,
    server_url: str | None = None,
    headers: Mapping[str, str] | None = None,
    send_platform_info: bool = True,
    app_info: AppInfo | None = None,
    timeout: float | None = None,
    max_retries: int | None = None,
    log_level: LogLevel | str | None = None,
    max_poll_interval: float | None = None,
    retry_backoff: float | None = None,
) -> Settings:
    """Validate translator arguments and return frozen settings.

    'why': keep defaults explicit per translator instead of process-wide state

    The package logger is shared, so `log_level` is applied to it only when given.
    """

    key = (auth_key or "").strip()
    if not key:
        raise ConfigurationError("auth_key must be a non-empty string")

    level = _normalized_level(log_level)
    settings = Settings(
        auth_key=key,
        server_url=_resolved_server_url(key, server_url),
        timeout=_coerced_timeout(timeout),
        max_retries=_coerced_retries(max_retries),
        log_level=level,
        user_agent=build_user_agent(send_platform_info, app_info),
        extra_headers=_normalized_headers(headers),
        max_poll_interval=_validated_poll_interval(max_poll_interval),
        retry_backoff=_validated_backoff(retry_backoff),
    )
    if log_level is not None:
        set_log_level(level)
    return settings


def transport_config(settings: Settings) -> TransportConfig:
    """Derive the transport configuration from validated settings."""

    merged: dict[str, str] = dict(settings.extra_headers)
    merged["Authorization"] = f"DeepL-Auth-Key {settings.auth_key}"
    merged["User-Agent"] = settings.user_agent
    return TransportConfig(
        base_url=settings.server_url,
        headers=MappingProxyType(merged),
        timeout=settings.timeout,
        max_retries=settings.max_retries,
        retry_backoff=settings.retry_backoff,
    )


def build_user_agent(send_platform_info: bool, app_info: AppInfo | None) -> str:
    """Compose the User-Agent header value."""

    agent = f"deepl-client-python/{CLIENT_VERSION}"
    if send_platform_info:
        agent += f" {platform.platform()} python/{platform.python_version()}"
    if app_info is not None:
        agent += f" {app_info.name}/{app_info.version}"
    return agent


def load_env(env_path: Path | None = None) -> dict[str, str]:
    """Return DeepL settings from a `.env` file, falling back to the process environment."""

    path = env_path if env_path is not None else Path.cwd() / ".env"
    values = dotenv_values(path) if path.exists() else {}
    loaded: dict[str, str] = {}
    for key in (AUTH_KEY_ENV, SERVER_URL_ENV):
        value = _env_value(values.get(key)) or _env_value(os.environ.get(key))
        if value is not None:
            loaded[key] = value
    return loaded


def _env_value(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value.strip()


def _normalized_level(level: LogLevel | str | None) -> LogLevel:
    if level is None:
        return LogLevel.INFO
    if isinstance(level, LogLevel):
        return level
    try:
        return LogLevel(level.upper())
    except ValueError as exc:
        raise ConfigurationError(f"unsupported log_level: {level}") from exc


def _coerced_timeout(timeout: float | None) -> float:
    if timeout is None or timeout <= 0:
        return DEFAULT_TIMEOUT
    return float(timeout)


def _coerced_retries(retries: int | None) -> int:
    if retries is None or retries <= 0:
        return DEFAULT_MAX_RETRIES
    return int(retries)


def _validated_poll_interval(value: float | None) -> float | None:
    if value is None:
        return None
    if value <= 0:
        raise ConfigurationError("max_poll_interval must be positive when provided")
    return float(value)


def _validated_backoff(value: float | None) -> float:
    if value is None:
        return DEFAULT_RETRY_BACKOFF
    if value < 0:
        raise ConfigurationError("retry_backoff must not be negative")
    return float(value)


def _resolved_server_url(auth_key: str, server_url: str | None) -> str:
    candidate = (server_url or "").strip().rstrip("/")
    if candidate:
        parts = urlsplit(candidate)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ConfigurationError(f"server_url must be an absolute http(s) URL: {candidate!r}")
        return candidate
    return FREE_SERVER_URL if is_free_account_auth_key(auth_key) else PRO_SERVER_URL


def _normalized_headers(headers: Mapping[str, str] | None) -> Mapping[str, str]:
    # Authorization and User-Agent are always set by the client itself.
    cleaned = {
        name: value
        for name, value in (headers or {}).items()
        if name.lower() not in _RESERVED_HEADERS
    }
    return MappingProxyType(cleaned)
