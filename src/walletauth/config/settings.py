"""Typed, frozen dataclasses for every configuration section.

This module is the **single source of truth** for default values.
JSON Schema defaults exist only for documentation; these builders
are what the application actually reads.

Access pattern::

    from walletauth.config import get_config

    auth = get_config().settings.auth
    print(auth.key_separation)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ServerSettings:
    """HTTP server configuration (bind address, workers, timeouts)."""

    bind: str
    port: int
    workers: int
    worker_class: str
    timeout: int
    graceful_timeout: int
    keepalive: int
    cors_origins: tuple[str, ...]


def _build_server(data: dict | None) -> ServerSettings:
    d = data or {}
    return ServerSettings(
        bind=d.get("bind", "0.0.0.0"),  # noqa: S104
        port=d.get("port", 8080),
        workers=d.get("workers", 4),
        worker_class=d.get("worker_class", "sync"),
        timeout=d.get("timeout", 30),
        graceful_timeout=d.get("graceful_timeout", 30),
        keepalive=d.get("keepalive", 2),
        cors_origins=tuple(d.get("cors_origins", ["*"])),
    )


# ---------------------------------------------------------------------------
# Proxy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProxySettings:
    """Reverse proxy configuration: how many hops of forwarded headers to trust."""

    enabled: bool
    x_for: int
    x_proto: int
    x_prefix: int


def _build_proxy(data: dict | None) -> ProxySettings:
    d = data or {}
    return ProxySettings(
        enabled=d.get("enabled", False),
        x_for=d.get("x_for", 1),
        x_proto=d.get("x_proto", 1),
        x_prefix=d.get("x_prefix", 0),
    )


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ApiSettings:
    """Where the handshake endpoints are mounted."""

    base_path: str


def _build_api(data: dict | None) -> ApiSettings:
    d = data or {}
    return ApiSettings(base_path=d.get("base_path", "/jwt"))


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AuthSettings:
    """Handshake secret.  The credential lifetime is fixed and not here."""

    secret: str = field(repr=False)
    key_separation: bool


def _build_auth(data: dict | None) -> AuthSettings:
    d = data or {}
    return AuthSettings(
        secret=d.get("secret", ""),
        key_separation=d.get("key_separation", False),
    )


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UserRecordSettings:
    public_key: str
    name: str
    bio: str


@dataclass(frozen=True)
class UserDirectorySettings:
    """Seed records for the in-memory user directory."""

    records: tuple[UserRecordSettings, ...]


def _build_users(data: dict | None) -> UserDirectorySettings:
    d = data or {}
    return UserDirectorySettings(
        records=tuple(
            UserRecordSettings(
                public_key=r["public_key"],
                name=r.get("name") or r["public_key"],
                bio=r.get("bio", "Hello, welcome to my profile!"),
            )
            for r in d.get("records", [])
        ),
    )


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoggingSettings:
    """Application logging configuration (level, format)."""

    level: str
    format: str
    access_log: bool
    security_level: str


def _build_logging(data: dict | None) -> LoggingSettings:
    d = data or {}
    return LoggingSettings(
        level=d.get("level", "INFO"),
        format=d.get("format", "json"),
        access_log=d.get("access_log", True),
        security_level=d.get("security_level", "INFO"),
    )


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WalletAuthSettings:
    """Root of the typed settings tree."""

    server: ServerSettings
    proxy: ProxySettings
    api: ApiSettings
    auth: AuthSettings
    users: UserDirectorySettings
    logging: LoggingSettings


def build_settings(data: dict[str, Any]) -> WalletAuthSettings:
    """Build the full typed settings tree from raw config data.

    Called once during :class:`WalletAuthConfig` initialization after
    schema validation and environment-variable resolution.
    """
    return WalletAuthSettings(
        server=_build_server(data.get("server")),
        proxy=_build_proxy(data.get("proxy")),
        api=_build_api(data.get("api")),
        auth=_build_auth(data.get("auth")),
        users=_build_users(data.get("users")),
        logging=_build_logging(data.get("logging")),
    )
