"""Configuration subsystem for walletauth.

Public API::

    from walletauth.config import get_config, WalletAuthConfig

    # At startup (CLI / WSGI only):
    WalletAuthConfig(config_file="config.yaml")

    # Everywhere else:
    cfg  = get_config()
    port = cfg.settings.server.port       # typed access
    lvl  = cfg.get("logging.level")       # dynamic dot-path
"""

from walletauth.config.settings import (
    ApiSettings,
    AuthSettings,
    LoggingSettings,
    ProxySettings,
    ServerSettings,
    UserDirectorySettings,
    UserRecordSettings,
    WalletAuthSettings,
    build_settings,
)
from walletauth.config.walletauth_config import (
    ConfigValidationError,
    WalletAuthConfig,
    get_config,
)

__all__ = [
    "ApiSettings",
    "AuthSettings",
    "ConfigValidationError",
    "LoggingSettings",
    "ProxySettings",
    "ServerSettings",
    "UserDirectorySettings",
    "UserRecordSettings",
    "WalletAuthConfig",
    "WalletAuthSettings",
    "build_settings",
    "get_config",
]
