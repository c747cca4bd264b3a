"""WSGI entry point for external servers (gunicorn, uWSGI, etc.).

The config file path is read from the ``WALLETAUTH_CONFIG`` environment
variable.

Example::

    export WALLETAUTH_CONFIG=/etc/walletauth/config.yaml
    gunicorn "walletauth.server.wsgi:app"
"""

from __future__ import annotations

import os
import sys

_config_path = os.environ.get("WALLETAUTH_CONFIG")
if _config_path is None:
    print("walletauth: WALLETAUTH_CONFIG is not set", file=sys.stderr)  # noqa: T201
    sys.exit(1)

# Bootstrap the singleton before anything else imports it.
from walletauth.config import WalletAuthConfig  # noqa: E402

_config = WalletAuthConfig(config_file=_config_path)

from walletauth.logging import configure_logging  # noqa: E402

configure_logging(_config.settings.logging)

from walletauth.app import create_app  # noqa: E402

app = create_app(config=_config)
