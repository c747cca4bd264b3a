"""Nonce subcommand: print the challenge a wallet is expected to sign.

Usage::

    walletauth -c config.yaml nonce <public_key>

Handy for checking client-side signing against the configured secret.
"""

from __future__ import annotations

import sys

from walletauth.app.errors import InvalidIdentity


def run_nonce(config, args) -> None:
    """Derive and print the nonce for ``args.public_key``."""
    from walletauth.core import NonceDeriver, ServerSecret  # noqa: PLC0415

    auth = config.settings.auth
    secret = ServerSecret.from_settings(auth.secret, key_separation=auth.key_separation)

    try:
        nonce = NonceDeriver(secret).derive(args.public_key)
    except InvalidIdentity as exc:
        print(exc.detail, file=sys.stderr)  # noqa: T201
        sys.exit(1)

    print(nonce)  # noqa: T201
