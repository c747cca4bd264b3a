"""Inspect-token subcommand: validate a credential and dump its claims.

Usage::

    walletauth -c config.yaml inspect-token <token>

Prints the claims as JSON and exits 0 when the credential is valid;
prints the rejection category and exits 1 otherwise.
"""

from __future__ import annotations

import json
import sys

from walletauth.app.errors import CredentialRejected


def run_inspect_token(config, args) -> None:
    """Validate ``args.token`` against the configured secret."""
    from walletauth.core import CredentialValidator, ServerSecret  # noqa: PLC0415
    from walletauth.core.guard import extract_token  # noqa: PLC0415

    auth = config.settings.auth
    secret = ServerSecret.from_settings(auth.secret, key_separation=auth.key_separation)

    token = extract_token(args.token)
    if token is None:
        print("rejected: missing", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    try:
        claims = CredentialValidator(secret).validate(token)
    except CredentialRejected as exc:
        print(f"rejected: {exc.reason} ({exc.explanation})", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    result = {
        "public_key": claims.public_key,
        "issued_at": claims.issued_at.isoformat(),
        "expires_at": claims.expires_at.isoformat(),
    }
    print(json.dumps(result, indent=2))  # noqa: T201
