"""Wallet handshake endpoints.

``GET  /challenge/<public_key>``
    Returns the nonce the wallet must sign.
``GET  /get?state=<url-encoded json>``
    Exchanges ``{"public_key", "signature"}`` for a bearer credential.
``GET  /whoami``
    Strict-guarded: the bound identity and its profile, if any.
``GET  /session``
    Permissive-guarded: whether the caller is authenticated.

Successful responses are ``{"response": ...}`` JSON; failures are
plain text, as rendered by :mod:`walletauth.app.errors`.
"""

from __future__ import annotations

import logging

from flask import Blueprint, g, jsonify, request

from walletauth.api.guards import optional_wallet, require_wallet
from walletauth.app.context import get_container
from walletauth.app.errors import InvalidIdentity, VerificationFailed
from walletauth.core.identity import HandshakeState, decode_signature, parse_identity
from walletauth.logging import security_events

log = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/challenge/", defaults={"public_key": ""}, methods=["GET"])
@auth_bp.route("/challenge/<public_key>", methods=["GET"])
def challenge(public_key: str):
    """Return the deterministic nonce for *public_key*."""
    if not public_key:
        raise InvalidIdentity("Expected public key, but none was provided")

    identity = parse_identity(public_key)
    nonce = get_container().nonce_deriver.derive(identity)
    security_events.challenge_issued(identity.encoded, nonce)
    return jsonify({"response": nonce})


@auth_bp.route("/get", methods=["GET"])
def get_credential():
    """Verify a signed nonce and issue a credential for its wallet."""
    container = get_container()

    state = HandshakeState.parse(request.args.get("state"))
    identity = parse_identity(state.public_key)
    signature = decode_signature(state.signature)

    if not container.signature_verifier.verify(identity, signature):
        security_events.signature_rejected(
            identity.encoded,
            request.remote_addr or "-",
        )
        raise VerificationFailed

    credential = container.credential_issuer.issue(identity)
    return jsonify({"response": credential.token})


@auth_bp.route("/whoami", methods=["GET"])
@require_wallet
def whoami():
    """Return the authenticated wallet and its profile record."""
    user = get_container().user_directory.find_by_public_key(g.wallet)
    return jsonify(
        {
            "response": g.wallet,
            "expires_at": g.credential.expires_at.isoformat(),
            "user": user.to_dict() if user is not None else None,
        },
    )


@auth_bp.route("/session", methods=["GET"])
@optional_wallet
def session():
    """Report whether the caller presented a valid credential."""
    return jsonify(
        {
            "authenticated": g.wallet is not None,
            "wallet": g.wallet,
        },
    )
