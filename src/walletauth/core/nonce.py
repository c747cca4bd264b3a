"""Deterministic challenge nonces.

The nonce for an identity is::

    base64( SHA256( identity_base58 || SHA256(secret) ) )

where the inner digest is fed as raw bytes.  Nothing is stored: the
verifier recomputes the same value when the signed nonce comes back,
so equal inputs must always produce byte-identical output.
"""

from __future__ import annotations

import base64
import hashlib
import logging
from typing import TYPE_CHECKING

from walletauth.core.identity import parse_identity

if TYPE_CHECKING:
    from walletauth.core.secret import ServerSecret
    from walletauth.core.types import Identity

log = logging.getLogger(__name__)


class NonceDeriver:
    """Derives the challenge nonce for a wallet identity."""

    def __init__(self, secret: ServerSecret) -> None:
        # Only the hashed secret is kept; it is the sole input that
        # depends on the secret.
        self._secret_digest = hashlib.sha256(secret.nonce_key).digest()

    def derive(self, identity: Identity | str) -> str:
        """Return the nonce text for *identity*.

        Raises :class:`~walletauth.app.errors.InvalidIdentity` if
        *identity* is not a valid public key encoding.
        """
        ident = parse_identity(identity)
        digest = hashlib.sha256()
        digest.update(ident.encoded.encode("utf-8"))
        digest.update(self._secret_digest)
        nonce = base64.b64encode(digest.digest()).decode("ascii")
        log.debug("Nonce for '%s' is '%s'", ident.encoded, nonce)
        return nonce
