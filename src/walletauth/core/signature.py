"""Ed25519 verification of signed challenge nonces."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from walletauth.core.identity import SIGNATURE_LENGTH, parse_identity

if TYPE_CHECKING:
    from walletauth.core.nonce import NonceDeriver
    from walletauth.core.types import Identity

log = logging.getLogger(__name__)


class SignatureVerifier:
    """Checks that a wallet signed its current nonce.

    The nonce is re-derived on every call rather than looked up, so a
    signature stays valid for as long as the server secret does.
    """

    def __init__(self, deriver: NonceDeriver) -> None:
        self._deriver = deriver

    def verify(self, identity: Identity | str, signature: bytes) -> bool:
        """Return True only if *signature* is valid for *identity*'s nonce.

        Routine failures (wrong length, a key that is not a usable
        curve point, a mismatched signature) return False.  An
        undecodable *identity* raises
        :class:`~walletauth.app.errors.InvalidIdentity`.
        """
        ident = parse_identity(identity)
        nonce = self._deriver.derive(ident)

        if len(signature) != SIGNATURE_LENGTH:
            log.debug(
                "Signature for '%s' has length %d, expected %d",
                ident.encoded,
                len(signature),
                SIGNATURE_LENGTH,
            )
            return False

        try:
            public_key = Ed25519PublicKey.from_public_bytes(ident.raw)
            public_key.verify(signature, nonce.encode("utf-8"))
        except (InvalidSignature, ValueError):
            return False
        return True
