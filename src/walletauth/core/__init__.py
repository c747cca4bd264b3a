"""Wallet handshake core: nonce derivation, signature verification,
credential issuance and the credential guard.
"""

from walletauth.core.credential import CredentialIssuer, CredentialValidator
from walletauth.core.guard import CredentialGuard
from walletauth.core.nonce import NonceDeriver
from walletauth.core.secret import ServerSecret
from walletauth.core.signature import SignatureVerifier

__all__ = [
    "CredentialGuard",
    "CredentialIssuer",
    "CredentialValidator",
    "NonceDeriver",
    "ServerSecret",
    "SignatureVerifier",
]
