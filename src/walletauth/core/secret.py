"""Process-wide server secret.

Built once by the application factory and shared read-only by the
nonce deriver and the credential issuer/validator.  The secret value
never appears in ``repr()``, logs, or error messages.

With ``key_separation`` enabled, the two roles use independent
subkeys derived as ``HMAC-SHA256(root, label)``; otherwise both use
the root secret directly, which keeps nonces and credentials
compatible with deployments that predate the option.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from dataclasses import dataclass, field

log = logging.getLogger(__name__)

DEFAULT_SECRET = "SolportSalt"

_NONCE_LABEL = b"walletauth/nonce/v1"
_CREDENTIAL_LABEL = b"walletauth/credential/v1"


@dataclass(frozen=True)
class ServerSecret:
    """Immutable holder for the root secret and its derived keys."""

    root: str = field(repr=False)
    key_separation: bool = False

    @classmethod
    def from_settings(cls, secret: str | None, *, key_separation: bool = False) -> ServerSecret:
        """Build from configuration, falling back to :data:`DEFAULT_SECRET`."""
        if not secret:
            log.warning(
                "No auth secret was configured; the built-in default will be "
                "used, which is insecure outside development",
            )
            secret = DEFAULT_SECRET
        return cls(root=secret, key_separation=key_separation)

    @property
    def is_default(self) -> bool:
        return hmac.compare_digest(self.root, DEFAULT_SECRET)

    @property
    def nonce_key(self) -> bytes:
        """Key material salted into every nonce."""
        return self._derive(_NONCE_LABEL)

    @property
    def credential_key(self) -> bytes:
        """HMAC key used to sign and validate credentials."""
        return self._derive(_CREDENTIAL_LABEL)

    def _derive(self, label: bytes) -> bytes:
        root = self.root.encode("utf-8")
        if not self.key_separation:
            return root
        return hmac.new(root, label, hashlib.sha256).digest()
