"""Framework-free credential guard.

Runs the per-request state machine::

    NoToken      -> Rejected (strict) | Anonymous (permissive)
    TokenPresent -> Validating -> Authenticated
                                | Rejected (strict)
                                | Anonymous (permissive)

The Flask decorators in :mod:`walletauth.api.guards` feed it the raw
``Authorization`` header and act on the returned :class:`GuardResult`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from walletauth.app.errors import CredentialRejected, MissingCredential
from walletauth.core.types import GuardMode, GuardOutcome, GuardResult
from walletauth.logging import security_events

if TYPE_CHECKING:
    from walletauth.core.credential import CredentialValidator

log = logging.getLogger(__name__)

_BEARER_SCHEME = "bearer"


def extract_token(header_value: str | None) -> str | None:
    """Pull the credential out of an ``Authorization`` header value.

    Both ``Bearer <token>`` and a bare token are accepted.  Returns
    None when the header is absent or blank.
    """
    if not header_value:
        return None
    value = header_value.strip()
    scheme, _, rest = value.partition(" ")
    if scheme.lower() == _BEARER_SCHEME:
        value = rest.strip()
    return value or None


class CredentialGuard:
    """Validates inbound credentials in strict or permissive mode."""

    def __init__(self, validator: CredentialValidator) -> None:
        self._validator = validator

    def authenticate(self, header_value: str | None, mode: GuardMode) -> GuardResult:
        """Run the guard for one request.

        In strict mode a missing or invalid credential raises a
        :class:`CredentialRejected` subclass (rendered as 401).  In
        permissive mode the same situations return an ``ANONYMOUS``
        result and never raise.
        """
        token = extract_token(header_value)
        if token is None:
            if mode is GuardMode.STRICT:
                raise MissingCredential
            return GuardResult(GuardOutcome.ANONYMOUS, reason=MissingCredential.reason)

        try:
            claims = self._validator.validate(token)
        except CredentialRejected as exc:
            security_events.credential_rejected(
                exc.reason,
                exc.explanation,
                mode=mode.value,
                public_key=exc.public_key,
            )
            if mode is GuardMode.STRICT:
                raise
            return GuardResult(GuardOutcome.ANONYMOUS, reason=exc.reason)

        return GuardResult(GuardOutcome.AUTHENTICATED, claims=claims)
