"""Bearer credential issuance and validation.

Credentials are itsdangerous ``URLSafeTimedSerializer`` tokens of the
form ``payload.timestamp.signature``, HMAC-SHA256 signed with the
credential key.  The payload is self-describing::

    {"public_key": "<base58>", "iat": <unix>, "exp": <unix>}

Anyone holding the secret can check authenticity and expiry without
any server-side state; there is no revocation list, so expiry is the
only way a credential stops being accepted.
"""

from __future__ import annotations

import hashlib
import logging
import time
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from itsdangerous import (
    BadData,
    BadSignature,
    SignatureExpired,
    TimestampSigner,
    URLSafeTimedSerializer,
)

from walletauth.app.errors import ExpiredCredential, IssuanceError, MalformedCredential
from walletauth.core.identity import is_valid_identity, parse_identity
from walletauth.core.types import CREDENTIAL_LIFETIME, Credential, CredentialClaims
from walletauth.logging import security_events

if TYPE_CHECKING:
    from collections.abc import Callable

    from walletauth.core.secret import ServerSecret
    from walletauth.core.types import Identity

log = logging.getLogger(__name__)

_SALT = "walletauth.credential"


class _ClockedSigner(TimestampSigner):
    """Timestamp signer that reads the time from an injected clock."""

    def __init__(self, *args: Any, clock: Callable[[], float] = time.time, **kwargs: Any) -> None:  # noqa: ANN401
        super().__init__(*args, **kwargs)
        self._clock = clock

    def get_timestamp(self) -> int:
        return int(self._clock())


def _make_serializer(
    secret: ServerSecret,
    clock: Callable[[], float],
) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(
        secret.credential_key,
        salt=_SALT,
        signer=_ClockedSigner,
        signer_kwargs={"clock": clock, "digest_method": hashlib.sha256},
    )


def _to_datetime(ts: int) -> datetime:
    return datetime.fromtimestamp(ts, tz=UTC)


# ---------------------------------------------------------------------------
# Issuer
# ---------------------------------------------------------------------------


class CredentialIssuer:
    """Mints credentials for identities that passed signature verification.

    Parameters
    ----------
    secret:
        The process-wide :class:`ServerSecret`.
    lifetime:
        Credential lifetime.  Production code always uses
        :data:`CREDENTIAL_LIFETIME`.
    clock:
        Returns the current UNIX time; ``time.time`` by default.

    """

    def __init__(
        self,
        secret: ServerSecret,
        *,
        lifetime: timedelta = CREDENTIAL_LIFETIME,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._secret = secret
        self._lifetime = int(lifetime.total_seconds())
        self._clock = clock

    def issue(self, identity: Identity | str) -> Credential:
        """Return a signed credential bound to *identity*.

        Raises :class:`IssuanceError` if signing fails, which only
        happens when the secret is misconfigured.
        """
        ident = parse_identity(identity)
        issued_at = int(self._clock())
        expires_at = issued_at + self._lifetime
        try:
            key = self._secret.credential_key
            if not key:
                msg = "credential key is empty"
                raise ValueError(msg)
            token = _make_serializer(self._secret, lambda: issued_at).dumps(
                {"public_key": ident.encoded, "iat": issued_at, "exp": expires_at},
            )
        except (TypeError, ValueError) as exc:
            log.critical("Credential signing failed: %s", exc)
            raise IssuanceError from None

        security_events.credential_issued(ident.encoded, _to_datetime(expires_at))
        return Credential(
            public_key=ident.encoded,
            issued_at=_to_datetime(issued_at),
            expires_at=_to_datetime(expires_at),
            token=token,
        )


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------


class CredentialValidator:
    """Checks the signature and expiry of presented credentials."""

    def __init__(
        self,
        secret: ServerSecret,
        *,
        lifetime: timedelta = CREDENTIAL_LIFETIME,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._lifetime = int(lifetime.total_seconds())
        self._clock = clock
        self._serializer = _make_serializer(secret, clock)

    def validate(self, token: str) -> CredentialClaims:
        """Return the claims of a valid *token*.

        Raises
        ------
        ExpiredCredential
            The signature is intact but the credential is past its
            expiry (or carries a timestamp from the future).
        MalformedCredential
            The token is structurally broken, the signature does not
            match, or the payload lacks the expected claims.

        """
        try:
            payload, _signed_at = self._serializer.loads(
                token,
                max_age=self._lifetime,
                return_timestamp=True,
            )
        except SignatureExpired as exc:
            raise ExpiredCredential(
                "signature timestamp outside credential lifetime",
                public_key=self._claimed_key(exc.payload),
            ) from None
        except BadSignature:
            raise MalformedCredential("bad signature") from None
        except BadData:
            raise MalformedCredential("undecodable payload") from None

        claims = self._parse_claims(payload)
        if self._clock() > claims.expires_at.timestamp():
            raise ExpiredCredential("past expiry", public_key=claims.public_key)
        return claims

    @staticmethod
    def _parse_claims(payload: Any) -> CredentialClaims:  # noqa: ANN401
        if not isinstance(payload, dict):
            raise MalformedCredential("payload is not an object")
        public_key = payload.get("public_key")
        iat = payload.get("iat")
        exp = payload.get("exp")
        if not is_valid_identity(public_key):
            raise MalformedCredential("payload has no valid public_key")
        if not isinstance(iat, int) or not isinstance(exp, int) or exp < iat:
            raise MalformedCredential("payload has invalid iat/exp", public_key=public_key)
        return CredentialClaims(
            public_key=public_key,
            issued_at=_to_datetime(iat),
            expires_at=_to_datetime(exp),
        )

    def _claimed_key(self, raw_payload: Any) -> str | None:  # noqa: ANN401
        """Best-effort read of the identity claim from an expired token."""
        if raw_payload is None:
            return None
        try:
            payload = self._serializer.load_payload(raw_payload)
        except BadData:
            return None
        if isinstance(payload, dict) and is_valid_identity(payload.get("public_key")):
            return payload["public_key"]
        return None
