"""Value types shared by the handshake and the credential guard.

All of these are immutable.  Enums inherit from ``StrEnum`` so their
``.value`` serialises directly into JSON responses and log records.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum

CREDENTIAL_LIFETIME = timedelta(hours=24)
"""Fixed lifetime of an issued credential.  Not configurable."""


# ---------------------------------------------------------------------------
# Guard
# ---------------------------------------------------------------------------


class GuardMode(StrEnum):
    STRICT = "strict"
    PERMISSIVE = "permissive"


class GuardOutcome(StrEnum):
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"
    REJECTED = "rejected"


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Identity:
    """A wallet public key.

    ``encoded`` is the canonical base58 text form and ``raw`` the
    32 decoded key bytes.  Build instances with
    :func:`walletauth.core.identity.parse_identity`.
    """

    encoded: str
    raw: bytes

    def __str__(self) -> str:
        return self.encoded


# ---------------------------------------------------------------------------
# Credential
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CredentialClaims:
    """The facts a validated credential asserts."""

    public_key: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class Credential:
    """A freshly issued bearer credential and its wire form."""

    public_key: str
    issued_at: datetime
    expires_at: datetime
    token: str

    @property
    def claims(self) -> CredentialClaims:
        return CredentialClaims(
            public_key=self.public_key,
            issued_at=self.issued_at,
            expires_at=self.expires_at,
        )


@dataclass(frozen=True)
class GuardResult:
    """Terminal state of one pass through the credential guard."""

    outcome: GuardOutcome
    claims: CredentialClaims | None = None
    reason: str | None = None

    @property
    def wallet(self) -> str | None:
        return self.claims.public_key if self.claims is not None else None
