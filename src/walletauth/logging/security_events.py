"""Structured security event logger.

Emits standardized authentication events for SIEM integration.
All events are logged to the ``walletauth.security`` logger with a
consistent ``event_id`` field for filtering and alerting.

Extra fields pass through :func:`~walletauth.logging.sanitize.sanitize_for_logs`
so secrets and full credentials never reach the log stream.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from walletauth.logging.sanitize import sanitize_for_logs

if TYPE_CHECKING:
    from datetime import datetime

security_log = logging.getLogger("walletauth.security")


def _emit(
    event_id: str,
    message: str,
    *args: Any,  # noqa: ANN401
    severity: str = "INFO",
    **extra: Any,  # noqa: ANN401
) -> None:
    """Emit a structured security event."""
    data: dict[str, object] = {
        "event_id": event_id,
        "severity": severity,
    }
    data.update(sanitize_for_logs(extra))
    level = getattr(logging, severity.upper(), logging.INFO)
    security_log.log(level, message, *args, extra=data)


def challenge_issued(public_key: str, nonce: str) -> None:
    """Log that a challenge nonce was handed out."""
    _emit(
        "walletauth.security.challenge_issued",
        "Challenge issued for %s",
        public_key,
        public_key=public_key,
        nonce=nonce,
        severity="DEBUG",
    )


def signature_rejected(public_key: str, client_ip: str) -> None:
    """Log a handshake whose signature did not verify."""
    _emit(
        "walletauth.security.signature_rejected",
        "Signature rejected: public_key=%s, ip=%s",
        public_key,
        client_ip,
        public_key=public_key,
        client_ip=client_ip,
        severity="WARNING",
    )


def credential_issued(public_key: str, expires_at: datetime) -> None:
    """Log issuance of a bearer credential."""
    _emit(
        "walletauth.security.credential_issued",
        "Credential issued: public_key=%s, expires_at=%s",
        public_key,
        expires_at.isoformat(),
        public_key=public_key,
        expires_at=expires_at.isoformat(),
    )


def credential_rejected(
    reason: str,
    explanation: str,
    *,
    mode: str,
    public_key: str | None = None,
) -> None:
    """Log a presented credential that failed validation."""
    _emit(
        "walletauth.security.credential_rejected",
        "Credential rejected (%s): %s, claimed=%s",
        reason,
        explanation,
        public_key or "-",
        reason=reason,
        guard_mode=mode,
        public_key=public_key,
        severity="INFO" if mode == "permissive" else "WARNING",
    )
