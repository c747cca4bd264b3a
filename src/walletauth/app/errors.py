"""Error taxonomy for the wallet handshake and credential guard.

Every failure raised while handling a request is a
:class:`WalletAuthError`.  Each subclass carries the HTTP status it
maps to and renders itself as a ``text/plain`` response, which is
the wire contract existing clients parse.

Usage::

    raise InvalidIdentity("An invalid public key was provided")
"""

from __future__ import annotations

import logging

from flask import Flask, Response
from werkzeug.exceptions import HTTPException

log = logging.getLogger(__name__)

PLAIN_CONTENT_TYPE = "text/plain; charset=utf-8"
UNAUTHORIZED_BODY = "Unauthorized"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class WalletAuthError(Exception):
    """Base class for all request-level authentication failures.

    Parameters
    ----------
    detail:
        Human-readable explanation, sent verbatim as the response body.
    status:
        HTTP status code.  Subclasses set a sensible default.
    headers:
        Extra HTTP headers to include on the response.

    """

    default_status = 400
    default_detail = "Bad request"

    def __init__(
        self,
        detail: str | None = None,
        status: int | None = None,
        *,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.detail = detail or self.default_detail
        self.status = status or self.default_status
        self.extra_headers = headers or {}
        super().__init__(self.detail)

    def to_response(self) -> Response:
        """Build a plain-text Flask :class:`~flask.Response`."""
        resp = Response(self.detail, status=self.status, content_type=PLAIN_CONTENT_TYPE)
        resp.headers["Cache-Control"] = "no-store"
        for key, value in self.extra_headers.items():
            resp.headers[key] = value
        return resp


class InvalidIdentity(WalletAuthError):
    """The input cannot be decoded into an Ed25519 public key."""

    default_detail = "An invalid public key was provided"


class InvalidState(WalletAuthError):
    """The handshake ``state`` payload is missing or structurally wrong."""

    default_detail = "An invalid state object was provided"


class VerificationFailed(WalletAuthError):
    """The submitted signature does not match the identity's nonce."""

    default_detail = "An invalid signature was provided"


class CredentialRejected(WalletAuthError):
    """A presented bearer credential was not accepted.

    The response body is always ``Unauthorized``.  :attr:`reason` (a
    short category) and :attr:`explanation` are for diagnostics only,
    as is :attr:`public_key`, the identity the token claimed if it
    could be read.
    """

    default_status = 401
    default_detail = UNAUTHORIZED_BODY
    reason = "rejected"

    def __init__(self, explanation: str | None = None, *, public_key: str | None = None) -> None:
        super().__init__(
            UNAUTHORIZED_BODY,
            headers={"WWW-Authenticate": "Bearer"},
        )
        self.explanation = explanation or self.reason
        self.public_key = public_key


class MissingCredential(CredentialRejected):
    reason = "missing"


class MalformedCredential(CredentialRejected):
    reason = "malformed"


class ExpiredCredential(CredentialRejected):
    reason = "expired"


class IssuanceError(WalletAuthError):
    """Internal signing failure, indicating misconfiguration."""

    default_status = 500
    default_detail = "Something went wrong while issuing the credential"


# ---------------------------------------------------------------------------
# Flask error handler registration
# ---------------------------------------------------------------------------


def register_error_handlers(app: Flask) -> None:
    """Attach handlers that turn every error into a plain-text response."""

    @app.errorhandler(WalletAuthError)
    def _handle_wallet_auth_error(exc: WalletAuthError):
        if exc.status >= 500:
            log.error("Request failed: %s", exc.detail)
        return exc.to_response()

    @app.errorhandler(HTTPException)
    def _handle_http_exception(exc: HTTPException):
        return WalletAuthError(
            exc.description or "An error occurred",
            exc.code or 500,
        ).to_response()

    @app.errorhandler(Exception)
    def _handle_unhandled(exc: Exception):
        log.exception("Unhandled exception during request")
        return WalletAuthError(
            "An unexpected internal error occurred",
            500,
        ).to_response()
