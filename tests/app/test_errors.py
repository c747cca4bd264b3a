"""Unit tests for walletauth.app.errors: plain-text error responses."""

from __future__ import annotations

import flask
import pytest
from flask import abort

from walletauth.app.errors import (
    PLAIN_CONTENT_TYPE,
    CredentialRejected,
    ExpiredCredential,
    InvalidIdentity,
    InvalidState,
    IssuanceError,
    MalformedCredential,
    MissingCredential,
    VerificationFailed,
    WalletAuthError,
    register_error_handlers,
)

# ---------------------------------------------------------------------------
# TestWalletAuthError
# ---------------------------------------------------------------------------


class TestWalletAuthError:
    @pytest.mark.parametrize(
        ("cls", "status", "body"),
        [
            (InvalidIdentity, 400, "An invalid public key was provided"),
            (InvalidState, 400, "An invalid state object was provided"),
            (VerificationFailed, 400, "An invalid signature was provided"),
            (IssuanceError, 500, "Something went wrong while issuing the credential"),
            (MissingCredential, 401, "Unauthorized"),
            (MalformedCredential, 401, "Unauthorized"),
            (ExpiredCredential, 401, "Unauthorized"),
        ],
    )
    def test_defaults(self, cls, status, body):
        exc = cls()
        assert exc.status == status
        assert exc.detail == body
        assert str(exc) == body

    def test_custom_detail(self):
        exc = InvalidState("Expected state object, but none was provided")
        assert exc.detail == "Expected state object, but none was provided"

    def test_to_response(self):
        with flask.Flask("t").app_context():
            resp = InvalidIdentity().to_response()
        assert resp.status_code == 400
        assert resp.content_type == PLAIN_CONTENT_TYPE
        assert resp.get_data(as_text=True) == "An invalid public key was provided"
        assert resp.headers["Cache-Control"] == "no-store"

    def test_extra_headers(self):
        with flask.Flask("t").app_context():
            resp = WalletAuthError("slow", 429, headers={"Retry-After": "5"}).to_response()
        assert resp.headers["Retry-After"] == "5"


class TestCredentialRejected:
    def test_body_never_carries_explanation(self):
        exc = ExpiredCredential("past expiry", public_key="abc")
        assert exc.detail == "Unauthorized"
        assert exc.explanation == "past expiry"
        assert exc.public_key == "abc"
        assert exc.reason == "expired"

    def test_explanation_defaults_to_reason(self):
        assert MalformedCredential().explanation == "malformed"

    def test_www_authenticate(self):
        with flask.Flask("t").app_context():
            resp = MissingCredential().to_response()
        assert resp.status_code == 401
        assert resp.headers["WWW-Authenticate"] == "Bearer"

    def test_hierarchy(self):
        for cls in (MissingCredential, MalformedCredential, ExpiredCredential):
            assert issubclass(cls, CredentialRejected)
            assert issubclass(cls, WalletAuthError)


# ---------------------------------------------------------------------------
# register_error_handlers
# ---------------------------------------------------------------------------


@pytest.fixture()
def error_app():
    app = flask.Flask("test_errors")
    register_error_handlers(app)

    @app.route("/identity")
    def identity():
        raise InvalidIdentity

    @app.route("/missing")
    def missing():
        abort(404)

    @app.route("/boom")
    def boom():
        msg = "kaboom"
        raise RuntimeError(msg)

    @app.route("/issuance")
    def issuance():
        raise IssuanceError

    return app


class TestRegisterErrorHandlers:
    def test_wallet_auth_error(self, error_app):
        resp = error_app.test_client().get("/identity")
        assert resp.status_code == 400
        assert resp.get_data(as_text=True) == "An invalid public key was provided"

    def test_http_exception(self, error_app):
        resp = error_app.test_client().get("/missing")
        assert resp.status_code == 404
        assert resp.content_type == PLAIN_CONTENT_TYPE

    def test_unrouted_path(self, error_app):
        resp = error_app.test_client().get("/no/such/path")
        assert resp.status_code == 404
        assert resp.content_type == PLAIN_CONTENT_TYPE

    def test_unhandled_exception(self, error_app, caplog):
        resp = error_app.test_client().get("/boom")
        assert resp.status_code == 500
        assert resp.get_data(as_text=True) == "An unexpected internal error occurred"
        assert "kaboom" not in resp.get_data(as_text=True)
        assert any(r.exc_info for r in caplog.records if r.name == "walletauth.app.errors")

    def test_issuance_error_logged(self, error_app, caplog):
        resp = error_app.test_client().get("/issuance")
        assert resp.status_code == 500
        assert any(r.levelname == "ERROR" for r in caplog.records)
