"""Tests for walletauth.logging: formatters, context filter, sanitizing, events."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime

import flask
import pytest

from walletauth.config.settings import LoggingSettings
from walletauth.core.types import GuardOutcome
from walletauth.logging import configure_logging, security_events
from walletauth.logging.sanitize import (
    REDACTED,
    redact_token,
    sanitize_credentials,
    sanitize_for_logs,
)
from walletauth.logging.setup import RequestContextFilter, StructuredFormatter, TextFormatter

TOKEN = "eyJwdWJsaWNfa2V5IjoiYWJjIn0.ZVPMAA.c2lnbmF0dXJlLXNlZ21lbnQtdmFsdWU"


def _record(msg: str = "hello %s", *args, **extra) -> logging.LogRecord:
    record = logging.LogRecord("walletauth.test", logging.INFO, __file__, 1, msg, args or ("x",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    def test_basic_fields(self):
        data = json.loads(StructuredFormatter().format(_record()))
        assert data["level"] == "INFO"
        assert data["logger"] == "walletauth.test"
        assert data["msg"] == "hello x"
        assert "ts" in data
        assert "request" not in data
        assert "auth" not in data

    def test_event_id_promoted(self):
        data = json.loads(
            StructuredFormatter().format(_record(event_id="e1", reason="expired", status=401)),
        )
        assert data["event"] == "e1"
        assert "event_id" not in data
        assert data["reason"] == "expired"
        assert data["status"] == 401

    def test_request_and_auth_grouped(self):
        record = _record(
            request_id="r1",
            method="GET",
            path="/jwt/whoami",
            client_ip=None,
            wallet="WalletKey",
            auth_state=GuardOutcome.AUTHENTICATED,
        )
        data = json.loads(StructuredFormatter().format(record))
        assert data["request"] == {"request_id": "r1", "method": "GET", "path": "/jwt/whoami"}
        assert data["auth"] == {"wallet": "WalletKey", "auth_state": "authenticated"}
        for key in ("request_id", "wallet", "auth_state"):
            assert key not in data

    def test_exception(self):
        try:
            msg = "broken"
            raise ValueError(msg)
        except ValueError:
            record = _record()
            record.exc_info = sys.exc_info()
        data = json.loads(StructuredFormatter().format(record))
        assert "ValueError: broken" in data["exc"]

    def test_non_serialisable_extra(self):
        stamp = datetime(2024, 1, 1, tzinfo=UTC)
        data = json.loads(StructuredFormatter().format(_record(expires=stamp)))
        assert data["expires"].startswith("2024-01-01")


class TestTextFormatter:
    def test_without_context(self):
        line = TextFormatter().format(_record())
        assert "INFO" in line
        assert "[-]" in line
        assert line.endswith("hello x")

    def test_auth_suffix(self):
        record = _record(request_id="r1", auth_state=GuardOutcome.REJECTED)
        line = TextFormatter().format(record)
        assert "[r1]" in line
        assert line.endswith("(auth_state=rejected)")


# ---------------------------------------------------------------------------
# RequestContextFilter
# ---------------------------------------------------------------------------


class TestRequestContextFilter:
    def test_outside_request(self):
        record = _record()
        assert RequestContextFilter().filter(record) is True
        for key in ("request_id", "client_ip", "method", "path", "wallet", "auth_state"):
            assert getattr(record, key) is None

    def test_inside_request(self):
        app = flask.Flask("t")
        with app.test_request_context("/jwt/session", environ_base={"REMOTE_ADDR": "10.0.0.1"}):
            flask.g.request_id = "req-1"
            flask.g.wallet = "WalletKey"
            flask.g.auth_state = GuardOutcome.AUTHENTICATED
            record = _record()
            RequestContextFilter().filter(record)
        assert record.request_id == "req-1"
        assert record.client_ip == "10.0.0.1"
        assert record.method == "GET"
        assert record.path == "/jwt/session"
        assert record.wallet == "WalletKey"
        assert record.auth_state == "authenticated"

    def test_explicit_extra_wins(self):
        app = flask.Flask("t")
        with app.test_request_context("/", environ_base={"REMOTE_ADDR": "10.0.0.1"}):
            record = _record(client_ip="203.0.113.9")
            RequestContextFilter().filter(record)
        assert record.client_ip == "203.0.113.9"


# ---------------------------------------------------------------------------
# configure_logging
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    @pytest.mark.parametrize(("fmt", "cls"), [("json", StructuredFormatter), ("text", TextFormatter)])
    def test_formatter_choice(self, fmt, cls):
        root = configure_logging(LoggingSettings("DEBUG", fmt, True, "INFO"))
        assert root.name == "walletauth"
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, cls)
        assert any(isinstance(f, RequestContextFilter) for f in root.handlers[0].filters)
        assert root.propagate is False

    def test_access_log_disabled(self):
        configure_logging(LoggingSettings("INFO", "json", False, "WARNING"))
        assert logging.getLogger("walletauth.access").level == logging.WARNING
        assert logging.getLogger("walletauth.security").level == logging.WARNING

    def test_reconfigure_replaces_handlers(self):
        settings = LoggingSettings("INFO", "json", True, "INFO")
        configure_logging(settings)
        root = configure_logging(settings)
        assert len(root.handlers) == 1

    def test_end_to_end_json_line(self, capsys):
        configure_logging(LoggingSettings("INFO", "json", True, "INFO"))
        security_events.credential_rejected("expired", "past expiry", mode="strict", public_key="Key1")
        data = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert data["event"] == "walletauth.security.credential_rejected"
        assert data["level"] == "WARNING"
        assert data["reason"] == "expired"
        assert data["public_key"] == "Key1"


# ---------------------------------------------------------------------------
# Sanitizing
# ---------------------------------------------------------------------------


class TestSanitize:
    def test_secret_fields_redacted(self):
        out = sanitize_for_logs({"secret": "hunter2", "Authorization": "Bearer x", "ok": 1})
        assert out == {"secret": REDACTED, "Authorization": REDACTED, "ok": 1}

    def test_token_fields_shortened(self):
        out = sanitize_for_logs({"token": TOKEN})
        assert out["token"].startswith(TOKEN[:12])
        assert out["token"].endswith(REDACTED)
        assert TOKEN not in out["token"]

    def test_short_token_fully_redacted(self):
        assert redact_token("abc") == REDACTED

    def test_credentials_in_text(self):
        text = f"presented {TOKEN} for access"
        cleaned = sanitize_credentials(text)
        assert TOKEN not in cleaned
        assert cleaned.startswith("presented ")

    def test_nested(self):
        out = sanitize_for_logs({"outer": [{"password": "x"}, "plain"]})
        assert out == {"outer": [{"password": REDACTED}, "plain"]}

    def test_public_data_untouched(self):
        data = {"public_key": "9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin", "nonce": "abc="}
        assert sanitize_for_logs(data) == data


# ---------------------------------------------------------------------------
# Security events
# ---------------------------------------------------------------------------


class TestSecurityEvents:
    def test_signature_rejected(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="walletauth.security"):
            security_events.signature_rejected("Key1", "10.0.0.1")
        record = caplog.records[-1]
        assert record.event_id == "walletauth.security.signature_rejected"
        assert record.severity == "WARNING"
        assert record.levelno == logging.WARNING
        assert record.client_ip == "10.0.0.1"

    def test_challenge_issued_is_debug(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="walletauth.security"):
            security_events.challenge_issued("Key1", "nonce=")
        assert caplog.records[-1].levelno == logging.DEBUG
        assert caplog.records[-1].nonce == "nonce="

    def test_credential_issued(self, caplog):
        expires = datetime(2030, 1, 1, tzinfo=UTC)
        with caplog.at_level(logging.INFO, logger="walletauth.security"):
            security_events.credential_issued("Key1", expires)
        assert caplog.records[-1].expires_at == expires.isoformat()

    def test_credential_rejected(self, caplog):
        with caplog.at_level(logging.INFO, logger="walletauth.security"):
            security_events.credential_rejected("expired", "past expiry", mode="strict")
        record = caplog.records[-1]
        assert record.reason == "expired"
        assert record.guard_mode == "strict"
        assert record.public_key is None
