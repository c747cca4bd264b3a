"""Logging configuration for walletauth.

Every record handled under the ``walletauth`` logger is enriched by
:class:`RequestContextFilter` with two groups of context:

``request``
    ``request_id``, ``client_ip``, ``method``, ``path``
``auth``
    ``wallet`` (bound identity) and ``auth_state`` (the credential
    guard's outcome for the request)

:class:`StructuredFormatter` renders one JSON object per line with
those groups nested, the security ``event_id`` promoted to a top-level
``event`` key, and any remaining ``extra=`` fields flattened in.
:class:`TextFormatter` is the console equivalent.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from walletauth.config.settings import LoggingSettings

ROOT_LOGGER = "walletauth"
ACCESS_LOGGER = "walletauth.access"
SECURITY_LOGGER = "walletauth.security"

REQUEST_FIELDS = ("request_id", "client_ip", "method", "path")
AUTH_FIELDS = ("wallet", "auth_state")

# Whatever a bare LogRecord carries is not an ``extra=`` field.
_BUILTIN_FIELDS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}
_CONTEXT_FIELDS = frozenset(REQUEST_FIELDS + AUTH_FIELDS)

_NOISY_LIBRARIES = ("werkzeug", "gunicorn.error", "gunicorn.access", "flask_cors")


def _extras(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _BUILTIN_FIELDS and key not in _CONTEXT_FIELDS and not key.startswith("_")
    }


def _group(record: logging.LogRecord, fields: tuple[str, ...]) -> dict[str, Any]:
    group = {}
    for name in fields:
        value = getattr(record, name, None)
        if value not in (None, "-"):
            group[name] = str(value)
    return group


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


class StructuredFormatter(logging.Formatter):
    """JSON-lines formatter.

    Example output (wrapped)::

        {"ts": "2025-01-01T00:00:00+00:00", "level": "WARNING",
         "logger": "walletauth.security", "msg": "Credential rejected ...",
         "event": "walletauth.security.credential_rejected",
         "request": {"request_id": "9f..", "method": "GET", "path": "/jwt/whoami"},
         "auth": {"auth_state": "rejected"}, "reason": "expired"}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        extras = _extras(record)
        event = extras.pop("event_id", None)
        if event is not None:
            entry["event"] = event

        for name, fields in (("request", REQUEST_FIELDS), ("auth", AUTH_FIELDS)):
            group = _group(record, fields)
            if group:
                entry[name] = group

        for key, value in extras.items():
            entry.setdefault(key, value)

        if record.exc_info and record.exc_info[0] is not None:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Console formatter: one line, auth context appended when present.

    ``12:00:01 WARNING  walletauth.security [9f2c..] Credential rejected ... (auth_state=rejected)``
    """

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-8s %(name)s [%(request_id)s] %(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        if getattr(record, "request_id", None) is None:
            record.request_id = "-"  # type: ignore[attr-defined]
        line = super().format(record)
        auth = _group(record, AUTH_FIELDS)
        if auth:
            line += " (" + " ".join(f"{k}={v}" for k, v in auth.items()) + ")"
        return line


# ---------------------------------------------------------------------------
# Filter
# ---------------------------------------------------------------------------


def _request_context() -> dict[str, Any]:
    """Snapshot the current Flask request, or ``{}`` outside one."""
    from flask import g, has_request_context, request  # noqa: PLC0415

    if not has_request_context():
        return {}
    return {
        "request_id": getattr(g, "request_id", None),
        "client_ip": request.remote_addr,
        "method": request.method,
        "path": request.path,
        "wallet": getattr(g, "wallet", None),
        "auth_state": getattr(g, "auth_state", None),
    }


class RequestContextFilter(logging.Filter):
    """Attach request and auth context to every record.

    Values passed explicitly via ``extra=`` win over the request
    snapshot; fields with no value are set to ``None``.
    """

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        context = _request_context()
        for name in REQUEST_FIELDS + AUTH_FIELDS:
            if getattr(record, name, None) is None:
                setattr(record, name, context.get(name))
        return True


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def _level(name: str) -> int:
    return logging.getLevelName(name.upper()) if name else logging.INFO


def configure_logging(settings: LoggingSettings) -> logging.Logger:
    """Route the ``walletauth`` logger tree to stderr per *settings*.

    Idempotent: earlier handlers on the ``walletauth`` logger are
    dropped.  Returns that logger.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(StructuredFormatter() if settings.format == "json" else TextFormatter())

    root = logging.getLogger(ROOT_LOGGER)
    root.handlers[:] = [handler]
    root.setLevel(_level(settings.level))
    root.propagate = False

    logging.getLogger(ACCESS_LOGGER).setLevel(logging.INFO if settings.access_log else logging.WARNING)
    logging.getLogger(SECURITY_LOGGER).setLevel(_level(settings.security_level))

    for name in _NOISY_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root
