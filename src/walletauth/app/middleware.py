"""Request lifecycle hooks for walletauth.

Registered via :func:`register_request_hooks`:

* Request ID generation / passthrough (``X-Request-ID``)
* Request timing
* Security headers
* Structured access logging

CORS is delegated to flask-cors (:func:`install_cors`).  Forwarded-header
handling for deployments behind a reverse proxy is done by werkzeug's
:class:`~werkzeug.middleware.proxy_fix.ProxyFix`, installed by the
application factory.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING
from uuid import uuid4

from flask import Flask, g, request
from flask_cors import CORS

if TYPE_CHECKING:
    from walletauth.config.settings import ServerSettings

log = logging.getLogger(__name__)
access_log = logging.getLogger("walletauth.access")

# Every handshake route is a GET; browsers send the credential in Authorization.
CORS_ALLOW_HEADERS = ("Authorization", "Content-Type", "X-Request-ID")
CORS_METHODS = ("GET", "OPTIONS")


def install_cors(app: Flask, settings: ServerSettings) -> None:
    """Enable CORS for ``server.cors_origins``.

    A ``"*"`` entry answers every origin with a literal ``*``; otherwise
    only listed origins are echoed back (with ``Vary: Origin``).
    """
    origins = list(settings.cors_origins)
    CORS(
        app,
        origins=origins,
        allow_headers=list(CORS_ALLOW_HEADERS),
        methods=list(CORS_METHODS),
        expose_headers=["X-Request-ID"],
        send_wildcard="*" in origins,
    )
    log.debug("CORS enabled for %s", ", ".join(origins) or "no origins")


def register_request_hooks(app: Flask) -> None:
    """Register before/after request hooks for ID tracking and access logging."""

    @app.before_request
    def _before_request() -> None:
        g.request_id = request.headers.get("X-Request-ID") or uuid4().hex
        g.start_time = time.monotonic()

    @app.after_request
    def _after_request(response):
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"

        request_id = getattr(g, "request_id", None)
        if request_id:
            response.headers["X-Request-ID"] = request_id

        status = response.status_code
        duration_ms = _elapsed_ms()
        level = (
            logging.WARNING
            if 400 <= status < 500
            else logging.ERROR
            if status >= 500
            else logging.INFO
        )
        access_log.log(
            level,
            "%s %s %s %.1fms",
            request.method,
            request.path,
            status,
            duration_ms,
            extra={
                "status": status,
                "duration_ms": round(duration_ms, 1),
                "auth_state": getattr(g, "auth_state", None),
            },
        )

        return response


def _elapsed_ms() -> float:
    start = getattr(g, "start_time", None)
    if start is None:
        return 0.0
    return (time.monotonic() - start) * 1000
