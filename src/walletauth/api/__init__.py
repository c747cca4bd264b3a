"""HTTP API layer: Flask blueprint registration.

Call :func:`register_blueprints` during application startup to mount
the handshake endpoints under ``api.base_path``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flask import Flask

log = logging.getLogger(__name__)


def register_blueprints(app: Flask) -> None:
    """Register the wallet handshake blueprint on the Flask application."""
    from walletauth.api.auth import auth_bp  # noqa: PLC0415

    settings = app.config["WALLETAUTH_SETTINGS"]
    base = settings.api.base_path.rstrip("/")

    app.register_blueprint(auth_bp, url_prefix=base or None)
    log.info("Handshake endpoints registered at %s", base or "/")
