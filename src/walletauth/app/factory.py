"""Flask application factory for walletauth.

Usage::

    from walletauth.app import create_app
    from walletauth.config import get_config

    app = create_app(config=get_config())
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from flask import Flask, jsonify

if TYPE_CHECKING:
    from flask.typing import ResponseReturnValue

    from walletauth.config.walletauth_config import WalletAuthConfig
    from walletauth.repositories import UserDirectory

log = logging.getLogger(__name__)


def create_app(
    config: WalletAuthConfig | None = None,
    *,
    user_directory: UserDirectory | None = None,
) -> Flask:
    """Create and configure the walletauth Flask application.

    Parameters
    ----------
    config:
        Loaded :class:`WalletAuthConfig`.  Falls back to
        :func:`get_config` when ``None``.
    user_directory:
        Optional user store; defaults to the in-memory directory seeded
        from ``users.records``.

    Returns
    -------
    Flask
        Fully configured WSGI application.

    """
    if config is None:
        from walletauth.config import get_config  # noqa: PLC0415

        config = get_config()

    settings = config.settings

    app = Flask("walletauth")
    app.config["WALLETAUTH_SETTINGS"] = settings
    app.config["WALLETAUTH_CONFIG"] = config

    # -- WSGI middleware (outermost layer) -----------------------------------
    if settings.proxy.enabled:
        from werkzeug.middleware.proxy_fix import ProxyFix  # noqa: PLC0415

        app.wsgi_app = ProxyFix(  # type: ignore[method-assign]
            app.wsgi_app,
            x_for=settings.proxy.x_for,
            x_proto=settings.proxy.x_proto,
            x_prefix=settings.proxy.x_prefix,
        )
        log.info(
            "Proxy middleware enabled (x_for=%d, x_proto=%d, x_prefix=%d)",
            settings.proxy.x_for,
            settings.proxy.x_proto,
            settings.proxy.x_prefix,
        )

    # -- Error handlers ------------------------------------------------------
    from walletauth.app.errors import register_error_handlers  # noqa: PLC0415

    register_error_handlers(app)

    # -- Request lifecycle hooks --------------------------------------------
    from walletauth.app.middleware import install_cors, register_request_hooks  # noqa: PLC0415

    register_request_hooks(app)
    install_cors(app, settings.server)

    # -- Dependency container -----------------------------------------------
    from walletauth.app.context import Container  # noqa: PLC0415

    container = Container(settings, user_directory=user_directory)
    app.extensions["container"] = container

    # -- Routes -------------------------------------------------------------
    _register_health(app)

    from walletauth.api import register_blueprints  # noqa: PLC0415

    register_blueprints(app)

    log.info("Flask application created")
    return app


# ---------------------------------------------------------------------------
# Infrastructure endpoints
# ---------------------------------------------------------------------------


def _register_health(app: Flask) -> None:
    """Register ``/``, ``/livez`` and ``/healthz``."""
    from walletauth import __version__  # noqa: PLC0415

    @app.route("/")
    def index() -> ResponseReturnValue:
        return "walletauth service online", 200, {"Content-Type": "text/plain; charset=utf-8"}

    @app.route("/livez")
    def livez() -> ResponseReturnValue:
        """Report that the process is up."""
        return jsonify({"alive": True, "version": __version__}), 200

    @app.route("/healthz")
    def healthz() -> ResponseReturnValue:
        """Report whether the handshake is usable and how it is configured."""
        container = app.extensions.get("container")
        if container is None:
            return jsonify({"status": "degraded", "version": __version__}), 503

        checks = {
            "secret": "default" if container.secret.is_default else "configured",
            "key_separation": container.secret.key_separation,
        }
        return jsonify({"status": "ok", "version": __version__, "checks": checks}), 200
