"""Serve subcommand: start the walletauth server."""

from __future__ import annotations

import logging

log = logging.getLogger(__name__)


def run_serve(config, args) -> None:
    """Start the walletauth server (gunicorn, or Flask's server with ``--dev``)."""
    from walletauth.app import create_app  # noqa: PLC0415

    app = create_app(config=config)

    if getattr(args, "dev", False):
        log.info("Starting development server (not for production)")
        app.run(
            host=config.settings.server.bind,
            port=config.settings.server.port,
            debug=True,
            use_reloader=True,
        )
    else:
        from walletauth.server.gunicorn_app import run_gunicorn  # noqa: PLC0415

        run_gunicorn(app, config.settings.server)
