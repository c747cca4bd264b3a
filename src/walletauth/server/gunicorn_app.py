"""Programmatic gunicorn runner for walletauth.

Starts gunicorn with settings taken from the walletauth config, so no
separate gunicorn config file is needed.

Usage::

    from walletauth.server.gunicorn_app import run_gunicorn

    run_gunicorn(flask_app, settings.server)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flask import Flask

    from walletauth.config.settings import ServerSettings

log = logging.getLogger(__name__)


def gunicorn_options(settings: ServerSettings) -> dict[str, object]:
    """Translate :class:`ServerSettings` into gunicorn config keys."""
    return {
        "bind": f"{settings.bind}:{settings.port}",
        "workers": settings.workers,
        "worker_class": settings.worker_class,
        "timeout": settings.timeout,
        "graceful_timeout": settings.graceful_timeout,
        "keepalive": settings.keepalive,
        # The after-request hook writes the access log
        "accesslog": None,
    }


def run_gunicorn(app: Flask, settings: ServerSettings) -> None:
    """Serve *app* with gunicorn until the master process exits.

    Raises :class:`RuntimeError` if gunicorn is not installed (it does
    not run on Windows; use ``serve --dev`` there).
    """
    try:
        from gunicorn.app.base import BaseApplication  # noqa: PLC0415
    except ImportError:
        msg = (
            "gunicorn is not installed.  Install it with:\n"
            "    pip install gunicorn\n\n"
            "gunicorn only runs on Unix.  Use 'serve --dev' for the Flask "
            "development server on Windows."
        )
        raise RuntimeError(msg) from None

    options = gunicorn_options(settings)

    class _App(BaseApplication):
        def __init__(self, flask_app: Flask) -> None:
            self.application = flask_app
            super().__init__()

        def load_config(self) -> None:
            for key, value in options.items():
                self.cfg.set(key, value)

        def load(self) -> Flask:
            return self.application

    log.info(
        "Starting gunicorn on %s (%d workers, %s)",
        options["bind"],
        settings.workers,
        settings.worker_class,
    )
    _App(app).run()
