"""Logging subsystem for walletauth.

Public API::

    from walletauth.logging import configure_logging

    configure_logging(settings.logging)
"""

from walletauth.logging.setup import configure_logging

__all__ = ["configure_logging"]
