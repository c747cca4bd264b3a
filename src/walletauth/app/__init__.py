"""Flask application package for walletauth.

Public API::

    from walletauth.app import create_app
"""

from walletauth.app.factory import create_app

__all__ = ["create_app"]
