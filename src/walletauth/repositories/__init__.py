"""User record lookup.

The handshake core never touches storage; only request handlers that
already hold a verified identity consult a :class:`UserDirectory`.
"""

from walletauth.repositories.user import InMemoryUserDirectory, UserDirectory

__all__ = ["InMemoryUserDirectory", "UserDirectory"]
