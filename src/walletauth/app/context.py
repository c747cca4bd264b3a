"""Dependency injection container for walletauth.

Created once during application startup and stored on the Flask app
via ``app.extensions["container"]``.  Accessible from any request
context with :func:`get_container`.  Nothing in it is mutated after
construction, so concurrent requests share it without locking.

Usage::

    from walletauth.app.context import get_container

    c = get_container()
    nonce = c.nonce_deriver.derive(public_key)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from flask import current_app

from walletauth.core import (
    CredentialGuard,
    CredentialIssuer,
    CredentialValidator,
    NonceDeriver,
    ServerSecret,
    SignatureVerifier,
)
from walletauth.repositories import InMemoryUserDirectory

if TYPE_CHECKING:
    from walletauth.config.settings import WalletAuthSettings
    from walletauth.repositories import UserDirectory


class Container:
    """Application-wide dependency container.

    Holds the single :class:`ServerSecret` and the handshake
    components built on it.
    """

    def __init__(
        self,
        settings: WalletAuthSettings,
        *,
        user_directory: UserDirectory | None = None,
    ) -> None:
        """Build every component from *settings*.

        *user_directory* overrides the in-memory directory seeded from
        ``settings.users``.
        """
        self.settings = settings

        self.secret = ServerSecret.from_settings(
            settings.auth.secret,
            key_separation=settings.auth.key_separation,
        )

        self.nonce_deriver = NonceDeriver(self.secret)
        self.signature_verifier = SignatureVerifier(self.nonce_deriver)
        self.credential_issuer = CredentialIssuer(self.secret)
        self.credential_validator = CredentialValidator(self.secret)
        self.credential_guard = CredentialGuard(self.credential_validator)

        self.user_directory: UserDirectory = (
            user_directory
            if user_directory is not None
            else InMemoryUserDirectory.from_settings(settings.users)
        )


def get_container() -> Container:
    """Return the :class:`Container` from the current Flask app.

    Raises :class:`RuntimeError` if ``create_app`` has not wired one.
    """
    container = current_app.extensions.get("container")
    if container is None:
        msg = "Dependency container not available -- was create_app() used to build the app?"
        raise RuntimeError(msg)
    return container
