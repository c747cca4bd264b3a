"""User directory: lookup of profile records by public key."""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Protocol

from walletauth.models.user import UserRecord

if TYPE_CHECKING:
    from collections.abc import Iterable

    from walletauth.config.settings import UserDirectorySettings


class UserDirectory(Protocol):
    """Anything that can resolve a wallet public key to a profile."""

    def find_by_public_key(self, public_key: str) -> UserRecord | None: ...


class InMemoryUserDirectory:
    """Process-local, read-only directory seeded from configuration.

    Used in development and tests; production deployments plug in a
    directory backed by their own user store.  Records are fixed at
    construction, so concurrent lookups need no locking.
    """

    def __init__(self, records: Iterable[UserRecord] = ()) -> None:
        self._records = MappingProxyType({r.public_key: r for r in records})

    @classmethod
    def from_settings(cls, settings: UserDirectorySettings) -> InMemoryUserDirectory:
        return cls(
            UserRecord(public_key=r.public_key, name=r.name, bio=r.bio) for r in settings.records
        )

    def find_by_public_key(self, public_key: str) -> UserRecord | None:
        return self._records.get(public_key)

    def __len__(self) -> int:
        return len(self._records)
