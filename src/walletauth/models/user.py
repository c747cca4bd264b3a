"""User profile entity, keyed by wallet public key."""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class UserRecord:
    public_key: str
    name: str
    bio: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)
