"""Identity and handshake payload decoding.

Wallet public keys travel as base58 text (Bitcoin alphabet) and must
decode to exactly 32 bytes.  Everything a client submits is decoded
and validated here before any cryptographic step runs.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import unquote

import base58

from walletauth.app.errors import InvalidIdentity, InvalidState, VerificationFailed
from walletauth.core.types import Identity

log = logging.getLogger(__name__)

PUBLIC_KEY_LENGTH = 32
SIGNATURE_LENGTH = 64
_MAX_ENCODED_LENGTH = 64
_BYTE_MAX = 255


def parse_identity(value: Identity | str | None) -> Identity:
    """Decode *value* into an :class:`Identity`.

    Raises :class:`InvalidIdentity` unless *value* is the canonical
    base58 encoding of a 32-byte public key.  No check is made that
    the key exists anywhere or lies on the curve.
    """
    if isinstance(value, Identity):
        return value
    if not isinstance(value, str) or not value:
        raise InvalidIdentity
    if len(value) > _MAX_ENCODED_LENGTH:
        raise InvalidIdentity
    try:
        raw = base58.b58decode(value)
    except ValueError:
        raise InvalidIdentity from None
    if len(raw) != PUBLIC_KEY_LENGTH:
        raise InvalidIdentity
    encoded = base58.b58encode(raw).decode("ascii")
    if encoded != value:
        raise InvalidIdentity
    return Identity(encoded=encoded, raw=raw)


def is_valid_identity(value: Any) -> bool:  # noqa: ANN401
    """Return True if *value* would be accepted by :func:`parse_identity`."""
    try:
        parse_identity(value)
    except InvalidIdentity:
        return False
    return True


def decode_signature(value: Any) -> bytes:  # noqa: ANN401
    """Decode a client-supplied signature into raw bytes.

    Accepts a base58 string or a list of byte values (a JSON-serialised
    ``Uint8Array``).  The length is *not* checked here; a wrong-length
    signature simply fails verification.

    Raises :class:`VerificationFailed` if the value cannot be decoded.
    """
    if isinstance(value, str):
        try:
            return base58.b58decode(value)
        except ValueError:
            raise VerificationFailed from None
    if isinstance(value, list):
        if not all(
            isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= _BYTE_MAX for b in value
        ):
            raise VerificationFailed
        return bytes(value)
    raise VerificationFailed


@dataclass(frozen=True)
class HandshakeState:
    """The ``state`` query payload submitted to obtain a credential."""

    public_key: str
    signature: str | list[int]

    @classmethod
    def parse(cls, raw: str | None) -> HandshakeState:
        """Decode the URL-encoded JSON ``state`` parameter.

        Raises :class:`InvalidState` when the parameter is absent, is
        not a JSON object (including JSON nested too deeply to decode),
        or lacks a non-empty ``public_key`` or ``signature``.
        """
        if not raw:
            raise InvalidState("Expected state object, but none was provided")
        try:
            data = json.loads(unquote(raw))
        except (ValueError, RecursionError):
            raise InvalidState from None
        if not isinstance(data, dict):
            raise InvalidState
        public_key = data.get("public_key")
        signature = data.get("signature")
        if not public_key or not signature:
            raise InvalidState
        if not isinstance(public_key, str) or not isinstance(signature, (str, list)):
            raise InvalidState
        return cls(public_key=public_key, signature=signature)
