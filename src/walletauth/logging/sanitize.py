"""Sensitive data sanitization for log output.

Provides :func:`sanitize_for_logs`, which redacts secret-bearing
fields and shortens bearer credentials before they are written to
log files.  Public keys and nonces are not secret and pass through.
"""

from __future__ import annotations

import re
from typing import Any

_SECRET_FIELDS = frozenset(
    {"secret", "auth_secret", "password", "private_key", "secret_key", "authorization"},
)

_TOKEN_FIELDS = frozenset({"token", "credential"})

# payload.timestamp.signature, each segment URL-safe base64
_CREDENTIAL_RE = re.compile(r"\b([A-Za-z0-9_\-]{8,})\.([A-Za-z0-9_\-]+)\.([A-Za-z0-9_\-]{16,})\b")

_TOKEN_PREVIEW_LENGTH = 12

REDACTED = "[REDACTED]"


def redact_token(token: str) -> str:
    """Keep a short prefix of *token* so log lines can be correlated."""
    if len(token) <= _TOKEN_PREVIEW_LENGTH:
        return REDACTED
    return f"{token[:_TOKEN_PREVIEW_LENGTH]}...{REDACTED}"


def sanitize_credentials(text: str) -> str:
    """Replace anything shaped like a signed credential in *text*."""
    return _CREDENTIAL_RE.sub(lambda m: redact_token(m.group(0)), text)


def sanitize_for_logs(data: Any) -> Any:  # noqa: ANN401
    """Recursively sanitize sensitive material in *data*.

    Handles dicts (keyed by field name), lists, and plain strings.
    Non-sensitive data passes through unchanged.
    """
    if isinstance(data, dict):
        result = {}
        for key, value in data.items():
            lowered = str(key).lower()
            if lowered in _SECRET_FIELDS:
                result[key] = REDACTED
            elif lowered in _TOKEN_FIELDS and isinstance(value, str):
                result[key] = redact_token(value)
            else:
                result[key] = sanitize_for_logs(value)
        return result

    if isinstance(data, (list, tuple)):
        return type(data)(sanitize_for_logs(item) for item in data)

    if isinstance(data, str):
        return sanitize_credentials(data)

    return data
