"""Credential guard decorators for Flask views.

- ``require_wallet``: strict; the view only runs for an authenticated
  wallet, otherwise the request is answered ``401 Unauthorized``.
- ``optional_wallet``: permissive; the view always runs, with
  ``g.wallet`` set to the identity or ``None``.

Both set ``g.auth_state`` to the guard's terminal
:class:`~walletauth.core.types.GuardOutcome` and ``g.credential`` to
the validated claims (or ``None``).  Views must treat
``g.wallet is None`` as "not authenticated", never as an error.
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING, Any

from flask import g, request

from walletauth.app.context import get_container
from walletauth.app.errors import CredentialRejected
from walletauth.core.types import GuardMode, GuardOutcome

if TYPE_CHECKING:
    from collections.abc import Callable


def _run_guard(mode: GuardMode) -> None:
    """Authenticate the current request and bind the result on ``g``."""
    g.wallet = None
    g.credential = None
    try:
        result = get_container().credential_guard.authenticate(
            request.headers.get("Authorization"),
            mode,
        )
    except CredentialRejected:
        g.auth_state = GuardOutcome.REJECTED
        raise

    g.auth_state = result.outcome
    g.credential = result.claims
    g.wallet = result.wallet


def require_wallet(
    fn: Callable[..., Any],
) -> Callable[..., Any]:
    """Enforce bearer credential auth on a view.

    The handler is not invoked when the credential is absent or
    invalid; the client gets ``401`` with body ``Unauthorized``.
    """

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:  # noqa: ANN401
        _run_guard(GuardMode.STRICT)
        return fn(*args, **kwargs)

    return wrapper


def optional_wallet(
    fn: Callable[..., Any],
) -> Callable[..., Any]:
    """Bind the wallet when a valid credential is present; never reject."""

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:  # noqa: ANN401
        _run_guard(GuardMode.PERMISSIVE)
        return fn(*args, **kwargs)

    return wrapper
