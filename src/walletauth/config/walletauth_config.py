"""walletauth configuration loader.

Lifecycle::

    # 1. CLI / WSGI entry point creates the singleton (once, at startup)
    WalletAuthConfig(config_file="/etc/walletauth/config.yaml")

    # 2. Any module retrieves it afterwards
    from walletauth.config import get_config
    cfg = get_config()
    cfg.settings.server.port  # typed access

    # 3. Dynamic access
    cfg.get("logging.level", default="INFO")
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any

import jsonschema
import yaml

from walletauth.config.settings import WalletAuthSettings, build_settings

_SCHEMA_PATH = Path(__file__).parent / "schema.json"

_ENV_RE = re.compile(
    r"^\$\{([^}:]+?)(?::-(.*))?\}$",
    re.DOTALL,
)

_MIN_SECRET_LENGTH = 16

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Module-level singleton reference
# ---------------------------------------------------------------------------
_instance: WalletAuthConfig | None = None


def get_config() -> WalletAuthConfig:
    """Return the initialised configuration singleton.

    Raises :class:`RuntimeError` if :class:`WalletAuthConfig` has not
    been created yet (i.e. no entry point has run).
    """
    if _instance is None:
        msg = (
            "Configuration not initialised. "
            "WalletAuthConfig must be created with config_file= before calling get_config()."
        )
        raise RuntimeError(msg)
    return _instance


# ---------------------------------------------------------------------------
# Validation error collector
# ---------------------------------------------------------------------------


class ConfigValidationError(Exception):
    """Raised when schema or cross-field validation finds problems."""

    def __init__(self, errors: list[str]) -> None:
        """Store *errors* and build a human-readable message."""
        self.errors = errors
        body = "\n".join(f"  - {e}" for e in errors)
        super().__init__(f"Configuration validation failed:\n{body}")


# ---------------------------------------------------------------------------
# Environment variable resolution
# ---------------------------------------------------------------------------


def _resolve_value(value: str, path: str) -> str:
    """Replace ``${VAR}`` or ``${VAR:-default}`` with env var value."""
    match = _ENV_RE.match(value)
    if match is None:
        return value
    var_name = match.group(1)
    fallback = match.group(2)
    resolved = os.environ.get(var_name)
    if resolved is not None:
        return resolved
    if fallback is not None:
        return fallback
    raise ConfigValidationError(
        [
            f"Environment variable '${{{var_name}}}' referenced "
            f"at '{path}' is not set and has no default",
        ],
    )


def _resolve_env_vars(
    data: Any,  # noqa: ANN401
    path: str = "",
) -> None:
    """Walk *data* in-place and resolve ``${VAR}``/``${VAR:-default}`` strings."""
    if isinstance(data, dict):
        for key in data:
            child_path = f"{path}.{key}" if path else key
            if isinstance(data[key], str):
                data[key] = _resolve_value(data[key], child_path)
            elif isinstance(data[key], (dict, list)):
                _resolve_env_vars(data[key], child_path)
    elif isinstance(data, list):
        for idx, item in enumerate(data):
            child_path = f"{path}[{idx}]"
            if isinstance(item, str):
                data[idx] = _resolve_value(item, child_path)
            elif isinstance(item, (dict, list)):
                _resolve_env_vars(item, child_path)


def _read_file(path: Path) -> dict[str, Any]:
    with path.open(encoding="utf-8") as f:
        if path.suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(f)
        else:
            data = json.load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Top level of {path} must be a mapping"
        raise ConfigValidationError([msg])
    return data


# ---------------------------------------------------------------------------
# Config class
# ---------------------------------------------------------------------------


class WalletAuthConfig:
    """Central configuration for the walletauth server.

    The JSON schema is bundled at ``config/schema.json``; callers
    supply only ``config_file``.  After construction the typed settings
    tree is available at :pyattr:`settings` and the raw dict via
    :pyattr:`data` / :pymeth:`get`.
    """

    def __init__(self, *, config_file: str | Path) -> None:
        """Load, validate and publish the configuration singleton.

        Raises
        ------
        ConfigValidationError
            When the file breaks the schema or a cross-field rule.

        """
        global _instance  # noqa: PLW0603

        self._path = Path(config_file)
        self._data = self._load()
        self.additional_checks()
        self._settings: WalletAuthSettings = build_settings(self._data)
        _instance = self

    # -- lifecycle ----------------------------------------------------------

    def _load(self) -> dict[str, Any]:
        """Read the file, resolve env vars, then validate against the schema.

        Env-var resolution runs **before** schema validation so that
        substituted values are checked against enum constraints.
        """
        data = _read_file(self._path)
        _resolve_env_vars(data)
        data["_source"] = str(self._path)

        schema = json.loads(_SCHEMA_PATH.read_text(encoding="utf-8"))
        validator = jsonschema.Draft202012Validator(schema)
        problems = sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
        if problems:
            raise ConfigValidationError(
                [
                    f"{'.'.join(str(p) for p in err.absolute_path) or '<root>'}: {err.message}"
                    for err in problems
                ],
            )
        return data

    # -- access -------------------------------------------------------------

    @property
    def settings(self) -> WalletAuthSettings:
        """Fully-typed, frozen settings tree."""
        return self._settings

    @property
    def data(self) -> dict[str, Any]:
        return self._data

    def get(self, dotted: str, default: Any = None) -> Any:  # noqa: ANN401
        """Look up a raw value by dot-separated path."""
        node: Any = self._data
        for part in dotted.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    # -- cross-field validation ---------------------------------------------

    def additional_checks(self) -> None:
        """Semantic & cross-field validation, run after the schema check."""
        from walletauth.core.identity import is_valid_identity  # noqa: PLC0415

        errors: list[str] = []
        warnings: list[str] = []

        auth = self._data.get("auth") or {}
        api = self._data.get("api") or {}
        proxy = self._data.get("proxy") or {}
        users = self._data.get("users") or {}

        # -- auth --
        secret = auth.get("secret", "")
        if not secret:
            warnings.append(
                "auth.secret is not set; the built-in default secret will be "
                "used, which is insecure outside development",
            )
            if auth.get("key_separation"):
                warnings.append(
                    "auth.key_separation is enabled but auth.secret is not set; "
                    "subkeys will be derived from the default secret",
                )
        elif len(secret) < _MIN_SECRET_LENGTH:
            warnings.append(
                f"auth.secret is short ({len(secret)} chars); "
                f"at least {_MIN_SECRET_LENGTH} characters are recommended",
            )

        # -- api --
        base_path = api.get("base_path", "/jwt")
        if len(base_path) > 1 and base_path.endswith("/"):
            errors.append(
                f"api.base_path must not end with '/' (got '{base_path}')",
            )

        # -- proxy --
        if proxy.get("enabled") and not any(
            proxy.get(k, d) for k, d in (("x_for", 1), ("x_proto", 1), ("x_prefix", 0))
        ):
            warnings.append(
                "proxy.enabled is true but every hop count is 0; "
                "no forwarded header will be honoured",
            )

        # -- users --
        seen: set[str] = set()
        for idx, record in enumerate(users.get("records", [])):
            key = record.get("public_key", "")
            if not is_valid_identity(key):
                errors.append(
                    f"users.records[{idx}].public_key '{key}' is not a valid "
                    "base58 Ed25519 public key",
                )
            elif key in seen:
                errors.append(f"users.records[{idx}].public_key '{key}' is duplicated")
            seen.add(key)

        for w in warnings:
            log.warning("Config warning: %s", w)

        if errors:
            raise ConfigValidationError(errors)

    # -- helpers ------------------------------------------------------------

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton -- testing only."""
        global _instance  # noqa: PLW0603
        _instance = None

    def __repr__(self) -> str:
        """Return a developer-friendly representation."""
        return f"<WalletAuthConfig config_file={self._path}>"
