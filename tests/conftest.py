"""Root conftest for the walletauth test suite."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import base58
import pytest
import yaml
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

# ---------------------------------------------------------------------------
# Make ``src/`` importable without installing the package
# ---------------------------------------------------------------------------
_SRC = str(Path(__file__).resolve().parent.parent / "src")
if _SRC not in sys.path:
    sys.path.insert(0, _SRC)

TEST_SECRET = "test-secret-0123456789abcdef"


# ---------------------------------------------------------------------------
# Wallet keys
# ---------------------------------------------------------------------------


class Wallet:
    """An Ed25519 keypair standing in for a browser wallet."""

    def __init__(self, private_key: Ed25519PrivateKey | None = None) -> None:
        self.private_key = private_key or Ed25519PrivateKey.generate()
        raw = self.private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
        self.public_key = base58.b58encode(raw).decode("ascii")

    def sign(self, message: str) -> bytes:
        return self.private_key.sign(message.encode("utf-8"))

    def sign_b58(self, message: str) -> str:
        return base58.b58encode(self.sign(message)).decode("ascii")


@pytest.fixture()
def wallet() -> Wallet:
    return Wallet()


@pytest.fixture()
def other_wallet() -> Wallet:
    return Wallet()


# ---------------------------------------------------------------------------
# Minimal config data shared by multiple test modules
# ---------------------------------------------------------------------------


@pytest.fixture()
def minimal_config_data(wallet: Wallet) -> dict:
    """Return a config dict with a real secret and one seeded user."""
    return {
        "auth": {"secret": TEST_SECRET},
        "users": {
            "records": [
                {"public_key": wallet.public_key, "name": "alice", "bio": "gm"},
            ],
        },
        "logging": {"level": "DEBUG", "format": "text"},
    }


@pytest.fixture()
def tmp_config_file(tmp_path: Path, minimal_config_data: dict) -> Path:
    """Write *minimal_config_data* to a temp YAML file and return its path."""
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        yaml.safe_dump(minimal_config_data, default_flow_style=False, sort_keys=False),
        encoding="utf-8",
    )
    return cfg


@pytest.fixture()
def config(tmp_config_file: Path):
    from walletauth.config import WalletAuthConfig

    return WalletAuthConfig(config_file=tmp_config_file)


# ---------------------------------------------------------------------------
# Flask app / client
# ---------------------------------------------------------------------------


@pytest.fixture()
def app(config):
    from walletauth.app import create_app

    application = create_app(config=config)
    application.config["TESTING"] = True
    return application


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def handshake(client):
    """Return a callable running challenge -> sign -> get for a wallet.

    The callable returns the credential token text.
    """

    def _run(w: Wallet, base: str = "/jwt") -> str:
        resp = client.get(f"{base}/challenge/{w.public_key}")
        assert resp.status_code == 200, resp.get_data(as_text=True)
        nonce = resp.get_json()["response"]
        state = json.dumps({"public_key": w.public_key, "signature": w.sign_b58(nonce)})
        resp = client.get(f"{base}/get", query_string={"state": state})
        assert resp.status_code == 200, resp.get_data(as_text=True)
        return resp.get_json()["response"]

    return _run


# ---------------------------------------------------------------------------
# Singleton / logger cleanup: autouse so every test gets a fresh slate
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def fresh_config():
    """Reset the WalletAuthConfig singleton before and after every test."""
    from walletauth.config.walletauth_config import WalletAuthConfig

    WalletAuthConfig.reset()
    yield
    WalletAuthConfig.reset()


@pytest.fixture(autouse=True)
def fresh_loggers():
    """Undo ``configure_logging`` so caplog sees walletauth records."""
    yield
    root = logging.getLogger("walletauth")
    root.handlers.clear()
    root.propagate = True
    root.setLevel(logging.NOTSET)
    for name in ("walletauth.access", "walletauth.security"):
        logging.getLogger(name).setLevel(logging.NOTSET)
