"""walletauth command-line entry point.

Usage::

    walletauth -c /etc/walletauth/config.yaml
    walletauth -c config.yaml --validate-only
    walletauth -c config.yaml serve --dev
    walletauth -c config.yaml nonce <public_key>
    walletauth -c config.yaml inspect-token <token>
    python -m walletauth -c config.yaml
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

log = logging.getLogger(__name__)


def _get_version() -> str:
    from walletauth import __version__  # noqa: PLC0415

    return __version__


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="walletauth",
        description="walletauth: wallet challenge/response authentication server",
    )
    parser.add_argument(
        "-c",
        "--config",
        required=True,
        metavar="PATH",
        help="Path to the configuration file (YAML or JSON).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Enable debug output (full tracebacks, verbose logging).",
    )
    parser.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Validate the configuration file and exit.",
    )
    parser.add_argument(
        "--dev",
        action="store_true",
        default=False,
        help="Use Flask's development server instead of gunicorn.",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command")

    serve_parser = subparsers.add_parser("serve", help="Start the walletauth server")
    # SUPPRESS keeps a top-level ``--dev`` from being reset by the subparser
    serve_parser.add_argument(
        "--dev",
        action="store_true",
        default=argparse.SUPPRESS,
        dest="dev",
        help="Use Flask's development server instead of gunicorn.",
    )

    nonce_parser = subparsers.add_parser(
        "nonce",
        help="Print the challenge nonce for a public key",
    )
    nonce_parser.add_argument("public_key", help="Base58-encoded wallet public key")

    token_parser = subparsers.add_parser(
        "inspect-token",
        help="Validate a credential and print its claims",
    )
    token_parser.add_argument("token", help="Credential as returned by the /get endpoint")

    return parser


def _print_error(message: str) -> None:
    """Print a user-facing error to stderr."""
    print(f"walletauth: error: {message}", file=sys.stderr)  # noqa: T201


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.  Parses arguments, loads config, dispatches."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    config_path = Path(args.config)
    if not config_path.is_file():
        _print_error(f"configuration file not found: {config_path}")
        sys.exit(1)

    # -- bootstrap logging early (basic stderr until config is loaded) ---
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    # -- load & validate config ---
    try:
        from walletauth.config import ConfigValidationError, WalletAuthConfig  # noqa: PLC0415

        config = WalletAuthConfig(config_file=config_path)
    except ConfigValidationError as exc:
        _print_error(str(exc))
        sys.exit(1)
    except Exception as exc:
        if args.debug:
            raise
        _print_error(f"failed to load configuration: {exc}")
        sys.exit(1)

    from walletauth.logging import configure_logging  # noqa: PLC0415

    configure_logging(config.settings.logging)

    if args.validate_only:
        _print_settings_summary(config)
        sys.exit(0)

    command = args.command

    if command == "nonce":
        from walletauth.cli.commands.nonce import run_nonce  # noqa: PLC0415

        run_nonce(config, args)
    elif command == "inspect-token":
        from walletauth.cli.commands.inspect_token import run_inspect_token  # noqa: PLC0415

        run_inspect_token(config, args)
    else:
        # No subcommand means serve
        from walletauth.cli.commands.serve import run_serve  # noqa: PLC0415

        _print_settings_summary(config)
        try:
            run_serve(config, args)
        except RuntimeError as exc:
            _print_error(str(exc))
            sys.exit(1)


def _print_settings_summary(config) -> None:
    """Print a short summary of the loaded configuration."""
    s = config.settings
    lines = [
        f"config:          {config.data.get('_source')}",
        f"listen:          {s.server.bind}:{s.server.port}",
        f"base path:       {s.api.base_path}",
        f"secret:          {'configured' if s.auth.secret else 'DEFAULT (insecure)'}",
        f"key separation:  {'on' if s.auth.key_separation else 'off'}",
        f"proxy:           {'on' if s.proxy.enabled else 'off'}",
        f"seeded users:    {len(s.users.records)}",
        f"logging:         {s.logging.level} ({s.logging.format})",
    ]
    print("\n".join(lines))  # noqa: T201
