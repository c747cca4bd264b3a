"""Allow ``python -m walletauth``."""

from walletauth.cli.main import main

main()
