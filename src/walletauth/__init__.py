"""walletauth: wallet challenge/response authentication service."""

__version__ = "1.0.0"
