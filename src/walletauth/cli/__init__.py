"""Command-line interface for walletauth."""
