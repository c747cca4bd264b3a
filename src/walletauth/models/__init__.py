"""Entities handed to request handlers."""

from walletauth.models.user import UserRecord

__all__ = ["UserRecord"]
