"""Utilities module - lock client and datetime helpers."""
from countryquiz.utils.lock_client import LockClient
from countryquiz.utils.datetime_helpers import ensure_utc

# Create singleton instances
lock_client = LockClient()

__all__ = ["lock_client", "LockClient", "ensure_utc"]
