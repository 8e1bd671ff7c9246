"""Subscription ledger package."""

from subtrackr.ledger.store import DEFAULT_STORAGE_KEY, LedgerStore

__all__ = ["DEFAULT_STORAGE_KEY", "LedgerStore"]
