"""
Abstract Storage Interface

DESIGN DECISION: The ledger is persisted through a tiny key-value interface.
This allows us to:
1. Keep the whole ledger as one opaque string value under one key
2. Use in-memory storage for testing
3. Swap a local JSON file for Google Sheets without touching the ledger

The interface is intentionally minimal - the ledger never reads or writes
individual records, only whole snapshots.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Abstract interface for the persistence backend.

    Any storage implementation (memory, local file, Google Sheets, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: The storage key

        Returns:
            The stored string, or None if nothing was stored yet

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Args:
            key: The storage key
            value: The string to store

        Raises:
            StorageError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
