"""
Storage Services Package

Provides the abstract key-value interface and its implementations:
in-memory, a local JSON file, and Google Sheets.
"""

from subtrackr.services.storage.interface import (
    ConnectionError,
    KeyValueStore,
    StorageError,
)
from subtrackr.services.storage.memory import MemoryKeyValueStore
from subtrackr.services.storage.json_file import JsonFileKeyValueStore
from subtrackr.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsKeyValueStore,
)

__all__ = [
    # Interface
    "KeyValueStore",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsKeyValueStore",
    "JsonFileKeyValueStore",
    "MemoryKeyValueStore",
]
