"""Services package."""

from subtrackr.services.storage import (
    ConnectionError,
    JsonFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    StorageError,
)

__all__ = [
    "ConnectionError",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "StorageError",
]
