"""In-memory key-value storage, for tests and throwaway sessions."""

from typing import Optional

from subtrackr.services.storage.interface import KeyValueStore


class MemoryKeyValueStore(KeyValueStore):
    """
    Process-local key-value store.

    All state is lost when the process exits.
    """

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._values: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        self._values[key] = value
