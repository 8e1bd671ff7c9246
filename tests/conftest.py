"""Shared fixtures: fixed clocks, in-memory storage and failing storage."""

from datetime import date
from typing import Optional

import pytest

from subtrackr.config import AppSettings
from subtrackr.ids import IdGenerator
from subtrackr.services.storage import KeyValueStore, MemoryKeyValueStore, StorageError


FIXED_MS = 1_700_000_000_000
TODAY = date(2024, 6, 1)


class RecordingStore(MemoryKeyValueStore):
    """Memory store that remembers every value written."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        super().__init__(initial)
        self.writes: list[tuple[str, str]] = []

    async def set(self, key: str, value: str) -> None:
        self.writes.append((key, value))
        await super().set(key, value)


class BrokenStore(KeyValueStore):
    """Store whose reads and writes always fail."""

    async def get(self, key: str) -> Optional[str]:
        raise StorageError("disk on fire")

    async def set(self, key: str, value: str) -> None:
        raise StorageError("disk on fire")


@pytest.fixture
def id_generator() -> IdGenerator:
    return IdGenerator(clock=lambda: FIXED_MS / 1000)


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def broken_store() -> BrokenStore:
    return BrokenStore()


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(_env_file=None, storage_backend="memory")
