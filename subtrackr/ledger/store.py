"""
Subscription Ledger Store

The ledger is the ordered list of subscriptions, in the order they were
added. This class is the only thing allowed to change it.

PERSISTENCE RULES:
1. The saved ledger is read once, at startup, by awaiting load()
2. Every change made after load() has finished writes the whole ledger
   back to storage
3. Changes made before load() has finished are never written, so an
   empty ledger cannot overwrite saved data during startup
4. If several saves are queued, only the newest snapshot is written
5. Load and save failures are logged, never raised

Saves are fire-and-forget tasks when an event loop is running. Without
one (a plain script, a Streamlit rerun) the save runs to completion
before the mutating call returns.
"""

import asyncio
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from subtrackr.audit import EventLogger
from subtrackr.backup.codec import read_backup, serialize_ledger
from subtrackr.ids import IdGenerator
from subtrackr.models.subscription import Subscription, SubscriptionInput
from subtrackr.services.storage import KeyValueStore
from subtrackr.validation import SubscriptionValidator


DEFAULT_STORAGE_KEY = "subscriptions"


class LedgerStore:
    """
    In-memory subscription ledger with load-on-start and save-on-change.

    Usage:
        ledger = LedgerStore(MemoryKeyValueStore())
        await ledger.load()
        ledger.add(SubscriptionInput(name="Netflix", cost="15.49", next_billing="2024-07-01"))
    """

    def __init__(
        self,
        storage: Optional[KeyValueStore] = None,
        storage_key: str = DEFAULT_STORAGE_KEY,
        event_logger: Optional[EventLogger] = None,
        id_generator: Optional[IdGenerator] = None,
        validator: Optional[SubscriptionValidator] = None,
    ):
        """
        Initialize the ledger.

        Args:
            storage: Persistence backend. If None, nothing is persisted.
            storage_key: Key the ledger snapshot is stored under
            event_logger: Where ledger events go
            id_generator: Source of new subscription IDs
            validator: Checks add-form input for required fields
        """
        self._storage = storage
        self._storage_key = storage_key
        self._logger = event_logger or EventLogger()
        self._ids = id_generator or IdGenerator()
        self._validator = validator or SubscriptionValidator()

        self._records: list[Subscription] = []
        self._has_loaded = False
        self._generation = 0
        self._pending_saves: set[asyncio.Task] = set()

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    def all(self) -> list[Subscription]:
        """Snapshot of the ledger in insertion order."""
        return list(self._records)

    def ids(self) -> list[Any]:
        return [record.id for record in self._records]

    def get(self, subscription_id: Any) -> Optional[Subscription]:
        for record in self._records:
            if record.id == subscription_id:
                return record
        return None

    @property
    def count(self) -> int:
        return len(self._records)

    def __len__(self) -> int:
        return len(self._records)

    @property
    def has_loaded(self) -> bool:
        return self._has_loaded

    @property
    def id_generator(self) -> IdGenerator:
        return self._ids

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add(
        self,
        payload: Union[SubscriptionInput, Mapping[str, Any]],
    ) -> Optional[Subscription]:
        """
        Append a new subscription.

        Name, cost and next billing date are required. If any is empty, or
        a mapping payload does not fit the form, the call does nothing and
        returns None; the skipped add is logged.

        Returns:
            The stored subscription with its newly assigned ID, or None
        """
        if not isinstance(payload, SubscriptionInput):
            try:
                payload = SubscriptionInput.model_validate(payload)
            except ValidationError as e:
                self._logger.log_validation_skipped(
                    [".".join(str(part) for part in error["loc"]) for error in e.errors()]
                )
                return None

        fields = payload.model_dump(by_alias=True)
        result = self._validator.validate(fields)
        missing = [issue.field for issue in result.issues if issue.issue_type == "missing"]
        if missing:
            self._logger.log_validation_skipped(missing)
            return None

        subscription = Subscription(id=self._ids.next_id(set(self.ids())), **fields)
        self._records.append(subscription)

        self._logger.log_subscription_added(
            subscription_id=subscription.id,
            name=payload.name,
            cost=payload.cost,
            billing_cycle=payload.billing_cycle,
        )
        self._schedule_save()
        return subscription

    def remove(self, subscription_id: Any) -> bool:
        """
        Delete the subscription with this ID.

        Returns:
            True if a record was removed. An unknown ID is not an error.
        """
        remaining = [record for record in self._records if record.id != subscription_id]
        if len(remaining) == len(self._records):
            return False

        self._records = remaining
        self._logger.log_subscription_removed(subscription_id)
        self._schedule_save()
        return True

    def replace(self, records: list[Subscription]) -> None:
        """
        Swap the entire ledger for another list of records.

        Raises:
            ValueError: If two records share an ID
        """
        seen = set()
        for record in records:
            if record.id in seen:
                raise ValueError(f"Duplicate subscription id: {record.id!r}")
            seen.add(record.id)

        self._records = list(records)
        self._ids.observe(seen)
        self._schedule_save()

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    async def load(self) -> None:
        """
        Read the saved ledger. Call once at startup.

        Nothing saved yet, or a failed read, leaves the ledger as it is.
        Saving is enabled afterwards in every case.
        """
        try:
            if self._storage is None:
                value = None
            else:
                value = await self._storage.get(self._storage_key)

            if value is None:
                self._logger.log_ledger_loaded(record_count=0, found=False)
            else:
                records, _ = read_backup(value, id_generator=self._ids)
                self._records = records
                self._ids.observe(self.ids())
                self._logger.log_ledger_loaded(record_count=len(records), found=True)
        except Exception as e:
            self._logger.log_load_failed(str(e))
        finally:
            self._has_loaded = True

    async def flush(self) -> None:
        """Wait for every queued save to finish."""
        while self._pending_saves:
            await asyncio.gather(*list(self._pending_saves))

    def _schedule_save(self) -> None:
        if not self._has_loaded or self._storage is None:
            return

        self._generation += 1
        save = self._save(serialize_ledger(self._records), len(self._records), self._generation)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(save)
            return

        task = loop.create_task(save)
        self._pending_saves.add(task)
        task.add_done_callback(self._pending_saves.discard)

    async def _save(self, snapshot: str, record_count: int, generation: int) -> None:
        if generation != self._generation:
            # A newer snapshot is queued behind this one
            return

        try:
            await self._storage.set(self._storage_key, snapshot)
            self._logger.log_ledger_saved(record_count)
        except Exception as e:
            self._logger.log_save_failed(str(e))
