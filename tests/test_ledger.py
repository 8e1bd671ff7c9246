"""
Tests for the ledger store.

Persistence is exercised against in-memory stores. Async methods are
driven with asyncio.run.
"""

import asyncio
import json

import pytest
from structlog.testing import capture_logs

from subtrackr.ledger import LedgerStore
from subtrackr.models.subscription import Subscription, SubscriptionInput

from conftest import FIXED_MS, RecordingStore


def netflix(**overrides):
    fields = dict(name="Netflix", cost="15.49", next_billing="2024-07-01")
    fields.update(overrides)
    return SubscriptionInput(**fields)


def loaded(storage, id_generator, **kwargs) -> LedgerStore:
    ledger = LedgerStore(storage, id_generator=id_generator, **kwargs)
    asyncio.run(ledger.load())
    return ledger


def event_types(logs) -> list[str]:
    return [entry["event_type"] for entry in logs if "event_type" in entry]


def stored(storage, key="subscriptions") -> list[dict]:
    return json.loads(asyncio.run(storage.get(key)))


class TestAdd:
    """Tests for adding subscriptions."""

    def test_add_assigns_id_and_appends(self, store, id_generator):
        ledger = loaded(store, id_generator)
        added = ledger.add(netflix())

        assert added.id == FIXED_MS
        assert added.name == "Netflix"
        assert ledger.all() == [added]

    def test_add_saves_whole_ledger(self, store, id_generator):
        ledger = loaded(store, id_generator)
        ledger.add(netflix())
        ledger.add(netflix(name="Spotify"))

        assert [r["name"] for r in stored(store)] == ["Netflix", "Spotify"]
        assert stored(store)[0] == {
            "id": FIXED_MS,
            "name": "Netflix",
            "cost": "15.49",
            "billingCycle": "monthly",
            "nextBilling": "2024-07-01",
            "category": "entertainment",
        }

    def test_ids_are_unique_within_one_millisecond(self, store, id_generator):
        """Test a frozen clock still yields distinct ids."""
        ledger = loaded(store, id_generator)
        ids = [ledger.add(netflix()).id for _ in range(5)]
        assert ids == sorted(set(ids))

    def test_add_accepts_plain_mapping(self, store, id_generator):
        ledger = loaded(store, id_generator)
        added = ledger.add({
            "name": "Gym",
            "cost": "30",
            "billingCycle": "yearly",
            "nextBilling": "2024-09-01",
        })
        assert added.billing_cycle == "yearly"
        assert added.category == "entertainment"

    @pytest.mark.parametrize("missing", ["name", "cost", "next_billing"])
    def test_incomplete_add_is_ignored(self, missing, store, id_generator):
        """Test a missing required field changes nothing and is logged."""
        with capture_logs() as logs:
            ledger = loaded(store, id_generator)
            result = ledger.add(netflix(**{missing: ""}))

        assert result is None
        assert len(ledger) == 0
        assert store.writes == []
        assert "validation_skipped" in event_types(logs)

    @pytest.mark.parametrize("payload", [
        {"name": None, "cost": "5", "nextBilling": "2024-01-01"},
        {"name": "Gym", "cost": None, "nextBilling": "2024-01-01"},
        {"name": "Gym", "cost": "5", "nextBilling": None},
    ])
    def test_mapping_with_none_is_ignored(self, payload, store, id_generator):
        """Test a cleared required field is a skipped add, not an error."""
        with capture_logs() as logs:
            ledger = loaded(store, id_generator)
            result = ledger.add(payload)

        assert result is None
        assert len(ledger) == 0
        assert store.writes == []
        assert "validation_skipped" in event_types(logs)

    def test_mapping_of_wrong_types_is_ignored(self, store, id_generator):
        with capture_logs() as logs:
            ledger = loaded(store, id_generator)
            result = ledger.add({"name": ["Gym"], "cost": "5", "nextBilling": "2024-01-01"})

        assert result is None
        skipped = [e for e in logs if e.get("event_type") == "validation_skipped"]
        assert skipped[0]["details"]["missing_fields"] == ["name"]

    def test_add_logs_event(self, store, id_generator):
        with capture_logs() as logs:
            ledger = loaded(store, id_generator)
            ledger.add(netflix())

        added = [e for e in logs if e.get("event_type") == "subscription_added"]
        assert added[0]["subscription_id"] == str(FIXED_MS)
        assert added[0]["log_level"] == "info"


class TestRemove:
    """Tests for deleting subscriptions."""

    def test_remove_existing(self, store, id_generator):
        ledger = loaded(store, id_generator)
        first = ledger.add(netflix())
        second = ledger.add(netflix(name="Spotify"))

        assert ledger.remove(first.id) is True
        assert ledger.all() == [second]
        assert [r["id"] for r in stored(store)] == [second.id]

    def test_add_then_remove_restores_ids(self, store, id_generator):
        ledger = loaded(store, id_generator)
        ledger.add(netflix())
        before = ledger.ids()

        added = ledger.add(netflix(name="Spotify"))
        ledger.remove(added.id)
        assert ledger.ids() == before

    def test_remove_unknown_is_noop(self, store, id_generator):
        ledger = loaded(store, id_generator)
        ledger.add(netflix())
        writes_before = len(store.writes)

        assert ledger.remove(12345) is False
        assert len(ledger) == 1
        assert len(store.writes) == writes_before


class TestReading:
    """Tests for read access."""

    def test_all_returns_copy(self, store, id_generator):
        ledger = loaded(store, id_generator)
        ledger.add(netflix())
        snapshot = ledger.all()
        snapshot.clear()
        assert ledger.count == 1

    def test_get_by_id(self, store, id_generator):
        ledger = loaded(store, id_generator)
        added = ledger.add(netflix())
        assert ledger.get(added.id) is added
        assert ledger.get("missing") is None


class TestReplace:
    """Tests for whole-ledger replacement."""

    def test_replace_saves(self, store, id_generator):
        ledger = loaded(store, id_generator)
        ledger.replace([Subscription.from_record({"id": "a", "name": "A"})])
        assert stored(store) == [{"id": "a", "name": "A"}]

    def test_replace_rejects_duplicate_ids(self, store, id_generator):
        ledger = loaded(store, id_generator)
        with pytest.raises(ValueError, match="Duplicate"):
            ledger.replace([
                Subscription.from_record({"id": 1}),
                Subscription.from_record({"id": 1}),
            ])

    def test_new_ids_follow_replaced_ids(self, store, id_generator):
        """Test an id newer than the clock is never handed out twice."""
        ledger = loaded(store, id_generator)
        ledger.replace([Subscription.from_record({"id": FIXED_MS + 100})])
        assert ledger.add(netflix()).id == FIXED_MS + 101


class TestLoad:
    """Tests for the startup load."""

    def test_load_existing_snapshot(self, id_generator):
        store = RecordingStore({"subscriptions": '[{"id":5,"name":"A","cost":"1"}]'})
        ledger = loaded(store, id_generator)

        assert ledger.has_loaded
        assert [r.to_record() for r in ledger.all()] == [{"id": 5, "name": "A", "cost": "1"}]

    def test_load_nothing_saved(self, store, id_generator):
        with capture_logs() as logs:
            ledger = loaded(store, id_generator)
        assert ledger.has_loaded
        assert len(ledger) == 0
        assert "ledger_loaded" in event_types(logs)

    def test_load_failure_starts_empty(self, broken_store, id_generator):
        with capture_logs() as logs:
            ledger = loaded(broken_store, id_generator)

        assert ledger.has_loaded
        assert len(ledger) == 0
        failed = [e for e in logs if e.get("event_type") == "persistence_load_failed"]
        assert failed[0]["error_message"] == "disk on fire"

    def test_load_garbage_starts_empty(self, id_generator):
        store = RecordingStore({"subscriptions": "{}"})
        with capture_logs() as logs:
            ledger = loaded(store, id_generator)

        assert ledger.has_loaded
        assert len(ledger) == 0
        assert "persistence_load_failed" in event_types(logs)

    def test_custom_storage_key(self, store, id_generator):
        ledger = loaded(store, id_generator, storage_key="subs-v2")
        ledger.add(netflix())
        assert store.writes[0][0] == "subs-v2"


class TestPersistence:
    """Tests for save scheduling."""

    def test_no_save_before_load(self, id_generator):
        """Test changes made before load never overwrite saved data."""
        store = RecordingStore({"subscriptions": '[{"id":1,"name":"Saved"}]'})
        ledger = LedgerStore(store, id_generator=id_generator)

        ledger.add(netflix())
        assert store.writes == []
        assert stored(store) == [{"id": 1, "name": "Saved"}]

    def test_save_failure_is_logged_not_raised(self, broken_store, id_generator):
        with capture_logs() as logs:
            ledger = loaded(broken_store, id_generator)
            added = ledger.add(netflix())

        assert added is not None
        assert len(ledger) == 1
        failed = [e for e in logs if e.get("event_type") == "persistence_save_failed"]
        assert failed[0]["log_level"] == "error"

    def test_superseded_saves_are_skipped(self, store, id_generator):
        """Test only the newest snapshot is written when saves pile up."""
        async def scenario():
            ledger = LedgerStore(store, id_generator=id_generator)
            await ledger.load()
            ledger.add(netflix())
            ledger.add(netflix(name="Spotify"))
            ledger.add(netflix(name="Gym"))
            await ledger.flush()

        asyncio.run(scenario())

        assert len(store.writes) == 1
        assert [r["name"] for r in json.loads(store.writes[0][1])] == ["Netflix", "Spotify", "Gym"]

    def test_saves_in_running_loop_are_background_tasks(self, store, id_generator):
        async def scenario():
            ledger = LedgerStore(store, id_generator=id_generator)
            await ledger.load()
            ledger.add(netflix())
            before_flush = len(store.writes)
            await ledger.flush()
            return before_flush

        assert asyncio.run(scenario()) == 0
        assert len(store.writes) == 1

    def test_without_storage_nothing_is_saved(self, id_generator):
        ledger = LedgerStore(id_generator=id_generator)
        asyncio.run(ledger.load())
        assert ledger.add(netflix()) is not None
        asyncio.run(ledger.flush())
