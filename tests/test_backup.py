"""Tests for backup export and import."""

import json

import pytest

from subtrackr.backup import (
    InvalidBackup,
    backup_filename,
    export_ledger,
    import_ledger,
    read_backup,
    serialize_ledger,
)
from subtrackr.models.subscription import Subscription


def netflix(id=1):
    return Subscription.from_record({
        "id": id,
        "name": "Netflix",
        "cost": "15.49",
        "billingCycle": "monthly",
        "nextBilling": "2024-07-01",
        "category": "entertainment",
    })


class TestExport:
    """Tests for writing backups."""

    def test_filename(self):
        assert backup_filename("SubTrackr") == "subtrackr-backup.json"

    def test_export_is_indented_utf8_json_array(self):
        data = export_ledger([netflix()])
        text = data.decode("utf-8")
        assert text.startswith("[\n  {")
        assert json.loads(text)[0]["billingCycle"] == "monthly"

    def test_export_keeps_non_ascii(self):
        sub = Subscription.from_record({"id": 1, "name": "Café Plus"})
        assert "Café Plus".encode("utf-8") in export_ledger([sub])

    def test_stored_form_is_compact(self):
        assert serialize_ledger([Subscription.from_record({"id": 1})]) == '[{"id":1}]'

    def test_empty_ledger(self):
        assert json.loads(export_ledger([])) == []


class TestImport:
    """Tests for reading backups."""

    def test_round_trip(self, id_generator):
        """Test export followed by import gives back the same records."""
        original = [netflix(1), netflix(2)]
        records = import_ledger(export_ledger(original), id_generator=id_generator)
        assert [r.to_record() for r in records] == [r.to_record() for r in original]

    def test_round_trip_keeps_unknown_fields(self, id_generator):
        data = b'[{"id": 5, "name": "Old", "notes": "legacy", "cost": 3}]'
        records = import_ledger(data, id_generator=id_generator)
        assert records[0].to_record() == {"id": 5, "name": "Old", "notes": "legacy", "cost": 3}

    @pytest.mark.parametrize("data", [b"", ""])
    def test_empty_input_is_empty_ledger(self, data, id_generator):
        assert import_ledger(data, id_generator=id_generator) == []

    @pytest.mark.parametrize("data", [b"{}", b'"text"', b"42", b"null"])
    def test_non_array_rejected(self, data):
        with pytest.raises(InvalidBackup, match="array"):
            import_ledger(data)

    def test_not_json_rejected(self):
        with pytest.raises(InvalidBackup, match="not valid JSON"):
            import_ledger(b"[{oops")

    def test_not_utf8_rejected(self):
        with pytest.raises(InvalidBackup, match="UTF-8"):
            import_ledger(b"\xff\xfe\x00[")

    def test_utf8_bom_accepted(self, id_generator):
        data = "\ufeff[]".encode("utf-8")
        assert import_ledger(data, id_generator=id_generator) == []

    def test_missing_ids_assigned(self, id_generator):
        """Test records without an id get fresh, unique ids."""
        data = b'[{"name": "A"}, {"id": null, "name": "B"}, {"name": "C"}]'
        records, assigned = read_backup(data, id_generator=id_generator)
        ids = [r.id for r in records]
        assert assigned == 3
        assert len(set(ids)) == 3
        assert all(isinstance(i, int) for i in ids)

    def test_assigned_ids_avoid_batch_and_reserved(self, id_generator):
        taken_now = 1_700_000_000_000
        data = json.dumps([{"id": taken_now}, {"name": "new"}]).encode()
        records, assigned = read_backup(
            data,
            reserved_ids=[taken_now + 1],
            id_generator=id_generator,
        )
        assert assigned == 1
        assert records[0].id == taken_now
        assert records[1].id not in (taken_now, taken_now + 1)

    def test_duplicate_ids_reassigned(self, id_generator):
        """Test later duplicates in a batch get new ids; the first keeps its id."""
        data = b'[{"id": 9, "name": "A"}, {"id": 9, "name": "B"}]'
        records, assigned = read_backup(data, id_generator=id_generator)
        assert assigned == 1
        assert records[0].id == 9
        assert records[1].id != 9
        assert records[1].name == "B"

    def test_non_object_elements_become_id_only_records(self, id_generator):
        records, assigned = read_backup(b'[1, "x", null]', id_generator=id_generator)
        assert assigned == 3
        assert all(set(r.to_record()) == {"id"} for r in records)

    def test_unusable_ids_replaced(self, id_generator):
        records, assigned = read_backup(
            b'[{"id": true}, {"id": [1]}, {"id": "abc"}, {"id": 1.5}]',
            id_generator=id_generator,
        )
        assert assigned == 2
        assert records[2].id == "abc"
        assert records[3].id == 1.5

    def test_lenient_mode_keeps_bad_fields(self, id_generator):
        data = b'[{"id": 1, "name": "", "cost": "abc", "billingCycle": "weekly"}]'
        records = import_ledger(data, id_generator=id_generator)
        assert records[0].cost == "abc"

    def test_strict_mode_rejects_bad_records(self, id_generator):
        data = b'[{"id": 1, "name": "A", "cost": "abc", "nextBilling": "2024-07-01"}]'
        with pytest.raises(InvalidBackup) as exc_info:
            import_ledger(data, strict=True, id_generator=id_generator)
        assert exc_info.value.problems
        assert exc_info.value.problems[0].startswith("Record 1:")

    def test_strict_mode_counts_every_error(self, id_generator):
        data = json.dumps([
            {"id": 1, "name": "A", "cost": "abc", "nextBilling": "never", "billingCycle": "monthly"},
            {"id": 2, "name": "B", "cost": "1", "nextBilling": "2024-07-01", "billingCycle": "monthly"},
            {"id": 3, "cost": "1", "nextBilling": "2024-07-01", "billingCycle": "monthly"},
        ]).encode()
        with pytest.raises(InvalidBackup, match="3 invalid field"):
            import_ledger(data, strict=True, id_generator=id_generator)

    def test_strict_mode_accepts_good_records(self, id_generator):
        records = import_ledger(
            export_ledger([netflix()]),
            strict=True,
            id_generator=id_generator,
        )
        assert len(records) == 1
