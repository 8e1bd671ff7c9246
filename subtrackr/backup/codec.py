"""
Backup Export / Import

The backup file is a UTF-8 JSON array of subscription objects:

    [
      {
        "id": 1718000000000,
        "name": "Netflix",
        "cost": "15.49",
        "billingCycle": "monthly",
        "nextBilling": "2024-07-01",
        "category": "entertainment"
      }
    ]

The same serialization (without indentation) is what gets stored under the
ledger's storage key.

DESIGN DECISION: Import is all-or-nothing. Either the whole file is
accepted and replaces the ledger, or InvalidBackup is raised and nothing
changes. Only the top-level shape is checked by default; individual records
are kept verbatim, exactly like the ledger keeps them. Strict mode also runs
every record through the validator.
"""

import json
import math
from typing import Any, Iterable, Optional, Union

from subtrackr.ids import IdGenerator
from subtrackr.models.subscription import Subscription
from subtrackr.validation import SubscriptionValidator


class BackupError(Exception):
    """Base exception for backup operations."""
    pass


class InvalidBackup(BackupError):
    """The backup content was rejected. The ledger has not been touched."""

    def __init__(self, message: str, problems: Optional[list[str]] = None):
        super().__init__(message)
        self.problems = problems or []


def backup_filename(app_name: str) -> str:
    """Default download name for a backup, e.g. 'subtrackr-backup.json'."""
    return f"{app_name.lower()}-backup.json"


def serialize_ledger(
    records: Iterable[Subscription],
    indent: Optional[int] = None,
) -> str:
    """
    Serialize the ledger to JSON text.

    Without an indent the output is compact, which is what is persisted.
    """
    payload = [record.to_record() for record in records]
    if indent is None:
        return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    return json.dumps(payload, ensure_ascii=False, indent=indent)


def export_ledger(records: Iterable[Subscription]) -> bytes:
    """Backup file content for the given records."""
    return serialize_ledger(records, indent=2).encode("utf-8")


def _is_usable_id(value: Any) -> bool:
    """Strings and finite numbers can be IDs. Anything else gets replaced."""
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return math.isfinite(value)
    return isinstance(value, (int, str))


def build_records(
    elements: list[Any],
    reserved_ids: Iterable[Any] = (),
    strict: bool = False,
    id_generator: Optional[IdGenerator] = None,
    validator: Optional[SubscriptionValidator] = None,
) -> tuple[list[Subscription], int]:
    """
    Turn decoded JSON elements into ledger records.

    Records keep their own ID. A fresh ID is assigned when the ID is missing,
    not a string or number, or repeats one used earlier in the same batch.
    Fresh IDs never collide with any ID in the batch or in reserved_ids.

    Returns:
        (records, number_of_ids_assigned)

    Raises:
        InvalidBackup: In strict mode, if any record fails validation
    """
    ids = id_generator or IdGenerator()
    validator = validator or SubscriptionValidator()

    raw_records = [dict(element) if isinstance(element, dict) else {} for element in elements]

    if strict:
        problems = []
        error_count = 0
        for position, record in enumerate(raw_records, start=1):
            result = validator.validate(record, strict=True)
            if not result.has_errors:
                continue
            error_count += result.error_count
            for issue in result.issues:
                if issue.severity == "error":
                    problems.append(f"Record {position}: {issue.message}")
        if error_count:
            raise InvalidBackup(
                f"Backup has {error_count} invalid field(s)",
                problems=problems,
            )

    taken = set(reserved_ids)
    taken.update(record["id"] for record in raw_records if _is_usable_id(record.get("id")))
    ids.observe(taken)

    seen = set()
    assigned = 0
    records = []
    for record in raw_records:
        current = record.get("id")
        if not _is_usable_id(current) or current in seen:
            record["id"] = ids.next_id(taken)
            taken.add(record["id"])
            assigned += 1
        seen.add(record["id"])
        records.append(Subscription.from_record(record))

    return records, assigned


def read_backup(
    data: Union[bytes, str],
    reserved_ids: Iterable[Any] = (),
    strict: bool = False,
    id_generator: Optional[IdGenerator] = None,
    validator: Optional[SubscriptionValidator] = None,
) -> tuple[list[Subscription], int]:
    """
    Decode backup (or stored) content.

    An empty file reads as an empty ledger.

    Returns:
        (records, number_of_ids_assigned)

    Raises:
        InvalidBackup: Content is not UTF-8, not JSON, or not a JSON array
    """
    if isinstance(data, bytes):
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise InvalidBackup(f"Backup is not UTF-8 text: {e}") from e
    else:
        text = data

    try:
        parsed = json.loads(text or "[]")
    except ValueError as e:
        raise InvalidBackup(f"Backup is not valid JSON: {e}") from e

    if not isinstance(parsed, list):
        raise InvalidBackup("Backup must be an array")

    return build_records(
        parsed,
        reserved_ids=reserved_ids,
        strict=strict,
        id_generator=id_generator,
        validator=validator,
    )


def import_ledger(
    data: Union[bytes, str],
    reserved_ids: Iterable[Any] = (),
    strict: bool = False,
    id_generator: Optional[IdGenerator] = None,
) -> list[Subscription]:
    """Records contained in a backup file. See read_backup."""
    records, _ = read_backup(
        data,
        reserved_ids=reserved_ids,
        strict=strict,
        id_generator=id_generator,
    )
    return records
