"""
Ledger Event Models for SubTrackr

Every significant action on the ledger is recorded as an event.
This provides:
1. Traceability of adds, deletes, imports and exports
2. Debugging information when persistence goes wrong
3. A single place that names every failure the ledger recovers from

DESIGN DECISION: Recoverable failures (an incomplete form, a failed save)
are events, not exceptions. Only a rejected backup import is raised
to the caller.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class LedgerEventType(str, Enum):
    """Types of events we log."""
    # Ledger mutations
    SUBSCRIPTION_ADDED = "subscription_added"
    SUBSCRIPTION_REMOVED = "subscription_removed"
    VALIDATION_SKIPPED = "validation_skipped"

    # Persistence
    LEDGER_LOADED = "ledger_loaded"
    PERSISTENCE_LOAD_FAILED = "persistence_load_failed"
    LEDGER_SAVED = "ledger_saved"
    PERSISTENCE_SAVE_FAILED = "persistence_save_failed"

    # Backups
    BACKUP_EXPORTED = "backup_exported"
    BACKUP_IMPORTED = "backup_imported"
    IMPORT_REJECTED = "import_rejected"


class EventSeverity(str, Enum):
    """Severity level for ledger events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LedgerEvent(BaseModel):
    """
    A single ledger event.

    Every add, delete, load, save, import and export creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred (local time)"
    )

    # Event classification
    event_type: LedgerEventType = Field(
        ...,
        description="Type of event"
    )
    severity: EventSeverity = Field(
        default=EventSeverity.INFO,
        description="Event severity"
    )

    # Which subscription is this about, if any
    subscription_id: Optional[str] = Field(
        default=None,
        description="ID of the subscription this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "subscription_id": self.subscription_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class LedgerEventBuilder:
    """
    Helper class to build ledger events with common patterns.

    Usage:
        event = LedgerEventBuilder.subscription_added(subscription_id, name)
        event = LedgerEventBuilder.save_failed(error_message)
    """

    @staticmethod
    def subscription_added(
        subscription_id: Any,
        name: str,
        cost: Any,
        billing_cycle: str,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.SUBSCRIPTION_ADDED,
            subscription_id=str(subscription_id),
            description=f"Subscription added: {name}",
            details={
                "name": name,
                "cost": str(cost),
                "billing_cycle": billing_cycle,
            },
            is_user_action=True,
        )

    @staticmethod
    def subscription_removed(subscription_id: Any) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.SUBSCRIPTION_REMOVED,
            subscription_id=str(subscription_id),
            description="Subscription removed",
            is_user_action=True,
        )

    @staticmethod
    def validation_skipped(missing_fields: list[str]) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.VALIDATION_SKIPPED,
            severity=EventSeverity.WARNING,
            description=f"Add skipped, missing: {', '.join(missing_fields)}",
            details={
                "missing_fields": missing_fields,
            },
            is_user_action=True,
        )

    @staticmethod
    def ledger_loaded(record_count: int, found: bool) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.LEDGER_LOADED,
            description=(
                f"Loaded {record_count} subscriptions"
                if found
                else "No saved subscriptions yet"
            ),
            details={
                "record_count": record_count,
                "found": found,
            },
        )

    @staticmethod
    def load_failed(error_message: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.PERSISTENCE_LOAD_FAILED,
            severity=EventSeverity.WARNING,
            description="Could not load saved subscriptions, starting empty",
            error_message=error_message,
        )

    @staticmethod
    def ledger_saved(record_count: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.LEDGER_SAVED,
            severity=EventSeverity.DEBUG,
            description=f"Saved {record_count} subscriptions",
            details={
                "record_count": record_count,
            },
        )

    @staticmethod
    def save_failed(error_message: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.PERSISTENCE_SAVE_FAILED,
            severity=EventSeverity.ERROR,
            description="Error saving subscriptions",
            error_message=error_message,
        )

    @staticmethod
    def backup_exported(record_count: int, size_bytes: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.BACKUP_EXPORTED,
            description=f"Backup exported with {record_count} subscriptions",
            details={
                "record_count": record_count,
                "size_bytes": size_bytes,
            },
            is_user_action=True,
        )

    @staticmethod
    def backup_imported(record_count: int, ids_assigned: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.BACKUP_IMPORTED,
            description=f"Backup imported with {record_count} subscriptions",
            details={
                "record_count": record_count,
                "ids_assigned": ids_assigned,
            },
            is_user_action=True,
        )

    @staticmethod
    def import_rejected(reason: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.IMPORT_REJECTED,
            severity=EventSeverity.WARNING,
            description="Invalid backup file",
            error_message=reason,
            is_user_action=True,
        )
