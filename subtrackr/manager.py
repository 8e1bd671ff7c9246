"""
Subscription Manager

This module ties the ledger, the backup codec and the reports together
behind the operations the UI triggers:
1. Add / delete a subscription
2. Export / import a backup file
3. Totals, upcoming renewals and due labels

DESIGN DECISION: The manager holds no state of its own apart from the
ledger. Every total and every renewal list is recomputed from the ledger
on each call.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from subtrackr.audit import EventLogger
from subtrackr.backup import InvalidBackup, backup_filename, export_ledger, read_backup
from subtrackr.config import AppSettings, get_settings
from subtrackr.ledger import LedgerStore
from subtrackr.models.subscription import (
    DueLabel,
    SpendingSummary,
    Subscription,
    SubscriptionInput,
)
from subtrackr.reports import (
    annual_equivalent,
    due_label,
    monthly_total,
    start_of_today,
    upcoming_renewals,
    yearly_total,
)
from subtrackr.services.storage import (
    GoogleSheetsKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
)


class SubscriptionManager:
    """
    Entry point for every user-triggered ledger operation.

    Call load() once before anything else so saved data is not overwritten.
    """

    def __init__(
        self,
        storage: Optional[KeyValueStore] = None,
        settings: Optional[AppSettings] = None,
        event_logger: Optional[EventLogger] = None,
        ledger: Optional[LedgerStore] = None,
        today: Optional[date] = None,
    ):
        """
        Args:
            storage: Where the ledger is persisted. None keeps it in memory only.
            settings: Application settings. Loaded from the environment if None.
            event_logger: Shared event logger
            ledger: Pre-built ledger (tests). Built from storage if None.
            today: Fixed "today" for date calculations (tests). Real date if None.
        """
        self._settings = settings or get_settings().app
        self._event_logger = event_logger or EventLogger()
        self._ledger = ledger or LedgerStore(
            storage=storage,
            storage_key=self._settings.storage_key,
            event_logger=self._event_logger,
        )
        self._today = today

    @property
    def ledger(self) -> LedgerStore:
        return self._ledger

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @property
    def backup_filename(self) -> str:
        return backup_filename(self._settings.app_name)

    def _current_day(self) -> date:
        return self._today or start_of_today()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def load(self) -> None:
        await self._ledger.load()

    async def flush(self) -> None:
        await self._ledger.flush()

    # -------------------------------------------------------------------------
    # Ledger edits
    # -------------------------------------------------------------------------

    def add_subscription(
        self,
        payload: Union[SubscriptionInput, Mapping[str, Any]],
    ) -> Optional[Subscription]:
        """Add a subscription. Returns None if a required field was empty."""
        return self._ledger.add(payload)

    def delete_subscription(self, subscription_id: Any) -> bool:
        return self._ledger.remove(subscription_id)

    def list_subscriptions(self) -> list[Subscription]:
        return self._ledger.all()

    # -------------------------------------------------------------------------
    # Backup
    # -------------------------------------------------------------------------

    def export_data(self) -> bytes:
        """Backup file content for the whole ledger."""
        records = self._ledger.all()
        data = export_ledger(records)
        self._event_logger.log_backup_exported(len(records), len(data))
        return data

    def import_data(self, data: Union[bytes, str]) -> list[Subscription]:
        """
        Replace the whole ledger with the contents of a backup file.

        Returns:
            The imported records

        Raises:
            InvalidBackup: The file was rejected; the ledger is unchanged
        """
        try:
            records, assigned = read_backup(
                data,
                reserved_ids=self._ledger.ids(),
                strict=self._settings.strict_import,
                id_generator=self._ledger.id_generator,
            )
        except InvalidBackup as e:
            self._event_logger.log_import_rejected(str(e))
            raise

        self._ledger.replace(records)
        self._event_logger.log_backup_imported(len(records), assigned)
        return records

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    def get_monthly_total(self) -> Decimal:
        return monthly_total(self._ledger.all())

    def get_yearly_total(self) -> Decimal:
        return yearly_total(self._ledger.all())

    def get_annual_equivalent(self, subscription: Subscription) -> Decimal:
        return annual_equivalent(subscription)

    def get_upcoming_renewals(self, horizon_days: Optional[int] = None) -> list[Subscription]:
        """Renewals within the configured horizon, earliest first."""
        if horizon_days is None:
            horizon_days = self._settings.renewal_horizon_days
        return upcoming_renewals(
            self._ledger.all(),
            horizon_days=horizon_days,
            today=self._current_day(),
        )

    def get_due_label(self, next_billing: Any) -> Optional[DueLabel]:
        return due_label(next_billing, today=self._current_day())

    def get_summary(self) -> SpendingSummary:
        """Headline numbers for the dashboard."""
        return SpendingSummary(
            monthly_total=self.get_monthly_total(),
            yearly_total=self.get_yearly_total(),
            subscription_count=self._ledger.count,
            upcoming_count=len(self.get_upcoming_renewals()),
        )


def create_storage(settings: Optional[AppSettings] = None) -> KeyValueStore:
    """
    Build the storage backend selected in settings.

    Google Sheets credentials are read from the GOOGLE_SHEETS_* environment.
    """
    settings = settings or get_settings().app

    if settings.storage_backend == "google_sheets":
        return GoogleSheetsKeyValueStore()
    if settings.storage_backend == "file":
        return JsonFileKeyValueStore(settings.data_file_path)
    return MemoryKeyValueStore()


def create_manager(
    storage: Optional[KeyValueStore] = None,
    settings: Optional[AppSettings] = None,
) -> SubscriptionManager:
    """
    Factory function to create a manager wired to the configured storage.

    The returned manager has not loaded yet; await manager.load().
    """
    settings = settings or get_settings().app
    if storage is None:
        storage = create_storage(settings)
    return SubscriptionManager(storage=storage, settings=settings)
