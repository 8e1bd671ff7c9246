"""
Ledger Event Logger

DESIGN DECISION: Every significant ledger action is logged as a structured
event. This provides:
1. Traceability of what the user added, deleted, imported and exported
2. A record of persistence failures, which are never shown to the user
3. Debugging capability

The event logger maps event severity to the log level.
"""

from typing import Any

import structlog

from subtrackr.models.events import EventSeverity, LedgerEvent, LedgerEventBuilder


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class EventLogger:
    """
    Central ledger event logging service.

    Writes every event to the structured local log.
    """

    def __init__(self, name: str = "subtrackr"):
        self._logger = structlog.get_logger(name)

    def log(self, event: LedgerEvent) -> None:
        """Log a ledger event at the level matching its severity."""
        log_dict = event.to_log_dict()

        if event.severity == EventSeverity.ERROR:
            self._logger.error("ledger_event", **log_dict)
        elif event.severity == EventSeverity.WARNING:
            self._logger.warning("ledger_event", **log_dict)
        elif event.severity == EventSeverity.DEBUG:
            self._logger.debug("ledger_event", **log_dict)
        else:
            self._logger.info("ledger_event", **log_dict)

    def log_subscription_added(
        self,
        subscription_id: Any,
        name: str,
        cost: Any,
        billing_cycle: str,
    ) -> None:
        """Log a new subscription."""
        self.log(LedgerEventBuilder.subscription_added(
            subscription_id=subscription_id,
            name=name,
            cost=cost,
            billing_cycle=billing_cycle,
        ))

    def log_subscription_removed(self, subscription_id: Any) -> None:
        """Log a deleted subscription."""
        self.log(LedgerEventBuilder.subscription_removed(subscription_id))

    def log_validation_skipped(self, missing_fields: list[str]) -> None:
        """Log an add that was ignored because the form was incomplete."""
        self.log(LedgerEventBuilder.validation_skipped(missing_fields))

    def log_ledger_loaded(self, record_count: int, found: bool) -> None:
        self.log(LedgerEventBuilder.ledger_loaded(record_count, found))

    def log_load_failed(self, error_message: str) -> None:
        self.log(LedgerEventBuilder.load_failed(error_message))

    def log_ledger_saved(self, record_count: int) -> None:
        self.log(LedgerEventBuilder.ledger_saved(record_count))

    def log_save_failed(self, error_message: str) -> None:
        self.log(LedgerEventBuilder.save_failed(error_message))

    def log_backup_exported(self, record_count: int, size_bytes: int) -> None:
        self.log(LedgerEventBuilder.backup_exported(record_count, size_bytes))

    def log_backup_imported(self, record_count: int, ids_assigned: int) -> None:
        self.log(LedgerEventBuilder.backup_imported(record_count, ids_assigned))

    def log_import_rejected(self, reason: str) -> None:
        """Log a backup file that was refused."""
        self.log(LedgerEventBuilder.import_rejected(reason))
