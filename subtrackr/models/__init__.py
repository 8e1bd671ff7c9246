"""
Data Models Package

This package contains all Pydantic models used in SubTrackr.
All data flowing through the ledger must conform to these schemas.
"""

from subtrackr.models.subscription import (
    CATEGORY_DISPLAY,
    BillingCycle,
    Category,
    CostValue,
    DueLabel,
    SpendingSummary,
    Subscription,
    SubscriptionId,
    SubscriptionInput,
    Urgency,
    ValidationIssue,
    ValidationResult,
)
from subtrackr.models.events import (
    EventSeverity,
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventType,
)

__all__ = [
    # Subscription models
    "CATEGORY_DISPLAY",
    "BillingCycle",
    "Category",
    "CostValue",
    "DueLabel",
    "SpendingSummary",
    "Subscription",
    "SubscriptionId",
    "SubscriptionInput",
    "Urgency",
    "ValidationIssue",
    "ValidationResult",
    # Event models
    "EventSeverity",
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerEventType",
]
