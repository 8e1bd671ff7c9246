"""
Renewal Scheduling

Finds the renewals coming up soon and labels how pressing each one is.
Records without a usable next billing date are left out entirely; they are
never sorted to the front or the back of the list.
"""

from datetime import date, timedelta
from typing import Any, Iterable, Optional

from subtrackr.models.subscription import DueLabel, Subscription, Urgency
from subtrackr.reports.dates import days_between, parse_local_date, start_of_today


DEFAULT_HORIZON_DAYS = 10


def _days(count: int) -> str:
    return f"{count} day" if count == 1 else f"{count} days"


def due_label(next_billing: Any, today: Optional[date] = None) -> Optional[DueLabel]:
    """
    Describe when a renewal is due, relative to today.

    Returns None when the date is missing or invalid.
    """
    due = parse_local_date(next_billing)
    if due is None:
        return None

    diff = days_between(today or start_of_today(), due)
    if diff < 0:
        return DueLabel(text=f"Overdue by {_days(abs(diff))}", urgency=Urgency.OVERDUE)
    if diff == 0:
        return DueLabel(text="Due today", urgency=Urgency.TODAY)
    return DueLabel(text=f"Due in {_days(diff)}", urgency=Urgency.NORMAL)


def upcoming_renewals(
    ledger: Iterable[Subscription],
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    today: Optional[date] = None,
) -> list[Subscription]:
    """
    Subscriptions renewing between today and today + horizon_days, inclusive.

    Sorted by renewal date, earliest first. Records renewing on the same day
    keep their ledger order.
    """
    start = today or start_of_today()
    try:
        end = start + timedelta(days=horizon_days)
    except OverflowError:
        end = date.max

    dated = []
    for subscription in ledger:
        renewal = parse_local_date(subscription.next_billing)
        if renewal is None:
            continue
        if start <= renewal <= end:
            dated.append((renewal, subscription))

    dated.sort(key=lambda pair: pair[0])
    return [subscription for _, subscription in dated]
