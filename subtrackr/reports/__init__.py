"""Totals, renewal scheduling and the date helpers they share."""

from subtrackr.reports.dates import days_between, parse_local_date, start_of_today
from subtrackr.reports.renewals import DEFAULT_HORIZON_DAYS, due_label, upcoming_renewals
from subtrackr.reports.totals import (
    annual_equivalent,
    monthly_total,
    parse_cost,
    yearly_total,
)

__all__ = [
    "DEFAULT_HORIZON_DAYS",
    "annual_equivalent",
    "days_between",
    "due_label",
    "monthly_total",
    "parse_cost",
    "parse_local_date",
    "start_of_today",
    "upcoming_renewals",
    "yearly_total",
]
