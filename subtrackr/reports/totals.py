"""
Spending Totals

DESIGN DECISION: Totals are computed from the ledger every time they are
asked for. Nothing is cached, so a total can never be stale after an add,
delete or import.

Both views normalise to one comparison basis:
- monthly view: monthly cost as-is, yearly cost / 12
- yearly view: monthly cost x 12, yearly cost as-is

A record whose cost does not parse, or whose billing cycle is not one we
know, contributes zero. Amounts are Decimals and are rounded once, at the
end, to 2 places.
"""

import math
import re
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Iterable, Optional

from subtrackr.models.subscription import BillingCycle, Subscription


MONTHS_PER_YEAR = 12
TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0")

# Enough digits to hold x12 of the largest finite float to the cent
MONEY_PRECISION = 400

# Leading decimal number, the way a form field like "9.99" or "5 USD" is read
_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_cost(value: Any) -> Optional[Decimal]:
    """
    Read a stored cost as a Decimal.

    Strings are read up to the first character that is not part of a number
    ("12.50/mo" is 12.50). Returns None for empty, non-numeric, non-finite,
    negative or out-of-float-range values.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            return None
        amount = Decimal(str(value))
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if match is None:
            return None
        amount = Decimal(match.group().strip())
    else:
        return None

    if not amount.is_finite() or amount < 0:
        return None
    if not math.isfinite(float(amount)):
        # Too large to be a real amount
        return None
    return amount


def _round(amount: Decimal) -> Decimal:
    # Callers widen the context to MONEY_PRECISION first
    return amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _monthly_amount(subscription: Subscription) -> Decimal:
    cost = parse_cost(subscription.cost)
    if cost is None:
        return ZERO

    cycle = subscription.cycle
    if cycle == BillingCycle.MONTHLY:
        return cost
    if cycle == BillingCycle.YEARLY:
        return cost / MONTHS_PER_YEAR
    return ZERO


def _yearly_amount(subscription: Subscription) -> Decimal:
    cost = parse_cost(subscription.cost)
    if cost is None:
        return ZERO

    cycle = subscription.cycle
    if cycle == BillingCycle.MONTHLY:
        return cost * MONTHS_PER_YEAR
    if cycle == BillingCycle.YEARLY:
        return cost
    return ZERO


def monthly_total(ledger: Iterable[Subscription]) -> Decimal:
    """Total spend per month across the ledger, rounded to cents."""
    with localcontext() as ctx:
        ctx.prec = MONEY_PRECISION
        return _round(sum((_monthly_amount(sub) for sub in ledger), ZERO))


def yearly_total(ledger: Iterable[Subscription]) -> Decimal:
    """Total spend per year across the ledger, rounded to cents."""
    with localcontext() as ctx:
        ctx.prec = MONEY_PRECISION
        return _round(sum((_yearly_amount(sub) for sub in ledger), ZERO))


def annual_equivalent(subscription: Subscription) -> Decimal:
    """What one subscription costs per year, rounded to cents."""
    with localcontext() as ctx:
        ctx.prec = MONEY_PRECISION
        return _round(_yearly_amount(subscription))
