"""Subscription validation package."""

from subtrackr.validation.validator import REQUIRED_FIELDS, SubscriptionValidator

__all__ = ["REQUIRED_FIELDS", "SubscriptionValidator"]
