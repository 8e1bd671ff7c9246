"""
Subscription Validation

DESIGN DECISION: Validation reports problems, it never fixes them.

Two kinds of checks run on every record:

REQUIRED FIELDS (always errors):
- name, cost and nextBilling must be present and non-empty

FIELD SHAPE (warnings, or errors in strict mode):
- cost parses to a non-negative number
- billingCycle is monthly or yearly
- nextBilling is a real YYYY-MM-DD date
- category is one we know

A record with shape warnings is still stored: it just contributes nothing
to the totals it cannot be counted in. Strict mode is used for backup
imports when the user asked for every record to be checked.
"""

from typing import Any, Mapping

from subtrackr.models.subscription import (
    BillingCycle,
    Category,
    ValidationIssue,
    ValidationResult,
)
from subtrackr.reports.dates import parse_local_date
from subtrackr.reports.totals import parse_cost


REQUIRED_FIELDS = ("name", "cost", "nextBilling")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class SubscriptionValidator:
    """Validates subscription records given as plain dicts (serialized field names)."""

    def _validate_required(self, record: Mapping[str, Any]) -> list[ValidationIssue]:
        issues = []
        for field in REQUIRED_FIELDS:
            if _is_blank(record.get(field)):
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="missing",
                    message=f"{field} is required",
                    severity="error",
                ))
        return issues

    def _validate_shape(
        self,
        record: Mapping[str, Any],
        severity: str,
    ) -> list[ValidationIssue]:
        issues = []

        name = record.get("name")
        if not _is_blank(name) and not isinstance(name, str):
            issues.append(ValidationIssue(
                field="name",
                issue_type="invalid_type",
                message=f"Name should be text, got {type(name).__name__}",
                severity=severity,
            ))

        cost = record.get("cost")
        if not _is_blank(cost) and parse_cost(cost) is None:
            issues.append(ValidationIssue(
                field="cost",
                issue_type="invalid_value",
                message=f"Cost ({cost!r}) is not a non-negative number",
                severity=severity,
                suggested_fix="It will count as 0 in all totals",
            ))

        cycle = record.get("billingCycle")
        if cycle not in [c.value for c in BillingCycle]:
            issues.append(ValidationIssue(
                field="billingCycle",
                issue_type="unknown_value",
                message=f"Billing cycle ({cycle!r}) is not monthly or yearly",
                severity=severity,
                suggested_fix="It will count as 0 in all totals",
            ))

        next_billing = record.get("nextBilling")
        if not _is_blank(next_billing) and parse_local_date(next_billing) is None:
            issues.append(ValidationIssue(
                field="nextBilling",
                issue_type="invalid_format",
                message=f"Next billing date ({next_billing!r}) is not a YYYY-MM-DD date",
                severity=severity,
                suggested_fix="It will not appear in upcoming renewals",
            ))

        category = record.get("category")
        if category is not None and category not in [c.value for c in Category]:
            issues.append(ValidationIssue(
                field="category",
                issue_type="unknown_value",
                message=f"Category ({category!r}) is not a known category",
                severity="info" if severity == "warning" else severity,
            ))

        return issues

    def validate(
        self,
        record: Mapping[str, Any],
        strict: bool = False,
    ) -> ValidationResult:
        """
        Validate one record.

        Args:
            record: Subscription fields keyed by their serialized names
            strict: Report field shape problems as errors instead of warnings

        Returns:
            ValidationResult with all issues found
        """
        issues = self._validate_required(record)
        issues.extend(self._validate_shape(record, "error" if strict else "warning"))

        return ValidationResult(
            is_valid=not any(issue.severity == "error" for issue in issues),
            issues=issues,
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """One message per line, errors first."""
        if not result.issues:
            return "All checks passed."

        lines = []
        for issue in result.issues:
            if issue.severity == "error":
                lines.append(f"• {issue.message}")
        for issue in result.issues:
            if issue.severity == "warning":
                line = f"• {issue.message}"
                if issue.suggested_fix:
                    line += f" ({issue.suggested_fix})"
                lines.append(line)
        return "\n".join(lines)
