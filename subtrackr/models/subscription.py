"""
Core Data Models for SubTrackr

These models define the schemas for all data flowing through the ledger.
They are designed to:
1. Round-trip backup files without losing or renaming any field
2. Provide clear validation error messages for form input
3. Be serializable for storage and logging

DESIGN DECISION: A stored Subscription keeps its fields exactly as they were
entered or imported. Cost, billing cycle and next billing date are NOT coerced
into strict types here; the aggregation and renewal code interprets them and
treats anything unusable as "contributes nothing". This is what lets an old or
hand-edited backup survive an import/export cycle untouched.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# Identifiers are time-derived integers for new records, but backups written by
# other tools may carry floats or strings. They are kept as-is.
SubscriptionId = Union[int, float, str]

# Costs arrive as form strings ("9.99") or JSON numbers.
CostValue = Union[str, int, float]


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class BillingCycle(str, Enum):
    """
    Supported billing cycles.

    Any other value stored on a record contributes zero to every total.
    """
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Category(str, Enum):
    """Subscription categories. Display-only, no computation depends on them."""
    ENTERTAINMENT = "entertainment"
    PRODUCTIVITY = "productivity"
    FITNESS = "fitness"
    NEWS = "news"
    OTHER = "other"


CATEGORY_DISPLAY: dict[Category, tuple[str, str]] = {
    Category.ENTERTAINMENT: ("Entertainment", "🎬"),
    Category.PRODUCTIVITY: ("Productivity", "💼"),
    Category.FITNESS: ("Fitness", "💪"),
    Category.NEWS: ("News & Media", "📰"),
    Category.OTHER: ("Other", "📦"),
}


class Urgency(str, Enum):
    """How pressing a renewal is, relative to today."""
    OVERDUE = "overdue"
    TODAY = "today"
    NORMAL = "normal"


# =============================================================================
# CORE SUBSCRIPTION MODEL
# =============================================================================

class Subscription(BaseModel):
    """
    A single recurring payment held in the ledger.

    Serialized field names are camelCase (billingCycle, nextBilling) to stay
    compatible with existing backup files. Python code uses the snake_case
    attribute names.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    id: SubscriptionId = Field(
        ...,
        description="Unique subscription ID, never reassigned"
    )
    name: Optional[str] = Field(
        default=None,
        description="Service name"
    )
    cost: Optional[CostValue] = Field(
        default=None,
        description="Cost per billing cycle, stored verbatim"
    )
    billing_cycle: Optional[str] = Field(
        default=None,
        alias="billingCycle",
        description="'monthly' or 'yearly'; anything else counts as zero"
    )
    next_billing: Optional[str] = Field(
        default=None,
        alias="nextBilling",
        description="Next renewal date as YYYY-MM-DD"
    )
    category: Optional[str] = Field(
        default=None,
        description="Display category"
    )

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Subscription":
        """
        Build a Subscription from a stored or imported record WITHOUT validation.

        Field values are kept exactly as given, including unknown extra keys
        and values of unexpected types. Keys missing from the record stay
        unset, so they are not written back out as nulls.
        """
        return cls.model_construct(**dict(record))

    def to_record(self) -> dict[str, Any]:
        """Convert to the plain dict written to backups and storage."""
        record = self.model_dump(
            by_alias=True,
            exclude_unset=True,
            warnings=False,
        )
        if self.model_extra:
            record.update(self.model_extra)
        return record

    @property
    def cycle(self) -> Optional[BillingCycle]:
        """The billing cycle if it is one we recognise."""
        try:
            return BillingCycle(self.billing_cycle)
        except ValueError:
            return None

    @property
    def known_category(self) -> Optional[Category]:
        """The category if it is one we recognise."""
        try:
            return Category(self.category)
        except ValueError:
            return None


class SubscriptionInput(BaseModel):
    """
    Payload of the "add subscription" form.

    Defaults match a freshly opened form: monthly billing, entertainment.
    Missing required fields are NOT rejected here; the ledger decides
    what to do with an incomplete submission.
    """
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = ""
    cost: CostValue = ""
    billing_cycle: str = Field(
        default=BillingCycle.MONTHLY.value,
        alias="billingCycle",
    )
    next_billing: str = Field(
        default="",
        alias="nextBilling",
    )
    category: str = Category.ENTERTAINMENT.value

    @field_validator('next_billing', mode='before')
    @classmethod
    def accept_date_objects(cls, v: Any) -> Any:
        """Date pickers hand us date objects; store them as ISO strings."""
        if isinstance(v, date):
            return v.isoformat()
        if v is None:
            return ""
        return v

    @field_validator('name', 'cost', mode='before')
    @classmethod
    def blank_for_none(cls, v: Any) -> Any:
        """A cleared form field arrives as None."""
        return "" if v is None else v

    @field_validator('billing_cycle', 'category', mode='before')
    @classmethod
    def accept_enum_members(cls, v: Any) -> Any:
        if isinstance(v, Enum):
            return v.value
        return v


# =============================================================================
# RENEWAL MODELS
# =============================================================================

class DueLabel(BaseModel):
    """Human-readable due status of a renewal date."""

    text: str
    urgency: Urgency


class SpendingSummary(BaseModel):
    """Headline numbers shown above the subscription list."""

    monthly_total: Decimal
    yearly_total: Decimal
    subscription_count: int = Field(ge=0)
    upcoming_count: int = Field(ge=0)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'unknown_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """Result of validating one subscription payload."""

    is_valid: bool = Field(
        ...,
        description="True when no error-level issue was found"
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")
