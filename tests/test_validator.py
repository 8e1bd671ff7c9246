"""Tests for subscription validation."""

from subtrackr.validation import REQUIRED_FIELDS, SubscriptionValidator


def valid_record(**overrides):
    record = {
        "name": "Netflix",
        "cost": "15.49",
        "billingCycle": "monthly",
        "nextBilling": "2024-07-01",
        "category": "entertainment",
    }
    record.update(overrides)
    return record


class TestRequiredFields:
    """Tests for required field checks."""

    def test_complete_record_is_valid(self):
        result = SubscriptionValidator().validate(valid_record())
        assert result.is_valid
        assert result.issues == []

    def test_required_fields(self):
        assert REQUIRED_FIELDS == ("name", "cost", "nextBilling")

    def test_missing_fields_are_errors(self):
        """Test empty and blank required fields are reported."""
        result = SubscriptionValidator().validate(
            valid_record(name="", cost="   ", nextBilling=None)
        )
        assert not result.is_valid
        missing = {i.field for i in result.issues if i.issue_type == "missing"}
        assert missing == {"name", "cost", "nextBilling"}

    def test_zero_cost_is_present(self):
        """Test a numeric zero is not treated as missing."""
        result = SubscriptionValidator().validate(valid_record(cost=0))
        assert result.is_valid


class TestFieldShape:
    """Tests for field shape checks."""

    def test_bad_shape_is_warning_by_default(self):
        """Test shape problems do not make a record invalid."""
        result = SubscriptionValidator().validate(
            valid_record(cost="abc", billingCycle="weekly", nextBilling="someday")
        )
        assert result.is_valid
        assert [i.severity for i in result.issues] == ["warning"] * 3

    def test_bad_shape_is_error_in_strict_mode(self):
        result = SubscriptionValidator().validate(
            valid_record(cost="-3"),
            strict=True,
        )
        assert not result.is_valid
        assert result.issues[0].field == "cost"

    def test_unknown_category_is_info(self):
        result = SubscriptionValidator().validate(valid_record(category="gaming"))
        assert result.is_valid
        assert result.issues[0].severity == "info"

    def test_unknown_category_is_error_in_strict_mode(self):
        result = SubscriptionValidator().validate(
            valid_record(category="gaming"),
            strict=True,
        )
        assert not result.is_valid

    def test_name_must_be_text(self):
        result = SubscriptionValidator().validate(valid_record(name=42), strict=True)
        assert [i.field for i in result.issues] == ["name"]

    def test_unhashable_values_do_not_crash(self):
        result = SubscriptionValidator().validate(
            valid_record(billingCycle=["monthly"], category={"a": 1}),
            strict=True,
        )
        assert {i.field for i in result.issues} == {"billingCycle", "category"}


class TestUserFriendlySummary:
    """Tests for summary text."""

    def test_all_checks_passed(self):
        validator = SubscriptionValidator()
        result = validator.validate(valid_record())
        assert validator.get_user_friendly_summary(result) == "All checks passed."

    def test_errors_listed_before_warnings(self):
        validator = SubscriptionValidator()
        result = validator.validate(valid_record(name="", cost="abc"))
        lines = validator.get_user_friendly_summary(result).splitlines()
        assert lines[0] == "• name is required"
        assert "will count as 0" in lines[1]
