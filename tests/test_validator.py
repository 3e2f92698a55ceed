"""
Tests for ledger command validation.
"""

import pytest
from datetime import date, datetime, timedelta

from pocketledger.exceptions import ValidationError
from pocketledger.models.ledger import (
    GoalDraft,
    GoalMember,
    TransactionDraft,
    TransactionType,
    ValidationResult,
    WalletType,
)
from pocketledger.validation import AMOUNT_MUST_BE_POSITIVE, LedgerValidator, enforce
from tests.conftest import FIXED_NOW, FakeClock


@pytest.fixture
def validator(settings) -> LedgerValidator:
    return LedgerValidator(settings, FakeClock())


def draft(**overrides) -> TransactionDraft:
    fields = {
        "type": TransactionType.EXPENSE,
        "amount": 10.0,
        "category": "food",
        "wallet_id": "personal",
    }
    fields.update(overrides)
    return TransactionDraft(**fields)


class TestTransactionValidation:
    """Tests for transaction checks."""

    def test_valid_expense(self, validator):
        result = validator.check_transaction(draft())
        assert result.is_valid
        assert result.issues == []

    @pytest.mark.parametrize("amount", [0, -1, float("nan"), float("inf")])
    def test_non_positive_amount_is_an_error(self, validator, amount):
        result = validator.check_transaction(draft(amount=amount))
        assert result.has_errors
        assert result.first_error == AMOUNT_MUST_BE_POSITIVE

    def test_missing_category(self, validator):
        result = validator.check_transaction(draft(category=""))
        assert result.first_error == "Category is required"

    def test_category_must_match_type(self, validator):
        result = validator.check_transaction(draft(category="income"))
        assert result.has_errors
        assert result.issues[0].issue_type == "unknown_reference"

    def test_savings_skip_category_check(self, validator):
        result = validator.check_transaction(
            draft(type=TransactionType.SAVINGS, category="")
        )
        assert result.is_valid

    def test_savings_with_other_category_is_noted(self, validator):
        result = validator.check_transaction(
            draft(type=TransactionType.SAVINGS, category="food")
        )
        assert result.is_valid
        assert result.issues[0].severity == "info"

    def test_missing_wallet(self, validator):
        result = validator.check_transaction(draft(wallet_id=""))
        assert result.first_error == "Select a wallet first"

    def test_unknown_wallet_is_a_warning(self, validator):
        result = validator.check_transaction(draft(), wallet_known=False)
        assert result.is_valid
        assert len(result.warnings) == 1

    def test_far_future_date_is_a_warning(self, validator):
        result = validator.check_transaction(
            draft(date=FIXED_NOW + timedelta(days=30))
        )
        assert result.is_valid
        assert "future" in result.warnings[0]

    def test_near_future_date_is_fine(self, validator):
        result = validator.check_transaction(
            draft(date=FIXED_NOW + timedelta(days=2))
        )
        assert result.warnings == []

    def test_semantics_skipped_when_schema_fails(self, validator):
        result = validator.check_transaction(
            draft(amount=0, date=FIXED_NOW + timedelta(days=30)),
            wallet_known=False,
        )
        assert result.warnings == []


class TestWalletValidation:
    """Tests for wallet checks."""

    def test_blank_name(self, validator):
        result = validator.check_wallet("   ", WalletType.PERSONAL)
        assert result.first_error == "Wallet name is required"

    def test_shared_wallet_without_members_warns(self, validator):
        result = validator.check_wallet("House", WalletType.SHARED, ["", " "])
        assert result.is_valid
        assert result.warnings

    def test_overlong_name(self, validator):
        result = validator.check_wallet("W" * 101, WalletType.PERSONAL)
        assert result.first_error == "Wallet name must be at most 100 characters"
        assert validator.check_wallet("W" * 100, WalletType.PERSONAL).is_valid

    def test_personal_wallet_members_ignored(self, validator):
        result = validator.check_wallet("Mine", WalletType.PERSONAL, ["Ann"])
        assert result.is_valid
        assert result.issues[0].issue_type == "ignored"


class TestGoalValidation:
    """Tests for savings goal checks."""

    def test_blank_title(self, validator):
        result = validator.check_goal(GoalDraft(title="  ", target_amount=100))
        assert result.first_error == "Please enter a saving name"

    def test_target_must_be_positive(self, validator):
        result = validator.check_goal(GoalDraft(title="Trip", target_amount=0))
        assert result.first_error == "Target amount must be greater than 0"

    def test_past_deadline_warns(self, validator):
        result = validator.check_goal(GoalDraft(
            title="Trip",
            target_amount=100,
            deadline=date(2024, 1, 1),
        ))
        assert result.is_valid
        assert "passed" in result.warnings[0]

    def test_duplicate_members_warn(self, validator):
        result = validator.check_goal(GoalDraft(
            title="Trip",
            target_amount=100,
            members=[GoalMember(name="Ann"), GoalMember(name="Ann")],
        ))
        assert result.is_valid
        assert result.warnings

    def test_contribution_checks(self, validator):
        assert validator.check_contribution(0, "Ann").first_error == AMOUNT_MUST_BE_POSITIVE
        assert validator.check_contribution(None, "Ann").first_error == AMOUNT_MUST_BE_POSITIVE
        assert validator.check_contribution(5, " ").first_error == "Contributor name is required"
        assert validator.check_contribution(5, "Ann").is_valid
        assert validator.check_contribution(5, "A" * 101).first_error == (
            "Contributor name must be at most 100 characters"
        )


class TestArchiveValidation:
    """Tests for the analytics archive check."""

    def test_past_year_allowed(self, validator):
        assert validator.check_archive_year(2024).is_valid

    def test_current_and_future_years_refused(self, validator):
        assert validator.check_archive_year(2025).has_errors
        assert validator.check_archive_year(2030).has_errors


class TestEnforce:
    """Tests for turning results into exceptions."""

    def test_enforce_raises_on_errors(self, validator):
        result = validator.check_transaction(draft(amount=-5))
        with pytest.raises(ValidationError) as exc_info:
            enforce(result)
        assert str(exc_info.value) == AMOUNT_MUST_BE_POSITIVE
        assert exc_info.value.issues[0]["field"] == "amount"

    def test_enforce_passes_warnings_through(self, validator):
        result = validator.check_transaction(draft(), wallet_known=False)
        assert enforce(result) is result

    def test_clean_result_passes(self):
        result = ValidationResult(subject="goal")
        assert enforce(result) is result


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
