"""
Tests for Pocket Ledger models

Covers the pydantic schemas, their wire format (camelCase keys) and the
ledger event builder.
"""

import pytest
from datetime import date, datetime, timezone

from pydantic import ValidationError as SchemaError

from pocketledger.models.ledger import (
    DEFAULT_CATEGORIES,
    Collection,
    DashboardSummary,
    GoalMember,
    MonthlyTotal,
    SavingsGoal,
    Transaction,
    TransactionType,
    ValidationIssue,
    ValidationResult,
    Wallet,
    WalletType,
    categories_for,
    default_wallet,
    get_category,
)
from pocketledger.models.events import (
    EventSeverity,
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventType,
)


class TestTransactionModel:
    """Tests for the Transaction schema."""

    def test_transaction_creation(self):
        """Test Transaction model creation."""
        tx = Transaction(
            id="1",
            type=TransactionType.EXPENSE,
            amount=12.5,
            category="food",
            date=datetime(2025, 6, 1, 12, 0),
            wallet_id="personal",
        )
        assert tx.amount == 12.5
        assert tx.goal_id is None
        assert tx.display_title == "food"

    def test_transaction_rejects_non_positive_amount(self):
        """Test that zero and negative amounts are rejected."""
        for amount in (0, -3):
            with pytest.raises(SchemaError):
                Transaction(
                    id="1",
                    type="expense",
                    amount=amount,
                    category="food",
                    date=datetime(2025, 6, 1),
                    wallet_id="personal",
                )

    def test_transaction_reads_camel_case_keys(self):
        """Test that stored payloads with camelCase keys are accepted."""
        tx = Transaction.model_validate({
            "id": "1700000000000",
            "type": "savings",
            "amount": 20,
            "category": "savings",
            "title": "Saved to Trip",
            "date": "2025-06-01T10:00:00",
            "walletId": "personal",
            "goalId": "42",
        })
        assert tx.wallet_id == "personal"
        assert tx.goal_id == "42"

    def test_transaction_dumps_camel_case_keys(self):
        """Test that dumping by alias restores the wire keys."""
        tx = Transaction(
            id="1",
            type="income",
            amount=100,
            category="income",
            date=datetime(2025, 6, 1, 9, 30),
            wallet_id="personal",
        )
        payload = tx.model_dump(by_alias=True, mode="json")
        assert payload["walletId"] == "personal"
        assert "goalId" in payload
        assert payload["balanceDelta"] is None
        assert payload["date"] == "2025-06-01T09:30:00"

    def test_aware_dates_become_local_naive(self):
        """Test that UTC timestamps written by a browser are normalized."""
        tx = Transaction(
            id="1",
            type="expense",
            amount=5,
            category="food",
            date="2025-01-01T10:00:00Z",
            wallet_id="personal",
        )
        expected = datetime(2025, 1, 1, 10, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
        assert tx.date.tzinfo is None
        assert tx.date == expected

    def test_str_shows_sign(self):
        tx = Transaction(
            id="1",
            type="expense",
            amount=5,
            category="food",
            title="Lunch",
            date=datetime(2025, 1, 2),
            wallet_id="personal",
        )
        assert str(tx) == "-5.00 | Lunch | 2025-01-02"


class TestWalletModel:
    """Tests for wallets."""

    def test_default_wallet(self):
        wallet = default_wallet()
        assert wallet.id == "personal"
        assert wallet.name == "My Wallet"
        assert wallet.type == WalletType.PERSONAL
        assert wallet.balance == 0.0

    def test_shared_wallet_members(self):
        wallet = Wallet(id="w1", name="House", type="shared", members=["Ann", "Ben"])
        assert wallet.is_shared
        assert wallet.member_count == 2

    def test_wallet_name_is_stripped(self):
        wallet = Wallet(id="w1", name="  Main  ")
        assert wallet.name == "Main"


class TestSavingsGoalModel:
    """Tests for savings goals and their derived values."""

    def test_goal_progress(self):
        goal = SavingsGoal(
            id="g1",
            title="Trip",
            target_amount=500,
            current_amount=125,
        )
        assert goal.progress == pytest.approx(0.25)
        assert goal.remaining == pytest.approx(375)
        assert not goal.is_complete

    def test_current_amount_cannot_exceed_target(self):
        with pytest.raises(SchemaError):
            SavingsGoal(id="g1", title="Trip", target_amount=100, current_amount=150)

    def test_target_must_be_positive(self):
        with pytest.raises(SchemaError):
            SavingsGoal(id="g1", title="Trip", target_amount=0)

    def test_overflow_is_raw_total_above_target(self):
        goal = SavingsGoal(
            id="g1",
            title="Trip",
            target_amount=500,
            current_amount=500,
            members=[
                GoalMember(name="Alice", contribution=400),
                GoalMember(name="Bob", contribution=150),
            ],
        )
        assert goal.total_contributed == pytest.approx(550)
        assert goal.overflow == pytest.approx(50)
        assert goal.is_complete

    def test_null_members_load_as_empty(self):
        goal = SavingsGoal.model_validate({
            "id": "g1",
            "title": "Trip",
            "targetAmount": 100,
            "currentAmount": 0,
            "members": None,
        })
        assert goal.members == []

    def test_find_member_is_case_sensitive(self):
        goal = SavingsGoal(
            id="g1",
            title="Trip",
            target_amount=100,
            members=[GoalMember(name="Alice", contribution=10)],
        )
        assert goal.find_member("Alice") is not None
        assert goal.find_member("alice") is None

    def test_deadline_round_trips_as_iso_date(self):
        goal = SavingsGoal(id="g1", title="Trip", target_amount=100, deadline=date(2025, 12, 31))
        payload = goal.model_dump(by_alias=True, mode="json")
        assert payload["deadline"] == "2025-12-31"
        assert payload["targetAmount"] == 100


class TestCategories:
    """Tests for the static category set."""

    def test_all_categories_exist(self):
        ids = [c.id for c in DEFAULT_CATEGORIES]
        assert ids == [
            "food", "saving", "personal-funds", "parent", "shopping", "bills",
            "transport", "entertainment", "health", "income", "savings",
        ]

    def test_categories_for_each_type(self):
        assert [c.id for c in categories_for(TransactionType.INCOME)] == ["income"]
        assert [c.id for c in categories_for(TransactionType.SAVINGS)] == ["savings"]
        expense_ids = [c.id for c in categories_for("expense")]
        assert "income" not in expense_ids
        assert "savings" not in expense_ids
        assert "food" in expense_ids

    def test_get_category(self):
        assert get_category("food").icon == "🍔"
        assert get_category("missing") is None

    def test_categories_are_read_only(self):
        with pytest.raises(SchemaError):
            get_category("food").name = "Snacks"


class TestReadModels:
    """Tests for analytics view models."""

    def test_monthly_total_label(self):
        assert MonthlyTotal(year=2025, month=3, total=10).label == "Mar"

    def test_dashboard_monthly_net_counts_savings_as_outflow(self):
        summary = DashboardSummary(
            wallet_id="personal",
            period_year=2025,
            period_month=6,
            monthly_income=1000,
            monthly_expenses=300,
            monthly_savings=200,
            all_time_income=1500,
            all_time_outflow=900,
        )
        assert summary.monthly_net == pytest.approx(500)
        assert summary.all_time_net == pytest.approx(600)


class TestValidationResult:
    """Tests for ValidationResult."""

    def test_validation_result_has_errors(self):
        result = ValidationResult(
            subject="transaction",
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="invalid_value",
                    message="Amount must be positive",
                    severity="error",
                ),
                ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message="Date is in the future",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors
        assert not result.is_valid
        assert result.error_count == 1
        assert result.first_error == "Amount must be positive"
        assert result.warnings == ["Date is in the future"]

    def test_validation_result_warnings_only(self):
        result = ValidationResult(
            subject="goal",
            issues=[
                ValidationIssue(
                    field="deadline",
                    issue_type="past_date",
                    message="Deadline has already passed",
                    severity="warning",
                ),
            ],
        )
        assert result.is_valid
        assert result.first_error is None

    def test_issue_severity_is_restricted(self):
        with pytest.raises(SchemaError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")


class TestLedgerEvents:
    """Tests for ledger event models."""

    def test_event_creation(self):
        event = LedgerEvent(
            event_type=LedgerEventType.THEME_CHANGED,
            description="Theme switched to dark",
        )
        assert event.event_id is not None
        assert event.severity == EventSeverity.INFO
        assert event.collections == []

    def test_event_to_log_dict(self):
        event = LedgerEventBuilder.transaction_added(
            transaction_id="1",
            tx_type="expense",
            amount=40,
            wallet_id="personal",
            balance_delta=-40,
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "transaction_added"
        assert log_dict["collections"] == ["transactions", "wallets"]
        assert log_dict["details"]["balance_delta"] == -40
        assert log_dict["is_user_action"] is True

    def test_event_to_sheets_row(self):
        event = LedgerEventBuilder.persistence_failed(
            Collection.SAVINGS_GOALS, "timeout", attempts=3,
        )
        row = event.to_sheets_row()
        assert len(row) == 11
        assert row[2] == "persistence_failed"
        assert row[3] == "error"
        assert row[5] == "savingsGoals"
        assert row[9] == "timeout"

    def test_synthetic_transaction_is_not_a_user_action(self):
        event = LedgerEventBuilder.transaction_added(
            transaction_id="1",
            tx_type="savings",
            amount=40,
            wallet_id="personal",
            balance_delta=0,
            goal_id="g1",
        )
        assert event.is_user_action is False
        assert event.touches(Collection.TRANSACTIONS)
        assert not event.touches(Collection.SAVINGS_GOALS)

    def test_goal_deleted_event(self):
        event = LedgerEventBuilder.goal_deleted("g1", "Trip", removed_transactions=3)
        assert event.entity_id == "g1"
        assert event.details["removed_transactions"] == 3
        assert event.touches(Collection.SAVINGS_GOALS)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
