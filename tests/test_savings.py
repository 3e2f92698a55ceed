"""
Tests for savings goals: creation, contributions and deletion.
"""

import pytest
from datetime import date

from pocketledger.config import LedgerSettings
from pocketledger.models.ledger import Collection, GoalMember, TransactionType
from pocketledger.ports import NeverConfirm
from pocketledger.store.savings import seed_member
from pocketledger.validation import AMOUNT_MUST_BE_POSITIVE
from tests.conftest import RecordingStorage, StubConfirmer


class TestGoalCreation:
    """Tests for create_goal."""

    def test_create_goal(self, store, storage, notifier):
        goal = store.create_goal("Trip", 500, deadline=date(2025, 12, 31))
        assert goal.current_amount == 0.0
        assert goal.members == []
        assert goal.deadline == date(2025, 12, 31)
        assert storage.saves == [Collection.SAVINGS_GOALS]
        assert notifier.successes == ["Saving created successfully!"]

    def test_seeded_members_become_allocations(self, store):
        goal = store.create_goal(
            "Trip",
            500,
            members=["Ann", {"name": "Ben", "contribution": 100}, {"name": "  "}],
        )
        assert [m.name for m in goal.members] == ["Ann", "Ben"]
        ben = goal.find_member("Ben")
        assert ben.allocation == 100
        assert ben.contribution is None
        assert goal.current_amount == 0.0

    @pytest.mark.parametrize("title,target,message", [
        ("", 100, "Please enter a saving name"),
        ("Trip", 0, "Target amount must be greater than 0"),
        ("Trip", -5, "Target amount must be greater than 0"),
    ])
    def test_invalid_goal_is_rejected(self, store, notifier, title, target, message):
        assert store.create_goal(title, target) is None
        assert notifier.errors == [message]
        assert store.savings_goals == []


class TestContributions:
    """Tests for contribute."""

    def test_trip_scenario(self, store):
        goal = store.create_goal("Trip", 500)

        store.contribute(goal.id, 200, "Alice")
        store.contribute(goal.id, 150, "Bob")
        updated = store.contribute(goal.id, 200, "Alice")

        assert updated.current_amount == pytest.approx(500)
        assert updated.total_contributed == pytest.approx(550)
        assert updated.overflow == pytest.approx(50)
        assert [m.name for m in updated.members] == ["Alice", "Bob"]
        assert updated.find_member("Alice").contribution == pytest.approx(400)

        linked = [t for t in store.transactions if t.goal_id == goal.id]
        assert len(linked) == 3
        assert all(t.type == TransactionType.SAVINGS for t in linked)
        assert all(t.category == "savings" for t in linked)

    def test_current_amount_never_exceeds_target(self, store):
        goal = store.create_goal("Bike", 100)
        for amount in (30, 30, 30, 30, 30):
            updated = store.contribute(goal.id, amount, "Ann")
            assert updated.current_amount == pytest.approx(
                min(updated.target_amount, updated.total_contributed)
            )
            assert updated.current_amount <= updated.target_amount

    def test_synthetic_transaction_details(self, store, clock):
        goal = store.create_goal("Trip", 500)
        store.contribute(goal.id, 25, "Alice")
        tx = store.transactions[0]
        assert tx.title == "Saved to Trip"
        assert tx.note == "Contributor: Alice"
        assert tx.wallet_id == store.active_wallet_id
        assert tx.date == clock.now
        assert tx.goal_id == goal.id

    def test_contribution_notification(self, store, notifier):
        goal = store.create_goal("Trip", 500)
        store.contribute(goal.id, 200, "Alice")
        store.contribute(goal.id, 12.5, "Bob")
        assert notifier.successes[-2:] == [
            "Added $200 to Trip by Alice!",
            "Added $12.5 to Trip by Bob!",
        ]

    def test_contribution_persists_three_collections(self, store, storage):
        goal = store.create_goal("Trip", 500)
        storage.saves.clear()
        store.contribute(goal.id, 20, "Alice")
        assert set(storage.saves) == {
            Collection.SAVINGS_GOALS,
            Collection.TRANSACTIONS,
            Collection.WALLETS,
        }

    def test_member_names_are_case_sensitive(self, store):
        goal = store.create_goal("Trip", 500)
        store.contribute(goal.id, 10, "alice")
        updated = store.contribute(goal.id, 10, "Alice")
        assert len(updated.members) == 2

    def test_contribution_fills_allocated_member(self, store):
        goal = store.create_goal("Trip", 500, members=[GoalMember(name="Ann", allocation=200)])
        updated = store.contribute(goal.id, 50, "Ann")
        member = updated.find_member("Ann")
        assert member.allocation == 200
        assert member.contribution == 50

    @pytest.mark.parametrize("amount", [0, -20])
    def test_non_positive_contribution_changes_nothing(self, store, notifier, amount):
        goal = store.create_goal("Trip", 500)
        before = store.snapshot()
        assert store.contribute(goal.id, amount, "Alice") is None
        assert store.snapshot() == before
        assert notifier.errors == [AMOUNT_MUST_BE_POSITIVE]

    def test_blank_contributor_is_rejected(self, store, notifier):
        goal = store.create_goal("Trip", 500)
        assert store.contribute(goal.id, 10, "  ") is None
        assert notifier.errors == ["Contributor name is required"]

    def test_overlong_contributor_changes_nothing(self, store, notifier):
        goal = store.create_goal("Trip", 500)
        store.contribute(goal.id, 20, "Ann")
        before = store.snapshot()

        assert store.contribute(goal.id, 50, "A" * 101) is None

        assert store.snapshot() == before
        assert store.get_goal(goal.id).current_amount == pytest.approx(20)
        assert len(store.transactions) == 1
        assert notifier.errors == ["Contributor name must be at most 100 characters"]

    def test_unknown_goal_is_silent_noop(self, store, notifier, storage):
        before = store.snapshot()
        assert store.contribute("missing", 10, "Alice") is None
        assert store.snapshot() == before
        assert notifier.messages == []
        assert storage.saves == []

    def test_no_active_wallet_rejects_contribution(self, store, notifier):
        goal = store.create_goal("Trip", 500)
        store.set_active_wallet("")
        assert store.contribute(goal.id, 10, "Alice") is None
        assert store.get_goal(goal.id).members == []
        assert notifier.errors == ["Select a wallet first"]

    def test_contribution_credits_wallet_when_enabled(self, make_store):
        settings = LedgerSettings(
            _env_file=None,
            savings_affects_balance=True,
            persist_retry_multiplier=0,
            persist_retry_max_wait=0,
        )
        store = make_store(settings=settings)
        goal = store.create_goal("Trip", 500)
        store.contribute(goal.id, 120, "Alice")
        assert store.active_wallet.balance == pytest.approx(120)

        store.delete_goal(goal.id)
        assert store.active_wallet.balance == pytest.approx(0)

    def test_policy_change_does_not_unbalance_wallet(self, make_store):
        storage = RecordingStorage()
        crediting = LedgerSettings(
            _env_file=None,
            savings_affects_balance=True,
            persist_retry_multiplier=0,
            persist_retry_max_wait=0,
        )
        first = make_store(storage, settings=crediting)
        goal = first.create_goal("Trip", 500)
        first.contribute(goal.id, 120, "Alice")
        assert first.transactions[0].balance_delta == pytest.approx(120)

        second = make_store(storage)
        assert second.active_wallet.balance == pytest.approx(120)
        second.delete_goal(goal.id)
        assert second.active_wallet.balance == pytest.approx(0)

    def test_untracked_delta_falls_back_to_policy(self, make_store):
        storage = RecordingStorage({
            "wallets": [{"id": "personal", "name": "My Wallet", "type": "personal",
                         "members": [], "balance": -30}],
            "transactions": [{"id": "1", "type": "expense", "amount": 30,
                              "category": "food", "date": "2025-06-01T10:00:00",
                              "walletId": "personal"}],
        })
        store = make_store(storage)
        assert store.delete_transaction("1") is True
        assert store.active_wallet.balance == pytest.approx(0)


class TestGoalDeletion:
    """Tests for delete_goal."""

    def test_declined_deletion_changes_nothing(self, make_store, notifier):
        confirmer = StubConfirmer(answer=False)
        store = make_store(confirmer=confirmer)
        goal = store.create_goal("Trip", 500)
        store.contribute(goal.id, 100, "Alice")
        before = store.snapshot()

        assert store.delete_goal(goal.id) is False
        assert store.snapshot() == before
        assert confirmer.prompts == ["Are you sure you want to delete this saving goal?"]
        assert "Saving goal deleted!" not in notifier.successes

    def test_never_confirm_keeps_goal(self, make_store):
        store = make_store(confirmer=NeverConfirm())
        goal = store.create_goal("Trip", 500)
        store.contribute(goal.id, 100, "Alice")

        assert store.delete_goal(goal.id) is False
        assert store.get_goal(goal.id) is not None
        assert len(store.transactions) == 1

    def test_deletion_removes_linked_transactions_only(self, store, notifier):
        trip = store.create_goal("Trip", 500)
        bike = store.create_goal("Bike", 300)
        store.contribute(trip.id, 100, "Alice")
        store.contribute(bike.id, 50, "Bob")
        store.contribute(trip.id, 20, "Bob")
        income = store.add_transaction("income", 1000, category="income")

        assert store.delete_goal(trip.id) is True

        assert [g.id for g in store.savings_goals] == [bike.id]
        remaining = store.transactions
        assert {t.id for t in remaining} == {
            income.id,
            next(t.id for t in remaining if t.goal_id == bike.id),
        }
        assert all(t.goal_id != trip.id for t in remaining)
        assert notifier.successes[-1] == "Saving goal deleted!"

    def test_manual_savings_with_similar_title_survive(self, store):
        goal = store.create_goal("Trip", 500)
        store.contribute(goal.id, 100, "Alice")
        manual = store.add_transaction("savings", 40, title=f"Saved to Trip {goal.id}")

        store.delete_goal(goal.id)

        assert [t.id for t in store.transactions] == [manual.id]

    def test_unknown_goal_is_noop(self, store, confirmer):
        assert store.delete_goal("missing") is False
        assert confirmer.prompts == []


class TestSeedMember:
    """Tests for member seeding at goal creation."""

    def test_string_member(self):
        assert seed_member(" Ann ") == GoalMember(name="Ann")

    def test_blank_member_dropped(self):
        assert seed_member("") is None
        assert seed_member({"name": None}) is None

    def test_explicit_allocation_wins(self):
        member = seed_member(GoalMember(name="Ann", contribution=10, allocation=30))
        assert member.allocation == 30
        assert member.contribution is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
