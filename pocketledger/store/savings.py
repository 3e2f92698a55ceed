"""
Savings Goal Ledger

Goals collect money from named members. Each contribution:
1. Is recorded as a savings transaction in the active wallet
2. Is added to the contributing member's running total
3. Moves the goal's current amount, capped at the target

Contribution transactions carry the goal's id, which is how deleting a goal
finds and reverses them.
"""

from datetime import datetime
from typing import Any, Callable, Optional, Union

import structlog

from pocketledger.models.ledger import (
    SAVINGS_CATEGORY_ID,
    GoalDraft,
    GoalMember,
    SavingsGoal,
    Transaction,
    TransactionDraft,
    TransactionType,
)
from pocketledger.store.ids import IdFactory
from pocketledger.store.state import LedgerState
from pocketledger.store.transactions import TransactionLedger
from pocketledger.validation import LedgerValidator, enforce


logger = structlog.get_logger(__name__)

MemberInput = Union[str, GoalMember, dict[str, Any]]


def seed_member(value: MemberInput) -> Optional[GoalMember]:
    """
    Turn a member supplied at goal creation into a GoalMember.

    Amounts given up front are what the member plans to put in, so they
    become the allocation; the contribution starts empty. Blank names
    are dropped.
    """
    if isinstance(value, GoalMember):
        name = value.name
        planned = value.allocation if value.allocation is not None else value.contribution
    elif isinstance(value, dict):
        name = str(value.get("name") or "")
        planned = value.get("allocation", value.get("contribution"))
    else:
        name = str(value or "")
        planned = None

    name = name.strip()
    if not name:
        return None
    return GoalMember(name=name, allocation=planned)


class SavingsGoalLedger:

    def __init__(
        self,
        state: LedgerState,
        ids: IdFactory,
        validator: LedgerValidator,
        transactions: TransactionLedger,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._state = state
        self._ids = ids
        self._validator = validator
        self._transactions = transactions
        self._clock = clock

    def list_goals(self) -> list[SavingsGoal]:
        return list(self._state.savings_goals)

    def get(self, goal_id: str) -> Optional[SavingsGoal]:
        for goal in self._state.savings_goals:
            if goal.id == goal_id:
                return goal
        return None

    # ── CREATE ────────────────────────────────────────────

    def create_goal(self, draft: GoalDraft) -> SavingsGoal:
        """
        Create a goal with nothing saved yet.

        Raises:
            ValidationError: If the title is blank or the target is not positive
        """
        enforce(self._validator.check_goal(draft))

        goal = SavingsGoal(
            id=self._ids.next_id(),
            title=draft.title,
            target_amount=draft.target_amount,
            current_amount=0.0,
            deadline=draft.deadline,
            members=[m.model_copy() for m in draft.members],
        )
        self._state.savings_goals.append(goal)
        logger.info("goal_created", goal_id=goal.id, target_amount=goal.target_amount)
        return goal

    # ── CONTRIBUTE ────────────────────────────────────────

    def contribute(
        self,
        goal_id: str,
        amount: float,
        contributor: str,
        wallet_id: Optional[str],
    ) -> Optional[tuple[SavingsGoal, Transaction]]:
        """
        Add a member's contribution and record it as a savings transaction.

        Returns:
            (updated goal, synthetic transaction), or None for an unknown goal

        Raises:
            ValidationError: If the amount is not positive, the contributor
                name is blank or too long, or there is no wallet to record it in
        """
        enforce(self._validator.check_contribution(amount, contributor))
        contributor = contributor.strip()

        goal = self.get(goal_id)
        if goal is None:
            logger.debug("goal_not_found", goal_id=goal_id)
            return None

        # Goal first: once the transaction is recorded nothing may fail
        members = [m.model_copy() for m in goal.members]
        for index, member in enumerate(members):
            if member.name == contributor:
                members[index] = member.model_copy(
                    update={"contribution": (member.contribution or 0.0) + amount}
                )
                break
        else:
            members.append(GoalMember(name=contributor, contribution=amount))

        total = sum(m.contribution or 0.0 for m in members)
        updated = goal.model_copy(update={
            "members": members,
            "current_amount": min(total, goal.target_amount),
        })

        tx = self._transactions.add(TransactionDraft(
            type=TransactionType.SAVINGS,
            amount=amount,
            category=SAVINGS_CATEGORY_ID,
            wallet_id=wallet_id or "",
            title=f"Saved to {goal.title}",
            note=f"Contributor: {contributor}",
            date=self._clock(),
            goal_id=goal.id,
        ))
        self._replace(updated)

        if updated.overflow > 0:
            logger.info("goal_overfunded", goal_id=goal.id, overflow=updated.overflow)
        return updated, tx

    # ── DELETE ────────────────────────────────────────────

    def delete_goal(self, goal_id: str) -> Optional[tuple[SavingsGoal, list[Transaction]]]:
        """
        Remove a goal and every contribution transaction linked to it.

        Each linked transaction goes through the transaction ledger so its
        balance effect is reversed.

        Returns:
            (removed goal, removed transactions), or None for an unknown goal
        """
        goal = self.get(goal_id)
        if goal is None:
            logger.debug("goal_not_found", goal_id=goal_id)
            return None

        self._state.savings_goals = [
            g for g in self._state.savings_goals if g.id != goal_id
        ]
        removed = []
        for tx in self._transactions.linked_to_goal(goal_id):
            deleted = self._transactions.delete(tx.id)
            if deleted is not None:
                removed.append(deleted)

        logger.info("goal_deleted", goal_id=goal_id, removed_transactions=len(removed))
        return goal, removed

    def _replace(self, goal: SavingsGoal) -> None:
        self._state.savings_goals = [
            goal if g.id == goal.id else g for g in self._state.savings_goals
        ]
