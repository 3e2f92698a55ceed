"""
Ledger Command Validation

Validation happens in two stages for every command:

STAGE 1 - SCHEMA VALIDATION:
- Required field presence
- Positive amounts
- References into the static category set

STAGE 2 - SEMANTIC VALIDATION:
- Dates far in the future
- References to wallets the ledger does not know
- Deadlines already in the past

Stage 2 only runs when stage 1 found no errors. Semantic checks produce
warnings; they never block a command.

IMPORTANT: Validation NEVER silently fixes issues. It reports them.
"""

import math
from datetime import date, datetime, timedelta
from typing import Callable, Optional

import structlog

from pocketledger.config import LedgerSettings
from pocketledger.exceptions import ValidationError
from pocketledger.models.ledger import (
    NAME_MAX_LENGTH,
    SAVINGS_CATEGORY_ID,
    GoalDraft,
    TransactionDraft,
    TransactionType,
    ValidationIssue,
    ValidationResult,
    WalletType,
    categories_for,
)


logger = structlog.get_logger(__name__)

AMOUNT_MUST_BE_POSITIVE = "Amount must be positive"


def _is_positive(value: float) -> bool:
    try:
        return math.isfinite(value) and value > 0
    except TypeError:
        return False


class LedgerValidator:
    """
    Validates command input before any state is touched.

    Each ``check_*`` method returns a ValidationResult; callers decide
    whether to raise.
    """

    def __init__(
        self,
        settings: LedgerSettings,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._settings = settings
        self._clock = clock

    # ── TRANSACTIONS ──────────────────────────────────────

    def check_transaction(
        self,
        draft: TransactionDraft,
        wallet_known: bool = True,
    ) -> ValidationResult:
        issues = []

        if not _is_positive(draft.amount):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message=AMOUNT_MUST_BE_POSITIVE,
                severity="error",
                suggested_fix="Enter an amount greater than zero",
            ))

        # Savings always land in the savings category, so only check the others
        if draft.type != TransactionType.SAVINGS:
            allowed = {c.id for c in categories_for(draft.type)}
            if not draft.category:
                issues.append(ValidationIssue(
                    field="category",
                    issue_type="missing",
                    message="Category is required",
                    severity="error",
                    suggested_fix="Pick a category for this transaction",
                ))
            elif draft.category not in allowed:
                issues.append(ValidationIssue(
                    field="category",
                    issue_type="unknown_reference",
                    message=f"Category '{draft.category}' cannot be used for {draft.type.value}",
                    severity="error",
                ))

        if not draft.wallet_id:
            issues.append(ValidationIssue(
                field="wallet_id",
                issue_type="missing",
                message="Select a wallet first",
                severity="error",
            ))

        if not any(i.severity == "error" for i in issues):
            issues.extend(self._transaction_semantics(draft, wallet_known))

        return ValidationResult(subject="transaction", issues=issues)

    def _transaction_semantics(
        self,
        draft: TransactionDraft,
        wallet_known: bool,
    ) -> list[ValidationIssue]:
        issues = []
        now = self._clock()

        if draft.date is not None:
            limit = now + timedelta(days=self._settings.future_date_tolerance_days)
            tx_date = draft.date
            if tx_date.tzinfo is not None:
                tx_date = tx_date.astimezone().replace(tzinfo=None)
            if tx_date > limit:
                issues.append(ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message=f"Transaction date ({tx_date:%Y-%m-%d}) is in the future",
                    severity="warning",
                    suggested_fix="Please verify the date is correct",
                ))

        if not wallet_known:
            issues.append(ValidationIssue(
                field="wallet_id",
                issue_type="unknown_reference",
                message=f"Wallet '{draft.wallet_id}' does not exist; its balance will not change",
                severity="warning",
            ))

        if draft.type == TransactionType.SAVINGS and draft.category not in ("", SAVINGS_CATEGORY_ID):
            issues.append(ValidationIssue(
                field="category",
                issue_type="overridden",
                message="Savings transactions are always filed under 'savings'",
                severity="info",
            ))

        return issues

    # ── WALLETS ───────────────────────────────────────────

    def check_wallet(
        self,
        name: str,
        wallet_type: WalletType,
        members: Optional[list[str]] = None,
    ) -> ValidationResult:
        issues = []

        if not name or not name.strip():
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Wallet name is required",
                severity="error",
            ))
        elif len(name.strip()) > NAME_MAX_LENGTH:
            issues.append(ValidationIssue(
                field="name",
                issue_type="too_long",
                message=f"Wallet name must be at most {NAME_MAX_LENGTH} characters",
                severity="error",
            ))

        named = [m for m in (members or []) if m and m.strip()]
        if wallet_type == WalletType.SHARED and not named:
            issues.append(ValidationIssue(
                field="members",
                issue_type="missing",
                message="Shared wallet has no members yet",
                severity="warning",
                suggested_fix="Add the people who share this wallet",
            ))
        if wallet_type == WalletType.PERSONAL and named:
            issues.append(ValidationIssue(
                field="members",
                issue_type="ignored",
                message="Members are ignored for a personal wallet",
                severity="info",
            ))

        return ValidationResult(subject="wallet", issues=issues)

    # ── SAVINGS GOALS ─────────────────────────────────────

    def check_goal(self, draft: GoalDraft) -> ValidationResult:
        issues = []

        if not draft.title:
            issues.append(ValidationIssue(
                field="title",
                issue_type="missing",
                message="Please enter a saving name",
                severity="error",
            ))

        if not _is_positive(draft.target_amount):
            issues.append(ValidationIssue(
                field="target_amount",
                issue_type="invalid_value",
                message="Target amount must be greater than 0",
                severity="error",
            ))

        if not any(i.severity == "error" for i in issues):
            if draft.deadline and draft.deadline < self._clock().date():
                issues.append(ValidationIssue(
                    field="deadline",
                    issue_type="past_date",
                    message=f"Deadline ({draft.deadline}) has already passed",
                    severity="warning",
                ))
            names = [m.name for m in draft.members]
            if len(names) != len(set(names)):
                issues.append(ValidationIssue(
                    field="members",
                    issue_type="duplicate",
                    message="Members with the same name share one contribution ledger",
                    severity="warning",
                ))

        return ValidationResult(subject="goal", issues=issues)

    def check_contribution(self, amount: float, contributor: str) -> ValidationResult:
        issues = []

        if not _is_positive(amount):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message=AMOUNT_MUST_BE_POSITIVE,
                severity="error",
            ))
        if not contributor or not contributor.strip():
            issues.append(ValidationIssue(
                field="contributor",
                issue_type="missing",
                message="Contributor name is required",
                severity="error",
            ))
        elif len(contributor.strip()) > NAME_MAX_LENGTH:
            issues.append(ValidationIssue(
                field="contributor",
                issue_type="too_long",
                message=f"Contributor name must be at most {NAME_MAX_LENGTH} characters",
                severity="error",
            ))

        return ValidationResult(subject="contribution", issues=issues)

    # ── ANALYTICS ─────────────────────────────────────────

    def check_archive_year(self, year: int) -> ValidationResult:
        issues = []
        current_year = self._clock().year
        if year >= current_year:
            issues.append(ValidationIssue(
                field="year",
                issue_type="open_period",
                message=f"{year} is not closed yet; only past years can be archived",
                severity="error",
            ))
        return ValidationResult(subject="analytics", issues=issues)


def enforce(result: ValidationResult) -> ValidationResult:
    """
    Raise ValidationError if the result has errors; log everything else.

    Returns the result unchanged so callers can keep reading it.
    """
    if result.has_errors:
        raise ValidationError(result)

    for issue in result.issues:
        log = logger.warning if issue.severity == "warning" else logger.info
        log(
            "validation_issue",
            subject=result.subject,
            field=issue.field,
            issue_type=issue.issue_type,
            message=issue.message,
        )
    return result
