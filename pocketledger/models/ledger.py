"""
Core Data Models for Pocket Ledger

These models define the schemas for every entity the ledger store owns:
wallets, transactions, savings goals and the static category set.

DESIGN DECISION: Python attributes are snake_case while the serialized
form uses camelCase keys (walletId, targetAmount) so stored documents
stay compatible with the web client.
Dump with ``by_alias=True`` when writing to storage.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


MONTHS_PER_YEAR = 12
MONTH_ABBREVIATIONS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

SAVINGS_CATEGORY_ID = "savings"
INCOME_CATEGORY_ID = "income"
DEFAULT_WALLET_ID = "personal"

NAME_MAX_LENGTH = 100


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a monetary movement."""
    EXPENSE = "expense"
    INCOME = "income"
    SAVINGS = "savings"


class WalletType(str, Enum):
    """Whether a wallet belongs to one person or a group of members."""
    PERSONAL = "personal"
    SHARED = "shared"


class Theme(str, Enum):
    """Display preference. Not a domain entity."""
    LIGHT = "light"
    DARK = "dark"


class Collection(str, Enum):
    """
    Names of the persisted collections.

    The values double as storage keys (file names, worksheet payload keys).
    """
    TRANSACTIONS = "transactions"
    WALLETS = "wallets"
    SAVINGS_GOALS = "savingsGoals"
    ANALYTICS_HISTORY = "analyticsHistory"


class LedgerModel(BaseModel):
    """Base for persisted entities: camelCase on the wire, snake_case in code."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# CATEGORIES - static reference data
# =============================================================================

class Category(BaseModel):
    """A spending/earning category. Read-only reference data."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    icon: str
    color: str


DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category(id="food", name="Food", icon="🍔", color="hsl(30 85% 82%)"),
    Category(id="saving", name="Saving", icon="💰", color="hsl(340 80% 85%)"),
    Category(id="personal-funds", name="Personal Funds", icon="👤", color="hsl(340 80% 85%)"),
    Category(id="parent", name="Parent", icon="👪", color="hsl(340 80% 85%)"),
    Category(id="shopping", name="Shopping", icon="🛍️", color="hsl(340 80% 85%)"),
    Category(id="bills", name="Bills", icon="📄", color="hsl(270 60% 88%)"),
    Category(id="transport", name="Transport", icon="🚗", color="hsl(200 70% 85%)"),
    Category(id="entertainment", name="Entertainment", icon="🎮", color="hsl(280 70% 85%)"),
    Category(id="health", name="Health", icon="💊", color="hsl(160 60% 85%)"),
    Category(id=INCOME_CATEGORY_ID, name="Income", icon="💰", color="hsl(140 55% 80%)"),
    Category(id=SAVINGS_CATEGORY_ID, name="Savings", icon="🐱", color="hsla(44, 85%, 60%, 0.62)"),
)


def get_category(category_id: str) -> Optional[Category]:
    """Look up a default category by id."""
    for category in DEFAULT_CATEGORIES:
        if category.id == category_id:
            return category
    return None


def categories_for(tx_type: TransactionType) -> list[Category]:
    """
    Categories a user may pick for a transaction type.

    Income and savings each have exactly one category; expenses may use
    everything else.
    """
    tx_type = TransactionType(tx_type)
    if tx_type == TransactionType.INCOME:
        return [c for c in DEFAULT_CATEGORIES if c.id == INCOME_CATEGORY_ID]
    if tx_type == TransactionType.SAVINGS:
        return [c for c in DEFAULT_CATEGORIES if c.id == SAVINGS_CATEGORY_ID]
    return [
        c for c in DEFAULT_CATEGORIES
        if c.id not in (INCOME_CATEGORY_ID, SAVINGS_CATEGORY_ID)
    ]


# =============================================================================
# WALLETS
# =============================================================================

class Wallet(LedgerModel):
    """
    A named, balance-holding account.

    The balance is a cached running total maintained by the transaction
    ledger; it is never edited directly.
    """
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    type: WalletType = WalletType.PERSONAL
    members: Optional[list[str]] = None
    balance: float = 0.0

    @property
    def is_shared(self) -> bool:
        return self.type == WalletType.SHARED

    @property
    def member_count(self) -> int:
        return len(self.members or [])


def default_wallet(name: str = "My Wallet") -> Wallet:
    """The wallet seeded into an empty ledger."""
    return Wallet(id=DEFAULT_WALLET_ID, name=name, type=WalletType.PERSONAL)


# =============================================================================
# TRANSACTIONS
# =============================================================================

class TransactionDraft(BaseModel):
    """
    User input for a new transaction, before validation.

    Amount is deliberately unconstrained here so the validator can report
    a non-positive amount as a ledger validation failure.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    type: TransactionType
    amount: float
    category: str = ""
    wallet_id: str
    title: Optional[str] = None
    note: Optional[str] = None
    date: Optional[datetime] = None
    goal_id: Optional[str] = None


class Transaction(LedgerModel):
    """
    A single dated monetary movement attributed to one wallet.

    Savings transactions produced by a goal contribution carry the goal's
    id in ``goal_id``.
    """
    id: str = Field(..., min_length=1)
    type: TransactionType
    amount: float = Field(..., gt=0)
    category: str = Field(..., min_length=1)
    title: Optional[str] = None
    note: Optional[str] = None
    date: datetime
    wallet_id: str
    goal_id: Optional[str] = None
    balance_delta: Optional[float] = Field(
        default=None,
        description="Signed balance effect applied to the wallet when recorded"
    )

    @field_validator("date")
    @classmethod
    def to_local_naive(cls, v: datetime) -> datetime:
        """Dates written by a browser are UTC-aware; keep everything local and naive."""
        if v.tzinfo is not None:
            return v.astimezone().replace(tzinfo=None)
        return v

    @property
    def display_title(self) -> str:
        return self.title or self.category

    def __str__(self) -> str:
        sign = {"expense": "-", "income": "+"}.get(self.type.value, "")
        return f"{sign}{self.amount:.2f} | {self.display_title} | {self.date:%Y-%m-%d}"


# =============================================================================
# SAVINGS GOALS
# =============================================================================

class GoalMember(LedgerModel):
    """
    A participant in a savings goal.

    ``allocation`` is the amount the member intends to put in (set when the
    goal is created). ``contribution`` is what has actually been contributed.
    """
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    contribution: Optional[float] = Field(default=None, ge=0)
    allocation: Optional[float] = Field(default=None, ge=0)


class GoalDraft(BaseModel):
    """User input for a new savings goal."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = ""
    target_amount: float
    deadline: Optional[date] = None
    members: list[GoalMember] = Field(default_factory=list)


class SavingsGoal(LedgerModel):
    """
    A target amount pursued through named-member contributions.

    ``current_amount`` is the capped aggregate: members may contribute more
    than the target, the excess is visible through ``overflow``.
    """
    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=200)
    target_amount: float = Field(..., gt=0)
    current_amount: float = Field(default=0.0, ge=0)
    deadline: Optional[date] = None
    members: list[GoalMember] = Field(default_factory=list)

    @field_validator("members", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return [] if v is None else v

    @model_validator(mode='after')
    def validate_progress(self) -> 'SavingsGoal':
        if self.current_amount > self.target_amount:
            raise ValueError("Current amount cannot exceed target amount")
        return self

    @property
    def total_contributed(self) -> float:
        return sum(m.contribution or 0.0 for m in self.members)

    @property
    def overflow(self) -> float:
        return max(0.0, self.total_contributed - self.target_amount)

    @property
    def remaining(self) -> float:
        return max(0.0, self.target_amount - self.current_amount)

    @property
    def progress(self) -> float:
        """Completion ratio between 0 and 1."""
        return self.current_amount / self.target_amount

    @property
    def is_complete(self) -> bool:
        return self.current_amount >= self.target_amount

    def find_member(self, name: str) -> Optional[GoalMember]:
        """Exact, case-sensitive lookup by display name."""
        for member in self.members:
            if member.name == name:
                return member
        return None


# =============================================================================
# SNAPSHOTS
# =============================================================================

AnalyticsHistory = dict[int, list[float]]


class LedgerSnapshot(BaseModel):
    """Every collection the store owns, as loaded or as exposed to readers."""

    transactions: list[Transaction] = Field(default_factory=list)
    wallets: list[Wallet] = Field(default_factory=list)
    savings_goals: list[SavingsGoal] = Field(default_factory=list)
    analytics_history: AnalyticsHistory = Field(default_factory=dict)
    active_wallet_id: Optional[str] = None


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
        description="Type of issue (e.g., 'missing', 'invalid_value', 'unknown_reference')"
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
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """
    Result of validating a command's input.

    Only error-level issues block a command; warnings are logged.
    """

    subject: str = Field(
        ...,
        description="What was validated (e.g., 'transaction', 'goal')"
    )
    validated_at: datetime = Field(
        default_factory=datetime.now
    )
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [i.message for i in self.issues if i.severity == "warning"]

    @property
    def first_error(self) -> Optional[str]:
        for issue in self.issues:
            if issue.severity == "error":
                return issue.message
        return None


# =============================================================================
# READ MODELS (analytics views)
# =============================================================================

class CategoryTotal(BaseModel):
    """Expense total for one category."""

    category: Category
    total: float = Field(ge=0)
    percentage: float = Field(
        ge=0,
        le=100,
        description="Share of all expenses in the wallet"
    )


class MonthlyTotal(BaseModel):
    """Expense total for one calendar month."""

    year: int
    month: int = Field(ge=1, le=12)
    total: float = Field(ge=0)

    @property
    def label(self) -> str:
        return MONTH_ABBREVIATIONS[self.month - 1]


class DashboardSummary(BaseModel):
    """
    Headline figures for one wallet.

    The "current month" is the month of the wallet's latest transaction,
    or today's month when the wallet is empty.
    """

    wallet_id: str
    wallet_name: Optional[str] = None

    all_time_income: float = 0.0
    all_time_outflow: float = Field(
        default=0.0,
        description="Expenses plus savings"
    )

    period_year: int
    period_month: int = Field(ge=1, le=12)
    monthly_income: float = 0.0
    monthly_expenses: float = 0.0
    monthly_savings: float = 0.0

    total_saved: float = Field(
        default=0.0,
        description="Sum of current amounts across all savings goals"
    )

    @property
    def all_time_net(self) -> float:
        return self.all_time_income - self.all_time_outflow

    @property
    def monthly_net(self) -> float:
        return self.monthly_income - (self.monthly_expenses + self.monthly_savings)
