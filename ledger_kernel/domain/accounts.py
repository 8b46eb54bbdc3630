"""
Accounts -- Chart-of-accounts domain types.

Responsibility:
    Closed enums for account type, normal balance, account category and
    statement section, plus the frozen ``Account`` record. Every category
    belongs to exactly one account type and one statement section; the
    mapping below is exhaustive and checked when this module is imported.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Failure modes:
    - InvalidAccountTypeError for an account type outside the five types.
    - InvalidCategoryError when a category does not belong to the type.
    - MissingFieldError for an account with no id or code.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ledger_kernel.exceptions import (
    InvalidAccountTypeError,
    InvalidCategoryError,
    MissingFieldError,
)


class AccountType(str, Enum):
    """Types of accounts in the chart of accounts."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"

    @classmethod
    def parse(cls, value: AccountType | str) -> AccountType:
        """Coerce a string to AccountType, raising InvalidAccountTypeError."""
        if isinstance(value, AccountType):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise InvalidAccountTypeError(str(value)) from e


class NormalBalance(str, Enum):
    """Normal balance side for an account."""

    DEBIT = "debit"
    CREDIT = "credit"


class StatementSection(str, Enum):
    """Statement line group a category rolls up into."""

    CURRENT_ASSETS = "current_assets"
    FIXED_ASSETS = "fixed_assets"
    CURRENT_LIABILITIES = "current_liabilities"
    LONG_TERM_LIABILITIES = "long_term_liabilities"
    EQUITY = "equity"
    REVENUE = "revenue"
    OTHER_INCOME = "other_income"
    COST_OF_GOODS_SOLD = "cost_of_goods_sold"
    OPERATING_EXPENSES = "operating_expenses"
    OTHER_EXPENSES = "other_expenses"


class AccountCategory(str, Enum):
    """Account sub-classification used for statement grouping."""

    # Assets
    CASH = "cash"
    ACCOUNTS_RECEIVABLE = "accounts_receivable"
    INVENTORY = "inventory"
    PREPAID_EXPENSES = "prepaid_expenses"
    CURRENT_ASSET = "current_asset"
    FIXED_ASSET = "fixed_asset"
    PROPERTY = "property"
    EQUIPMENT = "equipment"
    VEHICLES = "vehicles"
    INVESTMENTS = "investments"
    INTANGIBLE_ASSETS = "intangible_assets"
    # Liabilities
    ACCOUNTS_PAYABLE = "accounts_payable"
    SHORT_TERM_LOANS = "short_term_loans"
    ACCRUED_EXPENSES = "accrued_expenses"
    CURRENT_LIABILITY = "current_liability"
    LONG_TERM_LIABILITY = "long_term_liability"
    LONG_TERM_LOANS = "long_term_loans"
    BONDS = "bonds"
    # Equity
    OWNER_EQUITY = "owner_equity"
    RETAINED_EARNINGS = "retained_earnings"
    OTHER_EQUITY = "other_equity"
    CURRENT_EARNINGS = "current_earnings"
    # Revenue
    OPERATING_REVENUE = "operating_revenue"
    OTHER_INCOME = "other_income"
    # Expenses
    COST_OF_GOODS_SOLD = "cost_of_goods_sold"
    OPERATING_EXPENSE = "operating_expense"
    DEPRECIATION = "depreciation"
    INTEREST_EXPENSE = "interest_expense"
    OTHER_EXPENSE = "other_expense"


_A = AccountType
_S = StatementSection
_C = AccountCategory

CATEGORY_MAP: dict[AccountCategory, tuple[AccountType, StatementSection]] = {
    _C.CASH: (_A.ASSET, _S.CURRENT_ASSETS),
    _C.ACCOUNTS_RECEIVABLE: (_A.ASSET, _S.CURRENT_ASSETS),
    _C.INVENTORY: (_A.ASSET, _S.CURRENT_ASSETS),
    _C.PREPAID_EXPENSES: (_A.ASSET, _S.CURRENT_ASSETS),
    _C.CURRENT_ASSET: (_A.ASSET, _S.CURRENT_ASSETS),
    _C.FIXED_ASSET: (_A.ASSET, _S.FIXED_ASSETS),
    _C.PROPERTY: (_A.ASSET, _S.FIXED_ASSETS),
    _C.EQUIPMENT: (_A.ASSET, _S.FIXED_ASSETS),
    _C.VEHICLES: (_A.ASSET, _S.FIXED_ASSETS),
    _C.INVESTMENTS: (_A.ASSET, _S.FIXED_ASSETS),
    _C.INTANGIBLE_ASSETS: (_A.ASSET, _S.FIXED_ASSETS),
    _C.ACCOUNTS_PAYABLE: (_A.LIABILITY, _S.CURRENT_LIABILITIES),
    _C.SHORT_TERM_LOANS: (_A.LIABILITY, _S.CURRENT_LIABILITIES),
    _C.ACCRUED_EXPENSES: (_A.LIABILITY, _S.CURRENT_LIABILITIES),
    _C.CURRENT_LIABILITY: (_A.LIABILITY, _S.CURRENT_LIABILITIES),
    _C.LONG_TERM_LIABILITY: (_A.LIABILITY, _S.LONG_TERM_LIABILITIES),
    _C.LONG_TERM_LOANS: (_A.LIABILITY, _S.LONG_TERM_LIABILITIES),
    _C.BONDS: (_A.LIABILITY, _S.LONG_TERM_LIABILITIES),
    _C.OWNER_EQUITY: (_A.EQUITY, _S.EQUITY),
    _C.RETAINED_EARNINGS: (_A.EQUITY, _S.EQUITY),
    _C.OTHER_EQUITY: (_A.EQUITY, _S.EQUITY),
    _C.CURRENT_EARNINGS: (_A.EQUITY, _S.EQUITY),
    _C.OPERATING_REVENUE: (_A.REVENUE, _S.REVENUE),
    _C.OTHER_INCOME: (_A.REVENUE, _S.OTHER_INCOME),
    _C.COST_OF_GOODS_SOLD: (_A.EXPENSE, _S.COST_OF_GOODS_SOLD),
    _C.OPERATING_EXPENSE: (_A.EXPENSE, _S.OPERATING_EXPENSES),
    _C.DEPRECIATION: (_A.EXPENSE, _S.OPERATING_EXPENSES),
    _C.INTEREST_EXPENSE: (_A.EXPENSE, _S.OTHER_EXPENSES),
    _C.OTHER_EXPENSE: (_A.EXPENSE, _S.OTHER_EXPENSES),
}

_missing = set(AccountCategory) - set(CATEGORY_MAP)
if _missing:
    raise RuntimeError(
        f"Account categories without a statement section: "
        f"{sorted(c.value for c in _missing)}"
    )

DEBIT_NORMAL_TYPES = frozenset({AccountType.ASSET, AccountType.EXPENSE})

# Default category when a record carries only an account type.
DEFAULT_CATEGORY: dict[AccountType, AccountCategory] = {
    AccountType.ASSET: AccountCategory.CURRENT_ASSET,
    AccountType.LIABILITY: AccountCategory.CURRENT_LIABILITY,
    AccountType.EQUITY: AccountCategory.OTHER_EQUITY,
    AccountType.REVENUE: AccountCategory.OPERATING_REVENUE,
    AccountType.EXPENSE: AccountCategory.OPERATING_EXPENSE,
}


def normal_balance_for(account_type: AccountType | str) -> NormalBalance:
    """Debit for assets and expenses, credit for everything else."""
    if AccountType.parse(account_type) in DEBIT_NORMAL_TYPES:
        return NormalBalance.DEBIT
    return NormalBalance.CREDIT


def section_for(category: AccountCategory) -> StatementSection:
    return CATEGORY_MAP[category][1]


def categories_in(section: StatementSection) -> tuple[AccountCategory, ...]:
    """Categories of a section in enum declaration order."""
    return tuple(c for c in AccountCategory if CATEGORY_MAP[c][1] == section)


@dataclass(frozen=True)
class Account:
    """
    A chart-of-accounts entry.

    ``account_type`` and ``category`` accept enum members or their string
    values; ``category`` defaults from the type when omitted.
    """

    account_id: str
    code: str
    name: str
    account_type: AccountType
    category: AccountCategory | None = None

    def __post_init__(self) -> None:
        if not self.account_id:
            raise MissingFieldError("account_id", "Account")
        if not self.code:
            raise MissingFieldError("code", f"Account {self.account_id}")

        object.__setattr__(self, "account_id", str(self.account_id))
        account_type = AccountType.parse(self.account_type)
        object.__setattr__(self, "account_type", account_type)

        category = self.category
        if category is None:
            category = DEFAULT_CATEGORY[account_type]
        elif not isinstance(category, AccountCategory):
            try:
                category = AccountCategory(str(category).strip().lower())
            except ValueError as e:
                raise InvalidCategoryError(
                    self.code, account_type.value, str(category)
                ) from e
        if CATEGORY_MAP[category][0] != account_type:
            raise InvalidCategoryError(self.code, account_type.value, category.value)
        object.__setattr__(self, "category", category)

    @property
    def normal_balance(self) -> NormalBalance:
        return normal_balance_for(self.account_type)

    @property
    def section(self) -> StatementSection:
        return section_for(self.category)
