"""
Financial Reporting Domain Models (``ledger_reporting.models``).

Responsibility
--------------
Frozen dataclass value objects for the statement outputs: balance sheet,
income statement and cash-flow statement.

Architecture position
---------------------
**Reporting layer** -- pure data definitions with ZERO I/O.  Built by
``ledger_reporting.statements`` and returned by ``ReportingService``.

Invariants enforced
-------------------
* All models are ``frozen=True``; mapping fields are stored as read-only
  ``MappingProxyType`` views and left out of the hash.
* All monetary fields are ``Money``; never ``float``.
* Totals and subtotals are derived properties computed from the stored
  components, never stored.  Each report lists them in ``derived_fields``
  so that ``render_to_dict`` can include them.

Audit relevance
---------------
* ``ReportMetadata`` carries the generation timestamp (from an injected
  clock) and the parameters needed to regenerate the report.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from types import MappingProxyType

from ledger_kernel.domain.accounts import AccountCategory, AccountType
from ledger_kernel.domain.diagnostics import ComputationWarning
from ledger_kernel.domain.values import Currency, Money, sum_money


# =========================================================================
# Enums
# =========================================================================


class ReportType(str, Enum):
    """Types of financial reports."""

    BALANCE_SHEET = "balance_sheet"
    INCOME_STATEMENT = "income_statement"
    CASH_FLOW = "cash_flow"
    RATIOS = "ratios"
    RECONCILIATION = "reconciliation"
    TAX = "tax"


# =========================================================================
# Report Metadata (common to all reports)
# =========================================================================


@dataclass(frozen=True)
class ReportMetadata:
    """Metadata attached to every financial report."""

    report_type: ReportType
    entity_name: str
    currency: str
    as_of_date: date
    generated_at: str  # ISO format timestamp from injected clock
    period_start: date | None = None
    period_end: date | None = None


def _total(amounts: Mapping[object, Money], currency: Currency) -> Money:
    return sum_money(amounts.values(), currency)


def _freeze(report: object, *names: str) -> None:
    for name in names:
        object.__setattr__(report, name, MappingProxyType(dict(getattr(report, name))))


def _get(amounts: Mapping[AccountCategory, Money], category: AccountCategory,
         currency: Currency) -> Money:
    return amounts.get(category, Money.zero(currency))


@dataclass(frozen=True)
class AccountBalanceLine:
    """Natural-sign balance of one account."""

    account_id: str
    account_code: str
    account_name: str
    account_type: AccountType
    category: AccountCategory
    balance: Money


# =========================================================================
# Balance Sheet
# =========================================================================


@dataclass(frozen=True)
class AssetSections:
    currency: Currency
    current: Mapping[AccountCategory, Money] = field(default_factory=dict, hash=False)
    fixed: Mapping[AccountCategory, Money] = field(default_factory=dict, hash=False)

    derived_fields = ("total_current", "total_fixed", "total")

    def __post_init__(self) -> None:
        _freeze(self, "current", "fixed")

    @property
    def total_current(self) -> Money:
        return _total(self.current, self.currency)

    @property
    def total_fixed(self) -> Money:
        return _total(self.fixed, self.currency)

    @property
    def total(self) -> Money:
        return self.total_current + self.total_fixed


@dataclass(frozen=True)
class LiabilitySections:
    currency: Currency
    current: Mapping[AccountCategory, Money] = field(default_factory=dict, hash=False)
    long_term: Mapping[AccountCategory, Money] = field(default_factory=dict, hash=False)

    derived_fields = ("total_current", "total_long_term", "total")

    def __post_init__(self) -> None:
        _freeze(self, "current", "long_term")

    @property
    def total_current(self) -> Money:
        return _total(self.current, self.currency)

    @property
    def total_long_term(self) -> Money:
        return _total(self.long_term, self.currency)

    @property
    def total(self) -> Money:
        return self.total_current + self.total_long_term


@dataclass(frozen=True)
class BalanceSheetReport:
    """
    Classified balance sheet.

    Assets = Liabilities + Equity is checked within ``tolerance``.  An
    unbalanced sheet is still returned with ``is_balanced`` False and an
    UNBALANCED_BALANCE_SHEET warning.
    """

    metadata: ReportMetadata
    currency: Currency
    assets: AssetSections
    liabilities: LiabilitySections
    equity: Mapping[AccountCategory, Money] = field(hash=False)
    account_balances: tuple[AccountBalanceLine, ...]
    tolerance: Decimal
    warnings: tuple[ComputationWarning, ...] = ()

    derived_fields = (
        "total_assets",
        "total_liabilities",
        "total_equity",
        "total_liabilities_and_equity",
        "imbalance",
        "is_balanced",
    )

    def __post_init__(self) -> None:
        _freeze(self, "equity")

    @property
    def total_assets(self) -> Money:
        return self.assets.total

    @property
    def total_liabilities(self) -> Money:
        return self.liabilities.total

    @property
    def total_equity(self) -> Money:
        return _total(self.equity, self.currency)

    @property
    def total_liabilities_and_equity(self) -> Money:
        return self.total_liabilities + self.total_equity

    @property
    def imbalance(self) -> Money:
        """Assets minus liabilities and equity."""
        return self.total_assets - self.total_liabilities_and_equity

    @property
    def is_balanced(self) -> bool:
        return abs(self.imbalance.amount) <= self.tolerance

    def category_amount(self, category: AccountCategory) -> Money:
        """Amount of one category wherever it sits on the sheet."""
        for section in (
            self.assets.current,
            self.assets.fixed,
            self.liabilities.current,
            self.liabilities.long_term,
            self.equity,
        ):
            if category in section:
                return section[category]
        return Money.zero(self.currency)


# =========================================================================
# Income Statement
# =========================================================================


@dataclass(frozen=True)
class IncomeStatementReport:
    """
    Multi-step income statement.

    Revenue - COGS = Gross Profit - Operating Expenses = Operating Income
    + Other Income - Other Expenses = Net Income
    """

    metadata: ReportMetadata
    currency: Currency
    revenue: Mapping[AccountCategory, Money] = field(hash=False)
    cost_of_goods_sold: Mapping[AccountCategory, Money] = field(hash=False)
    operating_expenses: Mapping[AccountCategory, Money] = field(hash=False)
    other_income: Mapping[AccountCategory, Money] = field(hash=False)
    other_expenses: Mapping[AccountCategory, Money] = field(hash=False)
    account_balances: tuple[AccountBalanceLine, ...] = ()
    warnings: tuple[ComputationWarning, ...] = ()

    derived_fields = (
        "total_revenue",
        "total_cost_of_goods_sold",
        "total_operating_expenses",
        "total_other_income",
        "total_other_expenses",
        "gross_profit",
        "operating_income",
        "net_income",
        "interest_expense",
    )

    def __post_init__(self) -> None:
        _freeze(
            self,
            "revenue",
            "cost_of_goods_sold",
            "operating_expenses",
            "other_income",
            "other_expenses",
        )

    @property
    def total_revenue(self) -> Money:
        return _total(self.revenue, self.currency)

    @property
    def total_cost_of_goods_sold(self) -> Money:
        return _total(self.cost_of_goods_sold, self.currency)

    @property
    def total_operating_expenses(self) -> Money:
        return _total(self.operating_expenses, self.currency)

    @property
    def total_other_income(self) -> Money:
        return _total(self.other_income, self.currency)

    @property
    def total_other_expenses(self) -> Money:
        return _total(self.other_expenses, self.currency)

    @property
    def total_expenses(self) -> Money:
        return (
            self.total_cost_of_goods_sold
            + self.total_operating_expenses
            + self.total_other_expenses
        )

    @property
    def gross_profit(self) -> Money:
        return self.total_revenue - self.total_cost_of_goods_sold

    @property
    def operating_income(self) -> Money:
        return self.gross_profit - self.total_operating_expenses

    @property
    def net_income(self) -> Money:
        return self.operating_income + self.total_other_income - self.total_other_expenses

    @property
    def interest_expense(self) -> Money:
        return _get(self.other_expenses, AccountCategory.INTEREST_EXPENSE, self.currency)

    @property
    def depreciation(self) -> Money:
        return _get(self.operating_expenses, AccountCategory.DEPRECIATION, self.currency)


# =========================================================================
# Cash Flow Statement (Indirect Method)
# =========================================================================


@dataclass(frozen=True)
class OperatingActivities:
    """Net income plus named non-cash and working-capital adjustments."""

    currency: Currency
    net_income: Money
    adjustments: Mapping[str, Money] = field(default_factory=dict, hash=False)

    derived_fields = ("total_adjustments", "net_cash_from_operations")

    def __post_init__(self) -> None:
        _freeze(self, "adjustments")

    @property
    def total_adjustments(self) -> Money:
        return _total(self.adjustments, self.currency)

    @property
    def net_cash_from_operations(self) -> Money:
        return self.net_income + self.total_adjustments


@dataclass(frozen=True)
class CashFlowStatementReport:
    """
    Statement of cash flows.

    Investing and financing map account codes to cash effects: a fixed
    asset contributes minus its movement, a long-term liability or equity
    account plus its movement.
    """

    metadata: ReportMetadata
    currency: Currency
    operating: OperatingActivities
    investing: Mapping[str, Money] = field(hash=False)
    financing: Mapping[str, Money] = field(hash=False)
    beginning_cash: Money
    ledger_ending_cash: Money
    warnings: tuple[ComputationWarning, ...] = ()

    derived_fields = (
        "net_cash_from_operations",
        "net_cash_from_investing",
        "net_cash_from_financing",
        "net_change_in_cash",
        "ending_cash",
        "reconciles_to_ledger",
    )

    def __post_init__(self) -> None:
        _freeze(self, "investing", "financing")

    @property
    def net_cash_from_operations(self) -> Money:
        return self.operating.net_cash_from_operations

    @property
    def net_cash_from_investing(self) -> Money:
        return _total(self.investing, self.currency)

    @property
    def net_cash_from_financing(self) -> Money:
        return _total(self.financing, self.currency)

    @property
    def net_change_in_cash(self) -> Money:
        return (
            self.net_cash_from_operations
            + self.net_cash_from_investing
            + self.net_cash_from_financing
        )

    @property
    def ending_cash(self) -> Money:
        return self.beginning_cash + self.net_change_in_cash

    @property
    def reconciles_to_ledger(self) -> bool:
        return self.ending_cash == self.ledger_ending_cash
