"""
Pure financial statement transformation functions.

These functions turn a chart of accounts and a list of journal entries
into balance sheets, income statements and cash-flow statements.
ZERO I/O. ZERO side effects.

All monetary values are Money. All inputs/outputs are frozen dataclasses.

Functions in this module follow the ledger_kernel/domain purity convention:
- No database access
- No clock access (the caller supplies ReportMetadata)
- No file I/O
- Deterministic: same inputs always produce same outputs
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any

from ledger_engines.balance import BalanceCalculator
from ledger_kernel.domain.accounts import (
    Account,
    AccountCategory,
    AccountType,
    StatementSection,
    categories_in,
)
from ledger_kernel.domain.diagnostics import ComputationWarning, WarningCode
from ledger_kernel.domain.journal import JournalEntry
from ledger_kernel.domain.values import Currency, Money, sum_money
from ledger_kernel.logging_config import get_logger
from ledger_kernel.repository import check_date_range
from ledger_reporting.config import ReportingConfig
from ledger_reporting.models import (
    AccountBalanceLine,
    AssetSections,
    BalanceSheetReport,
    CashFlowStatementReport,
    IncomeStatementReport,
    LiabilitySections,
    OperatingActivities,
    ReportMetadata,
    ReportType,
)

logger = get_logger("reporting.statements")

_calculator = BalanceCalculator()


# =========================================================================
# Helpers
# =========================================================================


def _config(config: ReportingConfig | None) -> ReportingConfig:
    return config if config is not None else ReportingConfig()


def _metadata(
    metadata: ReportMetadata | None,
    report_type: ReportType,
    config: ReportingConfig,
    as_of: date,
    start: date | None = None,
) -> ReportMetadata:
    if metadata is not None:
        return metadata
    return ReportMetadata(
        report_type=report_type,
        entity_name=config.entity_name,
        currency=config.default_currency,
        as_of_date=as_of,
        generated_at="",
        period_start=start,
        period_end=as_of if start is not None else None,
    )


def _window(
    entries: Iterable[JournalEntry], start: date | None, end: date
) -> tuple[JournalEntry, ...]:
    return tuple(
        e for e in entries
        if e.entry_date <= end and (start is None or e.entry_date >= start)
    )


def check_entries(
    entries: Iterable[JournalEntry], config: ReportingConfig
) -> tuple[ComputationWarning, ...]:
    """
    One UNBALANCED_ENTRY warning per unbalanced entry.

    Raises:
        UnbalancedEntryError: On the first unbalanced entry when
            ``config.strict_entries`` is set.
    """
    warnings: list[ComputationWarning] = []
    for entry in entries:
        if entry.is_balanced:
            continue
        if config.strict_entries:
            logger.error("unbalanced_entry_rejected", extra={"entry_id": entry.entry_id})
            entry.validate()
        logger.warning("unbalanced_entry_flagged", extra={"entry_id": entry.entry_id})
        warnings.append(ComputationWarning(
            code=WarningCode.UNBALANCED_ENTRY,
            message=(
                f"Entry {entry.entry_id} is unbalanced: debits "
                f"{entry.total_debits.amount} != credits {entry.total_credits.amount}"
            ),
            details={
                "entry_id": entry.entry_id,
                "debits": str(entry.total_debits.amount),
                "credits": str(entry.total_credits.amount),
            },
        ))
    return tuple(warnings)


def _balance_lines(
    accounts: Sequence[Account], balances: Mapping[str, Money]
) -> tuple[AccountBalanceLine, ...]:
    by_id = {a.account_id: a for a in accounts}
    return tuple(
        AccountBalanceLine(
            account_id=account_id,
            account_code=by_id[account_id].code,
            account_name=by_id[account_id].name,
            account_type=by_id[account_id].account_type,
            category=by_id[account_id].category,
            balance=balance,
        )
        for account_id, balance in balances.items()
    )


def _category_totals(
    accounts: Sequence[Account],
    balances: Mapping[str, Money],
    currency: Currency,
) -> dict[AccountCategory, Money]:
    totals: dict[AccountCategory, Money] = {}
    for account in accounts:
        current = totals.get(account.category, Money.zero(currency))
        totals[account.category] = current + balances[account.account_id]
    return totals


def _section(
    section: StatementSection,
    totals: Mapping[AccountCategory, Money],
    currency: Currency,
    include_zero: bool,
) -> dict[AccountCategory, Money]:
    """Categories of ``section`` in enum order; zero ones only if asked."""
    result: dict[AccountCategory, Money] = {}
    for category in categories_in(section):
        amount = totals.get(category, Money.zero(currency))
        if amount.is_zero and not include_zero:
            continue
        result[category] = amount
    return result


def _net_income(
    accounts: Sequence[Account], balances: Mapping[str, Money], currency: Currency
) -> Money:
    revenue = sum_money(
        (balances[a.account_id] for a in accounts if a.account_type == AccountType.REVENUE),
        currency,
    )
    expense = sum_money(
        (balances[a.account_id] for a in accounts if a.account_type == AccountType.EXPENSE),
        currency,
    )
    return revenue - expense


# =========================================================================
# Balance Sheet
# =========================================================================


def build_balance_sheet(
    accounts: Sequence[Account],
    entries: Iterable[JournalEntry],
    as_of: date,
    config: ReportingConfig | None = None,
    metadata: ReportMetadata | None = None,
) -> BalanceSheetReport:
    """
    Classified balance sheet as of ``as_of``.

    Every entry dated on or before ``as_of`` contributes.  Revenue and
    expense not yet closed to retained earnings appear in equity as
    ``current_earnings``.
    """
    config = _config(config)
    currency = config.currency
    entries = _window(entries, None, as_of)
    warnings = list(check_entries(entries, config))

    balances = _calculator.balances_by_account(
        accounts, entries, as_of=as_of, currency=currency
    )
    totals = _category_totals(accounts, balances, currency)

    earnings = _net_income(accounts, balances, currency)
    totals[AccountCategory.CURRENT_EARNINGS] = (
        totals.get(AccountCategory.CURRENT_EARNINGS, Money.zero(currency)) + earnings
    )

    include_zero = config.include_zero_balances
    report = BalanceSheetReport(
        metadata=_metadata(metadata, ReportType.BALANCE_SHEET, config, as_of),
        currency=currency,
        assets=AssetSections(
            currency=currency,
            current=_section(StatementSection.CURRENT_ASSETS, totals, currency, include_zero),
            fixed=_section(StatementSection.FIXED_ASSETS, totals, currency, include_zero),
        ),
        liabilities=LiabilitySections(
            currency=currency,
            current=_section(
                StatementSection.CURRENT_LIABILITIES, totals, currency, include_zero
            ),
            long_term=_section(
                StatementSection.LONG_TERM_LIABILITIES, totals, currency, include_zero
            ),
        ),
        equity=_section(StatementSection.EQUITY, totals, currency, include_zero),
        account_balances=_balance_lines(accounts, balances),
        tolerance=config.effective_balance_tolerance,
    )

    if not report.is_balanced:
        logger.warning("balance_sheet_unbalanced", extra={
            "as_of": as_of.isoformat(),
            "total_assets": str(report.total_assets.amount),
            "total_liabilities_and_equity": str(report.total_liabilities_and_equity.amount),
            "tolerance": str(report.tolerance),
        })
        warnings.append(ComputationWarning(
            code=WarningCode.UNBALANCED_BALANCE_SHEET,
            message=(
                f"Assets {report.total_assets.amount} != liabilities and equity "
                f"{report.total_liabilities_and_equity.amount}"
            ),
            details={
                "imbalance": str(report.imbalance.amount),
                "tolerance": str(report.tolerance),
            },
        ))

    return dataclasses.replace(report, warnings=tuple(warnings))


# =========================================================================
# Income Statement
# =========================================================================


def build_income_statement(
    accounts: Sequence[Account],
    entries: Iterable[JournalEntry],
    start: date,
    end: date,
    config: ReportingConfig | None = None,
    metadata: ReportMetadata | None = None,
) -> IncomeStatementReport:
    """Multi-step income statement for entries dated in ``[start, end]``."""
    check_date_range(start, end)
    config = _config(config)
    currency = config.currency
    entries = _window(entries, start, end)
    warnings = check_entries(entries, config)

    balances = _calculator.balances_by_account(
        accounts, entries, as_of=end, start=start, currency=currency
    )
    totals = _category_totals(accounts, balances, currency)
    include_zero = config.include_zero_balances
    pl_accounts = [
        a for a in accounts
        if a.account_type in (AccountType.REVENUE, AccountType.EXPENSE)
    ]

    return IncomeStatementReport(
        metadata=_metadata(metadata, ReportType.INCOME_STATEMENT, config, end, start),
        currency=currency,
        revenue=_section(StatementSection.REVENUE, totals, currency, include_zero),
        cost_of_goods_sold=_section(
            StatementSection.COST_OF_GOODS_SOLD, totals, currency, include_zero
        ),
        operating_expenses=_section(
            StatementSection.OPERATING_EXPENSES, totals, currency, include_zero
        ),
        other_income=_section(StatementSection.OTHER_INCOME, totals, currency, include_zero),
        other_expenses=_section(
            StatementSection.OTHER_EXPENSES, totals, currency, include_zero
        ),
        account_balances=_balance_lines(
            pl_accounts, {a.account_id: balances[a.account_id] for a in pl_accounts}
        ),
        warnings=warnings,
    )


# =========================================================================
# Cash Flow Statement
# =========================================================================

_WORKING_CAPITAL_SECTIONS = (
    StatementSection.CURRENT_ASSETS,
    StatementSection.CURRENT_LIABILITIES,
)


def _as_money(value: Money | Decimal | str | int, currency: Currency) -> Money:
    return value if isinstance(value, Money) else Money.of(value, currency)


def _derived_adjustments(
    accounts: Sequence[Account],
    movements: Mapping[str, Money],
    income: IncomeStatementReport,
    currency: Currency,
) -> dict[str, Money]:
    """Depreciation add-back and working-capital changes from the ledger."""
    adjustments: dict[str, Money] = {}
    if not income.depreciation.is_zero:
        adjustments["depreciation"] = income.depreciation

    totals: dict[AccountCategory, Money] = {}
    for account in accounts:
        if account.section not in _WORKING_CAPITAL_SECTIONS:
            continue
        if account.category == AccountCategory.CASH:
            continue
        movement = movements[account.account_id]
        # Asset growth consumes cash; liability growth provides it.
        effect = -movement if account.account_type == AccountType.ASSET else movement
        totals[account.category] = totals.get(account.category, Money.zero(currency)) + effect

    for category in AccountCategory:
        effect = totals.get(category)
        if effect is not None and not effect.is_zero:
            adjustments[f"change_in_{category.value}"] = effect
    return adjustments


def build_cash_flow_statement(
    accounts: Sequence[Account],
    entries: Iterable[JournalEntry],
    start: date,
    end: date,
    opening_cash: Money | Decimal | str | int | None = None,
    adjustments: Mapping[str, Money | Decimal | str | int] | None = None,
    config: ReportingConfig | None = None,
    metadata: ReportMetadata | None = None,
) -> CashFlowStatementReport:
    """
    Indirect-method cash-flow statement for ``[start, end]``.

    ``opening_cash`` defaults to the ledger balance of cash-category
    accounts on the day before ``start`` (zero when ``start`` is ``date.min``).  ``adjustments`` are the named
    operating adjustments (e.g. depreciation); with
    ``config.derive_cash_flow_adjustments`` the ledger-derived ones are
    added and caller-supplied names take precedence.
    """
    check_date_range(start, end)
    config = _config(config)
    currency = config.currency
    entries = tuple(entries)

    income = build_income_statement(accounts, entries, start, end, config)
    movements = _calculator.balances_by_account(
        accounts, _window(entries, start, end), as_of=end, start=start, currency=currency
    )
    cash_accounts = [a for a in accounts if a.category == AccountCategory.CASH]

    if opening_cash is not None:
        beginning_cash = _as_money(opening_cash, currency)
    elif start == date.min:
        beginning_cash = Money.zero(currency)
    else:
        opening = _calculator.balances_by_account(
            accounts,
            _window(entries, None, start - timedelta(days=1)),
            as_of=start - timedelta(days=1),
            currency=currency,
        )
        beginning_cash = sum_money((opening[a.account_id] for a in cash_accounts), currency)

    operating_adjustments: dict[str, Money] = {}
    investing: dict[str, Money] = {}
    if config.derive_cash_flow_adjustments:
        operating_adjustments.update(
            _derived_adjustments(accounts, movements, income, currency)
        )
    if not income.depreciation.is_zero:
        # Depreciation credited to fixed-asset accounts is not an investing flow.
        investing["depreciation_reclassified"] = -income.depreciation
    for name, value in (adjustments or {}).items():
        operating_adjustments[name] = _as_money(value, currency)

    financing: dict[str, Money] = {}
    include_zero = config.include_zero_balances
    for account in accounts:
        movement = movements[account.account_id]
        if movement.is_zero and not include_zero:
            continue
        if account.section == StatementSection.FIXED_ASSETS:
            investing[account.code] = -movement
        elif account.section in (
            StatementSection.LONG_TERM_LIABILITIES,
            StatementSection.EQUITY,
        ):
            financing[account.code] = movement

    ledger_ending_cash = beginning_cash + sum_money(
        (movements[a.account_id] for a in cash_accounts), currency
    )

    report = CashFlowStatementReport(
        metadata=_metadata(metadata, ReportType.CASH_FLOW, config, end, start),
        currency=currency,
        operating=OperatingActivities(
            currency=currency,
            net_income=income.net_income,
            adjustments=operating_adjustments,
        ),
        investing=investing,
        financing=financing,
        beginning_cash=beginning_cash,
        ledger_ending_cash=ledger_ending_cash,
    )

    warnings = list(income.warnings)
    if not report.reconciles_to_ledger:
        logger.warning("cash_flow_ledger_mismatch", extra={
            "ending_cash": str(report.ending_cash.amount),
            "ledger_ending_cash": str(ledger_ending_cash.amount),
        })
        warnings.append(ComputationWarning(
            code=WarningCode.CASH_FLOW_LEDGER_MISMATCH,
            message=(
                f"Statement ending cash {report.ending_cash.amount} differs from "
                f"ledger cash {ledger_ending_cash.amount}"
            ),
            details={
                "difference": str((report.ending_cash - ledger_ending_cash).amount),
            },
        ))
    return dataclasses.replace(report, warnings=tuple(warnings))


# =========================================================================
# Serialization
# =========================================================================


def _render_key(key: Any) -> str:
    if isinstance(key, Enum):
        return str(key.value)
    return str(key)


def render_to_dict(report: Any) -> Any:
    """
    Convert a report (or any value inside one) into JSON-safe primitives.

    Dataclasses become dicts of their fields plus the properties named in
    their ``derived_fields``; Money becomes ``{"amount", "currency"}``;
    Decimal becomes str; dates become ISO strings; enums become values.
    """
    if isinstance(report, Money):
        return {"amount": str(report.amount), "currency": report.currency.code}
    if isinstance(report, Currency):
        return report.code
    if isinstance(report, Decimal):
        return str(report)
    if isinstance(report, (date, datetime)):
        return report.isoformat()
    if isinstance(report, Enum):
        return report.value
    if dataclasses.is_dataclass(report) and not isinstance(report, type):
        out = {
            f.name: render_to_dict(getattr(report, f.name))
            for f in dataclasses.fields(report)
        }
        for name in getattr(report, "derived_fields", ()):
            out[name] = render_to_dict(getattr(report, name))
        return out
    if isinstance(report, Mapping):
        return {_render_key(k): render_to_dict(v) for k, v in report.items()}
    if isinstance(report, (list, tuple)):
        return [render_to_dict(v) for v in report]
    return report
