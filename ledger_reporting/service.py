"""
Reporting Service (``ledger_reporting.service``).

Responsibility
--------------
Orchestrates report generation -- balance sheet, income statement, cash
flow statement, financial ratios, trend series, bank reconciliation and
tax -- by bridging a ``LedgerRepository`` to the pure functions in
``statements.py`` and ``ledger_engines``.  This is a **read-only**
service: nothing is ever written back to the repository.

Architecture position
---------------------
**Reporting layer** -- thin glue.  Constructor: ``repository`` +
``org_id`` + ``clock`` + ``config``.  Holds only those injected
collaborators, so one instance may serve concurrent callers.

Invariants enforced
-------------------
* Read-only -- the repository is only queried.
* All monetary amounts use ``Money`` -- NEVER ``float``.
* Report metadata carries the generation timestamp from the injected
  clock and the parameters needed to regenerate the report.

Failure modes
-------------
* Invalid report parameters (end before start) -> ``InvalidDateRangeError``
  raised before any query.
* Tax year with no brackets and no fallback -> ``TaxYearNotFoundError``.
* Repository failures propagate unchanged.

Audit relevance
---------------
Structured log events are emitted for every report generation, carrying
report type, period, key totals and ``duration_ms``.  Each call runs
inside a ``LogContext`` binding ``org_id`` and a fresh ``report_id``.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Mapping
from datetime import date
from decimal import Decimal
from uuid import uuid4

from ledger_engines.balance import lines_for_account
from ledger_engines.bucketing import Granularity, PeriodBucketer, TrendPoint
from ledger_engines.ratios import FinancialRatios, RatioEngine
from ledger_engines.reconciliation import (
    ReconciliationEngine,
    ReconciliationResult,
    book_lines_from_entries,
)
from ledger_engines.tax import TaxCalculationResult, TaxCalculator, TaxSchedule
from ledger_kernel.domain.accounts import Account, AccountType
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dtos import TaxBracket
from ledger_kernel.domain.journal import JournalEntry
from ledger_kernel.domain.values import ExchangeRate, Money, sum_money
from ledger_kernel.exceptions import TaxYearNotFoundError
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.repository import LedgerRepository, check_date_range
from ledger_reporting.config import ReportingConfig
from ledger_reporting.models import (
    BalanceSheetReport,
    CashFlowStatementReport,
    IncomeStatementReport,
    ReportMetadata,
    ReportType,
)
from ledger_reporting.statements import (
    build_balance_sheet,
    build_cash_flow_statement,
    build_income_statement,
)

logger = get_logger("reporting.service")

# Earliest date handed to the repository when a report needs full history.
_BEGINNING_OF_TIME = date.min


def _elapsed_ms(t0: float) -> float:
    return round((time.monotonic() - t0) * 1000, 2)


class ReportingService:
    """
    Financial report generation service.

    Contract
    --------
    * Every public method returns a typed, frozen report or result.
    * All methods are **read-only** with respect to the repository.

    Guarantees
    ----------
    * No financial logic lives in this class; it loads data and delegates.
    * Clock is injectable for deterministic testing.

    Non-goals
    ---------
    * Does NOT post, close or adjust journal entries.
    * Does NOT cache reports; callers may memoize on the inputs.
    """

    def __init__(
        self,
        repository: LedgerRepository,
        org_id: str,
        clock: Clock | None = None,
        config: ReportingConfig | None = None,
    ):
        self._repository = repository
        self._org_id = org_id
        self._clock = clock or SystemClock()
        self._config = config or ReportingConfig.with_defaults()
        self._ratio_engine = RatioEngine(precision=self._config.ratio_precision)
        self._reconciler = ReconciliationEngine(
            date_tolerance_days=self._config.reconciliation_date_tolerance_days
        )
        self._tax = TaxCalculator()
        self._bucketer = PeriodBucketer()

        logger.info(
            "reporting_service_initialized",
            extra={
                "org_id": org_id,
                "entity_name": self._config.entity_name,
                "default_currency": self._config.default_currency,
            },
        )

    @property
    def config(self) -> ReportingConfig:
        return self._config

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _context(self) -> object:
        return LogContext.bind(org_id=self._org_id, report_id=str(uuid4()))

    def _load_accounts(self) -> list[Account]:
        accounts = self._repository.get_accounts(self._org_id)
        logger.debug(
            "accounts_loaded_for_reporting",
            extra={"account_count": len(accounts)},
        )
        return accounts

    def _load_entries(self, start: date, end: date) -> list[JournalEntry]:
        entries = self._repository.get_journal_entries(self._org_id, start, end)
        logger.debug(
            "entries_loaded_for_reporting",
            extra={
                "start": start.isoformat(),
                "end": end.isoformat(),
                "entry_count": len(entries),
            },
        )
        return entries

    def _build_metadata(
        self,
        report_type: ReportType,
        as_of_date: date,
        period_start: date | None = None,
        period_end: date | None = None,
    ) -> ReportMetadata:
        """Build report metadata with injected clock timestamp."""
        return ReportMetadata(
            report_type=report_type,
            entity_name=self._config.entity_name,
            currency=self._config.default_currency,
            as_of_date=as_of_date,
            generated_at=self._clock.now().isoformat(),
            period_start=period_start,
            period_end=period_end,
        )

    # =========================================================================
    # Statements
    # =========================================================================

    def balance_sheet(self, as_of_date: date) -> BalanceSheetReport:
        """
        Generate a classified balance sheet from the full ledger history
        up to and including ``as_of_date``.
        """
        with self._context():
            t0 = time.monotonic()
            accounts = self._load_accounts()
            entries = self._load_entries(_BEGINNING_OF_TIME, as_of_date)
            metadata = self._build_metadata(ReportType.BALANCE_SHEET, as_of_date)

            report = build_balance_sheet(
                accounts, entries, as_of_date, self._config, metadata
            )

            logger.info(
                "balance_sheet_generated",
                extra={
                    "as_of_date": as_of_date.isoformat(),
                    "currency": self._config.default_currency,
                    "total_assets": str(report.total_assets.amount),
                    "total_l_and_e": str(report.total_liabilities_and_equity.amount),
                    "is_balanced": report.is_balanced,
                    "warning_count": len(report.warnings),
                    "duration_ms": _elapsed_ms(t0),
                },
            )
            return report

    def income_statement(
        self, period_start: date, period_end: date
    ) -> IncomeStatementReport:
        """Generate a multi-step income statement for the period."""
        check_date_range(period_start, period_end)
        with self._context():
            t0 = time.monotonic()
            accounts = self._load_accounts()
            entries = self._load_entries(period_start, period_end)
            metadata = self._build_metadata(
                ReportType.INCOME_STATEMENT, period_end, period_start, period_end
            )

            report = build_income_statement(
                accounts, entries, period_start, period_end, self._config, metadata
            )

            logger.info(
                "income_statement_generated",
                extra={
                    "period_start": period_start.isoformat(),
                    "period_end": period_end.isoformat(),
                    "total_revenue": str(report.total_revenue.amount),
                    "net_income": str(report.net_income.amount),
                    "warning_count": len(report.warnings),
                    "duration_ms": _elapsed_ms(t0),
                },
            )
            return report

    def cash_flow(
        self,
        period_start: date,
        period_end: date,
        opening_cash: Money | Decimal | str | None = None,
        adjustments: Mapping[str, Money | Decimal | str] | None = None,
    ) -> CashFlowStatementReport:
        """
        Generate an indirect-method cash flow statement.

        Without ``opening_cash`` the beginning balance is taken from the
        ledger's cash accounts on the day before ``period_start``.
        """
        check_date_range(period_start, period_end)
        with self._context():
            t0 = time.monotonic()
            accounts = self._load_accounts()
            entries = self._load_entries(_BEGINNING_OF_TIME, period_end)
            metadata = self._build_metadata(
                ReportType.CASH_FLOW, period_end, period_start, period_end
            )

            report = build_cash_flow_statement(
                accounts,
                entries,
                period_start,
                period_end,
                opening_cash=opening_cash,
                adjustments=adjustments,
                config=self._config,
                metadata=metadata,
            )

            logger.info(
                "cash_flow_statement_generated",
                extra={
                    "period_start": period_start.isoformat(),
                    "period_end": period_end.isoformat(),
                    "net_change_in_cash": str(report.net_change_in_cash.amount),
                    "ending_cash": str(report.ending_cash.amount),
                    "reconciles_to_ledger": report.reconciles_to_ledger,
                    "duration_ms": _elapsed_ms(t0),
                },
            )
            return report

    # =========================================================================
    # Analysis
    # =========================================================================

    def ratios(
        self,
        period_start: date,
        as_of_date: date,
        prior_as_of_date: date | None = None,
    ) -> FinancialRatios:
        """
        Financial ratios from the balance sheet at ``as_of_date`` and the
        income statement for ``[period_start, as_of_date]``.

        ``prior_as_of_date`` supplies the opening balance sheet used for
        average-based turnover ratios.
        """
        check_date_range(period_start, as_of_date)
        balance_sheet = self.balance_sheet(as_of_date)
        income_statement = self.income_statement(period_start, as_of_date)
        prior = (
            self.balance_sheet(prior_as_of_date)
            if prior_as_of_date is not None
            else None
        )

        with self._context():
            ratios = self._ratio_engine.calculate(balance_sheet, income_statement, prior)
            logger.info(
                "ratios_generated",
                extra={
                    "as_of_date": as_of_date.isoformat(),
                    "undefined_count": len(ratios.warnings),
                },
            )
            return ratios

    def trend(
        self,
        period_start: date,
        period_end: date,
        granularity: Granularity | str = Granularity.MONTHLY,
        account_types: Iterable[AccountType | str] = (
            AccountType.REVENUE,
            AccountType.EXPENSE,
        ),
    ) -> tuple[TrendPoint, ...]:
        """Net movement per period bucket (revenue minus expense by default)."""
        check_date_range(period_start, period_end)
        with self._context():
            accounts = self._load_accounts()
            entries = self._load_entries(period_start, period_end)
            points = self._bucketer.trend(
                entries,
                granularity,
                accounts,
                account_types,
                self._config.currency,
            )
            logger.info(
                "trend_generated",
                extra={
                    "granularity": Granularity(granularity).value,
                    "point_count": len(points),
                },
            )
            return points

    # =========================================================================
    # Reconciliation and tax
    # =========================================================================

    def reconcile(
        self,
        account_id: str,
        period_start: date,
        period_end: date,
        opening_book_balance: Money | None = None,
        opening_bank_balance: Money | None = None,
        exchange_rates: Iterable[ExchangeRate] | None = None,
    ) -> ReconciliationResult:
        """
        Reconcile the ledger's lines on ``account_id`` against the bank
        statement for the same period.

        Without ``opening_book_balance`` the ledger's debit-minus-credit
        balance of the account before ``period_start`` is used.
        """
        check_date_range(period_start, period_end)
        with self._context():
            t0 = time.monotonic()
            currency = self._config.currency
            entries = self._load_entries(_BEGINNING_OF_TIME, period_end)
            before = [e for e in entries if e.entry_date < period_start]
            during = [e for e in entries if e.entry_date >= period_start]

            if opening_book_balance is None:
                opening_book_balance = sum_money(
                    (line.signed_amount for line in lines_for_account(before, account_id)),
                    currency,
                )

            bank_lines = self._repository.get_bank_statement_lines(
                account_id, period_start, period_end
            )
            result = self._reconciler.reconcile(
                book_lines_from_entries(during, account_id),
                bank_lines,
                opening_book_balance,
                opening_bank_balance,
                exchange_rates,
            )

            logger.info(
                "reconciliation_generated",
                extra={
                    "account_id": account_id,
                    "period_start": period_start.isoformat(),
                    "period_end": period_end.isoformat(),
                    "difference": str(result.difference.amount),
                    "is_fully_reconciled": result.is_fully_reconciled,
                    "duration_ms": _elapsed_ms(t0),
                },
            )
            return result

    def tax(
        self,
        amount: Money | Decimal | str | int,
        tax_year: str,
        default_brackets: Iterable[TaxBracket] | None = None,
    ) -> TaxCalculationResult:
        """
        Progressive tax on ``amount`` using the repository's brackets for
        ``tax_year``, falling back to ``default_brackets``.

        Raises:
            TaxYearNotFoundError: Neither source has brackets.
        """
        with self._context():
            brackets = self._repository.get_tax_brackets(str(tax_year))
            source = "repository"
            if not brackets and default_brackets is not None:
                brackets = list(default_brackets)
                source = "default"
            if not brackets:
                logger.error("tax_year_not_found", extra={"tax_year": str(tax_year)})
                raise TaxYearNotFoundError(str(tax_year))

            schedule = TaxSchedule.progressive(brackets, self._config.currency)
            result = self._tax.calculate(amount, schedule)

            logger.info(
                "tax_generated",
                extra={
                    "tax_year": str(tax_year),
                    "bracket_source": source,
                    "tax_amount": str(result.tax_amount.amount),
                },
            )
            return result
