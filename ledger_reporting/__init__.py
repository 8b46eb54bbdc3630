"""
Financial Reporting Module (``ledger_reporting``).

Responsibility
--------------
Read-only module that generates financial statements from the ledger:
classified balance sheet, multi-step income statement and indirect-method
cash flow statement, plus the ``ReportingService`` that also exposes
ratios, trends, bank reconciliation and tax.

Architecture position
---------------------
**Reporting layer** -- statement generation is implemented as pure
functions (``statements``); ``ReportingService`` is the only piece that
touches a ``LedgerRepository`` or a clock.

Invariants enforced
-------------------
* Statement computations derive entirely from the journal entries passed
  in; no balances are stored.
* Regenerating a report from the same inputs yields an equal report.
"""

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
from ledger_reporting.service import ReportingService
from ledger_reporting.statements import (
    build_balance_sheet,
    build_cash_flow_statement,
    build_income_statement,
    check_entries,
    render_to_dict,
)

__all__ = [
    "ReportingConfig",
    "AccountBalanceLine",
    "AssetSections",
    "BalanceSheetReport",
    "CashFlowStatementReport",
    "IncomeStatementReport",
    "LiabilitySections",
    "OperatingActivities",
    "ReportMetadata",
    "ReportType",
    "ReportingService",
    "build_balance_sheet",
    "build_cash_flow_statement",
    "build_income_statement",
    "check_entries",
    "render_to_dict",
]
