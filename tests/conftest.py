"""
Pytest fixtures for the ledger statement engine test suite.

Provides:
- Deterministic clock
- Structured log capture
- A sample chart of accounts and a journal-entry factory
- In-memory repository and SQLite-backed ORM session
"""

import json
import logging
from datetime import date, datetime, UTC
from decimal import Decimal
from io import StringIO

import pytest

from ledger_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from ledger_kernel.domain.accounts import Account, AccountCategory, AccountType
from ledger_kernel.domain.clock import DeterministicClock
from ledger_kernel.domain.journal import EntryLine, JournalEntry
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from ledger_kernel.repository import InMemoryLedgerRepository


TEST_ORG_ID = "org-test"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture ledger_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            ...
            logs = captured_logs()
            assert any(r["message"] == "balance_sheet_generated" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("ledger_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Clock
# =============================================================================


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(datetime(2024, 6, 30, 18, 0, tzinfo=UTC))


# =============================================================================
# Chart of accounts and entries
# =============================================================================


_CHART = (
    ("cash", "1000", "Cash", AccountType.ASSET, AccountCategory.CASH),
    ("ar", "1100", "Accounts Receivable", AccountType.ASSET,
     AccountCategory.ACCOUNTS_RECEIVABLE),
    ("inventory", "1200", "Inventory", AccountType.ASSET, AccountCategory.INVENTORY),
    ("equipment", "1500", "Equipment", AccountType.ASSET, AccountCategory.EQUIPMENT),
    ("ap", "2000", "Accounts Payable", AccountType.LIABILITY,
     AccountCategory.ACCOUNTS_PAYABLE),
    ("loan", "2500", "Bank Loan", AccountType.LIABILITY, AccountCategory.LONG_TERM_LOANS),
    ("capital", "3000", "Owner Capital", AccountType.EQUITY, AccountCategory.OWNER_EQUITY),
    ("retained", "3100", "Retained Earnings", AccountType.EQUITY,
     AccountCategory.RETAINED_EARNINGS),
    ("revenue", "4000", "Sales", AccountType.REVENUE, AccountCategory.OPERATING_REVENUE),
    ("other_income", "4900", "Other Income", AccountType.REVENUE,
     AccountCategory.OTHER_INCOME),
    ("cogs", "5000", "Cost of Goods Sold", AccountType.EXPENSE,
     AccountCategory.COST_OF_GOODS_SOLD),
    ("expense", "6000", "Operating Expense", AccountType.EXPENSE,
     AccountCategory.OPERATING_EXPENSE),
    ("depreciation", "6100", "Depreciation", AccountType.EXPENSE,
     AccountCategory.DEPRECIATION),
    ("interest", "7000", "Interest Expense", AccountType.EXPENSE,
     AccountCategory.INTEREST_EXPENSE),
)


@pytest.fixture
def chart_of_accounts() -> list[Account]:
    """Fourteen accounts covering every statement section."""
    return [
        Account(account_id=aid, code=code, name=name, account_type=t, category=c)
        for aid, code, name, t, c in _CHART
    ]


def _entry(
    entry_id: str,
    entry_date: date,
    debit: str,
    credit: str,
    amount: Decimal | str,
    reference: str = "",
    description: str = "",
    currency: str = "USD",
) -> JournalEntry:
    return JournalEntry(
        entry_id=entry_id,
        entry_date=entry_date,
        lines=(
            EntryLine.debit_line(debit, amount, currency),
            EntryLine.credit_line(credit, amount, currency),
        ),
        reference=reference,
        description=description,
    )


@pytest.fixture
def make_entry():
    """
    Factory for two-line journal entries.

    Usage::

        entry = make_entry("e1", date(2024, 1, 5), "cash", "revenue", "1000")
    """
    return _entry


@pytest.fixture
def sale_and_expense(make_entry) -> list[JournalEntry]:
    """Cash sale of 1000 and a 400 cash expense on the same day."""
    day = date(2024, 1, 15)
    return [
        make_entry("e1", day, "cash", "revenue", "1000", "INV-1", "Cash sale"),
        make_entry("e2", day, "expense", "cash", "400", "BILL-1", "Office rent"),
    ]


@pytest.fixture
def repository(chart_of_accounts) -> InMemoryLedgerRepository:
    repo = InMemoryLedgerRepository()
    repo.add_accounts(TEST_ORG_ID, chart_of_accounts)
    return repo


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def session():
    """Fresh in-memory SQLite database with every ledger table."""
    init_engine_from_url("sqlite://")
    create_tables()
    db = get_session()
    yield db
    db.close()
    drop_tables()
    reset_engine()


@pytest.fixture
def org_id() -> str:
    return TEST_ORG_ID
