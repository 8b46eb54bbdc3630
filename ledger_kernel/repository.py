"""
LedgerRepository -- the read-only data-access contract the reports consume.

The engines never fetch data. ``ReportingService`` pulls accounts, journal
entries, tax brackets and bank statement lines through an object that
satisfies ``LedgerRepository`` and hands plain domain values to the pure
functions. Two implementations ship with the kernel:

    InMemoryLedgerRepository   dict-backed, for callers and tests
    SqlLedgerRepository        SQLAlchemy read path
                               (ledger_kernel.selectors.ledger_selector)
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import Protocol, runtime_checkable

from ledger_kernel.domain.accounts import Account
from ledger_kernel.domain.dtos import BankLine, TaxBracket
from ledger_kernel.domain.journal import JournalEntry
from ledger_kernel.exceptions import InvalidDateRangeError


@runtime_checkable
class LedgerRepository(Protocol):
    """Read-only view over the ledger's source records."""

    def get_accounts(self, org_id: str) -> list[Account]:
        ...

    def get_journal_entries(
        self, org_id: str, start: date, end: date
    ) -> list[JournalEntry]:
        """Entries dated in ``[start, end]``, ordered by date then entry id."""
        ...

    def get_tax_brackets(self, tax_year: str) -> list[TaxBracket]:
        """Brackets ordered by min_income; empty when the year is unknown."""
        ...

    def get_bank_statement_lines(
        self, account_id: str, start: date, end: date
    ) -> list[BankLine]:
        """Statement lines dated in ``[start, end]``, ordered by date."""
        ...


def check_date_range(start: date, end: date) -> None:
    """Raise InvalidDateRangeError when end precedes start."""
    if end < start:
        raise InvalidDateRangeError(start.isoformat(), end.isoformat())


class InMemoryLedgerRepository:
    """
    Dict-backed LedgerRepository.

    Holds per-organization accounts and entries, per-year tax brackets and
    per-account bank lines. Returned lists are fresh copies; the stored
    values are immutable domain objects.
    """

    def __init__(self) -> None:
        self._accounts: dict[str, list[Account]] = {}
        self._entries: dict[str, list[JournalEntry]] = {}
        self._brackets: dict[str, list[TaxBracket]] = {}
        self._bank_lines: dict[str, list[BankLine]] = {}

    def add_accounts(self, org_id: str, accounts: Iterable[Account]) -> None:
        self._accounts.setdefault(org_id, []).extend(accounts)

    def add_entries(self, org_id: str, entries: Iterable[JournalEntry]) -> None:
        self._entries.setdefault(org_id, []).extend(entries)

    def set_tax_brackets(self, tax_year: str, brackets: Iterable[TaxBracket]) -> None:
        self._brackets[str(tax_year)] = list(brackets)

    def add_bank_lines(self, account_id: str, lines: Iterable[BankLine]) -> None:
        self._bank_lines.setdefault(str(account_id), []).extend(lines)

    def get_accounts(self, org_id: str) -> list[Account]:
        return list(self._accounts.get(org_id, ()))

    def get_journal_entries(
        self, org_id: str, start: date, end: date
    ) -> list[JournalEntry]:
        check_date_range(start, end)
        selected = [
            e for e in self._entries.get(org_id, ()) if start <= e.entry_date <= end
        ]
        return sorted(selected, key=lambda e: (e.entry_date, e.entry_id))

    def get_tax_brackets(self, tax_year: str) -> list[TaxBracket]:
        brackets = self._brackets.get(str(tax_year), ())
        return sorted(brackets, key=lambda b: b.min_income)

    def get_bank_statement_lines(
        self, account_id: str, start: date, end: date
    ) -> list[BankLine]:
        check_date_range(start, end)
        selected = [
            line
            for line in self._bank_lines.get(str(account_id), ())
            if start <= line.line_date <= end
        ]
        return sorted(selected, key=lambda line: line.line_date)
