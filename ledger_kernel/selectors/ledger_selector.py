"""
Module: ledger_kernel.selectors.ledger_selector
Responsibility: SQLAlchemy implementation of the LedgerRepository contract.
    Loads accounts, journal entries with their lines, tax brackets and bank
    statement lines and converts each row into a frozen domain value.
Architecture position: Kernel > Selectors.  Imports models/ and domain/.

Invariants enforced:
    - No stored balances.  Every balance the reports show is derived by the
      engines from the journal lines returned here.
    - Journal entries are ordered by entry_date then id; lines keep their
      stored line_seq order.

Failure modes:
    - AccountNotFoundError when a bank account id is not a valid UUID.
    - InvalidDateRangeError when end precedes start.
    - Domain validation errors (InvalidEntryLineError, InvalidCategoryError)
      surface unchanged when a stored row violates a domain invariant.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_kernel.domain.accounts import Account
from ledger_kernel.domain.dtos import BankLine, TaxBracket
from ledger_kernel.domain.journal import EntryLine, JournalEntry
from ledger_kernel.domain.values import Money
from ledger_kernel.exceptions import AccountNotFoundError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.ledger import (
    AccountModel,
    BankStatementLineModel,
    JournalEntryModel,
    JournalLineModel,
    LineSide,
    TaxBracketModel,
)
from ledger_kernel.repository import check_date_range
from ledger_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.ledger")


def _to_entry_line(row: JournalLineModel) -> EntryLine:
    if row.side == LineSide.DEBIT.value:
        return EntryLine.debit_line(str(row.account_id), row.amount, row.currency, row.memo)
    return EntryLine.credit_line(str(row.account_id), row.amount, row.currency, row.memo)


class SqlLedgerRepository(BaseSelector):
    """
    LedgerRepository backed by the ledger ORM tables.

    Contract:
        Read-only.  The session belongs to the caller.
    """

    def __init__(self, session: Session):
        super().__init__(session)

    def get_accounts(self, org_id: str) -> list[Account]:
        rows = self.session.scalars(
            select(AccountModel)
            .where(AccountModel.org_id == org_id)
            .order_by(AccountModel.code)
        ).all()
        return [
            Account(
                account_id=str(row.id),
                code=row.code,
                name=row.name,
                account_type=row.account_type,
                category=row.category,
            )
            for row in rows
        ]

    def get_journal_entries(
        self, org_id: str, start: date, end: date
    ) -> list[JournalEntry]:
        check_date_range(start, end)
        rows = self.session.scalars(
            select(JournalEntryModel)
            .where(
                JournalEntryModel.org_id == org_id,
                JournalEntryModel.entry_date >= start,
                JournalEntryModel.entry_date <= end,
            )
            .order_by(JournalEntryModel.entry_date, JournalEntryModel.id)
        ).all()

        entries = [
            JournalEntry(
                entry_id=str(row.id),
                entry_date=row.entry_date,
                reference=row.reference,
                description=row.description,
                lines=tuple(_to_entry_line(line) for line in row.lines),
            )
            for row in rows
        ]
        logger.debug(
            "journal_entries_loaded",
            extra={
                "org_id": org_id,
                "start": start.isoformat(),
                "end": end.isoformat(),
                "entry_count": len(entries),
            },
        )
        return entries

    def get_tax_brackets(self, tax_year: str) -> list[TaxBracket]:
        rows = self.session.scalars(
            select(TaxBracketModel)
            .where(TaxBracketModel.tax_year == str(tax_year))
            .order_by(TaxBracketModel.min_income, TaxBracketModel.seq)
        ).all()
        return [
            TaxBracket(
                min_income=row.min_income,
                max_income=row.max_income,
                rate=row.rate,
            )
            for row in rows
        ]

    def get_bank_statement_lines(
        self, account_id: str, start: date, end: date
    ) -> list[BankLine]:
        check_date_range(start, end)
        try:
            account_uuid = UUID(str(account_id))
        except ValueError as e:
            raise AccountNotFoundError(str(account_id)) from e

        rows = self.session.scalars(
            select(BankStatementLineModel)
            .where(
                BankStatementLineModel.account_id == account_uuid,
                BankStatementLineModel.line_date >= start,
                BankStatementLineModel.line_date <= end,
            )
            .order_by(BankStatementLineModel.line_date, BankStatementLineModel.id)
        ).all()
        return [
            BankLine(
                line_id=str(row.id),
                line_date=row.line_date,
                amount=Money.of(row.amount, row.currency),
                description=row.description,
                reference=row.reference,
            )
            for row in rows
        ]
