"""
Module: ledger_kernel.models.ledger
Responsibility: ORM persistence for the read store the reports are built
    from: chart of accounts, journal entries and lines, tax bracket tables
    and bank statement lines.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from selectors/, domain/, or outer layers.

Invariants enforced:
    - Amounts are Numeric(38, 9); the sign of a journal line lives in its
      ``side`` column and the amount is always non-negative.
    - Account codes are unique per organization.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import Base, UUIDString


class LineSide(str, Enum):
    """Which side of the entry a stored line is on."""

    DEBIT = "debit"
    CREDIT = "credit"


class AccountModel(Base):
    """Chart-of-accounts row."""

    __tablename__ = "accounts"

    __table_args__ = (
        UniqueConstraint("org_id", "code", name="uq_account_org_code"),
        Index("idx_account_org", "org_id"),
    )

    org_id: Mapped[str] = mapped_column(String(64), nullable=False)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    account_type: Mapped[str] = mapped_column(String(20), nullable=False)
    category: Mapped[str | None] = mapped_column(String(40), nullable=True)

    def __repr__(self) -> str:
        return f"<AccountModel {self.code}: {self.name}>"


class JournalEntryModel(Base):
    """Journal entry header."""

    __tablename__ = "journal_entries"

    __table_args__ = (
        Index("idx_journal_org_date", "org_id", "entry_date"),
    )

    org_id: Mapped[str] = mapped_column(String(64), nullable=False)
    entry_date: Mapped[date] = mapped_column(nullable=False)
    reference: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    lines: Mapped[list["JournalLineModel"]] = relationship(
        back_populates="entry",
        order_by="JournalLineModel.line_seq",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<JournalEntryModel {self.id} {self.entry_date}>"


class JournalLineModel(Base):
    """One debit or credit line of a stored journal entry."""

    __tablename__ = "journal_lines"

    __table_args__ = (
        UniqueConstraint("journal_entry_id", "line_seq", name="uq_journal_line_seq"),
        Index("idx_line_account", "account_id"),
    )

    journal_entry_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("journal_entries.id"),
        nullable=False,
    )
    account_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("accounts.id"),
        nullable=False,
    )
    line_seq: Mapped[int] = mapped_column(Integer, nullable=False)
    side: Mapped[str] = mapped_column(String(10), nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    memo: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    entry: Mapped[JournalEntryModel] = relationship(back_populates="lines")


class TaxBracketModel(Base):
    """One bracket of a tax year's progressive table."""

    __tablename__ = "tax_brackets"

    __table_args__ = (
        UniqueConstraint("tax_year", "seq", name="uq_tax_bracket_year_seq"),
    )

    tax_year: Mapped[str] = mapped_column(String(10), nullable=False)
    seq: Mapped[int] = mapped_column(Integer, nullable=False)
    min_income: Mapped[Decimal] = mapped_column(nullable=False)
    max_income: Mapped[Decimal | None] = mapped_column(nullable=True)
    rate: Mapped[Decimal] = mapped_column(nullable=False)


class BankStatementLineModel(Base):
    """Imported bank statement line; amount is signed (deposits positive)."""

    __tablename__ = "bank_statement_lines"

    __table_args__ = (
        Index("idx_bank_line_account_date", "account_id", "line_date"),
    )

    account_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("accounts.id"),
        nullable=False,
    )
    line_date: Mapped[date] = mapped_column(nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    reference: Mapped[str] = mapped_column(String(100), nullable=False, default="")
