"""
Journal -- Double-entry journal domain types.

Responsibility:
    ``EntryLine`` and ``JournalEntry`` are the immutable inputs to every
    aggregation. A line carries a debit and a credit Money of which exactly
    one is non-zero. An entry groups ordered lines in one currency.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Line sides are non-negative, share a currency, and exactly one side
      is non-zero (InvalidEntryLineError at construction).
    - All lines of an entry share one currency (CurrencyMismatchError).
    - ``validate()`` enforces the double-entry invariant: at least two
      lines and total debits equal total credits (UnbalancedEntryError).

    Construction does NOT reject an unbalanced entry. Reports accept such
    entries and flag them with a warning so that a bad import is visible
    instead of hidden behind an exception.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from ledger_kernel.domain.values import Currency, Money, sum_money
from ledger_kernel.exceptions import (
    CurrencyMismatchError,
    InvalidEntryLineError,
    MissingFieldError,
    UnbalancedEntryError,
)


@dataclass(frozen=True)
class EntryLine:
    """One debit or credit against a single account."""

    account_id: str
    debit: Money
    credit: Money
    memo: str = ""

    def __post_init__(self) -> None:
        if not self.account_id:
            raise MissingFieldError("account_id", "EntryLine")
        object.__setattr__(self, "account_id", str(self.account_id))
        if self.debit.currency != self.credit.currency:
            raise InvalidEntryLineError(
                self.account_id,
                f"debit currency {self.debit.currency} differs from "
                f"credit currency {self.credit.currency}",
            )
        if self.debit.is_negative or self.credit.is_negative:
            raise InvalidEntryLineError(self.account_id, "amounts must be >= 0")
        if self.debit.is_zero == self.credit.is_zero:
            raise InvalidEntryLineError(
                self.account_id, "exactly one of debit or credit must be non-zero"
            )

    @classmethod
    def debit_line(
        cls,
        account_id: str,
        amount: Decimal | str | int,
        currency: str | Currency,
        memo: str = "",
    ) -> EntryLine:
        money = Money.of(amount, currency)
        return cls(account_id, money, Money.zero(money.currency), memo)

    @classmethod
    def credit_line(
        cls,
        account_id: str,
        amount: Decimal | str | int,
        currency: str | Currency,
        memo: str = "",
    ) -> EntryLine:
        money = Money.of(amount, currency)
        return cls(account_id, Money.zero(money.currency), money, memo)

    @property
    def currency(self) -> Currency:
        return self.debit.currency

    @property
    def is_debit(self) -> bool:
        return not self.debit.is_zero

    @property
    def amount(self) -> Money:
        """The non-zero side."""
        return self.debit if self.is_debit else self.credit

    @property
    def signed_amount(self) -> Money:
        """Debit minus credit."""
        return self.debit - self.credit


@dataclass(frozen=True)
class JournalEntry:
    """A dated, referenced group of entry lines."""

    entry_id: str
    entry_date: date
    lines: tuple[EntryLine, ...]
    reference: str = ""
    description: str = ""

    def __post_init__(self) -> None:
        if not self.entry_id:
            raise MissingFieldError("entry_id", "JournalEntry")
        object.__setattr__(self, "entry_id", str(self.entry_id))

        entry_date = self.entry_date
        if isinstance(entry_date, datetime):
            entry_date = entry_date.date()
        elif isinstance(entry_date, str):
            entry_date = date.fromisoformat(entry_date)
        elif not isinstance(entry_date, date):
            raise MissingFieldError("entry_date", f"JournalEntry {self.entry_id}")
        object.__setattr__(self, "entry_date", entry_date)

        lines = tuple(self.lines or ())
        if not lines:
            raise MissingFieldError("lines", f"JournalEntry {self.entry_id}")
        currency = lines[0].currency
        for line in lines[1:]:
            if line.currency != currency:
                raise CurrencyMismatchError(
                    currency.code, line.currency.code, "post in one entry"
                )
        object.__setattr__(self, "lines", lines)
        object.__setattr__(self, "reference", self.reference or "")
        object.__setattr__(self, "description", self.description or "")

    @property
    def currency(self) -> Currency:
        return self.lines[0].currency

    @property
    def total_debits(self) -> Money:
        return sum_money((line.debit for line in self.lines), self.currency)

    @property
    def total_credits(self) -> Money:
        return sum_money((line.credit for line in self.lines), self.currency)

    @property
    def is_balanced(self) -> bool:
        return len(self.lines) >= 2 and self.total_debits == self.total_credits

    @property
    def account_ids(self) -> frozenset[str]:
        return frozenset(line.account_id for line in self.lines)

    def lines_for(self, account_id: str) -> tuple[EntryLine, ...]:
        return tuple(line for line in self.lines if line.account_id == account_id)

    def validate(self) -> JournalEntry:
        """Enforce the double-entry invariant. Returns self when it holds."""
        if not self.is_balanced:
            raise UnbalancedEntryError(
                self.entry_id,
                str(self.total_debits.amount),
                str(self.total_credits.amount),
                self.currency.code,
            )
        return self
