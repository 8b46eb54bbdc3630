"""
Bank reconciliation domain types.

Pure frozen dataclasses consumed and produced by ``ReconciliationEngine``.
Book lines are signed from the account holder's view (debit minus credit
on the cash account), the same convention bank lines use, so a matched
pair carries equal amounts.

Architecture: ledger_engines/reconciliation -- pure domain, zero I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ledger_kernel.domain.dtos import BankLine
from ledger_kernel.domain.values import Money


# =============================================================================
# Input types
# =============================================================================


@dataclass(frozen=True)
class BookLine:
    """One cash-account movement from the journal."""

    line_id: str
    line_date: date
    amount: Money
    description: str = ""
    reference: str = ""
    entry_id: str | None = None


# =============================================================================
# Output types
# =============================================================================


@dataclass(frozen=True)
class MatchedPair:
    """A bank line paired with the book line it explains."""

    book_line: BookLine
    bank_line: BankLine
    converted_amount: Money
    date_difference_days: int


@dataclass(frozen=True)
class ReconciliationSummary:
    """Statement-level totals, all in the book currency and non-negative."""

    total_credits: Money
    total_debits: Money
    outstanding_deposits: Money
    outstanding_checks: Money
    bank_charges: Money
    interest_earned: Money


@dataclass(frozen=True)
class ReconciliationResult:
    book_balance: Money
    bank_balance: Money
    matched: tuple[MatchedPair, ...]
    unmatched_book: tuple[BookLine, ...]
    unmatched_bank: tuple[BankLine, ...]
    summary: ReconciliationSummary

    derived_fields = ("difference", "is_fully_reconciled")

    @property
    def difference(self) -> Money:
        """Bank-reported minus book-computed balance."""
        return self.bank_balance - self.book_balance

    @property
    def is_fully_reconciled(self) -> bool:
        return (
            self.difference.is_zero
            and not self.unmatched_book
            and not self.unmatched_bank
        )
