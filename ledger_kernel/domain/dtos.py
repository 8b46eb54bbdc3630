"""
DTOs -- Records exchanged with the data-access layer.

``BankLine`` and ``TaxBracket`` are what a ``LedgerRepository`` hands to
the reconciliation and tax engines. They are plain frozen records; the
structural checks on a whole bracket table live in the tax engine's
``TaxSchedule``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from ledger_kernel.domain.values import Money


def _decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


@dataclass(frozen=True)
class BankLine:
    """
    One line of a bank statement.

    ``amount`` is signed from the account holder's view: positive for a
    deposit (bank credit), negative for a withdrawal (bank debit).
    """

    line_id: str
    line_date: date
    amount: Money
    description: str = ""
    reference: str = ""

    @property
    def is_credit(self) -> bool:
        return self.amount.is_positive

    @property
    def is_debit(self) -> bool:
        return self.amount.is_negative


@dataclass(frozen=True)
class TaxBracket:
    """Income sub-range ``[min_income, max_income]`` taxed at ``rate``."""

    min_income: Decimal
    max_income: Decimal | None
    rate: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "min_income", _decimal(self.min_income))
        if self.max_income is not None:
            object.__setattr__(self, "max_income", _decimal(self.max_income))
        object.__setattr__(self, "rate", _decimal(self.rate))

    @property
    def is_unbounded(self) -> bool:
        return self.max_income is None
