"""
Pure domain layer.

Immutable value objects and records with NO dependency on the ORM, the
database, the clock or any I/O.
"""

from ledger_kernel.domain.accounts import (
    Account,
    AccountCategory,
    AccountType,
    NormalBalance,
    StatementSection,
    normal_balance_for,
)
from ledger_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from ledger_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from ledger_kernel.domain.diagnostics import ComputationWarning, WarningCode
from ledger_kernel.domain.dtos import BankLine, TaxBracket
from ledger_kernel.domain.journal import EntryLine, JournalEntry
from ledger_kernel.domain.values import Currency, ExchangeRate, Money, sum_money

__all__ = [
    "Account",
    "AccountCategory",
    "AccountType",
    "NormalBalance",
    "StatementSection",
    "normal_balance_for",
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "CurrencyInfo",
    "CurrencyRegistry",
    "ComputationWarning",
    "WarningCode",
    "BankLine",
    "TaxBracket",
    "EntryLine",
    "JournalEntry",
    "Currency",
    "ExchangeRate",
    "Money",
    "sum_money",
]
