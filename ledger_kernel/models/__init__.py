"""ORM models for the ledger read store."""

from ledger_kernel.models.ledger import (
    AccountModel,
    BankStatementLineModel,
    JournalEntryModel,
    JournalLineModel,
    LineSide,
    TaxBracketModel,
)

__all__ = [
    "AccountModel",
    "JournalEntryModel",
    "JournalLineModel",
    "LineSide",
    "TaxBracketModel",
    "BankStatementLineModel",
]
