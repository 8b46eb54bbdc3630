"""Selectors for the ledger kernel (read side)."""

from ledger_kernel.selectors.ledger_selector import SqlLedgerRepository

__all__ = ["SqlLedgerRepository"]
