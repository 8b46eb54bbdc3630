"""Bank reconciliation: match a bank statement against book lines."""

from ledger_engines.reconciliation.engine import (
    ReconciliationEngine,
    book_lines_from_entries,
)
from ledger_engines.reconciliation.recon_types import (
    BookLine,
    MatchedPair,
    ReconciliationResult,
    ReconciliationSummary,
)

__all__ = [
    "ReconciliationEngine",
    "book_lines_from_entries",
    "BookLine",
    "MatchedPair",
    "ReconciliationResult",
    "ReconciliationSummary",
]
