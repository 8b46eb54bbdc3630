"""
Ledger Kernel

Foundation for the ledger aggregation and financial-statement engine:
- Decimal-only Money bound to ISO 4217 currencies
- Closed account type and category enums
- Immutable double-entry journal types
- Typed exceptions and structured JSON logging
- The read-only LedgerRepository contract
"""

__version__ = "0.1.0"
