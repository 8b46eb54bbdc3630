"""
Module: ledger_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for the
    reporting layer.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import ledger_kernel (domain, exceptions, logging) and sibling
    engine modules.  MUST NOT import ledger_reporting or ledger_config.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Dates arrive as explicit parameters.
    - Decimal-only arithmetic through ``Money``.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Engine entry points are wrapped by ``@traced_engine``
    (see ``ledger_engines.tracer``), emitting LEDGER_ENGINE_TRACE log
    records with engine name, version, input fingerprint and duration.
"""

from ledger_engines.balance import (
    BalanceCalculator,
    compute_balance,
    lines_for_account,
    normal_balance_for,
)
from ledger_engines.bucketing import (
    BucketKey,
    EntryFilter,
    Granularity,
    PeriodBucketer,
    TransactionType,
    TrendPoint,
    bucket,
    bucket_start,
    period_range,
    trend,
)
from ledger_engines.ratios import (
    AssessmentBand,
    FinancialRatios,
    RatioAssessment,
    RatioEngine,
    RatioStatus,
    RatioValue,
    assess_ratios,
)
from ledger_engines.reconciliation import (
    BookLine,
    MatchedPair,
    ReconciliationEngine,
    ReconciliationResult,
    ReconciliationSummary,
    book_lines_from_entries,
)
from ledger_engines.tax import (
    TaxCalculationResult,
    TaxCalculationType,
    TaxCalculator,
    TaxLine,
    TaxSchedule,
    calculate_tax,
)

__all__ = [
    "BalanceCalculator",
    "compute_balance",
    "lines_for_account",
    "normal_balance_for",
    "BucketKey",
    "EntryFilter",
    "Granularity",
    "PeriodBucketer",
    "TransactionType",
    "TrendPoint",
    "bucket",
    "bucket_start",
    "period_range",
    "trend",
    "AssessmentBand",
    "FinancialRatios",
    "RatioAssessment",
    "RatioEngine",
    "RatioStatus",
    "RatioValue",
    "assess_ratios",
    "BookLine",
    "MatchedPair",
    "ReconciliationEngine",
    "ReconciliationResult",
    "ReconciliationSummary",
    "book_lines_from_entries",
    "TaxCalculationResult",
    "TaxCalculationType",
    "TaxCalculator",
    "TaxLine",
    "TaxSchedule",
    "calculate_tax",
]
