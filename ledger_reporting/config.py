"""
Reporting Configuration Schema.

Report-generation options: presentation currency, entity name, the
balance-sheet tolerance, whether zero categories are shown, how strictly
unbalanced journal entries are treated, cash-flow adjustment derivation,
ratio precision and the reconciliation date window.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from decimal import Decimal
from typing import Any, Self

from ledger_kernel.domain.values import Currency
from ledger_kernel.exceptions import ConfigurationError
from ledger_kernel.logging_config import get_logger

logger = get_logger("reporting.config")


@dataclass
class ReportingConfig:
    """
    Configuration schema for the reporting module.

    ``balance_tolerance`` of None means the smallest unit of
    ``default_currency`` (0.01 for USD, 1 for JPY).
    """

    # Presentation currency for reports
    default_currency: str = "USD"

    # Entity name shown on reports
    entity_name: str = "Company"

    # Allowed |assets - (liabilities + equity)| before a sheet is unbalanced
    balance_tolerance: Decimal | None = None

    # Show statement categories whose balance is zero
    include_zero_balances: bool = False

    # Raise on the first unbalanced journal entry instead of warning
    strict_entries: bool = False

    # Add depreciation and working-capital lines to operating cash flow
    derive_cash_flow_adjustments: bool = False

    # Decimal places kept on financial ratios
    ratio_precision: int = 4

    # Days a bank line may drift from its book line and still match
    reconciliation_date_tolerance_days: int = 0

    def __post_init__(self):
        if not isinstance(self.default_currency, str) or len(self.default_currency) != 3:
            raise ConfigurationError(
                "default_currency must be a 3-letter ISO 4217 code"
            )
        self.default_currency = Currency(self.default_currency).code
        if self.balance_tolerance is not None:
            self.balance_tolerance = Decimal(str(self.balance_tolerance))
            if self.balance_tolerance < 0:
                raise ConfigurationError("balance_tolerance cannot be negative")
        if self.ratio_precision < 0:
            raise ConfigurationError("ratio_precision cannot be negative")
        if self.reconciliation_date_tolerance_days < 0:
            raise ConfigurationError(
                "reconciliation_date_tolerance_days cannot be negative"
            )

    @property
    def currency(self) -> Currency:
        return Currency(self.default_currency)

    @property
    def effective_balance_tolerance(self) -> Decimal:
        if self.balance_tolerance is not None:
            return self.balance_tolerance
        return self.currency.rounding_tolerance

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with standard defaults."""
        logger.info("reporting_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create config from a dictionary; unknown keys are rejected."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown reporting config keys: {unknown}")
        logger.info(
            "reporting_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)
