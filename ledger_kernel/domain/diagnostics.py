"""
Diagnostics -- non-fatal conditions attached to computed results.

Numeric edge cases (an unbalanced balance sheet, a zero denominator, income
above the top tax bracket) do not abort a computation. The result carries a
tuple of ``ComputationWarning`` values instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class WarningCode(str, Enum):
    UNBALANCED_ENTRY = "UNBALANCED_ENTRY"
    UNBALANCED_BALANCE_SHEET = "UNBALANCED_BALANCE_SHEET"
    CASH_FLOW_LEDGER_MISMATCH = "CASH_FLOW_LEDGER_MISMATCH"
    ZERO_DENOMINATOR = "ZERO_DENOMINATOR"
    INCOME_ABOVE_TOP_BRACKET = "INCOME_ABOVE_TOP_BRACKET"


@dataclass(frozen=True)
class ComputationWarning:
    code: WarningCode
    message: str
    details: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "code", WarningCode(self.code))
