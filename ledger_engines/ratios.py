"""
Ratio Engine - Liquidity, profitability, efficiency and leverage ratios.

Pure functions with no I/O.  Inputs are a balance sheet and an income
statement (any objects exposing the attributes in ``BalanceSheetLike`` and
``IncomeStatementLike``), plus an optional prior-period balance sheet used
for average-based turnover ratios.

A zero denominator never raises: the ratio comes back ``undefined`` and the
result carries a ZERO_DENOMINATOR warning naming it.

Usage:
    from ledger_engines.ratios import RatioEngine, assess_ratios

    ratios = RatioEngine(precision=4).calculate(balance_sheet, income_statement)
    print(ratios.liquidity.current_ratio.value)
    print(assess_ratios(ratios)["current_ratio"].analysis)
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Protocol

from ledger_engines.tracer import traced_engine
from ledger_kernel.domain.accounts import AccountCategory
from ledger_kernel.domain.diagnostics import ComputationWarning, WarningCode
from ledger_kernel.domain.values import Money
from ledger_kernel.exceptions import ValidationError
from ledger_kernel.logging_config import get_logger

logger = get_logger("engines.ratios")


# =============================================================================
# Input shapes
# =============================================================================


class _SectionTotals(Protocol):
    @property
    def total_current(self) -> Money: ...


class BalanceSheetLike(Protocol):
    assets: _SectionTotals
    liabilities: _SectionTotals

    @property
    def total_assets(self) -> Money: ...

    @property
    def total_liabilities(self) -> Money: ...

    @property
    def total_equity(self) -> Money: ...

    def category_amount(self, category: AccountCategory) -> Money: ...


class IncomeStatementLike(Protocol):
    @property
    def total_revenue(self) -> Money: ...

    @property
    def total_cost_of_goods_sold(self) -> Money: ...

    @property
    def gross_profit(self) -> Money: ...

    @property
    def operating_income(self) -> Money: ...

    @property
    def net_income(self) -> Money: ...

    @property
    def interest_expense(self) -> Money: ...


# =============================================================================
# Output types
# =============================================================================


class RatioStatus(str, Enum):
    DEFINED = "defined"
    UNDEFINED = "undefined"


@dataclass(frozen=True)
class RatioValue:
    value: Decimal | None
    status: RatioStatus

    @property
    def is_defined(self) -> bool:
        return self.status == RatioStatus.DEFINED


@dataclass(frozen=True)
class LiquidityRatios:
    current_ratio: RatioValue
    quick_ratio: RatioValue
    cash_ratio: RatioValue


@dataclass(frozen=True)
class ProfitabilityRatios:
    gross_margin: RatioValue
    operating_margin: RatioValue
    net_margin: RatioValue
    return_on_assets: RatioValue
    return_on_equity: RatioValue


@dataclass(frozen=True)
class EfficiencyRatios:
    asset_turnover: RatioValue
    receivables_turnover: RatioValue
    inventory_turnover: RatioValue


@dataclass(frozen=True)
class LeverageRatios:
    debt_to_equity: RatioValue
    debt_to_assets: RatioValue
    interest_coverage: RatioValue


@dataclass(frozen=True)
class FinancialRatios:
    liquidity: LiquidityRatios
    profitability: ProfitabilityRatios
    efficiency: EfficiencyRatios
    leverage: LeverageRatios
    warnings: tuple[ComputationWarning, ...] = ()

    def as_dict(self) -> dict[str, RatioValue]:
        """Every ratio by name, grouped in declaration order."""
        flat: dict[str, RatioValue] = {}
        for group in (self.liquidity, self.profitability, self.efficiency, self.leverage):
            for f in fields(group):
                flat[f.name] = getattr(group, f.name)
        return flat


# =============================================================================
# Engine
# =============================================================================


def _average(current: Money, prior: Money | None) -> Money:
    if prior is None:
        return current
    return (current + prior) / 2


class RatioEngine:
    """
    Financial ratio calculator.

    Pure functions - no I/O, no database access.
    """

    def __init__(self, precision: int = 4):
        if precision < 0:
            raise ValidationError(f"Ratio precision cannot be negative: {precision}")
        self.precision = precision
        self._quantum = Decimal(1).scaleb(-precision)

    def _ratio(
        self,
        name: str,
        numerator: Money,
        denominator: Money,
        warnings: list[ComputationWarning],
    ) -> RatioValue:
        if denominator.is_zero:
            warnings.append(ComputationWarning(
                code=WarningCode.ZERO_DENOMINATOR,
                message=f"{name} is undefined: denominator is zero",
                details={"ratio": name, "numerator": str(numerator.amount)},
            ))
            return RatioValue(value=None, status=RatioStatus.UNDEFINED)
        value = (numerator.amount / denominator.amount).quantize(
            self._quantum, rounding=ROUND_HALF_UP
        )
        return RatioValue(value=value, status=RatioStatus.DEFINED)

    @traced_engine("ratios", "1.0")
    def calculate(
        self,
        balance_sheet: BalanceSheetLike,
        income_statement: IncomeStatementLike,
        prior_balance_sheet: BalanceSheetLike | None = None,
    ) -> FinancialRatios:
        bs = balance_sheet
        inc = income_statement
        prior = prior_balance_sheet
        warnings: list[ComputationWarning] = []
        r = self._ratio

        current_assets = bs.assets.total_current
        current_liabilities = bs.liabilities.total_current
        inventory = bs.category_amount(AccountCategory.INVENTORY)
        cash = bs.category_amount(AccountCategory.CASH)
        receivables = bs.category_amount(AccountCategory.ACCOUNTS_RECEIVABLE)
        revenue = inc.total_revenue

        liquidity = LiquidityRatios(
            current_ratio=r("current_ratio", current_assets, current_liabilities, warnings),
            quick_ratio=r("quick_ratio", current_assets - inventory, current_liabilities, warnings),
            cash_ratio=r("cash_ratio", cash, current_liabilities, warnings),
        )

        profitability = ProfitabilityRatios(
            gross_margin=r("gross_margin", inc.gross_profit, revenue, warnings),
            operating_margin=r("operating_margin", inc.operating_income, revenue, warnings),
            net_margin=r("net_margin", inc.net_income, revenue, warnings),
            return_on_assets=r("return_on_assets", inc.net_income, bs.total_assets, warnings),
            return_on_equity=r("return_on_equity", inc.net_income, bs.total_equity, warnings),
        )

        avg_assets = _average(bs.total_assets, prior.total_assets if prior else None)
        avg_receivables = _average(
            receivables,
            prior.category_amount(AccountCategory.ACCOUNTS_RECEIVABLE) if prior else None,
        )
        avg_inventory = _average(
            inventory,
            prior.category_amount(AccountCategory.INVENTORY) if prior else None,
        )
        efficiency = EfficiencyRatios(
            asset_turnover=r("asset_turnover", revenue, avg_assets, warnings),
            receivables_turnover=r("receivables_turnover", revenue, avg_receivables, warnings),
            inventory_turnover=r(
                "inventory_turnover", inc.total_cost_of_goods_sold, avg_inventory, warnings
            ),
        )

        leverage = LeverageRatios(
            debt_to_equity=r("debt_to_equity", bs.total_liabilities, bs.total_equity, warnings),
            debt_to_assets=r("debt_to_assets", bs.total_liabilities, bs.total_assets, warnings),
            interest_coverage=r(
                "interest_coverage", inc.operating_income, inc.interest_expense, warnings
            ),
        )

        if warnings:
            logger.warning("ratios_undefined", extra={
                "ratios": [w.details["ratio"] for w in warnings],
            })

        return FinancialRatios(
            liquidity=liquidity,
            profitability=profitability,
            efficiency=efficiency,
            leverage=leverage,
            warnings=tuple(warnings),
        )


# =============================================================================
# Qualitative assessment
# =============================================================================


class AssessmentBand(str, Enum):
    FAVORABLE = "favorable"
    MODERATE = "moderate"
    UNFAVORABLE = "unfavorable"
    UNDEFINED = "undefined"


@dataclass(frozen=True)
class RatioAssessment:
    value: Decimal | None
    band: AssessmentBand
    analysis: str


@dataclass(frozen=True)
class _Thresholds:
    higher_is_better: bool
    favorable: Decimal
    moderate: Decimal
    texts: tuple[str, str, str]


def _t(higher: bool, favorable: str, moderate: str, *texts: str) -> _Thresholds:
    return _Thresholds(higher, Decimal(favorable), Decimal(moderate), texts)


# Bands are strict: "> 2" for current ratio means exactly 2 is only moderate.
RATIO_THRESHOLDS: dict[str, _Thresholds] = {
    "current_ratio": _t(True, "2", "1",
        "Strong liquidity position", "Adequate liquidity", "Potential liquidity concerns"),
    "quick_ratio": _t(True, "1", "0.5",
        "Good short-term liquidity", "Moderate short-term liquidity",
        "Limited short-term liquidity"),
    "cash_ratio": _t(True, "0.5", "0.2",
        "Strong cash position", "Adequate cash position", "Limited cash reserves"),
    "gross_margin": _t(True, "0.4", "0.2",
        "Excellent gross profit margin", "Good gross profit margin",
        "Low gross profit margin"),
    "operating_margin": _t(True, "0.2", "0.1",
        "Strong operating efficiency", "Moderate operating efficiency",
        "Low operating efficiency"),
    "net_margin": _t(True, "0.15", "0.05",
        "Excellent profitability", "Good profitability", "Low profitability"),
    "return_on_assets": _t(True, "0.1", "0.05",
        "Efficient asset utilization", "Moderate asset utilization",
        "Inefficient asset utilization"),
    "return_on_equity": _t(True, "0.15", "0.1",
        "Excellent return on equity", "Good return on equity", "Low return on equity"),
    "asset_turnover": _t(True, "1", "0.5",
        "Efficient asset utilization", "Moderate asset utilization",
        "Inefficient asset utilization"),
    "receivables_turnover": _t(True, "10", "5",
        "Efficient receivables collection", "Moderate receivables collection",
        "Inefficient receivables collection"),
    "inventory_turnover": _t(True, "5", "2",
        "Efficient inventory management", "Moderate inventory management",
        "Inefficient inventory management"),
    "debt_to_equity": _t(False, "1", "2",
        "Conservative leverage", "Moderate leverage", "High leverage"),
    "debt_to_assets": _t(False, "0.4", "0.6",
        "Low debt burden", "Moderate debt burden", "High debt burden"),
    "interest_coverage": _t(True, "3", "1.5",
        "Strong interest coverage", "Adequate interest coverage",
        "Weak interest coverage"),
}


def _band(value: Decimal, t: _Thresholds) -> tuple[AssessmentBand, str]:
    if t.higher_is_better:
        favorable = value > t.favorable
        moderate = value > t.moderate
    else:
        favorable = value < t.favorable
        moderate = value < t.moderate
    if favorable:
        return AssessmentBand.FAVORABLE, t.texts[0]
    if moderate:
        return AssessmentBand.MODERATE, t.texts[1]
    return AssessmentBand.UNFAVORABLE, t.texts[2]


def assess_ratios(ratios: FinancialRatios) -> dict[str, RatioAssessment]:
    """Qualitative band and one-line analysis for every ratio."""
    assessments: dict[str, RatioAssessment] = {}
    for name, ratio in ratios.as_dict().items():
        if not ratio.is_defined:
            assessments[name] = RatioAssessment(
                value=None,
                band=AssessmentBand.UNDEFINED,
                analysis="Not meaningful: denominator is zero",
            )
            continue
        band, analysis = _band(ratio.value, RATIO_THRESHOLDS[name])
        assessments[name] = RatioAssessment(value=ratio.value, band=band, analysis=analysis)
    return assessments
