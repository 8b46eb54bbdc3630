"""
Tax Engine - Bracket-based income tax, flat and compound rates.

Pure functions with no I/O - schedules are provided as parameters.

A ``TaxSchedule`` is tagged with its calculation type:

    progressive   each bracket taxes the slice of income inside it
    flat          one rate over the whole amount
    compound      each rate applies to the amount plus the taxes before it

Progressive bracket tables are stored the way people write them, with
whole-unit boundaries such as ``[0-50000] @ 10%, [50001-100000] @ 20%``.
The first bracket starts taxing at its ``min_income``; every later bracket
starts at the previous bracket's ``max_income``, so the one-unit gap in the
written table never leaves income untaxed.

Usage:
    from ledger_engines.tax import TaxCalculator, TaxSchedule, TaxCalculationType
    from ledger_kernel.domain.dtos import TaxBracket

    schedule = TaxSchedule(
        calculation_type=TaxCalculationType.PROGRESSIVE,
        brackets=(
            TaxBracket(Decimal("0"), Decimal("50000"), Decimal("0.10")),
            TaxBracket(Decimal("50001"), Decimal("100000"), Decimal("0.20")),
        ),
        currency="USD",
    )
    result = TaxCalculator().calculate(Decimal("100000"), schedule)
    print(result.tax_amount)  # Money: 15000.00 USD
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from ledger_engines.tracer import traced_engine
from ledger_kernel.domain.diagnostics import ComputationWarning, WarningCode
from ledger_kernel.domain.dtos import TaxBracket
from ledger_kernel.domain.values import Currency, Money
from ledger_kernel.exceptions import (
    CurrencyMismatchError,
    InvalidBracketConfigurationError,
    ValidationError,
)
from ledger_kernel.logging_config import get_logger

logger = get_logger("engines.tax")


class TaxCalculationType(str, Enum):
    """How a schedule turns an amount into tax."""

    PROGRESSIVE = "progressive"
    FLAT = "flat"
    COMPOUND = "compound"


def _validate_brackets(brackets: tuple[TaxBracket, ...], currency: Currency) -> None:
    if not brackets:
        raise InvalidBracketConfigurationError("progressive schedule has no brackets")

    allowed_gaps = {Decimal("0"), currency.minor_unit, Decimal("1")}
    last = len(brackets) - 1
    for i, bracket in enumerate(brackets):
        if bracket.rate < 0:
            raise InvalidBracketConfigurationError("rate is negative", i)
        if bracket.min_income < 0:
            raise InvalidBracketConfigurationError("min_income is negative", i)
        if bracket.max_income is None:
            if i != last:
                raise InvalidBracketConfigurationError(
                    "only the last bracket may be unbounded", i
                )
        elif bracket.max_income < bracket.min_income:
            raise InvalidBracketConfigurationError("max_income is below min_income", i)

        if i == 0:
            if bracket.min_income != 0:
                raise InvalidBracketConfigurationError("first bracket must start at 0", i)
            continue

        previous = brackets[i - 1]
        if bracket.min_income <= previous.min_income:
            raise InvalidBracketConfigurationError(
                "brackets must be sorted by ascending min_income", i
            )
        gap = bracket.min_income - previous.max_income
        if gap not in allowed_gaps:
            reason = "brackets overlap" if gap < 0 else "brackets leave a gap"
            raise InvalidBracketConfigurationError(
                f"{reason} ({previous.max_income} -> {bracket.min_income})", i
            )


@dataclass(frozen=True)
class TaxSchedule:
    """
    Validated tax configuration.

    Raises:
        InvalidBracketConfigurationError: On construction, when the
            brackets are unsorted, gapped, overlapping, negative, have an
            unbounded bracket before the last, or when a flat schedule does
            not carry exactly one rate, or a compound schedule carries none.
    """

    calculation_type: TaxCalculationType
    brackets: tuple[TaxBracket, ...] = ()
    rates: tuple[Decimal, ...] = ()
    currency: Currency = field(default_factory=lambda: Currency("USD"))

    def __post_init__(self) -> None:
        try:
            calculation_type = TaxCalculationType(self.calculation_type)
        except ValueError as e:
            raise InvalidBracketConfigurationError(
                f"unknown calculation type {self.calculation_type!r}"
            ) from e
        object.__setattr__(self, "calculation_type", calculation_type)
        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        object.__setattr__(self, "brackets", tuple(self.brackets))
        object.__setattr__(
            self,
            "rates",
            tuple(r if isinstance(r, Decimal) else Decimal(str(r)) for r in self.rates),
        )

        if calculation_type == TaxCalculationType.PROGRESSIVE:
            _validate_brackets(self.brackets, self.currency)
            return

        if calculation_type == TaxCalculationType.FLAT and len(self.rates) != 1:
            raise InvalidBracketConfigurationError(
                f"flat schedule needs exactly one rate, got {len(self.rates)}"
            )
        if calculation_type == TaxCalculationType.COMPOUND and not self.rates:
            raise InvalidBracketConfigurationError("compound schedule needs a rate")
        for i, rate in enumerate(self.rates):
            if rate < 0:
                raise InvalidBracketConfigurationError("rate is negative", i)

    @classmethod
    def progressive(
        cls, brackets: Iterable[TaxBracket], currency: Currency | str = "USD"
    ) -> TaxSchedule:
        return cls(TaxCalculationType.PROGRESSIVE, brackets=tuple(brackets), currency=currency)

    @classmethod
    def flat(cls, rate: Decimal | str, currency: Currency | str = "USD") -> TaxSchedule:
        return cls(TaxCalculationType.FLAT, rates=(rate,), currency=currency)

    @classmethod
    def compound(
        cls, rates: Iterable[Decimal | str], currency: Currency | str = "USD"
    ) -> TaxSchedule:
        return cls(TaxCalculationType.COMPOUND, rates=tuple(rates), currency=currency)

    @property
    def top_bracket(self) -> TaxBracket | None:
        return self.brackets[-1] if self.brackets else None


@dataclass(frozen=True)
class TaxLine:
    """Tax produced by one bracket or one rate."""

    rate: Decimal
    taxable_amount: Money
    tax_amount: Money
    min_income: Decimal | None = None
    max_income: Decimal | None = None


@dataclass(frozen=True)
class TaxCalculationResult:
    taxable_amount: Money
    tax_amount: Money
    effective_rate: Decimal
    calculation_type: TaxCalculationType
    lines: tuple[TaxLine, ...] = ()
    warnings: tuple[ComputationWarning, ...] = ()

    @property
    def net_amount(self) -> Money:
        """Amount left after tax."""
        return self.taxable_amount - self.tax_amount


class TaxCalculator:
    """
    Calculate tax for an amount under a schedule.

    Pure functions - no I/O, no database access.
    """

    @traced_engine("tax", "1.0", fingerprint_fields=("amount", "schedule"))
    def calculate(
        self,
        amount: Money | Decimal | str | int,
        schedule: TaxSchedule,
    ) -> TaxCalculationResult:
        """
        Calculate tax for ``amount``.

        Raises:
            ValidationError: If amount is negative.
            CurrencyMismatchError: If amount is Money in another currency.
        """
        t0 = time.monotonic()
        currency = schedule.currency
        if isinstance(amount, Money):
            if amount.currency != currency:
                raise CurrencyMismatchError(amount.currency.code, currency.code, "tax")
            base = amount
        else:
            base = Money.of(amount, currency)

        if base.is_negative:
            logger.error(
                "tax_amount_negative",
                extra={"amount": str(base.amount), "currency": currency.code},
            )
            raise ValidationError(f"Taxable amount cannot be negative: {base}")

        logger.info("tax_calculation_started", extra={
            "amount": str(base.amount),
            "currency": currency.code,
            "calculation_type": schedule.calculation_type.value,
        })

        if schedule.calculation_type == TaxCalculationType.PROGRESSIVE:
            exact, lines, warnings = self._progressive(base, schedule)
        elif schedule.calculation_type == TaxCalculationType.FLAT:
            exact, lines, warnings = self._flat(base, schedule)
        else:
            exact, lines, warnings = self._compound(base, schedule)

        tax = Money(exact, currency).round()
        effective_rate = Decimal("0") if base.is_zero else tax.amount / base.amount

        result = TaxCalculationResult(
            taxable_amount=base,
            tax_amount=tax,
            effective_rate=effective_rate,
            calculation_type=schedule.calculation_type,
            lines=lines,
            warnings=warnings,
        )

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("tax_calculation_completed", extra={
            "taxable_amount": str(base.amount),
            "tax_amount": str(tax.amount),
            "effective_rate": str(effective_rate),
            "line_count": len(lines),
            "warning_count": len(warnings),
            "duration_ms": duration_ms,
        })
        return result

    def _progressive(
        self, base: Money, schedule: TaxSchedule
    ) -> tuple[Decimal, tuple[TaxLine, ...], tuple[ComputationWarning, ...]]:
        amount = base.amount
        currency = schedule.currency
        total = Decimal("0")
        lines: list[TaxLine] = []
        warnings: list[ComputationWarning] = []

        previous_max: Decimal | None = None
        for i, bracket in enumerate(schedule.brackets):
            floor = bracket.min_income if i == 0 else previous_max
            previous_max = bracket.max_income
            if amount <= floor:
                break
            ceiling = amount if bracket.max_income is None else min(amount, bracket.max_income)
            portion = ceiling - floor
            tax = portion * bracket.rate
            total += tax
            lines.append(TaxLine(
                rate=bracket.rate,
                taxable_amount=Money(portion, currency),
                tax_amount=Money(tax, currency).round(),
                min_income=bracket.min_income,
                max_income=bracket.max_income,
            ))

        top = schedule.top_bracket
        if top.max_income is not None and amount > top.max_income:
            excess = amount - top.max_income
            tax = excess * top.rate
            total += tax
            lines.append(TaxLine(
                rate=top.rate,
                taxable_amount=Money(excess, currency),
                tax_amount=Money(tax, currency).round(),
                min_income=top.max_income,
                max_income=None,
            ))
            logger.warning("income_above_top_bracket", extra={
                "amount": str(amount),
                "top_bracket_max": str(top.max_income),
            })
            warnings.append(ComputationWarning(
                code=WarningCode.INCOME_ABOVE_TOP_BRACKET,
                message=(
                    f"Income {amount} exceeds the top bracket maximum "
                    f"{top.max_income}; the excess is taxed at {top.rate}"
                ),
                details={"excess": str(excess), "rate": str(top.rate)},
            ))

        return total, tuple(lines), tuple(warnings)

    def _flat(
        self, base: Money, schedule: TaxSchedule
    ) -> tuple[Decimal, tuple[TaxLine, ...], tuple[ComputationWarning, ...]]:
        rate = schedule.rates[0]
        tax = base.amount * rate
        line = TaxLine(
            rate=rate,
            taxable_amount=base,
            tax_amount=Money(tax, schedule.currency).round(),
        )
        return tax, (line,), ()

    def _compound(
        self, base: Money, schedule: TaxSchedule
    ) -> tuple[Decimal, tuple[TaxLine, ...], tuple[ComputationWarning, ...]]:
        running = base.amount
        total = Decimal("0")
        lines: list[TaxLine] = []
        for rate in schedule.rates:
            tax = running * rate
            lines.append(TaxLine(
                rate=rate,
                taxable_amount=Money(running, schedule.currency),
                tax_amount=Money(tax, schedule.currency).round(),
            ))
            total += tax
            running += tax
        return total, tuple(lines), ()


def calculate_tax(
    amount: Money | Decimal | str | int,
    brackets: Iterable[TaxBracket],
    currency: Currency | str = "USD",
) -> TaxCalculationResult:
    """Progressive tax over ``brackets``."""
    if isinstance(amount, Money):
        currency = amount.currency
    schedule = TaxSchedule.progressive(brackets, currency)
    return TaxCalculator().calculate(amount, schedule)
