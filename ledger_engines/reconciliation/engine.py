"""
Reconciliation Engine - Diff a bank statement against the book.

Pure functions with no I/O.

Matching rules:
    - A bank line matches a book line when the amounts are exactly equal
      after converting the bank line into the book currency (supplied
      ExchangeRate, rounded to minor units) and the dates differ by at most
      ``date_tolerance_days``.
    - Each line matches at most once.  Bank lines are processed in input
      order; among the candidate book lines the closest date wins, then an
      equal non-empty reference, then input order.

Usage:
    from ledger_engines.reconciliation import ReconciliationEngine, book_lines_from_entries

    book = book_lines_from_entries(entries, cash_account_id)
    result = ReconciliationEngine(date_tolerance_days=3).reconcile(
        book, bank_lines, opening_book_balance=Money.of("500", "USD"),
    )
    print(result.difference, result.unmatched_bank)
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Mapping

from ledger_engines.reconciliation.recon_types import (
    BookLine,
    MatchedPair,
    ReconciliationResult,
    ReconciliationSummary,
)
from ledger_engines.tracer import traced_engine
from ledger_kernel.domain.dtos import BankLine
from ledger_kernel.domain.journal import JournalEntry
from ledger_kernel.domain.values import Currency, ExchangeRate, Money, sum_money
from ledger_kernel.exceptions import CurrencyMismatchError, ValidationError
from ledger_kernel.logging_config import get_logger

logger = get_logger("engines.reconciliation")

_CHARGE_KEYWORDS = ("charge", "fee")
_INTEREST_KEYWORDS = ("interest",)


def book_lines_from_entries(
    entries: Iterable[JournalEntry], account_id: str
) -> tuple[BookLine, ...]:
    """Signed (debit - credit) book lines for one account, in entry order."""
    lines: list[BookLine] = []
    for entry in entries:
        for index, line in enumerate(entry.lines):
            if line.account_id != account_id:
                continue
            lines.append(BookLine(
                line_id=f"{entry.entry_id}:{index}",
                line_date=entry.entry_date,
                amount=line.signed_amount,
                description=entry.description,
                reference=entry.reference,
                entry_id=entry.entry_id,
            ))
    return tuple(lines)


def _index_rates(
    exchange_rates: Iterable[ExchangeRate] | Mapping | None,
) -> dict[tuple[str, str], ExchangeRate]:
    if exchange_rates is None:
        return {}
    if isinstance(exchange_rates, Mapping):
        exchange_rates = exchange_rates.values()
    index: dict[tuple[str, str], ExchangeRate] = {}
    for rate in exchange_rates:
        index[rate.pair] = rate
        index.setdefault(rate.inverse().pair, rate.inverse())
    return index


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)


class ReconciliationEngine:
    """
    Bank-versus-book reconciliation.

    Pure functions - no I/O, no database access.  Source records are never
    mutated; the result references the caller's line objects.
    """

    def __init__(self, date_tolerance_days: int = 0):
        if date_tolerance_days < 0:
            raise ValidationError(
                f"date_tolerance_days cannot be negative: {date_tolerance_days}"
            )
        self.date_tolerance_days = date_tolerance_days

    def _to_book_currency(
        self,
        money: Money,
        currency: Currency,
        rates: dict[tuple[str, str], ExchangeRate],
    ) -> Money:
        if money.currency == currency:
            return money.round()
        rate = rates.get((money.currency.code, currency.code))
        if rate is None:
            raise CurrencyMismatchError(money.currency.code, currency.code, "reconcile")
        return rate.convert(money).round()

    @traced_engine(
        "reconciliation",
        "1.0",
        fingerprint_fields=("book_lines", "bank_lines", "opening_book_balance"),
    )
    def reconcile(
        self,
        book_lines: Iterable[BookLine],
        bank_lines: Iterable[BankLine],
        opening_book_balance: Money,
        opening_bank_balance: Money | None = None,
        exchange_rates: Iterable[ExchangeRate] | Mapping | None = None,
    ) -> ReconciliationResult:
        """
        Match bank lines to book lines and compute both closing balances.

        ``opening_bank_balance`` defaults to ``opening_book_balance``.

        Raises:
            CurrencyMismatchError: A line is in a foreign currency and no
                exchange rate for it was supplied.
        """
        t0 = time.monotonic()
        book_lines = tuple(book_lines)
        bank_lines = tuple(bank_lines)
        currency = opening_book_balance.currency
        rates = _index_rates(exchange_rates)

        book_amounts = [self._to_book_currency(b.amount, currency, rates) for b in book_lines]
        bank_amounts = [self._to_book_currency(b.amount, currency, rates) for b in bank_lines]

        used_book: set[int] = set()
        matched: list[MatchedPair] = []
        matched_bank: set[int] = set()

        for bank_index, bank_line in enumerate(bank_lines):
            best: tuple[int, int, int] | None = None
            for book_index, book_line in enumerate(book_lines):
                if book_index in used_book:
                    continue
                if book_amounts[book_index] != bank_amounts[bank_index]:
                    continue
                days = abs((bank_line.line_date - book_line.line_date).days)
                if days > self.date_tolerance_days:
                    continue
                same_reference = bool(bank_line.reference) and (
                    bank_line.reference == book_line.reference
                )
                rank = (days, 0 if same_reference else 1, book_index)
                if best is None or rank < best:
                    best = rank
            if best is None:
                continue
            book_index = best[2]
            used_book.add(book_index)
            matched_bank.add(bank_index)
            matched.append(MatchedPair(
                book_line=book_lines[book_index],
                bank_line=bank_line,
                converted_amount=bank_amounts[bank_index],
                date_difference_days=best[0],
            ))

        unmatched_book = tuple(
            line for i, line in enumerate(book_lines) if i not in used_book
        )
        unmatched_bank_idx = [i for i in range(len(bank_lines)) if i not in matched_bank]

        opening_bank = (
            opening_book_balance
            if opening_bank_balance is None
            else self._to_book_currency(opening_bank_balance, currency, rates)
        )
        book_balance = opening_book_balance + sum_money(book_amounts, currency)
        bank_balance = opening_bank + sum_money(bank_amounts, currency)

        summary = self._summarize(bank_lines, bank_amounts, unmatched_bank_idx, currency)

        result = ReconciliationResult(
            book_balance=book_balance,
            bank_balance=bank_balance,
            matched=tuple(matched),
            unmatched_book=unmatched_book,
            unmatched_bank=tuple(bank_lines[i] for i in unmatched_bank_idx),
            summary=summary,
        )

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("reconciliation_completed", extra={
            "book_line_count": len(book_lines),
            "bank_line_count": len(bank_lines),
            "matched_count": len(matched),
            "unmatched_book_count": len(result.unmatched_book),
            "unmatched_bank_count": len(result.unmatched_bank),
            "difference": str(result.difference.amount),
            "duration_ms": duration_ms,
        })
        return result

    def _summarize(
        self,
        bank_lines: tuple[BankLine, ...],
        amounts: list[Money],
        unmatched_idx: list[int],
        currency: Currency,
    ) -> ReconciliationSummary:
        zero = Money.zero(currency)
        credits = [a for a in amounts if a.is_positive]
        debits = [-a for a in amounts if a.is_negative]
        unmatched = set(unmatched_idx)

        charges = zero
        interest = zero
        deposits = zero
        checks = zero
        for i, (line, amount) in enumerate(zip(bank_lines, amounts)):
            if amount.is_negative and _contains_any(line.description, _CHARGE_KEYWORDS):
                charges = charges - amount
            if amount.is_positive and _contains_any(line.description, _INTEREST_KEYWORDS):
                interest = interest + amount
            if i in unmatched:
                if amount.is_positive:
                    deposits = deposits + amount
                elif amount.is_negative:
                    checks = checks - amount

        return ReconciliationSummary(
            total_credits=sum_money(credits, currency),
            total_debits=sum_money(debits, currency),
            outstanding_deposits=deposits,
            outstanding_checks=checks,
            bank_charges=charges,
            interest_earned=interest,
        )
