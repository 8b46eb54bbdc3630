"""
Tests for the bank Reconciliation Engine.

Covers:
- Identical book and bank lines reconcile fully
- A missing bank line leaves one unmatched book line
- Date tolerance and tie-breaking
- Foreign-currency bank lines with exchange rates
- Statement summary totals
"""

from datetime import date

import pytest

from ledger_engines.reconciliation import (
    BookLine,
    ReconciliationEngine,
    book_lines_from_entries,
)
from ledger_kernel.domain.dtos import BankLine
from ledger_kernel.domain.values import ExchangeRate, Money
from ledger_kernel.exceptions import CurrencyMismatchError, ValidationError


def usd(amount: str) -> Money:
    return Money.of(amount, "USD")


def book(line_id: str, day: int, amount: str, reference: str = "") -> BookLine:
    return BookLine(line_id, date(2024, 1, day), usd(amount), reference=reference)


def bank(line_id: str, day: int, amount: str, description: str = "", reference: str = "",
         currency: str = "USD") -> BankLine:
    return BankLine(
        line_id, date(2024, 1, day), Money.of(amount, currency), description, reference
    )


class TestReconcile:

    def setup_method(self):
        self.engine = ReconciliationEngine()
        self.book_lines = [book("b1", 3, "500"), book("b2", 5, "-120"), book("b3", 9, "75")]
        self.bank_lines = [bank("k1", 3, "500"), bank("k2", 5, "-120"), bank("k3", 9, "75")]

    def test_identical_lines_fully_reconciled(self):
        result = self.engine.reconcile(self.book_lines, self.bank_lines, usd("1000"))
        assert result.difference.is_zero
        assert result.unmatched_book == ()
        assert result.unmatched_bank == ()
        assert len(result.matched) == 3
        assert result.is_fully_reconciled
        assert result.book_balance == usd("1455")

    def test_dropped_bank_line(self):
        result = self.engine.reconcile(
            self.book_lines, [self.bank_lines[0], self.bank_lines[2]], usd("1000")
        )
        assert [b.line_id for b in result.unmatched_book] == ["b2"]
        assert abs(result.difference) == usd("120")
        assert not result.is_fully_reconciled

    def test_opening_bank_balance_differs(self):
        result = self.engine.reconcile(
            self.book_lines, self.bank_lines, usd("1000"), opening_bank_balance=usd("1010")
        )
        assert result.difference == usd("10")
        assert not result.is_fully_reconciled

    def test_date_outside_tolerance_unmatched(self):
        result = self.engine.reconcile([book("b1", 3, "500")], [bank("k1", 5, "500")], usd("0"))
        assert len(result.unmatched_book) == 1
        assert len(result.unmatched_bank) == 1
        assert result.difference.is_zero

    def test_date_tolerance(self):
        engine = ReconciliationEngine(date_tolerance_days=2)
        result = engine.reconcile([book("b1", 3, "500")], [bank("k1", 5, "500")], usd("0"))
        assert result.matched[0].date_difference_days == 2
        assert result.is_fully_reconciled

    def test_closest_date_then_reference_wins(self):
        engine = ReconciliationEngine(date_tolerance_days=3)
        books = [
            book("far", 1, "50", reference="X"),
            book("near", 3, "50"),
            book("near_ref", 5, "50", reference="CHK-9"),
        ]
        result = engine.reconcile(books, [bank("k1", 4, "50", reference="CHK-9")], usd("0"))
        assert result.matched[0].book_line.line_id == "near_ref"

    def test_each_line_matches_once(self):
        result = self.engine.reconcile(
            [book("b1", 3, "10")], [bank("k1", 3, "10"), bank("k2", 3, "10")], usd("0")
        )
        assert len(result.matched) == 1
        assert [b.line_id for b in result.unmatched_bank] == ["k2"]

    def test_negative_tolerance_rejected(self):
        with pytest.raises(ValidationError):
            ReconciliationEngine(date_tolerance_days=-1)

    def test_source_lines_untouched(self):
        books = tuple(self.book_lines)
        self.engine.reconcile(books, self.bank_lines, usd("0"))
        assert books == tuple(self.book_lines)


class TestForeignCurrency:

    def test_converted_with_rate(self):
        result = ReconciliationEngine().reconcile(
            [book("b1", 3, "110")],
            [bank("k1", 3, "100", currency="EUR")],
            usd("0"),
            exchange_rates=[ExchangeRate.of("EUR", "USD", "1.10")],
        )
        assert result.is_fully_reconciled
        assert result.matched[0].converted_amount == usd("110")

    def test_inverse_rate_used(self):
        result = ReconciliationEngine().reconcile(
            [book("b1", 3, "50")],
            [bank("k1", 3, "100", currency="EUR")],
            usd("0"),
            exchange_rates=[ExchangeRate.of("USD", "EUR", "2")],
        )
        assert result.is_fully_reconciled

    def test_missing_rate(self):
        with pytest.raises(CurrencyMismatchError):
            ReconciliationEngine().reconcile(
                [book("b1", 3, "110")], [bank("k1", 3, "100", currency="EUR")], usd("0")
            )


class TestSummary:

    def test_totals(self):
        bank_lines = [
            bank("k1", 2, "1000", "Deposit"),
            bank("k2", 3, "-15", "Monthly service charge"),
            bank("k3", 4, "2.50", "Interest paid"),
            bank("k4", 5, "-200", "Cheque 101"),
        ]
        result = ReconciliationEngine().reconcile(
            [book("b1", 2, "1000")], bank_lines, usd("0")
        )
        summary = result.summary
        assert summary.total_credits == usd("1002.50")
        assert summary.total_debits == usd("215")
        assert summary.bank_charges == usd("15")
        assert summary.interest_earned == usd("2.50")
        assert summary.outstanding_deposits == usd("2.50")
        assert summary.outstanding_checks == usd("215")


class TestBookLinesFromEntries:

    def test_signed_lines(self, sale_and_expense):
        lines = book_lines_from_entries(sale_and_expense, "cash")
        assert [(line.line_id, line.amount) for line in lines] == [
            ("e1:0", usd("1000")),
            ("e2:1", usd("-400")),
        ]
        assert lines[0].reference == "INV-1"
