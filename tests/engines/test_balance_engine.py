"""
Tests for the Balance Engine.

Covers:
- Sign convention per account type
- Empty line sets and the currency requirement
- Per-account balances with date windows
- Unknown account references
"""

from datetime import date
from decimal import Decimal

import pytest

from ledger_engines.balance import BalanceCalculator, compute_balance, lines_for_account
from ledger_kernel.domain.journal import EntryLine
from ledger_kernel.domain.values import Money
from ledger_kernel.exceptions import (
    AccountNotFoundError,
    CurrencyMismatchError,
    InvalidAccountTypeError,
    MissingFieldError,
)


def usd(amount: str) -> Money:
    return Money.of(amount, "USD")


class TestComputeBalance:

    def setup_method(self):
        self.lines = [
            EntryLine.debit_line("x", "100", "USD"),
            EntryLine.credit_line("x", "30", "USD"),
            EntryLine.debit_line("x", "5", "USD"),
        ]

    @pytest.mark.parametrize("account_type", ["asset", "expense"])
    def test_debit_normal(self, account_type):
        assert compute_balance(account_type, self.lines) == usd("75")

    @pytest.mark.parametrize("account_type", ["liability", "equity", "revenue"])
    def test_credit_normal(self, account_type):
        assert compute_balance(account_type, self.lines) == usd("-75")

    def test_unknown_type(self):
        with pytest.raises(InvalidAccountTypeError):
            compute_balance("contra", self.lines)

    def test_empty_lines_need_currency(self):
        with pytest.raises(MissingFieldError, match="currency"):
            compute_balance("asset", [])

    def test_empty_lines_with_currency_is_zero(self):
        assert compute_balance("asset", [], "EUR") == Money.zero("EUR")

    def test_currency_mismatch(self):
        with pytest.raises(CurrencyMismatchError):
            compute_balance("asset", self.lines, "EUR")

    def test_input_not_mutated(self):
        before = list(self.lines)
        compute_balance("asset", self.lines)
        assert self.lines == before


class TestBalancesByAccount:

    def setup_method(self):
        self.calculator = BalanceCalculator()

    def test_scenario_balances(self, chart_of_accounts, sale_and_expense):
        balances = self.calculator.balances_by_account(chart_of_accounts, sale_and_expense)
        assert balances["cash"] == usd("600")
        assert balances["revenue"] == usd("1000")
        assert balances["expense"] == usd("400")
        assert balances["ap"].is_zero

    def test_every_account_present_in_code_order(self, chart_of_accounts, sale_and_expense):
        balances = self.calculator.balances_by_account(chart_of_accounts, sale_and_expense)
        codes = [a.code for a in sorted(chart_of_accounts, key=lambda a: a.code)]
        by_id = {a.account_id: a.code for a in chart_of_accounts}
        assert [by_id[k] for k in balances] == codes

    def test_date_window(self, chart_of_accounts, make_entry):
        entries = [
            make_entry("e1", date(2024, 1, 1), "cash", "revenue", "10"),
            make_entry("e2", date(2024, 2, 1), "cash", "revenue", "20"),
            make_entry("e3", date(2024, 3, 1), "cash", "revenue", "40"),
        ]
        balances = self.calculator.balances_by_account(
            chart_of_accounts, entries, as_of=date(2024, 2, 29), start=date(2024, 2, 1)
        )
        assert balances["cash"] == usd("20")

    def test_unknown_account_raises(self, chart_of_accounts, make_entry):
        entries = [make_entry("e1", date(2024, 1, 1), "ghost", "revenue", "10")]
        with pytest.raises(AccountNotFoundError, match="ghost") as exc_info:
            self.calculator.balances_by_account(chart_of_accounts, entries)
        assert exc_info.value.entry_id == "e1"

    def test_emits_engine_trace(self, chart_of_accounts, sale_and_expense, captured_logs):
        self.calculator.balances_by_account(chart_of_accounts, sale_and_expense)
        traces = [r for r in captured_logs() if r["message"] == "LEDGER_ENGINE_TRACE"]
        assert traces[-1]["engine_name"] == "balance"


class TestLinesForAccount:

    def test_selects_in_order(self, sale_and_expense):
        lines = lines_for_account(sale_and_expense, "cash")
        assert [line.signed_amount.amount for line in lines] == [
            Decimal("1000"), Decimal("-400"),
        ]
