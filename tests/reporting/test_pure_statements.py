"""
Tests for the pure statement builders.

No database or repository -- accounts and entries are passed directly.
"""

import json
from datetime import date
from decimal import Decimal

import pytest

from ledger_kernel.domain.accounts import AccountCategory as C
from ledger_kernel.domain.diagnostics import WarningCode
from ledger_kernel.domain.journal import EntryLine, JournalEntry
from ledger_kernel.domain.values import Money
from ledger_kernel.exceptions import (
    CurrencyMismatchError,
    InvalidDateRangeError,
    UnbalancedEntryError,
)
from ledger_reporting.config import ReportingConfig
from ledger_reporting.models import ReportType
from ledger_reporting.statements import (
    build_balance_sheet,
    build_cash_flow_statement,
    build_income_statement,
    render_to_dict,
)

JAN_1 = date(2024, 1, 1)
JAN_31 = date(2024, 1, 31)


def usd(amount: str) -> Money:
    return Money.of(amount, "USD")


def unbalanced_entry() -> JournalEntry:
    return JournalEntry(
        "bad",
        date(2024, 1, 20),
        (
            EntryLine.debit_line("cash", "100", "USD"),
            EntryLine.credit_line("revenue", "90", "USD"),
        ),
    )


# =============================================================================
# Balance sheet
# =============================================================================


class TestBalanceSheet:

    def test_sale_and_expense_scenario(self, chart_of_accounts, sale_and_expense):
        report = build_balance_sheet(chart_of_accounts, sale_and_expense, JAN_31)
        assert report.assets.current == {C.CASH: usd("600")}
        assert report.equity == {C.CURRENT_EARNINGS: usd("600")}
        assert report.total_assets == usd("600")
        assert report.total_liabilities_and_equity == usd("600")
        assert report.is_balanced
        assert report.warnings == ()

    def test_classified_sections(self, chart_of_accounts, january_activity):
        report = build_balance_sheet(chart_of_accounts, january_activity, JAN_31)
        assert list(report.assets.current.items()) == [
            (C.CASH, usd("13450")),
            (C.ACCOUNTS_RECEIVABLE, usd("2000")),
            (C.INVENTORY, usd("300")),
        ]
        assert report.assets.fixed == {C.EQUIPMENT: usd("2900")}
        assert report.liabilities.current == {C.ACCOUNTS_PAYABLE: usd("800")}
        assert report.liabilities.long_term == {C.LONG_TERM_LOANS: usd("5000")}
        assert report.equity == {
            C.OWNER_EQUITY: usd("10000"),
            C.CURRENT_EARNINGS: usd("2850"),
        }
        assert report.total_assets == usd("18650")
        assert report.imbalance.is_zero
        assert report.is_balanced

    def test_as_of_excludes_later_entries(self, chart_of_accounts, january_activity):
        report = build_balance_sheet(chart_of_accounts, january_activity, date(2024, 1, 5))
        assert report.assets.current == {C.CASH: usd("7000")}
        assert report.assets.fixed == {C.EQUIPMENT: usd("3000")}

    def test_account_balances_cover_every_account(self, chart_of_accounts, sale_and_expense):
        report = build_balance_sheet(chart_of_accounts, sale_and_expense, JAN_31)
        assert len(report.account_balances) == len(chart_of_accounts)
        by_id = {line.account_id: line.balance for line in report.account_balances}
        assert by_id["revenue"] == usd("1000")
        assert by_id["expense"] == usd("400")

    def test_include_zero_balances(self, chart_of_accounts, sale_and_expense):
        config = ReportingConfig(include_zero_balances=True)
        report = build_balance_sheet(chart_of_accounts, sale_and_expense, JAN_31, config)
        assert list(report.assets.current) == [
            C.CASH, C.ACCOUNTS_RECEIVABLE, C.INVENTORY, C.PREPAID_EXPENSES, C.CURRENT_ASSET,
        ]
        assert report.assets.current[C.INVENTORY].is_zero

    def test_unbalanced_entry_flagged(self, chart_of_accounts):
        report = build_balance_sheet(chart_of_accounts, [unbalanced_entry()], JAN_31)
        codes = [w.code for w in report.warnings]
        assert codes == [WarningCode.UNBALANCED_ENTRY, WarningCode.UNBALANCED_BALANCE_SHEET]
        assert report.warnings[0].details["entry_id"] == "bad"
        assert not report.is_balanced
        assert report.imbalance == usd("10")

    def test_strict_entries_raise(self, chart_of_accounts):
        config = ReportingConfig(strict_entries=True)
        with pytest.raises(UnbalancedEntryError, match="bad"):
            build_balance_sheet(chart_of_accounts, [unbalanced_entry()], JAN_31, config)

    def test_tolerance(self, chart_of_accounts):
        config = ReportingConfig(balance_tolerance=Decimal("10"))
        report = build_balance_sheet(chart_of_accounts, [unbalanced_entry()], JAN_31, config)
        assert report.is_balanced
        assert [w.code for w in report.warnings] == [WarningCode.UNBALANCED_ENTRY]

    def test_default_tolerance_is_minor_unit(self, chart_of_accounts):
        report = build_balance_sheet(chart_of_accounts, [], JAN_31)
        assert report.tolerance == Decimal("0.01")
        assert report.total_assets.is_zero

    def test_foreign_currency_entries_rejected(self, chart_of_accounts, make_entry):
        entries = [make_entry("e1", JAN_1, "cash", "revenue", "5", currency="EUR")]
        with pytest.raises(CurrencyMismatchError):
            build_balance_sheet(chart_of_accounts, entries, JAN_31)

    def test_regeneration_is_identical(self, chart_of_accounts, january_activity):
        first = build_balance_sheet(chart_of_accounts, january_activity, JAN_31)
        second = build_balance_sheet(chart_of_accounts, list(january_activity), JAN_31)
        assert first == second
        assert render_to_dict(first) == render_to_dict(second)
        assert hash(first) == hash(second)

    def test_sections_are_read_only(self, chart_of_accounts, january_activity):
        report = build_balance_sheet(chart_of_accounts, january_activity, JAN_31)
        with pytest.raises(TypeError):
            report.equity[C.OWNER_EQUITY] = usd("0")
        with pytest.raises(TypeError):
            report.assets.current[C.CASH] = usd("0")
        assert report.category_amount(C.CASH) == usd("13450")


# =============================================================================
# Income statement
# =============================================================================


class TestIncomeStatement:

    def test_sale_and_expense_scenario(self, chart_of_accounts, sale_and_expense):
        report = build_income_statement(chart_of_accounts, sale_and_expense, JAN_1, JAN_31)
        assert report.total_revenue == usd("1000")
        assert report.operating_expenses == {C.OPERATING_EXPENSE: usd("400")}
        assert report.net_income == usd("600")

    def test_multi_step_identities(self, chart_of_accounts, january_activity):
        report = build_income_statement(chart_of_accounts, january_activity, JAN_1, JAN_31)
        assert report.total_revenue == usd("3500")
        assert report.gross_profit == usd("3000")
        assert report.operating_income == usd("2900")
        assert report.interest_expense == usd("50")
        assert report.depreciation == usd("100")
        assert report.net_income == usd("2850")
        assert report.gross_profit == report.total_revenue - report.total_cost_of_goods_sold
        assert report.net_income == (
            report.operating_income + report.total_other_income - report.total_other_expenses
        )

    def test_period_window(self, chart_of_accounts, january_activity):
        report = build_income_statement(
            chart_of_accounts, january_activity, date(2024, 1, 11), date(2024, 1, 20)
        )
        assert report.total_revenue == usd("1500")
        assert report.total_cost_of_goods_sold == usd("500")

    def test_only_pl_accounts_listed(self, chart_of_accounts, sale_and_expense):
        report = build_income_statement(chart_of_accounts, sale_and_expense, JAN_1, JAN_31)
        assert {line.account_id for line in report.account_balances} == {
            "revenue", "other_income", "cogs", "expense", "depreciation", "interest",
        }

    def test_inverted_range(self, chart_of_accounts):
        with pytest.raises(InvalidDateRangeError):
            build_income_statement(chart_of_accounts, [], JAN_31, JAN_1)


# =============================================================================
# Cash flow statement
# =============================================================================


class TestCashFlowStatement:

    def test_sale_and_expense_scenario(self, chart_of_accounts, sale_and_expense):
        report = build_cash_flow_statement(chart_of_accounts, sale_and_expense, JAN_1, JAN_31)
        assert report.beginning_cash.is_zero
        assert report.net_cash_from_operations == usd("600")
        assert report.ending_cash == usd("600")
        assert report.reconciles_to_ledger
        assert report.warnings == ()

    def test_investing_and_financing_by_account_code(self, chart_of_accounts, january_activity):
        report = build_cash_flow_statement(chart_of_accounts, january_activity, JAN_1, JAN_31)
        assert report.investing == {
            "depreciation_reclassified": usd("-100"),
            "1500": usd("-2900"),
        }
        assert report.net_cash_from_investing == usd("-3000")
        assert report.financing == {"2500": usd("5000"), "3000": usd("10000")}

    def test_without_adjustments_mismatch_is_flagged(self, chart_of_accounts, january_activity):
        report = build_cash_flow_statement(chart_of_accounts, january_activity, JAN_1, JAN_31)
        assert report.ledger_ending_cash == usd("13450")
        assert not report.reconciles_to_ledger
        assert [w.code for w in report.warnings] == [WarningCode.CASH_FLOW_LEDGER_MISMATCH]

    def test_derived_adjustments_reconcile(self, chart_of_accounts, january_activity):
        config = ReportingConfig(derive_cash_flow_adjustments=True)
        report = build_cash_flow_statement(
            chart_of_accounts, january_activity, JAN_1, JAN_31, config=config
        )
        assert report.operating.adjustments == {
            "depreciation": usd("100"),
            "change_in_accounts_receivable": usd("-2000"),
            "change_in_inventory": usd("-300"),
            "change_in_accounts_payable": usd("800"),
        }
        assert report.net_cash_from_operations == usd("1450")
        assert report.net_cash_from_investing == usd("-3000")
        assert report.net_cash_from_financing == usd("15000")
        assert report.ending_cash == usd("13450")
        assert report.reconciles_to_ledger
        assert report.warnings == ()

    def test_caller_supplied_adjustments_reconcile(self, chart_of_accounts, january_activity):
        report = build_cash_flow_statement(
            chart_of_accounts,
            january_activity,
            JAN_1,
            JAN_31,
            adjustments={
                "depreciation": "100",
                "change_in_accounts_receivable": "-2000",
                "change_in_inventory": "-300",
                "change_in_accounts_payable": "800",
            },
        )
        assert report.net_cash_from_investing == usd("-3000")
        assert report.ending_cash == usd("13450")
        assert report.reconciles_to_ledger
        assert report.warnings == ()

    def test_caller_adjustments_win(self, chart_of_accounts, january_activity):
        config = ReportingConfig(derive_cash_flow_adjustments=True)
        report = build_cash_flow_statement(
            chart_of_accounts,
            january_activity,
            JAN_1,
            JAN_31,
            adjustments={"depreciation": "150"},
            config=config,
        )
        assert report.operating.adjustments["depreciation"] == usd("150")

    def test_caller_adjustments(self, chart_of_accounts, sale_and_expense):
        report = build_cash_flow_statement(
            chart_of_accounts,
            sale_and_expense,
            JAN_1,
            JAN_31,
            opening_cash=usd("50"),
            adjustments={"depreciation": usd("25")},
        )
        assert report.net_cash_from_operations == usd("625")
        assert report.ending_cash == report.beginning_cash + report.net_change_in_cash
        assert report.ledger_ending_cash == usd("650")

    def test_opening_cash_from_prior_entries(self, chart_of_accounts, make_entry):
        entries = [
            make_entry("e1", date(2024, 1, 5), "cash", "capital", "1000"),
            make_entry("e2", date(2024, 2, 5), "cash", "revenue", "200"),
        ]
        report = build_cash_flow_statement(
            chart_of_accounts, entries, date(2024, 2, 1), date(2024, 2, 29)
        )
        assert report.beginning_cash == usd("1000")
        assert report.net_cash_from_operations == usd("200")
        assert report.financing == {}
        assert report.ending_cash == usd("1200")
        assert report.reconciles_to_ledger

    def test_period_from_date_min(self, chart_of_accounts, sale_and_expense):
        report = build_cash_flow_statement(chart_of_accounts, sale_and_expense, date.min, JAN_31)
        assert report.beginning_cash.is_zero
        assert report.ending_cash == usd("600")
        assert report.reconciles_to_ledger

    def test_activity_maps_are_read_only(self, chart_of_accounts, january_activity):
        report = build_cash_flow_statement(chart_of_accounts, january_activity, JAN_1, JAN_31)
        with pytest.raises(TypeError):
            report.investing["1500"] = usd("0")
        with pytest.raises(TypeError):
            report.operating.adjustments["depreciation"] = usd("0")
        hash(report)

    def test_unbalanced_entry_flagged(self, chart_of_accounts):
        report = build_cash_flow_statement(chart_of_accounts, [unbalanced_entry()], JAN_1, JAN_31)
        assert WarningCode.UNBALANCED_ENTRY in [w.code for w in report.warnings]


# =============================================================================
# Rendering
# =============================================================================


class TestRenderToDict:

    def test_balance_sheet_primitives(self, chart_of_accounts, sale_and_expense):
        report = build_balance_sheet(
            chart_of_accounts, sale_and_expense, JAN_31, ReportingConfig(entity_name="Acme")
        )
        data = render_to_dict(report)
        assert data["metadata"]["report_type"] == ReportType.BALANCE_SHEET.value
        assert data["metadata"]["entity_name"] == "Acme"
        assert data["metadata"]["as_of_date"] == "2024-01-31"
        assert data["currency"] == "USD"
        assert data["assets"]["current"] == {"cash": {"amount": "600", "currency": "USD"}}
        assert data["assets"]["total_current"] == {"amount": "600", "currency": "USD"}
        assert data["is_balanced"] is True
        assert data["tolerance"] == "0.01"
        assert data["account_balances"][0]["account_type"] == "asset"
        json.dumps(data)

    def test_cash_flow_derived_fields(self, chart_of_accounts, sale_and_expense):
        data = render_to_dict(
            build_cash_flow_statement(chart_of_accounts, sale_and_expense, JAN_1, JAN_31)
        )
        assert data["ending_cash"]["amount"] == "600"
        assert data["operating"]["net_cash_from_operations"]["amount"] == "600"
        assert data["reconciles_to_ledger"] is True

    def test_warnings_rendered(self, chart_of_accounts):
        data = render_to_dict(build_balance_sheet(chart_of_accounts, [unbalanced_entry()], JAN_31))
        assert data["warnings"][0]["code"] == "UNBALANCED_ENTRY"
        json.dumps(data)
