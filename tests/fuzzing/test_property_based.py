"""
Hypothesis-based property tests.

Invariants checked over generated ledgers:
- Bucketing partitions entries: each lands in exactly one bucket whose
  range contains its date.
- Balanced entries always produce a balanced balance sheet.
- With derived adjustments the cash flow statement reconciles to the
  ledger's cash accounts.
- Progressive tax is monotonic in income and bounded by the top rate.
"""

from datetime import date, timedelta
from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from ledger_engines.bucketing import Granularity, bucket
from ledger_engines.tax import TaxCalculator, TaxSchedule
from ledger_kernel.domain.accounts import Account, AccountCategory as C, AccountType as T
from ledger_kernel.domain.dtos import TaxBracket
from ledger_kernel.domain.journal import EntryLine, JournalEntry
from ledger_reporting.config import ReportingConfig
from ledger_reporting.statements import build_balance_sheet, build_cash_flow_statement

ACCOUNTS = (
    Account("cash", "1000", "Cash", T.ASSET, C.CASH),
    Account("bank", "1010", "Bank", T.ASSET, C.CASH),
    Account("ar", "1100", "Receivables", T.ASSET, C.ACCOUNTS_RECEIVABLE),
    Account("inventory", "1200", "Inventory", T.ASSET, C.INVENTORY),
    Account("equipment", "1500", "Equipment", T.ASSET, C.EQUIPMENT),
    Account("ap", "2000", "Payables", T.LIABILITY, C.ACCOUNTS_PAYABLE),
    Account("loan", "2500", "Loan", T.LIABILITY, C.LONG_TERM_LOANS),
    Account("capital", "3000", "Capital", T.EQUITY, C.OWNER_EQUITY),
    Account("revenue", "4000", "Sales", T.REVENUE, C.OPERATING_REVENUE),
    Account("cogs", "5000", "COGS", T.EXPENSE, C.COST_OF_GOODS_SOLD),
    Account("rent", "6000", "Rent", T.EXPENSE, C.OPERATING_EXPENSE),
    Account("depreciation", "6100", "Depreciation", T.EXPENSE, C.DEPRECIATION),
    Account("interest", "7000", "Interest", T.EXPENSE, C.INTEREST_EXPENSE),
)
ACCOUNT_IDS = [a.account_id for a in ACCOUNTS]

YEAR_START = date(2024, 1, 1)
YEAR_END = date(2024, 12, 31)

amounts = st.decimals(
    min_value=Decimal("0.01"),
    max_value=Decimal("100000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)
days = st.dates(min_value=YEAR_START, max_value=YEAR_END)


@st.composite
def balanced_entries(draw, max_size=25):
    count = draw(st.integers(min_value=0, max_value=max_size))
    entries = []
    for i in range(count):
        debit = draw(st.sampled_from(ACCOUNT_IDS))
        credit = draw(st.sampled_from([a for a in ACCOUNT_IDS if a != debit]))
        amount = draw(amounts)
        entries.append(JournalEntry(
            entry_id=f"e{i:03d}",
            entry_date=draw(days),
            lines=(
                EntryLine.debit_line(debit, amount, "USD"),
                EntryLine.credit_line(credit, amount, "USD"),
            ),
        ))
    return entries


class TestBucketingProperties:

    @given(
        entries=balanced_entries(),
        granularity=st.sampled_from(list(Granularity)),
    )
    @settings(max_examples=100)
    def test_partition(self, entries, granularity):
        buckets = bucket(entries, granularity)
        placed = [e.entry_id for group in buckets.values() for e in group]
        assert sorted(placed) == sorted(e.entry_id for e in entries)
        for key, group in buckets.items():
            for entry in group:
                assert key.start <= entry.entry_date <= key.end

    @given(entries=balanced_entries(), granularity=st.sampled_from(list(Granularity)))
    def test_buckets_do_not_overlap(self, entries, granularity):
        keys = list(bucket(entries, granularity))
        assert keys == sorted(keys)
        for earlier, later in zip(keys, keys[1:]):
            assert earlier.end < later.start


class TestStatementProperties:

    @given(entries=balanced_entries(), as_of=days)
    @settings(max_examples=100)
    def test_balanced_entries_balance_the_sheet(self, entries, as_of):
        report = build_balance_sheet(ACCOUNTS, entries, as_of)
        assert report.imbalance.is_zero
        assert report.is_balanced
        assert report.warnings == ()

    @given(entries=balanced_entries(), split=days)
    @settings(max_examples=100)
    def test_derived_cash_flow_reconciles(self, entries, split):
        config = ReportingConfig(derive_cash_flow_adjustments=True)
        report = build_cash_flow_statement(
            ACCOUNTS, entries, split, YEAR_END, config=config
        )
        assert report.ending_cash == report.beginning_cash + report.net_change_in_cash
        assert report.reconciles_to_ledger

    @given(entries=balanced_entries(), split=days)
    def test_opening_cash_matches_prior_balance_sheet(self, entries, split):
        report = build_cash_flow_statement(ACCOUNTS, entries, split, YEAR_END)
        prior = build_balance_sheet(ACCOUNTS, entries, split - timedelta(days=1))
        assert report.beginning_cash == prior.category_amount(C.CASH)


BRACKETS = TaxSchedule.progressive((
    TaxBracket("0", "10000", "0"),
    TaxBracket("10000", "40000", "0.12"),
    TaxBracket("40000", "90000", "0.22"),
    TaxBracket("90000", None, "0.35"),
))

incomes = st.decimals(
    min_value=Decimal("0"),
    max_value=Decimal("10000000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)


class TestTaxProperties:

    def setup_method(self):
        self.calculator = TaxCalculator()

    @given(low=incomes, high=incomes)
    @settings(max_examples=200)
    def test_monotonic(self, low, high):
        if low > high:
            low, high = high, low
        low_tax = self.calculator.calculate(low, BRACKETS).tax_amount
        high_tax = self.calculator.calculate(high, BRACKETS).tax_amount
        assert low_tax <= high_tax

    @given(income=incomes)
    def test_bounded_by_top_rate(self, income):
        result = self.calculator.calculate(income, BRACKETS)
        assert Decimal("0") <= result.tax_amount.amount
        assert result.tax_amount.amount <= (income * Decimal("0.35")).quantize(Decimal("0.01"))
        assert result.effective_rate <= Decimal("0.35")
