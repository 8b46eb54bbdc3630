"""
Bucketing Engine - Period buckets, entry filters and trend series.

Pure functions with no I/O.

A bucket is a non-overlapping calendar window identified by
``BucketKey(granularity, start)``:

    daily       the entry date
    weekly      the Sunday on or before the entry date
    monthly     the first of the month
    quarterly   the first day of the calendar quarter
    yearly      January 1st

``bucket()`` partitions entries: every entry lands in exactly one bucket,
keys come back in ascending order, and entries inside a bucket are in date
order (stable for equal dates).

``EntryFilter`` is orthogonal to bucketing. Because it looks at one entry
at a time, filtering before bucketing gives the same buckets as filtering
each bucket afterwards and dropping the empty ones.

Usage:
    from ledger_engines.bucketing import EntryFilter, Granularity, bucket

    recent_sales = EntryFilter(description="sale", min_amount="100").apply(entries)
    by_month = bucket(recent_sales, Granularity.MONTHLY)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum

from ledger_engines.tracer import traced_engine
from ledger_kernel.domain.accounts import Account, AccountType
from ledger_kernel.domain.journal import JournalEntry
from ledger_kernel.domain.values import Currency, Money
from ledger_kernel.exceptions import AccountNotFoundError, ValidationError
from ledger_kernel.logging_config import get_logger

logger = get_logger("engines.bucketing")


class Granularity(str, Enum):
    """Bucket width."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


def bucket_start(day: date, granularity: Granularity | str) -> date:
    """First date of the bucket containing ``day``."""
    granularity = Granularity(granularity)
    if granularity == Granularity.DAILY:
        return day
    if granularity == Granularity.WEEKLY:
        # date.weekday(): Monday == 0 ... Sunday == 6
        return day - timedelta(days=(day.weekday() + 1) % 7)
    if granularity == Granularity.MONTHLY:
        return day.replace(day=1)
    if granularity == Granularity.QUARTERLY:
        return date(day.year, 3 * ((day.month - 1) // 3) + 1, 1)
    return date(day.year, 1, 1)


def _add_months(day: date, months: int) -> date:
    index = day.month - 1 + months
    return date(day.year + index // 12, index % 12 + 1, 1)


def period_range(granularity: Granularity | str, start: date) -> tuple[date, date]:
    """Inclusive ``(first, last)`` dates of the bucket containing ``start``."""
    granularity = Granularity(granularity)
    first = bucket_start(start, granularity)
    if granularity == Granularity.DAILY:
        return first, first
    if granularity == Granularity.WEEKLY:
        return first, first + timedelta(days=6)
    months = {Granularity.MONTHLY: 1, Granularity.QUARTERLY: 3, Granularity.YEARLY: 12}
    return first, _add_months(first, months[granularity]) - timedelta(days=1)


@dataclass(frozen=True, order=True)
class BucketKey:
    granularity: Granularity
    start: date

    def __post_init__(self) -> None:
        object.__setattr__(self, "granularity", Granularity(self.granularity))

    @property
    def end(self) -> date:
        return period_range(self.granularity, self.start)[1]

    @property
    def label(self) -> str:
        if self.granularity in (Granularity.DAILY, Granularity.WEEKLY):
            return self.start.isoformat()
        if self.granularity == Granularity.MONTHLY:
            return f"{self.start.year:04d}-{self.start.month:02d}"
        if self.granularity == Granularity.QUARTERLY:
            return f"{self.start.year:04d}-Q{(self.start.month - 1) // 3 + 1}"
        return f"{self.start.year:04d}"

    @classmethod
    def for_date(cls, day: date, granularity: Granularity | str) -> BucketKey:
        return cls(Granularity(granularity), bucket_start(day, granularity))


def bucket(
    entries: Iterable[JournalEntry],
    granularity: Granularity | str,
) -> dict[BucketKey, tuple[JournalEntry, ...]]:
    """Partition ``entries`` into ordered, non-overlapping period buckets."""
    granularity = Granularity(granularity)
    grouped: dict[BucketKey, list[JournalEntry]] = {}
    for entry in entries:
        key = BucketKey.for_date(entry.entry_date, granularity)
        grouped.setdefault(key, []).append(entry)

    return {
        key: tuple(sorted(grouped[key], key=lambda e: e.entry_date))
        for key in sorted(grouped)
    }


class TransactionType(str, Enum):
    ALL = "all"
    DEBIT = "debit"
    CREDIT = "credit"


def _optional_decimal(value, name: str) -> Decimal | None:
    if value is None:
        return None
    if isinstance(value, Money):
        return value.amount
    try:
        return value if isinstance(value, Decimal) else Decimal(str(value))
    except ArithmeticError as e:
        raise ValidationError(f"{name} is not a number: {value!r}") from e


@dataclass(frozen=True)
class EntryFilter:
    """
    Conjunction of entry predicates.

    Amount and direction are measured against ``account_id`` when given:
    the entry's net movement on that account (debit minus credit) decides
    the direction (debit when >= 0) and its absolute value is the amount.
    Entries that never touch the account are excluded. Without
    ``account_id`` the amount is the entry's total debits and no direction
    filter is allowed.

    Reference and description match case-insensitive substrings.
    """

    transaction_type: TransactionType = TransactionType.ALL
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None
    reference: str | None = None
    description: str | None = None
    account_id: str | None = None

    def __post_init__(self) -> None:
        try:
            transaction_type = TransactionType(self.transaction_type)
        except ValueError as e:
            raise ValidationError(
                f"Unknown transaction type: {self.transaction_type!r}"
            ) from e
        object.__setattr__(self, "transaction_type", transaction_type)
        object.__setattr__(self, "min_amount", _optional_decimal(self.min_amount, "min_amount"))
        object.__setattr__(self, "max_amount", _optional_decimal(self.max_amount, "max_amount"))

        if transaction_type != TransactionType.ALL and not self.account_id:
            raise ValidationError(
                f"A {transaction_type.value} filter needs an account_id to "
                f"decide direction"
            )
        if (
            self.min_amount is not None
            and self.max_amount is not None
            and self.min_amount > self.max_amount
        ):
            raise ValidationError(
                f"min_amount {self.min_amount} exceeds max_amount {self.max_amount}"
            )

    def measure(self, entry: JournalEntry) -> tuple[Decimal, TransactionType] | None:
        """
        ``(amount, direction)`` of the entry as this filter sees it, or None
        when ``account_id`` is set and the entry does not touch it.
        """
        if self.account_id is None:
            return entry.total_debits.amount, TransactionType.ALL
        lines = entry.lines_for(self.account_id)
        if not lines:
            return None
        net = sum((line.signed_amount.amount for line in lines), Decimal("0"))
        direction = TransactionType.DEBIT if net >= 0 else TransactionType.CREDIT
        return abs(net), direction

    def matches(self, entry: JournalEntry) -> bool:
        measured = self.measure(entry)
        if measured is None:
            return False
        amount, direction = measured

        if self.transaction_type != TransactionType.ALL and direction != self.transaction_type:
            return False
        if self.min_amount is not None and amount < self.min_amount:
            return False
        if self.max_amount is not None and amount > self.max_amount:
            return False
        if self.reference and self.reference.lower() not in entry.reference.lower():
            return False
        if self.description and self.description.lower() not in entry.description.lower():
            return False
        return True

    def apply(self, entries: Iterable[JournalEntry]) -> tuple[JournalEntry, ...]:
        """Matching entries in their input order."""
        return tuple(entry for entry in entries if self.matches(entry))


@dataclass(frozen=True)
class TrendPoint:
    key: BucketKey
    amount: Money


class PeriodBucketer:
    """
    Bucketing and trend series over journal entries.

    Pure functions - no I/O, no database access.
    """

    def bucket(
        self,
        entries: Iterable[JournalEntry],
        granularity: Granularity | str,
    ) -> dict[BucketKey, tuple[JournalEntry, ...]]:
        return bucket(entries, granularity)

    @traced_engine("trend", "1.0", fingerprint_fields=("granularity", "account_types", "currency"))
    def trend(
        self,
        entries: Iterable[JournalEntry],
        granularity: Granularity | str,
        accounts: Sequence[Account],
        account_types: Iterable[AccountType | str] = (
            AccountType.REVENUE,
            AccountType.EXPENSE,
        ),
        currency: Currency | str = "USD",
    ) -> tuple[TrendPoint, ...]:
        """
        Net movement per bucket for accounts of the selected types.

        Each account contributes its natural-balance movement; expense
        movements are subtracted. The default selection therefore yields
        revenue minus expense (period net income) per bucket.

        Raises:
            AccountNotFoundError: A line references an account not in
                ``accounts``.
        """
        types = frozenset(AccountType.parse(t) for t in account_types)
        index = {account.account_id: account for account in accounts}

        points: list[TrendPoint] = []
        for key, bucket_entries in bucket(entries, granularity).items():
            total = Money.zero(currency)
            for entry in bucket_entries:
                for line in entry.lines:
                    account = index.get(line.account_id)
                    if account is None:
                        raise AccountNotFoundError(line.account_id, entry.entry_id)
                    if account.account_type not in types:
                        continue
                    # Debit-positive for assets, credit-positive otherwise.
                    if account.account_type == AccountType.ASSET:
                        total = total + line.signed_amount
                    else:
                        total = total - line.signed_amount
            points.append(TrendPoint(key=key, amount=total))

        logger.debug(
            "trend_computed",
            extra={"granularity": Granularity(granularity).value, "points": len(points)},
        )
        return tuple(points)


def trend(
    entries: Iterable[JournalEntry],
    granularity: Granularity | str,
    accounts: Sequence[Account],
    account_types: Iterable[AccountType | str] = (AccountType.REVENUE, AccountType.EXPENSE),
    currency: Currency | str = "USD",
) -> tuple[TrendPoint, ...]:
    return PeriodBucketer().trend(entries, granularity, accounts, account_types, currency)
