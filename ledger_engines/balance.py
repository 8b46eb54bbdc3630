"""
Balance Engine - Signed account balances from journal lines.

Pure functions with no I/O. The sign convention follows the account's
normal balance:

    asset, expense                 debits - credits
    liability, equity, revenue     credits - debits

Usage:
    from ledger_engines.balance import BalanceCalculator, compute_balance

    cash = compute_balance("asset", lines_for_account(entries, "cash"))

    calculator = BalanceCalculator()
    balances = calculator.balances_by_account(
        accounts, entries, as_of=date(2024, 12, 31), currency="USD",
    )
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date

from ledger_engines.tracer import traced_engine
from ledger_kernel.domain.accounts import (
    DEBIT_NORMAL_TYPES,
    Account,
    AccountType,
    NormalBalance,
    normal_balance_for,
)
from ledger_kernel.domain.journal import EntryLine, JournalEntry
from ledger_kernel.domain.values import Currency, Money, sum_money
from ledger_kernel.exceptions import AccountNotFoundError, MissingFieldError
from ledger_kernel.logging_config import get_logger

logger = get_logger("engines.balance")

__all__ = [
    "BalanceCalculator",
    "compute_balance",
    "lines_for_account",
    "normal_balance_for",
    "NormalBalance",
]


def compute_balance(
    account_type: AccountType | str,
    lines: Iterable[EntryLine],
    currency: Currency | str | None = None,
) -> Money:
    """
    Signed balance of one account's lines.

    Args:
        account_type: One of the five account types (strings are coerced).
        lines: Entry lines already filtered to the target account.
        currency: Required when ``lines`` is empty.

    Raises:
        InvalidAccountTypeError: Unknown account type.
        MissingFieldError: No lines and no currency.
        CurrencyMismatchError: Lines in a currency other than ``currency``.
    """
    account_type = AccountType.parse(account_type)
    lines = tuple(lines)
    if currency is None:
        if not lines:
            raise MissingFieldError("currency", "balance of an account with no lines")
        currency = lines[0].currency

    debits = sum_money((line.debit for line in lines), currency)
    credits = sum_money((line.credit for line in lines), currency)
    if account_type in DEBIT_NORMAL_TYPES:
        return debits - credits
    return credits - debits


def lines_for_account(
    entries: Iterable[JournalEntry], account_id: str
) -> tuple[EntryLine, ...]:
    """All lines posted to ``account_id``, in entry then line order."""
    return tuple(
        line
        for entry in entries
        for line in entry.lines
        if line.account_id == account_id
    )


def _in_window(entry: JournalEntry, start: date | None, as_of: date | None) -> bool:
    if as_of is not None and entry.entry_date > as_of:
        return False
    if start is not None and entry.entry_date < start:
        return False
    return True


class BalanceCalculator:
    """
    Per-account balances over a set of journal entries.

    Pure functions - no I/O, no database access.
    """

    def compute_balance(
        self,
        account_type: AccountType | str,
        lines: Iterable[EntryLine],
        currency: Currency | str | None = None,
    ) -> Money:
        return compute_balance(account_type, lines, currency)

    @traced_engine("balance", "1.0", fingerprint_fields=("as_of", "start", "currency"))
    def balances_by_account(
        self,
        accounts: Sequence[Account],
        entries: Iterable[JournalEntry],
        as_of: date | None = None,
        start: date | None = None,
        currency: Currency | str = "USD",
    ) -> dict[str, Money]:
        """
        Balance of every account from entries dated in ``[start, as_of]``.

        Either bound may be None (open-ended). The result has one key per
        account, ordered by account code then id; accounts with no lines
        get a zero balance in ``currency``.

        Raises:
            AccountNotFoundError: A line references an account not in
                ``accounts``.
        """
        index = {account.account_id: account for account in accounts}
        grouped: dict[str, list[EntryLine]] = {aid: [] for aid in index}

        for entry in entries:
            if not _in_window(entry, start, as_of):
                continue
            for line in entry.lines:
                if line.account_id not in index:
                    logger.error(
                        "unknown_account_referenced",
                        extra={
                            "account_id": line.account_id,
                            "entry_id": entry.entry_id,
                        },
                    )
                    raise AccountNotFoundError(line.account_id, entry.entry_id)
                grouped[line.account_id].append(line)

        ordered = sorted(index.values(), key=lambda a: (a.code, a.account_id))
        return {
            account.account_id: compute_balance(
                account.account_type, grouped[account.account_id], currency
            )
            for account in ordered
        }
