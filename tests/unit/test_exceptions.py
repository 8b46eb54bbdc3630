"""
Tests for the exception hierarchy and its machine-readable codes.
"""

import pytest

from ledger_kernel.exceptions import (
    AccountNotFoundError,
    ConfigurationError,
    CurrencyError,
    CurrencyMismatchError,
    InvalidBracketConfigurationError,
    InvalidDateRangeError,
    LedgerKernelError,
    NotFoundError,
    TaxYearNotFoundError,
    UnbalancedEntryError,
    ValidationError,
)


class TestHierarchy:

    @pytest.mark.parametrize(
        "error, parent",
        [
            (UnbalancedEntryError("e1", "1", "2", "USD"), ValidationError),
            (InvalidDateRangeError("2024-02-01", "2024-01-01"), ValidationError),
            (AccountNotFoundError("a1"), NotFoundError),
            (TaxYearNotFoundError("2030"), NotFoundError),
            (InvalidBracketConfigurationError("gap", 1), ConfigurationError),
            (CurrencyMismatchError("USD", "EUR"), CurrencyError),
        ],
    )
    def test_parents(self, error, parent):
        assert isinstance(error, parent)
        assert isinstance(error, LedgerKernelError)

    def test_codes(self):
        assert ValidationError.code == "VALIDATION_ERROR"
        assert TaxYearNotFoundError("2030").code == "TAX_YEAR_NOT_FOUND"
        assert InvalidBracketConfigurationError("x").code == "INVALID_BRACKET_CONFIGURATION"

    def test_structured_attributes(self):
        error = InvalidBracketConfigurationError("brackets overlap", 2)
        assert error.bracket_index == 2
        assert "at bracket 2" in str(error)

    def test_account_not_found_names_entry(self):
        assert "referenced by entry e7" in str(AccountNotFoundError("a1", "e7"))
