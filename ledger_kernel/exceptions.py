"""
Typed Exception Hierarchy for the Ledger Kernel.

Every failure the engine can report has its own exception class with a
machine-readable ``code`` class attribute and structured attributes, so
callers catch by type and render by code instead of parsing messages.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LedgerKernelError (base)
    |
    +-- ValidationError
    |   +-- UnbalancedEntryError
    |   +-- InvalidEntryLineError
    |   +-- InvalidAccountTypeError
    |   +-- InvalidCategoryError
    |   +-- MissingFieldError
    |   +-- InvalidDateRangeError
    |
    +-- NotFoundError
    |   +-- AccountNotFoundError
    |   +-- TaxYearNotFoundError
    |
    +-- ConfigurationError
    |   +-- InvalidBracketConfigurationError
    |
    +-- CurrencyError
        +-- InvalidCurrencyError
        +-- CurrencyMismatchError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                          | When Raised
----------------|-------------------------------|---------------------------------------
Validation      | UNBALANCED_ENTRY              | Debits != Credits on a journal entry
                | INVALID_ENTRY_LINE            | Negative side, both sides, or neither
                | INVALID_ACCOUNT_TYPE          | Type outside the five account types
                | INVALID_ACCOUNT_CATEGORY      | Category does not belong to the type
                | MISSING_FIELD                 | Required input absent
                | INVALID_DATE_RANGE            | end date before start date
----------------|-------------------------------|---------------------------------------
Not found       | ACCOUNT_NOT_FOUND             | Entry line references unknown account
                | TAX_YEAR_NOT_FOUND            | No brackets for year and no default
----------------|-------------------------------|---------------------------------------
Configuration   | INVALID_BRACKET_CONFIGURATION | Bracket table unordered/gapped/negative
----------------|-------------------------------|---------------------------------------
Currency        | INVALID_CURRENCY              | Not a valid ISO 4217 code
                | CURRENCY_MISMATCH             | Mixed currencies in one operation

Non-fatal conditions (unbalanced balance sheet, zero-denominator ratio) are
NOT exceptions; they travel as ``ComputationWarning`` values on the result.

===============================================================================
HANDLING PATTERNS
===============================================================================

    try:
        report = service.balance_sheet(as_of)
    except AccountNotFoundError as e:
        return {"error": e.code, "account_id": e.account_id}
    except ValidationError as e:
        return {"error": e.code, "message": str(e)}
"""


class LedgerKernelError(Exception):
    """
    Base exception for all ledger kernel errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "LEDGER_KERNEL_ERROR"


# Validation exceptions


class ValidationError(LedgerKernelError):
    """Malformed or inconsistent input."""

    code: str = "VALIDATION_ERROR"


class UnbalancedEntryError(ValidationError):
    """Journal entry debits do not equal credits."""

    code: str = "UNBALANCED_ENTRY"

    def __init__(self, entry_id: str, debits: str, credits: str, currency: str):
        self.entry_id = entry_id
        self.debits = debits
        self.credits = credits
        self.currency = currency
        super().__init__(
            f"Unbalanced entry {entry_id} in {currency}: "
            f"debits={debits}, credits={credits}"
        )


class InvalidEntryLineError(ValidationError):
    """Entry line is negative, two-sided, or empty."""

    code: str = "INVALID_ENTRY_LINE"

    def __init__(self, account_id: str, reason: str):
        self.account_id = account_id
        self.reason = reason
        super().__init__(f"Invalid entry line for account {account_id}: {reason}")


class InvalidAccountTypeError(ValidationError):
    """Account type is not one of asset/liability/equity/revenue/expense."""

    code: str = "INVALID_ACCOUNT_TYPE"

    def __init__(self, account_type: str):
        self.account_type = account_type
        super().__init__(f"Invalid account type: {account_type!r}")


class InvalidCategoryError(ValidationError):
    """Account category does not belong to the account type."""

    code: str = "INVALID_ACCOUNT_CATEGORY"

    def __init__(self, account_code: str, account_type: str, category: str):
        self.account_code = account_code
        self.account_type = account_type
        self.category = category
        super().__init__(
            f"Category {category!r} is not valid for {account_type} "
            f"account {account_code}"
        )


class MissingFieldError(ValidationError):
    """A required input field is missing."""

    code: str = "MISSING_FIELD"

    def __init__(self, field_name: str, context: str = ""):
        self.field_name = field_name
        self.context = context
        suffix = f" ({context})" if context else ""
        super().__init__(f"Missing required field: {field_name}{suffix}")


class InvalidDateRangeError(ValidationError):
    """End date precedes start date."""

    code: str = "INVALID_DATE_RANGE"

    def __init__(self, start_date: str, end_date: str):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(f"Invalid date range: {start_date} > {end_date}")


# Lookup exceptions


class NotFoundError(LedgerKernelError):
    """A referenced record does not exist."""

    code: str = "NOT_FOUND"


class AccountNotFoundError(NotFoundError):
    """Account was not found."""

    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_id: str, entry_id: str | None = None):
        self.account_id = account_id
        self.entry_id = entry_id
        where = f" (referenced by entry {entry_id})" if entry_id else ""
        super().__init__(f"Account not found: {account_id}{where}")


class TaxYearNotFoundError(NotFoundError):
    """No tax brackets exist for the tax year and no default was supplied."""

    code: str = "TAX_YEAR_NOT_FOUND"

    def __init__(self, tax_year: str):
        self.tax_year = tax_year
        super().__init__(f"No tax brackets found for tax year {tax_year}")


# Configuration exceptions


class ConfigurationError(LedgerKernelError):
    """Configuration data fails structural checks."""

    code: str = "CONFIGURATION_ERROR"


class InvalidBracketConfigurationError(ConfigurationError):
    """Tax bracket table is unordered, gapped, overlapping, or negative."""

    code: str = "INVALID_BRACKET_CONFIGURATION"

    def __init__(self, reason: str, bracket_index: int | None = None):
        self.reason = reason
        self.bracket_index = bracket_index
        where = f" at bracket {bracket_index}" if bracket_index is not None else ""
        super().__init__(f"Invalid bracket configuration{where}: {reason}")


# Currency-related exceptions


class CurrencyError(LedgerKernelError):
    """Base exception for currency-related errors."""

    code: str = "CURRENCY_ERROR"


class InvalidCurrencyError(CurrencyError, ValueError):
    """Invalid ISO 4217 currency code provided."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Invalid ISO 4217 currency code: '{currency}'")


class CurrencyMismatchError(CurrencyError, ValueError):
    """Attempted operation on mismatched currencies."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, currency1: str, currency2: str, operation: str = "combine"):
        self.currency1 = currency1
        self.currency2 = currency2
        self.operation = operation
        super().__init__(
            f"Cannot {operation} Money with different currencies: "
            f"{currency1} and {currency2}"
        )
