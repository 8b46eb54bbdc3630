"""
Reporting-specific test fixtures.

Provides:
- A month of activity touching every statement section
- Reporting configurations
"""

from datetime import date

import pytest

from ledger_reporting.config import ReportingConfig


@pytest.fixture
def reporting_config() -> ReportingConfig:
    """Standard reporting configuration for tests."""
    return ReportingConfig(entity_name="Test Co")


@pytest.fixture
def january_activity(make_entry):
    """
    Owner funding, an equipment purchase, credit and cash sales, inventory
    bought on account and partly sold, depreciation, a loan and interest.

    Ending cash 13450; net income 2850.
    """
    return [
        make_entry("j01", date(2024, 1, 2), "cash", "capital", "10000", "CAP-1", "Owner funding"),
        make_entry("j02", date(2024, 1, 5), "equipment", "cash", "3000", "PO-7", "Delivery van"),
        make_entry("j03", date(2024, 1, 10), "ar", "revenue", "2000", "INV-100", "Credit sale"),
        make_entry("j04", date(2024, 1, 12), "cash", "revenue", "1500", "INV-101", "Cash sale"),
        make_entry("j05", date(2024, 1, 15), "inventory", "ap", "800", "BILL-3", "Stock purchase"),
        make_entry("j06", date(2024, 1, 20), "cogs", "inventory", "500", "", "Cost of sales"),
        make_entry("j07", date(2024, 1, 25), "depreciation", "equipment", "100", "", "Depreciation"),
        make_entry("j08", date(2024, 1, 28), "cash", "loan", "5000", "LOAN-1", "Bank loan"),
        make_entry("j09", date(2024, 1, 30), "interest", "cash", "50", "", "Loan interest"),
    ]
