"""
ledger_config -- YAML configuration for reporting and tax tables.

Architecture position:
    Configuration -- sits above ``ledger_kernel``, ``ledger_engines`` and
    ``ledger_reporting``.  Nothing below this package imports it; callers
    load configuration here and pass the typed objects down.
"""

from ledger_config.loader import (
    compute_checksum,
    load_reporting_config,
    load_tax_tables,
    load_yaml_file,
    parse_reporting_config,
    parse_tax_brackets,
    parse_tax_schedule,
)

__all__ = [
    "compute_checksum",
    "load_reporting_config",
    "load_tax_tables",
    "load_yaml_file",
    "parse_reporting_config",
    "parse_tax_brackets",
    "parse_tax_schedule",
]
