"""
Configuration Loader (``ledger_config.loader``).

Responsibility
--------------
Loads YAML files and parses them into typed configuration objects:
``ReportingConfig`` for report generation and ``TaxSchedule`` tables keyed
by tax year.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Sits above ``ledger_kernel``,
``ledger_engines`` and ``ledger_reporting``; none of those import it.

Invariants enforced
-------------------
* All parse errors raise ``ConfigurationError`` with descriptive messages;
  no silent defaults for required fields.
* Every parsed object is validated on construction (``ReportingConfig``,
  ``TaxSchedule``).
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing or invalid keys  -> ``ConfigurationError``.

Expected tax table layout::

    currency: USD
    tax_years:
      "2024":
        calculation_type: progressive
        brackets:
          - {min_income: 0, max_income: 50000, rate: "0.10"}
          - {min_income: 50001, max_income: null, rate: "0.20"}
      "2025":
        calculation_type: flat
        rates: ["0.15"]
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from ledger_engines.tax import TaxCalculationType, TaxSchedule
from ledger_kernel.domain.dtos import TaxBracket
from ledger_kernel.exceptions import ConfigurationError
from ledger_kernel.logging_config import get_logger
from ledger_reporting.config import ReportingConfig

logger = get_logger("config.loader")


def load_yaml_file(path: Path | str) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Postconditions:
        - Returns a ``dict`` (empty if the YAML is empty).
    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"{path}: expected a mapping at the top level, got {type(data).__name__}"
        )
    return data


def _decimal(value: Any, what: str) -> Decimal:
    try:
        return value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ConfigurationError(f"{what} is not a number: {value!r}") from e


def parse_reporting_config(data: dict[str, Any]) -> ReportingConfig:
    """
    Parse a ``ReportingConfig`` from a dict.

    Accepts either the option mapping itself or a document with a
    top-level ``reporting`` key.
    """
    options = data.get("reporting", data)
    if not isinstance(options, dict):
        raise ConfigurationError("reporting section must be a mapping")
    return ReportingConfig.from_dict(dict(options))


def parse_tax_brackets(items: list[dict[str, Any]]) -> tuple[TaxBracket, ...]:
    """
    Parse a list of ``{min_income, max_income, rate}`` mappings.

    ``max_income`` may be omitted or null for an unbounded top bracket.
    """
    if not isinstance(items, list):
        raise ConfigurationError("brackets must be a list")
    brackets: list[TaxBracket] = []
    for i, item in enumerate(items):
        try:
            min_income = item["min_income"]
            rate = item["rate"]
        except KeyError as e:
            raise ConfigurationError(f"bracket {i} is missing {e.args[0]!r}") from e
        max_income = item.get("max_income")
        brackets.append(TaxBracket(
            min_income=_decimal(min_income, f"bracket {i} min_income"),
            max_income=(
                None if max_income is None
                else _decimal(max_income, f"bracket {i} max_income")
            ),
            rate=_decimal(rate, f"bracket {i} rate"),
        ))
    return tuple(brackets)


def parse_tax_schedule(data: dict[str, Any], currency: str = "USD") -> TaxSchedule:
    """Parse one year's schedule; ``calculation_type`` defaults to progressive."""
    calculation_type = data.get("calculation_type", TaxCalculationType.PROGRESSIVE.value)
    currency = data.get("currency", currency)
    if calculation_type == TaxCalculationType.PROGRESSIVE.value:
        return TaxSchedule.progressive(parse_tax_brackets(data.get("brackets", [])), currency)
    rates = tuple(_decimal(r, "rate") for r in data.get("rates", []))
    return TaxSchedule(calculation_type, rates=rates, currency=currency)


def load_reporting_config(path: Path | str) -> ReportingConfig:
    """Load a ``ReportingConfig`` from a YAML file."""
    data = load_yaml_file(path)
    config = parse_reporting_config(data)
    logger.info(
        "reporting_config_loaded",
        extra={"path": str(path), "checksum": compute_checksum(data)},
    )
    return config


def load_tax_tables(path: Path | str) -> dict[str, TaxSchedule]:
    """
    Load every tax year's schedule from a YAML file.

    Returns:
        ``{tax_year: TaxSchedule}`` with years as strings, in file order.
    """
    data = load_yaml_file(path)
    years = data.get("tax_years")
    if not isinstance(years, dict) or not years:
        raise ConfigurationError(f"{path}: no tax_years defined")
    currency = data.get("currency", "USD")

    tables = {
        str(year): parse_tax_schedule(schedule or {}, currency)
        for year, schedule in years.items()
    }
    logger.info(
        "tax_tables_loaded",
        extra={
            "path": str(path),
            "tax_years": sorted(tables),
            "checksum": compute_checksum(data),
        },
    )
    return tables


def _string_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _string_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_string_keys(v) for v in value]
    return value


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums. Mapping keys are
    compared as strings, so YAML mixing ``2024:`` and ``"2025":`` still sorts.
    """
    canonical = json.dumps(_string_keys(data), sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
