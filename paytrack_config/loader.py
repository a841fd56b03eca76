"""
Tax Table Loader (``paytrack_config.loader``).

Responsibility
--------------
Loads per-year YAML tax table files and parses them into the immutable
``TaxTables`` value used by the withholding engines.  Also loads the
payroll settings document.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Consumed by
``paytrack_config.get_tax_tables()`` and by tests.  Depends only on the
frozen payroll models and PyYAML; never on the engines, ORM or service.

File format
-----------
One file per tax year, ``<tax_year>.yaml``::

    tax_year: "2024-25"
    rate_config:
      medicare_rate: "0.02"
      medicare_low_income_threshold: "26000"
      medicare_high_income_threshold: "32500"
    coefficients:
      threshold-claimed:
        - {up_to: "361", a: "0", b: "0"}
        - {a: "0.47", b: "615.0385"}
    stsl_rates:
      no-tft:
        - ...

Rows of a scale are listed in ascending order; each row starts where the
previous one ended and only the last row may omit ``up_to``.

Invariants enforced
-------------------
* Every amount is parsed into ``Decimal`` from its string form; YAML
  floats are rejected.
* Brackets of one scale are contiguous and strictly ascending.
* ``compute_checksum`` is deterministic for identical table contents.

Failure modes
-------------
* Missing file -> ``FileNotFoundError`` propagates.
* Malformed YAML -> ``yaml.YAMLError`` propagates.
* Missing required keys -> ``KeyError`` propagates.
* Bad values, unknown scales, gaps or inverted brackets -> ``ValueError``.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from paytrack_kernel.domain.tax_year import parse_tax_year
from paytrack_kernel.logging_config import get_logger
from paytrack_modules.payroll.config import PayrollConfig
from paytrack_modules.payroll.models import (
    StslRate,
    StslScale,
    TaxCoefficient,
    TaxRateConfig,
    TaxScale,
    TaxTables,
)

logger = get_logger("config.loader")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any, field_name: str) -> Decimal:
    """Parse an amount written as a string or integer."""
    if isinstance(value, (bool, float)):
        raise ValueError(f"{field_name} must be quoted, got {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"{field_name} is not a decimal: {value!r}") from exc


def _parse_rows(tax_year: str, scale: str, rows: list[dict[str, Any]], row_type, scale_value):
    if not rows:
        raise ValueError(f"{tax_year} {scale}: no brackets")

    parsed = []
    lower = Decimal("0")
    for index, row in enumerate(rows):
        upper = parse_decimal(row["up_to"], "up_to") if row.get("up_to") is not None else None
        if upper is None and index != len(rows) - 1:
            raise ValueError(f"{tax_year} {scale}: only the last bracket may be open-ended")
        parsed.append(
            row_type(
                tax_year=tax_year,
                scale=scale_value,
                earnings_from=lower,
                earnings_to=upper,
                coefficient_a=parse_decimal(row["a"], "a"),
                coefficient_b=parse_decimal(row["b"], "b"),
                description=row.get("description"),
            )
        )
        lower = upper
    if parsed[-1].earnings_to is not None:
        raise ValueError(f"{tax_year} {scale}: the last bracket must be open-ended")
    return parsed


def parse_rate_config(tax_year: str, data: dict[str, Any]) -> TaxRateConfig:
    return TaxRateConfig(
        tax_year=tax_year,
        medicare_rate=parse_decimal(data["medicare_rate"], "medicare_rate"),
        medicare_low_income_threshold=parse_decimal(
            data["medicare_low_income_threshold"], "medicare_low_income_threshold"
        ),
        medicare_high_income_threshold=parse_decimal(
            data["medicare_high_income_threshold"], "medicare_high_income_threshold"
        ),
    )


def parse_tax_year_document(data: dict[str, Any]) -> TaxTables:
    """
    Parse one tax year's document into ``TaxTables``.

    Raises:
        KeyError: ``tax_year``, ``rate_config`` or ``coefficients`` missing.
        ValueError: Invalid label, unknown scale or malformed brackets.
    """
    tax_year = str(data["tax_year"])
    parse_tax_year(tax_year)

    coefficients: list[TaxCoefficient] = []
    for scale, rows in data["coefficients"].items():
        coefficients.extend(_parse_rows(tax_year, scale, rows, TaxCoefficient, TaxScale(scale)))

    stsl_rates: list[StslRate] = []
    for scale, rows in (data.get("stsl_rates") or {}).items():
        stsl_rates.extend(_parse_rows(tax_year, scale, rows, StslRate, StslScale(scale)))

    return TaxTables(
        coefficients=tuple(coefficients),
        stsl_rates=tuple(stsl_rates),
        rate_configs=(parse_rate_config(tax_year, data["rate_config"]),),
    )


def merge_tax_tables(tables: list[TaxTables]) -> TaxTables:
    """Combine per-year tables; a tax year may appear only once."""
    seen: set[str] = set()
    for t in tables:
        duplicated = seen.intersection(t.tax_years)
        if duplicated:
            raise ValueError(f"Tax year defined twice: {sorted(duplicated)}")
        seen.update(t.tax_years)
    return TaxTables(
        coefficients=tuple(c for t in tables for c in t.coefficients),
        stsl_rates=tuple(r for t in tables for r in t.stsl_rates),
        rate_configs=tuple(c for t in tables for c in t.rate_configs),
    )


def load_tax_tables(directory: Path) -> TaxTables:
    """
    Load every ``*.yaml`` file in ``directory`` into one ``TaxTables``.

    Raises:
        FileNotFoundError: ``directory`` does not exist or holds no tables.
        ValueError: A file's ``tax_year`` does not match its file name.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Tax tables directory not found: {directory}")

    per_year = []
    for path in sorted(directory.glob("*.yaml")):
        data = load_yaml_file(path)
        tables = parse_tax_year_document(data)
        if tables.tax_years != (path.stem,):
            raise ValueError(f"{path.name} declares tax year {data['tax_year']!r}")
        per_year.append(tables)

    if not per_year:
        raise FileNotFoundError(f"No tax table files in {directory}")

    merged = merge_tax_tables(per_year)
    logger.info(
        "tax_tables_loaded",
        extra={
            "source": str(directory),
            "tax_years": list(merged.tax_years),
            "coefficient_count": len(merged.coefficients),
            "stsl_rate_count": len(merged.stsl_rates),
        },
    )
    return merged


def load_payroll_settings(path: Path) -> PayrollConfig:
    """Parse a payroll settings YAML document; missing keys keep their defaults."""
    data = load_yaml_file(Path(path))
    return PayrollConfig.from_dict(data.get("payroll", data))


def compute_checksum(tables: TaxTables) -> str:
    """
    SHA-256 of the canonical JSON form of ``tables``.

    Identical contents always give identical checksums, whatever file
    or database they were loaded from.
    """
    def _row(row) -> dict[str, Any]:
        data = dataclasses.asdict(row)
        if "scale" in data:
            data["scale"] = row.scale.value
        return data

    payload = {
        "coefficients": sorted(
            (_row(c) for c in tables.coefficients),
            key=lambda d: (d["tax_year"], d["scale"], Decimal(d["earnings_from"])),
        ),
        "stsl_rates": sorted(
            (_row(r) for r in tables.stsl_rates),
            key=lambda d: (d["tax_year"], d["scale"], Decimal(d["earnings_from"])),
        ),
        "rate_configs": sorted((_row(c) for c in tables.rate_configs), key=lambda d: d["tax_year"]),
    }
    canonical = json.dumps(payload, sort_keys=True, default=lambda v: format(v.normalize(), "f"))
    return hashlib.sha256(canonical.encode()).hexdigest()
