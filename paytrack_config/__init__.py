"""
paytrack_config -- public entrypoint for tax tables and payroll settings.

Responsibility:
    Provides ``get_tax_tables()`` and ``load_payroll_config()``, the two
    ways runtime code obtains reference data and settings.  YAML parsing
    lives in ``paytrack_config.loader``.

Architecture position:
    Configuration -- sits above ``paytrack_kernel`` and the frozen payroll
    models, below ``PayPeriodService``.  The engines never import this
    package; tables and config are passed to them as values.

Invariants enforced:
    - Tables are loaded once per directory and cached; the cached value is
      an immutable ``TaxTables`` and safe to share between threads.
    - Every load emits a ``PAYTRACK_CONFIG_TRACE`` record carrying the
      table checksum, tying each calculation to the exact tables used.

Failure modes:
    - ``FileNotFoundError`` -- missing directory or settings file.
    - ``ValueError`` -- malformed tables or settings.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from paytrack_config.loader import (
    compute_checksum,
    load_payroll_settings,
    load_tax_tables,
)
from paytrack_kernel.logging_config import get_logger
from paytrack_modules.payroll.config import PayrollConfig
from paytrack_modules.payroll.models import TaxTables

logger = get_logger("config")

_DATA_DIR = Path(__file__).parent / "data"
DEFAULT_TAX_TABLES_DIR = _DATA_DIR / "tax_tables"
DEFAULT_PAYROLL_SETTINGS = _DATA_DIR / "payroll.yaml"


@lru_cache(maxsize=8)
def _cached_tables(directory: str) -> TaxTables:
    tables = load_tax_tables(Path(directory))
    logger.info(
        "PAYTRACK_CONFIG_TRACE",
        extra={
            "trace_type": "PAYTRACK_CONFIG_TRACE",
            "source": directory,
            "tax_years": list(tables.tax_years),
            "checksum": compute_checksum(tables),
        },
    )
    return tables


def get_tax_tables(directory: Path | str | None = None) -> TaxTables:
    """
    Tax tables from ``directory`` (default: the bundled tables).

    Repeated calls for the same directory return the same object.
    """
    path = Path(directory) if directory is not None else DEFAULT_TAX_TABLES_DIR
    return _cached_tables(str(path.resolve()))


def load_payroll_config(path: Path | str | None = None) -> PayrollConfig:
    """Payroll settings from ``path`` (default: the bundled ``payroll.yaml``)."""
    return load_payroll_settings(Path(path) if path is not None else DEFAULT_PAYROLL_SETTINGS)


def clear_cache() -> None:
    """Forget cached tables, e.g. after editing the YAML files in tests."""
    _cached_tables.cache_clear()


__all__ = [
    "DEFAULT_PAYROLL_SETTINGS",
    "DEFAULT_TAX_TABLES_DIR",
    "clear_cache",
    "compute_checksum",
    "get_tax_tables",
    "load_payroll_config",
    "load_tax_tables",
]
