"""
Tax Bracket Resolver (``paytrack_engines.tax_brackets``).

Responsibility
--------------
Select the PAYG and STSL scales from a taxpayer's declarations and find
the coefficient row for a (tax year, scale, weekly earnings) triple.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O.

Scale decision order (first match wins)
---------------------------------------
1. No TFN                       -> ``no-tfn``
2. Foreign resident             -> ``foreign-resident``
3. Full Medicare exemption      -> ``medicare-exempt-full``
4. Half Medicare exemption      -> ``medicare-exempt-half``
5. Tax-free threshold claimed   -> ``threshold-claimed``
6. Otherwise                    -> ``threshold-not-claimed``

Year fallback
-------------
When the requested year has no rows for the scale, the most recent year
earlier than it is used and the result is flagged as a fallback (with a
``tax_year_fallback`` warning log).  Callers may disable the fallback.

Failure modes
-------------
* ``NoBracketFoundError`` -- no usable year, or no row containing the
  earnings.  Never defaulted.
* ``TaxYearNotConfiguredError`` -- no rate configuration at or before the
  requested year.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from paytrack_kernel.domain.tax_year import parse_tax_year, tax_year_sort_key
from paytrack_kernel.exceptions import NoBracketFoundError, TaxYearNotConfiguredError
from paytrack_kernel.logging_config import get_logger
from paytrack_modules.payroll.models import (
    MedicareExemption,
    StslRate,
    StslScale,
    TaxCoefficient,
    TaxRateConfig,
    TaxScale,
    TaxSettings,
    TaxTables,
)

from paytrack_engines.tracer import traced_engine

logger = get_logger("engines.tax_brackets")


@dataclass(frozen=True)
class BracketLookup:
    """The coefficient row used, and which year it came from."""
    coefficient_a: Decimal
    coefficient_b: Decimal
    earnings_from: Decimal
    earnings_to: Decimal | None
    scale: str
    tax_year: str
    requested_tax_year: str

    @property
    def fallback(self) -> bool:
        return self.tax_year != self.requested_tax_year


def resolve_scale(settings: TaxSettings) -> TaxScale:
    """PAYG scale for the declarations in ``settings``."""
    if not settings.has_tax_file_number:
        return TaxScale.NO_TFN
    if settings.is_foreign_resident:
        return TaxScale.FOREIGN_RESIDENT
    if settings.medicare_exemption is MedicareExemption.FULL:
        return TaxScale.MEDICARE_EXEMPT_FULL
    if settings.medicare_exemption is MedicareExemption.HALF:
        return TaxScale.MEDICARE_EXEMPT_HALF
    if settings.claimed_tax_free_threshold:
        return TaxScale.THRESHOLD_CLAIMED
    return TaxScale.THRESHOLD_NOT_CLAIMED


def resolve_stsl_scale(settings: TaxSettings) -> StslScale:
    if settings.claimed_tax_free_threshold or settings.is_foreign_resident:
        return StslScale.WITH_TFT_OR_FOREIGN_RESIDENT
    return StslScale.NO_TFT


def select_year(
    available: Iterable[str],
    requested: str,
    allow_fallback: bool = True,
) -> str | None:
    """``requested`` if available, else the latest earlier year (or None)."""
    target = parse_tax_year(requested)
    years = set(available)
    if requested in years:
        return requested
    if not allow_fallback:
        return None
    earlier = [y for y in years if tax_year_sort_key(y) < target]
    return max(earlier, key=tax_year_sort_key) if earlier else None


def resolve_rate_config(
    tables: TaxTables,
    requested: str,
    allow_fallback: bool = True,
) -> TaxRateConfig:
    """
    Rate configuration for the requested year, falling back to an earlier one.

    Raises:
        TaxYearNotConfiguredError: nothing configured at or before ``requested``.
    """
    year = select_year(tables.tax_years, requested, allow_fallback)
    if year is None:
        raise TaxYearNotConfiguredError(requested)
    if year != requested:
        logger.warning(
            "tax_year_fallback",
            extra={"requested_tax_year": requested, "resolved_tax_year": year, "table": "rate_config"},
        )
    config = tables.rate_config_for(year)
    if config is None:
        raise TaxYearNotConfiguredError(requested)
    return config


@traced_engine("tax_brackets", "1.0", fingerprint_fields=("tax_year", "scale", "earnings"))
def lookup_coefficient(
    table: Sequence[TaxCoefficient | StslRate],
    tax_year: str,
    scale: TaxScale | StslScale,
    earnings: Decimal,
    allow_fallback: bool = True,
) -> BracketLookup:
    """
    Find the ``[earnings_from, earnings_to)`` row for ``earnings``.

    Args:
        table: PAYG coefficient rows or STSL rate rows, any years.
        tax_year: Requested financial year label.
        scale: Scale the rows must belong to.
        earnings: Weekly-equivalent earnings.
        allow_fallback: Permit the most recent earlier year.

    Raises:
        NoBracketFoundError: no year or no row matches.
    """
    table_name = "stsl" if isinstance(scale, StslScale) else "payg"
    rows = [r for r in table if r.scale == scale]
    year = select_year({r.tax_year for r in rows}, tax_year, allow_fallback)
    if year is None:
        raise NoBracketFoundError(tax_year, scale.value, earnings, table=table_name)

    matches = sorted(
        (r for r in rows if r.tax_year == year and r.contains(earnings)),
        key=lambda r: r.earnings_from,
    )
    if not matches:
        raise NoBracketFoundError(year, scale.value, earnings, table=table_name)
    row = matches[-1]

    if year != tax_year:
        logger.warning(
            "tax_year_fallback",
            extra={
                "requested_tax_year": tax_year,
                "resolved_tax_year": year,
                "scale": scale.value,
                "table": table_name,
            },
        )

    return BracketLookup(
        coefficient_a=row.coefficient_a,
        coefficient_b=row.coefficient_b,
        earnings_from=row.earnings_from,
        earnings_to=row.earnings_to,
        scale=scale.value,
        tax_year=year,
        requested_tax_year=tax_year,
    )
