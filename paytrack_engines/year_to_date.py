"""
Year-to-date withholding summary (``paytrack_engines.year_to_date``).

Responsibility
--------------
Sum the stored totals of every calculated pay period whose end date falls
in one financial year: gross pay, PAYG, Medicare, STSL, total
withholdings and net pay.

Architecture position
---------------------
**Engines layer** -- pure.  Works on ``PayPeriod`` values as the service
loads them; a period belongs to the financial year of its end date.

Invariants enforced
-------------------
* Periods that were never calculated (``net_pay`` is None) are skipped.
* Contributing periods are listed in end-date order, so the summary does
  not depend on input order.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from paytrack_kernel.domain.money import ZERO
from paytrack_kernel.domain.tax_year import parse_tax_year, tax_year_for
from paytrack_kernel.logging_config import LogContext, get_logger
from paytrack_modules.payroll.models import PayPeriod, PayPeriodStatus

from paytrack_engines.tracer import traced_engine

logger = get_logger("engines.year_to_date")


@dataclass(frozen=True)
class YearToDateSummary:
    """Running totals for one financial year."""
    tax_year: str
    pay_period_ids: tuple[str, ...] = ()
    gross_income: Decimal = ZERO
    payg_withholding: Decimal = ZERO
    medicare_levy: Decimal = ZERO
    hecs_help_amount: Decimal = ZERO
    total_withholdings: Decimal = ZERO
    net_pay: Decimal = ZERO

    @property
    def period_count(self) -> int:
        return len(self.pay_period_ids)


def _amount(value: Decimal | None) -> Decimal:
    return ZERO if value is None else value


@traced_engine("year_to_date", "1.0", fingerprint_fields=("periods", "tax_year", "verified_only"))
def year_to_date(
    periods: Iterable[PayPeriod],
    tax_year: str,
    verified_only: bool = False,
) -> YearToDateSummary:
    """
    Year-to-date totals of the calculated periods ending in ``tax_year``.

    Args:
        periods: Pay periods with their stored aggregates.
        tax_year: Financial-year label, e.g. ``"2024-25"``.
        verified_only: Count verified periods only.

    Raises:
        ValueError: malformed ``tax_year``.
    """
    parse_tax_year(tax_year)
    included = sorted(
        (
            p for p in periods
            if p.net_pay is not None
            and tax_year_for(p.end_date) == tax_year
            and (not verified_only or p.status is PayPeriodStatus.VERIFIED)
        ),
        key=lambda p: (p.end_date, p.id),
    )

    summary = YearToDateSummary(
        tax_year=tax_year,
        pay_period_ids=tuple(p.id for p in included),
        gross_income=sum((_amount(p.total_pay) for p in included), ZERO),
        payg_withholding=sum((_amount(p.payg_withholding) for p in included), ZERO),
        medicare_levy=sum((_amount(p.medicare_levy) for p in included), ZERO),
        hecs_help_amount=sum((_amount(p.hecs_help_amount) for p in included), ZERO),
        total_withholdings=sum((_amount(p.total_withholdings) for p in included), ZERO),
        net_pay=sum((_amount(p.net_pay) for p in included), ZERO),
    )

    with LogContext.bind(tax_year=tax_year):
        logger.info(
            "year_to_date_summarised",
            extra={
                "period_count": summary.period_count,
                "gross_income": summary.gross_income,
                "total_withholdings": summary.total_withholdings,
                "verified_only": verified_only,
            },
        )
    return summary
