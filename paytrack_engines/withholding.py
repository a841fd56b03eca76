"""
Withholding Calculator (``paytrack_engines.withholding``).

Responsibility
--------------
Compute PAYG withholding, Medicare levy and STSL withholding for one pay
period's taxable gross, and the resulting net pay.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O.  Uses
``tax_brackets`` for every coefficient lookup.

Formulas
--------
Brackets are expressed in weekly earnings.  Gross pay is converted to a
weekly equivalent (fortnightly / 2, monthly x 3 / 13), the formula is
applied, and the weekly amount is converted back (x 2, x 13 / 3).

* PAYG:  ``max(0, a x weekly - b)``, rounded half-up to cents.
* Medicare levy: folded into the PAYG coefficients of every scale, so it
  is always reported as ``0.00``.  The year's ``TaxRateConfig`` is still
  required and carried on the result for audit.  Mixing an itemised levy
  with these coefficients would count Medicare twice.
* STSL:  ``x = whole dollars of weekly + 0.99``; ``max(0, a x x - b)``,
  converted back and rounded down to whole dollars.  Only when STSL rows
  and a scale are supplied.
* ``net_pay = gross_pay - total_withholdings``.

Invariants enforced
-------------------
* Withholding is monotonically non-decreasing in gross pay for a fixed,
  well-formed table.
* Net pay is never negative: it is floored at zero with a warning, or
  ``NegativeResultGuardError`` is raised in strict mode.

Failure modes
-------------
* ``NoBracketFoundError`` from the bracket lookup.
* ``NegativeResultGuardError`` in strict mode.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from paytrack_kernel.domain.money import ZERO, round_money, truncate_cents
from paytrack_kernel.exceptions import NegativeResultGuardError
from paytrack_kernel.logging_config import get_logger
from paytrack_modules.payroll.models import (
    PayPeriodType,
    StslRate,
    StslScale,
    TaxCoefficient,
    TaxRateConfig,
    TaxScale,
)

from paytrack_engines.tax_brackets import BracketLookup, lookup_coefficient
from paytrack_engines.tracer import traced_engine

logger = get_logger("engines.withholding")

STSL_CENTS = Decimal("0.99")

_TO_WEEKLY = {
    PayPeriodType.WEEKLY: (Decimal("1"), Decimal("1")),
    PayPeriodType.FORTNIGHTLY: (Decimal("1"), Decimal("2")),
    PayPeriodType.MONTHLY: (Decimal("3"), Decimal("13")),
}


def to_weekly(amount: Decimal, pay_period_type: PayPeriodType) -> Decimal:
    numerator, denominator = _TO_WEEKLY[pay_period_type]
    return amount * numerator / denominator


def from_weekly(amount: Decimal, pay_period_type: PayPeriodType) -> Decimal:
    numerator, denominator = _TO_WEEKLY[pay_period_type]
    return amount * denominator / numerator


def guard_non_negative(
    field: str,
    value: Decimal,
    strict: bool,
    warnings: list[str],
    period_end: date | None = None,
) -> Decimal:
    """Floor ``value`` at zero, recording a warning; raise instead when strict."""
    if value >= 0:
        return value
    if strict:
        raise NegativeResultGuardError(field, value, period_end)
    message = f"{field} would be negative ({value}); floored at 0.00, check tax brackets and extras"
    warnings.append(message)
    logger.warning(
        "negative_result_floored",
        extra={"field": field, "value": value},
    )
    return round_money(ZERO)


@dataclass(frozen=True)
class WithholdingResult:
    """Withholding breakdown for one pay period."""
    gross_pay: Decimal
    pay_period_type: PayPeriodType
    weekly_earnings: Decimal
    scale: TaxScale
    payg_bracket: BracketLookup
    payg_withholding: Decimal
    medicare_levy: Decimal
    hecs_help_amount: Decimal
    total_withholdings: Decimal
    net_pay: Decimal
    tax_rate_config: TaxRateConfig
    stsl_scale: StslScale | None = None
    stsl_bracket: BracketLookup | None = None
    warnings: tuple[str, ...] = ()

    @property
    def tax_year(self) -> str:
        return self.payg_bracket.tax_year

    @property
    def tax_year_fallback(self) -> bool:
        return self.payg_bracket.fallback or (
            self.stsl_bracket is not None and self.stsl_bracket.fallback
        )


def calculate_payg(weekly: Decimal, bracket: BracketLookup, pay_period_type: PayPeriodType) -> Decimal:
    amount = bracket.coefficient_a * weekly - bracket.coefficient_b
    return round_money(max(ZERO, from_weekly(amount, pay_period_type)))


def calculate_stsl(
    weekly: Decimal,
    table: Sequence[StslRate],
    scale: StslScale,
    tax_year: str,
    pay_period_type: PayPeriodType,
    allow_fallback: bool = True,
) -> tuple[Decimal, BracketLookup]:
    x = truncate_cents(weekly) + STSL_CENTS
    bracket = lookup_coefficient(table, tax_year, scale, x, allow_fallback)
    component = max(ZERO, bracket.coefficient_a * x - bracket.coefficient_b)
    return truncate_cents(from_weekly(component, pay_period_type)), bracket


@traced_engine(
    "withholding",
    "1.0",
    fingerprint_fields=("gross_pay", "scale", "stsl_scale", "pay_period_type", "tax_year"),
)
def compute_withholding(
    gross_pay: Decimal,
    scale: TaxScale,
    coefficients: Sequence[TaxCoefficient],
    tax_rate_config: TaxRateConfig,
    stsl_coefficients: Sequence[StslRate] | None = None,
    *,
    stsl_scale: StslScale | None = None,
    pay_period_type: PayPeriodType = PayPeriodType.WEEKLY,
    tax_year: str | None = None,
    allow_tax_year_fallback: bool = True,
    strict: bool = False,
    period_end: date | None = None,
) -> WithholdingResult:
    """
    Compute the withholding breakdown for one period's taxable gross.

    Args:
        gross_pay: Taxable gross for the period.
        scale: PAYG scale from ``resolve_scale``.
        coefficients: PAYG coefficient rows (any years).
        tax_rate_config: Rate configuration of the resolved year.
        stsl_coefficients: STSL rows; STSL is skipped when None.
        stsl_scale: STSL scale from ``resolve_stsl_scale``; required with rows.
        pay_period_type: Pay cycle of ``gross_pay``.
        tax_year: Requested year label; defaults to the rate config's year.
        allow_tax_year_fallback: Permit earlier-year brackets.
        strict: Raise on negative net pay instead of flooring.
        period_end: Reported on guard errors.

    Raises:
        NoBracketFoundError: no bracket for the weekly earnings.
        NegativeResultGuardError: strict mode and net pay < 0.
    """
    requested_year = tax_year or tax_rate_config.tax_year
    warnings: list[str] = []

    weekly = to_weekly(gross_pay, pay_period_type)
    lookup_earnings = max(ZERO, weekly)

    payg_bracket = lookup_coefficient(
        coefficients, requested_year, scale, lookup_earnings, allow_tax_year_fallback
    )
    payg = calculate_payg(lookup_earnings, payg_bracket, pay_period_type)
    if payg_bracket.fallback:
        warnings.append(
            f"PAYG brackets for {requested_year} not found; used {payg_bracket.tax_year}"
        )

    medicare = round_money(ZERO)

    hecs = round_money(ZERO)
    stsl_bracket = None
    if stsl_coefficients is not None and stsl_scale is not None:
        hecs, stsl_bracket = calculate_stsl(
            lookup_earnings,
            stsl_coefficients,
            stsl_scale,
            requested_year,
            pay_period_type,
            allow_tax_year_fallback,
        )
        hecs = round_money(hecs)
        if stsl_bracket.fallback:
            warnings.append(
                f"STSL rates for {requested_year} not found; used {stsl_bracket.tax_year}"
            )

    total = payg + medicare + hecs
    net = guard_non_negative(
        "net_pay", round_money(gross_pay - total), strict, warnings, period_end
    )

    logger.info(
        "withholding_calculated",
        extra={
            "scale": scale.value,
            "tax_year": payg_bracket.tax_year,
            "pay_period_type": pay_period_type.value,
            "gross_pay": gross_pay,
            "payg_withholding": payg,
            "hecs_help_amount": hecs,
            "net_pay": net,
        },
    )

    return WithholdingResult(
        gross_pay=gross_pay,
        pay_period_type=pay_period_type,
        weekly_earnings=weekly,
        scale=scale,
        payg_bracket=payg_bracket,
        payg_withholding=payg,
        medicare_levy=medicare,
        hecs_help_amount=hecs,
        total_withholdings=total,
        net_pay=net,
        tax_rate_config=tax_rate_config,
        stsl_scale=stsl_scale if stsl_bracket is not None else None,
        stsl_bracket=stsl_bracket,
        warnings=tuple(warnings),
    )
