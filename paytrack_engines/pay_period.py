"""
Pay Period Aggregator (``paytrack_engines.pay_period``).

Responsibility
--------------
Run the shift pay calculator once per shift, add the period's extras,
and run the tax scale selection and withholding calculator once on the
period's taxable income.  Also decides whether a period is ready to be
verified.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO clock reads:
the tax year and "as of" date are explicit arguments.  Persistence of the
totals is the caller's job (see ``PayPeriodService``).

Aggregation rules
-----------------
* ``shift_pay``      = sum of per-shift gross pay
* ``taxable_income`` = shift_pay + taxable extras
* ``total_pay``      = shift_pay + all extras
* Withholding is computed on taxable income (floored at zero for lookup).
* ``net_pay``        = total_pay - total_withholdings (never negative)
* Tax brackets apply to the period total, never per shift.

Invariants enforced
-------------------
* A verified period is never recalculated (``PeriodLockedError``).
* Per-shift results are ordered by normalised start time, then shift id,
  regardless of input order or whether an executor was used.
* The first error raised by any shift propagates; nothing partial is
  returned.

Failure modes
-------------
* ``PeriodLockedError``, ``NoShiftsToCalculateError``,
  ``MissingTaxSettingsError``, ``PayGuideNotFoundError``.
* Anything raised by the shift pay, bracket or withholding engines.
"""

from __future__ import annotations

import contextvars
from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import Executor
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from paytrack_kernel.domain.money import ZERO, hours_from_minutes, round_money
from paytrack_kernel.domain.tax_year import tax_year_for, tax_year_for_instant
from paytrack_kernel.exceptions import (
    MissingTaxSettingsError,
    NoShiftsToCalculateError,
    PayGuideNotFoundError,
    PeriodLockedError,
)
from paytrack_kernel.logging_config import LogContext, get_logger
from paytrack_modules.payroll.config import PayrollConfig
from paytrack_modules.payroll.models import (
    PayGuide,
    PayPeriod,
    PayPeriodExtra,
    PayPeriodStatus,
    PayPeriodType,
    PublicHoliday,
    Shift,
    TaxScale,
    TaxSettings,
    TaxTables,
)

from paytrack_engines.shift_pay import ShiftPayResult, calculate_shift
from paytrack_engines.tax_brackets import (
    resolve_rate_config,
    resolve_scale,
    resolve_stsl_scale,
)
from paytrack_engines.tracer import traced_engine
from paytrack_engines.withholding import (
    WithholdingResult,
    compute_withholding,
    guard_non_negative,
)

logger = get_logger("engines.pay_period")

LOCKED_STATUSES = frozenset({PayPeriodStatus.VERIFIED})
VERIFIABLE_STATUSES = frozenset({PayPeriodStatus.PAID, PayPeriodStatus.PENDING})


@dataclass(frozen=True)
class PayPeriodTotals:
    """Combined shift, extras and withholding totals for one pay period."""
    pay_period_id: str | None
    pay_period_type: PayPeriodType
    shift_results: tuple[ShiftPayResult, ...]
    total_minutes: int
    base_pay: Decimal
    penalty_pay: Decimal
    overtime_pay: Decimal
    shift_pay: Decimal
    taxable_extras: Decimal
    non_taxable_extras: Decimal
    total_pay: Decimal
    taxable_income: Decimal
    withholding: WithholdingResult
    net_pay: Decimal
    requested_tax_year: str
    actual_pay: Decimal | None = None
    warnings: tuple[str, ...] = ()

    @property
    def total_hours(self) -> Decimal:
        return hours_from_minutes(self.total_minutes)

    @property
    def payg_withholding(self) -> Decimal:
        return self.withholding.payg_withholding

    @property
    def medicare_levy(self) -> Decimal:
        return self.withholding.medicare_levy

    @property
    def hecs_help_amount(self) -> Decimal:
        return self.withholding.hecs_help_amount

    @property
    def total_withholdings(self) -> Decimal:
        return self.withholding.total_withholdings

    @property
    def tax_scale(self) -> TaxScale:
        return self.withholding.scale

    @property
    def tax_year(self) -> str:
        return self.withholding.tax_year

    @property
    def tax_year_fallback(self) -> bool:
        return self.tax_year != self.requested_tax_year or self.withholding.tax_year_fallback

    @property
    def pay_variance(self) -> Decimal | None:
        """Entered actual pay minus computed net pay."""
        if self.actual_pay is None:
            return None
        return self.actual_pay - self.net_pay

    @property
    def results_by_shift_id(self) -> dict[str, ShiftPayResult]:
        return {r.shift_id: r for r in self.shift_results}


@dataclass(frozen=True)
class ReadinessBlocker:
    code: str
    message: str


@dataclass(frozen=True)
class ReadinessReport:
    """Whether a period can move to verified, and what stands in the way."""
    pay_period_id: str
    blockers: tuple[ReadinessBlocker, ...]
    shift_count: int
    shifts_missing_pay: tuple[str, ...] = ()

    @property
    def ready(self) -> bool:
        return not self.blockers

    @property
    def blocker_codes(self) -> tuple[str, ...]:
        return tuple(b.code for b in self.blockers)


def _requested_tax_year(
    tax_year: str | None,
    period_end: date | None,
    as_of: datetime | None,
    timezone: str,
) -> str:
    if tax_year is not None:
        return tax_year
    if period_end is not None:
        return tax_year_for(period_end)
    if as_of is not None:
        return tax_year_for_instant(as_of, timezone)
    raise ValueError("One of tax_year, period_end or as_of is required")


def _calculate_all(
    shifts: Sequence[Shift],
    pay_guides_by_id: Mapping[str, PayGuide],
    public_holidays: Sequence[PublicHoliday],
    tier_minutes: int,
    executor: Executor | None,
) -> list[ShiftPayResult]:
    guides = []
    for shift in shifts:
        guide = pay_guides_by_id.get(shift.pay_guide_id)
        if guide is None:
            raise PayGuideNotFoundError(shift.pay_guide_id, shift.id)
        guides.append(guide)

    def run(pair: tuple[PayGuide, Shift]) -> ShiftPayResult:
        guide, shift = pair
        return calculate_shift(guide, public_holidays, shift, tier_minutes)

    pairs = list(zip(guides, shifts))
    if executor is None:
        results = [run(p) for p in pairs]
    else:
        # one context copy per task so LogContext fields reach worker threads
        futures = [executor.submit(contextvars.copy_context().run, run, p) for p in pairs]
        results = [f.result() for f in futures]
    return sorted(results, key=lambda r: (r.start_time, r.shift_id))


@traced_engine(
    "pay_period",
    "1.0",
    fingerprint_fields=("shifts", "extras", "tax_settings", "pay_period_type", "tax_year", "period_end"),
)
def aggregate(
    shifts: Sequence[Shift],
    extras: Sequence[PayPeriodExtra],
    pay_guides_by_id: Mapping[str, PayGuide],
    public_holidays: Iterable[PublicHoliday],
    tax_settings: TaxSettings | None,
    tax_tables: TaxTables,
    *,
    pay_period_id: str | None = None,
    period_status: PayPeriodStatus | None = None,
    pay_period_type: PayPeriodType | None = None,
    tax_year: str | None = None,
    period_end: date | None = None,
    as_of: datetime | None = None,
    actual_pay: Decimal | None = None,
    executor: Executor | None = None,
    config: PayrollConfig | None = None,
) -> PayPeriodTotals:
    """
    Aggregate a pay period's shifts and extras and compute its withholding.

    The requested tax year is ``tax_year`` if given, else the year holding
    ``period_end``, else the year holding ``as_of`` in the configured
    default timezone.

    Raises:
        PeriodLockedError: ``period_status`` is verified.
        NoShiftsToCalculateError: no shifts and no extras.
        MissingTaxSettingsError: ``tax_settings`` is None.
        PayGuideNotFoundError: a shift's guide is not in ``pay_guides_by_id``.
    """
    config = config or PayrollConfig()
    period_type = pay_period_type or PayPeriodType(config.default_pay_period_type)

    if period_status in LOCKED_STATUSES:
        raise PeriodLockedError(pay_period_id, period_status.value)
    if not shifts and not extras:
        raise NoShiftsToCalculateError(pay_period_id)
    if tax_settings is None:
        raise MissingTaxSettingsError(pay_period_id)

    requested_year = _requested_tax_year(
        tax_year, period_end, as_of, config.default_timezone
    )

    with LogContext.bind(pay_period_id=pay_period_id, tax_year=requested_year):
        holidays = tuple(public_holidays)
        results = _calculate_all(
            shifts, pay_guides_by_id, holidays, config.overtime_tier_minutes, executor
        )
        warnings: list[str] = [
            f"Shift {r.shift_id}: {w}" for r in results for w in r.warnings
        ]

        base_pay = sum((r.base_pay for r in results), ZERO)
        penalty_pay = sum((r.penalty_pay for r in results), ZERO)
        overtime_pay = sum((r.overtime_pay for r in results), ZERO)
        shift_pay = base_pay + penalty_pay + overtime_pay
        total_minutes = sum(r.total_minutes for r in results)

        taxable_extras = sum((e.amount for e in extras if e.taxable), ZERO)
        non_taxable_extras = sum((e.amount for e in extras if not e.taxable), ZERO)
        taxable_income = shift_pay + taxable_extras
        total_pay = taxable_income + non_taxable_extras

        rate_config = resolve_rate_config(
            tax_tables, requested_year, config.allow_tax_year_fallback
        )
        if rate_config.tax_year != requested_year:
            warnings.append(
                f"Tax configuration for {requested_year} not found; used {rate_config.tax_year}"
            )

        stsl_rows = tax_tables.stsl_rates if tax_settings.withholds_stsl else None
        withholding = compute_withholding(
            max(ZERO, taxable_income),
            resolve_scale(tax_settings),
            tax_tables.coefficients,
            rate_config,
            stsl_rows,
            stsl_scale=resolve_stsl_scale(tax_settings) if stsl_rows is not None else None,
            pay_period_type=period_type,
            tax_year=rate_config.tax_year,
            allow_tax_year_fallback=config.allow_tax_year_fallback,
            strict=config.strict_negative_guard,
            period_end=period_end,
        )
        warnings.extend(withholding.warnings)

        net_pay = guard_non_negative(
            "net_pay",
            round_money(total_pay - withholding.total_withholdings),
            config.strict_negative_guard,
            warnings,
            period_end,
        )

        totals = PayPeriodTotals(
            pay_period_id=pay_period_id,
            pay_period_type=period_type,
            shift_results=tuple(results),
            total_minutes=total_minutes,
            base_pay=base_pay,
            penalty_pay=penalty_pay,
            overtime_pay=overtime_pay,
            shift_pay=shift_pay,
            taxable_extras=taxable_extras,
            non_taxable_extras=non_taxable_extras,
            total_pay=total_pay,
            taxable_income=taxable_income,
            withholding=withholding,
            net_pay=net_pay,
            requested_tax_year=requested_year,
            actual_pay=actual_pay,
            warnings=tuple(warnings),
        )

        logger.info(
            "pay_period_aggregated",
            extra={
                "shift_count": len(results),
                "extra_count": len(extras),
                "total_pay": total_pay,
                "taxable_income": taxable_income,
                "total_withholdings": totals.total_withholdings,
                "net_pay": net_pay,
                "tax_scale": totals.tax_scale.value,
                "resolved_tax_year": totals.tax_year,
                "warning_count": len(warnings),
            },
        )
        return totals


@traced_engine("pay_period_readiness", "1.0", fingerprint_fields=("period", "shifts", "as_of"))
def assess_readiness(
    period: PayPeriod,
    shifts: Sequence[Shift],
    as_of: date,
    verifiable_statuses: frozenset[PayPeriodStatus] = VERIFIABLE_STATUSES,
) -> ReadinessReport:
    """
    Decide whether ``period`` can be verified as of ``as_of``.

    Ready iff the period has ended, has at least one shift, every shift has
    computed pay, and the status is one from which verification is allowed.
    """
    blockers: list[ReadinessBlocker] = []
    if period.end_date > as_of:
        blockers.append(
            ReadinessBlocker("period_not_ended", f"Pay period ends {period.end_date.isoformat()}")
        )
    if not shifts:
        blockers.append(ReadinessBlocker("no_shifts", "Pay period has no shifts"))
    missing = tuple(sorted(s.id for s in shifts if not s.has_computed_pay))
    if missing:
        blockers.append(
            ReadinessBlocker(
                "shifts_missing_pay", f"{len(missing)} shift(s) have no calculated pay"
            )
        )
    if period.status not in verifiable_statuses:
        blockers.append(
            ReadinessBlocker(
                "status_not_ready", f"Status {period.status.value} cannot be verified"
            )
        )

    return ReadinessReport(
        pay_period_id=period.id,
        blockers=tuple(blockers),
        shift_count=len(shifts),
        shifts_missing_pay=missing,
    )
